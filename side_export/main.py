"""Main entry point for side-code-export."""

import argparse
import asyncio
import sys
from typing import Optional, Sequence

import structlog

from .config import ExportConfiguration, get_settings
from .export.engine import ExportEngine
from .export.models import ConfigurationError, ExportError, ExportMode, ExportSummary
from .utils.logging import configure_logging

logger = structlog.get_logger()

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_PARTIAL = 2


def build_parser() -> argparse.ArgumentParser:
    """Command line parser."""
    parser = argparse.ArgumentParser(
        prog="side-code-export",
        description="Export recorded browser tests and suites to source code",
    )
    parser.add_argument(
        "format",
        nargs="?",
        help="Format to export with: a file path, a module name or a built-in alias",
    )
    parser.add_argument("project", nargs="?", help="Path to the project document")
    parser.add_argument("output_dir", nargs="?", help="Directory receiving generated files")
    parser.add_argument(
        "--base-url",
        default="",
        help="Replace the recorded URL with this one in generated code",
    )
    parser.add_argument(
        "--filter", "-f",
        default=None,
        help="Regular expression selecting tests or suites by name (default: .*)",
    )
    parser.add_argument(
        "--mode", "-m",
        choices=[m.value for m in ExportMode],
        default=None,
        help="Export one file per suite or one per test (default: suite)",
    )
    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Verbose logging",
    )
    return parser


async def run_export(config: ExportConfiguration) -> ExportSummary:
    """Run one export with the given configuration."""
    return await ExportEngine(config).run()


def print_summary(summary: ExportSummary) -> None:
    """Print a short report of the run."""
    counts = summary.to_dict()
    print("\n" + "=" * 50)
    print("EXPORT SUMMARY")
    print("=" * 50)
    print(f"Mode: {counts['mode']}")
    print(f"Matched: {counts['matched']}")
    print(f"Written: {counts['written']}")
    print(f"Failed: {counts['failed']}")
    for outcome in summary.failed:
        print(f"  - {outcome.name}: {outcome.error}")
    print("=" * 50 + "\n")


def cli(argv: Optional[Sequence[str]] = None) -> int:
    """Command-line interface.

    Returns:
        0 when every matched unit was written, 1 on a configuration or
        other fatal error, 2 when at least one unit failed
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if not (args.format and args.project and args.output_dir):
        parser.print_help()
        return EXIT_FATAL

    settings = get_settings()
    configure_logging(
        level="DEBUG" if args.debug else settings.log_level,
        json_format=settings.json_logs,
    )

    try:
        config = ExportConfiguration.build(
            format=args.format,
            project=args.project,
            output_dir=args.output_dir,
            base_url=args.base_url,
            filter=args.filter,
            mode=args.mode,
            debug=args.debug,
        )
    except ConfigurationError as e:
        logger.error("Invalid configuration", error=str(e))
        return EXIT_FATAL

    try:
        summary = asyncio.run(run_export(config))
    except ExportError as e:
        logger.error("Export failed", error=str(e), error_type=type(e).__name__)
        return EXIT_FATAL

    print_summary(summary)
    return summary.exit_code


def main() -> None:
    sys.exit(cli())


if __name__ == "__main__":
    main()
