"""Export Engine - drives a whole export run."""

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING, Optional

import structlog

from ..utils.logging import LogContext, log_operation
from .filter import filter_units
from .formats import Format, load_format
from .models import EmissionError, ExportMode, ExportSummary, Project, UnitOutcome, UnitStatus
from .plugins import PluginRegistry, correct_plugin_paths, get_registry, load_plugins
from .project import load_project
from .writer import EMITTERS, output_path, write_file

if TYPE_CHECKING:
    from ..config import ExportConfiguration

logger = structlog.get_logger()


class ExportEngine:
    """Main engine for exporting a project to code.

    This class orchestrates the export process:
    1. Loads the format and the project document
    2. Loads the project's plugins into the registry
    3. Filters tests or suites by name
    4. Emits and writes every matched unit concurrently, with the plugin
       registry frozen until emission ends

    Example:
        config = ExportConfiguration.build(
            format="python-selenium",
            project="checkout.side",
            output_dir="generated",
        )
        summary = asyncio.run(ExportEngine(config).run())
        print(summary.to_dict())
    """

    def __init__(
        self,
        config: "ExportConfiguration",
        output_format: Optional[Format] = None,
        registry: Optional[PluginRegistry] = None,
    ):
        """Initialize the export engine.

        Args:
            config: Configuration for this run
            output_format: Format to use instead of loading ``config.format``
            registry: Plugin registry (the process-wide one by default)
        """
        self.config = config
        self.output_format = output_format
        self.registry = registry or get_registry()
        self.log = logger.bind(component="export_engine")
        self._claimed: set[Path] = set()

    async def run(self) -> ExportSummary:
        """Run the export.

        Returns:
            ExportSummary with one outcome per matched unit

        Raises:
            FormatLoadError: If the format cannot be loaded
            ProjectLoadError: If the project document is missing or malformed
            PluginLoadError: If a declared plugin cannot be loaded
        """
        config = self.config

        if self.output_format is None:
            with log_operation("load_format", self.log, format=config.format):
                self.output_format = load_format(config.format)

        with log_operation("load_project", self.log, path=config.project):
            project = load_project(config.project)

        plugins = correct_plugin_paths(config.project, project.plugins)
        await load_plugins(plugins, self.registry)

        units = project.suites if config.mode == ExportMode.SUITE else project.tests
        selected = filter_units(units, config.pattern)
        summary = ExportSummary(mode=config.mode, skipped=len(units) - len(selected))

        if not selected:
            self.log.warning(
                "No units matched filter",
                mode=config.mode.value,
                filter=config.filter,
                candidates=len(units),
            )
            return summary

        self.log.info(
            "Exporting units",
            mode=config.mode.value,
            matched=len(selected),
            output_dir=config.output_dir,
        )

        self._claimed = set()
        self.registry.freeze()
        try:
            async with asyncio.TaskGroup() as group:
                tasks = [
                    group.create_task(self._export_unit(project, unit.name))
                    for unit in selected
                ]
        finally:
            self.registry.thaw()

        summary.outcomes = [task.result() for task in tasks]
        self.log.info("Export finished", **summary.to_dict())
        return summary

    def _claim(self, path: Path) -> Path:
        """Reserve an output path for one unit of this run.

        Raises:
            EmissionError: If another unit already writes to the same path
        """
        if path in self._claimed:
            raise EmissionError(f"Another unit already writes to {path}")
        self._claimed.add(path)
        return path

    async def _export_unit(self, project: Project, name: str) -> UnitOutcome:
        """Emit and write one unit, capturing any failure."""
        emitter = EMITTERS[self.config.mode]

        with LogContext(unit=name):
            try:
                emitted = await emitter(self.output_format, project, name)
                path = self._claim(output_path(self.config.output_dir, emitted.filename))
                path = await write_file(
                    path,
                    emitted.body,
                    project_url=project.url,
                    base_url=self.config.base_url,
                )
            except Exception as e:
                self.log.error("Unit export failed", error=str(e), error_type=type(e).__name__)
                return UnitOutcome(name=name, status=UnitStatus.FAILED, error=str(e))

            self.log.info("Unit exported", path=str(path))
            return UnitOutcome(name=name, status=UnitStatus.WRITTEN, path=str(path))


async def export_project(config: "ExportConfiguration", **kwargs) -> ExportSummary:
    """Quick export function.

    Args:
        config: Configuration for this run
        **kwargs: Additional ExportEngine options

    Returns:
        ExportSummary
    """
    return await ExportEngine(config, **kwargs).run()
