"""Unit emission and file writing."""

import asyncio
from collections.abc import Mapping
from pathlib import Path, PurePath

import structlog

from .formats import Format
from .models import EmissionError, EmittedFile, ExportMode, Project

logger = structlog.get_logger()


def _normalize(result: object, unit_name: str) -> EmittedFile:
    """Accept an EmittedFile or a {body, filename} mapping from a format."""
    if isinstance(result, EmittedFile):
        emitted = result
    elif isinstance(result, Mapping) and "body" in result and "filename" in result:
        emitted = EmittedFile(body=result["body"], filename=result["filename"])
    else:
        raise EmissionError(
            f"Format returned {type(result).__name__} for '{unit_name}', "
            "expected body and filename"
        )

    if not isinstance(emitted.body, str):
        raise EmissionError(f"Format returned a non-string body for '{unit_name}'")
    if not isinstance(emitted.filename, str) or not emitted.filename.strip():
        raise EmissionError(f"Format returned no filename for '{unit_name}'")
    return emitted


async def emit_test(output_format: Format, project: Project, test_name: str) -> EmittedFile:
    """Generate code for a single test."""
    result = await output_format.emit_test(project, test_name)
    return _normalize(result, test_name)


async def emit_suite(output_format: Format, project: Project, suite_name: str) -> EmittedFile:
    """Generate code for a whole suite."""
    result = await output_format.emit_suite(project, suite_name)
    return _normalize(result, suite_name)


EMITTERS = {
    ExportMode.TEST: emit_test,
    ExportMode.SUITE: emit_suite,
}


def output_path(output_dir: str | Path, filename: str) -> Path:
    """Join a format's filename onto the output directory.

    Raises:
        EmissionError: If the filename is absolute or escapes the directory
    """
    relative = PurePath(filename)
    if relative.is_absolute() or ".." in relative.parts:
        raise EmissionError(f"Filename '{filename}' must stay inside the output directory")
    return Path(output_dir) / relative


def apply_base_url(body: str, project_url: str | None, base_url: str | None) -> str:
    """Replace every occurrence of the recorded URL with the override.

    Returns the body unchanged when either URL is empty. Only the literal
    URL is matched: a URL containing quotes or backslashes appears escaped
    in string literals and those occurrences are left as recorded.
    """
    if not base_url or not project_url:
        return body
    return body.replace(project_url, base_url)


def _write(path: Path, body: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body, encoding="utf-8")


async def write_file(
    path: str | Path,
    body: str,
    project_url: str | None = None,
    base_url: str | None = None,
) -> Path:
    """Write emitted code, creating missing directories.

    Args:
        path: Absolute file location
        body: Generated code
        project_url: URL recorded in the project
        base_url: Override for the recorded URL (empty means no override)

    Returns:
        The written path
    """
    path = Path(path)
    await asyncio.to_thread(_write, path, apply_base_url(body, project_url, base_url))
    logger.debug("File written", path=str(path), bytes=len(body))
    return path
