"""Format modules: resolution and loading.

A format turns a unit of the project into source code. Any object with
the two coroutines below satisfies the contract; format modules expose it
as their ``default`` attribute (or define the functions at module level).
"""

import importlib
import importlib.util
import os
import sys
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import structlog

from .models import ConfigurationError, EmittedFile, FormatLoadError, Project

logger = structlog.get_logger()


@runtime_checkable
class Format(Protocol):
    """Capability implemented by every format."""

    async def emit_test(self, project: Project, test_name: str) -> EmittedFile:
        ...

    async def emit_suite(self, project: Project, suite_name: str) -> EmittedFile:
        ...


# Built-in format aliases mapped to their modules
BUILTIN_FORMATS: dict[str, str] = {
    "python-selenium": "side_export.export.templates.python_selenium",
    "typescript-playwright": "side_export.export.templates.typescript_playwright",
    "java-selenium": "side_export.export.templates.java_selenium",
}


def resolve_format(identifier: str, cwd: str | Path | None = None) -> str:
    """Resolve a format argument to an absolute path or module name.

    Resolution order: absolute path, existing path relative to ``cwd``,
    built-in alias, importable module name.

    Raises:
        ConfigurationError: If nothing matches
    """
    if not identifier:
        raise ConfigurationError("No format given")

    if os.path.isabs(identifier):
        return identifier

    relative = Path(cwd or os.getcwd()) / identifier
    if relative.exists():
        return str(relative)

    if identifier in BUILTIN_FORMATS:
        return BUILTIN_FORMATS[identifier]

    try:
        spec = importlib.util.find_spec(identifier)
    except (ImportError, ValueError):
        spec = None
    if spec is None:
        raise ConfigurationError(
            f"Cannot resolve format '{identifier}'. "
            f"Use a file path, a module name or one of: {sorted(BUILTIN_FORMATS)}"
        )
    return identifier


def _import_format_module(resolved: str):
    if not os.path.isabs(resolved):
        try:
            return importlib.import_module(resolved)
        except ImportError as e:
            raise FormatLoadError(f"Could not import format module '{resolved}': {e}") from e

    path = Path(resolved)
    if path.is_dir():
        path = path / "__init__.py"
    if not path.is_file():
        raise FormatLoadError(f"Format file not found: {resolved}")

    module_name = f"_side_export_format_{path.stem}_{abs(hash(str(path)))}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise FormatLoadError(f"Cannot load format from {resolved}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        sys.modules.pop(module_name, None)
        raise FormatLoadError(f"Format {resolved} failed to import: {e}") from e
    return module


def load_format(resolved: str) -> Format:
    """Import a resolved format and return its capability object.

    Raises:
        FormatLoadError: If the module cannot be imported or does not
            provide emit_test and emit_suite
    """
    module = _import_format_module(resolved)
    candidate: Any = getattr(module, "default", module)

    if not isinstance(candidate, Format):
        raise FormatLoadError(
            f"Format {resolved} must provide emit_test and emit_suite "
            "(as a 'default' object or module-level functions)"
        )

    logger.debug("Format loaded", format=resolved, implementation=type(candidate).__name__)
    return candidate
