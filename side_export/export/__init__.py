"""Project Code Export Module.

This module exports recorded browser-automation projects (tests grouped
into suites) to source files through pluggable formats.

Built-in formats:
- python-selenium: pytest + Selenium WebDriver
- typescript-playwright: @playwright/test
- java-selenium: JUnit 5 + Selenium WebDriver

Example:
    from side_export.config import ExportConfiguration
    from side_export.export import ExportEngine

    config = ExportConfiguration.build(
        format="python-selenium",
        project="checkout.side",
        output_dir="generated",
        mode="test",
    )
    summary = await ExportEngine(config).run()
    print(summary.to_dict())
"""

from .engine import ExportEngine, export_project
from .filter import filter_units
from .formats import BUILTIN_FORMATS, Format, load_format, resolve_format
from .models import (
    Command,
    ConfigurationError,
    EmissionError,
    EmittedFile,
    ExportError,
    ExportMode,
    ExportSummary,
    FormatLoadError,
    PluginError,
    PluginLoadError,
    Project,
    ProjectLoadError,
    Suite,
    Test,
    UnitOutcome,
    UnitStatus,
)
from .plugins import PluginRegistry, get_registry, load_plugins
from .project import load_project
from .writer import emit_suite, emit_test, write_file

__all__ = [
    "ExportEngine",
    "export_project",
    "filter_units",
    "Format",
    "BUILTIN_FORMATS",
    "load_format",
    "resolve_format",
    "Command",
    "Test",
    "Suite",
    "Project",
    "ExportMode",
    "EmittedFile",
    "UnitOutcome",
    "UnitStatus",
    "ExportSummary",
    "ExportError",
    "ConfigurationError",
    "FormatLoadError",
    "ProjectLoadError",
    "PluginError",
    "PluginLoadError",
    "EmissionError",
    "PluginRegistry",
    "get_registry",
    "load_plugins",
    "load_project",
    "emit_test",
    "emit_suite",
    "write_file",
]
