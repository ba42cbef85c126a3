"""Configuration management for side-code-export."""

import os
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .export.filter import compile_filter
from .export.formats import resolve_format
from .export.models import ConfigurationError, ExportMode


class Settings(BaseSettings):
    """Defaults loaded from environment variables (SIDE_EXPORT_*)."""

    model_config = SettingsConfigDict(
        env_prefix="SIDE_EXPORT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field("INFO", description="Log level when --debug is not given")
    json_logs: bool = Field(False, description="Render logs as JSON")
    default_mode: ExportMode = Field(ExportMode.SUITE, description="Mode when --mode is not given")
    default_filter: str = Field(".*", description="Filter when --filter is not given")


@lru_cache
def get_settings() -> Settings:
    """Get application settings."""
    return Settings()


def resolve_path(path: str, cwd: str | Path | None = None) -> str:
    """Make a command line path absolute against the working directory."""
    if os.path.isabs(path):
        return path
    return str(Path(cwd or os.getcwd()) / path)


@dataclass(frozen=True)
class ExportConfiguration:
    """Everything one export run needs, fixed at startup.

    Attributes:
        format: Absolute format path or importable module name
        project: Absolute path of the project document
        output_dir: Absolute directory receiving generated files
        base_url: Replacement for the recorded URL ("" keeps it)
        filter: Regular expression selecting units by name
        mode: Export one file per test or one per suite
        debug: Verbose logging
    """

    format: str
    project: str
    output_dir: str
    base_url: str = ""
    filter: str = ".*"
    mode: ExportMode = ExportMode.SUITE
    debug: bool = False

    @property
    def pattern(self) -> re.Pattern[str]:
        return compile_filter(self.filter)

    @classmethod
    def build(
        cls,
        format: str,
        project: str,
        output_dir: str,
        base_url: Optional[str] = None,
        filter: Optional[str] = None,
        mode: ExportMode | str | None = None,
        debug: bool = False,
        cwd: str | Path | None = None,
        settings: Settings | None = None,
    ) -> "ExportConfiguration":
        """Build a configuration from command line values.

        Unset values fall back to the environment settings. Relative paths
        resolve against ``cwd`` (the process working directory by default).

        Raises:
            ConfigurationError: If the format cannot be resolved, the mode is
                unknown or the filter is not a valid regular expression
        """
        settings = settings or get_settings()

        filter = filter or settings.default_filter
        try:
            compile_filter(filter)
        except re.error as e:
            raise ConfigurationError(f"Invalid filter '{filter}': {e}") from e

        try:
            mode = ExportMode(mode) if mode else settings.default_mode
        except ValueError as e:
            valid = [m.value for m in ExportMode]
            raise ConfigurationError(f"Invalid mode '{mode}'. Valid options: {valid}") from e

        return cls(
            format=resolve_format(format, cwd),
            project=resolve_path(project, cwd),
            output_dir=resolve_path(output_dir, cwd),
            base_url=base_url or "",
            filter=filter,
            mode=mode,
            debug=debug,
        )
