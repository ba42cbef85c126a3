"""Project document loading."""

import json
from pathlib import Path

import structlog

from .models import Project, ProjectLoadError

logger = structlog.get_logger()


def parse_project(data: object) -> Project:
    """Build a Project from an already decoded document.

    Raises:
        ProjectLoadError: If the document does not have the project shape
    """
    if not isinstance(data, dict):
        raise ProjectLoadError("Project document must be a JSON object")

    for key in ("tests", "suites", "plugins"):
        if key in data and not isinstance(data[key], list):
            raise ProjectLoadError(f"Project '{key}' must be a list")

    try:
        return Project.from_dict(data)
    except KeyError as e:
        raise ProjectLoadError(f"Project entry is missing required key {e}") from e
    except (TypeError, ValueError, AttributeError) as e:
        raise ProjectLoadError(f"Malformed project document: {e}") from e


def load_project(path: str | Path) -> Project:
    """Read and parse a project file.

    Args:
        path: Location of the project document

    Returns:
        The parsed Project

    Raises:
        ProjectLoadError: If the file is missing, unreadable or malformed
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ProjectLoadError(f"Project file not found: {path}") from e
    except UnicodeDecodeError as e:
        raise ProjectLoadError(f"Project file {path} is not valid UTF-8: {e}") from e
    except OSError as e:
        raise ProjectLoadError(f"Could not read project file {path}: {e}") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ProjectLoadError(f"Project file {path} is not valid JSON: {e}") from e

    project = parse_project(data)
    logger.debug(
        "Project loaded",
        path=str(path),
        name=project.name,
        tests=len(project.tests),
        suites=len(project.suites),
        plugins=len(project.plugins),
    )
    return project
