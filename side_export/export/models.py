"""Data models for code export."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ExportMode(str, Enum):
    """Which collection drives an export run."""

    TEST = "test"
    SUITE = "suite"


class UnitStatus(str, Enum):
    """Result of exporting a single unit."""

    WRITTEN = "written"
    FAILED = "failed"


# =============================================================================
# Errors
# =============================================================================


class ExportError(Exception):
    """Base class for export errors."""


class ConfigurationError(ExportError):
    """Invalid command line input or unresolvable format."""


class FormatLoadError(ExportError):
    """A format module could not be imported or lacks the emit functions."""


class ProjectLoadError(ExportError):
    """The project document is missing or malformed."""


class PluginError(ExportError):
    """Misuse of the plugin registry."""


class PluginLoadError(PluginError):
    """A plugin declared by the project could not be loaded."""


class EmissionError(ExportError):
    """A format returned something that cannot be written."""


# =============================================================================
# Project model
# =============================================================================


def _require_name(data: dict, kind: str) -> str:
    """Read the mandatory, non-empty string ``name`` of a test or suite."""
    name = data["name"]
    if not isinstance(name, str) or not name.strip():
        raise ValueError(f"{kind} name must be a non-empty string, got {name!r}")
    return name


@dataclass(frozen=True)
class Command:
    """A single recorded command.

    Attributes:
        command: Command name (e.g. "click", "type", "open")
        target: Locator or URL the command acts on
        value: Input value for the command
        comment: Free text attached in the recorder
        targets: Alternative locators as (locator, strategy) pairs
    """

    command: str
    target: str = ""
    value: str = ""
    id: str = ""
    comment: str = ""
    targets: tuple[tuple[str, str], ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> "Command":
        """Create Command from a recorded command object."""
        targets = tuple(
            (str(t[0]), str(t[1]) if len(t) > 1 else "")
            for t in data.get("targets") or []
            if isinstance(t, (list, tuple)) and t
        )
        return cls(
            command=data.get("command") or "",
            target=data.get("target") or "",
            value=data.get("value") or "",
            id=data.get("id") or "",
            comment=data.get("comment") or "",
            targets=targets,
        )


@dataclass(frozen=True)
class Test:
    """A named, ordered sequence of commands."""

    __test__ = False

    name: str
    commands: tuple[Command, ...] = ()
    id: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Test":
        """Create Test from a project test object."""
        return cls(
            id=data.get("id") or "",
            name=_require_name(data, "Test"),
            commands=tuple(Command.from_dict(c) for c in data.get("commands") or []),
        )


@dataclass(frozen=True)
class Suite:
    """A named group of test references.

    Attributes:
        name: Suite name
        tests: Test ids (or names) in execution order
        parallel: Whether the suite's tests must run in parallel
        persist_session: Whether the browser session is kept between tests
        timeout: Suite timeout in seconds
    """

    name: str
    tests: tuple[str, ...] = ()
    parallel: bool = False
    persist_session: bool = False
    timeout: int = 300
    id: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Suite":
        """Create Suite from a project suite object."""
        return cls(
            id=data.get("id") or "",
            name=_require_name(data, "Suite"),
            tests=tuple(str(t) for t in data.get("tests") or []),
            parallel=bool(data.get("parallel", False)),
            persist_session=bool(data.get("persistSession", False)),
            timeout=int(data.get("timeout") or 300),
        )


@dataclass(frozen=True)
class Project:
    """A recorded project: tests, suites, plugins and the capture URL."""

    name: str = ""
    url: str = ""
    tests: tuple[Test, ...] = ()
    suites: tuple[Suite, ...] = ()
    plugins: tuple[str, ...] = ()
    urls: tuple[str, ...] = ()
    id: str = ""
    version: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Project":
        """Create Project from a parsed project document."""
        return cls(
            id=data.get("id") or "",
            version=str(data.get("version") or ""),
            name=data.get("name") or "",
            url=data.get("url") or "",
            urls=tuple(data.get("urls") or []),
            plugins=tuple(data.get("plugins") or []),
            tests=tuple(Test.from_dict(t) for t in data.get("tests") or []),
            suites=tuple(Suite.from_dict(s) for s in data.get("suites") or []),
        )

    def get_test(self, name: str) -> Test:
        """Look up a test by name."""
        for test in self.tests:
            if test.name == name:
                return test
        raise KeyError(f"Test '{name}' not found in project")

    def get_suite(self, name: str) -> Suite:
        """Look up a suite by name."""
        for suite in self.suites:
            if suite.name == name:
                return suite
        raise KeyError(f"Suite '{name}' not found in project")

    def tests_for_suite(self, suite: Suite) -> list[Test]:
        """Resolve a suite's references to tests.

        References are matched by test id first, then by name. A test
        referenced more than once is returned once, at its first position.

        Raises:
            KeyError: If a reference matches no test
        """
        by_id = {t.id: t for t in self.tests if t.id}
        resolved: list[Test] = []
        seen: set[int] = set()
        for ref in suite.tests:
            test = by_id.get(ref)
            if test is None:
                test = next((t for t in self.tests if t.name == ref), None)
            if test is None:
                raise KeyError(f"Suite '{suite.name}' references unknown test '{ref}'")
            if id(test) in seen:
                continue
            seen.add(id(test))
            resolved.append(test)
        return resolved


# =============================================================================
# Export results
# =============================================================================


@dataclass(frozen=True)
class EmittedFile:
    """Code generated for one unit.

    Attributes:
        body: Generated source code
        filename: File name chosen by the format, relative to the output dir
    """

    body: str
    filename: str


@dataclass
class UnitOutcome:
    """What happened to one exported unit."""

    name: str
    status: UnitStatus
    path: str | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == UnitStatus.WRITTEN


@dataclass
class ExportSummary:
    """Result of a whole export run.

    Attributes:
        mode: Which collection was exported
        outcomes: One outcome per matched unit, in the order emission was issued
        skipped: Units whose names did not match the filter
    """

    mode: ExportMode
    outcomes: list[UnitOutcome] = field(default_factory=list)
    skipped: int = 0

    @property
    def succeeded(self) -> list[UnitOutcome]:
        return [o for o in self.outcomes if o.succeeded]

    @property
    def failed(self) -> list[UnitOutcome]:
        return [o for o in self.outcomes if not o.succeeded]

    @property
    def exit_code(self) -> int:
        """Process exit code for this run: 0 when every unit was written."""
        return 2 if self.failed else 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "mode": self.mode.value,
            "matched": len(self.outcomes),
            "written": len(self.succeeded),
            "failed": len(self.failed),
            "skipped": self.skipped,
        }
