"""Name filtering for exported units."""

import re
from typing import Iterable, Protocol, TypeVar


class Named(Protocol):
    name: str


UnitT = TypeVar("UnitT", bound=Named)

MATCH_ALL = ".*"


def compile_filter(pattern: str | None) -> re.Pattern[str]:
    """Compile a unit filter, defaulting to match-all.

    Raises:
        re.error: If the pattern is not a valid regular expression
    """
    return re.compile(pattern if pattern else MATCH_ALL)


def filter_units(units: Iterable[UnitT], pattern: str | re.Pattern[str]) -> list[UnitT]:
    """Select the units whose name matches the pattern.

    Matching uses search semantics, so anchors must be written into the
    pattern. Input order is preserved and each unit appears at most once.
    """
    regex = pattern if isinstance(pattern, re.Pattern) else compile_filter(pattern)
    selected: list[UnitT] = []
    seen: set[int] = set()
    for unit in units:
        if id(unit) in seen:
            continue
        seen.add(id(unit))
        if regex.search(unit.name):
            selected.append(unit)
    return selected
