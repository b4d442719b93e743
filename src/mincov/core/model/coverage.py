from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

# -----------------------------------------------------------------------------
# Engine output model (what the aggregator consumes)
# -----------------------------------------------------------------------------

# Line number reported for methods compiled without line number debug information.
UNKNOWN_LINE = -1


class LineStatus(IntEnum):
    """Per-line coverage status, using the JaCoCo ``ICounter`` status values.

    The values are bit flags: combining the instruction and branch status of a
    line with ``|`` yields the status of the line.
    """

    EMPTY = 0
    NOT_COVERED = 1
    FULLY_COVERED = 2
    PARTLY_COVERED = 3

    @property
    def is_covered(self) -> bool:
        return self in {LineStatus.FULLY_COVERED, LineStatus.PARTLY_COVERED}


def counter_status(missed: int, covered: int) -> LineStatus:
    """Status of a missed/covered counter pair."""
    if missed < 0 or covered < 0:
        msg = "counter values must be >= 0"
        raise ValueError(msg)
    if covered == 0:
        return LineStatus.NOT_COVERED if missed else LineStatus.EMPTY
    return LineStatus.PARTLY_COVERED if missed else LineStatus.FULLY_COVERED


@dataclass(frozen=True, slots=True)
class MethodCoverage:
    """Coverage of a single method as produced by the coverage engine.

    ``lines`` holds the status of the source lines the engine knows about.
    A line inside ``[first_line, last_line]`` missing from it has no
    information at all, which is not the same as a line without code.
    """

    name: str
    descriptor: str
    instructions_covered: int
    first_line: int = UNKNOWN_LINE
    last_line: int = UNKNOWN_LINE
    lines: Mapping[int, LineStatus] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate counters and freeze the line mapping."""
        if self.instructions_covered < 0:
            msg = "MethodCoverage.instructions_covered must be >= 0"
            raise ValueError(msg)
        object.__setattr__(self, "lines", MappingProxyType(dict(self.lines)))

    @property
    def has_line_info(self) -> bool:
        return UNKNOWN_LINE not in {self.first_line, self.last_line}

    def line_at(self, nr: int) -> LineStatus | None:
        """Status of line *nr*, or ``None`` when the engine has no information for it."""
        return self.lines.get(nr)


@dataclass(frozen=True, slots=True)
class ClassCoverage:
    """Coverage of a single analyzed class.

    ``qualified_name`` uses the VM internal form, e.g. ``com/example/MyClass``.
    """

    qualified_name: str
    instructions_covered: int
    methods: tuple[MethodCoverage, ...] = ()

    def __post_init__(self) -> None:
        """Validate that the instruction counter is non-negative."""
        if self.instructions_covered < 0:
            msg = "ClassCoverage.instructions_covered must be >= 0"
            raise ValueError(msg)

    @property
    def dotted_name(self) -> str:
        return self.qualified_name.replace("/", ".")


__all__ = [
    "UNKNOWN_LINE",
    "ClassCoverage",
    "LineStatus",
    "MethodCoverage",
    "counter_status",
]
