"""Centralised exception hierarchy for mincov."""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from pathlib import Path

PathKind = Literal["exec", "classfiles"]


class MincovError(Exception):
    """Base class for all custom mincov exceptions."""


class CoveragePathNotFoundError(MincovError):
    """An execution data file or class file path does not exist."""

    def __init__(self, path: Path, kind: PathKind) -> None:
        label = "exec file" if kind == "exec" else "class file path"
        super().__init__(f"{label} not found: {path}")
        self.path = path
        self.kind = kind


class MalformedInputError(MincovError):
    """Execution data or class files could not be parsed by the coverage engine."""


class EngineUnavailableError(MincovError):
    """The coverage engine could not be launched (missing JVM or JaCoCo CLI)."""


class ReportWriteError(MincovError):
    """The JSON report could not be written to its destination."""


__all__ = [
    "CoveragePathNotFoundError",
    "EngineUnavailableError",
    "MalformedInputError",
    "MincovError",
    "PathKind",
    "ReportWriteError",
]
