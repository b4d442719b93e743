"""Shapes of the minimal report.

Plain containers: ordering and uniqueness of the line lists, and the
inclusion rules for classes and methods, are guaranteed by
:func:`mincov.core.aggregate.aggregate`, not by these types.
"""

from __future__ import annotations

from typing import TypeAlias

# Covered source lines of one method, ascending. Empty when the method was
# covered but line granularity is unavailable.
LinesCoverage: TypeAlias = list[int]

# Method identifier (name + parameter descriptor) -> covered lines.
MethodsCoverage: TypeAlias = dict[str, LinesCoverage]

# Fully-qualified, dot-separated class name -> covered methods.
ClassesCoverage: TypeAlias = dict[str, MethodsCoverage]

__all__ = ["ClassesCoverage", "LinesCoverage", "MethodsCoverage"]
