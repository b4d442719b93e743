"""Reduce engine coverage results to the minimal report.

Only classes and methods with at least one covered instruction survive.
Each surviving method maps to the ascending list of its covered or partly
covered source lines, or to an empty list when line information is missing
or incomplete.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from mincov._meta import logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from mincov.core.model import (
        ClassCoverage,
        ClassesCoverage,
        LinesCoverage,
        MethodCoverage,
        MethodsCoverage,
    )


def trim_descriptor(descriptor: str) -> str:
    """Drop the return type from a method descriptor.

    ``(Ljava/lang/String;I)Z`` -> ``(Ljava/lang/String;I)``. A descriptor
    without a closing parenthesis is returned unchanged.
    """
    end = descriptor.find(")")
    if end < 0:
        return descriptor
    return descriptor[: end + 1]


def method_id(method: MethodCoverage) -> str:
    return method.name + trim_descriptor(method.descriptor)


def aggregate_method_coverage(method: MethodCoverage) -> LinesCoverage:
    """Covered source lines of *method*.

    Returns an empty list when the method has no line debug information, or
    when any line of its range cannot be resolved. In both cases the whole
    method counts as covered, without line granularity.
    """
    if not method.has_line_info:
        return []

    covered: LinesCoverage = []
    for nr in range(method.first_line, method.last_line + 1):
        status = method.line_at(nr)
        if status is None:
            logger.debug("no line information for %s line %d", method.name, nr)
            return []
        if status.is_covered:
            covered.append(nr)
    return covered


def aggregate_class_coverage(cls: ClassCoverage) -> MethodsCoverage:
    methods: MethodsCoverage = {}
    for method in cls.methods:
        if method.instructions_covered == 0:
            continue
        methods[method_id(method)] = aggregate_method_coverage(method)
    return methods


def aggregate(results: Iterable[ClassCoverage]) -> ClassesCoverage:
    """Build the class -> method -> covered lines report.

    A class with covered instructions is always emitted, even when none of its
    methods reports covered instructions on its own (its method map is then
    empty).
    """
    report: ClassesCoverage = {}
    skipped = 0
    for cls in results:
        if cls.instructions_covered == 0:
            skipped += 1
            continue
        report[cls.dotted_name] = aggregate_class_coverage(cls)

    logger.debug("aggregated %d covered classes (%d without coverage)", len(report), skipped)
    return report


@dataclass(frozen=True, slots=True)
class ClassSummary:
    """Counts shown in the CLI summary table."""

    name: str
    methods: int
    lines: int
    methods_without_lines: int


def summarize(report: ClassesCoverage) -> tuple[ClassSummary, ...]:
    """Per-class counts of covered methods and lines, sorted by class name."""
    return tuple(
        ClassSummary(
            name=name,
            methods=len(methods),
            lines=sum(len(lines) for lines in methods.values()),
            methods_without_lines=sum(1 for lines in methods.values() if not lines),
        )
        for name, methods in sorted(report.items())
    )


__all__ = [
    "ClassSummary",
    "aggregate",
    "aggregate_class_coverage",
    "aggregate_method_coverage",
    "method_id",
    "summarize",
    "trim_descriptor",
]
