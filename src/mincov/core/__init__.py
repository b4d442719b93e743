from mincov.core.aggregate import ClassSummary, aggregate, method_id, summarize, trim_descriptor
from mincov.core.config import LOG_FORMAT, get_schema
from mincov.core.model import (
    UNKNOWN_LINE,
    ClassCoverage,
    ClassesCoverage,
    LineStatus,
    LinesCoverage,
    MethodCoverage,
    MethodsCoverage,
)

__all__ = [
    "LOG_FORMAT",
    "UNKNOWN_LINE",
    "ClassCoverage",
    "ClassSummary",
    "ClassesCoverage",
    "LineStatus",
    "LinesCoverage",
    "MethodCoverage",
    "MethodsCoverage",
    "aggregate",
    "get_schema",
    "method_id",
    "summarize",
    "trim_descriptor",
]
