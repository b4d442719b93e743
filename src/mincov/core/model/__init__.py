from mincov.core.model.coverage import (
    UNKNOWN_LINE,
    ClassCoverage,
    LineStatus,
    MethodCoverage,
    counter_status,
)
from mincov.core.model.report import ClassesCoverage, LinesCoverage, MethodsCoverage

__all__ = [
    "UNKNOWN_LINE",
    "ClassCoverage",
    "ClassesCoverage",
    "LineStatus",
    "LinesCoverage",
    "MethodCoverage",
    "MethodsCoverage",
    "counter_status",
]
