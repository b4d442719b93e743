from __future__ import annotations

from typing import TYPE_CHECKING

from mincov._meta import logger
from mincov.core.aggregate import aggregate
from mincov.core.config import resolve_jacoco_cli, resolve_java
from mincov.inputs.engine import JacocoCliEngine
from mincov.inputs.records import collect_class_coverage
from mincov.output.json import write_report

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from mincov.core.model import ClassesCoverage
    from mincov.inputs.engine import CoverageEngine


def default_engine(jacoco_cli: Path | None = None, java: str | None = None) -> JacocoCliEngine:
    """JaCoCo CLI engine configured from options, environment and ``pyproject.toml``."""
    return JacocoCliEngine(resolve_jacoco_cli(jacoco_cli), java=resolve_java(java))


def generate_report(
    exec_files: Sequence[Path | str],
    class_files: Sequence[Path | str],
    *,
    engine: CoverageEngine | None = None,
) -> ClassesCoverage:
    """Analyze *class_files* against the merged *exec_files* and build the minimal report."""
    engine = engine or default_engine()
    results = collect_class_coverage(exec_files, class_files, engine)
    return aggregate(results)


def run(
    exec_files: Sequence[Path | str],
    class_files: Sequence[Path | str],
    output: Path | str,
    *,
    engine: CoverageEngine | None = None,
) -> tuple[ClassesCoverage, Path]:
    """Generate the report and write it to *output*.

    Returns the report together with the absolute path it was written to.
    Nothing is written when loading or analysis fails.
    """
    report = generate_report(exec_files, class_files, engine=engine)
    written = write_report(report, output)
    logger.info("report covers %d classes", len(report))
    return report, written


__all__ = ["default_engine", "generate_report", "run"]
