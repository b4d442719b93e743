from mincov.inputs.engine import CoverageEngine, JacocoCliEngine
from mincov.inputs.records import collect_class_coverage

__all__ = ["CoverageEngine", "JacocoCliEngine", "collect_class_coverage"]
