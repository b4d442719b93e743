from __future__ import annotations

from typing import TYPE_CHECKING

from mincov._meta import logger
from mincov.errors import MalformedInputError
from mincov.inputs.discover import resolve_input_paths

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from mincov.core.model import ClassCoverage
    from mincov.inputs.engine import CoverageEngine


def collect_class_coverage(
    exec_files: Sequence[Path | str],
    class_files: Sequence[Path | str],
    engine: CoverageEngine,
) -> list[ClassCoverage]:
    """Load every exec file into *engine*, then analyze the class paths in order.

    All paths are checked before anything is read. A class found under more
    than one class path is reported once; the copies must carry the same
    coverage, otherwise the class paths disagree about the class and
    :class:`MalformedInputError` is raised.
    """
    exec_paths = resolve_input_paths(exec_files, "exec")
    class_paths = resolve_input_paths(class_files, "classfiles")

    for path in exec_paths:
        with path.open("rb") as stream:
            engine.load_trace(stream, source=str(path))
        logger.debug("loaded execution data from %s", path)

    out: dict[str, ClassCoverage] = {}
    for path in class_paths:
        for cls in engine.analyze(path):
            seen = out.get(cls.qualified_name)
            if seen is not None:
                if seen != cls:
                    msg = f"different class with the same name {cls.qualified_name} in {path}"
                    raise MalformedInputError(msg)
                logger.debug("ignoring duplicate class %s from %s", cls.qualified_name, path)
                continue
            out[cls.qualified_name] = cls

    logger.info("analyzed %d classes from %d class path(s)", len(out), len(class_paths))
    return list(out.values())


__all__ = ["collect_class_coverage"]
