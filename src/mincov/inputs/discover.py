from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from mincov.errors import CoveragePathNotFoundError, PathKind

if TYPE_CHECKING:
    from collections.abc import Sequence


def resolve_input_paths(paths: Sequence[Path | str], kind: PathKind) -> tuple[Path, ...]:
    """Return *paths* as :class:`Path` objects, failing on the first one that does not exist."""
    resolved: list[Path] = []
    for raw in paths:
        path = Path(raw)
        if not path.exists():
            raise CoveragePathNotFoundError(path, kind)
        resolved.append(path)
    return tuple(resolved)


__all__ = ["resolve_input_paths"]
