"""JSON serialization of the minimal report.

Objects are spread over several lines, two spaces per nesting level, with no
space around the ``:`` of an entry. Arrays of line numbers stay on one line::

    {
      "com.example.MyClass":{
        "myMethod(Ljava/lang/String;)":[12,13,20],
        "otherMethod()":[]
      }
    }
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from jsonschema import validate

from mincov._meta import logger
from mincov.core.config import get_schema
from mincov.errors import ReportWriteError

if TYPE_CHECKING:
    from mincov.core.model import ClassesCoverage

INDENT = "  "


def _render(value: object, depth: int) -> str:
    if isinstance(value, Mapping):
        if not value:
            return "{}"
        pad = INDENT * (depth + 1)
        entries = [
            f"{pad}{json.dumps(key, ensure_ascii=False)}:{_render(value[key], depth + 1)}" for key in sorted(value)
        ]
        return "{\n" + ",\n".join(entries) + "\n" + INDENT * depth + "}"
    if isinstance(value, Sequence) and not isinstance(value, str):
        return json.dumps(list(value), separators=(",", ":"))
    return json.dumps(value, ensure_ascii=False)


def format_report(report: ClassesCoverage) -> str:
    """Serialize *report*; keys are sorted so equal reports give identical text."""
    validate(report, get_schema())
    return _render(report, 0)


def write_report(report: ClassesCoverage, path: Path | str) -> Path:
    """Write *report* to *path*, replacing any existing file.

    Missing parent directories are not created. Returns the absolute path of
    the written file.
    """
    text = format_report(report)
    out = Path(path)
    try:
        out.write_text(text, encoding="utf-8")
    except OSError as exc:
        msg = f"failed to write report to {out}: {exc.strerror or exc}"
        raise ReportWriteError(msg) from exc
    logger.debug("wrote %d bytes to %s", len(text.encode("utf-8")), out)
    return out.resolve()


__all__ = ["format_report", "write_report"]
