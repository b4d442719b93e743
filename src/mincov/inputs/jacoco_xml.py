"""Read JaCoCo XML reports into the engine output model.

The XML report records the first line of every method, how many source lines
it spans (its LINE counter) and the status of every source line, but not which
lines belong to which method. Lines are attributed per source file:

* lambdas (``lambda$...``) and methods of nested classes (``Outer$Inner``) take
  as many recorded lines as their LINE counter says, starting at their first
  line, or only their first line when the counter is missing;
* every other method takes the recorded lines from its first line up to the
  next such method start, skipping lines taken by nested methods and stopping
  once its LINE counter is filled;
* a method whose LINE counter is still not filled (a constructor running
  field initializers written further down) then takes the remaining lines no
  method has taken.

Lines between a method's first and last attributed line that it does not own
are ``EMPTY`` for that method.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from defusedxml import DefusedXmlException, ElementTree

from mincov.core.model import UNKNOWN_LINE, ClassCoverage, LineStatus, MethodCoverage, counter_status
from mincov.errors import MalformedInputError

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping, Sequence
    from pathlib import Path


class XmlElement(Protocol):
    """The part of ``ElementTree.Element`` the report reader walks."""

    tag: str | None

    def findall(self, path: str) -> list[XmlElement]: ...

    def get(self, key: str, default: str | None = None) -> str | None: ...


def _int_attr(elem: XmlElement, key: str, default: int = 0) -> int:
    raw = elem.get(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        msg = f"invalid {key}={raw!r} on <{elem.tag}>"
        raise MalformedInputError(msg) from exc


def _counter(elem: XmlElement, kind: str) -> XmlElement | None:
    for counter in elem.findall("./counter"):
        if counter.get("type") == kind:
            return counter
    return None


def covered_instructions(elem: XmlElement) -> int:
    """Covered count of the INSTRUCTION counter directly below *elem*."""
    counter = _counter(elem, "INSTRUCTION")
    return _int_attr(counter, "covered") if counter is not None else 0


def line_count(method: XmlElement) -> int | None:
    """Number of source lines a method spans, from its LINE counter."""
    counter = _counter(method, "LINE")
    if counter is None:
        return None
    total = _int_attr(counter, "missed") + _int_attr(counter, "covered")
    return total or None


def line_status(line_elem: XmlElement) -> LineStatus:
    """Status of a ``<line>`` record: instruction status OR branch status."""
    instructions = counter_status(_int_attr(line_elem, "mi"), _int_attr(line_elem, "ci"))
    branches = counter_status(_int_attr(line_elem, "mb"), _int_attr(line_elem, "cb"))
    return LineStatus(instructions | branches)


def _source_lines(package: XmlElement) -> dict[str, dict[int, LineStatus]]:
    out: dict[str, dict[int, LineStatus]] = {}
    for source in package.findall("./sourcefile"):
        name = source.get("name")
        if not name:
            continue
        out[name] = {_int_attr(line, "nr"): line_status(line) for line in source.findall("./line")}
    return out


def is_nested(class_name: str, method_name: str) -> bool:
    """Whether a method sits inside another method's source range."""
    return method_name.startswith("lambda$") or "$" in class_name.rsplit("/", 1)[-1]


@dataclass(slots=True)
class _Span:
    first: int
    budget: int | None
    nested: bool
    lines: list[int] = field(default_factory=list)


def _take(
    recorded: Sequence[int],
    first: int,
    *,
    budget: int | None,
    stop: int | None = None,
    skip: set[int] | frozenset[int] = frozenset(),
) -> list[int]:
    taken: list[int] = []
    for nr in recorded[bisect.bisect_left(recorded, first) :]:
        if stop is not None and nr >= stop:
            break
        if nr in skip and nr != first:
            continue
        taken.append(nr)
        if budget is not None and len(taken) >= budget:
            break
    return taken


def _attribute_lines(spans: Sequence[_Span], recorded: Sequence[int]) -> None:
    nested_lines: set[int] = set()
    for span in spans:
        if span.nested:
            span.lines = _take(recorded, span.first, budget=span.budget or 1)
            nested_lines.update(span.lines)

    starts = sorted({span.first for span in spans if not span.nested})
    outer = [span for span in spans if not span.nested]
    for span in outer:
        idx = bisect.bisect_right(starts, span.first)
        stop = starts[idx] if idx < len(starts) else None
        span.lines = _take(recorded, span.first, budget=span.budget, stop=stop, skip=nested_lines)

    taken = nested_lines.union(*(span.lines for span in outer))
    for span in outer:
        if span.budget is None or len(span.lines) >= span.budget:
            continue
        after = max(span.lines, default=span.first)
        rest = [nr for nr in recorded if nr > after and nr not in taken]
        span.lines.extend(rest[: span.budget - len(span.lines)])


def _package_spans(package: XmlElement, recorded: Mapping[str, Sequence[int]]) -> dict[int, _Span]:
    """Attribute recorded lines to the methods of *package*, keyed by method element id."""
    by_source: dict[str, list[_Span]] = {}
    spans: dict[int, _Span] = {}
    for cls in package.findall("./class"):
        source = cls.get("sourcefilename")
        if not source or source not in recorded:
            continue
        class_name = cls.get("name") or ""
        for method in cls.findall("./method"):
            first = _int_attr(method, "line", UNKNOWN_LINE)
            if first == UNKNOWN_LINE:
                continue
            span = _Span(first, line_count(method), is_nested(class_name, method.get("name") or ""))
            spans[id(method)] = span
            by_source.setdefault(source, []).append(span)
    for source, source_spans in by_source.items():
        _attribute_lines(source_spans, recorded[source])
    return spans


def _method_coverage(
    method: XmlElement,
    *,
    span: _Span | None,
    lines: Mapping[int, LineStatus] | None,
) -> MethodCoverage:
    name = method.get("name") or ""
    descriptor = method.get("desc") or ""
    covered = covered_instructions(method)
    first = _int_attr(method, "line", UNKNOWN_LINE)
    if first == UNKNOWN_LINE:
        return MethodCoverage(name, descriptor, covered)

    if lines is None or span is None:
        # no <sourcefile> element: the range is known, the line details are not
        return MethodCoverage(name, descriptor, covered, first, first)

    owned = set(span.lines)
    last = max(owned, default=first)
    statuses = {nr: lines[nr] if nr in owned else LineStatus.EMPTY for nr in range(first, last + 1)}
    return MethodCoverage(name, descriptor, covered, first, last, statuses)


def iter_class_coverage(root: XmlElement) -> Iterator[ClassCoverage]:
    """Yield one :class:`ClassCoverage` per ``<class>`` of a JaCoCo XML report."""
    for package in root.findall(".//package"):
        sources = _source_lines(package)
        recorded = {name: sorted(lines) for name, lines in sources.items()}
        spans = _package_spans(package, recorded)
        for cls in package.findall("./class"):
            name = cls.get("name")
            if not name:
                continue
            source = cls.get("sourcefilename") or ""
            methods = tuple(
                _method_coverage(m, span=spans.get(id(m)), lines=sources.get(source))
                for m in cls.findall("./method")
            )
            yield ClassCoverage(name, covered_instructions(cls), methods)


def read_root(path: Path) -> XmlElement:
    """Parse a JaCoCo XML report and return its ``<report>`` root element."""
    try:
        root = ElementTree.parse(path).getroot()
    except (ElementTree.ParseError, DefusedXmlException) as exc:
        msg = f"failed to parse JaCoCo XML report {path}: {exc}"
        raise MalformedInputError(msg) from exc
    tag = (root.tag or "").split("}")[-1]
    if tag != "report":
        msg = f"unexpected root tag {root.tag!r} in {path}"
        raise MalformedInputError(msg)
    return root


def read_report(path: Path) -> list[ClassCoverage]:
    return list(iter_class_coverage(read_root(path)))


__all__ = [
    "XmlElement",
    "covered_instructions",
    "is_nested",
    "iter_class_coverage",
    "line_count",
    "line_status",
    "read_report",
    "read_root",
]
