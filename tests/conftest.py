from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any, BinaryIO

import pytest
from click.testing import CliRunner

from mincov.core.model import ClassCoverage, LineStatus, MethodCoverage
from mincov.inputs.execfile import ExecutionData, ExecutionDataStore, read_exec_file, write_exec_file


@pytest.fixture
def cli_runner() -> CliRunner:
    """Return a Click CLI runner for invoking the command-line interface."""
    return CliRunner()


@pytest.fixture
def exec_file(tmp_path: Path) -> Callable[..., Path]:
    """Write an exec file holding ``(class_id, name, probes)`` entries."""

    def write(entries: Iterable[tuple[int, str, Sequence[bool]]], *, filename: str = "jacoco.exec") -> Path:
        path = tmp_path / filename
        with path.open("wb") as f:
            write_exec_file(f, [ExecutionData(cid, name, list(probes)) for cid, name, probes in entries])
        return path

    return write


def _jacoco_xml_content(packages: Sequence[Mapping[str, Any]]) -> str:
    parts = ['<?xml version="1.0" encoding="UTF-8" standalone="yes"?>', '<report name="demo">']
    for pkg in packages:
        parts.append(f'<package name="{pkg["name"]}">')
        for cls in pkg.get("classes", []):
            source = f' sourcefilename="{cls["source"]}"' if cls.get("source") else ""
            parts.append(f'<class name="{cls["name"]}"{source}>')
            for m in cls.get("methods", []):
                line = f' line="{m["line"]}"' if m.get("line") is not None else ""
                name = m["name"].replace("<", "&lt;").replace(">", "&gt;")
                counters = f'<counter type="INSTRUCTION" missed="{m.get("missed", 0)}" covered="{m["covered"]}"/>'
                if m.get("lines") is not None:
                    counters += f'<counter type="LINE" missed="0" covered="{m["lines"]}"/>'
                parts.append(f'<method name="{name}" desc="{m["desc"]}"{line}>{counters}</method>')
            parts.append(f'<counter type="INSTRUCTION" missed="0" covered="{cls["covered"]}"/>')
            parts.append("</class>")
        for src in pkg.get("sourcefiles", []):
            parts.append(f'<sourcefile name="{src["name"]}">')
            parts.extend(
                f'<line nr="{nr}" mi="{mi}" ci="{ci}" mb="{mb}" cb="{cb}"/>' for nr, mi, ci, mb, cb in src["lines"]
            )
            parts.append("</sourcefile>")
        parts.append("</package>")
    parts.append("</report>")
    return "".join(parts)


@pytest.fixture
def jacoco_xml(tmp_path: Path) -> Callable[..., Path]:
    """Write a JaCoCo XML report.

    Packages are ``{"name", "classes", "sourcefiles"}``. Classes are
    ``{"name", "source", "covered", "methods": [{"name", "desc", "line", "covered", "lines"}]}``
    and source files ``{"name", "lines": [(nr, mi, ci, mb, cb), ...]}``.
    """

    def write(packages: Sequence[Mapping[str, Any]], *, filename: str = "jacoco.xml") -> Path:
        path = tmp_path / filename
        path.write_text(_jacoco_xml_content(packages), encoding="utf-8")
        return path

    return write


class ProbeEngine:
    """In-memory engine where probe *i* of a class marks one line of its ``run()V`` method.

    ``probe_lines`` maps a VM class name to the line of each probe. Class paths
    are only recorded; every configured class is reported on each analysis.
    """

    def __init__(self, probe_lines: Mapping[str, Sequence[int]]) -> None:
        self.probe_lines = probe_lines
        self.store = ExecutionDataStore()
        self.loaded: list[str] = []
        self.analyzed: list[Path] = []
        self.loaded_before_analysis: list[int] = []

    def load_trace(self, stream: BinaryIO, *, source: str = "<stream>") -> None:
        read_exec_file(stream, self.store, source=source)
        self.loaded.append(source)

    def analyze(self, path: Path) -> list[ClassCoverage]:
        self.analyzed.append(path)
        self.loaded_before_analysis.append(len(self.loaded))
        by_name = {data.name: data for data in self.store}
        out: list[ClassCoverage] = []
        for name, lines in self.probe_lines.items():
            data = by_name.get(name)
            probes = data.probes if data is not None else [False] * len(lines)
            statuses = dict.fromkeys(lines, LineStatus.NOT_COVERED)
            for hit, ln in zip(probes, lines, strict=True):
                if hit:
                    statuses[ln] = LineStatus.FULLY_COVERED
            covered = sum(probes)
            method = MethodCoverage("run", "()V", covered, min(lines), max(lines), statuses)
            out.append(ClassCoverage(name, covered, (method,)))
        return out


@pytest.fixture
def probe_engine() -> type[ProbeEngine]:
    return ProbeEngine
