"""Coverage engines.

An engine accumulates execution data from any number of trace streams and
analyzes class files or directories against everything loaded so far.
"""

from __future__ import annotations

import shlex
import subprocess
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO, Protocol

from mincov._meta import logger
from mincov.core.config import DEFAULT_JAVA
from mincov.errors import EngineUnavailableError, MalformedInputError
from mincov.inputs.execfile import ExecutionDataStore, read_exec_file, write_store
from mincov.inputs.jacoco_xml import read_report

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from mincov.core.model import ClassCoverage

    Runner = Callable[[Sequence[str]], subprocess.CompletedProcess[str]]


class CoverageEngine(Protocol):
    def load_trace(self, stream: BinaryIO, *, source: str = "<stream>") -> None: ...

    def analyze(self, path: Path) -> list[ClassCoverage]: ...


def _run(cmd: Sequence[str]) -> subprocess.CompletedProcess[str]:
    return subprocess.run(cmd, capture_output=True, text=True, check=False)  # noqa: S603


class JacocoCliEngine:
    """Engine backed by the JaCoCo command line interface.

    Execution data is read and merged in-process; each analysis dumps the
    merged data to a temporary exec file and lets ``jacococli.jar report``
    turn it into an XML report for the given class path.
    """

    def __init__(
        self,
        jacoco_cli: Path | None,
        *,
        java: str = DEFAULT_JAVA,
        runner: Runner | None = None,
    ) -> None:
        self.jacoco_cli = jacoco_cli
        self.java = java
        self.store = ExecutionDataStore()
        self._runner = runner or _run

    def load_trace(self, stream: BinaryIO, *, source: str = "<stream>") -> None:
        read_exec_file(stream, self.store, source=source)

    def command(self, exec_file: Path, class_path: Path, xml_file: Path) -> list[str]:
        return [
            self.java,
            "-jar",
            str(self.jacoco_cli),
            "report",
            str(exec_file),
            "--classfiles",
            str(class_path),
            "--xml",
            str(xml_file),
            "--quiet",
        ]

    def analyze(self, path: Path) -> list[ClassCoverage]:
        if self.jacoco_cli is None:
            msg = "JaCoCo CLI jar not configured (use --jacoco-cli or MINCOV_JACOCO_CLI)"
            raise EngineUnavailableError(msg)
        if not self.jacoco_cli.is_file():
            msg = f"JaCoCo CLI jar not found: {self.jacoco_cli}"
            raise EngineUnavailableError(msg)

        with tempfile.TemporaryDirectory(prefix="mincov-") as tmp:
            exec_file = Path(tmp) / "merged.exec"
            xml_file = Path(tmp) / "report.xml"
            with exec_file.open("wb") as f:
                write_store(f, self.store)

            cmd = self.command(exec_file, path, xml_file)
            logger.debug("running %s", shlex.join(cmd))
            try:
                proc = self._runner(cmd)
            except FileNotFoundError as exc:
                msg = f"java executable not found: {self.java}"
                raise EngineUnavailableError(msg) from exc

            if proc.returncode != 0:
                detail = (proc.stderr or proc.stdout or "").strip()
                msg = f"JaCoCo CLI failed to analyze {path} (exit {proc.returncode}): {detail}"
                raise MalformedInputError(msg)
            return read_report(xml_file)


__all__ = ["CoverageEngine", "JacocoCliEngine"]
