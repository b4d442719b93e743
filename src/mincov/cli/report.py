from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from jsonschema import ValidationError

from mincov import __version__
from mincov.cli.exit_codes import (
    EXIT_DATAERR,
    EXIT_GENERIC,
    EXIT_IOERR,
    EXIT_NOINPUT,
    EXIT_OK,
    EXIT_UNAVAILABLE,
)
from mincov.core.aggregate import summarize
from mincov.core.config import LOG_FORMAT
from mincov.core.pipeline import default_engine, run
from mincov.errors import (
    CoveragePathNotFoundError,
    EngineUnavailableError,
    MalformedInputError,
    ReportWriteError,
)
from mincov.output.summary import render_summary

if TYPE_CHECKING:
    from collections.abc import Sequence

CLASSFILES_FLAG = "--classfiles"

CONTEXT_SETTINGS = {
    "help_option_names": ["-h", "--help"],
    "allow_extra_args": True,
    "ignore_unknown_options": True,
}


def _configure_runtime(*, quiet: bool, verbose: bool) -> None:
    """Configure logging based on *quiet*/*verbose*."""
    level = logging.ERROR if quiet else (logging.DEBUG if verbose else logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)


def _is_tty(stream: object) -> bool:
    try:
        return bool(getattr(stream, "isatty", lambda: False)())
    except OSError:
        return False


def split_arguments(args: Sequence[str]) -> tuple[list[str], list[str]]:
    """Split the positional arguments into exec files and class paths.

    Everything before ``--classfiles`` is an exec file, everything after it a
    class file or directory.
    """
    exec_files: list[str] = []
    class_files: list[str] = []
    collecting_exec = True
    for arg in args:
        if arg == CLASSFILES_FLAG:
            collecting_exec = False
        elif collecting_exec:
            exec_files.append(arg)
        else:
            class_files.append(arg)
    return exec_files, class_files


def _version_callback(value: bool) -> None:  # noqa: FBT001
    if value:
        typer.echo(f"mincov {__version__}")
        raise typer.Exit(code=EXIT_OK)


def report_cmd(
    ctx: typer.Context,
    json_file: Annotated[
        Path,
        typer.Option("--json", metavar="FILE", help="Write the JSON report to FILE (required)."),
    ],
    jacoco_cli: Annotated[
        Path | None,
        typer.Option(
            "--jacoco-cli",
            metavar="JAR",
            help=(
                "Path to jacococli.jar (default: $MINCOV_JACOCO_CLI, then tool.mincov.jacoco_cli in pyproject.toml)."
            ),
        ),
    ] = None,
    java: Annotated[
        str | None,
        typer.Option("--java", help="Java executable used to run the JaCoCo CLI (default: $MINCOV_JAVA or java)."),
    ] = None,
    summary: Annotated[
        bool,
        typer.Option("--summary", help="Print covered methods and lines per class to stderr."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("-v", "--verbose", help="Emit diagnostic logging."),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("-q", "--quiet", help="Suppress INFO logs, emit only errors."),
    ] = False,
    version: Annotated[  # noqa: ARG001
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version and exit."),
    ] = False,
) -> None:
    """Generate a minimal JSON coverage report from JaCoCo exec and class files.

    Usage: mincov EXECFILES... --classfiles PATH... --json FILE
    """
    exec_files, class_files = split_arguments(ctx.args)
    if not exec_files:
        msg = "At least one *.exec file is required"
        raise typer.BadParameter(msg, ctx=ctx)
    if not class_files:
        msg = 'Option "--classfiles" is required and at least one path must be given'
        raise typer.BadParameter(msg, ctx=ctx)

    _configure_runtime(quiet=quiet, verbose=verbose)

    try:
        report, written = run(
            exec_files,
            class_files,
            json_file,
            engine=default_engine(jacoco_cli, java),
        )
    except CoveragePathNotFoundError as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=EXIT_NOINPUT) from exc
    except MalformedInputError as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=EXIT_DATAERR) from exc
    except EngineUnavailableError as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=EXIT_UNAVAILABLE) from exc
    except ReportWriteError as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=EXIT_IOERR) from exc
    except ValidationError as exc:
        typer.echo(f"ERROR: report failed schema validation: {exc.message}", err=True)
        raise typer.Exit(code=EXIT_GENERIC) from exc

    if summary:
        typer.echo(render_summary(summarize(report), color=_is_tty(sys.stderr)), err=True)

    typer.echo(f"Report generated: {written}")
    raise typer.Exit(code=EXIT_OK)


def register(app: typer.Typer) -> None:
    app.command("report", context_settings=CONTEXT_SETTINGS)(report_cmd)


__all__ = ["register", "split_arguments"]
