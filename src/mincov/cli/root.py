from __future__ import annotations

import typer
from typer.main import get_command

from mincov.cli import report


def create_app() -> typer.Typer:
    app = typer.Typer(
        help="Minimal JSON coverage reports from JaCoCo execution data.",
        add_completion=False,
        pretty_exceptions_enable=False,
    )
    report.register(app)
    return app


def main() -> None:
    app = create_app()
    get_command(app)(prog_name="mincov")


# Click-compatible object for tooling that imports it
cli = get_command(create_app())

__all__ = ["cli", "create_app", "main"]
