from __future__ import annotations

import sys
from io import StringIO
from typing import TYPE_CHECKING

from rich import box
from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from collections.abc import Sequence

    from mincov.core.aggregate import ClassSummary


def render_summary(rows: Sequence[ClassSummary], *, color: bool = False) -> str:
    """Render covered methods and lines per class as a Rich table captured to text."""
    table = Table(title="Covered classes", box=box.SIMPLE_HEAVY, header_style="bold")
    table.add_column("Class", overflow="fold")
    table.add_column("Methods", justify="right")
    table.add_column("Lines", justify="right")
    table.add_column("No line\ninfo", justify="right")

    for r in rows:
        table.add_row(r.name, str(r.methods), str(r.lines), str(r.methods_without_lines))

    table.add_section()
    table.add_row(
        f"[bold]{len(rows)} classes[/bold]",
        f"[bold]{sum(r.methods for r in rows)}[/bold]",
        f"[bold]{sum(r.lines for r in rows)}[/bold]",
        f"[bold]{sum(r.methods_without_lines for r in rows)}[/bold]",
    )

    buf = StringIO()
    console = Console(
        file=buf,
        force_terminal=color,
        width=sys.maxsize if not color else None,
        color_system="standard" if color else None,
        no_color=not color,
    )
    console.print(table)
    return buf.getvalue().rstrip()


__all__ = ["render_summary"]
