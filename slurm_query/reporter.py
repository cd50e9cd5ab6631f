from __future__ import annotations

from typing import Dict, Optional

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from slurm_query.domain.models import ResultTable


def print_result(
    result: ResultTable,
    timings_ms: Optional[Dict[str, float]] = None,
    console: Optional[Console] = None,
) -> None:
    """
    Render a materialized query result as a rich table.

    Cell text is printed literally; rich markup in the data is not interpreted.
    """
    console = console or Console()

    if result.column_names is None:
        console.print("[yellow]Query produced no results.[/yellow]")
        return

    caption = f"{result.row_count:,} rows"
    if timings_ms:
        caption += " │ " + " ".join(f"{label}={ms:.1f}ms" for label, ms in timings_ms.items())

    table = Table(title="SLURM Query Results", box=box.ROUNDED, caption=caption)
    for name in result.column_names:
        table.add_column(Text(name), style="cyan", overflow="fold")
    for row in result.rows:
        table.add_row(*(Text(cell) for cell in row))

    console.print(table)


__all__ = ["print_result"]
