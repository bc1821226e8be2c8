"""Bordered text rendering of a ResultTable using rich."""

from __future__ import annotations

from io import StringIO
from typing import TYPE_CHECKING

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from pg_shell.formatters.base import registry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from pg_shell.core.models import ResultTable

NULL_MARKER = "NULL"


def render(table: ResultTable, max_width: int = 120) -> str:
    """Render with full borders, never wider than ``max_width`` columns.

    Columns size to their widest cell; when the table would not fit, rich
    shrinks the widest columns and folds their cells onto extra lines.
    Cells are wrapped in Text so that square brackets in data are not read
    as console markup.
    """
    grid = Table(box=box.SQUARE, show_lines=True, show_edge=True, pad_edge=True)
    for header in table.headers:
        grid.add_column(Text(header), overflow="fold")

    for row in table.rows:
        grid.add_row(*(Text(NULL_MARKER if v is None else v) for v in row))

    buf = StringIO()
    console = Console(
        file=buf,
        width=max_width,
        force_terminal=False,
        color_system=None,
        highlight=False,
        emoji=False,
    )
    console.print(grid)
    return buf.getvalue().rstrip("\n")


@registry.register("table")
class TableFormatter:
    def __init__(self, width: int = 120) -> None:
        self.width = width

    def format(self, table: ResultTable) -> Iterator[str]:
        yield render(table, self.width) + "\n"
