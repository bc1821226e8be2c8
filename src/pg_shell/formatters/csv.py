"""CSV exporter for ResultTable.

The header line is written as plain comma-joined names. Every data field
is quoted unconditionally, with embedded quotes doubled, and nulls become
empty strings.
"""

from __future__ import annotations

import csv
from io import StringIO
from typing import TYPE_CHECKING

from pg_shell.formatters.base import registry

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from pg_shell.core.models import ResultTable


def _data_line(values: Sequence[str | None]) -> str:
    buf = StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow("" if v is None else v for v in values)
    return buf.getvalue()


@registry.register("csv")
class CSVFormatter:
    def __init__(self, no_header: bool = False) -> None:
        self.no_header = no_header

    def format(self, table: ResultTable) -> Iterator[str]:
        if not self.no_header:
            yield ",".join(table.headers) + "\n"

        for row in table.rows:
            yield _data_line(row)
