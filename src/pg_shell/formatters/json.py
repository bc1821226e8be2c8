"""JSON exporter for ResultTable.

Output layout is fixed: ``[``, then one ``  {...}`` line per row joined
by ``,\\n``, then ``\\n]``. Cell types are sniffed from the text, not from
column metadata: anything that parses as a double is written bare, so
the file is not guaranteed to be strict JSON (``NaN``, ``007``, raw
backslashes and control characters pass through untouched).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from pg_shell.formatters.base import registry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from pg_shell.core.models import ResultTable

# Whatever a JVM double parse accepts: optional control/space padding,
# NaN and Infinity, decimal and hex float forms, and a d/f suffix.
_DOUBLE_RE = re.compile(
    r"[\x00-\x20]*[+-]?"
    r"(?:NaN|Infinity|"
    r"(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
    r"|0[xX](?:[0-9a-fA-F]+\.?|[0-9a-fA-F]*\.[0-9a-fA-F]+)[pP][+-]?[0-9]+)"
    r"[fFdD]?)"
    r"[\x00-\x20]*"
)


class CellKind(StrEnum):
    NULL = "null"
    NUMBER = "number"
    TEXT = "text"


@dataclass(frozen=True)
class JsonCell:
    kind: CellKind
    text: str = ""

    def literal(self) -> str:
        if self.kind is CellKind.NULL:
            return "null"
        if self.kind is CellKind.NUMBER:
            return self.text
        return quote(self.text)


def quote(text: str) -> str:
    """Wrap in double quotes, escaping only embedded double quotes."""
    escaped = text.replace('"', '\\"')
    return f'"{escaped}"'


def classify(value: str | None) -> JsonCell:
    """Tag a cell as null, number or text.

    The literal text ``null`` is treated like a real null.
    """
    if value is None or value == "null":
        return JsonCell(CellKind.NULL)
    if _DOUBLE_RE.fullmatch(value):
        return JsonCell(CellKind.NUMBER, value)
    return JsonCell(CellKind.TEXT, value)


@registry.register("json")
class JSONFormatter:
    def format(self, table: ResultTable) -> Iterator[str]:
        yield "[\n"
        for index, row in enumerate(table.rows):
            if index:
                yield ",\n"
            fields = ", ".join(
                f'"{name}": {classify(value).literal()}'
                for name, value in zip(table.headers, row, strict=True)
            )
            yield "  {" + fields + "}"
        yield "\n]"
