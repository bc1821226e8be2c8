"""Data models for pg-shell.

Pydantic models for connection parameters, column metadata and the
generic result table that every db-* command renders or exports.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

if TYPE_CHECKING:
    from collections.abc import Sequence


class ConnectionParams(BaseModel):
    """Parameters of the single active connection."""

    model_config = ConfigDict(frozen=True)

    host: str
    port: int
    database: str
    username: str
    password: str = Field(repr=False)


class ColumnSpec(BaseModel):
    """One column of a described table, as reported by the catalog."""

    model_config = ConfigDict(frozen=True)

    name: str
    type_name: str
    size: int
    nullable: bool
    is_primary_key: bool


class IndexColumn(BaseModel):
    """One (index, column) pair of a table's indexes."""

    model_config = ConfigDict(frozen=True)

    index_name: str
    column_name: str
    unique: bool
    index_type: str
    sort_order: str | None = None


def stringify(value: Any) -> str | None:
    """Convert a driver value to its display string. None stays None."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, memoryview):
        value = value.tobytes()
    if isinstance(value, bytes):
        return "\\x" + value.hex()
    return str(value)


class ResultTable(BaseModel):
    """Column-labeled, row-oriented table of stringified cells.

    None is the null marker. Renderers and exporters decide how to show
    it (``NULL`` on screen, empty in CSV, ``null`` in JSON).
    """

    model_config = ConfigDict(frozen=True)

    headers: list[str]
    rows: list[list[str | None]] = []

    @model_validator(mode="after")
    def check_row_widths(self) -> ResultTable:
        width = len(self.headers)
        for index, row in enumerate(self.rows):
            if len(row) != width:
                msg = (
                    f"Row {index} has {len(row)} cells, expected {width} "
                    f"({', '.join(self.headers)})"
                )
                raise ValueError(msg)
        return self

    @classmethod
    def from_rows(
        cls, headers: Sequence[str], rows: Sequence[Sequence[Any]]
    ) -> ResultTable:
        return cls(
            headers=list(headers),
            rows=[[stringify(v) for v in row] for row in rows],
        )

    @classmethod
    def from_cursor(cls, cursor: Any, max_rows: int | None = None) -> ResultTable:
        """Build a table from a DB-API cursor positioned after execute().

        Column names are read once from ``cursor.description``. Rows are
        fetched until the cursor is exhausted or ``max_rows`` rows were read.
        """
        if not cursor.description:
            return cls(headers=[])

        headers = [desc[0] for desc in cursor.description]
        if max_rows is None:
            raw = cursor.fetchall()
        elif max_rows > 0:
            raw = cursor.fetchmany(max_rows)
        else:
            raw = []
        return cls.from_rows(headers, raw)

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def column(self, name: str) -> list[str | None]:
        index = self.headers.index(name)
        return [row[index] for row in self.rows]

    def records(self) -> list[dict[str, str | None]]:
        return [dict(zip(self.headers, row, strict=True)) for row in self.rows]
