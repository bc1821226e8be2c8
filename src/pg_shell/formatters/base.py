"""Output format lookup for ResultTable.

Each format module registers its class under a short name with
``@registry.register("name")``; commands look formats up by the name
the operator typed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, TypeVar, runtime_checkable

from pg_shell.core.exceptions import UnsupportedFormat

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from typing import TextIO

    from pg_shell.core.models import ResultTable


@runtime_checkable
class Formatter(Protocol):
    """Turns a ResultTable into text chunks.

    Chunks carry their own line breaks; concatenated they are the exact
    file or screen content.
    """

    def format(self, table: ResultTable) -> Iterator[str]: ...


F = TypeVar("F", bound=type)


class FormatterRegistry:
    def __init__(self) -> None:
        self._by_name: dict[str, type[Formatter]] = {}

    def register(self, name: str) -> Callable[[F], F]:
        def decorator(cls: F) -> F:
            self._by_name[name.lower()] = cls
            return cls

        return decorator

    def get(self, name: str, **options: object) -> Formatter:
        """Instantiate the format called ``name``, ignoring case and padding.

        Raises UnsupportedFormat for names nobody registered.
        """
        cls = self._by_name.get(name.strip().lower())
        if cls is None:
            known = ", ".join(self.available)
            raise UnsupportedFormat(f"Unknown format {name!r}. Available: {known}")
        return cls(**options)

    @property
    def available(self) -> list[str]:
        return sorted(self._by_name)


registry = FormatterRegistry()


def export(formatter: Formatter, table: ResultTable, writer: TextIO) -> None:
    for chunk in formatter.format(table):
        writer.write(chunk)
