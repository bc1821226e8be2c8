"""Renderers and exporters for ResultTable."""

from pg_shell.formatters.base import Formatter, FormatterRegistry, export, registry
from pg_shell.formatters.csv import CSVFormatter
from pg_shell.formatters.json import JSONFormatter
from pg_shell.formatters.table import TableFormatter, render

__all__ = [
    "CSVFormatter",
    "Formatter",
    "FormatterRegistry",
    "JSONFormatter",
    "TableFormatter",
    "export",
    "registry",
    "render",
]
