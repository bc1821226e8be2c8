"""Tests for JSONFormatter and cell classification."""

import json

import pytest

from pg_shell.core.models import ResultTable
from pg_shell.formatters.json import CellKind, JSONFormatter, classify, quote


def _render(table):
    return "".join(JSONFormatter().format(table))


@pytest.mark.unit
class TestClassify:
    @pytest.mark.parametrize("value", [None, "null"])
    def test_null(self, value):
        assert classify(value).kind is CellKind.NULL
        assert classify(value).literal() == "null"

    @pytest.mark.parametrize(
        "value",
        [
            "0",
            "42",
            "-7",
            "3.14",
            "1e10",
            "-2.5E-3",
            "007",
            "+5",
            "1.",
            ".5",
            "NaN",
            "-Infinity",
            "2.5d",
            "1F",
            "0x1p3",
            " 12 ",
        ],
    )
    def test_double_literals_bare(self, value):
        cell = classify(value)
        assert cell.kind is CellKind.NUMBER
        assert cell.literal() == value

    @pytest.mark.parametrize(
        "value", ["", ".", "12abc", "1e", "inf", "nan", "infinity", "1_000", "0x10", "--1"]
    )
    def test_not_doubles(self, value):
        assert classify(value).kind is CellKind.TEXT

    def test_quote_escapes_only_double_quotes(self):
        assert quote('a"b\\c\nd') == '"a\\"b\\c\nd"'


@pytest.mark.unit
class TestJSONFormatter:
    def test_layout(self):
        table = ResultTable.from_rows(["id", "name"], [(1, "alice"), (2, None)])
        assert _render(table) == (
            '[\n  {"id": 1, "name": "alice"},\n  {"id": 2, "name": null}\n]'
        )

    def test_empty_table(self):
        assert _render(ResultTable(headers=["id"])) == "[\n\n]"

    def test_backslash_written_as_is(self):
        table = ResultTable.from_rows(["p"], [("C:\\tmp",)])
        assert _render(table) == '[\n  {"p": "C:\\tmp"}\n]'

    def test_leading_zero_code_written_bare(self):
        table = ResultTable.from_rows(["zip"], [("007",)])
        assert _render(table) == '[\n  {"zip": 007}\n]'

    def test_plain_rows_are_valid_json(self):
        table = ResultTable.from_rows(
            ["n", "s", "flag"], [(1.5, 'say "hi"', True), (-3, "x", False)]
        )
        assert json.loads(_render(table)) == [
            {"n": 1.5, "s": 'say "hi"', "flag": "true"},
            {"n": -3, "s": "x", "flag": "false"},
        ]
