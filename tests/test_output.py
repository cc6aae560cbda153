"""Tests for output formatting (cli/output.py)."""

from __future__ import annotations

import io
import json

import pytest

from octl.cli.output import (
    FORMAT_JSON,
    FORMAT_PLAIN,
    FORMAT_TABLE,
    Formatter,
    Table,
    echo,
    id_cell,
    normalize_format,
    print_records,
    print_table,
)
from octl.core.models import Folder


def _table() -> Table:
    table = Table("ID", "NAME")
    table.add_row("1", "Inbox")
    table.add_row(2, "Archive")
    return table


class TestNormalizeFormat:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("json", FORMAT_JSON),
            (" PLAIN ", FORMAT_PLAIN),
            ("table", FORMAT_TABLE),
            ("yaml", FORMAT_TABLE),
            ("", FORMAT_TABLE),
            (None, FORMAT_TABLE),
        ],
    )
    def test_values(self, raw: str | None, expected: str) -> None:
        assert normalize_format(raw) == expected


class TestTable:
    def test_cells_become_strings(self) -> None:
        assert _table().to_plain() == [["1", "Inbox"], ["2", "Archive"]]
        assert len(_table()) == 2

    def test_to_json_maps_headers(self) -> None:
        assert _table().to_json() == [
            {"ID": "1", "NAME": "Inbox"},
            {"ID": "2", "NAME": "Archive"},
        ]

    def test_render_writes_headers_and_cells(self) -> None:
        buf = io.StringIO()
        _table().render(buf)
        text = buf.getvalue()
        assert "ID" in text
        assert "NAME" in text
        assert "Archive" in text

    @pytest.mark.parametrize("columns", [None, "40"])
    def test_wide_row_stays_on_one_line_when_piped(
        self, monkeypatch: pytest.MonkeyPatch, columns: str | None,
    ) -> None:
        if columns is None:
            monkeypatch.delenv("COLUMNS", raising=False)
        else:
            monkeypatch.setenv("COLUMNS", columns)
        sender = "Alice Wonderland <alice.wonde..."
        subject = "Re: Quarterly planning for the platform team off..."
        table = Table("ID", "FROM", "SUBJECT", "DATE", "READ")
        table.add_row("AAMkADEx...", sender, subject, "Jan 15", "✓")

        buf = io.StringIO()
        table.render(buf)
        lines = [line for line in buf.getvalue().splitlines() if line.strip()]

        assert len(lines) == 3  # header, rule, one row
        row = lines[-1]
        assert sender in row
        assert subject in row
        assert row.rstrip().endswith("✓")

    def test_render_does_not_interpret_markup(self) -> None:
        table = Table("SUBJECT")
        table.add_row("[bold]literal[/bold]")
        buf = io.StringIO()
        table.render(buf)
        assert "[bold]literal[/bold]" in buf.getvalue()


class TestFormatter:
    def test_json_of_value_objects(self) -> None:
        buf = io.StringIO()
        Formatter(FORMAT_JSON, buf).print([Folder(id="f1", display_name="Inbox")])
        data = json.loads(buf.getvalue())
        assert data == [
            {"id": "f1", "display_name": "Inbox", "total_item_count": 0, "unread_item_count": 0},
        ]

    def test_json_keeps_unicode(self) -> None:
        buf = io.StringIO()
        Formatter(FORMAT_JSON, buf).print({"subject": "Grüße"})
        assert "Grüße" in buf.getvalue()

    def test_plain_table_rows_tab_separated(self) -> None:
        buf = io.StringIO()
        Formatter(FORMAT_PLAIN, buf).print(_table())
        assert buf.getvalue() == "1\tInbox\n2\tArchive\n"

    def test_plain_single_row(self) -> None:
        buf = io.StringIO()
        Formatter(FORMAT_PLAIN, buf).print(["a", "b"])
        assert buf.getvalue() == "a\tb\n"

    def test_plain_empty_list_prints_nothing(self) -> None:
        buf = io.StringIO()
        Formatter(FORMAT_PLAIN, buf).print([])
        assert buf.getvalue() == ""

    def test_plain_falls_back_to_json(self) -> None:
        buf = io.StringIO()
        Formatter(FORMAT_PLAIN, buf).print({"k": 1})
        assert json.loads(buf.getvalue()) == {"k": 1}

    def test_table_format_of_string(self) -> None:
        buf = io.StringIO()
        Formatter(FORMAT_TABLE, buf).print("hello")
        assert buf.getvalue() == "hello\n"


class TestHelpers:
    def test_print_table_json(self) -> None:
        buf = io.StringIO()
        print_table(FORMAT_JSON, _table(), buf)
        assert json.loads(buf.getvalue())[0] == {"ID": "1", "NAME": "Inbox"}

    def test_print_records_json_uses_records(self) -> None:
        buf = io.StringIO()
        records = [Folder(id="f1", display_name="Inbox", unread_item_count=3)]
        print_records(FORMAT_JSON, records, _table(), buf)
        assert json.loads(buf.getvalue())[0]["unread_item_count"] == 3

    def test_print_records_plain_uses_table(self) -> None:
        buf = io.StringIO()
        print_records(FORMAT_PLAIN, [], _table(), buf)
        assert buf.getvalue().startswith("1\tInbox")

    def test_echo(self) -> None:
        buf = io.StringIO()
        echo("line", buf)
        echo(stream=buf)
        assert buf.getvalue() == "line\n\n"

    def test_id_cell_shortens_only_in_tables(self) -> None:
        long_id = "AAMkADExMzJmYWE3"
        assert id_cell(long_id, FORMAT_TABLE) == "AAMkADEx..."
        assert id_cell(long_id, FORMAT_PLAIN) == long_id
        assert id_cell(long_id, FORMAT_JSON) == long_id
