"""Output formatting shared by every command: table, JSON or plain text.

* ``table`` — a Rich table without borders; the default, and the
  fallback for unknown format names.
* ``json`` — indented JSON of value objects, dicts or lists.
* ``plain`` — tab-separated rows, one per line, for piping.

Everything here writes to a caller-supplied stream (stdout by default)
and never emits Rich markup into it.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Sequence
from typing import Any, TextIO

from octl.core.text import short_id
from octl.exceptions import missing_dependency

FORMAT_TABLE = "table"
FORMAT_JSON = "json"
FORMAT_PLAIN = "plain"
FORMATS: tuple[str, ...] = (FORMAT_TABLE, FORMAT_JSON, FORMAT_PLAIN)


def normalize_format(value: str | None) -> str:
    """Return a known format name; anything unrecognised becomes ``table``."""
    candidate = (value or "").strip().lower()
    return candidate if candidate in FORMATS else FORMAT_TABLE


def to_jsonable(data: Any) -> Any:
    """Convert value objects (anything with ``to_dict``) recursively."""
    if isinstance(data, Table):
        return data.to_json()
    if hasattr(data, "to_dict"):
        return data.to_dict()
    if isinstance(data, dict):
        return {key: to_jsonable(value) for key, value in data.items()}
    if isinstance(data, (list, tuple)):
        return [to_jsonable(item) for item in data]
    return data


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------

class Table:
    """Headers plus string rows, renderable in any of the output formats."""

    def __init__(self, *headers: str) -> None:
        self.headers: list[str] = list(headers)
        self.rows: list[list[str]] = []

    def add_row(self, *cells: object) -> None:
        self.rows.append([str(cell) for cell in cells])

    def __len__(self) -> int:
        return len(self.rows)

    def to_plain(self) -> list[list[str]]:
        """Rows only, without headers."""
        return [list(row) for row in self.rows]

    def to_json(self) -> list[dict[str, str]]:
        """One ``header → cell`` mapping per row; extra cells are dropped."""
        return [
            {header: cell for header, cell in zip(self.headers, row)}
            for row in self.rows
        ]

    def render(self, stream: TextIO | None = None) -> None:
        try:
            from rich import box
            from rich.cells import cell_len
            from rich.console import Console
            from rich.table import Table as RichTable
        except ModuleNotFoundError as exc:
            raise missing_dependency("rich") from exc

        table = RichTable(
            box=box.SIMPLE_HEAD,
            show_edge=False,
            pad_edge=False,
            header_style="bold",
        )
        for header in self.headers:
            table.add_column(header, no_wrap=True)
        for row in self.rows:
            table.add_row(*row)

        target = stream or sys.stdout
        # Pipes and files get one line per row, however wide.
        width = None if _is_terminal(target) else self._natural_width(cell_len)
        console = Console(
            file=target,
            width=width,
            markup=False,
            highlight=False,
            emoji=False,
        )
        console.print(table)

    def _natural_width(self, measure: Any) -> int:
        widths = [measure(header) for header in self.headers]
        for row in self.rows:
            for index, cell in enumerate(row[: len(widths)]):
                widths[index] = max(widths[index], measure(cell))
        # Padding and a separator between adjacent columns, plus one spare cell.
        return sum(widths) + 3 * max(len(widths) - 1, 0) + 1


# ---------------------------------------------------------------------------
# Formatter
# ---------------------------------------------------------------------------

class Formatter:
    """Writes data to *stream* in the configured format."""

    def __init__(self, fmt: str | None = FORMAT_TABLE, stream: TextIO | None = None) -> None:
        self.format = normalize_format(fmt)
        self.stream: TextIO = stream or sys.stdout

    def print(self, data: Any) -> None:
        if self.format == FORMAT_JSON:
            self._print_json(data)
        elif self.format == FORMAT_PLAIN:
            self._print_plain(data)
        else:
            self._print_table(data)

    def _print_json(self, data: Any) -> None:
        json.dump(to_jsonable(data), self.stream, indent=2, ensure_ascii=False)
        self.stream.write("\n")

    def _print_plain(self, data: Any) -> None:
        if isinstance(data, Table):
            data = data.to_plain()
        if isinstance(data, str):
            self.stream.write(data + "\n")
        elif isinstance(data, (list, tuple)) and not data:
            return
        elif _is_rows(data):
            for row in data:
                self.stream.write("\t".join(row) + "\n")
        elif _is_row(data):
            self.stream.write("\t".join(data) + "\n")
        else:
            self._print_json(data)

    def _print_table(self, data: Any) -> None:
        if isinstance(data, Table):
            data.render(self.stream)
        else:
            self.stream.write(f"{data}\n")


def _is_terminal(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def _is_row(data: Any) -> bool:
    return isinstance(data, (list, tuple)) and all(isinstance(cell, str) for cell in data)


def _is_rows(data: Any) -> bool:
    return (
        isinstance(data, (list, tuple))
        and bool(data)
        and all(isinstance(row, (list, tuple)) and _is_row(row) for row in data)
    )


def print_table(fmt: str | None, table: Table, stream: TextIO | None = None) -> None:
    """Render *table* as JSON objects, plain rows or a Rich table."""
    formatter = Formatter(fmt, stream)
    if formatter.format == FORMAT_JSON:
        formatter.print(table.to_json())
    elif formatter.format == FORMAT_PLAIN:
        formatter.print(table.to_plain())
    else:
        table.render(formatter.stream)


def print_records(
    fmt: str | None,
    records: Sequence[Any],
    table: Table,
    stream: TextIO | None = None,
) -> None:
    """JSON gets the value objects themselves; other formats get *table*."""
    formatter = Formatter(fmt, stream)
    if formatter.format == FORMAT_JSON:
        formatter.print(list(records))
    else:
        print_table(formatter.format, table, formatter.stream)


def echo(text: str = "", stream: TextIO | None = None) -> None:
    """Write one line of command output (stdout unless *stream* is given)."""
    (stream or sys.stdout).write(f"{text}\n")


def id_cell(identifier: str, fmt: str) -> str:
    """Tables show a shortened ID; plain and JSON output keep it whole."""
    return short_id(identifier) if normalize_format(fmt) == FORMAT_TABLE else identifier
