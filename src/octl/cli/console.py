"""Stderr console helpers with optional Rich support.

Optional UI dependencies are imported lazily so that bootstrap paths
(``--help``, ``--version``) keep working when Rich is not installed.
Command results never go through this console; they are written to
stdout by :mod:`octl.cli.output`.
"""

from __future__ import annotations

import re
import sys
from typing import Any

from octl.exceptions import DependencyError, missing_dependency

_MARKUP = re.compile(r"\[/?[a-z ]+\]")


def _load_rich_console_class() -> type[Any]:
    """Return ``rich.console.Console`` or raise ``DependencyError``."""
    try:
        from rich.console import Console
    except ModuleNotFoundError as exc:
        raise missing_dependency("rich") from exc
    return Console


def get_rich_console() -> Any:
    """Create a Rich console targeting stderr."""
    console_class = _load_rich_console_class()
    return console_class(stderr=True)


def strip_markup(text: str) -> str:
    """Drop simple ``[bold red]…[/bold red]`` style tags."""
    return _MARKUP.sub("", text)


class _ConsoleProxy:
    """Minimal ``print``-compatible proxy with a plain-stderr fallback."""

    def print(self, *objects: object) -> None:
        try:
            rich_console = get_rich_console()
        except DependencyError:
            print(*(strip_markup(str(obj)) for obj in objects), file=sys.stderr)
            return
        rich_console.print(*objects)


console = _ConsoleProxy()
