"""``octl doctor`` — environment diagnostics command.

Gathers runtime and configuration facts and renders a Rich table
summarising whether octl is ready to talk to Microsoft Graph.

This module lives in the CLI layer; it may import from ``infra`` and
``core``, and it renders via Rich.  It performs no network calls.
"""

from __future__ import annotations

import argparse
import platform
import sys
from importlib import metadata
from typing import Any

from octl.cli import exit_codes
from octl.cli.console import console
from octl.infra import config_store
from octl.version import __version__

OK = "[green]OK[/green]"
WARN = "[yellow]WARN[/yellow]"
FAIL = "[red]FAIL[/red]"

Check = tuple[str, str, str]


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _octl_version_check() -> Check:
    return "octl", __version__, OK


def _python_version_check() -> Check:
    """Return (label, value, status) for the Python version row."""
    version = platform.python_version()
    ok = sys.version_info[:2] >= (3, 10)
    return "Python", version, OK if ok else "[red]FAIL (>=3.10 required)[/red]"


def _package_check(distribution: str, *, required: bool = True) -> Check:
    """Return (label, value, status) for an installed distribution."""
    try:
        version = metadata.version(distribution)
    except metadata.PackageNotFoundError:
        return distribution, "NOT INSTALLED", FAIL if required else WARN
    return distribution, version, OK


def _client_id_check() -> Check:
    client_id = config_store.get_client_id()
    if not client_id:
        return "Client ID", "not configured", WARN
    return "Client ID", client_id, OK


def _login_check() -> Check:
    record = config_store.auth_record_path()
    if record.exists():
        return "Login", str(record), OK
    return "Login", "not logged in", WARN


def _os_check() -> Check:
    """Return (label, value, status) for the OS row."""
    system_raw = platform.system()
    system_display = {
        "Windows": "Windows",
        "Linux": "Linux",
        "Darwin": "macOS",
    }.get(system_raw, system_raw)
    value = f"{system_display} {platform.release()} ({platform.machine()})"
    return "OS", value, OK


def collect_checks() -> list[Check]:
    return [
        _octl_version_check(),
        _python_version_check(),
        _package_check("azure-identity"),
        _package_check("msgraph-sdk"),
        _package_check("rich", required=False),
        _package_check("questionary", required=False),
        _client_id_check(),
        _login_check(),
        _os_check(),
    ]


def _status_plain(status: str) -> str:
    """Convert rich-markup status to plain text."""
    for word in ("FAIL", "WARN", "OK"):
        if word in status:
            return word
    return status


def _print_plain_doctor_table(checks: list[Check]) -> None:
    """Render doctor output without Rich."""
    print("\noctl doctor", file=sys.stderr)
    print("=" * 64, file=sys.stderr)
    print(f"{'Component':<16} {'Value':<38} {'Status':<8}", file=sys.stderr)
    print("-" * 64, file=sys.stderr)
    for label, value, status in checks:
        print(f"{label:<16} {value:<38} {_status_plain(status):<8}", file=sys.stderr)
    print(file=sys.stderr)


def _print_rich_doctor_table(checks: list[Check], table_class: Any) -> None:
    table = table_class(
        title="octl doctor",
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("Component", style="bold", min_width=12)
    table.add_column("Value", min_width=20)
    table.add_column("Status", justify="center", min_width=8)
    for label, value, status in checks:
        table.add_row(label, value, status)

    console.print()
    console.print(table)
    console.print()


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_doctor(args: argparse.Namespace | None = None) -> int:
    """Execute all diagnostic checks and render a summary table.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when no check failed,
        :data:`exit_codes.GENERAL_ERROR` otherwise.  Warnings
        (not configured, not logged in) do not fail the run.
    """
    checks = collect_checks()
    has_failure = any("FAIL" in status for _, _, status in checks)

    try:
        from rich.table import Table
    except ModuleNotFoundError:
        _print_plain_doctor_table(checks)
    else:
        _print_rich_doctor_table(checks, Table)

    labels = {label: status for label, _, status in checks}
    if "WARN" in labels["Client ID"]:
        console.print("Run [bold]octl auth login --client-id <your-id>[/bold] to configure.")
    elif "WARN" in labels["Login"]:
        console.print("Run [bold]octl auth login[/bold] to sign in.")

    if has_failure:
        console.print("[bold red]Some checks failed.[/bold red]")
        return exit_codes.GENERAL_ERROR
    console.print("[bold green]All checks passed.[/bold green]")
    return exit_codes.SUCCESS


def register(subparsers: Any, common: argparse.ArgumentParser) -> None:
    doctor = subparsers.add_parser(
        "doctor", parents=[common], help="Check the environment and configuration",
    )
    doctor.set_defaults(func=run_doctor)
