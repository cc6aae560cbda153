"""CLI application entry point and command routing for octl.

This module is the **sole error boundary** for the entire application.
It catches :class:`~octl.exceptions.OctlError`, ``KeyboardInterrupt``,
and any unexpected ``Exception``, rendering user-friendly messages via
Rich on stderr and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here. Each command module registers its own
  sub-parser and handler; handlers delegate to the core services.
* Global flags (``--json``, ``--plain``, ``-v``, ``-V``) are accepted
  both before and after the subcommand.
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import argparse
import sys

from octl.cli import (
    auth_commands,
    calendar_commands,
    config_commands,
    doctor,
    exit_codes,
    mail_commands,
)
from octl.cli.console import console
from octl.cli.log import configure_logging
from octl.exceptions import OctlError
from octl.version import __version__

DESCRIPTION = """\
octl is a command-line interface for Microsoft Outlook.

Read and send email and manage your calendar from the terminal using the
Microsoft Graph API.  Works with personal (outlook.com) and work/school
(Microsoft 365) accounts.

To get started:
  1. Create an Azure app registration (see 'octl auth login --help')
  2. Run: octl auth login --client-id <your-client-id>
  3. Follow the device code flow in your browser"""


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _add_global_flags(parser: argparse.ArgumentParser, default: object) -> None:
    parser.add_argument(
        "--json", action="store_true", default=default, help="Output in JSON format",
    )
    parser.add_argument(
        "--plain",
        action="store_true",
        default=default,
        help="Output tab-separated plain text (for piping)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", default=default, help="Enable debug logging",
    )
    parser.add_argument(
        "-V", "--version", action="version", version=f"%(prog)s {__version__}",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level parser with every command group."""
    parser = argparse.ArgumentParser(
        prog="octl",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    _add_global_flags(parser, default=False)

    # Subcommands repeat the global flags; SUPPRESS keeps a value given
    # before the subcommand from being reset to False.
    common = argparse.ArgumentParser(add_help=False)
    _add_global_flags(common, default=argparse.SUPPRESS)

    subparsers = parser.add_subparsers(dest="command", metavar="<command>")
    auth_commands.register(subparsers, common)
    mail_commands.register(subparsers, common)
    calendar_commands.register(subparsers, common)
    config_commands.register(subparsers, common)
    doctor.register(subparsers, common)

    parser.set_defaults(func=None, help_parser=parser)
    return parser


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the octl CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.func is None:
        args.help_parser.print_help()
        return exit_codes.SUCCESS

    return args.func(args)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except OctlError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {exc.hint}")
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {exc}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
