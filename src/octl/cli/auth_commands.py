"""``octl auth`` — login, logout and status."""

from __future__ import annotations

import argparse
from datetime import datetime
from typing import Any

from octl.cli import context, exit_codes, prompts
from octl.cli.console import console
from octl.cli.output import FORMAT_JSON, Formatter, echo
from octl.exceptions import ConfigError, NotConfiguredError
from octl.infra import config_store

APP_REGISTRATION_HELP = """\
Before first login, create an Azure app registration:
  1. Go to https://portal.azure.com -> App registrations
  2. Create a registration supporting personal and work accounts
  3. Enable "Allow public client flows" under Authentication
  4. Add API permissions: User.Read, Mail.Read, Mail.ReadWrite, Mail.Send,
     Calendars.Read, Calendars.ReadWrite
  5. Copy the Application (client) ID and pass it with --client-id"""


def _show_device_code(verification_uri: str, user_code: str, expires_on: datetime) -> None:
    console.print()
    console.print("To sign in, use a web browser to open the page:")
    console.print(f"  [bold cyan]{verification_uri}[/bold cyan]")
    console.print()
    console.print(f"Enter the code: [bold]{user_code}[/bold]")
    console.print()
    console.print("[dim]Waiting for authentication...[/dim]")


def _resolve_client_id(flag_value: str | None) -> tuple[str, bool]:
    """Return ``(client_id, should_save)``."""
    if flag_value and flag_value.strip():
        return flag_value.strip(), True
    configured = config_store.get_client_id()
    if configured:
        return configured, False
    if prompts.is_interactive():
        return prompts.ask_client_id(), True
    raise NotConfiguredError(
        "client ID required",
        hint="Provide it via --client-id, the OCTL_CLIENT_ID variable, or the config file.",
    )


def run_login(args: argparse.Namespace) -> int:
    client_id, should_save = _resolve_client_id(args.client_id)
    if should_save:
        try:
            config_store.set_client_id(client_id)
        except ConfigError as exc:
            console.print(f"[yellow]Warning:[/yellow] failed to save client ID: {exc}")

    manager = context.build_auth_manager(client_id)
    console.print("Starting authentication...")
    manager.login(_show_device_code)

    username, _ = manager.user_info()
    console.print()
    console.print(f"[bold green]Successfully logged in as:[/bold green] {username}")
    return exit_codes.SUCCESS


def run_logout(args: argparse.Namespace) -> int:
    # No client ID is needed to forget the saved record.
    context.build_auth_manager(config_store.get_client_id()).logout()
    console.print("[green]Logged out successfully[/green]")
    return exit_codes.SUCCESS


def run_status(args: argparse.Namespace) -> int:
    fmt = context.output_format(args)
    status: dict[str, Any] = {"status": "not_configured"}

    client_id = config_store.get_client_id()
    if client_id:
        manager = context.build_auth_manager(client_id)
        if manager.is_logged_in():
            username, account_id = manager.user_info()
            status = {"status": "logged_in", "account": username, "account_id": account_id}
        else:
            status = {"status": "not_logged_in"}

    if fmt == FORMAT_JSON:
        Formatter(fmt).print(status)
        return exit_codes.SUCCESS

    if status["status"] == "not_configured":
        echo("Status: Not configured")
        echo()
        echo("No client ID configured. Run 'octl auth login --client-id <your-id>' to configure.")
    elif status["status"] == "logged_in":
        echo("Status: Logged in")
        echo(f"Account: {status['account']}")
        if status["account_id"]:
            echo(f"Account ID: {status['account_id']}")
    else:
        echo("Status: Not logged in")
        echo()
        echo("Run 'octl auth login' to authenticate.")
    return exit_codes.SUCCESS


def register(subparsers: Any, common: argparse.ArgumentParser) -> None:
    auth = subparsers.add_parser(
        "auth",
        parents=[common],
        help="Manage authentication",
        description="Manage authentication with Microsoft Outlook.",
    )
    commands = auth.add_subparsers(dest="auth_command", metavar="<command>")

    login = commands.add_parser(
        "login",
        parents=[common],
        help="Log in with the device code flow",
        description=(
            "Log in to Microsoft Outlook using the device code flow. You will be "
            "asked to open a URL in your browser and enter a code."
        ),
        epilog=APP_REGISTRATION_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    login.add_argument("--client-id", help="Azure app client ID (saved for future use)")
    login.set_defaults(func=run_login)

    logout = commands.add_parser("logout", parents=[common], help="Forget the saved login")
    logout.set_defaults(func=run_logout)

    status = commands.add_parser("status", parents=[common], help="Show authentication status")
    status.set_defaults(func=run_status)

    auth.set_defaults(func=None, help_parser=auth)
