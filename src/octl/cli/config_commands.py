"""``octl config`` — inspect and edit the config file."""

from __future__ import annotations

import argparse
from typing import Any

from octl.cli import context, exit_codes
from octl.cli.console import console
from octl.cli.output import FORMAT_JSON, Formatter, Table, print_table
from octl.exceptions import InvalidArgumentError
from octl.infra import config_store


def _settings() -> dict[str, Any]:
    cfg = config_store.load()
    return {
        "config_dir": str(config_store.config_dir()),
        "client_id": config_store.get_client_id(),
        "tenant_id": config_store.get_tenant_id(),
        "allow_unencrypted_storage": cfg.allow_unencrypted_storage,
        "logged_in_record": config_store.auth_record_path().exists(),
    }


def run_show(args: argparse.Namespace) -> int:
    settings = _settings()
    fmt = context.output_format(args)
    if fmt == FORMAT_JSON:
        Formatter(fmt).print(settings)
        return exit_codes.SUCCESS

    table = Table("SETTING", "VALUE")
    for key, value in settings.items():
        if isinstance(value, bool):
            value = "yes" if value else "no"
        table.add_row(key, value or "(not set)")
    print_table(fmt, table)
    return exit_codes.SUCCESS


def run_set_client_id(args: argparse.Namespace) -> int:
    client_id = args.client_id.strip()
    if not client_id:
        raise InvalidArgumentError("Client ID must not be empty.")
    config_store.set_client_id(client_id)
    console.print(f"[green]Client ID saved to[/green] {config_store.config_path()}")
    return exit_codes.SUCCESS


def register(subparsers: Any, common: argparse.ArgumentParser) -> None:
    config = subparsers.add_parser(
        "config",
        parents=[common],
        help="Show or change settings",
        description="Inspect and edit octl's config file.",
    )
    commands = config.add_subparsers(dest="config_command", metavar="<command>")

    show = commands.add_parser("show", parents=[common], help="Show current settings")
    show.set_defaults(func=run_show)

    set_client = commands.add_parser(
        "set-client-id", parents=[common], help="Save the Azure app client ID",
    )
    set_client.add_argument("client_id", metavar="client-id")
    set_client.set_defaults(func=run_set_client_id)

    config.set_defaults(func=None, help_parser=config)
