"""``octl mail`` — list, read, search, send and organise messages."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from typing import Any

from octl.cli import context, exit_codes, prompts
from octl.cli.console import console
from octl.cli.output import (
    FORMAT_JSON,
    Formatter,
    Table,
    echo,
    id_cell,
    print_records,
)
from octl.core.mail_service import DEFAULT_TOP, WELL_KNOWN_FOLDERS
from octl.core.models import Message, MessageListOptions, SendOptions
from octl.core.text import short_id, strip_html

FROM_WIDTH = 30
SUBJECT_WIDTH = 50
READ_MARK = "✓"
NO_MESSAGES = "No messages found"


def _message_table(messages: Sequence[Message], fmt: str, *, with_read: bool) -> Table:
    headers = ["ID", "FROM", "SUBJECT", "DATE"]
    if with_read:
        headers.append("READ")
    table = Table(*headers)
    for msg in messages:
        cells = [
            id_cell(msg.id, fmt),
            msg.format_from(FROM_WIDTH),
            msg.format_subject(SUBJECT_WIDTH),
            msg.format_date(),
        ]
        if with_read:
            cells.append(READ_MARK if msg.is_read else " ")
        table.add_row(*cells)
    return table


def _print_messages(messages: Sequence[Message], fmt: str, *, with_read: bool) -> None:
    if not messages:
        if fmt == FORMAT_JSON:
            Formatter(fmt).print([])
        else:
            echo(NO_MESSAGES)
        return
    print_records(fmt, messages, _message_table(messages, fmt, with_read=with_read))


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

def run_list(args: argparse.Namespace) -> int:
    opts = MessageListOptions(
        top=args.count,
        unread_only=args.unread,
        folder_id=args.folder or "",
    )
    messages = context.mail_service().list_messages(opts)
    _print_messages(messages, context.output_format(args), with_read=True)
    return exit_codes.SUCCESS


def run_read(args: argparse.Namespace) -> int:
    msg = context.mail_service().get_message(args.message_id)
    fmt = context.output_format(args)
    if fmt == FORMAT_JSON:
        Formatter(fmt).print(msg)
        return exit_codes.SUCCESS

    received = msg.received_at.strftime("%a, %d %b %Y %H:%M:%S %Z") if msg.received_at else ""
    echo(f"From:    {msg.sender}")
    echo(f"To:      {', '.join(msg.to)}")
    echo(f"Subject: {msg.subject}")
    echo(f"Date:    {received.strip()}")
    echo()
    echo("---")
    echo()
    body = strip_html(msg.body) if msg.body_content_type == "html" else msg.body
    echo(body)
    return exit_codes.SUCCESS


def run_search(args: argparse.Namespace) -> int:
    messages = context.mail_service().search_messages(args.query, args.count)
    _print_messages(messages, context.output_format(args), with_read=False)
    return exit_codes.SUCCESS


def run_folders(args: argparse.Namespace) -> int:
    folders = context.mail_service().list_folders()
    fmt = context.output_format(args)
    table = Table("ID", "NAME", "TOTAL", "UNREAD")
    for folder in folders:
        table.add_row(
            id_cell(folder.id, fmt),
            folder.display_name,
            folder.total_item_count,
            folder.unread_item_count,
        )
    print_records(fmt, folders, table)
    return exit_codes.SUCCESS


def run_folder(args: argparse.Namespace) -> int:
    folder = context.mail_service().get_folder(args.folder_id)
    fmt = context.output_format(args)
    if fmt == FORMAT_JSON:
        Formatter(fmt).print(folder)
        return exit_codes.SUCCESS
    echo(f"Name:    {folder.display_name}")
    echo(f"ID:      {folder.id}")
    echo(f"Total:   {folder.total_item_count}")
    echo(f"Unread:  {folder.unread_item_count}")
    return exit_codes.SUCCESS


def _send_options(args: argparse.Namespace, *, save_to_sent: bool = True) -> SendOptions:
    return SendOptions(
        to=tuple(args.to or ()),
        cc=tuple(getattr(args, "cc", None) or ()),
        bcc=tuple(getattr(args, "bcc", None) or ()),
        subject=args.subject or "",
        body=args.body or "",
        body_type="html" if args.html else "text",
        save_to_sent=save_to_sent,
    )


def run_send(args: argparse.Namespace) -> int:
    context.mail_service().send_message(_send_options(args))
    console.print("[green]Message sent successfully[/green]")
    return exit_codes.SUCCESS


def run_draft(args: argparse.Namespace) -> int:
    draft = context.mail_service().create_draft(_send_options(args, save_to_sent=False))
    fmt = context.output_format(args)
    if fmt == FORMAT_JSON:
        Formatter(fmt).print(draft)
    else:
        echo(f"Draft created: {draft.id}")
    return exit_codes.SUCCESS


def run_move(args: argparse.Namespace) -> int:
    context.mail_service().move_message(args.message_id, args.folder)
    console.print("[green]Message moved successfully[/green]")
    return exit_codes.SUCCESS


def run_mark(args: argparse.Namespace) -> int:
    is_read = not args.unread
    context.mail_service().mark_as_read(args.message_id, is_read)
    state = "read" if is_read else "unread"
    console.print(f"[green]Message marked as {state}[/green]")
    return exit_codes.SUCCESS


def run_delete(args: argparse.Namespace) -> int:
    if not prompts.confirm_unless(args.yes, f"Delete message {short_id(args.message_id)}?"):
        console.print("[yellow]Cancelled.[/yellow]")
        return exit_codes.SUCCESS
    context.mail_service().delete_message(args.message_id)
    console.print("[green]Message deleted[/green]")
    return exit_codes.SUCCESS


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

def _add_compose_arguments(
    parser: argparse.ArgumentParser, *, recipients_required: bool, content_required: bool,
) -> None:
    parser.add_argument(
        "--to",
        action="append",
        required=recipients_required,
        metavar="ADDRESS",
        help="Recipient (repeat or comma-separate for several)",
    )
    parser.add_argument("--subject", required=content_required, default="", help="Subject line")
    parser.add_argument("--body", required=content_required, default="", help="Message body")
    parser.add_argument("--html", action="store_true", help="Treat the body as HTML")


def register(subparsers: Any, common: argparse.ArgumentParser) -> None:
    mail = subparsers.add_parser(
        "mail",
        parents=[common],
        help="Manage email messages",
        description="Read, search, send and organise email.",
    )
    commands = mail.add_subparsers(dest="mail_command", metavar="<command>")

    list_cmd = commands.add_parser("list", parents=[common], help="List recent emails")
    list_cmd.add_argument(
        "-n", "--count", type=int, default=DEFAULT_TOP,
        help=f"Number of messages (default {DEFAULT_TOP})",
    )
    list_cmd.add_argument("-u", "--unread", action="store_true", help="Only unread messages")
    list_cmd.add_argument(
        "-f", "--folder",
        help=f"Folder ID or well-known name ({', '.join(WELL_KNOWN_FOLDERS)})",
    )
    list_cmd.set_defaults(func=run_list)

    read = commands.add_parser("read", parents=[common], help="Read an email message")
    read.add_argument("message_id", metavar="message-id")
    read.set_defaults(func=run_read)

    search = commands.add_parser("search", parents=[common], help="Search emails")
    search.add_argument("query")
    search.add_argument(
        "-n", "--count", type=int, default=DEFAULT_TOP,
        help=f"Maximum results (default {DEFAULT_TOP})",
    )
    search.set_defaults(func=run_search)

    folders = commands.add_parser("folders", parents=[common], help="List mail folders")
    folders.set_defaults(func=run_folders)

    folder = commands.add_parser("folder", parents=[common], help="Show one mail folder")
    folder.add_argument("folder_id", metavar="folder-id")
    folder.set_defaults(func=run_folder)

    send = commands.add_parser("send", parents=[common], help="Send an email")
    _add_compose_arguments(send, recipients_required=True, content_required=True)
    send.add_argument("--cc", action="append", metavar="ADDRESS", help="CC recipient")
    send.add_argument("--bcc", action="append", metavar="ADDRESS", help="BCC recipient")
    send.set_defaults(func=run_send)

    draft = commands.add_parser("draft", parents=[common], help="Create a draft")
    _add_compose_arguments(draft, recipients_required=False, content_required=False)
    draft.set_defaults(func=run_draft)

    move = commands.add_parser("move", parents=[common], help="Move a message to a folder")
    move.add_argument("message_id", metavar="message-id")
    move.add_argument("folder", help="Destination folder ID or well-known name")
    move.set_defaults(func=run_move)

    mark = commands.add_parser("mark", parents=[common], help="Mark a message read or unread")
    mark.add_argument("message_id", metavar="message-id")
    mark.add_argument("--unread", action="store_true", help="Mark as unread instead")
    mark.set_defaults(func=run_mark)

    delete = commands.add_parser("delete", parents=[common], help="Delete a message")
    delete.add_argument("message_id", metavar="message-id")
    delete.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation")
    delete.set_defaults(func=run_delete)

    mail.set_defaults(func=None, help_parser=mail)
