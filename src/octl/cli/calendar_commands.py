"""``octl calendar`` (alias ``cal``) — view, create and respond to events."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from typing import Any

from octl.cli import context, exit_codes, prompts
from octl.cli.console import console
from octl.cli.output import FORMAT_JSON, Formatter, Table, echo, id_cell, print_records
from octl.core.calendar_service import (
    DEFAULT_DAYS,
    DEFAULT_DURATION,
    RESPONSES,
    CalendarService,
)
from octl.core.models import Event
from octl.core.text import short_id, strip_html, truncate

SUBJECT_WIDTH = 40
LOCATION_WIDTH = 25

CREATE_EXAMPLES = """\
examples:
  # a one-hour meeting
  octl calendar create --subject "Team Meeting" --start 2024-01-15T14:00:00 --duration 1h

  # an all-day event
  octl calendar create --subject "Conference" --start 2024-01-20 --all-day

  # an online meeting with attendees
  octl calendar create --subject "Sync" --start 2024-01-15T10:00:00 --duration 30m \\
      --online --attendees user@example.com"""


def _location_cell(event: Event) -> str:
    location = event.location
    if not location and event.is_online:
        location = "Online"
    return truncate(location, LOCATION_WIDTH)


def _print_events(events: Sequence[Event], fmt: str, empty_message: str) -> None:
    if not events:
        if fmt == FORMAT_JSON:
            Formatter(fmt).print([])
        else:
            echo(empty_message)
        return

    table = Table("ID", "DATE", "TIME", "SUBJECT", "LOCATION")
    for event in events:
        table.add_row(
            id_cell(event.id, fmt),
            event.format_date(),
            event.format_time(),
            truncate(event.subject, SUBJECT_WIDTH),
            _location_cell(event),
        )
    print_records(fmt, events, table)


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

def run_list(args: argparse.Namespace) -> int:
    events = context.calendar_service().list_upcoming(args.days)
    _print_events(events, context.output_format(args), "No events found")
    return exit_codes.SUCCESS


def run_today(args: argparse.Namespace) -> int:
    events = context.calendar_service().list_today()
    _print_events(events, context.output_format(args), "No events today")
    return exit_codes.SUCCESS


def run_week(args: argparse.Namespace) -> int:
    events = context.calendar_service().list_week()
    _print_events(events, context.output_format(args), "No events this week")
    return exit_codes.SUCCESS


def run_show(args: argparse.Namespace) -> int:
    event = context.calendar_service().get_event(args.event_id)
    fmt = context.output_format(args)
    if fmt == FORMAT_JSON:
        Formatter(fmt).print(event)
        return exit_codes.SUCCESS

    echo(f"Subject:   {event.subject}")
    echo(f"Date:      {event.format_date()}")
    echo(f"Time:      {event.format_time()}")
    if event.location:
        echo(f"Location:  {event.location}")
    if event.organizer:
        echo(f"Organizer: {event.organizer}")
    if event.attendees:
        echo(f"Attendees: {', '.join(event.attendees)}")
    if event.response_status:
        echo(f"Response:  {event.response_status}")
    if event.is_online:
        echo("Type:      Online meeting")
        if event.online_meeting_url:
            echo(f"Join URL:  {event.online_meeting_url}")
    if event.web_link:
        echo(f"Web Link:  {event.web_link}")

    if event.body:
        body = strip_html(event.body) if event.body_content_type == "html" else event.body
        echo()
        echo("---")
        echo()
        echo(body)
    return exit_codes.SUCCESS


def run_create(args: argparse.Namespace) -> int:
    opts = CalendarService.build_create_options(
        args.subject,
        args.start,
        end=args.end or "",
        duration=args.duration,
        all_day=args.all_day,
        location=args.location,
        body=args.body,
        attendees=args.attendees or (),
        online=args.online,
    )
    event = context.calendar_service().create_event(opts)

    fmt = context.output_format(args)
    if fmt == FORMAT_JSON:
        Formatter(fmt).print(event)
        return exit_codes.SUCCESS

    echo(f"Event created: {event.subject}")
    echo(f"ID: {event.id}")
    echo(f"Time: {event.format_date()} {event.format_time()}")
    if event.web_link:
        echo(f"Link: {event.web_link}")
    return exit_codes.SUCCESS


def run_respond(args: argparse.Namespace) -> int:
    response = context.calendar_service().respond_to_event(
        args.event_id, args.response, args.comment,
    )
    console.print(f"[green]Response sent:[/green] {response}")
    return exit_codes.SUCCESS


def run_delete(args: argparse.Namespace) -> int:
    if not prompts.confirm_unless(args.yes, f"Delete event {short_id(args.event_id)}?"):
        console.print("[yellow]Cancelled.[/yellow]")
        return exit_codes.SUCCESS
    context.calendar_service().delete_event(args.event_id)
    console.print("[green]Event deleted[/green]")
    return exit_codes.SUCCESS


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

def register(subparsers: Any, common: argparse.ArgumentParser) -> None:
    calendar = subparsers.add_parser(
        "calendar",
        aliases=["cal"],
        parents=[common],
        help="Manage calendar events",
        description="List, view, create, and respond to calendar events.",
    )
    commands = calendar.add_subparsers(dest="calendar_command", metavar="<command>")

    list_cmd = commands.add_parser("list", parents=[common], help="List upcoming events")
    list_cmd.add_argument(
        "-d", "--days", type=int, default=DEFAULT_DAYS,
        help=f"Number of days to show (default {DEFAULT_DAYS})",
    )
    list_cmd.set_defaults(func=run_list)

    today = commands.add_parser("today", parents=[common], help="Show today's events")
    today.set_defaults(func=run_today)

    week = commands.add_parser("week", parents=[common], help="Show this week's events")
    week.set_defaults(func=run_week)

    show = commands.add_parser("show", parents=[common], help="Show event details")
    show.add_argument("event_id", metavar="event-id")
    show.set_defaults(func=run_show)

    create = commands.add_parser(
        "create",
        parents=[common],
        help="Create a new event",
        epilog=CREATE_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    create.add_argument("--subject", required=True, help="Event subject/title")
    create.add_argument(
        "--start", required=True,
        help="Start time (RFC 3339, or YYYY-MM-DD with --all-day)",
    )
    create.add_argument("--end", help="End time (overrides --duration)")
    create.add_argument(
        "--duration", default=DEFAULT_DURATION,
        help=f"Duration such as 30m, 1h, 2h30m (default {DEFAULT_DURATION})",
    )
    create.add_argument("--location", default="", help="Event location")
    create.add_argument("--body", default="", help="Event description")
    create.add_argument("--all-day", action="store_true", help="Create an all-day event")
    create.add_argument(
        "--attendees", action="append", metavar="ADDRESS",
        help="Required attendee (repeat or comma-separate for several)",
    )
    create.add_argument("--online", action="store_true", help="Create as an online meeting")
    create.set_defaults(func=run_create)

    respond = commands.add_parser(
        "respond", parents=[common], help="Respond to an event invitation",
    )
    respond.add_argument("event_id", metavar="event-id")
    respond.add_argument("response", metavar="|".join(RESPONSES))
    respond.add_argument("--comment", default="", help="Optional comment with the response")
    respond.set_defaults(func=run_respond)

    delete = commands.add_parser("delete", parents=[common], help="Delete an event")
    delete.add_argument("event_id", metavar="event-id")
    delete.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation")
    delete.set_defaults(func=run_delete)

    calendar.set_defaults(func=None, help_parser=calendar)
