"""Domain models for octl.

All models are **frozen** dataclasses: immutable value objects that
mirror the Graph fields octl cares about.  Besides data access they
carry only display helpers and a ``to_dict`` used for JSON output;
they have no I/O and no dependency on the Graph SDK.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from octl.core.text import truncate


def _iso(moment: datetime | None) -> str | None:
    return moment.isoformat() if moment is not None else None


def _omit_empty(data: dict[str, Any], *keys: str) -> dict[str, Any]:
    """Drop *keys* whose value is falsy (JSON ``omitempty``)."""
    for key in keys:
        if not data.get(key):
            data.pop(key, None)
    return data


# ---------------------------------------------------------------------------
# Mail
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Message:
    """A single email message."""

    id: str
    subject: str = ""
    sender: str = ""
    """Display form of the sender: ``"Name <addr>"`` or just ``addr``."""

    to: tuple[str, ...] = ()
    received_at: datetime | None = None
    is_read: bool = False
    has_attachments: bool = False
    body_preview: str = ""
    body: str = ""
    body_content_type: str = ""
    """``"text"`` or ``"html"`` when the full body was fetched."""

    def format_from(self, max_len: int) -> str:
        return truncate(self.sender, max_len)

    def format_subject(self, max_len: int) -> str:
        return truncate(self.subject or "(no subject)", max_len)

    def format_date(self, now: datetime | None = None) -> str:
        """Compact received date: time today, month/day this year, else ISO."""
        if self.received_at is None:
            return ""
        now = now or datetime.now(self.received_at.tzinfo)
        received = self.received_at
        if received.date() == now.date():
            return received.strftime("%H:%M")
        if received.year == now.year:
            return received.strftime("%b %d")
        return received.strftime("%Y-%m-%d")

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "subject": self.subject,
            "from": self.sender,
            "to": list(self.to),
            "received_at": _iso(self.received_at),
            "is_read": self.is_read,
            "has_attachments": self.has_attachments,
            "body_preview": self.body_preview,
            "body": self.body,
            "body_content_type": self.body_content_type,
        }
        return _omit_empty(data, "body_preview", "body", "body_content_type")


@dataclass(frozen=True, slots=True)
class Folder:
    """A mail folder with its item counters."""

    id: str
    display_name: str = ""
    total_item_count: int = 0
    unread_item_count: int = 0
    parent_folder_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "display_name": self.display_name,
            "total_item_count": self.total_item_count,
            "unread_item_count": self.unread_item_count,
            "parent_folder_id": self.parent_folder_id,
        }
        return _omit_empty(data, "parent_folder_id")


@dataclass(frozen=True, slots=True)
class MessageListOptions:
    """Query options for listing messages."""

    top: int = 0
    skip: int = 0
    filter: str = ""
    order_by: str = ""
    unread_only: bool = False
    folder_id: str = ""


@dataclass(frozen=True, slots=True)
class SendOptions:
    """Content and recipients of an outgoing message or draft."""

    to: tuple[str, ...] = ()
    cc: tuple[str, ...] = ()
    bcc: tuple[str, ...] = ()
    subject: str = ""
    body: str = ""
    body_type: str = "text"
    save_to_sent: bool = True


# ---------------------------------------------------------------------------
# Calendar
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Event:
    """A calendar event as seen by the signed-in user."""

    id: str
    subject: str = ""
    start: datetime | None = None
    end: datetime | None = None
    location: str = ""
    is_all_day: bool = False
    organizer: str = ""
    attendees: tuple[str, ...] = ()
    body: str = ""
    body_content_type: str = ""
    web_link: str = ""
    response_status: str = ""
    is_online: bool = False
    online_meeting_url: str = ""

    def format_time(self) -> str:
        if self.is_all_day:
            return "All day"
        start = self.start.strftime("%H:%M") if self.start else "?"
        end = self.end.strftime("%H:%M") if self.end else "?"
        return f"{start} - {end}"

    def format_date(self) -> str:
        return self.start.strftime("%a %b %d") if self.start else ""

    def duration(self) -> timedelta:
        if self.start is None or self.end is None:
            return timedelta(0)
        return self.end - self.start

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "subject": self.subject,
            "start": _iso(self.start),
            "end": _iso(self.end),
            "location": self.location,
            "is_all_day": self.is_all_day,
            "organizer": self.organizer,
            "attendees": list(self.attendees),
            "body": self.body,
            "body_content_type": self.body_content_type,
            "web_link": self.web_link,
            "response_status": self.response_status,
            "is_online": self.is_online,
            "online_meeting_url": self.online_meeting_url,
        }
        return _omit_empty(
            data,
            "location",
            "organizer",
            "attendees",
            "body",
            "body_content_type",
            "web_link",
            "response_status",
            "online_meeting_url",
        )


@dataclass(frozen=True, slots=True)
class EventListOptions:
    """Time window for a calendar view query."""

    start: datetime
    end: datetime
    top: int = 0


@dataclass(frozen=True, slots=True)
class CreateEventOptions:
    """Fields for a new calendar event."""

    subject: str
    start: datetime
    end: datetime
    location: str = ""
    body: str = ""
    is_all_day: bool = False
    attendees: tuple[str, ...] = ()
    is_online: bool = False
