"""Tests for domain models (core/models.py).

All models are frozen dataclasses; these tests verify immutability,
the display helpers and the JSON shape produced by ``to_dict``.
"""

from __future__ import annotations

import dataclasses
from datetime import datetime, timedelta, timezone

import pytest

from octl.core.models import Event, Folder, Message, MessageListOptions, SendOptions

UTC = timezone.utc


# ---------------------------------------------------------------------------
# Fixtures: reusable model instances
# ---------------------------------------------------------------------------

def _make_message(**overrides: object) -> Message:
    """Factory with sensible defaults for concise tests."""
    defaults: dict[str, object] = {
        "id": "AAMkAGI2TG93AAA=",
        "subject": "Quarterly report",
        "sender": "Ada Lovelace <ada@example.com>",
        "to": ("bob@example.com",),
        "received_at": datetime(2024, 1, 15, 9, 30, tzinfo=UTC),
        "is_read": True,
        "body_preview": "Numbers attached",
    }
    defaults.update(overrides)
    return Message(**defaults)  # type: ignore[arg-type]


def _make_event(**overrides: object) -> Event:
    defaults: dict[str, object] = {
        "id": "AAMkEvent1",
        "subject": "Standup",
        "start": datetime(2024, 1, 15, 9, 0, tzinfo=UTC),
        "end": datetime(2024, 1, 15, 9, 15, tzinfo=UTC),
    }
    defaults.update(overrides)
    return Event(**defaults)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Message
# ---------------------------------------------------------------------------

class TestMessage:
    def test_frozen(self) -> None:
        msg = _make_message()
        with pytest.raises(dataclasses.FrozenInstanceError):
            msg.subject = "changed"  # type: ignore[misc]

    def test_format_from_truncates(self) -> None:
        msg = _make_message(sender="A very long sender name <someone@example.com>")
        formatted = msg.format_from(20)
        assert len(formatted) == 20
        assert formatted.endswith("...")

    def test_format_from_short_value_unchanged(self) -> None:
        assert _make_message(sender="a@b.c").format_from(30) == "a@b.c"

    def test_empty_subject_placeholder(self) -> None:
        assert _make_message(subject="").format_subject(50) == "(no subject)"

    def test_format_subject_truncates(self) -> None:
        assert _make_message(subject="x" * 60).format_subject(50) == "x" * 47 + "..."

    def test_format_date_today_shows_time(self) -> None:
        msg = _make_message()
        now = datetime(2024, 1, 15, 18, 0, tzinfo=UTC)
        assert msg.format_date(now) == "09:30"

    def test_format_date_this_year_shows_month_day(self) -> None:
        msg = _make_message()
        now = datetime(2024, 6, 1, tzinfo=UTC)
        assert msg.format_date(now) == "Jan 15"

    def test_format_date_other_year_shows_iso(self) -> None:
        msg = _make_message()
        now = datetime(2025, 2, 1, tzinfo=UTC)
        assert msg.format_date(now) == "2024-01-15"

    def test_format_date_without_timestamp(self) -> None:
        assert _make_message(received_at=None).format_date() == ""

    def test_to_dict_uses_from_key(self) -> None:
        data = _make_message().to_dict()
        assert data["from"] == "Ada Lovelace <ada@example.com>"
        assert data["to"] == ["bob@example.com"]
        assert data["received_at"] == "2024-01-15T09:30:00+00:00"

    def test_to_dict_omits_empty_body_fields(self) -> None:
        data = _make_message(body_preview="").to_dict()
        assert "body_preview" not in data
        assert "body" not in data
        assert "body_content_type" not in data

    def test_to_dict_keeps_body_when_present(self) -> None:
        data = _make_message(body="<p>Hi</p>", body_content_type="html").to_dict()
        assert data["body"] == "<p>Hi</p>"
        assert data["body_content_type"] == "html"


# ---------------------------------------------------------------------------
# Folder / options
# ---------------------------------------------------------------------------

class TestFolder:
    def test_to_dict(self) -> None:
        folder = Folder(id="f1", display_name="Inbox", total_item_count=10, unread_item_count=2)
        assert folder.to_dict() == {
            "id": "f1",
            "display_name": "Inbox",
            "total_item_count": 10,
            "unread_item_count": 2,
        }


class TestOptions:
    def test_list_options_defaults(self) -> None:
        opts = MessageListOptions()
        assert opts.top == 0
        assert opts.unread_only is False
        assert opts.folder_id == ""

    def test_send_options_defaults(self) -> None:
        opts = SendOptions()
        assert opts.body_type == "text"
        assert opts.save_to_sent is True


# ---------------------------------------------------------------------------
# Event
# ---------------------------------------------------------------------------

class TestEvent:
    def test_format_time(self) -> None:
        assert _make_event().format_time() == "09:00 - 09:15"

    def test_format_time_all_day(self) -> None:
        assert _make_event(is_all_day=True).format_time() == "All day"

    def test_format_time_missing_end(self) -> None:
        assert _make_event(end=None).format_time() == "09:00 - ?"

    def test_format_date(self) -> None:
        assert _make_event().format_date() == "Mon Jan 15"

    def test_duration(self) -> None:
        assert _make_event().duration() == timedelta(minutes=15)

    def test_duration_without_times(self) -> None:
        assert _make_event(start=None).duration() == timedelta(0)

    def test_to_dict_omits_empty_fields(self) -> None:
        data = _make_event().to_dict()
        assert data["id"] == "AAMkEvent1"
        assert data["is_all_day"] is False
        for key in ("location", "organizer", "attendees", "body", "web_link"):
            assert key not in data

    def test_to_dict_includes_attendees(self) -> None:
        data = _make_event(attendees=("a@x.com", "b@x.com")).to_dict()
        assert data["attendees"] == ["a@x.com", "b@x.com"]
