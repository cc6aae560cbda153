"""Tests for the Graph calendar provider (infra/graph_calendar.py)."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from msgraph.generated.models.attendee_type import AttendeeType

from octl.core.models import CreateEventOptions, EventListOptions
from octl.exceptions import GraphRequestError, InvalidArgumentError
from octl.infra.graph_calendar import (
    DETAIL_FIELDS,
    GraphCalendarProvider,
    build_graph_event,
    convert_event,
)
from octl.infra.graph_client import GraphSession


def _when(value: str, zone: str | None = "UTC") -> SimpleNamespace:
    return SimpleNamespace(date_time=value, time_zone=zone)


def _sdk_event(**overrides: Any) -> SimpleNamespace:
    fields: dict[str, Any] = {
        "id": "AAMkEvent1",
        "subject": "Standup",
        "start": _when("2024-01-15T09:00:00.0000000"),
        "end": _when("2024-01-15T09:15:00.0000000"),
        "location": SimpleNamespace(display_name="Room 4"),
        "is_all_day": False,
        "organizer": SimpleNamespace(email_address=SimpleNamespace(address="boss@example.com")),
        "attendees": [SimpleNamespace(email_address=SimpleNamespace(address="me@example.com"))],
        "body": SimpleNamespace(content="Agenda", content_type=SimpleNamespace(value="text")),
        "web_link": "https://outlook.office.com/calendar/item/1",
        "response_status": SimpleNamespace(response=SimpleNamespace(value="accepted")),
        "is_online_meeting": True,
        "online_meeting_url": None,
        "online_meeting": SimpleNamespace(join_url="https://teams.example/join"),
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


@pytest.fixture()
def client() -> MagicMock:
    fake = MagicMock(name="GraphServiceClient")
    fake.me.calendar_view.get = AsyncMock(return_value=SimpleNamespace(value=[_sdk_event()]))
    fake.me.events.post = AsyncMock(return_value=_sdk_event(id="new-event"))
    item = fake.me.events.by_event_id.return_value
    item.get = AsyncMock(return_value=_sdk_event())
    item.delete = AsyncMock(return_value=None)
    item.accept.post = AsyncMock(return_value=None)
    item.decline.post = AsyncMock(return_value=None)
    item.tentatively_accept.post = AsyncMock(return_value=None)
    return fake


@pytest.fixture()
def provider(client: MagicMock) -> GraphCalendarProvider:
    session = GraphSession(
        MagicMock(), client_factory=lambda cred, http: client, http_client_factory=AsyncMock,
    )
    return GraphCalendarProvider(session)


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------

class TestConvertEvent:
    def test_fields(self) -> None:
        event = convert_event(_sdk_event())
        assert event.start == datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc)
        assert event.duration() == timedelta(minutes=15)
        assert event.location == "Room 4"
        assert event.organizer == "boss@example.com"
        assert event.attendees == ("me@example.com",)
        assert event.response_status == "accepted"
        assert event.body == ""

    def test_join_url_falls_back_to_online_meeting(self) -> None:
        assert convert_event(_sdk_event()).online_meeting_url == "https://teams.example/join"

    def test_online_meeting_url_preferred(self) -> None:
        event = convert_event(_sdk_event(online_meeting_url="https://direct.example"))
        assert event.online_meeting_url == "https://direct.example"

    def test_event_zone_is_applied(self) -> None:
        event = convert_event(_sdk_event(start=_when("2024-01-15T09:00:00", "Europe/Berlin")))
        assert event.start.utcoffset() == timedelta(hours=1)

    def test_sparse_event(self) -> None:
        event = convert_event(
            _sdk_event(
                start=None, end=None, location=None, organizer=None, attendees=None,
                response_status=None, online_meeting=None, web_link=None,
            ),
        )
        assert event.start is None
        assert event.format_time() == "? - ?"
        assert event.location == ""
        assert event.online_meeting_url == ""

    def test_body_on_request(self) -> None:
        event = convert_event(_sdk_event(), include_body=True)
        assert (event.body, event.body_content_type) == ("Agenda", "text")


class TestBuildGraphEvent:
    def test_timed_event_sent_as_utc_wall_clock(self) -> None:
        berlin = timezone(timedelta(hours=1))
        event = build_graph_event(
            CreateEventOptions(
                subject="Sync",
                start=datetime(2024, 1, 15, 14, 0, tzinfo=berlin),
                end=datetime(2024, 1, 15, 15, 0, tzinfo=berlin),
            ),
        )
        assert event.start.date_time == "2024-01-15T13:00:00"
        assert event.start.time_zone == "UTC"
        assert event.end.date_time == "2024-01-15T14:00:00"
        assert event.location is None
        assert event.attendees is None

    def test_all_day_event_uses_midnight_dates(self) -> None:
        event = build_graph_event(
            CreateEventOptions(
                subject="Conference",
                start=datetime(2024, 1, 20),
                end=datetime(2024, 1, 21),
                is_all_day=True,
            ),
        )
        assert event.is_all_day is True
        assert event.start.date_time == "2024-01-20T00:00:00"
        assert event.end.date_time == "2024-01-21T00:00:00"

    def test_optional_fields(self) -> None:
        event = build_graph_event(
            CreateEventOptions(
                subject="Sync",
                start=datetime(2024, 1, 15, 10, tzinfo=timezone.utc),
                end=datetime(2024, 1, 15, 11, tzinfo=timezone.utc),
                location="Room 4",
                body="Agenda",
                attendees=("a@x.com",),
                is_online=True,
            ),
        )
        assert event.location.display_name == "Room 4"
        assert event.body.content == "Agenda"
        assert event.attendees[0].email_address.address == "a@x.com"
        assert event.attendees[0].type == AttendeeType.Required
        assert event.is_online_meeting is True


# ---------------------------------------------------------------------------
# Provider requests
# ---------------------------------------------------------------------------

class TestProvider:
    def test_calendar_view_query(self, provider: GraphCalendarProvider, client: MagicMock) -> None:
        start = datetime(2024, 1, 15, tzinfo=timezone(timedelta(hours=2)))
        events = provider.list_events(
            EventListOptions(start=start, end=start + timedelta(days=1), top=50),
        )
        assert [e.id for e in events] == ["AAMkEvent1"]
        query = client.me.calendar_view.get.call_args.kwargs[
            "request_configuration"
        ].query_parameters
        assert query.start_date_time == "2024-01-14T22:00:00Z"
        assert query.end_date_time == "2024-01-15T22:00:00Z"
        assert query.orderby == ["start/dateTime"]
        assert query.top == 50

    def test_get_event_selects_body(
        self, provider: GraphCalendarProvider, client: MagicMock,
    ) -> None:
        event = provider.get_event("AAMkEvent1")
        get = client.me.events.by_event_id.return_value.get
        assert get.call_args.kwargs["request_configuration"].query_parameters.select == DETAIL_FIELDS
        assert event.body == "Agenda"

    def test_get_event_none(self, provider: GraphCalendarProvider, client: MagicMock) -> None:
        client.me.events.by_event_id.return_value.get.return_value = None
        with pytest.raises(GraphRequestError):
            provider.get_event("gone")

    def test_create(self, provider: GraphCalendarProvider, client: MagicMock) -> None:
        event = provider.create_event(
            CreateEventOptions(
                subject="Sync",
                start=datetime(2024, 1, 15, 10, tzinfo=timezone.utc),
                end=datetime(2024, 1, 15, 11, tzinfo=timezone.utc),
            ),
        )
        assert event.id == "new-event"
        assert client.me.events.post.call_args.kwargs["body"].subject == "Sync"

    @pytest.mark.parametrize(
        ("response", "action"),
        [("accept", "accept"), ("decline", "decline"), ("tentative", "tentatively_accept")],
    )
    def test_respond(
        self,
        provider: GraphCalendarProvider,
        client: MagicMock,
        response: str,
        action: str,
    ) -> None:
        provider.respond_to_event("AAMkEvent1", response, "thanks")
        post = getattr(client.me.events.by_event_id.return_value, action).post
        body = post.call_args.kwargs["body"]
        assert body.comment == "thanks"
        assert body.send_response is True

    def test_respond_unknown(self, provider: GraphCalendarProvider) -> None:
        with pytest.raises(InvalidArgumentError):
            provider.respond_to_event("AAMkEvent1", "maybe", "")

    def test_delete(self, provider: GraphCalendarProvider, client: MagicMock) -> None:
        provider.delete_event("AAMkEvent1")
        client.me.events.by_event_id.return_value.delete.assert_awaited_once()
