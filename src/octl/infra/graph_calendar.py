"""msgraph-sdk backed implementation of :class:`~octl.core.protocols.CalendarProvider`."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from kiota_abstractions.base_request_configuration import RequestConfiguration
from msgraph.generated.models.attendee import Attendee
from msgraph.generated.models.attendee_type import AttendeeType
from msgraph.generated.models.body_type import BodyType
from msgraph.generated.models.date_time_time_zone import DateTimeTimeZone
from msgraph.generated.models.email_address import EmailAddress
from msgraph.generated.models.event import Event as GraphEvent
from msgraph.generated.models.item_body import ItemBody
from msgraph.generated.models.location import Location
from msgraph.generated.users.item.calendar_view.calendar_view_request_builder import (
    CalendarViewRequestBuilder,
)
from msgraph.generated.users.item.events.item.accept.accept_post_request_body import (
    AcceptPostRequestBody,
)
from msgraph.generated.users.item.events.item.decline.decline_post_request_body import (
    DeclinePostRequestBody,
)
from msgraph.generated.users.item.events.item.event_item_request_builder import (
    EventItemRequestBuilder,
)
from msgraph.generated.users.item.events.item.tentatively_accept.tentatively_accept_post_request_body import (  # noqa: E501
    TentativelyAcceptPostRequestBody,
)

from octl.core import timeparse
from octl.core.models import CreateEventOptions, Event, EventListOptions
from octl.exceptions import GraphRequestError, InvalidArgumentError
from octl.infra.graph_client import GraphSession

logger = logging.getLogger(__name__)

SUMMARY_FIELDS: list[str] = [
    "id",
    "subject",
    "start",
    "end",
    "location",
    "isAllDay",
    "organizer",
    "attendees",
    "webLink",
    "responseStatus",
    "isOnlineMeeting",
    "onlineMeetingUrl",
    "onlineMeeting",
]
DETAIL_FIELDS: list[str] = [*SUMMARY_FIELDS, "body"]

EVENT_TIME_ZONE = "UTC"

RESPONSE_ACTIONS: dict[str, tuple[str, Any]] = {
    "accept": ("accept", AcceptPostRequestBody),
    "decline": ("decline", DeclinePostRequestBody),
    "tentative": ("tentatively_accept", TentativelyAcceptPostRequestBody),
}
"""Response keyword to (request builder attribute, request body class)."""


# ---------------------------------------------------------------------------
# SDK model → value object
# ---------------------------------------------------------------------------

def _enum_value(value: Any) -> str:
    if value is None:
        return ""
    return str(getattr(value, "value", value))


def _moment(value: Any) -> datetime | None:
    if value is None:
        return None
    return timeparse.parse_graph_datetime(value.date_time, value.time_zone or EVENT_TIME_ZONE)


def _join_url(ev: Any) -> str:
    if ev.online_meeting_url:
        return ev.online_meeting_url
    meeting = ev.online_meeting
    return (meeting.join_url or "") if meeting is not None else ""


def convert_event(ev: Any, *, include_body: bool = False) -> Event:
    organizer = ""
    if ev.organizer is not None and ev.organizer.email_address is not None:
        organizer = ev.organizer.email_address.address or ""

    attendees = tuple(
        attendee.email_address.address or ""
        for attendee in ev.attendees or ()
        if attendee.email_address is not None
    )

    response = ""
    if ev.response_status is not None:
        response = _enum_value(ev.response_status.response)

    body = body_type = ""
    if include_body and ev.body is not None:
        body = ev.body.content or ""
        body_type = _enum_value(ev.body.content_type).lower()

    return Event(
        id=ev.id or "",
        subject=ev.subject or "",
        start=_moment(ev.start),
        end=_moment(ev.end),
        location=(ev.location.display_name or "") if ev.location is not None else "",
        is_all_day=bool(ev.is_all_day),
        organizer=organizer,
        attendees=attendees,
        body=body,
        body_content_type=body_type,
        web_link=ev.web_link or "",
        response_status=response,
        is_online=bool(ev.is_online_meeting),
        online_meeting_url=_join_url(ev),
    )


# ---------------------------------------------------------------------------
# Value object → SDK model
# ---------------------------------------------------------------------------

def _wall_clock(moment: datetime, all_day: bool) -> DateTimeTimeZone:
    text = (
        timeparse.date_wall_clock(moment.date())
        if all_day
        else timeparse.to_utc_wall_clock(moment)
    )
    return DateTimeTimeZone(date_time=text, time_zone=EVENT_TIME_ZONE)


def build_graph_event(opts: CreateEventOptions) -> GraphEvent:
    event = GraphEvent(
        subject=opts.subject,
        start=_wall_clock(opts.start, opts.is_all_day),
        end=_wall_clock(opts.end, opts.is_all_day),
        is_all_day=opts.is_all_day,
        is_online_meeting=opts.is_online,
    )
    if opts.location:
        event.location = Location(display_name=opts.location)
    if opts.body:
        event.body = ItemBody(content_type=BodyType.Text, content=opts.body)
    if opts.attendees:
        event.attendees = [
            Attendee(email_address=EmailAddress(address=addr), type=AttendeeType.Required)
            for addr in opts.attendees
        ]
    return event


def _query_time(moment: datetime) -> str:
    return timeparse.to_utc_wall_clock(moment) + "Z"


# ---------------------------------------------------------------------------
# Provider
# ---------------------------------------------------------------------------

class GraphCalendarProvider:
    """Concrete :class:`CalendarProvider` over ``/me`` calendar endpoints."""

    def __init__(self, session: GraphSession) -> None:
        self._session = session

    def list_events(self, opts: EventListOptions) -> list[Event]:
        params = CalendarViewRequestBuilder.CalendarViewRequestBuilderGetQueryParameters(
            start_date_time=_query_time(opts.start),
            end_date_time=_query_time(opts.end),
            top=opts.top,
            orderby=["start/dateTime"],
            select=SUMMARY_FIELDS,
        )
        config = RequestConfiguration(query_parameters=params)

        async def _view(client: Any) -> Any:
            return await client.me.calendar_view.get(request_configuration=config)

        response = self._session.run(_view)
        values = list(response.value or []) if response is not None else []
        return [convert_event(ev) for ev in values]

    def get_event(self, event_id: str) -> Event:
        params = EventItemRequestBuilder.EventItemRequestBuilderGetQueryParameters(
            select=DETAIL_FIELDS,
        )
        config = RequestConfiguration(query_parameters=params)

        async def _get(client: Any) -> Any:
            return await client.me.events.by_event_id(event_id).get(
                request_configuration=config,
            )

        ev = self._session.run(_get)
        if ev is None:
            raise GraphRequestError(f"Event not found: {event_id}")
        return convert_event(ev, include_body=True)

    def create_event(self, opts: CreateEventOptions) -> Event:
        body = build_graph_event(opts)

        async def _create(client: Any) -> Any:
            return await client.me.events.post(body=body)

        created = self._session.run(_create)
        if created is None:
            raise GraphRequestError("Event creation returned no event.")
        logger.debug("created event %s", created.id)
        return convert_event(created)

    def respond_to_event(self, event_id: str, response: str, comment: str) -> None:
        try:
            action, body_cls = RESPONSE_ACTIONS[response]
        except KeyError:
            raise InvalidArgumentError(
                f"invalid response: {response} (use accept, decline, or tentative)",
            ) from None
        body = body_cls(comment=comment, send_response=True)

        async def _respond(client: Any) -> None:
            item = client.me.events.by_event_id(event_id)
            await getattr(item, action).post(body=body)

        self._session.run(_respond)

    def delete_event(self, event_id: str) -> None:
        async def _delete(client: Any) -> None:
            await client.me.events.by_event_id(event_id).delete()

        self._session.run(_delete)
