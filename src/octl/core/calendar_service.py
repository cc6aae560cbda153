"""Core calendar service — time windows, event parsing, response checks.

The service depends on a :class:`~octl.core.protocols.CalendarProvider`
injected at construction time.  The current time comes from an
injectable clock so that range calculations are deterministic under
test.

Guarantees
----------
* Pure orchestration: no I/O, no ``print()``.
* Only :class:`~octl.exceptions.OctlError` subclasses escape.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta
from typing import TypeVar

from octl.core import timeparse
from octl.core.models import CreateEventOptions, Event, EventListOptions
from octl.core.protocols import CalendarProvider
from octl.exceptions import GraphRequestError, InvalidArgumentError, OctlError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TOP = 50
DEFAULT_DAYS = 7
DEFAULT_DURATION = "1h"

RESPONSES: tuple[str, ...] = ("accept", "decline", "tentative")


def _local_now() -> datetime:
    return datetime.now().astimezone()


class CalendarService:
    """Stateless facade over a :class:`CalendarProvider`.

    Parameters
    ----------
    provider:
        Any object satisfying the :class:`CalendarProvider` protocol.
    clock:
        Zero-argument callable returning the current (aware) time.
    """

    def __init__(
        self,
        provider: CalendarProvider,
        clock: Callable[[], datetime] = _local_now,
    ) -> None:
        self._provider: CalendarProvider = provider
        self._clock = clock

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def list_events(self, start: datetime, end: datetime, top: int = 0) -> list[Event]:
        """Return events overlapping ``[start, end)`` ordered by start time."""
        if end <= start:
            raise InvalidArgumentError("End of range must be after its start.")
        opts = EventListOptions(start=start, end=end, top=top or DEFAULT_TOP)
        logger.debug("calendar view %s → %s top=%d", start, end, opts.top)
        return self._call(lambda: self._provider.list_events(opts))

    def list_upcoming(self, days: int = DEFAULT_DAYS) -> list[Event]:
        """Events from local midnight today through the next *days* days."""
        if days <= 0:
            raise InvalidArgumentError("--days must be a positive number.")
        start = timeparse.start_of_day(self._clock())
        return self.list_events(start, start + timedelta(days=days))

    def list_today(self) -> list[Event]:
        start = timeparse.start_of_day(self._clock())
        return self.list_events(start, start + timedelta(days=1))

    def list_week(self) -> list[Event]:
        """Events from Monday 00:00 of the current week, seven days on."""
        start = timeparse.start_of_week(self._clock())
        return self.list_events(start, start + timedelta(days=7))

    def get_event(self, event_id: str) -> Event:
        event_id = self._require_id(event_id)
        return self._call(lambda: self._provider.get_event(event_id))

    # ------------------------------------------------------------------
    # Creating
    # ------------------------------------------------------------------

    @staticmethod
    def build_create_options(
        subject: str,
        start: str,
        *,
        end: str = "",
        duration: str = DEFAULT_DURATION,
        all_day: bool = False,
        location: str = "",
        body: str = "",
        attendees: Sequence[str] = (),
        online: bool = False,
    ) -> CreateEventOptions:
        """Turn raw command-line values into :class:`CreateEventOptions`.

        All-day events take ``YYYY-MM-DD`` dates and default to a single
        day.  Timed events take RFC 3339 date-times; the end comes from
        *end* when given, otherwise from *duration*.
        """
        if not subject.strip():
            raise InvalidArgumentError("Event subject must not be empty.")

        if all_day:
            start_day = timeparse.parse_user_date(start)
            start_at = datetime(start_day.year, start_day.month, start_day.day)
            if end:
                end_day = timeparse.parse_user_date(end, field="end date")
                end_at = datetime(end_day.year, end_day.month, end_day.day)
            else:
                end_at = start_at + timedelta(days=1)
        else:
            start_at = timeparse.parse_user_datetime(start)
            if end:
                end_at = timeparse.parse_user_datetime(end, field="end time")
            else:
                end_at = start_at + timeparse.parse_duration(duration or DEFAULT_DURATION)

        if _comparable(end_at) <= _comparable(start_at):
            raise InvalidArgumentError("Event end must be after its start.")

        cleaned: list[str] = []
        for entry in attendees:
            cleaned.extend(part.strip() for part in entry.split(",") if part.strip())

        return CreateEventOptions(
            subject=subject.strip(),
            start=start_at,
            end=end_at,
            location=location,
            body=body,
            is_all_day=all_day,
            attendees=tuple(cleaned),
            is_online=online,
        )

    def create_event(self, opts: CreateEventOptions) -> Event:
        return self._call(lambda: self._provider.create_event(opts))

    # ------------------------------------------------------------------
    # Responding / deleting
    # ------------------------------------------------------------------

    def respond_to_event(self, event_id: str, response: str, comment: str = "") -> str:
        """Accept, decline, or tentatively accept an invitation.

        Returns the normalised response keyword.
        """
        event_id = self._require_id(event_id)
        normalised = response.strip().lower()
        if normalised not in RESPONSES:
            raise InvalidArgumentError(
                f"invalid response: {response} (use accept, decline, or tentative)",
            )
        self._call(lambda: self._provider.respond_to_event(event_id, normalised, comment))
        return normalised

    def delete_event(self, event_id: str) -> None:
        event_id = self._require_id(event_id)
        self._call(lambda: self._provider.delete_event(event_id))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _require_id(value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise InvalidArgumentError("An event ID is required.")
        return stripped

    @staticmethod
    def _call(operation: Callable[[], T]) -> T:
        """Call the provider and ensure only our exceptions escape."""
        try:
            return operation()
        except OctlError:
            raise
        except Exception as exc:
            raise GraphRequestError(f"Unexpected provider error: {exc}") from exc


def _comparable(moment: datetime) -> datetime:
    # Mixed naive/aware inputs (``--start`` with offset, ``--end`` without).
    return moment.astimezone() if moment.tzinfo is None else moment
