"""Date/time parsing and range helpers for calendar commands.

Graph returns event times as a naive wall-clock string plus a separate
time-zone name.  Users type start times in RFC 3339 / ISO 8601 and
durations in the compact ``1h30m`` notation.  Everything here is pure:
the current time is always passed in by the caller.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from octl.exceptions import InvalidArgumentError

GRAPH_WALL_CLOCK_FORMAT = "%Y-%m-%dT%H:%M:%S"

_FRACTION = re.compile(r"\.(\d+)")
_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(h|m|s)")
_DURATION_FULL = re.compile(r"(?:\d+(?:\.\d+)?(?:h|m|s))+")
_UNIT_SECONDS = {"h": 3600.0, "m": 60.0, "s": 1.0}


# ---------------------------------------------------------------------------
# Graph → Python
# ---------------------------------------------------------------------------

def load_zone(name: str | None) -> timezone | ZoneInfo:
    """Resolve an IANA zone name, falling back to UTC when unknown."""
    if not name or name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc


def _normalise_iso(value: str) -> str:
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    # Graph emits 7 fractional digits; ``fromisoformat`` wants 6.
    return _FRACTION.sub(
        lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1,
    )


def parse_graph_datetime(value: str | None, tz_name: str | None = "UTC") -> datetime | None:
    """Parse a Graph ``dateTime`` string in the zone *tz_name*.

    Returns ``None`` when *value* is empty or not a recognisable
    timestamp.  Explicit offsets in *value* take precedence over
    *tz_name*.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(_normalise_iso(value))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=load_zone(tz_name))
    return parsed


# ---------------------------------------------------------------------------
# User input → Python
# ---------------------------------------------------------------------------

def parse_user_datetime(value: str, *, field: str = "start time") -> datetime:
    """Parse an RFC 3339 / ISO 8601 date-time typed on the command line."""
    try:
        return datetime.fromisoformat(_normalise_iso(value))
    except ValueError as exc:
        raise InvalidArgumentError(
            f"invalid {field}: {value!r}",
            hint="Use RFC3339 format, e.g. 2024-01-15T14:00:00 or 2024-01-15T14:00:00+01:00",
        ) from exc


def parse_user_date(value: str, *, field: str = "start date") -> date:
    """Parse a ``YYYY-MM-DD`` date typed on the command line."""
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise InvalidArgumentError(
            f"invalid {field}: {value!r}",
            hint="Use YYYY-MM-DD for all-day events.",
        ) from exc


def parse_duration(value: str) -> timedelta:
    """Parse a compact duration such as ``30m``, ``1h`` or ``2h30m``."""
    text = value.strip().lower()
    if not _DURATION_FULL.fullmatch(text):
        raise InvalidArgumentError(
            f"invalid duration: {value!r}",
            hint="Use a duration such as 30m, 1h or 2h30m.",
        )
    seconds = sum(
        float(amount) * _UNIT_SECONDS[unit]
        for amount, unit in _DURATION_PART.findall(text)
    )
    return timedelta(seconds=seconds)


# ---------------------------------------------------------------------------
# Python → Graph
# ---------------------------------------------------------------------------

def to_utc_wall_clock(moment: datetime) -> str:
    """Render *moment* as a UTC wall-clock string for ``DateTimeTimeZone``.

    Naive values are taken as local time.
    """
    return moment.astimezone(timezone.utc).strftime(GRAPH_WALL_CLOCK_FORMAT)


def date_wall_clock(day: date) -> str:
    """Render a calendar day as midnight wall-clock (all-day events)."""
    return f"{day.isoformat()}T00:00:00"


# ---------------------------------------------------------------------------
# Ranges
# ---------------------------------------------------------------------------

def start_of_day(now: datetime) -> datetime:
    """Midnight at the beginning of *now*'s day, same tzinfo."""
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_week(now: datetime) -> datetime:
    """Monday 00:00 of the week containing *now*."""
    return start_of_day(now) - timedelta(days=now.weekday())
