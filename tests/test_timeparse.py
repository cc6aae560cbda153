"""Tests for date/time parsing and range helpers (core/timeparse.py)."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from octl.core import timeparse
from octl.exceptions import InvalidArgumentError

UTC = timezone.utc


class TestParseGraphDatetime:
    def test_seven_digit_fraction_in_named_zone(self) -> None:
        parsed = timeparse.parse_graph_datetime("2024-01-15T14:30:00.0000000", "Europe/Berlin")
        assert parsed == datetime(2024, 1, 15, 14, 30, tzinfo=ZoneInfo("Europe/Berlin"))

    def test_defaults_to_utc(self) -> None:
        parsed = timeparse.parse_graph_datetime("2024-01-15T14:30:00")
        assert parsed is not None
        assert parsed.utcoffset() == timedelta(0)

    def test_unknown_zone_falls_back_to_utc(self) -> None:
        parsed = timeparse.parse_graph_datetime("2024-01-15T14:30:00", "Not/AZone")
        assert parsed is not None
        assert parsed.tzinfo is UTC

    def test_explicit_offset_wins(self) -> None:
        parsed = timeparse.parse_graph_datetime("2024-01-15T14:30:00Z", "Asia/Tokyo")
        assert parsed == datetime(2024, 1, 15, 14, 30, tzinfo=UTC)

    @pytest.mark.parametrize("value", ["", None, "yesterday", "2024-13-45T00:00:00"])
    def test_unparsable_yields_none(self, value: str | None) -> None:
        assert timeparse.parse_graph_datetime(value, "UTC") is None


class TestParseUserInput:
    def test_rfc3339_with_offset(self) -> None:
        parsed = timeparse.parse_user_datetime("2024-01-15T14:00:00+01:00")
        assert parsed.utcoffset() == timedelta(hours=1)

    def test_naive_datetime(self) -> None:
        parsed = timeparse.parse_user_datetime("2024-01-15T14:00:00")
        assert parsed == datetime(2024, 1, 15, 14, 0)
        assert parsed.tzinfo is None

    def test_invalid_datetime_raises_with_hint(self) -> None:
        with pytest.raises(InvalidArgumentError, match="invalid start time") as exc_info:
            timeparse.parse_user_datetime("tomorrow at 3")
        assert exc_info.value.hint is not None
        assert "RFC3339" in exc_info.value.hint

    def test_field_name_in_message(self) -> None:
        with pytest.raises(InvalidArgumentError, match="invalid end time"):
            timeparse.parse_user_datetime("nope", field="end time")

    def test_date(self) -> None:
        assert timeparse.parse_user_date("2024-01-20") == date(2024, 1, 20)

    def test_invalid_date(self) -> None:
        with pytest.raises(InvalidArgumentError, match="invalid start date"):
            timeparse.parse_user_date("20/01/2024")


class TestParseDuration:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("30m", timedelta(minutes=30)),
            ("1h", timedelta(hours=1)),
            ("2h30m", timedelta(hours=2, minutes=30)),
            ("90s", timedelta(seconds=90)),
            ("1.5h", timedelta(minutes=90)),
        ],
    )
    def test_valid(self, value: str, expected: timedelta) -> None:
        assert timeparse.parse_duration(value) == expected

    @pytest.mark.parametrize("value", ["", "1d", "h", "30", "1h 30m"])
    def test_invalid(self, value: str) -> None:
        with pytest.raises(InvalidArgumentError, match="invalid duration"):
            timeparse.parse_duration(value)


class TestWallClock:
    def test_aware_value_converted_to_utc(self) -> None:
        moment = datetime(2024, 1, 15, 14, 0, tzinfo=timezone(timedelta(hours=2)))
        assert timeparse.to_utc_wall_clock(moment) == "2024-01-15T12:00:00"

    def test_date_wall_clock(self) -> None:
        assert timeparse.date_wall_clock(date(2024, 1, 20)) == "2024-01-20T00:00:00"


class TestRanges:
    def test_start_of_day(self) -> None:
        now = datetime(2024, 1, 17, 15, 42, 7, 123, tzinfo=UTC)
        assert timeparse.start_of_day(now) == datetime(2024, 1, 17, tzinfo=UTC)

    def test_start_of_week_is_monday(self) -> None:
        wednesday = datetime(2024, 1, 17, 15, 0, tzinfo=UTC)
        assert timeparse.start_of_week(wednesday) == datetime(2024, 1, 15, tzinfo=UTC)

    def test_start_of_week_on_sunday(self) -> None:
        sunday = datetime(2024, 1, 21, 8, 0, tzinfo=UTC)
        assert timeparse.start_of_week(sunday) == datetime(2024, 1, 15, tzinfo=UTC)
