"""
Tests for trip resolution from IANA timezones (pytz).

DST dates used:
- US DST starts 2026-03-08, UK summer time starts 2026-03-29
- So NYC -> London is +4h between those dates, +5h otherwise
"""

import sys
from datetime import datetime
from pathlib import Path

import pytest
import pytz

sys.path.insert(0, str(Path(__file__).parent.parent))

from chronoshift.circadian_math import get_utc_offset_minutes
from chronoshift.errors import ValidationError
from chronoshift.trips import (
    build_trip,
    calculate_flight_duration,
    calculate_timezone_shift,
    is_short_trip,
    trip_direction,
)


class TestOffsets:
    """Tests for UTC offset lookup."""

    def test_standard_and_daylight_time(self):
        assert get_utc_offset_minutes("America/Los_Angeles", datetime(2026, 1, 15, 12)) == -480
        assert get_utc_offset_minutes("America/Los_Angeles", datetime(2026, 7, 15, 12)) == -420

    def test_half_hour_zone(self):
        assert get_utc_offset_minutes("Asia/Kolkata", datetime(2026, 1, 15, 12)) == 330

    def test_unknown_zone(self):
        with pytest.raises(pytz.UnknownTimeZoneError):
            get_utc_offset_minutes("Nowhere/Special", datetime(2026, 1, 15, 12))


class TestShift:
    """Tests for shift and direction."""

    def test_shift_from_offsets(self):
        assert calculate_timezone_shift(-300, 540) == 14
        assert calculate_timezone_shift(0, -480) == -8
        assert calculate_timezone_shift(-300, 330) == 10.5

    @pytest.mark.parametrize("shift,direction", [(5, "eastward"), (-8, "westward"), (0, "eastward")])
    def test_direction(self, shift, direction):
        assert trip_direction(shift) == direction

    @pytest.mark.parametrize(
        "days,shift,expected",
        [(2, 5, True), (2, 4, False), (3, 8, True), (3, -9, True), (3, 7, False), (4, 10, False)],
    )
    def test_short_trip(self, days, shift, expected):
        assert is_short_trip(days, shift) is expected


class TestBuildTrip:
    """Tests for build_trip."""

    def test_winter_transatlantic(self, nyc_to_london):
        assert nyc_to_london.origin_utc_offset == -300
        assert nyc_to_london.destination_utc_offset == 0
        assert nyc_to_london.timezone_shift_hours == 5
        assert nyc_to_london.direction == "eastward"
        assert nyc_to_london.flight_duration == 420

    def test_westward(self, london_to_la):
        assert london_to_la.timezone_shift_hours == -8
        assert london_to_la.direction == "westward"
        assert london_to_la.flight_duration == 660

    def test_dst_gap_weeks(self):
        """Between the US and UK DST changes the gap is only 4 hours."""
        trip = build_trip(
            "New York",
            "London",
            "America/New_York",
            "Europe/London",
            datetime(2026, 3, 10, 19, 0),
            datetime(2026, 3, 11, 6, 0),
            trip_duration_days=5,
        )
        assert trip.origin_utc_offset == -240
        assert trip.timezone_shift_hours == 4
        assert trip.flight_duration == 420

    def test_date_line(self, nyc_to_tokyo):
        assert nyc_to_tokyo.timezone_shift_hours == 14
        assert nyc_to_tokyo.flight_duration == 780

    def test_flight_duration_across_zones(self):
        minutes = calculate_flight_duration(
            "America/Los_Angeles",
            datetime(2026, 1, 15, 8, 0),
            "America/New_York",
            datetime(2026, 1, 15, 16, 30),
        )
        assert minutes == 330

    def test_unknown_timezone(self):
        with pytest.raises(ValidationError) as exc_info:
            build_trip(
                "A",
                "B",
                "Atlantis/Capital",
                "Europe/London",
                datetime(2026, 1, 15, 19, 0),
                datetime(2026, 1, 16, 7, 0),
                trip_duration_days=5,
            )
        assert exc_info.value.field == "origin_timezone"

    def test_arrival_before_departure(self):
        with pytest.raises(ValidationError) as exc_info:
            build_trip(
                "New York",
                "London",
                "America/New_York",
                "Europe/London",
                datetime(2026, 1, 15, 19, 0),
                datetime(2026, 1, 15, 23, 0),
                trip_duration_days=5,
            )
        assert exc_info.value.field == "arrival_datetime"

    def test_aware_datetimes_are_read_as_local(self):
        """Any tzinfo on the inputs is dropped; times are local wall clock."""
        trip = build_trip(
            "New York",
            "London",
            "America/New_York",
            "Europe/London",
            datetime(2026, 1, 15, 19, 0, tzinfo=pytz.UTC),
            datetime(2026, 1, 16, 7, 0, tzinfo=pytz.UTC),
            trip_duration_days=5,
        )
        assert trip.departure_datetime.tzinfo is None
        assert trip.flight_duration == 420
