"""
Trip construction from IANA timezones.

The scheduler takes a fully resolved Trip. This module is the lookup side:
it resolves UTC offsets with pytz at the actual departure/arrival wall-clock
times (so DST is honored), then derives the shift, direction and flight
duration.
"""

import logging
from datetime import datetime

import pytz

from .circadian_math import get_utc_offset_minutes, to_utc
from .errors import ValidationError
from .types import Trip, TripDirection

logger = logging.getLogger(__name__)


def calculate_timezone_shift(origin_offset_minutes: int, destination_offset_minutes: int) -> float:
    """
    Signed shift in hours.

    Positive when the destination is ahead of the origin (eastward).
    """
    return (destination_offset_minutes - origin_offset_minutes) / 60


def trip_direction(timezone_shift_hours: float) -> TripDirection:
    """Eastward for a positive (or zero) shift, westward for negative."""
    return "eastward" if timezone_shift_hours >= 0 else "westward"


def is_short_trip(trip_duration_days: int, timezone_shift_hours: float) -> bool:
    """
    Whether the stay is too short to be worth a full adjustment.

    Two days or less with a 5h+ shift, or three days or less with 8h+.
    """
    shift = abs(timezone_shift_hours)
    if trip_duration_days <= 2 and shift >= 5:
        return True
    return trip_duration_days <= 3 and shift >= 8


def calculate_flight_duration(
    origin_timezone: str,
    departure_datetime: datetime,
    destination_timezone: str,
    arrival_datetime: datetime,
) -> int:
    """Minutes between two local wall-clock times in different zones."""
    departure_utc = to_utc(origin_timezone, departure_datetime)
    arrival_utc = to_utc(destination_timezone, arrival_datetime)
    return round((arrival_utc - departure_utc).total_seconds() / 60)


def build_trip(
    origin_city: str,
    destination_city: str,
    origin_timezone: str,
    destination_timezone: str,
    departure_datetime: datetime,
    arrival_datetime: datetime,
    trip_duration_days: int,
    id: str = "",
) -> Trip:
    """
    Resolve a Trip from cities, zones and local times.

    Args:
        origin_city: Display name of the origin
        destination_city: Display name of the destination
        origin_timezone: IANA zone of the origin (e.g. "America/New_York")
        destination_timezone: IANA zone of the destination
        departure_datetime: Naive local departure time at origin
        arrival_datetime: Naive local arrival time at destination
        trip_duration_days: Days at destination
        id: Trip identifier carried into the protocol

    Returns:
        Trip with offsets, shift, direction and flight duration filled in

    Raises:
        ValidationError: Unknown timezone, or arrival not after departure
    """
    for field, tz_name in (
        ("origin_timezone", origin_timezone),
        ("destination_timezone", destination_timezone),
    ):
        try:
            pytz.timezone(tz_name)
        except pytz.UnknownTimeZoneError as e:
            raise ValidationError(f"Unknown timezone: {tz_name!r}", field=field) from e

    departure_datetime = departure_datetime.replace(tzinfo=None)
    arrival_datetime = arrival_datetime.replace(tzinfo=None)

    origin_offset = get_utc_offset_minutes(origin_timezone, departure_datetime)
    destination_offset = get_utc_offset_minutes(destination_timezone, arrival_datetime)
    flight_duration = calculate_flight_duration(
        origin_timezone, departure_datetime, destination_timezone, arrival_datetime
    )
    if flight_duration <= 0:
        raise ValidationError(
            f"Arrival {arrival_datetime.isoformat()} ({destination_timezone}) is not after "
            f"departure {departure_datetime.isoformat()} ({origin_timezone})",
            field="arrival_datetime",
        )

    shift = calculate_timezone_shift(origin_offset, destination_offset)
    logger.debug(
        "%s -> %s: offsets %d/%d min, shift %+gh, flight %d min",
        origin_city,
        destination_city,
        origin_offset,
        destination_offset,
        shift,
        flight_duration,
    )

    return Trip(
        origin_city=origin_city,
        destination_city=destination_city,
        origin_timezone=origin_timezone,
        destination_timezone=destination_timezone,
        origin_utc_offset=origin_offset,
        destination_utc_offset=destination_offset,
        departure_datetime=departure_datetime,
        arrival_datetime=arrival_datetime,
        flight_duration=flight_duration,
        timezone_shift_hours=shift,
        direction=trip_direction(shift),
        trip_duration_days=trip_duration_days,
        id=id,
    )
