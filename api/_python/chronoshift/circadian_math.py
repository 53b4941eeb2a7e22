"""
Clock-time arithmetic on the 24-hour circle.

Circadian markers (DLMO, CBTmin) and every scheduled intervention are
wall-clock times of day. They wrap at midnight, so subtraction and
averaging have to be done modulo 24 hours. ClockTime keeps that logic in
one place instead of scattering "+ 24) % 24" guards across the scheduler.

Timezone offset lookups (pytz) live here as well, since they are the
other half of "what time is it there?".
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

import pytz

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True, order=True)
class ClockTime:
    """
    Time of day stored as whole minutes since midnight (0-1439).

    Construction normalizes any integer, so ClockTime(-30) is 23:30 and
    ClockTime(1500) is 01:00.
    """

    minutes: int

    def __post_init__(self):
        object.__setattr__(self, "minutes", int(self.minutes) % MINUTES_PER_DAY)

    @classmethod
    def from_hours(cls, hours: float) -> "ClockTime":
        """Build from decimal hours (e.g. 21.5 -> 21:30), rounding to the minute."""
        return cls(round(hours * 60))

    @classmethod
    def parse(cls, value: str) -> "ClockTime":
        """Parse "HH:MM" string."""
        parts = value.strip().split(":")
        if len(parts) != 2:
            raise ValueError(f"Invalid time format (expected HH:MM): {value!r}")
        hour, minute = int(parts[0]), int(parts[1])
        if not (0 <= hour <= 23 and 0 <= minute <= 59):
            raise ValueError(f"Time out of range: {value!r}")
        return cls(hour * 60 + minute)

    @classmethod
    def from_datetime(cls, dt: datetime) -> "ClockTime":
        return cls(dt.hour * 60 + dt.minute)

    @property
    def hour(self) -> int:
        return self.minutes // 60

    @property
    def minute(self) -> int:
        return self.minutes % 60

    @property
    def hours(self) -> float:
        """Decimal hours since midnight (e.g. 21:30 -> 21.5)."""
        return self.minutes / 60

    def shift(self, hours: float) -> "ClockTime":
        """Add (or subtract) hours, wrapping around midnight."""
        return ClockTime(self.minutes + round(hours * 60))

    def hours_until(self, other: "ClockTime") -> float:
        """Forward distance to another time, in [0, 24)."""
        return ((other.minutes - self.minutes) % MINUTES_PER_DAY) / 60

    def signed_hours_to(self, other: "ClockTime") -> float:
        """
        Shortest signed distance to another time, in [-12, 12).

        Positive when other is later on the clock, negative when earlier.
        """
        diff = (other.minutes - self.minutes) % MINUTES_PER_DAY
        if diff >= MINUTES_PER_DAY // 2:
            diff -= MINUTES_PER_DAY
        return diff / 60

    def format(self) -> str:
        """Format as "HH:MM" (24-hour format for data fields)."""
        return f"{self.hour:02d}:{self.minute:02d}"

    def format_12h(self) -> str:
        """Format as "H:MM AM/PM" (12-hour format for user-facing text)."""
        hour = self.hour
        period = "AM" if hour < 12 else "PM"
        if hour == 0:
            hour = 12
        elif hour > 12:
            hour -= 12
        return f"{hour}:{self.minute:02d} {period}"

    def __str__(self) -> str:
        return self.format()


def circular_mean(times: Iterable[ClockTime]) -> ClockTime:
    """
    Average clock times as angles on a 24-hour circle.

    A plain arithmetic mean of 23:00 and 01:00 gives 12:00; the circular
    mean correctly gives 00:00.

    Args:
        times: One or more clock times

    Returns:
        Mean clock time

    Raises:
        ValueError: If no times are given
    """
    angles = [t.minutes / MINUTES_PER_DAY * 2 * math.pi for t in times]
    if not angles:
        raise ValueError("circular_mean requires at least one time")

    sin_mean = sum(math.sin(a) for a in angles) / len(angles)
    cos_mean = sum(math.cos(a) for a in angles) / len(angles)

    mean_angle = math.atan2(sin_mean, cos_mean)
    if mean_angle < 0:
        mean_angle += 2 * math.pi

    return ClockTime(round(mean_angle / (2 * math.pi) * MINUTES_PER_DAY))


def get_utc_offset_minutes(tz_name: str, local_dt: datetime) -> int:
    """
    Get the UTC offset of a timezone at a given local wall-clock time.

    Args:
        tz_name: IANA timezone name (e.g., "America/Los_Angeles")
        local_dt: Local (naive) datetime in that timezone, used for DST

    Returns:
        Offset in minutes (e.g., -480 for PST, -420 for PDT)

    Raises:
        pytz.UnknownTimeZoneError: If the timezone name is not recognized
    """
    tz = pytz.timezone(tz_name)
    localized = tz.localize(local_dt.replace(tzinfo=None))
    return int(localized.utcoffset().total_seconds() // 60)


def to_utc(tz_name: str, local_dt: datetime) -> datetime:
    """Convert a naive local datetime in tz_name to an aware UTC datetime."""
    tz = pytz.timezone(tz_name)
    return tz.localize(local_dt.replace(tzinfo=None)).astimezone(pytz.UTC)


def parse_iso_datetime(value: str) -> datetime:
    """Parse ISO local datetime like "2026-01-15T09:45" (no timezone)."""
    return datetime.fromisoformat(value).replace(tzinfo=None)
