"""
Test helper functions for protocol validation.

These functions can be imported by test modules for protocol analysis.
"""

import sys
from datetime import datetime, timedelta
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from chronoshift.chronotype import build_chronotype_profile
from chronoshift.circadian_math import ClockTime
from chronoshift.trips import trip_direction
from chronoshift.types import ChronotypeProfile, Intervention, Protocol, ProtocolDay, Trip


def t(value: str) -> ClockTime:
    """Shorthand for ClockTime.parse."""
    return ClockTime.parse(value)


def make_trip(
    timezone_shift_hours: float,
    trip_duration_days: int = 7,
    departure: str = "2026-01-15T19:00",
    flight_duration: int = 420,
    direction: str | None = None,
    origin_timezone: str = "America/New_York",
    destination_timezone: str = "Europe/London",
) -> Trip:
    """
    Build a resolved Trip without a timezone lookup.

    Arrival is derived from departure, flight duration and shift, so the
    trip is internally consistent.
    """
    departure_dt = datetime.fromisoformat(departure)
    arrival_dt = departure_dt + timedelta(
        minutes=flight_duration, hours=timezone_shift_hours
    )
    origin_offset = -300
    return Trip(
        origin_city="Origin",
        destination_city="Destination",
        origin_timezone=origin_timezone,
        destination_timezone=destination_timezone,
        origin_utc_offset=origin_offset,
        destination_utc_offset=origin_offset + round(timezone_shift_hours * 60),
        departure_datetime=departure_dt,
        arrival_datetime=arrival_dt,
        flight_duration=flight_duration,
        timezone_shift_hours=timezone_shift_hours,
        direction=direction or trip_direction(timezone_shift_hours),
        trip_duration_days=trip_duration_days,
        id="trip-1",
    )


def make_request_data(**overrides) -> dict:
    """JSON request record for NYC -> London, 7 days, MEQ 50."""
    data = {
        "trip": {
            "id": "nyc-lhr",
            "origin_city": "New York",
            "destination_city": "London",
            "origin_timezone": "America/New_York",
            "destination_timezone": "Europe/London",
            "departure_datetime": "2026-01-15T19:00",
            "arrival_datetime": "2026-01-16T07:00",
            "trip_duration_days": 7,
        },
        "circadian_profile": {
            "habitual_bedtime": "23:00",
            "habitual_wake_time": "07:00",
            "meq_score": 50,
        },
        "preferences": {"uses_melatonin": True, "melatonin_dose": 1.0},
    }
    data.update(overrides)
    return data


def make_profile(
    meq_score: int | None = 50, bedtime: str = "23:00", wake_time: str = "07:00"
) -> ChronotypeProfile:
    return build_chronotype_profile(
        habitual_bedtime=t(bedtime), habitual_wake_time=t(wake_time), meq_score=meq_score
    )


def get_day(protocol: Protocol, day_number: int) -> ProtocolDay:
    """Get a day by number, failing the test if it is missing."""
    day = protocol.day(day_number)
    assert day is not None, f"Protocol has no day {day_number}"
    return day


def get_interventions_by_type(
    protocol: Protocol, intervention_type: str, day: int | None = None
) -> list[Intervention]:
    """
    Extract all interventions of a specific type from a protocol.

    Args:
        protocol: Protocol from the scheduler
        intervention_type: Type to filter (e.g., "light_seek", "melatonin")
        day: Optional day filter (e.g., 0 for flight day, -1 for day before)

    Returns:
        List of matching Intervention objects
    """
    results = []
    for protocol_day in protocol.days:
        if day is not None and protocol_day.day_number != day:
            continue
        results.extend(i for i in protocol_day.interventions if i.type == intervention_type)
    return results


def find_by_title(interventions, title: str) -> Intervention | None:
    for intervention in interventions:
        if intervention.title == title:
            return intervention
    return None


def count_interventions(protocol: Protocol) -> int:
    return sum(len(day.interventions) for day in protocol.days)
