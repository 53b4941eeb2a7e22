"""
Pytest fixtures for protocol generation tests.
"""

import sys
from datetime import UTC, datetime
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from chronoshift.scheduler import AdjustmentScheduler
from chronoshift.trips import build_trip
from chronoshift.types import UserPreferences

from helpers import make_profile

FIXED_NOW = datetime(2026, 1, 10, 12, 0, tzinfo=UTC)


@pytest.fixture
def scheduler():
    """AdjustmentScheduler with deterministic ids."""
    return AdjustmentScheduler(id_factory=lambda: "protocol-1")


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def intermediate_profile():
    """MEQ 50, 23:00-07:00 sleeper."""
    return make_profile(meq_score=50)


@pytest.fixture
def morning_profile():
    return make_profile(meq_score=75, bedtime="22:00", wake_time="06:00")


@pytest.fixture
def evening_profile():
    return make_profile(meq_score=25, bedtime="00:30", wake_time="08:30")


@pytest.fixture
def preferences():
    return UserPreferences()


@pytest.fixture
def nyc_to_london():
    """NYC -> London in January: +5h eastward, 7-day stay."""
    return build_trip(
        "New York",
        "London",
        "America/New_York",
        "Europe/London",
        datetime(2026, 1, 15, 19, 0),
        datetime(2026, 1, 16, 7, 0),
        trip_duration_days=7,
        id="nyc-lhr",
    )


@pytest.fixture
def london_to_la():
    """London -> LA in January: -8h westward, 10-day stay."""
    return build_trip(
        "London",
        "Los Angeles",
        "Europe/London",
        "America/Los_Angeles",
        datetime(2026, 1, 15, 10, 0),
        datetime(2026, 1, 15, 13, 0),
        trip_duration_days=10,
        id="lhr-lax",
    )


@pytest.fixture
def nyc_to_tokyo():
    """NYC -> Tokyo in January: +14h eastward, 14-day stay."""
    return build_trip(
        "New York",
        "Tokyo",
        "America/New_York",
        "Asia/Tokyo",
        datetime(2026, 1, 15, 12, 0),
        datetime(2026, 1, 16, 15, 0),
        trip_duration_days=14,
        id="nyc-hnd",
    )


@pytest.fixture
def la_to_nyc():
    """LA -> NYC in January: +3h eastward, 7-day stay."""
    return build_trip(
        "Los Angeles",
        "New York",
        "America/Los_Angeles",
        "America/New_York",
        datetime(2026, 1, 15, 8, 0),
        datetime(2026, 1, 15, 16, 30),
        trip_duration_days=7,
        id="lax-jfk",
    )
