"""
Engine configuration.

Every heuristic constant the scheduler relies on lives here, so variants
(e.g. an alternate PRC dataset, a stricter wake clamp) can be passed in
without touching scheduling logic.

Sources:
- Burgess et al. (2003) Preflight adjustment to eastward travel
- Eastman & Burgess (2009) How to travel the world without jet lag
- Sleep Foundation: napping science (20-min vs 90-min)
"""

import logging
import os
import sys
from dataclasses import dataclass, field

from .science.prc import DEFAULT_PRC_SET, EFFECT_EPSILON, MAX_DAILY_SHIFT, PRCSet

LOG_LEVEL_ENV = "CHRONOSHIFT_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class FlightConfig:
    """
    Flight-day scan parameters.

    Hours are destination-local clock hours unless noted.
    """

    sleep_step_hours: float = 0.5  # Scan step for naps and melatonin
    awake_step_hours: float = 1.0  # Scan step for stay-awake, caffeine, light avoidance
    night_start: float = 21.0  # Destination night: [21:00, 07:00)
    night_end: float = 7.0
    day_start: float = 8.0  # Destination day: [08:00, 20:00]
    day_end: float = 20.0
    min_sleep_guidance_minutes: int = 240  # Nap/stay-awake guidance only on 4h+ flights
    max_naps: int = 2
    power_nap_minutes: int = 20
    full_cycle_minutes: int = 90
    full_cycle_min_remaining_hours: float = 2.0
    first_meal_hours: float = 1.5  # After takeoff, or 15% of the flight if shorter
    first_meal_fraction: float = 0.15
    second_meal_before_landing_hours: float = 1.5
    second_meal_min_flight_hours: float = 8.0
    meal_window: tuple[float, float] = (6.0, 21.0)  # Eat if destination hour inside
    caffeine_window: tuple[float, float] = (6.0, 14.0)
    light_avoid_lead_hours: float = 3.0  # Before destination CBTmin
    light_avoid_duration_hours: float = 2.0
    melatonin_lead_hours: tuple[float, float] = (5.0, 6.0)  # Before destination bedtime
    boarding_lead_hours: float = 0.5
    morning_light_departure_hour: float = 12.0  # Pre-flight light if departing at/after


@dataclass(frozen=True)
class EngineConfig:
    """
    Scheduler configuration.

    The adjustment tolerance and wake clamp are heuristics rather than
    derived values, so both are exposed here.
    """

    max_pre_departure_days: int = 3
    pre_departure_shift_per_day: float = 0.5  # hours
    max_wake_shift_hours: float = 2.0  # From habitual wake time
    adjustment_tolerance_hours: float = 0.5  # Remaining gap treated as adjusted
    fine_tuning_days: int = 2
    advance_base_rate: float = 1.5  # hours/day eastward, with interventions
    delay_base_rate: float = 2.0  # hours/day westward, with interventions
    caffeine_cutoff_hours: float = 8.0  # Before bed
    latest_caffeine_hour: float = 14.0
    melatonin_hours_before_bed: float = 5.5
    westward_melatonin_after_wake: float = 3.5
    assumed_sleep_hours: float = 8.0
    max_daily_shift: float = MAX_DAILY_SHIFT
    effect_epsilon: float = EFFECT_EPSILON
    prcs: PRCSet = DEFAULT_PRC_SET
    flight: FlightConfig = field(default_factory=FlightConfig)

    def __post_init__(self):
        if self.advance_base_rate <= 0 or self.delay_base_rate <= 0:
            raise ValueError("Base shift rates must be positive")
        if self.adjustment_tolerance_hours <= 0:
            raise ValueError("adjustment_tolerance_hours must be positive")
        if not 0 <= self.max_pre_departure_days <= 7:
            raise ValueError("max_pre_departure_days must be between 0 and 7")

    @classmethod
    def conservative(cls) -> "EngineConfig":
        """Slower rates and a tighter wake clamp for travelers with rigid schedules."""
        return cls(advance_base_rate=1.0, delay_base_rate=1.5, max_wake_shift_hours=1.0)


DEFAULT_CONFIG = EngineConfig()


def configure_logging(level: str | None = None) -> None:
    """
    Send engine logs to stderr.

    Only entry points call this; the library itself never adds handlers.
    Level comes from the argument, then CHRONOSHIFT_LOG_LEVEL, then WARNING.
    """
    level_name = (level or os.environ.get(LOG_LEVEL_ENV) or "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )
