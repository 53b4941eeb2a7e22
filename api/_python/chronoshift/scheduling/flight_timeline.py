"""
Flight timeline: what time is it at the destination during the flight?

Walks the flight in fixed steps and, at each step, computes the
destination-local clock time:

    destination time = (origin departure clock + hours into flight + shift) mod 24

From that it derives the windows the flight-day planner turns into
interventions: naps, a stay-awake period, meal services, caffeine,
eastward light avoidance and melatonin, and the arrival period.

Window searches are pure folds over the step sequence, so termination and
non-overlap can be tested on their own.
"""

import itertools
import logging
import math
from dataclasses import dataclass
from functools import reduce
from typing import Literal

from ..circadian_math import ClockTime
from ..config import FlightConfig
from ..types import TripDirection

logger = logging.getLogger(__name__)

ArrivalPeriod = Literal["morning", "afternoon", "evening"]


@dataclass(frozen=True)
class FlightStep:
    """One sample point during the flight."""

    hours_in: float  # Hours since takeoff
    origin_time: ClockTime
    destination_time: ClockTime


@dataclass(frozen=True)
class NapPlan:
    """In-flight sleep window. Only 20 or 90 minutes are ever planned."""

    start_offset: float  # Hours since takeoff
    start: ClockTime  # Origin local
    end: ClockTime
    duration: int  # minutes, 20 or 90
    kind: Literal["power", "full_cycle"]
    destination_time: ClockTime

    @property
    def end_offset(self) -> float:
        return self.start_offset + self.duration / 60


@dataclass(frozen=True)
class FlightWindow:
    """Span of the flight, in origin and destination clock time."""

    start_offset: float
    end_offset: float
    start: ClockTime  # Origin local
    end: ClockTime
    destination_start: ClockTime
    destination_end: ClockTime


@dataclass(frozen=True)
class MealService:
    offset: float  # Hours since takeoff
    origin_time: ClockTime
    destination_time: ClockTime
    eat: bool  # Destination daytime: eat normally; otherwise skip or snack
    pre_landing: bool = False


@dataclass(frozen=True)
class FlightTimeline:
    departure_time: ClockTime  # Origin local
    arrival_time: ClockTime  # Destination local
    duration_hours: float
    timezone_shift_hours: float
    direction: TripDirection
    boarding_time: ClockTime  # Origin local
    destination_time_at_boarding: ClockTime
    naps: tuple[NapPlan, ...]
    stay_awake: FlightWindow | None
    meals: tuple[MealService, ...]
    caffeine: FlightWindow | None
    light_avoidance: FlightWindow | None  # Eastward only
    melatonin: FlightStep | None  # Eastward only
    arrival_period: ArrivalPeriod


def destination_time_at(
    departure_time: ClockTime, hours_into_flight: float, timezone_shift_hours: float
) -> ClockTime:
    """Destination-local clock time at a point in the flight."""
    return departure_time.shift(hours_into_flight + timezone_shift_hours)


def flight_steps(
    departure_time: ClockTime,
    duration_hours: float,
    timezone_shift_hours: float,
    step_hours: float,
) -> list[FlightStep]:
    """Sample points from takeoff (inclusive) to landing (exclusive)."""
    count = math.ceil(duration_hours / step_hours)
    steps = []
    for i in range(count):
        hours_in = i * step_hours
        if hours_in >= duration_hours:
            break
        steps.append(
            FlightStep(
                hours_in=hours_in,
                origin_time=departure_time.shift(hours_in),
                destination_time=destination_time_at(
                    departure_time, hours_in, timezone_shift_hours
                ),
            )
        )
    return steps


def is_destination_night(t: ClockTime, config: FlightConfig = FlightConfig()) -> bool:
    """Night at destination: [21:00, 07:00)."""
    return t.hours >= config.night_start or t.hours < config.night_end


def is_destination_day(t: ClockTime, config: FlightConfig = FlightConfig()) -> bool:
    """Day at destination: [08:00, 20:00]."""
    return config.day_start <= t.hours <= config.day_end


def find_nap_windows(
    steps: list[FlightStep], duration_hours: float, config: FlightConfig = FlightConfig()
) -> tuple[NapPlan, ...]:
    """
    Place up to two non-overlapping naps on destination-night steps.

    A 90-minute full cycle is used when at least 2h of flight remain,
    otherwise a 20-minute power nap. Anything in between risks waking
    from deep sleep. No nap starts unless it can end before landing.
    The scan resumes after each placed nap ends.
    """

    def place(acc: tuple[tuple[NapPlan, ...], float], step: FlightStep):
        naps, resume_at = acc
        if (
            len(naps) >= config.max_naps
            or step.hours_in < resume_at
            or not is_destination_night(step.destination_time, config)
        ):
            return acc

        remaining = duration_hours - step.hours_in
        if remaining < config.power_nap_minutes / 60:
            return acc
        minutes = (
            config.full_cycle_minutes
            if remaining >= config.full_cycle_min_remaining_hours
            else config.power_nap_minutes
        )
        nap = NapPlan(
            start_offset=step.hours_in,
            start=step.origin_time,
            end=step.origin_time.shift(minutes / 60),
            duration=minutes,
            kind="full_cycle" if minutes == config.full_cycle_minutes else "power",
            destination_time=step.destination_time,
        )
        return naps + (nap,), nap.end_offset

    naps, _ = reduce(place, steps, ((), 0.0))
    return naps


def find_stay_awake_window(
    steps: list[FlightStep],
    departure_time: ClockTime,
    duration_hours: float,
    timezone_shift_hours: float,
    config: FlightConfig = FlightConfig(),
) -> FlightWindow | None:
    """First contiguous run of destination-daytime steps."""
    for is_day, group in itertools.groupby(
        steps, key=lambda s: is_destination_day(s.destination_time, config)
    ):
        if not is_day:
            continue
        run = list(group)
        return _window(
            departure_time,
            timezone_shift_hours,
            run[0].hours_in,
            min(run[-1].hours_in + config.awake_step_hours, duration_hours),
        )
    return None


def find_caffeine_window(
    steps: list[FlightStep],
    departure_time: ClockTime,
    duration_hours: float,
    timezone_shift_hours: float,
    config: FlightConfig = FlightConfig(),
) -> FlightWindow | None:
    """Consolidate every step where destination hour is in [06:00, 14:00]."""
    low, high = config.caffeine_window
    allowed = [s for s in steps if low <= s.destination_time.hours <= high]
    if not allowed:
        return None
    return _window(
        departure_time,
        timezone_shift_hours,
        allowed[0].hours_in,
        min(allowed[-1].hours_in + config.awake_step_hours, duration_hours),
    )


def find_light_avoidance_window(
    steps: list[FlightStep],
    departure_time: ClockTime,
    timezone_shift_hours: float,
    destination_cbtmin: ClockTime,
    config: FlightConfig = FlightConfig(),
) -> FlightWindow | None:
    """
    First step within 3h before destination CBTmin.

    Light there causes a phase delay, the wrong way for eastward travel.
    """
    for step in steps:
        hours_before = step.destination_time.hours_until(destination_cbtmin)
        if 0 <= hours_before <= config.light_avoid_lead_hours:
            return _window(
                departure_time,
                timezone_shift_hours,
                step.hours_in,
                step.hours_in + config.light_avoid_duration_hours,
            )
    return None


def find_melatonin_step(
    steps: list[FlightStep],
    destination_bedtime: ClockTime,
    config: FlightConfig = FlightConfig(),
) -> FlightStep | None:
    """First step 5-6h before destination bedtime (peak advance timing)."""
    low, high = config.melatonin_lead_hours
    for step in steps:
        if low <= step.destination_time.hours_until(destination_bedtime) <= high:
            return step
    return None


def classify_arrival(arrival_time: ClockTime) -> ArrivalPeriod:
    """Morning is 06:00-12:00, afternoon after 12:00 through 18:00, else evening."""
    hour = arrival_time.hours
    if 6 <= hour <= 12:
        return "morning"
    if 12 < hour <= 18:
        return "afternoon"
    return "evening"


def _window(
    departure_time: ClockTime, timezone_shift_hours: float, start_offset: float, end_offset: float
) -> FlightWindow:
    return FlightWindow(
        start_offset=start_offset,
        end_offset=end_offset,
        start=departure_time.shift(start_offset),
        end=departure_time.shift(end_offset),
        destination_start=destination_time_at(departure_time, start_offset, timezone_shift_hours),
        destination_end=destination_time_at(departure_time, end_offset, timezone_shift_hours),
    )


def calculate_flight_timeline(
    departure_time: ClockTime,
    arrival_time: ClockTime,
    flight_duration_minutes: int,
    timezone_shift_hours: float,
    direction: TripDirection,
    destination_cbtmin: ClockTime,
    destination_bedtime: ClockTime,
    config: FlightConfig = FlightConfig(),
) -> FlightTimeline:
    """
    Compute every flight-day window.

    Args:
        departure_time: Local clock time at origin
        arrival_time: Local clock time at destination
        flight_duration_minutes: Gate-to-gate flight time
        timezone_shift_hours: Signed shift (positive = destination ahead)
        direction: "eastward" or "westward"
        destination_cbtmin: CBTmin the traveler is aiming for, destination clock
        destination_bedtime: Target bedtime, destination clock
        config: Scan parameters

    Returns:
        FlightTimeline with all windows (empty/None where none apply)
    """
    duration_hours = flight_duration_minutes / 60
    sleep_steps = flight_steps(
        departure_time, duration_hours, timezone_shift_hours, config.sleep_step_hours
    )
    awake_steps = flight_steps(
        departure_time, duration_hours, timezone_shift_hours, config.awake_step_hours
    )

    naps: tuple[NapPlan, ...] = ()
    stay_awake = None
    if flight_duration_minutes >= config.min_sleep_guidance_minutes:
        naps = find_nap_windows(sleep_steps, duration_hours, config)
        stay_awake = find_stay_awake_window(
            awake_steps, departure_time, duration_hours, timezone_shift_hours, config
        )
        if not naps:
            logger.info("No destination-night window during %.1fh flight", duration_hours)

    meal_offsets = [(min(config.first_meal_hours, duration_hours * config.first_meal_fraction), False)]
    if duration_hours >= config.second_meal_min_flight_hours:
        meal_offsets.append((duration_hours - config.second_meal_before_landing_hours, True))

    low, high = config.meal_window
    meals = []
    for offset, pre_landing in meal_offsets:
        destination_time = destination_time_at(departure_time, offset, timezone_shift_hours)
        meals.append(
            MealService(
                offset=offset,
                origin_time=departure_time.shift(offset),
                destination_time=destination_time,
                eat=low <= destination_time.hours <= high,
                pre_landing=pre_landing,
            )
        )

    light_avoidance = None
    melatonin = None
    if direction == "eastward":
        light_avoidance = find_light_avoidance_window(
            awake_steps, departure_time, timezone_shift_hours, destination_cbtmin, config
        )
        melatonin = find_melatonin_step(sleep_steps, destination_bedtime, config)

    boarding_offset = -config.boarding_lead_hours
    return FlightTimeline(
        departure_time=departure_time,
        arrival_time=arrival_time,
        duration_hours=duration_hours,
        timezone_shift_hours=timezone_shift_hours,
        direction=direction,
        boarding_time=departure_time.shift(boarding_offset),
        destination_time_at_boarding=destination_time_at(
            departure_time, boarding_offset, timezone_shift_hours
        ),
        naps=naps,
        stay_awake=stay_awake,
        meals=tuple(meals),
        caffeine=find_caffeine_window(
            awake_steps, departure_time, duration_hours, timezone_shift_hours, config
        ),
        light_avoidance=light_avoidance,
        melatonin=melatonin,
        arrival_period=classify_arrival(arrival_time),
    )
