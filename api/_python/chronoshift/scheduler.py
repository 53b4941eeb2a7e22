"""
Protocol generation: walks the trip day by day.

Day numbering:
- Negative days: pre-departure, shifting 30 min/day toward destination
- Day 0: flight day (see scheduling/flight_day.py)
- Positive days: at destination, shifting by the daily rate until adjusted

State threaded across days is the shift achieved so far plus the current
bed/wake times. Markers are always derived from the starting markers and
the achieved shift, so they never accumulate rounding drift.
"""

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, timedelta

import pytz

from .circadian_math import ClockTime
from .chronotype import MEQ_MAX_SCORE, MEQ_MIN_SCORE, describe_chronotype
from .config import DEFAULT_CONFIG, EngineConfig
from .errors import ScoreOutOfRangeError, ValidationError
from .science.markers import determine_shift_direction
from .science.prc import PhaseResponseEngine
from .science.shift_calculator import (
    ShiftCalculator,
    calculate_pre_departure_days,
    phase_for_day,
    to_protocol_phase,
)
from .scheduling.flight_day import generate_flight_day_interventions
from .scheduling.flight_timeline import calculate_flight_timeline
from .scheduling.intervention_planner import (
    DayState,
    InterventionPlanner,
    PlannerContext,
    arrival_day_tips,
    day_summary,
    day_tips,
    stimuli_for,
)
from .types import (
    ChronotypeProfile,
    DayPhase,
    Intervention,
    InterventionType,
    Protocol,
    ProtocolDay,
    Trip,
    TripDirection,
    UserPreferences,
)

logger = logging.getLogger(__name__)

MAX_TIMEZONE_SHIFT_HOURS = 24
PROTOCOL_VERSION = "1.0"

ALWAYS_ENABLED: tuple[InterventionType, ...] = (
    "light_seek",
    "light_avoid",
    "sleep",
    "meal",
    "exercise",
)


def validate_request(
    trip: Trip, profile: ChronotypeProfile, preferences: UserPreferences
) -> None:
    """
    Reject inputs that cannot produce a meaningful protocol.

    Raises:
        ValidationError: On the first problem found
        ScoreOutOfRangeError: If the profile's MEQ score is outside [16, 86]
    """
    if trip.trip_duration_days <= 0:
        raise ValidationError(
            f"trip_duration_days must be positive, got {trip.trip_duration_days}",
            field="trip_duration_days",
        )
    if trip.flight_duration <= 0:
        raise ValidationError(
            f"flight_duration must be positive, got {trip.flight_duration}",
            field="flight_duration",
        )
    if abs(trip.timezone_shift_hours) > MAX_TIMEZONE_SHIFT_HOURS:
        raise ValidationError(
            f"timezone_shift_hours must be within ±{MAX_TIMEZONE_SHIFT_HOURS}, "
            f"got {trip.timezone_shift_hours}",
            field="timezone_shift_hours",
        )
    if (trip.timezone_shift_hours > 0 and trip.direction != "eastward") or (
        trip.timezone_shift_hours < 0 and trip.direction != "westward"
    ):
        raise ValidationError(
            f"direction {trip.direction!r} does not match timezone shift "
            f"{trip.timezone_shift_hours:+g}h",
            field="direction",
        )
    if profile.meq_score is not None and not MEQ_MIN_SCORE <= profile.meq_score <= MEQ_MAX_SCORE:
        raise ScoreOutOfRangeError(profile.meq_score, MEQ_MIN_SCORE, MEQ_MAX_SCORE)
    if preferences.uses_melatonin and preferences.melatonin_dose <= 0:
        raise ValidationError("melatonin_dose must be positive", field="melatonin_dose")
    if preferences.uses_creatine and preferences.creatine_dose <= 0:
        raise ValidationError("creatine_dose must be positive", field="creatine_dose")


def calculate_progress(achieved: float, total: float) -> int:
    """Percent of the total shift achieved, 100 when there is nothing to shift."""
    if total == 0:
        return 100
    return max(0, min(100, round(achieved / total * 100)))


def clamp_wake_time(
    wake_time: ClockTime, habitual_wake_time: ClockTime, direction: TripDirection, max_shift: float
) -> ClockTime:
    """
    Keep wake time within max_shift hours of habitual.

    Eastward shifts wake earlier, so only the early side is clamped;
    westward only the late side.
    """
    offset = habitual_wake_time.signed_hours_to(wake_time)
    if direction == "eastward" and offset < -max_shift:
        logger.debug("Wake %s clamped to %gh before habitual", wake_time, max_shift)
        return habitual_wake_time.shift(-max_shift)
    if direction == "westward" and offset > max_shift:
        logger.debug("Wake %s clamped to %gh after habitual", wake_time, max_shift)
        return habitual_wake_time.shift(max_shift)
    return wake_time


@dataclass
class ScheduleState:
    """Running state threaded from one day to the next."""

    achieved: float  # hours shifted so far, never exceeds the total
    bedtime: ClockTime
    wake_time: ClockTime


class AdjustmentScheduler:
    """
    Generate a day-by-day adjustment protocol for one trip.

    Pure given its inputs: `now` and the protocol id factory can be injected,
    so identical inputs produce identical protocols.
    """

    def __init__(
        self,
        config: EngineConfig = DEFAULT_CONFIG,
        id_factory: Callable[[], str] | None = None,
    ):
        self.config = config
        self.id_factory = id_factory or (lambda: str(uuid.uuid4()))
        self.prc_engine = PhaseResponseEngine(
            prcs=config.prcs,
            effect_epsilon=config.effect_epsilon,
            max_daily_shift=config.max_daily_shift,
        )

    def generate(
        self,
        trip: Trip,
        profile: ChronotypeProfile,
        preferences: UserPreferences,
        now: datetime | None = None,
    ) -> Protocol:
        """
        Build the full protocol.

        Args:
            trip: Flight and stay details
            profile: Chronotype and starting markers
            preferences: Optional interventions and doses
            now: Generation timestamp (defaults to current UTC time)

        Returns:
            Protocol with pre-departure, flight and destination days

        Raises:
            ValidationError: If inputs are inconsistent (see validate_request)
        """
        validate_request(trip, profile, preferences)
        config = self.config
        direction = trip.direction
        total_shift = abs(trip.timezone_shift_hours)
        # Eastward advances (markers move earlier), westward delays
        sign = -1 if direction == "eastward" else 1

        if determine_shift_direction(trip.timezone_shift_hours) != (
            "advance" if direction == "eastward" else "delay"
        ):
            logger.info(
                "%+gh shift is shorter the other way around the clock; following %s travel",
                trip.timezone_shift_hours,
                direction,
            )

        calculator = ShiftCalculator(
            total_shift,
            direction,
            profile.chronotype,
            advance_base_rate=config.advance_base_rate,
            delay_base_rate=config.delay_base_rate,
        )
        estimated_days = calculator.estimated_days
        pre_departure_days = calculate_pre_departure_days(
            trip.timezone_shift_hours, trip.trip_duration_days, config.max_pre_departure_days
        )
        destination_days = calculator.destination_day_count(
            trip.trip_duration_days, config.fine_tuning_days
        )

        logger.info(
            "Generating %s protocol: %gh shift, %.2fh/day, %d days to adjust, "
            "%d pre-departure + %d destination days (%s)",
            direction,
            total_shift,
            calculator.daily_rate,
            estimated_days,
            pre_departure_days,
            destination_days,
            describe_chronotype(profile.chronotype),
        )

        planner = InterventionPlanner(
            PlannerContext(
                direction=direction,
                chronotype=profile.chronotype,
                timezone_shift_hours=trip.timezone_shift_hours,
                preferences=preferences,
                config=config,
            )
        )

        state = ScheduleState(
            achieved=0.0,
            bedtime=profile.habitual_bedtime,
            wake_time=profile.habitual_wake_time,
        )
        departure_date = trip.departure_datetime.date()
        arrival_date = trip.arrival_datetime.date()
        days: list[ProtocolDay] = []

        def build_day(day_number: int, day_date: date) -> ProtocolDay:
            phase = phase_for_day(
                day_number, pre_departure_days, estimated_days, config.fine_tuning_days
            )
            progress = calculate_progress(state.achieved, total_shift)
            dlmo = profile.estimated_dlmo.shift(sign * state.achieved)
            cbtmin = profile.estimated_cbtmin.shift(sign * state.achieved)

            if phase == "flight_day":
                timeline = calculate_flight_timeline(
                    departure_time=ClockTime.from_datetime(trip.departure_datetime),
                    arrival_time=ClockTime.from_datetime(trip.arrival_datetime),
                    flight_duration_minutes=trip.flight_duration,
                    timezone_shift_hours=trip.timezone_shift_hours,
                    direction=direction,
                    destination_cbtmin=cbtmin,
                    destination_bedtime=state.bedtime,
                    config=config.flight,
                )
                interventions = generate_flight_day_interventions(
                    trip, timeline, preferences, state.wake_time, config.flight
                )
            else:
                day_state = DayState(
                    day_number=day_number,
                    phase=phase,
                    bedtime=state.bedtime,
                    wake_time=state.wake_time,
                    cbtmin=cbtmin,
                    progress=progress,
                )
                interventions = planner.plan_day(day_state)
                self._log_expected_shift(day_number, interventions, cbtmin)

            return ProtocolDay(
                day_number=day_number,
                date=day_date,
                timezone=trip.origin_timezone if day_number <= 0 else trip.destination_timezone,
                phase=phase,
                protocol_phase=to_protocol_phase(phase),
                estimated_dlmo=dlmo,
                estimated_cbtmin=cbtmin,
                phase_shift_from_home=round(state.achieved, 2),
                adjustment_progress=progress,
                interventions=tuple(assign_ids(day_number, interventions)),
                summary=day_summary(day_number, phase, direction, progress),
                tips=tuple(self._tips(phase, direction, trip.timezone_shift_hours, progress)),
            )

        # Pre-departure: record the day, then shift 30 min toward destination
        for day_number in range(-pre_departure_days, 0):
            days.append(build_day(day_number, departure_date + timedelta(days=day_number)))
            step = min(config.pre_departure_shift_per_day, total_shift - state.achieved)
            state.achieved += step
            state.bedtime = state.bedtime.shift(sign * step)
            state.wake_time = clamp_wake_time(
                state.wake_time.shift(sign * step),
                profile.habitual_wake_time,
                direction,
                config.max_wake_shift_hours,
            )

        days.append(build_day(0, departure_date))

        # At destination, aim for the habitual schedule in local time
        state.bedtime = profile.habitual_bedtime
        state.wake_time = profile.habitual_wake_time

        for day_number in range(1, destination_days + 1):
            remaining = total_shift - state.achieved
            if remaining >= config.adjustment_tolerance_hours:
                state.achieved += min(calculator.daily_rate, remaining)
            days.append(build_day(day_number, arrival_date + timedelta(days=day_number - 1)))

        return Protocol(
            id=self.id_factory(),
            trip_id=trip.id,
            generated_at=now or datetime.now(pytz.UTC),
            target_bedtime=profile.habitual_bedtime,
            target_wake_time=profile.habitual_wake_time,
            estimated_days_to_adjust=estimated_days,
            adjustment_rate_per_day=round(calculator.daily_rate, 2),
            direction=direction,
            days=tuple(days),
            chronotype_used=profile.chronotype,
            interventions_enabled=enabled_interventions(preferences),
            version=PROTOCOL_VERSION,
        )

    def _log_expected_shift(
        self, day_number: int, interventions: list[Intervention], cbtmin: ClockTime
    ) -> None:
        if not logger.isEnabledFor(logging.DEBUG):
            return
        estimate = self.prc_engine.expected_daily_shift(stimuli_for(interventions), cbtmin)
        logger.debug(
            "Day %+d: PRC estimate %.2fh %s%s",
            day_number,
            estimate.total_shift,
            estimate.direction,
            " (clamped)" if estimate.clamped else "",
        )

    @staticmethod
    def _tips(
        phase: DayPhase, direction: TripDirection, timezone_shift_hours: float, progress: int
    ) -> list[str]:
        if phase == "arrival_day":
            return arrival_day_tips(direction, timezone_shift_hours)
        return day_tips(phase, direction, progress)


def enabled_interventions(preferences: UserPreferences) -> tuple[InterventionType, ...]:
    enabled = list(ALWAYS_ENABLED)
    if preferences.uses_melatonin:
        enabled.append("melatonin")
    if preferences.caffeine_user:
        enabled.append("caffeine")
    if preferences.uses_creatine:
        enabled.append("creatine")
    return tuple(enabled)


def assign_ids(day_number: int, interventions: list[Intervention]) -> list[Intervention]:
    """Give each intervention a stable id from its day and position."""
    for index, intervention in enumerate(interventions):
        intervention.id = f"{day_number:+d}-{index:02d}-{intervention.type}"
    return interventions


def generate_protocol(
    trip: Trip,
    profile: ChronotypeProfile,
    preferences: UserPreferences,
    *,
    config: EngineConfig = DEFAULT_CONFIG,
    now: datetime | None = None,
    id_factory: Callable[[], str] | None = None,
) -> Protocol:
    """
    Generate a circadian adjustment protocol.

    Convenience wrapper around AdjustmentScheduler.
    """
    return AdjustmentScheduler(config, id_factory).generate(trip, profile, preferences, now=now)
