"""
Shift rate and adjustment timeline calculations.

Scientific basis:
- Phase advance: ~1h/day natural, ~1.5h/day with light + melatonin
- Phase delay: ~1.5h/day natural, ~2h/day with interventions
- Natural circadian period (~24.2h) favors delays
- Morning types advance more easily, evening types delay more easily

Key principles:
- Daily rate = direction base rate / chronotype adaptation factor
- Westward rate is floored at the eastward rate for the same chronotype
- Total adaptation time = ceil(total_shift / daily_rate)
- Each day's phase label is a pure function of its day number
"""

import logging
import math
from dataclasses import dataclass

from ..types import ChronotypeCategory, DayPhase, ProtocolPhase, TripDirection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdaptationFactor:
    """
    Divisor applied to the base shift rate.

    Below 1.0 the traveler adapts faster than average in that direction.
    """

    eastward: float
    westward: float


# Morning types adapt more easily eastward (advance), evening types westward (delay)
ADAPTATION_FACTORS: dict[ChronotypeCategory, AdaptationFactor] = {
    "definite_morning": AdaptationFactor(eastward=0.8, westward=1.2),
    "moderate_morning": AdaptationFactor(eastward=0.9, westward=1.1),
    "intermediate": AdaptationFactor(eastward=1.0, westward=1.0),
    "moderate_evening": AdaptationFactor(eastward=1.1, westward=0.9),
    "definite_evening": AdaptationFactor(eastward=1.2, westward=0.8),
}

PROTOCOL_PHASES: dict[DayPhase, ProtocolPhase] = {
    "pre_adjustment": "pre_departure",
    "flight_day": "in_flight",
    "arrival_day": "destination",
    "active_adjustment": "destination",
    "fine_tuning": "destination",
    "adjusted": "adjusted",
}


def adaptation_factor(chronotype: ChronotypeCategory, direction: TripDirection) -> float:
    """Chronotype multiplier on adjustment difficulty for a travel direction."""
    factors = ADAPTATION_FACTORS[chronotype]
    return factors.eastward if direction == "eastward" else factors.westward


def calculate_pre_departure_days(
    timezone_shift_hours: float, trip_duration_days: int, max_days: int = 3
) -> int:
    """
    Number of pre-departure adjustment days.

    Very short trips get none, short trips or small shifts get two,
    everything else gets the maximum.
    """
    if trip_duration_days <= 2:
        return 0
    if trip_duration_days <= 4 or abs(timezone_shift_hours) <= 3:
        return min(2, max_days)
    return max_days


def phase_for_day(
    day_number: int,
    pre_departure_days: int,
    estimated_days: int,
    fine_tuning_days: int = 2,
) -> DayPhase:
    """
    Label a day from its position in the trip.

    pre_departure_days is accepted for symmetry with the day numbering;
    any negative day is pre-adjustment.
    """
    if day_number < 0:
        return "pre_adjustment"
    if day_number == 0:
        return "flight_day"
    if day_number == 1:
        return "arrival_day"
    if day_number <= estimated_days:
        return "active_adjustment"
    if day_number <= estimated_days + fine_tuning_days:
        return "fine_tuning"
    return "adjusted"


def to_protocol_phase(phase: DayPhase) -> ProtocolPhase:
    return PROTOCOL_PHASES[phase]


class ShiftCalculator:
    """
    Daily shift rate and days-to-adjust for a trip.

    Rates assume the full intervention set (light, melatonin, meals).
    """

    def __init__(
        self,
        total_shift: float,
        direction: TripDirection,
        chronotype: ChronotypeCategory,
        advance_base_rate: float = 1.5,
        delay_base_rate: float = 2.0,
    ):
        """
        Initialize calculator.

        Args:
            total_shift: Hours to shift (sign ignored)
            direction: "eastward" (advance) or "westward" (delay)
            chronotype: Traveler's chronotype category
            advance_base_rate: Hours/day for eastward shifts
            delay_base_rate: Hours/day for westward shifts
        """
        self.total_shift = abs(total_shift)
        self.direction = direction
        self.chronotype = chronotype
        advance_rate = advance_base_rate / adaptation_factor(chronotype, "eastward")
        if direction == "eastward":
            self._daily_rate = advance_rate
        else:
            delay_rate = delay_base_rate / adaptation_factor(chronotype, "westward")
            # Delays are never slower than advances for the same traveler
            if delay_rate < advance_rate:
                logger.debug(
                    "Westward rate %.2fh/day for %s raised to eastward rate %.2fh/day",
                    delay_rate,
                    chronotype,
                    advance_rate,
                )
                delay_rate = advance_rate
            self._daily_rate = delay_rate

    @property
    def daily_rate(self) -> float:
        """Hours of shift achievable per day."""
        return self._daily_rate

    @property
    def estimated_days(self) -> int:
        """Days needed for full adaptation."""
        return math.ceil(self.total_shift / self._daily_rate)

    def destination_day_count(self, trip_duration_days: int, fine_tuning_days: int = 2) -> int:
        """Destination days to schedule: through fine-tuning, or the whole stay if longer."""
        return max(self.estimated_days + fine_tuning_days, trip_duration_days)
