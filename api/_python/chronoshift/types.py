"""
Data structures for protocol generation.

Inputs (Trip, ChronotypeProfile, UserPreferences) are frozen value objects.
Interventions are plain dataclasses: the engine never mutates them after a
protocol is built, but consumers own the completion/skip tracking fields.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Literal

from .circadian_math import ClockTime

# =============================================================================
# Enumerations
# =============================================================================

ChronotypeCategory = Literal[
    "definite_morning",
    "moderate_morning",
    "intermediate",
    "moderate_evening",
    "definite_evening",
]

TripDirection = Literal["eastward", "westward"]
ShiftDirection = Literal["advance", "delay"]

AssessmentMethod = Literal["MEQ", "MCTQ", "BOTH", "NONE"]
MarkerMethod = Literal["MEQ", "MCTQ", "combined", "direct"]
Confidence = Literal["high", "medium", "low"]

InterventionType = Literal[
    "light_seek",
    "light_avoid",
    "sleep",
    "melatonin",
    "caffeine",
    "meal",
    "exercise",
    "creatine",
]

Priority = Literal["critical", "recommended", "optional"]

DayPhase = Literal[
    "pre_adjustment",  # Days before departure, shifting 30 min/day
    "flight_day",  # Day 0
    "arrival_day",  # Day 1, first day at destination
    "active_adjustment",  # Main adjustment period
    "fine_tuning",  # Two days after the estimated adjustment
    "adjusted",  # Fully adapted
]

ProtocolPhase = Literal["pre_departure", "in_flight", "destination", "adjusted"]

ExerciseFrequency = Literal["never", "occasionally", "regularly", "daily"]
ExerciseTime = Literal["morning", "afternoon", "evening", "any"]


# =============================================================================
# Questionnaire Types
# =============================================================================


@dataclass(frozen=True)
class MEQResponse:
    """One answered MEQ item."""

    question_id: int
    selected_value: int


@dataclass(frozen=True)
class MCTQDay:
    """Sleep timing for one kind of day (workday or free day)."""

    bedtime: ClockTime
    wake_time: ClockTime
    sleep_prep_minutes: int = 0  # Time in bed before trying to sleep
    sleep_latency_minutes: int = 15  # Time to fall asleep
    uses_alarm: bool = False


@dataclass(frozen=True)
class MCTQResult:
    """Derived MCTQ metrics."""

    sleep_onset_workday: ClockTime
    sleep_onset_freeday: ClockTime
    sleep_duration_workday: int  # minutes
    sleep_duration_freeday: int  # minutes
    mid_sleep_workday: ClockTime
    mid_sleep_freeday: ClockTime
    msfsc: ClockTime  # Sleep-debt-corrected mid-sleep on free days
    social_jet_lag: float  # hours


# =============================================================================
# Circadian Marker Types
# =============================================================================


@dataclass(frozen=True)
class TimeWindow:
    """Clock-time interval, possibly crossing midnight."""

    start: ClockTime
    end: ClockTime
    peak: ClockTime | None = None

    @property
    def duration_hours(self) -> float:
        return self.start.hours_until(self.end)

    def contains(self, t: ClockTime) -> bool:
        """True if t falls in [start, end], handling midnight wrap."""
        return self.start.hours_until(t) <= self.duration_hours


@dataclass(frozen=True)
class CircadianMarkers:
    """Best estimate of the traveler's circadian phase."""

    dlmo: ClockTime
    cbtmin: ClockTime
    sleep_onset: ClockTime
    sleep_offset: ClockTime
    advance_window: TimeWindow  # Light here advances the clock
    delay_window: TimeWindow  # Light here delays the clock
    dead_zone: TimeWindow  # Light here has little effect
    method: MarkerMethod
    confidence: Confidence


# =============================================================================
# Engine Inputs
# =============================================================================


@dataclass(frozen=True)
class ChronotypeProfile:
    """Chronotype assessment plus the markers derived from it."""

    chronotype: ChronotypeCategory
    estimated_dlmo: ClockTime
    estimated_cbtmin: ClockTime
    habitual_bedtime: ClockTime
    habitual_wake_time: ClockTime
    average_sleep_duration: int  # minutes
    meq_score: int | None = None  # 16-86
    msfsc: ClockTime | None = None
    workday_bedtime: ClockTime | None = None
    workday_wake_time: ClockTime | None = None
    freeday_bedtime: ClockTime | None = None
    freeday_wake_time: ClockTime | None = None
    assessment_method: AssessmentMethod = "NONE"
    marker_confidence: Confidence = "low"


@dataclass(frozen=True)
class Trip:
    """Single flight plus the stay at the destination."""

    origin_city: str
    destination_city: str
    origin_timezone: str  # IANA timezone (e.g., "America/New_York")
    destination_timezone: str  # IANA timezone (e.g., "Europe/London")
    origin_utc_offset: int  # minutes, at departure
    destination_utc_offset: int  # minutes, at arrival
    departure_datetime: datetime  # Local time at origin (naive)
    arrival_datetime: datetime  # Local time at destination (naive)
    flight_duration: int  # minutes
    timezone_shift_hours: float  # Positive = destination ahead (eastward)
    direction: TripDirection
    trip_duration_days: int  # Days spent at destination
    id: str = ""


@dataclass(frozen=True)
class UserPreferences:
    """Which optional interventions the traveler wants."""

    uses_melatonin: bool = True
    melatonin_dose: float = 0.5  # mg
    uses_creatine: bool = False
    creatine_dose: float = 5.0  # g
    caffeine_user: bool = True
    caffeine_cutoff_hours: float = 6
    exercise_frequency: ExerciseFrequency = "regularly"
    preferred_exercise_time: ExerciseTime = "any"
    aggressive_adjustment: bool = False
    include_nap_guidance: bool = True


DEFAULT_USER_PREFERENCES = UserPreferences()


# =============================================================================
# Intervention Details (tagged by kind)
# =============================================================================


@dataclass(frozen=True)
class LightDetails:
    intensity: Literal["bright", "dim", "dark", "any"]
    source: str  # "outdoor", "eye_mask", "sunglasses", "cabin_lights", ...
    lux_target: int
    blue_blockers_recommended: bool = False
    outdoor_preferred: bool = False
    kind: Literal["light"] = field(default="light", init=False)


@dataclass(frozen=True)
class NapWindow:
    start: ClockTime
    end: ClockTime
    max_duration: int  # minutes


@dataclass(frozen=True)
class SleepDetails:
    target_bedtime: ClockTime
    target_wake_time: ClockTime
    sleep_duration: int  # minutes
    nap_allowed: bool = False
    nap_window: NapWindow | None = None
    kind: Literal["sleep"] = field(default="sleep", init=False)


@dataclass(frozen=True)
class MelatoninDetails:
    dose: float  # mg
    timing: ClockTime
    formulation: Literal["immediate", "extended"] = "immediate"
    kind: Literal["melatonin"] = field(default="melatonin", init=False)


@dataclass(frozen=True)
class CaffeineDetails:
    allowed: bool
    cutoff_time: ClockTime
    max_intake_before_cutoff: str
    recommended_times: tuple[ClockTime, ...] = ()
    kind: Literal["caffeine"] = field(default="caffeine", init=False)


@dataclass(frozen=True)
class MealDetails:
    meal_type: Literal["breakfast", "lunch", "dinner", "meal", "snack"]
    anchor_meal: bool
    composition: str
    notes: str = ""
    kind: Literal["meal"] = field(default="meal", init=False)


@dataclass(frozen=True)
class ExerciseDetails:
    intensity: Literal["light", "moderate", "vigorous"]
    preferred_timing: Literal["morning", "evening"]
    duration: int  # minutes
    outdoor_preferred: bool = True
    examples: tuple[str, ...] = ()
    kind: Literal["exercise"] = field(default="exercise", init=False)


@dataclass(frozen=True)
class CreatineDetails:
    dose: float  # g
    timing: ClockTime
    with_meal: bool = True
    kind: Literal["creatine"] = field(default="creatine", init=False)


InterventionDetails = (
    LightDetails
    | SleepDetails
    | MelatoninDetails
    | CaffeineDetails
    | MealDetails
    | ExerciseDetails
    | CreatineDetails
)

# Which detail payload each intervention type carries
DETAILS_BY_TYPE: dict[InterventionType, type] = {
    "light_seek": LightDetails,
    "light_avoid": LightDetails,
    "sleep": SleepDetails,
    "melatonin": MelatoninDetails,
    "caffeine": CaffeineDetails,
    "meal": MealDetails,
    "exercise": ExerciseDetails,
    "creatine": CreatineDetails,
}


def details_match_type(intervention_type: InterventionType, details: InterventionDetails) -> bool:
    """True if the detail payload is the one this intervention type carries."""
    expected = DETAILS_BY_TYPE.get(intervention_type)
    return expected is not None and isinstance(details, expected)


# =============================================================================
# Engine Outputs
# =============================================================================


@dataclass
class Intervention:
    """
    Single scheduled action.

    Times are local to the day's timezone (origin for pre-departure and
    flight day, destination afterwards). The pinned flag sorts an
    intervention ahead of everything else regardless of its clock time.
    """

    type: InterventionType
    start_time: ClockTime
    title: str
    description: str
    rationale: str
    details: InterventionDetails
    priority: Priority
    end_time: ClockTime | None = None
    duration: int | None = None  # minutes
    pinned: bool = False
    id: str = ""

    # Tracking fields owned by the consumer; generation leaves them unset
    completed: bool = False
    skipped: bool = False
    completed_at: datetime | None = None
    skip_reason: str | None = None
    notes: str | None = None

    def __post_init__(self):
        if not details_match_type(self.type, self.details):
            raise TypeError(
                f"{type(self.details).__name__} is not a valid payload for a "
                f"{self.type!r} intervention"
            )


@dataclass(frozen=True)
class ProtocolDay:
    """One day of the protocol."""

    day_number: int  # Negative = pre-departure, 0 = flight, positive = destination
    date: date
    timezone: str
    phase: DayPhase
    protocol_phase: ProtocolPhase
    estimated_dlmo: ClockTime
    estimated_cbtmin: ClockTime
    phase_shift_from_home: float  # Hours of shift achieved so far
    adjustment_progress: int  # 0-100
    interventions: tuple[Intervention, ...]
    summary: str
    tips: tuple[str, ...] = ()


@dataclass(frozen=True)
class Protocol:
    """Full day-by-day adjustment protocol for a trip."""

    id: str
    trip_id: str
    generated_at: datetime
    target_bedtime: ClockTime
    target_wake_time: ClockTime
    estimated_days_to_adjust: int
    adjustment_rate_per_day: float  # hours/day
    direction: TripDirection
    days: tuple[ProtocolDay, ...]
    chronotype_used: ChronotypeCategory
    interventions_enabled: tuple[InterventionType, ...]
    version: str = "1.0"

    def day(self, day_number: int) -> ProtocolDay | None:
        """Look up a day by its day number."""
        for protocol_day in self.days:
            if protocol_day.day_number == day_number:
                return protocol_day
        return None
