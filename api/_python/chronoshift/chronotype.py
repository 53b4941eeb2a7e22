"""
Chronotype scoring and classification.

Implements MEQ (Horne & Ostberg, 1976) and MCTQ (Roenneberg et al., 2003)
scoring, and combines them into a single chronotype category and the
circadian markers used by the scheduler.
"""

import logging
from collections.abc import Sequence

from .circadian_math import ClockTime
from .errors import ScoreOutOfRangeError, ValidationError
from .science.markers import DEFAULT_SLEEP_LATENCY_MINUTES, estimate_circadian_markers
from .types import (
    AssessmentMethod,
    ChronotypeCategory,
    ChronotypeProfile,
    MCTQDay,
    MCTQResult,
    MEQResponse,
)

logger = logging.getLogger(__name__)

MEQ_QUESTION_COUNT = 19
MEQ_MIN_SCORE = 16
MEQ_MAX_SCORE = 86

# Inclusive lower bounds, checked in order
MEQ_BANDS: tuple[tuple[int, ChronotypeCategory], ...] = (
    (70, "definite_morning"),
    (59, "moderate_morning"),
    (42, "intermediate"),
    (31, "moderate_evening"),
    (16, "definite_evening"),
)

# MSFsc cut-points (decimal hours), checked in order
MSFSC_BANDS: tuple[tuple[float, ChronotypeCategory], ...] = (
    (2.5, "definite_morning"),
    (3.5, "moderate_morning"),
    (5.0, "intermediate"),
    (6.5, "moderate_evening"),
)

# Population-typical MSFsc; clock times are read within 12h either side of it
MSFSC_CENTER = ClockTime(4 * 60)

# MSFsc -> MEQ-equivalent: 2:00 -> 75, 6:00 -> 35
MSFSC_ANCHOR_HOURS = 2.0
MEQ_AT_MSFSC_ANCHOR = 75
MEQ_PER_MSFSC_HOUR = -10

WORKDAYS_PER_WEEK = 5
FREEDAYS_PER_WEEK = 2

CHRONOTYPE_DESCRIPTIONS: dict[ChronotypeCategory, str] = {
    "definite_morning": "Definite Morning Type (Early Bird)",
    "moderate_morning": "Moderate Morning Type",
    "intermediate": "Intermediate Type (Neither)",
    "moderate_evening": "Moderate Evening Type",
    "definite_evening": "Definite Evening Type (Night Owl)",
}


class ChronotypeClassifier:
    """
    Score questionnaires into one of five ordered chronotype bands.

    Bands are injected so alternate cut-points can be tried without
    changing the scoring code.
    """

    def __init__(self, bands: Sequence[tuple[int, ChronotypeCategory]] = MEQ_BANDS):
        self.bands = tuple(bands)

    def score_meq(self, responses: Sequence[MEQResponse]) -> int:
        """
        Sum MEQ responses.

        Raises:
            ValidationError: If there are not exactly 19 responses
        """
        if len(responses) != MEQ_QUESTION_COUNT:
            raise ValidationError(
                f"MEQ requires exactly {MEQ_QUESTION_COUNT} responses, got {len(responses)}",
                field="meq_responses",
            )
        return sum(r.selected_value for r in responses)

    def classify(self, score: int) -> ChronotypeCategory:
        """
        Map an MEQ score to its band.

        Raises:
            ScoreOutOfRangeError: If score is outside [16, 86]
        """
        if score < MEQ_MIN_SCORE or score > MEQ_MAX_SCORE:
            raise ScoreOutOfRangeError(score, MEQ_MIN_SCORE, MEQ_MAX_SCORE)
        for lower_bound, category in self.bands:
            if score >= lower_bound:
                return category
        return self.bands[-1][1]

    def classify_combined(
        self, meq_score: int | None, msfsc: ClockTime | None
    ) -> ChronotypeCategory:
        """
        Classify from whichever estimators are present.

        With both, MSFsc is converted to an MEQ-equivalent score and the
        two are averaged. With neither, returns "intermediate".
        """
        if meq_score is not None and msfsc is not None:
            combined = round((meq_score + estimate_meq_from_msfsc(msfsc)) / 2)
            return self.classify(combined)
        if meq_score is not None:
            return self.classify(meq_score)
        if msfsc is not None:
            return chronotype_from_msfsc(msfsc)
        return "intermediate"


_default_classifier = ChronotypeClassifier()


def score_meq(responses: Sequence[MEQResponse]) -> int:
    return _default_classifier.score_meq(responses)


def classify_chronotype(score: int) -> ChronotypeCategory:
    return _default_classifier.classify(score)


def combined_chronotype(meq_score: int | None, msfsc: ClockTime | None) -> ChronotypeCategory:
    return _default_classifier.classify_combined(meq_score, msfsc)


# =============================================================================
# MCTQ
# =============================================================================


def calculate_sleep_onset(
    bedtime: ClockTime, sleep_prep_minutes: int, sleep_latency_minutes: int
) -> ClockTime:
    """Sleep onset = bedtime + time preparing to sleep + time to fall asleep."""
    return bedtime.shift((sleep_prep_minutes + sleep_latency_minutes) / 60)


def calculate_sleep_duration(sleep_onset: ClockTime, wake_time: ClockTime) -> int:
    """Minutes from sleep onset to wake, crossing midnight if needed."""
    return round(sleep_onset.hours_until(wake_time) * 60)


def calculate_mid_sleep(sleep_onset: ClockTime, wake_time: ClockTime) -> ClockTime:
    return sleep_onset.shift(sleep_onset.hours_until(wake_time) / 2)


def calculate_msfsc(
    sleep_duration_workday: int, sleep_duration_freeday: int, mid_sleep_freeday: ClockTime
) -> ClockTime:
    """
    Corrected mid-sleep on free days (MSFsc).

    Free-day sleep is inflated by sleep debt from workdays. When free-day
    duration exceeds the weekly (5:2) average, half the oversleep is
    subtracted from raw mid-sleep; otherwise mid-sleep is used as is.
    """
    weekly_average = (
        sleep_duration_workday * WORKDAYS_PER_WEEK + sleep_duration_freeday * FREEDAYS_PER_WEEK
    ) / (WORKDAYS_PER_WEEK + FREEDAYS_PER_WEEK)

    if sleep_duration_freeday > weekly_average:
        oversleep_hours = (sleep_duration_freeday - weekly_average) / 60
        return mid_sleep_freeday.shift(-oversleep_hours / 2)
    return mid_sleep_freeday


def calculate_social_jet_lag(mid_sleep_workday: ClockTime, mid_sleep_freeday: ClockTime) -> float:
    """Absolute hours between workday and free-day mid-sleep."""
    return abs(mid_sleep_workday.signed_hours_to(mid_sleep_freeday))


def score_mctq(workday: MCTQDay, freeday: MCTQDay) -> MCTQResult:
    """Derive MCTQ metrics from workday and free-day sleep timing."""
    onset_work = calculate_sleep_onset(
        workday.bedtime, workday.sleep_prep_minutes, workday.sleep_latency_minutes
    )
    onset_free = calculate_sleep_onset(
        freeday.bedtime, freeday.sleep_prep_minutes, freeday.sleep_latency_minutes
    )
    duration_work = calculate_sleep_duration(onset_work, workday.wake_time)
    duration_free = calculate_sleep_duration(onset_free, freeday.wake_time)
    mid_work = calculate_mid_sleep(onset_work, workday.wake_time)
    mid_free = calculate_mid_sleep(onset_free, freeday.wake_time)

    if freeday.uses_alarm:
        # MSFsc assumes free-day sleep ends spontaneously
        logger.info("Free-day wake uses an alarm; MSFsc may underestimate lateness")

    return MCTQResult(
        sleep_onset_workday=onset_work,
        sleep_onset_freeday=onset_free,
        sleep_duration_workday=duration_work,
        sleep_duration_freeday=duration_free,
        mid_sleep_workday=mid_work,
        mid_sleep_freeday=mid_free,
        msfsc=calculate_msfsc(duration_work, duration_free, mid_free),
        social_jet_lag=calculate_social_jet_lag(mid_work, mid_free),
    )


def msfsc_decimal_hours(msfsc: ClockTime) -> float:
    """
    MSFsc as hours after midnight, negative before midnight.

    23:30 reads as -0.5 (an extreme early sleeper), not 23.5.
    """
    return MSFSC_CENTER.hours + MSFSC_CENTER.signed_hours_to(msfsc)


def chronotype_from_msfsc(msfsc: ClockTime) -> ChronotypeCategory:
    """Classify from MSFsc alone using population cut-points."""
    hours = msfsc_decimal_hours(msfsc)
    for upper_bound, category in MSFSC_BANDS:
        if hours < upper_bound:
            return category
    return "definite_evening"


def estimate_meq_from_msfsc(msfsc: ClockTime) -> int:
    """MEQ-equivalent score for an MSFsc (-10 points per hour), clamped to 16-86."""
    offset = msfsc_decimal_hours(msfsc) - MSFSC_ANCHOR_HOURS
    estimated = MEQ_AT_MSFSC_ANCHOR + offset * MEQ_PER_MSFSC_HOUR
    return max(MEQ_MIN_SCORE, min(MEQ_MAX_SCORE, round(estimated)))


def describe_chronotype(chronotype: ChronotypeCategory) -> str:
    return CHRONOTYPE_DESCRIPTIONS[chronotype]


def build_chronotype_profile(
    habitual_bedtime: ClockTime,
    habitual_wake_time: ClockTime,
    meq_score: int | None = None,
    meq_responses: Sequence[MEQResponse] | None = None,
    mctq: MCTQResult | None = None,
    workday: MCTQDay | None = None,
    freeday: MCTQDay | None = None,
    msfsc: ClockTime | None = None,
    sleep_latency: int = DEFAULT_SLEEP_LATENCY_MINUTES,
    classifier: ChronotypeClassifier = _default_classifier,
) -> ChronotypeProfile:
    """
    Build a full profile from whatever assessment data is available.

    MEQ can be given as raw responses or a precomputed score; MCTQ as
    workday/free-day timing, a scored result, or a bare MSFsc.

    Raises:
        ValidationError: On a malformed MEQ response set
        ScoreOutOfRangeError: If the MEQ score is outside [16, 86]
    """
    if meq_responses is not None:
        meq_score = classifier.score_meq(meq_responses)
    if meq_score is not None and not MEQ_MIN_SCORE <= meq_score <= MEQ_MAX_SCORE:
        raise ScoreOutOfRangeError(meq_score, MEQ_MIN_SCORE, MEQ_MAX_SCORE)

    if mctq is None and workday is not None and freeday is not None:
        mctq = score_mctq(workday, freeday)
    if mctq is not None:
        msfsc = mctq.msfsc

    chronotype = classifier.classify_combined(meq_score, msfsc)
    markers = estimate_circadian_markers(
        meq_score=meq_score,
        msfsc=msfsc,
        habitual_bedtime=habitual_bedtime,
        habitual_wake_time=habitual_wake_time,
        sleep_latency=sleep_latency,
    )

    if mctq is not None:
        average_sleep = round(
            (
                mctq.sleep_duration_workday * WORKDAYS_PER_WEEK
                + mctq.sleep_duration_freeday * FREEDAYS_PER_WEEK
            )
            / (WORKDAYS_PER_WEEK + FREEDAYS_PER_WEEK)
        )
    else:
        average_sleep = round(habitual_bedtime.hours_until(habitual_wake_time) * 60)

    method: AssessmentMethod
    if meq_score is not None and msfsc is not None:
        method = "BOTH"
    elif meq_score is not None:
        method = "MEQ"
    elif msfsc is not None:
        method = "MCTQ"
    else:
        method = "NONE"
        logger.info("No questionnaire data; chronotype defaults to intermediate")

    return ChronotypeProfile(
        chronotype=chronotype,
        estimated_dlmo=markers.dlmo,
        estimated_cbtmin=markers.cbtmin,
        habitual_bedtime=habitual_bedtime,
        habitual_wake_time=habitual_wake_time,
        average_sleep_duration=average_sleep,
        meq_score=meq_score,
        msfsc=msfsc,
        workday_bedtime=workday.bedtime if workday else None,
        workday_wake_time=workday.wake_time if workday else None,
        freeday_bedtime=freeday.bedtime if freeday else None,
        freeday_wake_time=freeday.wake_time if freeday else None,
        assessment_method=method,
        marker_confidence=markers.confidence,
    )
