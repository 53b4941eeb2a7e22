"""
Circadian marker estimation (DLMO and CBTmin).

Scientific basis:
- CBTmin estimation: Czeisler & Gooley (2007)
- DLMO estimation: Burgess et al. (2010)
- MEQ/phase correlation: Kantermann et al. (2015)

Key relationships:
- DLMO occurs ~2 hours before sleep onset
- DLMO occurs ~6 hours before corrected mid-sleep on free days (MSFsc)
- CBTmin occurs ~7 hours after DLMO
- CBTmin occurs ~2.5 hours before habitual wake time

Each estimator is weak on its own, so available estimates are combined
with a circular mean (times near midnight average correctly).
"""

import logging

from ..circadian_math import ClockTime, circular_mean
from ..types import CircadianMarkers, Confidence, MarkerMethod, ShiftDirection, TimeWindow

logger = logging.getLogger(__name__)

# MEQ -> DLMO linear map: score 16 -> 23:30, score 86 -> 19:00
MEQ_MIN_SCORE = 16
MEQ_SCORE_SPAN = 70
DLMO_AT_MIN_MEQ = 23.5
DLMO_MEQ_RANGE = 4.5

# Phase relationships (hours)
DLMO_BEFORE_MSFSC = 6.0
DLMO_BEFORE_SLEEP_ONSET = 2.0
DLMO_TO_CBTMIN = 7.0
CBTMIN_BEFORE_WAKE = 2.5
CBTMIN_TO_SLEEP_OFFSET = 2.0

DEFAULT_SLEEP_LATENCY_MINUTES = 15

# Used when nothing is known about the traveler
DEFAULT_DLMO = ClockTime.parse("21:00")


def estimate_dlmo_from_meq(meq_score: int) -> ClockTime:
    """
    Estimate DLMO from MEQ score.

    Linear between the questionnaire extremes:
    MEQ 16 (extreme evening) -> 23:30, MEQ 86 (extreme morning) -> 19:00.
    """
    hours = DLMO_AT_MIN_MEQ - (meq_score - MEQ_MIN_SCORE) / MEQ_SCORE_SPAN * DLMO_MEQ_RANGE
    return ClockTime.from_hours(hours)


def estimate_dlmo_from_msfsc(msfsc: ClockTime) -> ClockTime:
    """DLMO ~6h before MSFsc (~2h DLMO-to-onset + ~4h onset-to-mid-sleep)."""
    return msfsc.shift(-DLMO_BEFORE_MSFSC)


def estimate_dlmo_from_bedtime(
    bedtime: ClockTime, sleep_latency: int = DEFAULT_SLEEP_LATENCY_MINUTES
) -> ClockTime:
    """
    Estimate DLMO from habitual bedtime.

    Args:
        bedtime: Habitual bedtime
        sleep_latency: Minutes to fall asleep after going to bed

    Returns:
        DLMO = sleep onset - 2h
    """
    sleep_onset = bedtime.shift(sleep_latency / 60)
    return sleep_onset.shift(-DLMO_BEFORE_SLEEP_ONSET)


def estimate_cbtmin_from_dlmo(dlmo: ClockTime) -> ClockTime:
    """CBTmin = DLMO + 7h (mod 24)."""
    return dlmo.shift(DLMO_TO_CBTMIN)


def estimate_cbtmin_from_wake(wake_time: ClockTime) -> ClockTime:
    """CBTmin = wake - 2.5h (mod 24)."""
    return wake_time.shift(-CBTMIN_BEFORE_WAKE)


def advance_window(cbtmin: ClockTime) -> TimeWindow:
    """Light 1-6h after CBTmin advances the clock (peak +2.5h)."""
    return TimeWindow(start=cbtmin.shift(1), end=cbtmin.shift(6), peak=cbtmin.shift(2.5))


def delay_window(cbtmin: ClockTime) -> TimeWindow:
    """Light 4-8h before CBTmin delays the clock (peak -6h)."""
    return TimeWindow(start=cbtmin.shift(-8), end=cbtmin.shift(-4), peak=cbtmin.shift(-6))


def dead_zone(cbtmin: ClockTime) -> TimeWindow:
    """Light has minimal circadian effect from CBTmin+8h to CBTmin-10h."""
    return TimeWindow(start=cbtmin.shift(8), end=cbtmin.shift(-10))


def estimate_circadian_markers(
    meq_score: int | None = None,
    msfsc: ClockTime | None = None,
    habitual_bedtime: ClockTime | None = None,
    habitual_wake_time: ClockTime | None = None,
    sleep_latency: int = DEFAULT_SLEEP_LATENCY_MINUTES,
) -> CircadianMarkers:
    """
    Combine available estimators into a single DLMO/CBTmin estimate.

    Confidence reflects the questionnaire families present: "high" with
    both MEQ and MCTQ, "medium" with one, "low" with neither. Habitual
    times refine the estimate but never raise confidence on their own.

    Args:
        meq_score: MEQ total (16-86), if assessed
        msfsc: Corrected mid-sleep on free days, if assessed
        habitual_bedtime: Usual bedtime
        habitual_wake_time: Usual wake time
        sleep_latency: Minutes to fall asleep

    Returns:
        CircadianMarkers with derived phase windows
    """
    dlmo_estimates: list[ClockTime] = []
    method: MarkerMethod = "direct"
    confidence: Confidence = "low"

    if meq_score is not None:
        dlmo_estimates.append(estimate_dlmo_from_meq(meq_score))
        method = "MEQ"
        confidence = "medium"

    if msfsc is not None:
        dlmo_estimates.append(estimate_dlmo_from_msfsc(msfsc))
        method = "combined" if meq_score is not None else "MCTQ"
        confidence = "high" if meq_score is not None else "medium"

    if habitual_bedtime is not None:
        dlmo_estimates.append(estimate_dlmo_from_bedtime(habitual_bedtime, sleep_latency))

    if dlmo_estimates:
        dlmo = circular_mean(dlmo_estimates)
    else:
        logger.info("No chronotype or schedule data; using default DLMO %s", DEFAULT_DLMO)
        dlmo = DEFAULT_DLMO

    cbtmin = estimate_cbtmin_from_dlmo(dlmo)
    if habitual_wake_time is not None:
        cbtmin = circular_mean([estimate_cbtmin_from_wake(habitual_wake_time), cbtmin])

    return CircadianMarkers(
        dlmo=dlmo,
        cbtmin=cbtmin,
        sleep_onset=dlmo.shift(DLMO_BEFORE_SLEEP_ONSET),
        sleep_offset=cbtmin.shift(CBTMIN_TO_SLEEP_OFFSET),
        advance_window=advance_window(cbtmin),
        delay_window=delay_window(cbtmin),
        dead_zone=dead_zone(cbtmin),
        method=method,
        confidence=confidence,
    )


def calculate_phase_gap(current: ClockTime, target: ClockTime) -> float:
    """
    Shortest signed gap from current to target, in hours [-12, 12).

    Positive means the target is later on the clock.
    """
    return current.signed_hours_to(target)


def determine_shift_direction(timezone_shift_hours: float) -> ShiftDirection:
    """
    Direction that requires the least total shift.

    Positive timezone shift (eastward) means advance, negative means delay,
    but shifts beyond 12h are shorter the other way around the clock.
    """
    effective = timezone_shift_hours
    if effective > 12:
        effective -= 24
    elif effective < -12:
        effective += 24
    return "advance" if effective >= 0 else "delay"
