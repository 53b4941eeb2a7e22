"""
Phase Response Curves for circadian interventions.

Scientific basis:
- Light PRC: Khalsa SBS et al. (2003). J Physiol, 549(3), 945-952.
- Melatonin PRC: Burgess HJ et al. (2010). J Clin Endocrinol Metab, 95(7), 3325-3331.
- Exercise PRC: Youngstedt SD et al. (2019). J Physiol, 597(8), 2253-2268.

Circadian time (CT) is measured in hours after CBTmin:
- CT 0 = CBTmin (typically ~4-5 AM)
- Positive phase shift = advance (earlier sleep/wake)
- Negative phase shift = delay (later sleep/wake)

Curves are immutable sample tables. The engine takes a PRCSet so an
alternate research dataset can be swapped in without touching the logic.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal

from ..circadian_math import ClockTime
from ..types import ShiftDirection, TimeWindow

logger = logging.getLogger(__name__)

Zeitgeber = Literal["light", "melatonin", "exercise"]
EffectDirection = Literal["advance", "delay", "neutral"]

# Effects smaller than this are reported as neutral
EFFECT_EPSILON = 0.1

# Physiological ceiling on total shift per day (hours)
MAX_DAILY_SHIFT = 3.0

# Melatonin dose normalization: 0.5mg is the reference dose, doubling caps out
REFERENCE_MELATONIN_DOSE = 0.5
MAX_DOSE_FACTOR = 2.0


@dataclass(frozen=True)
class PhaseResponseCurve:
    """
    Piecewise-linear PRC sampled over one circadian cycle.

    Samples must start at CT 0, end at CT 24, and increase strictly.
    Lookups wrap modulo 24, so CT 25 reads the same as CT 1.
    """

    zeitgeber: Zeitgeber
    points: tuple[tuple[float, float], ...]  # (circadian_time, phase_shift)
    peak_advance_time: float  # CT of maximum advance
    peak_delay_time: float  # CT of maximum delay
    dead_zone: tuple[float, float]  # CT interval with negligible effect

    def __post_init__(self):
        if len(self.points) < 2:
            raise ValueError(f"{self.zeitgeber} PRC needs at least two samples")
        if self.points[0][0] != 0 or self.points[-1][0] != 24:
            raise ValueError(f"{self.zeitgeber} PRC must span CT 0 to CT 24")
        for (ct_a, _), (ct_b, _) in zip(self.points, self.points[1:]):
            if ct_b <= ct_a:
                raise ValueError(f"{self.zeitgeber} PRC samples must increase in CT")

    def shift_at(self, circadian_time: float) -> float:
        """Interpolated phase shift (hours) at a circadian time."""
        ct = circadian_time % 24
        for (ct_a, shift_a), (ct_b, shift_b) in zip(self.points, self.points[1:]):
            if ct_a <= ct < ct_b:
                t = (ct - ct_a) / (ct_b - ct_a)
                return shift_a + t * (shift_b - shift_a)
        # Only reachable for CT exactly 24, which wraps to sample 0
        return self.points[0][1]

    def in_dead_zone(self, circadian_time: float) -> bool:
        start, end = self.dead_zone
        return start <= circadian_time % 24 <= end


LIGHT_PRC = PhaseResponseCurve(
    zeitgeber="light",
    points=(
        (0, 0.0),  # CBTmin - crossover point
        (1, 1.5),
        (2, 2.5),
        (3, 2.8),  # Peak advance 2-4h after CBTmin
        (4, 2.5),
        (5, 2.0),
        (6, 1.5),
        (7, 1.0),
        (8, 0.5),
        (9, 0.2),
        (10, 0.0),  # Dead zone
        (11, 0.0),
        (12, 0.0),
        (13, 0.0),
        (14, -0.1),
        (15, -0.3),
        (16, -0.8),
        (17, -1.2),
        (18, -1.8),
        (19, -2.2),
        (20, -2.5),  # Peak delay ~4h before CBTmin
        (21, -2.3),
        (22, -1.8),
        (23, -1.0),
        (24, 0.0),
    ),
    peak_advance_time=3,
    peak_delay_time=20,
    dead_zone=(10, 14),
)

# Roughly the mirror of light: evening melatonin advances, morning delays
MELATONIN_PRC = PhaseResponseCurve(
    zeitgeber="melatonin",
    points=(
        (0, 0.0),
        (1, -0.3),
        (2, -0.5),
        (3, -0.8),
        (4, -1.0),  # Peak delay in the morning
        (5, -0.8),
        (6, -0.5),
        (7, -0.2),
        (8, 0.0),
        (9, 0.0),
        (10, 0.0),
        (11, 0.1),
        (12, 0.3),
        (13, 0.5),
        (14, 0.8),
        (15, 1.0),
        (16, 1.3),
        (17, 1.5),  # Peak advance 5-6h before habitual bedtime
        (18, 1.4),
        (19, 1.2),
        (20, 0.8),
        (21, 0.5),
        (22, 0.2),
        (23, 0.0),
        (24, 0.0),
    ),
    peak_advance_time=17,
    peak_delay_time=4,
    dead_zone=(8, 11),
)

EXERCISE_PRC = PhaseResponseCurve(
    zeitgeber="exercise",
    points=(
        (0, 0.0),
        (2, 0.8),
        (4, 1.2),  # Morning exercise advances
        (6, 0.8),
        (8, 0.3),
        (10, 0.0),
        (12, 0.0),
        (14, 0.0),
        (16, -0.2),
        (18, -0.5),
        (20, -0.8),  # Evening exercise delays
        (22, -0.5),
        (24, 0.0),
    ),
    peak_advance_time=4,
    peak_delay_time=20,
    dead_zone=(10, 16),
)


@dataclass(frozen=True)
class PRCSet:
    """The three curves the engine consults."""

    light: PhaseResponseCurve = LIGHT_PRC
    melatonin: PhaseResponseCurve = MELATONIN_PRC
    exercise: PhaseResponseCurve = EXERCISE_PRC

    def curve_for(self, zeitgeber: Zeitgeber) -> PhaseResponseCurve:
        return getattr(self, zeitgeber)


DEFAULT_PRC_SET = PRCSet()


@dataclass(frozen=True)
class PhaseEffect:
    """Result of applying a stimulus at a clock time."""

    direction: EffectDirection
    magnitude: float  # hours, always >= 0
    in_dead_zone: bool = False

    @property
    def signed_shift(self) -> float:
        if self.direction == "advance":
            return self.magnitude
        if self.direction == "delay":
            return -self.magnitude
        return 0.0


@dataclass(frozen=True)
class WindowPair:
    """When to apply a stimulus and when to keep away from it."""

    seek: TimeWindow
    avoid: TimeWindow


@dataclass(frozen=True)
class OptimalWindows:
    direction: ShiftDirection
    light: WindowPair
    melatonin: WindowPair
    exercise: WindowPair


@dataclass(frozen=True)
class Stimulus:
    """A single timed zeitgeber exposure for daily-shift estimation."""

    zeitgeber: Zeitgeber
    time: ClockTime
    duration_minutes: int | None = None  # light and exercise
    dose_mg: float | None = None  # melatonin


@dataclass(frozen=True)
class DailyShiftEstimate:
    total_shift: float  # hours, absolute
    direction: ShiftDirection
    clamped: bool = False


@dataclass(frozen=True)
class ZeitgeberRecommendation:
    zeitgeber: Literal["light", "melatonin", "exercise", "meals"]
    action: Literal["seek", "avoid", "take", "do"]
    window: TimeWindow
    expected_effect: ShiftDirection
    magnitude: float
    priority: Literal["high", "medium", "low"]
    notes: str = ""


def clock_to_circadian_time(clock_time: ClockTime, cbtmin: ClockTime) -> float:
    """Hours since CBTmin, in [0, 24)."""
    return cbtmin.hours_until(clock_time)


def circadian_to_clock_time(circadian_time: float, cbtmin: ClockTime) -> ClockTime:
    return cbtmin.shift(circadian_time)


def phase_shift_at(curve: PhaseResponseCurve, circadian_time: float) -> float:
    """Interpolated shift of a curve at a circadian time, wrapping modulo 24."""
    return curve.shift_at(circadian_time)


class PhaseResponseEngine:
    """
    Answer "what does stimulus X at clock time Y do?" and its inverse.

    Pure science: no flight awareness or practical constraints. The
    scheduling layer decides what is practical.
    """

    # Light windows (hours relative to CBTmin)
    LIGHT_ADVANCE_SEEK = (1, 5)
    LIGHT_ADVANCE_AVOID = (-8, -2)
    LIGHT_DELAY_SEEK = (-8, -4)
    LIGHT_DELAY_AVOID = (1, 5)

    # Melatonin and exercise windows are centered on the curve peak
    PEAK_HALF_WIDTH = 2

    def __init__(
        self,
        prcs: PRCSet = DEFAULT_PRC_SET,
        effect_epsilon: float = EFFECT_EPSILON,
        max_daily_shift: float = MAX_DAILY_SHIFT,
    ):
        self.prcs = prcs
        self.effect_epsilon = effect_epsilon
        self.max_daily_shift = max_daily_shift

    def effect_at(
        self, zeitgeber: Zeitgeber | PhaseResponseCurve, clock_time: ClockTime, cbtmin: ClockTime
    ) -> PhaseEffect:
        """
        Phase effect of a stimulus at a clock time.

        Args:
            zeitgeber: "light", "melatonin", "exercise", or a curve to use directly
            clock_time: When the stimulus is applied
            cbtmin: Current CBTmin

        Returns:
            PhaseEffect, neutral if below epsilon or inside the dead zone
        """
        if isinstance(zeitgeber, PhaseResponseCurve):
            curve = zeitgeber
        else:
            curve = self.prcs.curve_for(zeitgeber)
        ct = clock_to_circadian_time(clock_time, cbtmin)
        shift = curve.shift_at(ct)
        in_dead_zone = curve.in_dead_zone(ct)

        if abs(shift) < self.effect_epsilon or in_dead_zone:
            return PhaseEffect(direction="neutral", magnitude=0.0, in_dead_zone=in_dead_zone)

        return PhaseEffect(
            direction="advance" if shift > 0 else "delay",
            magnitude=abs(shift),
            in_dead_zone=False,
        )

    def optimal_window_for(self, direction: ShiftDirection, cbtmin: ClockTime) -> OptimalWindows:
        """
        Clock-time windows to seek and to avoid for each curve.

        Args:
            direction: Desired shift ("advance" or "delay")
            cbtmin: Current CBTmin

        Returns:
            OptimalWindows with a seek/avoid pair per zeitgeber
        """
        if direction == "advance":
            light_seek, light_avoid = self.LIGHT_ADVANCE_SEEK, self.LIGHT_ADVANCE_AVOID
            light_peak = self.prcs.light.peak_advance_time
        else:
            light_seek, light_avoid = self.LIGHT_DELAY_SEEK, self.LIGHT_DELAY_AVOID
            light_peak = self.prcs.light.peak_delay_time

        light = WindowPair(
            seek=self._window(cbtmin, *light_seek, peak=light_peak),
            avoid=self._window(cbtmin, *light_avoid),
        )
        return OptimalWindows(
            direction=direction,
            light=light,
            melatonin=self._peak_windows(self.prcs.melatonin, direction, cbtmin),
            exercise=self._peak_windows(self.prcs.exercise, direction, cbtmin),
        )

    def _peak_windows(
        self, curve: PhaseResponseCurve, direction: ShiftDirection, cbtmin: ClockTime
    ) -> WindowPair:
        if direction == "advance":
            seek_peak, avoid_peak = curve.peak_advance_time, curve.peak_delay_time
        else:
            seek_peak, avoid_peak = curve.peak_delay_time, curve.peak_advance_time
        half = self.PEAK_HALF_WIDTH
        return WindowPair(
            seek=self._window(cbtmin, seek_peak - half, seek_peak + half, peak=seek_peak),
            avoid=self._window(cbtmin, avoid_peak - half, avoid_peak + half, peak=avoid_peak),
        )

    @staticmethod
    def _window(
        cbtmin: ClockTime, start_ct: float, end_ct: float, peak: float | None = None
    ) -> TimeWindow:
        return TimeWindow(
            start=circadian_to_clock_time(start_ct, cbtmin),
            end=circadian_to_clock_time(end_ct, cbtmin),
            peak=circadian_to_clock_time(peak, cbtmin) if peak is not None else None,
        )

    def expected_daily_shift(
        self, stimuli: Iterable[Stimulus], cbtmin: ClockTime
    ) -> DailyShiftEstimate:
        """
        Sum the weighted effect of a day's stimuli.

        Light and exercise scale with duration (1h reference), melatonin with
        dose (0.5mg reference, capped at 2x). The total is clamped to the
        daily ceiling.
        """
        total = 0.0
        for stimulus in stimuli:
            effect = self.effect_at(stimulus.zeitgeber, stimulus.time, cbtmin)
            if stimulus.zeitgeber == "melatonin":
                factor = (
                    min(stimulus.dose_mg / REFERENCE_MELATONIN_DOSE, MAX_DOSE_FACTOR)
                    if stimulus.dose_mg
                    else 1.0
                )
            else:
                factor = stimulus.duration_minutes / 60 if stimulus.duration_minutes else 1.0
            total += effect.signed_shift * factor

        clamped = max(-self.max_daily_shift, min(self.max_daily_shift, total))
        if clamped != total:
            logger.debug("Daily shift %.2fh clamped to %.2fh", total, clamped)

        return DailyShiftEstimate(
            total_shift=abs(clamped),
            direction="advance" if clamped >= 0 else "delay",
            clamped=clamped != total,
        )

    def zeitgeber_recommendations(
        self,
        cbtmin: ClockTime,
        direction: ShiftDirection,
        enabled: Iterable[str] = ("light", "melatonin", "exercise", "meals"),
    ) -> list[ZeitgeberRecommendation]:
        """
        Science-only recommendations for one day, relative to CBTmin.

        Melatonin is only recommended when advancing.
        """
        enabled = set(enabled)
        windows = self.optimal_window_for(direction, cbtmin)
        opposite: ShiftDirection = "delay" if direction == "advance" else "advance"
        advancing = direction == "advance"
        recommendations = []

        if "light" in enabled:
            recommendations.append(
                ZeitgeberRecommendation(
                    zeitgeber="light",
                    action="seek",
                    window=windows.light.seek,
                    expected_effect=direction,
                    magnitude=2.0,
                    priority="high",
                    notes=(
                        "Seek bright outdoor light in the morning to advance your clock"
                        if advancing
                        else "Seek bright light in the evening to delay your clock"
                    ),
                )
            )
            recommendations.append(
                ZeitgeberRecommendation(
                    zeitgeber="light",
                    action="avoid",
                    window=windows.light.avoid,
                    expected_effect=opposite,
                    magnitude=2.0,
                    priority="high",
                    notes=(
                        "Avoid bright light in the evening to prevent delays"
                        if advancing
                        else "Avoid bright light in the morning to prevent advances"
                    ),
                )
            )

        if "melatonin" in enabled and advancing:
            recommendations.append(
                ZeitgeberRecommendation(
                    zeitgeber="melatonin",
                    action="take",
                    window=windows.melatonin.seek,
                    expected_effect="advance",
                    magnitude=1.0,
                    priority="medium",
                    notes="Take 0.5-1mg melatonin 4-6 hours before target bedtime",
                )
            )

        if "exercise" in enabled:
            recommendations.append(
                ZeitgeberRecommendation(
                    zeitgeber="exercise",
                    action="do",
                    window=windows.exercise.seek,
                    expected_effect=direction,
                    magnitude=0.8,
                    priority="medium",
                    notes=(
                        "Morning exercise reinforces phase advance"
                        if advancing
                        else "Evening exercise reinforces phase delay"
                    ),
                )
            )

        if "meals" in enabled:
            meal_window = (
                self._window(cbtmin, 3, 5) if advancing else self._window(cbtmin, 19, 21)
            )
            recommendations.append(
                ZeitgeberRecommendation(
                    zeitgeber="meals",
                    action="seek" if advancing else "do",
                    window=meal_window,
                    expected_effect=direction,
                    magnitude=0.5,
                    priority="medium",
                    notes=(
                        "Eat breakfast early to anchor peripheral clocks"
                        if advancing
                        else "Shift meals later to support phase delay"
                    ),
                )
            )

        return recommendations
