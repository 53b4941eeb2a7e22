"""
Intervention planner for non-flight days.

Plans each day's interventions from the current bed/wake times, CBTmin
and travel direction:
1. Light seek/avoid windows (always)
2. Sleep window, with nap guidance on hard days (always)
3. Breakfast, lunch, dinner with organ-clock messaging (always)
4. Exercise with chronotype-specific guidance (always)
5. Caffeine, melatonin, creatine (by preference)

Also writes each day's summary and tips. Flight day is handled by
flight_day.py.
"""

from dataclasses import dataclass

from ..circadian_math import ClockTime
from ..config import EngineConfig
from ..science.prc import Stimulus
from ..types import (
    CaffeineDetails,
    ChronotypeCategory,
    CreatineDetails,
    DayPhase,
    ExerciseDetails,
    Intervention,
    LightDetails,
    MealDetails,
    MelatoninDetails,
    NapWindow,
    SleepDetails,
    TripDirection,
    UserPreferences,
)

MORNING_TYPES: frozenset[ChronotypeCategory] = frozenset({"definite_morning", "moderate_morning"})
EVENING_TYPES: frozenset[ChronotypeCategory] = frozenset({"definite_evening", "moderate_evening"})

# Latest end of eastward morning light, and earliest start of westward evening light
MORNING_LIGHT_LATEST_END = 12.0
EVENING_LIGHT_EARLIEST_START = 17.0
EARLIEST_AFTERNOON_EXERCISE = 13.0

# Nap guidance: a short nap 5-7h after waking, on the hardest days only
NAP_AFTER_WAKE_HOURS = (5.0, 7.0)
NAP_MAX_MINUTES = 20


@dataclass
class PlannerContext:
    """Trip-wide inputs that stay fixed from day to day."""

    direction: TripDirection
    chronotype: ChronotypeCategory
    timezone_shift_hours: float
    preferences: UserPreferences
    config: EngineConfig


@dataclass(frozen=True)
class DayState:
    """Where the traveler is on a given day."""

    day_number: int
    phase: DayPhase
    bedtime: ClockTime
    wake_time: ClockTime
    cbtmin: ClockTime
    progress: int  # 0-100


def evening_hours(t: ClockTime) -> float:
    """
    Decimal hours, counting times before noon as after midnight (24+).

    Bedtimes like 00:30 belong to the previous evening, so "bed - 4h"
    should land at 20:30, not wrap to a morning time.
    """
    return t.hours if t.hours >= 12 else t.hours + 24


class InterventionPlanner:
    """
    Build one non-flight day's interventions.

    Each generator is a fixed formula over the day's bed/wake times and
    the travel direction; nothing here looks at other days.
    """

    def __init__(self, context: PlannerContext):
        self.context = context
        self.eastward = context.direction == "eastward"

    def plan_day(self, day: DayState) -> list[Intervention]:
        """
        Interventions for one day, sorted by start time.

        Args:
            day: The day's phase label and current bed/wake/CBTmin

        Returns:
            Sorted list of Intervention objects (ids unset)
        """
        preferences = self.context.preferences
        interventions = self._plan_light(day)
        interventions.append(self._plan_sleep(day))
        interventions.extend(self._plan_meals(day))
        interventions.append(self._plan_exercise(day))

        if preferences.caffeine_user:
            interventions.append(self._plan_caffeine(day))
        if preferences.uses_melatonin:
            interventions.append(self._plan_melatonin(day))
        if preferences.uses_creatine and day.phase in ("arrival_day", "active_adjustment"):
            interventions.append(self._plan_creatine(day))

        return sort_by_start(interventions)

    def _plan_light(self, day: DayState) -> list[Intervention]:
        wake = day.wake_time
        bed = day.bedtime

        if self.eastward:
            if wake.hours < MORNING_LIGHT_LATEST_END:
                end = ClockTime.from_hours(min(wake.hours + 2, MORNING_LIGHT_LATEST_END))
            else:
                end = wake.shift(2)
            return [
                Intervention(
                    type="light_seek",
                    start_time=wake,
                    end_time=end,
                    duration=60,
                    title="Morning Bright Light",
                    description=(
                        "Get 30-60 min of bright outdoor light shortly after waking. This is "
                        "your most powerful tool for advancing your body clock."
                    ),
                    rationale=(
                        "Light after your core body temperature minimum advances your brain "
                        "clock (SCN). Up to ~2h of advance per day is possible with good timing."
                    ),
                    details=LightDetails(
                        intensity="bright",
                        source="outdoor",
                        lux_target=10000,
                        outdoor_preferred=True,
                    ),
                    priority="critical",
                ),
                Intervention(
                    type="light_avoid",
                    start_time=bed.shift(-3),
                    end_time=bed,
                    title="Evening Light Avoidance",
                    description=(
                        "Dim the lights, avoid screens and wear blue-light blocking glasses. "
                        "Critical for eastward adjustment."
                    ),
                    rationale=(
                        "Evening light delays your clock, the opposite of what eastward travel "
                        "needs. Avoiding it protects the gains from morning light."
                    ),
                    details=LightDetails(
                        intensity="dim",
                        source="blue_light_glasses",
                        lux_target=50,
                        blue_blockers_recommended=True,
                    ),
                    priority="critical",
                ),
            ]

        bed_hours = evening_hours(bed)
        return [
            Intervention(
                type="light_seek",
                start_time=ClockTime.from_hours(max(EVENING_LIGHT_EARLIEST_START, bed_hours - 4)),
                end_time=bed.shift(-1),
                duration=60,
                title="Evening Bright Light",
                description=(
                    "Get bright light in the late afternoon or evening to delay your body clock."
                ),
                rationale=(
                    "Light before your temperature minimum delays your brain clock, helping "
                    "you stay awake later to match a westward destination."
                ),
                details=LightDetails(
                    intensity="bright",
                    source="outdoor",
                    lux_target=10000,
                    outdoor_preferred=True,
                ),
                priority="critical",
            ),
            Intervention(
                type="light_avoid",
                start_time=wake,
                end_time=wake.shift(2),
                title="Morning Light Avoidance",
                description="Wear sunglasses outdoors for 2h after waking and avoid bright light.",
                rationale=(
                    "Morning light would advance your clock and undo your westward "
                    "adjustment. Sunglasses block most of it."
                ),
                details=LightDetails(intensity="dim", source="sunglasses", lux_target=500),
                priority="recommended",
            ),
        ]

    def _plan_sleep(self, day: DayState) -> Intervention:
        bed = day.bedtime
        wake = day.wake_time
        duration = round(bed.hours_until(wake) * 60)

        description = f"Target bed: {bed}, wake: {wake} ({round(duration / 60)}h sleep)."
        if day.phase == "arrival_day":
            description += " Push through fatigue to reach this schedule; it speeds adjustment."

        nap_allowed = self.context.preferences.include_nap_guidance and day.phase in (
            "arrival_day",
            "active_adjustment",
        )
        nap_window = None
        if nap_allowed:
            start_after, end_after = NAP_AFTER_WAKE_HOURS
            nap_window = NapWindow(
                start=wake.shift(start_after),
                end=wake.shift(end_after),
                max_duration=NAP_MAX_MINUTES,
            )

        return Intervention(
            type="sleep",
            start_time=bed,
            end_time=wake,
            duration=duration,
            title="Sleep Window",
            description=description,
            rationale=(
                "Consistent sleep timing is one of the strongest time cues. Your brain clock "
                "and your organ clocks all respond to it."
            ),
            details=SleepDetails(
                target_bedtime=bed,
                target_wake_time=wake,
                sleep_duration=duration,
                nap_allowed=nap_allowed,
                nap_window=nap_window,
            ),
            priority="critical",
        )

    def _plan_meals(self, day: DayState) -> list[Intervention]:
        breakfast = day.wake_time.shift(0.5)
        lunch = day.wake_time.shift(5)
        dinner = day.bedtime.shift(-3.5)

        return [
            Intervention(
                type="meal",
                start_time=breakfast,
                duration=30,
                title="Breakfast (Anchor Meal)",
                description=(
                    f"Eat a protein-rich breakfast at {breakfast}. This is the most important "
                    "meal for adjustment; it sets your liver, pancreas and gut clocks."
                ),
                rationale=(
                    "Your organ clocks respond most strongly to the first meal of the day. "
                    "A consistent breakfast aligns your whole circadian system, not just "
                    "your brain clock."
                ),
                details=MealDetails(
                    meal_type="breakfast",
                    anchor_meal=True,
                    composition="protein-rich",
                    notes="Include eggs, yogurt or other protein. Avoid sugary cereal on its own.",
                ),
                priority="recommended",
            ),
            Intervention(
                type="meal",
                start_time=lunch,
                duration=45,
                title="Lunch",
                description=f"Lunch at {lunch}. Keep meal spacing consistent.",
                rationale="Regular meal timing maintains metabolic rhythms.",
                details=MealDetails(
                    meal_type="lunch",
                    anchor_meal=False,
                    composition="balanced",
                    notes="Protein, carbs and vegetables.",
                ),
                priority="optional",
            ),
            Intervention(
                type="meal",
                start_time=dinner,
                duration=60,
                title="Dinner (Early)",
                description=(
                    f"Finish dinner by {dinner}. This gives your digestive system time to "
                    "wind down."
                ),
                rationale=(
                    "Late eating leaves your gut and liver clocks behind while your brain "
                    "clock moves. An early dinner improves sleep and speeds adjustment."
                ),
                details=MealDetails(
                    meal_type="dinner",
                    anchor_meal=False,
                    composition="light",
                    notes="Moderate portions. Avoid heavy, fatty food.",
                ),
                priority="recommended",
            ),
        ]

    def _plan_exercise(self, day: DayState) -> Intervention:
        """
        Morning exercise advances every chronotype, so eastward always uses it.

        Evening exercise delays morning types but can advance evening types,
        so westward morning types are pointed at early afternoon instead.
        """
        chronotype = self.context.chronotype
        arrival = day.phase == "arrival_day"

        if self.eastward:
            start = day.wake_time.shift(1)
            end = day.wake_time.shift(2.5)
            title = "Morning Exercise (Phase Advance)"
            heart_rate = "60-75% max HR (Zone 2-3)"
            description = (
                f"Exercise {start}-{end}. Moderate cardio (walking, cycling, swimming) at "
                f"{heart_rate}. Outdoors is ideal since it adds light."
            )
            rationale = (
                "Morning exercise advances the clock by ~0.6h for all chronotypes "
                "(Youngstedt 2019). With morning light it reinforces eastward adjustment."
            )
            if chronotype in EVENING_TYPES:
                description += (
                    " As an evening type, morning exercise will feel harder but helps you "
                    "advance the most."
                )
        else:
            start = day.bedtime.shift(-5)
            end = day.bedtime.shift(-3)
            title = "Late Afternoon Exercise (Phase Delay)"
            heart_rate = "60-75% max HR"
            description = (
                f"Exercise {start}-{end}. Moderate cardio at {heart_rate}. "
                "Stop at least 3h before bed."
            )
            rationale = (
                "Evening exercise delays the clock. Morning chronotypes may see less delay "
                "or even an advance, so they should favor the afternoon."
            )
            if chronotype in MORNING_TYPES:
                afternoon = ClockTime.from_hours(
                    max(EARLIEST_AFTERNOON_EXERCISE, evening_hours(day.bedtime) - 7)
                )
                description += (
                    f" As a morning type, early afternoon exercise (~{afternoon}) may work "
                    "better and still delays your clock."
                )

        intensity = "moderate"
        if arrival:
            intensity = "light"
            heart_rate = "50-60% max HR (Zone 1-2)"
            description += " Keep it light today; your body is still adjusting."

        return Intervention(
            type="exercise",
            start_time=start,
            end_time=end,
            duration=30,
            title=title,
            description=description,
            rationale=rationale,
            details=ExerciseDetails(
                intensity=intensity,
                preferred_timing="morning" if self.eastward else "evening",
                duration=30,
                outdoor_preferred=True,
                examples=(
                    "30 min brisk walk outdoors",
                    "Light jog or cycling",
                    "Swimming",
                    f"Target: {heart_rate}",
                ),
            ),
            priority="recommended",
        )

    def _plan_caffeine(self, day: DayState) -> Intervention:
        config = self.context.config
        cutoff_hours = max(
            config.caffeine_cutoff_hours, self.context.preferences.caffeine_cutoff_hours
        )
        cutoff_decimal = min(evening_hours(day.bedtime) - cutoff_hours, config.latest_caffeine_hour)
        cutoff = ClockTime.from_hours(cutoff_decimal)
        start = day.wake_time.shift(0.5)
        second_cup = ClockTime.from_hours(min(day.wake_time.hours + 4, cutoff_decimal - 1))

        return Intervention(
            type="caffeine",
            start_time=start,
            end_time=cutoff,
            title="Caffeine Window",
            description=(
                f"Coffee or tea is fine from {start} until {cutoff}. "
                f"No caffeine after {cutoff}; treat it as a strict cutoff."
            ),
            rationale=(
                "Caffeine has a 5-6h half-life. Late caffeine delays sleep onset by 40+ "
                "minutes and cuts deep sleep, which slows adjustment."
            ),
            details=CaffeineDetails(
                allowed=True,
                cutoff_time=cutoff,
                max_intake_before_cutoff="400mg (about 4 cups)",
                recommended_times=(start, second_cup),
            ),
            priority="recommended",
        )

    def _plan_melatonin(self, day: DayState) -> Intervention:
        config = self.context.config
        dose = self.context.preferences.melatonin_dose

        if self.eastward:
            timing = day.bedtime.shift(-config.melatonin_hours_before_bed)
            description = (
                f"Take {dose:g}mg melatonin at {timing} ({config.melatonin_hours_before_bed:g}h "
                "before bed). Low doses (0.5mg) shift the clock as well as higher ones."
            )
            rationale = (
                "Melatonin in the late afternoon or early evening advances your clock. Its "
                "effect adds to morning light; together they give the largest shifts."
            )
        else:
            # Estimated wake (bed + sleep) plus the delay-peak offset
            timing = day.bedtime.shift(
                -config.assumed_sleep_hours + config.westward_melatonin_after_wake
            )
            description = (
                f"Take {dose:g}mg melatonin in the morning (~{timing}). This helps delay "
                "your clock for westward travel."
            )
            rationale = (
                "Morning melatonin delays the clock, helping you stay awake later at a "
                "westward destination."
            )

        return Intervention(
            type="melatonin",
            start_time=timing,
            title="Melatonin",
            description=description,
            rationale=rationale,
            details=MelatoninDetails(dose=dose, timing=timing, formulation="immediate"),
            priority="recommended" if self.eastward else "optional",
        )

    def _plan_creatine(self, day: DayState) -> Intervention:
        dose = self.context.preferences.creatine_dose
        timing = day.wake_time.shift(1)
        description = (
            f"Take {dose:g}g creatine with breakfast (~{timing}). Stay well hydrated all day."
        )
        if day.phase == "arrival_day":
            description += (
                " Creatine measurably improves cognitive performance during sleep deprivation."
            )

        return Intervention(
            type="creatine",
            start_time=timing,
            title="Creatine",
            description=description,
            rationale=(
                "A 2024 study found creatine improved processing speed by 24.5% and "
                "short-term memory during sleep deprivation by supporting brain energy "
                "metabolism."
            ),
            details=CreatineDetails(dose=dose, timing=timing, with_meal=True),
            priority="recommended"
            if day.phase in ("arrival_day", "active_adjustment")
            else "optional",
        )


def sort_by_start(interventions: list[Intervention]) -> list[Intervention]:
    """Pinned first, then by clock time."""
    return sorted(interventions, key=lambda i: (0 if i.pinned else 1, i.start_time.minutes))


def stimuli_for(interventions: list[Intervention]) -> list[Stimulus]:
    """Light-seek, melatonin and exercise interventions as PRC stimuli."""
    stimuli = []
    for intervention in interventions:
        if intervention.type == "light_seek":
            stimuli.append(
                Stimulus("light", intervention.start_time, duration_minutes=intervention.duration)
            )
        elif intervention.type == "exercise":
            stimuli.append(
                Stimulus("exercise", intervention.start_time, duration_minutes=intervention.duration)
            )
        elif intervention.type == "melatonin":
            stimuli.append(
                Stimulus("melatonin", intervention.start_time, dose_mg=intervention.details.dose)
            )
    return stimuli


# =============================================================================
# Summaries and tips
# =============================================================================


def day_summary(day_number: int, phase: DayPhase, direction: TripDirection, progress: int) -> str:
    eastward = direction == "eastward"
    if phase == "pre_adjustment":
        shift = "earlier" if eastward else "later"
        return (
            f"Pre-Departure Day {abs(day_number)}: Shift sleep and meals 30 min {shift}. "
            "Light and melatonin as scheduled."
        )
    if phase == "flight_day":
        return "Travel Day: Think in destination time. Sleep and eat on the destination schedule."
    if phase == "arrival_day":
        return "Arrival Day: Commit fully to local time. Morning light is critical. Push through fatigue."
    if phase == "active_adjustment":
        focus = "Morning light + early meals." if eastward else "Evening light + later schedule."
        return f"Adjustment Day ({progress}% complete): Stay consistent. {focus}"
    if phase == "fine_tuning":
        return "Fine Tuning: Almost adjusted. Lock in your new rhythm with consistent timing."
    return "Adjusted: Your circadian system is synchronized. Keep to local timing."


def day_tips(phase: DayPhase, direction: TripDirection, progress: int) -> list[str]:
    """Tips for every phase except arrival day (see arrival_day_tips)."""
    tips = []
    if phase == "pre_adjustment":
        shift = "earlier" if direction == "eastward" else "later"
        tips.append(f"Shift your schedule 30 min {shift} today.")
        tips.append("Move both sleep and meal times; that keeps brain and organ clocks together.")
        if direction == "eastward":
            tips.append("Take melatonin in the late afternoon to boost the phase advance.")
    elif phase == "active_adjustment":
        if progress < 50:
            tips.append("The first few days are the hardest. Light is your best tool.")
            tips.append("Grogginess and stomach upset are normal while organ clocks catch up.")
        else:
            tips.append("Past the midpoint. Consistency now locks in your new rhythm.")
    elif phase == "fine_tuning":
        tips.append("Almost there. Keep sleep and meal times consistent.")
        tips.append("Your liver and gut clocks are nearly aligned.")
    elif phase == "adjusted":
        tips.append("Fully adjusted. Keep regular timing to stay synchronized.")
    return tips


def arrival_day_tips(direction: TripDirection, timezone_shift_hours: float) -> list[str]:
    tips = [
        "Several body clocks need to realign: your brain (SCN) adjusts fastest through "
        "light (~1-2 days), while your liver, gut and muscle clocks take 3-5 days and "
        "follow meals and exercise."
    ]
    if direction == "eastward":
        tips.append("Get morning light even if you're exhausted. It's the single most powerful step.")
        tips.append("Eat breakfast at local time even if you aren't hungry; your gut and liver need the cue.")
        tips.append("Avoid napping before 2 PM local time. If you must nap, keep it to 20 minutes.")
    else:
        tips.append("Seek evening light to delay your clock. Stay active until local bedtime.")
        tips.append("If you arrived in the evening, push through to local bedtime.")
        tips.append("A short nap (20 min max) is fine if you're struggling, but not within 5h of bedtime.")

    shift = abs(timezone_shift_hours)
    if shift >= 8:
        tips.append(
            f"Large shift ({shift:g}h): expect 5-7 days for full adjustment. Your gut and "
            'liver will feel "off" for several days, which is normal.'
        )
    return tips
