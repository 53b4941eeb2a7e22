"""
Flight-day interventions.

Renders a FlightTimeline into concrete interventions:
1. Pre-boarding morning light (afternoon/evening departures)
2. Boarding: switch to destination time (pinned first)
3. In-flight sleep windows and the stay-awake period
4. Airline meal services: eat or skip by destination time
5. In-flight caffeine window
6. Eastward: melatonin and critical light avoidance
7. Arrival strategy

Times are origin-local except the arrival strategy, which is the
destination-local landing time.
"""

import logging

from ..circadian_math import ClockTime
from ..config import FlightConfig
from ..types import (
    CaffeineDetails,
    Intervention,
    LightDetails,
    MealDetails,
    MelatoninDetails,
    NapWindow,
    SleepDetails,
    Trip,
    UserPreferences,
)
from .flight_timeline import FlightTimeline, MealService, NapPlan

logger = logging.getLogger(__name__)

NAP_RATIONALE = {
    "full_cycle": "A 90-minute sleep completes one full sleep cycle, so you wake from light sleep.",
    "power": "A 20-minute power nap stays in light sleep and avoids grogginess from waking in deep sleep.",
}


def generate_flight_day_interventions(
    trip: Trip,
    timeline: FlightTimeline,
    preferences: UserPreferences,
    wake_time: ClockTime,
    config: FlightConfig = FlightConfig(),
) -> list[Intervention]:
    """
    Build and order every flight-day intervention.

    Args:
        trip: The trip being flown
        timeline: Precomputed windows for this flight
        preferences: Which optional interventions the traveler uses
        wake_time: Wake time on the morning of the flight (origin local)
        config: Flight scan parameters

    Returns:
        Interventions, pinned first, then by departure-relative clock time
    """
    eastward = trip.direction == "eastward"
    interventions: list[Intervention] = []

    if timeline.departure_time.hours >= config.morning_light_departure_hour:
        interventions.append(_pre_flight_light(wake_time, eastward))

    interventions.append(_boarding(timeline))

    if preferences.include_nap_guidance:
        for index, nap in enumerate(timeline.naps):
            interventions.append(_nap(nap, primary=index == 0))

    if timeline.stay_awake is not None:
        window = timeline.stay_awake
        interventions.append(
            Intervention(
                type="light_seek",
                start_time=window.start,
                end_time=window.end,
                title="Stay Awake Period",
                description=(
                    f"Stay awake {window.start}-{window.end}. It's "
                    f"{window.destination_start}-{window.destination_end} at your destination, "
                    "which is daytime there. Keep the reading light on, watch a movie or read. "
                    "Do not sleep during this window."
                ),
                rationale=(
                    "Sleeping during destination daytime shifts your clock the wrong way "
                    "and makes jet lag worse."
                ),
                details=LightDetails(intensity="bright", source="cabin_lights", lux_target=500),
                priority="critical",
            )
        )

    for meal in timeline.meals:
        interventions.append(_meal(meal))

    if preferences.caffeine_user:
        interventions.append(_caffeine(timeline))

    if eastward and preferences.uses_melatonin and timeline.melatonin is not None:
        step = timeline.melatonin
        dose = preferences.melatonin_dose
        interventions.append(
            Intervention(
                type="melatonin",
                start_time=step.origin_time,
                title="Take Melatonin Now",
                description=(
                    f"Take {dose:g}mg fast-release melatonin at {step.origin_time}. It's "
                    f"{step.destination_time} at your destination, about 5-6h before bed there. "
                    "This is the strongest phase-advance timing."
                ),
                rationale=(
                    "Melatonin 5-6h before bed produces the largest phase advance. Use "
                    "fast-release rather than slow-release; 0.5-3mg is effective."
                ),
                details=MelatoninDetails(dose=dose, timing=step.origin_time, formulation="immediate"),
                priority="recommended",
            )
        )

    if timeline.light_avoidance is not None:
        window = timeline.light_avoidance
        interventions.append(
            Intervention(
                type="light_avoid",
                start_time=window.start,
                end_time=window.end,
                title="Critical: Avoid Light Now",
                description=(
                    f"Wear an eye mask {window.start}-{window.end}. It's "
                    f"{window.destination_start} at your destination, just before your "
                    "temperature minimum. Light now would delay your clock, the wrong "
                    "direction for this trip. Dim your screen and close the window shade."
                ),
                rationale=(
                    "Light in the 3h before your core body temperature minimum causes phase "
                    "delays, the opposite of what eastward travel needs."
                ),
                details=LightDetails(
                    intensity="dark",
                    source="eye_mask",
                    lux_target=0,
                    blue_blockers_recommended=True,
                ),
                priority="critical",
            )
        )

    interventions.append(_arrival_strategy(timeline, eastward))

    return sort_flight_day(interventions, timeline.departure_time)


def sort_flight_day(
    interventions: list[Intervention], departure_time: ClockTime
) -> list[Intervention]:
    """
    Pinned interventions first, then by clock time relative to departure.

    Times more than an hour before the departure hour belong to the next
    calendar day, so they sort after the evening ones.
    """
    cutoff = departure_time.hours - 1

    def sort_key(intervention: Intervention) -> tuple[int, float]:
        hours = intervention.start_time.hours
        if hours < cutoff:
            hours += 24
        return (0 if intervention.pinned else 1, hours)

    return sorted(interventions, key=sort_key)


def _pre_flight_light(wake_time: ClockTime, eastward: bool) -> Intervention:
    end = wake_time.shift(2)
    if eastward:
        description = (
            f"Get 30-60 min of bright outdoor light from {wake_time}. "
            "This starts your phase advance before you board."
        )
        rationale = (
            "Morning light advances your clock. Starting before a late flight "
            "gives you a head start on eastward adjustment."
        )
    else:
        description = (
            f"Light {wake_time}-{end} is fine. For westward travel you want "
            "evening light at your destination."
        )
        rationale = "Morning light has little effect on westward plans. Enjoy your morning normally."

    return Intervention(
        type="light_seek",
        start_time=wake_time,
        end_time=end,
        duration=60,
        title="Morning Light Before Flight",
        description=description,
        rationale=rationale,
        details=LightDetails(
            intensity="bright" if eastward else "any",
            source="outdoor",
            lux_target=10000,
            outdoor_preferred=True,
        ),
        priority="recommended" if eastward else "optional",
    )


def _boarding(timeline: FlightTimeline) -> Intervention:
    boarding = timeline.boarding_time
    return Intervention(
        type="light_seek",
        start_time=boarding,
        end_time=timeline.departure_time,
        duration=30,
        title="Set Mental Clock to Destination",
        description=(
            f"At boarding ({boarding}), set your watch and phone to destination time. "
            f"It's {timeline.destination_time_at_boarding} there right now. "
            'From here on, ask "what time is it there?"'
        ),
        rationale=(
            "Thinking in destination time speeds adjustment. Every sleep, meal and "
            "light decision from now on should follow the destination clock."
        ),
        details=LightDetails(intensity="any", source="any", lux_target=0),
        priority="critical",
        pinned=True,
    )


def _nap(nap: NapPlan, primary: bool) -> Intervention:
    if primary:
        if nap.kind == "full_cycle":
            title = "In-Flight Sleep (90 min)"
            description = (
                f"Sleep {nap.start}-{nap.end}. It's {nap.destination_time} at your "
                "destination, which is nighttime there. Sleep for 90 minutes to complete "
                "one full cycle. Use an eye mask and earplugs."
            )
        else:
            title = "Power Nap (20 min)"
            description = (
                f"Nap {nap.start}-{nap.end}. It's {nap.destination_time} at your "
                "destination. There is only time for a 20-minute power nap. Set an "
                "alarm to avoid grogginess."
            )
        rationale = (
            f"{NAP_RATIONALE[nap.kind]} Sleep means darkness to your body clock, so "
            "sleeping during destination night speeds adjustment."
        )
        nap_window = NapWindow(start=nap.start, end=nap.end, max_duration=nap.duration)
        priority = "critical"
    else:
        title = "Additional Sleep Window"
        description = (
            f"If you didn't sleep earlier, try again {nap.start}-{nap.end} "
            f"({nap.duration} min). It's {nap.destination_time} at your destination."
        )
        rationale = NAP_RATIONALE[nap.kind]
        nap_window = None
        priority = "optional"

    return Intervention(
        type="sleep",
        start_time=nap.start,
        end_time=nap.end,
        duration=nap.duration,
        title=title,
        description=description,
        rationale=rationale,
        details=SleepDetails(
            target_bedtime=nap.start,
            target_wake_time=nap.end,
            sleep_duration=nap.duration,
            nap_allowed=True,
            nap_window=nap_window,
        ),
        priority=priority,
    )


def _meal(meal: MealService) -> Intervention:
    action = "Eat" if meal.eat else "Skip or eat light"
    served = f"{action} when the airline serves (~{meal.origin_time}). It's {meal.destination_time} at your destination."

    if meal.pre_landing:
        title = "Second In-Flight Meal (Pre-Landing)"
        if meal.eat:
            guidance = "This is breakfast or lunch at your destination, so eat well."
            notes = "A chance to anchor your organ clocks to destination time."
        else:
            guidance = "It's still night at your destination. Keep it light or skip it."
            notes = "Skip if you can. If you ate the previous meal, fasting now helps."
        rationale = "The pre-arrival meal can be your first anchor meal in destination time."
        details = MealDetails(
            meal_type="meal" if meal.eat else "snack",
            anchor_meal=meal.eat,
            composition="protein-rich" if meal.eat else "light",
            notes=notes,
        )
    else:
        title = "First In-Flight Meal"
        if meal.eat:
            guidance = "It's daytime there, so eat normally."
            notes = "A normal meal is fine; it lines up with destination mealtime."
        else:
            guidance = "It's nighttime there, so skip it or have a light snack. Your gut clock needs rest."
            notes = "If you must eat, choose light protein over carb-heavy airline meals."
        rationale = (
            "Your liver and gut clocks follow meal timing. Eating during destination "
            "night pulls them out of sync with your brain clock."
        )
        details = MealDetails(
            meal_type="meal" if meal.eat else "snack",
            anchor_meal=False,
            composition="balanced" if meal.eat else "light",
            notes=notes,
        )

    return Intervention(
        type="meal",
        start_time=meal.origin_time,
        end_time=meal.origin_time.shift(0.5),
        duration=30,
        title=title,
        description=f"{served} {guidance}",
        rationale=rationale,
        details=details,
        priority="recommended" if meal.eat else "optional",
    )


def _caffeine(timeline: FlightTimeline) -> Intervention:
    window = timeline.caffeine
    if window is None:
        return Intervention(
            type="caffeine",
            start_time=timeline.departure_time,
            title="No Caffeine During Flight",
            description=(
                "Avoid caffeine. Your whole flight falls in destination evening or night, "
                "and caffeine now will cost you sleep after landing. Switch to water or "
                "herbal tea."
            ),
            rationale=(
                "Your destination body clock is heading into night. Caffeine would block "
                "the sleep you need to adjust."
            ),
            details=CaffeineDetails(
                allowed=False,
                cutoff_time=timeline.departure_time,
                max_intake_before_cutoff="0mg",
            ),
            priority="recommended",
        )

    return Intervention(
        type="caffeine",
        start_time=window.start,
        end_time=window.end,
        title="Caffeine Window",
        description=(
            f"Coffee or tea is fine {window.start}-{window.end}. It's "
            f"{window.destination_start}-{window.destination_end} at your destination. "
            f"No more caffeine after {window.end}."
        ),
        rationale=(
            "Caffeine has a 5-6h half-life. Drinking it after 2 PM destination time "
            "will hurt your first night's sleep."
        ),
        details=CaffeineDetails(
            allowed=True,
            cutoff_time=window.end,
            max_intake_before_cutoff="200mg (2 cups)",
            recommended_times=(window.start,),
        ),
        priority="recommended",
    )


def _arrival_strategy(timeline: FlightTimeline, eastward: bool) -> Intervention:
    arrival = timeline.arrival_time
    period = timeline.arrival_period

    if period == "morning":
        if eastward:
            guidance = (
                f"Arriving {arrival} (morning), the best case. Get bright outdoor light "
                "right away. This is your biggest adjustment opportunity."
            )
        else:
            guidance = (
                f"Arriving {arrival} (morning). Wear sunglasses for 2h so morning light "
                "doesn't advance your clock when you need to delay it."
            )
    elif period == "afternoon":
        extra = "Avoid late naps." if eastward else "Get evening light."
        guidance = f"Arriving {arrival} (afternoon). Stay active until local bedtime. {extra}"
    else:
        extra = "Take melatonin 30 min before bed." if eastward else "Brief evening light, then dim for bed."
        guidance = f"Arriving {arrival} (evening). Push to local bedtime if you can. {extra}"

    logger.debug("Arrival at %s classified as %s", arrival, period)

    return Intervention(
        type="light_seek",
        start_time=arrival,
        end_time=arrival.shift(2),
        title="Arrival Strategy",
        description=guidance,
        rationale=(
            "Your first hours at the destination set the tone for adjustment. Getting "
            "light and darkness right immediately speeds adaptation."
        ),
        details=LightDetails(
            intensity="bright" if period == "morning" and eastward else "any",
            source="outdoor",
            lux_target=10000,
            blue_blockers_recommended=period == "morning" and not eastward,
            outdoor_preferred=True,
        ),
        priority="critical",
    )
