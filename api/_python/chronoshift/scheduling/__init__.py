"""
Scheduling layer for protocol generation.

Turns science-layer timing into concrete, practical interventions:
- flight_timeline: pure window search over the flight
- flight_day: renders the timeline into flight-day interventions
- intervention_planner: per-day generators for every other day
"""

from .flight_day import generate_flight_day_interventions, sort_flight_day
from .flight_timeline import (
    FlightStep,
    FlightTimeline,
    FlightWindow,
    MealService,
    NapPlan,
    calculate_flight_timeline,
)
from .intervention_planner import (
    DayState,
    InterventionPlanner,
    PlannerContext,
    arrival_day_tips,
    day_summary,
    day_tips,
)

__all__ = [
    "generate_flight_day_interventions",
    "sort_flight_day",
    "FlightStep",
    "FlightTimeline",
    "FlightWindow",
    "MealService",
    "NapPlan",
    "calculate_flight_timeline",
    "DayState",
    "InterventionPlanner",
    "PlannerContext",
    "arrival_day_tips",
    "day_summary",
    "day_tips",
]
