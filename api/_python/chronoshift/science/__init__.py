"""
Science layer for circadian protocol generation.

Pure functions that return optimal timing based on circadian research.
No flight awareness or practical constraints - that's the scheduling layer.
"""

from .markers import (
    calculate_phase_gap,
    determine_shift_direction,
    estimate_cbtmin_from_dlmo,
    estimate_cbtmin_from_wake,
    estimate_circadian_markers,
    estimate_dlmo_from_bedtime,
    estimate_dlmo_from_meq,
    estimate_dlmo_from_msfsc,
)
from .prc import (
    DEFAULT_PRC_SET,
    EXERCISE_PRC,
    LIGHT_PRC,
    MELATONIN_PRC,
    PhaseEffect,
    PhaseResponseCurve,
    PhaseResponseEngine,
    PRCSet,
    Stimulus,
    circadian_to_clock_time,
    clock_to_circadian_time,
    phase_shift_at,
)
from .shift_calculator import (
    ShiftCalculator,
    adaptation_factor,
    calculate_pre_departure_days,
    phase_for_day,
)

__all__ = [
    "calculate_phase_gap",
    "determine_shift_direction",
    "estimate_cbtmin_from_dlmo",
    "estimate_cbtmin_from_wake",
    "estimate_circadian_markers",
    "estimate_dlmo_from_bedtime",
    "estimate_dlmo_from_meq",
    "estimate_dlmo_from_msfsc",
    "DEFAULT_PRC_SET",
    "EXERCISE_PRC",
    "LIGHT_PRC",
    "MELATONIN_PRC",
    "PhaseEffect",
    "PhaseResponseCurve",
    "PhaseResponseEngine",
    "PRCSet",
    "Stimulus",
    "circadian_to_clock_time",
    "clock_to_circadian_time",
    "phase_shift_at",
    "ShiftCalculator",
    "adaptation_factor",
    "calculate_pre_departure_days",
    "phase_for_day",
]
