"""
Chronoshift Circadian Protocol Generation

Turns a trip, a chronotype profile and intervention preferences into a
day-by-day jet lag adjustment protocol using published heuristics and
phase response curves.

Main entry point: generate_protocol
"""

from .chronotype import (
    ChronotypeClassifier,
    build_chronotype_profile,
    classify_chronotype,
    score_mctq,
    score_meq,
)
from .circadian_math import ClockTime, circular_mean
from .config import DEFAULT_CONFIG, EngineConfig, FlightConfig, configure_logging
from .errors import ChronoshiftError, ScoreOutOfRangeError, ValidationError
from .scheduler import AdjustmentScheduler, generate_protocol
from .science.markers import estimate_circadian_markers
from .science.prc import PhaseResponseEngine
from .scheduling.flight_timeline import calculate_flight_timeline
from .serialization import protocol_to_dict, protocol_to_json, request_from_dict
from .trips import build_trip
from .types import (
    DEFAULT_USER_PREFERENCES,
    ChronotypeProfile,
    Intervention,
    MCTQDay,
    MEQResponse,
    Protocol,
    ProtocolDay,
    Trip,
    UserPreferences,
)

__all__ = [
    # Types
    "ClockTime",
    "ChronotypeProfile",
    "Intervention",
    "MCTQDay",
    "MEQResponse",
    "Protocol",
    "ProtocolDay",
    "Trip",
    "UserPreferences",
    "DEFAULT_USER_PREFERENCES",
    # Generation
    "AdjustmentScheduler",
    "generate_protocol",
    # Secondary entry points
    "ChronotypeClassifier",
    "build_chronotype_profile",
    "classify_chronotype",
    "score_mctq",
    "score_meq",
    "circular_mean",
    "estimate_circadian_markers",
    "PhaseResponseEngine",
    "calculate_flight_timeline",
    "build_trip",
    # Serialization
    "protocol_to_dict",
    "protocol_to_json",
    "request_from_dict",
    # Configuration and errors
    "DEFAULT_CONFIG",
    "EngineConfig",
    "FlightConfig",
    "configure_logging",
    "ChronoshiftError",
    "ScoreOutOfRangeError",
    "ValidationError",
]
