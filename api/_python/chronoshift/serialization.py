"""
JSON conversion for protocols and generation requests.

Output is field-named and JSON-safe: clock times become "HH:MM", dates
and datetimes ISO strings, tuples lists. Intervention details keep their
"kind" tag so consumers can tell the payloads apart.

Input is the request record:

    {
        "trip": {...},
        "circadian_profile": {...},
        "preferences": {...}
    }

A trip may be given fully resolved (offsets, shift, direction, flight
duration) or as zones plus local times, in which case pytz resolves it.
"""

import json
import math
from collections.abc import Callable
from dataclasses import dataclass, fields, is_dataclass, replace
from datetime import date, datetime
from typing import Any, get_args

from .chronotype import build_chronotype_profile
from .circadian_math import ClockTime, parse_iso_datetime
from .errors import ValidationError
from .trips import build_trip
from .types import (
    DEFAULT_USER_PREFERENCES,
    ChronotypeProfile,
    ExerciseFrequency,
    ExerciseTime,
    MCTQDay,
    MEQResponse,
    Protocol,
    Trip,
    TripDirection,
    UserPreferences,
)

TRIP_DIRECTIONS: tuple[str, ...] = get_args(TripDirection)
EXERCISE_FREQUENCIES: tuple[str, ...] = get_args(ExerciseFrequency)
EXERCISE_TIMES: tuple[str, ...] = get_args(ExerciseTime)

RESOLVED_TRIP_FIELDS = (
    "origin_utc_offset",
    "destination_utc_offset",
    "flight_duration",
    "timezone_shift_hours",
    "direction",
)


@dataclass(frozen=True)
class GenerationRequest:
    trip: Trip
    profile: ChronotypeProfile
    preferences: UserPreferences


def to_dict(obj: Any) -> Any:
    """Convert dataclass instances to JSON-safe structures recursively."""
    if isinstance(obj, ClockTime):
        return obj.format()
    if is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_dict(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, (list, tuple)):
        return [to_dict(item) for item in obj]
    if isinstance(obj, dict):
        return {key: to_dict(value) for key, value in obj.items()}
    return obj


def protocol_to_dict(protocol: Protocol) -> dict:
    return to_dict(protocol)


def protocol_to_json(protocol: Protocol, indent: int | None = None) -> str:
    return json.dumps(protocol_to_dict(protocol), indent=indent)


def _require(data: dict, key: str, section: str) -> Any:
    if key not in data or data[key] is None:
        raise ValidationError(f"Missing required field: {section}.{key}", field=key)
    return data[key]


def _as_section(value: Any, field: str) -> dict:
    if not isinstance(value, dict):
        raise ValidationError(f"{field} must be an object, got {type(value).__name__}", field=field)
    return value


def _as_int(value: Any, field: str) -> int:
    """Whole numbers, integral floats and numeric strings; never booleans."""
    if isinstance(value, bool):
        raise ValidationError(f"Expected a whole number for {field}, got {value!r}", field=field)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise ValidationError(f"Expected a whole number for {field}, got {value!r}", field=field)


def _as_float(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"Expected a number for {field}, got {value!r}", field=field)
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            raise ValidationError(
                f"Expected a number for {field}, got {value!r}", field=field
            ) from None
    else:
        raise ValidationError(f"Expected a number for {field}, got {value!r}", field=field)
    if not math.isfinite(number):
        raise ValidationError(f"Expected a finite number for {field}, got {value!r}", field=field)
    return number


def _as_bool(value: Any, field: str) -> bool:
    # "false" is truthy, so strings are rejected rather than guessed at
    if not isinstance(value, bool):
        raise ValidationError(f"Expected true or false for {field}, got {value!r}", field=field)
    return value


def _as_choice(value: Any, choices: tuple[str, ...], field: str) -> str:
    if value not in choices:
        raise ValidationError(
            f"{field} must be one of {', '.join(choices)}, got {value!r}", field=field
        )
    return value


def _parse_time(value: str, field: str) -> ClockTime:
    try:
        return ClockTime.parse(value)
    except (ValueError, AttributeError, TypeError) as e:
        raise ValidationError(f"Invalid time for {field}: {value!r}", field=field) from e


def _parse_datetime(value: str, field: str) -> datetime:
    try:
        return parse_iso_datetime(value)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"Invalid datetime for {field}: {value!r}", field=field) from e


def trip_from_dict(data: dict) -> Trip:
    departure = _parse_datetime(
        _require(data, "departure_datetime", "trip"), "departure_datetime"
    )
    arrival = _parse_datetime(_require(data, "arrival_datetime", "trip"), "arrival_datetime")
    common = dict(
        origin_city=str(data.get("origin_city", "")),
        destination_city=str(data.get("destination_city", "")),
        origin_timezone=str(_require(data, "origin_timezone", "trip")),
        destination_timezone=str(_require(data, "destination_timezone", "trip")),
        trip_duration_days=_as_int(
            _require(data, "trip_duration_days", "trip"), "trip_duration_days"
        ),
        id=str(data.get("id", "")),
    )

    if not all(key in data for key in RESOLVED_TRIP_FIELDS):
        return build_trip(departure_datetime=departure, arrival_datetime=arrival, **common)

    return Trip(
        origin_utc_offset=_as_int(data["origin_utc_offset"], "origin_utc_offset"),
        destination_utc_offset=_as_int(data["destination_utc_offset"], "destination_utc_offset"),
        departure_datetime=departure,
        arrival_datetime=arrival,
        flight_duration=_as_int(data["flight_duration"], "flight_duration"),
        timezone_shift_hours=_as_float(data["timezone_shift_hours"], "timezone_shift_hours"),
        direction=_as_choice(data["direction"], TRIP_DIRECTIONS, "direction"),
        **common,
    )


def _mctq_day_from_dict(data: dict, section: str) -> MCTQDay:
    data = _as_section(data, section)
    return MCTQDay(
        bedtime=_parse_time(_require(data, "bedtime", section), f"{section}.bedtime"),
        wake_time=_parse_time(_require(data, "wake_time", section), f"{section}.wake_time"),
        sleep_prep_minutes=_as_int(data.get("sleep_prep_minutes", 0), "sleep_prep_minutes"),
        sleep_latency_minutes=_as_int(
            data.get("sleep_latency_minutes", 15), "sleep_latency_minutes"
        ),
        uses_alarm=_as_bool(data.get("uses_alarm", False), "uses_alarm"),
    )


def _meq_response_from_dict(data: Any) -> MEQResponse:
    data = _as_section(data, "meq_responses")
    return MEQResponse(
        question_id=_as_int(_require(data, "question_id", "meq_responses"), "question_id"),
        selected_value=_as_int(
            _require(data, "selected_value", "meq_responses"), "selected_value"
        ),
    )


def profile_from_dict(data: dict) -> ChronotypeProfile:
    """
    Build a chronotype profile from questionnaire data.

    Accepts an MEQ score or raw responses, and MCTQ workday/free-day
    timing or a bare MSFsc. Markers are always recomputed.
    """
    data = _as_section(data, "circadian_profile")

    meq_responses = None
    if data.get("meq_responses") is not None:
        if not isinstance(data["meq_responses"], list):
            raise ValidationError("meq_responses must be a list", field="meq_responses")
        meq_responses = [_meq_response_from_dict(r) for r in data["meq_responses"]]

    workday = freeday = None
    if data.get("workday") is not None and data.get("freeday") is not None:
        workday = _mctq_day_from_dict(data["workday"], "workday")
        freeday = _mctq_day_from_dict(data["freeday"], "freeday")

    meq_score = data.get("meq_score")
    msfsc = data.get("msfsc")
    return build_chronotype_profile(
        habitual_bedtime=_parse_time(
            _require(data, "habitual_bedtime", "circadian_profile"), "habitual_bedtime"
        ),
        habitual_wake_time=_parse_time(
            _require(data, "habitual_wake_time", "circadian_profile"), "habitual_wake_time"
        ),
        meq_score=_as_int(meq_score, "meq_score") if meq_score is not None else None,
        meq_responses=meq_responses,
        workday=workday,
        freeday=freeday,
        msfsc=_parse_time(msfsc, "msfsc") if msfsc is not None else None,
        sleep_latency=_as_int(data.get("sleep_latency", 15), "sleep_latency"),
    )


PREFERENCE_PARSERS: dict[str, Callable[[Any, str], Any]] = {
    "uses_melatonin": _as_bool,
    "melatonin_dose": _as_float,
    "uses_creatine": _as_bool,
    "creatine_dose": _as_float,
    "caffeine_user": _as_bool,
    "caffeine_cutoff_hours": _as_float,
    "exercise_frequency": lambda value, field: _as_choice(value, EXERCISE_FREQUENCIES, field),
    "preferred_exercise_time": lambda value, field: _as_choice(value, EXERCISE_TIMES, field),
    "aggressive_adjustment": _as_bool,
    "include_nap_guidance": _as_bool,
}


def preferences_from_dict(data: dict | None) -> UserPreferences:
    """
    Known preference fields override the defaults; unknown keys are ignored.

    Raises:
        ValidationError: If a known field has the wrong type or an unknown choice
    """
    if not data:
        return DEFAULT_USER_PREFERENCES
    data = _as_section(data, "preferences")
    parsed = {
        key: PREFERENCE_PARSERS[key](value, key)
        for key, value in data.items()
        if key in PREFERENCE_PARSERS and value is not None
    }
    cutoff = parsed.get("caffeine_cutoff_hours")
    if cutoff is not None and not 0 <= cutoff <= 24:
        raise ValidationError(
            f"caffeine_cutoff_hours must be between 0 and 24, got {cutoff:g}",
            field="caffeine_cutoff_hours",
        )
    return replace(DEFAULT_USER_PREFERENCES, **parsed)


def request_from_dict(data: dict) -> GenerationRequest:
    """
    Parse a generation request record.

    Raises:
        ValidationError: On missing or malformed fields
    """
    if not isinstance(data, dict):
        raise ValidationError("Request must be a JSON object")
    return GenerationRequest(
        trip=trip_from_dict(_as_section(_require(data, "trip", "request"), "trip")),
        profile=profile_from_dict(_require(data, "circadian_profile", "request")),
        preferences=preferences_from_dict(data.get("preferences")),
    )
