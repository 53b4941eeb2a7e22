"""
Tests for request parsing, protocol JSON output and the command line entry point.
"""

import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

import generate_protocol as cli
from chronoshift.errors import ScoreOutOfRangeError, ValidationError
from chronoshift.serialization import (
    preferences_from_dict,
    profile_from_dict,
    protocol_to_dict,
    protocol_to_json,
    request_from_dict,
    to_dict,
)
from chronoshift.types import DEFAULT_USER_PREFERENCES

from helpers import make_request_data, t


class TestRequestParsing:
    """Tests for request_from_dict."""

    def test_resolves_trip_from_zones(self):
        request = request_from_dict(make_request_data())
        assert request.trip.timezone_shift_hours == 5
        assert request.trip.direction == "eastward"
        assert request.trip.flight_duration == 420
        assert request.trip.id == "nyc-lhr"

    def test_resolved_trip_is_taken_as_given(self):
        data = make_request_data()
        data["trip"].update(
            origin_utc_offset=-300,
            destination_utc_offset=0,
            flight_duration=415,
            timezone_shift_hours=5,
            direction="eastward",
        )
        request = request_from_dict(data)
        assert request.trip.flight_duration == 415

    def test_profile_markers_recomputed(self):
        request = request_from_dict(make_request_data())
        assert request.profile.chronotype == "intermediate"
        assert request.profile.habitual_bedtime == t("23:00")
        assert request.profile.assessment_method == "MEQ"

    def test_profile_from_mctq(self):
        profile = profile_from_dict(
            {
                "habitual_bedtime": "23:00",
                "habitual_wake_time": "07:00",
                "workday": {"bedtime": "23:00", "wake_time": "07:00", "sleep_latency_minutes": 0},
                "freeday": {"bedtime": "00:30", "wake_time": "09:30", "sleep_latency_minutes": 0},
            }
        )
        assert profile.msfsc == t("04:39")
        assert profile.assessment_method == "MCTQ"

    def test_profile_from_meq_responses(self):
        profile = profile_from_dict(
            {
                "habitual_bedtime": "23:00",
                "habitual_wake_time": "07:00",
                "meq_responses": [
                    {"question_id": i, "selected_value": 2} for i in range(1, 20)
                ],
            }
        )
        assert profile.meq_score == 38

    def test_out_of_range_meq(self):
        data = make_request_data()
        data["circadian_profile"]["meq_score"] = 99
        with pytest.raises(ScoreOutOfRangeError):
            request_from_dict(data)

    def test_preferences_override_defaults(self):
        preferences = preferences_from_dict({"uses_creatine": True, "favorite_color": "blue"})
        assert preferences.uses_creatine
        assert preferences.uses_melatonin == DEFAULT_USER_PREFERENCES.uses_melatonin

    def test_missing_preferences_use_defaults(self):
        data = make_request_data()
        del data["preferences"]
        assert request_from_dict(data).preferences == DEFAULT_USER_PREFERENCES

    def test_missing_trip_field(self):
        data = make_request_data()
        del data["trip"]["origin_timezone"]
        with pytest.raises(ValidationError) as exc_info:
            request_from_dict(data)
        assert exc_info.value.field == "origin_timezone"
        assert "trip.origin_timezone" in exc_info.value.message

    def test_missing_section(self):
        data = make_request_data()
        del data["circadian_profile"]
        with pytest.raises(ValidationError) as exc_info:
            request_from_dict(data)
        assert exc_info.value.field == "circadian_profile"

    def test_bad_time(self):
        data = make_request_data()
        data["circadian_profile"]["habitual_bedtime"] = "11pm"
        with pytest.raises(ValidationError) as exc_info:
            request_from_dict(data)
        assert exc_info.value.field == "habitual_bedtime"

    def test_bad_datetime(self):
        data = make_request_data()
        data["trip"]["departure_datetime"] = "tomorrow"
        with pytest.raises(ValidationError) as exc_info:
            request_from_dict(data)
        assert exc_info.value.field == "departure_datetime"

    def test_not_an_object(self):
        with pytest.raises(ValidationError):
            request_from_dict(["trip"])



class TestFieldTypes:
    """Malformed field types are reported as ValidationError with the field name."""

    def test_numeric_string_meq_score_is_coerced(self):
        data = make_request_data()
        data["circadian_profile"]["meq_score"] = "50"
        assert request_from_dict(data).profile.meq_score == 50

    @pytest.mark.parametrize("value", ["fifty", True, 50.5, [50]])
    def test_bad_meq_score(self, value):
        data = make_request_data()
        data["circadian_profile"]["meq_score"] = value
        with pytest.raises(ValidationError) as exc_info:
            request_from_dict(data)
        assert exc_info.value.field == "meq_score"

    @pytest.mark.parametrize("value", ["false", "true", 0, 1])
    def test_boolean_preferences_must_be_booleans(self, value):
        with pytest.raises(ValidationError) as exc_info:
            preferences_from_dict({"uses_melatonin": value})
        assert exc_info.value.field == "uses_melatonin"

    def test_null_preference_keeps_default(self):
        assert preferences_from_dict({"uses_melatonin": None}).uses_melatonin

    def test_numeric_preferences_are_coerced(self):
        preferences = preferences_from_dict({"melatonin_dose": "3", "caffeine_cutoff_hours": 10})
        assert preferences.melatonin_dose == 3.0
        assert preferences.caffeine_cutoff_hours == 10.0

    @pytest.mark.parametrize(
        "field,value",
        [
            ("melatonin_dose", "a lot"),
            ("creatine_dose", False),
            ("caffeine_cutoff_hours", "noon"),
            ("caffeine_cutoff_hours", 30),
            ("caffeine_cutoff_hours", -1),
            ("exercise_frequency", "hourly"),
            ("preferred_exercise_time", 7),
        ],
    )
    def test_bad_preference_values(self, field, value):
        with pytest.raises(ValidationError) as exc_info:
            preferences_from_dict({field: value})
        assert exc_info.value.field == field

    def test_preferences_must_be_an_object(self):
        data = make_request_data(preferences=["uses_melatonin"])
        with pytest.raises(ValidationError) as exc_info:
            request_from_dict(data)
        assert exc_info.value.field == "preferences"

    def test_bad_trip_duration(self):
        data = make_request_data()
        data["trip"]["trip_duration_days"] = "a week"
        with pytest.raises(ValidationError) as exc_info:
            request_from_dict(data)
        assert exc_info.value.field == "trip_duration_days"

    def test_bad_resolved_direction(self):
        data = make_request_data()
        data["trip"].update(
            origin_utc_offset=-300,
            destination_utc_offset=0,
            flight_duration=420,
            timezone_shift_hours=5,
            direction="north",
        )
        with pytest.raises(ValidationError) as exc_info:
            request_from_dict(data)
        assert exc_info.value.field == "direction"

    def test_bad_meq_response(self):
        data = make_request_data()
        data["circadian_profile"]["meq_responses"] = [{"question_id": 1}]
        with pytest.raises(ValidationError) as exc_info:
            request_from_dict(data)
        assert exc_info.value.field == "selected_value"

    def test_numeric_time_is_rejected(self):
        data = make_request_data()
        data["circadian_profile"]["habitual_bedtime"] = 2300
        with pytest.raises(ValidationError) as exc_info:
            request_from_dict(data)
        assert exc_info.value.field == "habitual_bedtime"

    def test_mctq_alarm_flag_must_be_boolean(self):
        data = make_request_data()
        data["circadian_profile"]["workday"] = {"bedtime": "23:00", "wake_time": "07:00"}
        data["circadian_profile"]["freeday"] = {
            "bedtime": "00:30",
            "wake_time": "09:30",
            "uses_alarm": "no",
        }
        with pytest.raises(ValidationError) as exc_info:
            request_from_dict(data)
        assert exc_info.value.field == "uses_alarm"


class TestProtocolOutput:
    """Tests for JSON-safe protocol output."""

    @pytest.fixture
    def protocol(self, scheduler, fixed_now):
        request = request_from_dict(make_request_data())
        return scheduler.generate(request.trip, request.profile, request.preferences, now=fixed_now)

    def test_round_trips_through_json(self, protocol):
        data = json.loads(protocol_to_json(protocol))
        assert data["id"] == "protocol-1"
        assert data["trip_id"] == "nyc-lhr"
        assert data["direction"] == "eastward"
        assert data["generated_at"] == "2026-01-10T12:00:00+00:00"

    def test_clock_times_as_strings(self, protocol):
        data = protocol_to_dict(protocol)
        assert data["target_bedtime"] == "23:00"
        day = data["days"][0]
        assert day["date"] == "2026-01-12"
        assert isinstance(day["estimated_cbtmin"], str)
        assert all(isinstance(i["start_time"], str) for i in day["interventions"])

    def test_details_carry_kind(self, protocol):
        data = protocol_to_dict(protocol)
        for day in data["days"]:
            for intervention in day["interventions"]:
                assert intervention["details"]["kind"] in (
                    "light",
                    "sleep",
                    "melatonin",
                    "caffeine",
                    "meal",
                    "exercise",
                    "creatine",
                )

    def test_melatonin_dose_from_preferences(self, protocol):
        data = protocol_to_dict(protocol)
        doses = {
            i["details"]["dose"]
            for day in data["days"]
            for i in day["interventions"]
            if i["type"] == "melatonin"
        }
        assert doses == {1.0}

    def test_indent(self, protocol):
        assert "\n" in protocol_to_json(protocol, indent=2)

    def test_to_dict_passthrough(self):
        assert to_dict({"a": (t("01:00"), 2)}) == {"a": ["01:00", 2]}


class TestCommandLine:
    """Tests for generate_protocol.py."""

    def test_writes_protocol_json(self, tmp_path, monkeypatch, capsys):
        request_file = tmp_path / "request.json"
        request_file.write_text(json.dumps(make_request_data()))
        monkeypatch.setattr(sys, "argv", ["generate_protocol.py", str(request_file)])

        cli.main()

        output = json.loads(capsys.readouterr().out)
        assert output["direction"] == "eastward"
        assert output["days"][0]["day_number"] == -3

    def test_missing_file(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["generate_protocol.py", str(tmp_path / "missing.json")])
        with pytest.raises(SystemExit) as exc_info:
            cli.main()
        assert exc_info.value.code == 1
        assert "not found" in json.loads(capsys.readouterr().out)["error"]

    def test_validation_error_reports_field(self, tmp_path, monkeypatch, capsys):
        data = make_request_data()
        data["trip"]["destination_timezone"] = "Mars/Olympus_Mons"
        request_file = tmp_path / "request.json"
        request_file.write_text(json.dumps(data))
        monkeypatch.setattr(sys, "argv", ["generate_protocol.py", str(request_file)])

        with pytest.raises(SystemExit):
            cli.main()
        assert json.loads(capsys.readouterr().out)["field"] == "destination_timezone"

    def test_usage(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["generate_protocol.py"])
        with pytest.raises(SystemExit):
            cli.main()
        assert "Usage" in json.loads(capsys.readouterr().out)["error"]
