"""
Tests for chronotype classification (MEQ and MCTQ).

MEQ bands: 70-86 definite morning, 59-69 moderate morning,
42-58 intermediate, 31-41 moderate evening, 16-30 definite evening.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from chronoshift.chronotype import (
    ChronotypeClassifier,
    build_chronotype_profile,
    calculate_msfsc,
    chronotype_from_msfsc,
    classify_chronotype,
    combined_chronotype,
    describe_chronotype,
    estimate_meq_from_msfsc,
    msfsc_decimal_hours,
    score_mctq,
    score_meq,
)
from chronoshift.errors import ScoreOutOfRangeError, ValidationError
from chronoshift.types import MCTQDay, MEQResponse

from helpers import t


def responses(values):
    return [MEQResponse(question_id=i + 1, selected_value=v) for i, v in enumerate(values)]


class TestMEQScoring:
    """Tests for summing questionnaire responses."""

    def test_sums_nineteen_responses(self):
        values = [3] * 19
        assert score_meq(responses(values)) == 57

    def test_eighteen_responses_rejected(self):
        """A short questionnaire is invalid, not a low score."""
        with pytest.raises(ValidationError) as exc_info:
            score_meq(responses([3] * 18))
        assert exc_info.value.field == "meq_responses"

    def test_twenty_responses_rejected(self):
        with pytest.raises(ValidationError):
            score_meq(responses([3] * 20))

    def test_sum_above_range_rejected_on_classify(self):
        """19 answers of 6 sum to 114, outside the 16-86 range."""
        score = score_meq(responses([6] * 19))
        assert score == 114
        with pytest.raises(ScoreOutOfRangeError):
            classify_chronotype(score)


class TestMEQClassification:
    """Tests for band boundaries."""

    @pytest.mark.parametrize(
        "score,expected",
        [
            (86, "definite_morning"),
            (70, "definite_morning"),
            (69, "moderate_morning"),
            (59, "moderate_morning"),
            (58, "intermediate"),
            (42, "intermediate"),
            (41, "moderate_evening"),
            (31, "moderate_evening"),
            (30, "definite_evening"),
            (16, "definite_evening"),
        ],
    )
    def test_band_boundaries(self, score, expected):
        assert classify_chronotype(score) == expected

    @pytest.mark.parametrize("score", [15, 87, 0, -5, 114])
    def test_out_of_range_raises(self, score):
        with pytest.raises(ScoreOutOfRangeError) as exc_info:
            classify_chronotype(score)
        assert exc_info.value.score == score

    def test_every_valid_score_has_a_band(self):
        categories = {classify_chronotype(score) for score in range(16, 87)}
        assert len(categories) == 5

    def test_out_of_range_is_a_validation_error(self):
        """Callers catching ValidationError also see range errors."""
        with pytest.raises(ValidationError):
            classify_chronotype(90)

    def test_custom_bands(self):
        """Bands are injectable for alternate cut-points."""
        classifier = ChronotypeClassifier(
            bands=((60, "definite_morning"), (16, "definite_evening"))
        )
        assert classifier.classify(60) == "definite_morning"
        assert classifier.classify(59) == "definite_evening"

    def test_descriptions(self):
        assert describe_chronotype("definite_evening") == "Definite Evening Type (Night Owl)"
        assert describe_chronotype("intermediate") == "Intermediate Type (Neither)"


class TestMCTQ:
    """Tests for MCTQ derived metrics."""

    def test_mid_sleep_and_msfsc(self):
        """
        Workday 23:00-07:00 (8h), free day 00:30-09:30 (9h).

        Weekly average = (480*5 + 540*2) / 7 = 497.1 min, so free-day
        oversleep is 42.9 min and MSFsc = 05:00 - 21 min = 04:39.
        """
        workday = MCTQDay(bedtime=t("23:00"), wake_time=t("07:00"), sleep_latency_minutes=0)
        freeday = MCTQDay(bedtime=t("00:30"), wake_time=t("09:30"), sleep_latency_minutes=0)
        result = score_mctq(workday, freeday)

        assert result.sleep_duration_workday == 480
        assert result.sleep_duration_freeday == 540
        assert result.mid_sleep_workday == t("03:00")
        assert result.mid_sleep_freeday == t("05:00")
        assert result.msfsc == t("04:39")
        assert result.social_jet_lag == 2.0

    def test_sleep_prep_and_latency_delay_onset(self):
        workday = MCTQDay(
            bedtime=t("23:00"), wake_time=t("07:00"), sleep_prep_minutes=15, sleep_latency_minutes=15
        )
        freeday = MCTQDay(bedtime=t("23:00"), wake_time=t("07:00"))
        result = score_mctq(workday, freeday)
        assert result.sleep_onset_workday == t("23:30")
        assert result.sleep_onset_freeday == t("23:15")

    def test_no_oversleep_uses_raw_mid_sleep(self):
        """Free-day sleep no longer than the weekly average is not corrected."""
        assert calculate_msfsc(480, 420, t("04:00")) == t("04:00")
        assert calculate_msfsc(480, 480, t("04:00")) == t("04:00")

    @pytest.mark.parametrize(
        "msfsc,expected",
        [
            ("02:00", "definite_morning"),
            ("02:30", "moderate_morning"),
            ("03:00", "moderate_morning"),
            ("04:00", "intermediate"),
            ("06:00", "moderate_evening"),
            ("07:00", "definite_evening"),
            ("23:30", "definite_morning"),
            ("10:00", "definite_evening"),
        ],
    )
    def test_chronotype_from_msfsc(self, msfsc, expected):
        assert chronotype_from_msfsc(t(msfsc)) == expected

    @pytest.mark.parametrize(
        "msfsc,expected",
        [("02:00", 75), ("06:00", 35), ("00:00", 86), ("12:00", 16), ("23:30", 86)],
    )
    def test_meq_equivalent_clamped(self, msfsc, expected):
        assert estimate_meq_from_msfsc(t(msfsc)) == expected

    def test_msfsc_before_midnight_is_early(self):
        """23:30 is half an hour before midnight, not 23.5h after it."""
        assert msfsc_decimal_hours(t("23:30")) == -0.5
        assert msfsc_decimal_hours(t("01:15")) == 1.25
        assert msfsc_decimal_hours(t("13:00")) == 13.0


class TestCombinedClassification:
    """Tests for combining MEQ with MSFsc."""

    def test_average_of_both(self):
        """MEQ 61 with MSFsc 04:00 (MEQ-equivalent 55) averages to 58."""
        assert combined_chronotype(61, t("04:00")) == "intermediate"

    def test_both_morning(self):
        assert combined_chronotype(71, t("02:00")) == "definite_morning"

    def test_msfsc_before_midnight_agrees_with_morning_meq(self):
        assert combined_chronotype(75, t("23:30")) == "definite_morning"

    def test_meq_only(self):
        assert combined_chronotype(35, None) == "moderate_evening"

    def test_msfsc_only(self):
        assert combined_chronotype(None, t("07:30")) == "definite_evening"

    def test_neither_defaults_to_intermediate(self):
        assert combined_chronotype(None, None) == "intermediate"


class TestBuildProfile:
    """Tests for assembling a ChronotypeProfile."""

    def test_no_questionnaires(self):
        profile = build_chronotype_profile(t("23:00"), t("07:00"))
        assert profile.chronotype == "intermediate"
        assert profile.assessment_method == "NONE"
        assert profile.marker_confidence == "low"
        assert profile.average_sleep_duration == 480

    def test_meq_responses_are_scored(self):
        profile = build_chronotype_profile(
            t("22:00"), t("06:00"), meq_responses=responses([4] * 19)
        )
        assert profile.meq_score == 76
        assert profile.chronotype == "definite_morning"
        assert profile.assessment_method == "MEQ"
        assert profile.marker_confidence == "medium"

    def test_both_questionnaires(self):
        workday = MCTQDay(bedtime=t("23:00"), wake_time=t("07:00"), sleep_latency_minutes=0)
        freeday = MCTQDay(bedtime=t("00:30"), wake_time=t("09:30"), sleep_latency_minutes=0)
        profile = build_chronotype_profile(
            t("23:00"), t("07:00"), meq_score=50, workday=workday, freeday=freeday
        )
        assert profile.assessment_method == "BOTH"
        assert profile.marker_confidence == "high"
        assert profile.msfsc == t("04:39")
        assert profile.workday_bedtime == t("23:00")
        assert profile.freeday_wake_time == t("09:30")
        # (480*5 + 540*2) / 7 = 497.1
        assert profile.average_sleep_duration == 497

    def test_out_of_range_score_rejected(self):
        with pytest.raises(ScoreOutOfRangeError):
            build_chronotype_profile(t("23:00"), t("07:00"), meq_score=90)

    def test_markers_follow_dlmo(self):
        """CBTmin sits about 7h after DLMO once blended with the wake estimate."""
        profile = build_chronotype_profile(t("23:00"), t("07:00"), meq_score=50)
        gap = profile.estimated_dlmo.hours_until(profile.estimated_cbtmin)
        assert 5 <= gap <= 9
