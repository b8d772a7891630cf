"""Tests for per-session TSS calculations."""

from datetime import date

import pytest

from training_load.exceptions import InvalidSessionError, ValidationError
from training_load.metrics.tss import (
    TssMethod,
    calculate_duration_tss,
    calculate_hr_tss,
    calculate_intensity_factor,
    calculate_normalized_power,
    calculate_power_tss,
    calculate_session_tss,
    calculate_variability_index,
)
from training_load.models.athlete import AthleteThresholds, Session


DAY = date(2024, 3, 1)
FULL = AthleteThresholds(ftp=250, lthr=165, threshold_pace=4.0, css=1.25)


def session(sport="BIKE", duration=3600, **metrics):
    return Session(date=DAY, sport=sport, duration_seconds=duration, **metrics)


class TestTssFormulas:
    """Tests for the individual TSS formulas."""

    def test_one_hour_at_ftp_is_100(self):
        result = calculate_power_tss(3600, 250, 250)

        assert result.tss == 100.0
        assert result.intensity_factor == 1.0
        assert result.method == TssMethod.POWER

    def test_power_tss_scales_with_intensity_squared(self):
        result = calculate_power_tss(3600, 200, 250)
        assert result.tss == 64.0
        assert result.intensity_factor == 0.8

    def test_hr_tss_is_quadratic(self):
        """hrTSS = hours * (HR / LTHR)^2 * 100."""
        result = calculate_hr_tss(3600, 150, 165)
        assert result.tss == 82.6
        assert result.intensity_factor == 0.909

    def test_duration_only(self):
        assert calculate_duration_tss(3600).tss == 36.0
        assert calculate_duration_tss(5400).tss == 54.0

    def test_intensity_factor_without_threshold(self):
        assert calculate_intensity_factor(200, 0) == 0.0


class TestNormalizedPower:
    """Tests for NP from a power stream and the variability index."""

    def test_steady_power(self):
        assert calculate_normalized_power([200] * 120) == 200.0

    def test_variable_power_exceeds_average(self):
        samples = [100] * 30 + [300] * 30
        np = calculate_normalized_power(samples)

        assert 200 < np < 300
        assert calculate_variability_index(np, sum(samples) / len(samples)) > 1.0

    def test_short_stream_returns_average(self):
        assert calculate_normalized_power([100, 200, 240]) == 180.0

    def test_empty_stream(self):
        assert calculate_normalized_power([]) == 0.0

    def test_window_follows_sample_rate(self):
        """At one sample per 5 seconds the 30 s window is six samples."""
        samples = [100] * 6 + [300] * 6

        assert calculate_normalized_power(samples) == 200.0
        assert calculate_normalized_power(samples, sample_seconds=5) > 200.0
        assert calculate_normalized_power([250] * 6, sample_seconds=5) == 250.0

    def test_invalid_sample_interval(self):
        with pytest.raises(ValidationError):
            calculate_normalized_power([200] * 60, sample_seconds=0)

    def test_variability_index(self):
        assert calculate_variability_index(220, 200) == 1.1
        assert calculate_variability_index(220, 0) == 0.0


class TestSessionTssFallback:
    """Tests for choosing the TSS method by data availability."""

    def test_power_preferred_over_hr(self):
        result = calculate_session_tss(
            session(normalized_power=250, avg_heart_rate=150), FULL
        )
        assert result.method == TssMethod.POWER
        assert result.tss == 100.0

    def test_average_power_when_no_np(self):
        result = calculate_session_tss(session(avg_power=200), FULL)
        assert result.method == TssMethod.POWER
        assert result.tss == 64.0

    def test_power_without_ftp_falls_back_to_hr(self):
        thresholds = AthleteThresholds(lthr=165)
        result = calculate_session_tss(session(normalized_power=250, avg_heart_rate=150), thresholds)
        assert result.method == TssMethod.HEART_RATE

    def test_run_pace_from_distance(self):
        result = calculate_session_tss(session("RUN", distance=12000), FULL)

        assert result.method == TssMethod.PACE
        assert result.intensity_factor == 0.833
        assert result.tss == 69.4

    def test_run_pace_from_avg_speed(self):
        result = calculate_session_tss(session("RUN", avg_speed=4.0), FULL)
        assert result.method == TssMethod.PACE
        assert result.tss == 100.0

    def test_swim_against_css(self):
        result = calculate_session_tss(session("SWIM", duration=1800, distance=2000), FULL)
        assert result.method == TssMethod.PACE
        assert result.tss == 39.5

    def test_run_power_is_not_used(self):
        """The power tier only applies to cycling."""
        result = calculate_session_tss(session("RUN", avg_power=300, avg_heart_rate=150), FULL)
        assert result.method == TssMethod.HEART_RATE

    def test_hr_only(self):
        result = calculate_session_tss(
            session("RUN", avg_heart_rate=150), AthleteThresholds(lthr=165)
        )
        assert result.method == TssMethod.HEART_RATE
        assert result.tss == 82.6

    def test_no_data_uses_duration(self):
        result = calculate_session_tss(session("STRENGTH"), FULL)

        assert result.method == TssMethod.DURATION
        assert result.tss > 0
        assert result.tss == 36.0

    def test_no_thresholds_uses_duration(self):
        result = calculate_session_tss(
            session(normalized_power=250, avg_heart_rate=150), AthleteThresholds()
        )
        assert result.method == TssMethod.DURATION

    @pytest.mark.parametrize(
        "metrics",
        [
            {"normalized_power": 250},
            {"avg_heart_rate": 150},
            {},
        ],
    )
    def test_zero_duration_scores_zero(self, metrics):
        result = calculate_session_tss(session(duration=0, **metrics), FULL)
        assert result.tss == 0.0

    def test_idempotent(self):
        s = session(normalized_power=231, avg_heart_rate=147, duration=5432)
        assert calculate_session_tss(s, FULL) == calculate_session_tss(s, FULL)

    def test_to_dict(self):
        result = calculate_session_tss(session(normalized_power=250), FULL)
        assert result.to_dict() == {
            "tss": 100.0,
            "intensity_factor": 1.0,
            "normalized_effort": 250,
            "method": "power",
        }


class TestSessionValidation:
    """Input contract violations are rejected when a session is built."""

    def test_negative_duration(self):
        with pytest.raises(InvalidSessionError):
            session(duration=-60)

    def test_negative_power(self):
        with pytest.raises(InvalidSessionError):
            session(avg_power=-5)

    def test_unknown_sport(self):
        with pytest.raises(InvalidSessionError):
            session("ROWING")

    def test_sport_aliases(self):
        assert session("cycling").sport.value == "BIKE"
        assert session("running").sport.value == "RUN"
