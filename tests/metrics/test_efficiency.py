"""Tests for Efficiency Factor and aerobic decoupling."""

from datetime import date, timedelta

import pytest

from training_load.exceptions import ValidationError
from training_load.metrics.efficiency import (
    calculate_aerobic_decoupling,
    calculate_ef_trend,
    calculate_efficiency_factor,
    determine_decoupling_rating,
    session_efficiency_factor,
)
from training_load.models.athlete import Session, Sport


START = date(2024, 2, 1)


def ride(day, np, hr=140, duration=3600):
    return Session(
        date=START + timedelta(days=day),
        sport="BIKE",
        duration_seconds=duration,
        normalized_power=np,
        avg_heart_rate=hr,
        id=f"ride-{day}",
    )


class TestEfficiencyFactor:
    """Tests for the EF formula."""

    def test_bike(self):
        assert calculate_efficiency_factor(200, 140, Sport.BIKE) == 1.429

    def test_run_uses_meters_per_minute(self):
        assert calculate_efficiency_factor(3.5, 150, Sport.RUN) == 1.4

    def test_no_heart_rate(self):
        assert calculate_efficiency_factor(200, 0, Sport.BIKE) == 0.0

    @pytest.mark.parametrize("sport", [Sport.SWIM, Sport.STRENGTH])
    def test_other_sports_rejected(self, sport):
        with pytest.raises(ValidationError):
            calculate_efficiency_factor(1.2, 140, sport)

    def test_session_falls_back_to_avg_power(self):
        session = Session(date=START, sport="BIKE", duration_seconds=3600, avg_power=210, avg_heart_rate=140)
        assert session_efficiency_factor(session) == 1.5

    def test_run_session_speed_from_distance(self):
        session = Session(date=START, sport="RUN", duration_seconds=3000, distance=10000, avg_heart_rate=150)
        assert session_efficiency_factor(session) == pytest.approx(1.333)

    def test_session_without_hr(self):
        assert session_efficiency_factor(ride(0, 200, hr=None)) is None


class TestEFTrend:
    """Tests for EF trend classification."""

    def test_improving(self):
        sessions = [ride(0, 180), ride(7, 185), ride(14, 195), ride(21, 200)]
        trend = calculate_ef_trend(sessions, Sport.BIKE)

        assert trend.trend_direction == "improving"
        assert trend.trend_percent == pytest.approx(8.2, abs=0.1)
        assert len(trend.points) == 4

    def test_declining(self):
        sessions = [ride(0, 200), ride(7, 195), ride(14, 185), ride(21, 180)]
        trend = calculate_ef_trend(sessions, Sport.BIKE)
        assert trend.trend_direction == "declining"

    def test_small_change_is_stable(self):
        sessions = [ride(0, 200), ride(7, 201), ride(14, 202), ride(21, 202)]
        trend = calculate_ef_trend(sessions, Sport.BIKE)
        assert trend.trend_direction == "stable"

    def test_order_independent(self):
        sessions = [ride(21, 200), ride(0, 180), ride(14, 195), ride(7, 185)]
        trend = calculate_ef_trend(sessions, Sport.BIKE)
        assert [p.date for p in trend.points] == sorted(p.date for p in trend.points)
        assert trend.trend_direction == "improving"

    def test_short_sessions_excluded(self):
        sessions = [ride(0, 180), ride(3, 400, duration=1200), ride(7, 185)]
        trend = calculate_ef_trend(sessions, Sport.BIKE)
        assert [p.session_id for p in trend.points] == ["ride-0", "ride-7"]

    def test_other_sports_excluded(self):
        run = Session(date=START, sport="RUN", duration_seconds=3600, avg_speed=3.5, avg_heart_rate=150)
        trend = calculate_ef_trend([run, ride(1, 200)], Sport.BIKE)
        assert len(trend.points) == 1

    def test_fewer_than_two_sessions(self):
        trend = calculate_ef_trend([ride(0, 200)], Sport.BIKE)

        assert trend.trend_direction == "stable"
        assert trend.trend_percent == 0.0
        assert trend.best_ef.session_id == "ride-0"

    def test_no_sessions(self):
        trend = calculate_ef_trend([], Sport.RUN)

        assert trend.points == []
        assert trend.average_ef == 0.0
        assert trend.best_ef is None

    def test_best_and_average(self):
        sessions = [ride(0, 180), ride(7, 210), ride(14, 195)]
        trend = calculate_ef_trend(sessions, Sport.BIKE)

        assert trend.best_ef.session_id == "ride-7"
        assert trend.average_ef == pytest.approx((1.286 + 1.5 + 1.393) / 3, abs=1e-3)

    def test_swim_rejected(self):
        with pytest.raises(ValidationError):
            calculate_ef_trend([], Sport.SWIM)


class TestAerobicDecoupling:
    """Tests for Pw:HR decoupling."""

    def test_steady_effort_is_excellent(self):
        result = calculate_aerobic_decoupling([140] * 40, [200] * 40)

        assert result.decoupling_percent == 0.0
        assert result.rating == "excellent"

    def test_five_percent_drift(self):
        result = calculate_aerobic_decoupling([140] * 40, [200] * 20 + [190] * 20)

        assert result.decoupling_percent == pytest.approx(5.0)
        assert result.ef_first_half == 1.429
        assert result.rating == "good"

    def test_too_few_samples(self):
        assert calculate_aerobic_decoupling([140] * 10, [200] * 10) is None

    def test_dropouts_ignored(self):
        hr = [140] * 40
        power = [200] * 15 + [0] * 5 + [200] * 20
        result = calculate_aerobic_decoupling(hr, power)
        assert result.decoupling_percent == 0.0

    @pytest.mark.parametrize(
        "percent,rating",
        [(4.9, "excellent"), (5.0, "good"), (7.5, "needs_work"), (10.0, "deficient")],
    )
    def test_ratings(self, percent, rating):
        assert determine_decoupling_rating(percent) == rating
