"""Tests for the composite Tri-Score."""

from datetime import date, timedelta

import pytest

from training_load.analysis.tri_score import (
    SportAggregate,
    SportScore,
    aggregate_by_sport,
    calculate_balance,
    calculate_tri_score,
    score_from_baseline,
    weekly_baseline,
)
from training_load.metrics.fitness import build_pmc
from training_load.models.athlete import Session, Sport


END = date(2024, 6, 30)


def score(value, count=1):
    return SportScore(score=value, trend=0.0, weekly_hours=1.0, weekly_tss=50.0, activity_count=count)


def untrained():
    return SportScore(score=0.0, trend=0.0, weekly_hours=0.0, weekly_tss=0.0, activity_count=0)


class TestScoreFromBaseline:
    """Tests for the saturating per-sport score."""

    def test_at_baseline(self):
        assert score_from_baseline(100, 100) == pytest.approx(66.67, abs=0.01)

    def test_double_baseline(self):
        assert score_from_baseline(200, 100) == pytest.approx(80.0)

    def test_half_baseline_scores_50(self):
        assert score_from_baseline(50, 100) == pytest.approx(50.0)

    def test_no_load(self):
        assert score_from_baseline(0, 100) == 0.0

    def test_no_baseline(self):
        assert score_from_baseline(75, 0) == pytest.approx(66.67, abs=0.01)

    def test_never_reaches_100(self):
        assert score_from_baseline(10_000, 1) < 100


class TestBalance:
    """Tests for balance across trained sports."""

    def test_untrained_sports_excluded(self):
        scores = {
            Sport.SWIM: untrained(),
            Sport.BIKE: score(80),
            Sport.RUN: score(40),
            Sport.STRENGTH: untrained(),
        }
        verdict = calculate_balance(scores)

        assert verdict.balance_score == 20.0
        assert verdict.balanced is False
        assert verdict.weakest == Sport.RUN
        assert verdict.strongest == Sport.BIKE
        assert verdict.recommendations[0] == "Focus on run training to improve balance"
        text = " ".join(verdict.recommendations).lower()
        assert "swim" not in text
        assert "strength" not in text

    def test_close_scores_are_balanced(self):
        verdict = calculate_balance({Sport.BIKE: score(70), Sport.RUN: score(62), Sport.SWIM: score(66)})

        assert verdict.balanced is True
        assert verdict.balance_score > 80
        assert verdict.recommendations[0].startswith("Great balance!")

    def test_balance_score_floored_at_zero(self):
        verdict = calculate_balance({Sport.BIKE: score(95), Sport.RUN: score(5)})
        assert verdict.balance_score == 0.0

    def test_single_sport(self):
        verdict = calculate_balance({Sport.BIKE: score(70), Sport.RUN: untrained()})

        assert verdict.balanced is True
        assert verdict.balance_score == 100.0
        assert verdict.weakest == Sport.BIKE
        assert "Only bike trained recently" in verdict.recommendations[0]

    def test_nothing_trained(self):
        verdict = calculate_balance({sport: untrained() for sport in Sport})

        assert verdict.balanced is True
        assert verdict.weakest is None
        assert verdict.recommendations == ["No recent training to assess balance"]


class TestTriScore:
    """Tests for combining sports into the composite score."""

    def test_overall_renormalized_over_trained_sports(self):
        current = {
            Sport.BIKE: SportAggregate(hours=3.0, tss=100.0, activity_count=2),
            Sport.RUN: SportAggregate(hours=2.0, tss=200.0, activity_count=2),
        }
        baseline = {Sport.BIKE: 100.0, Sport.RUN: 100.0}
        result = calculate_tri_score(current, {}, baseline)

        assert result.sports[Sport.BIKE].score == 66.7
        assert result.sports[Sport.RUN].score == 80.0
        assert result.overall == 72.8
        assert result.sports[Sport.SWIM].score == 0.0
        assert result.sports[Sport.SWIM].activity_count == 0

    def test_sport_trend(self):
        current = {Sport.BIKE: SportAggregate(hours=3.0, tss=100.0, activity_count=2)}
        prior = {Sport.BIKE: SportAggregate(hours=2.0, tss=50.0, activity_count=1)}
        result = calculate_tri_score(current, prior, {Sport.BIKE: 100.0})

        assert result.sports[Sport.BIKE].trend == 16.7
        assert result.overall_trend == 16.7

    def test_no_training(self):
        result = calculate_tri_score({}, {}, {})

        assert result.overall == 0.0
        assert result.fitness.fitness_level == "Beginner"
        assert result.fitness.ctl == 0.0
        assert result.fitness.ramp_rate is None

    def test_fitness_snapshot_from_pmc(self):
        series = build_pmc([(END - timedelta(days=i), 0.0) for i in range(1, -1, -1)], initial_ctl=60, initial_atl=70)
        result = calculate_tri_score({}, {}, {}, pmc_point=series[-1])

        assert result.fitness.fitness_level == "Intermediate"
        assert result.fitness.ctl == pytest.approx(series[-1].ctl)

    def test_to_dict_keys(self):
        data = calculate_tri_score({}, {}, {}).to_dict()
        assert list(data) == ["overall", "overall_trend", "swim", "bike", "run", "strength", "balance", "fitness"]
        assert data["fitness"] == {
            "ctl": 0,
            "atl": 0,
            "tsb": 0,
            "ramp_rate": None,
            "fitness_level": "Beginner",
        }


class TestAggregation:
    """Tests for per-sport aggregation."""

    def test_aggregate_window(self):
        sessions = [
            Session(date=END, sport="BIKE", duration_seconds=3600, tss=80.0),
            Session(date=END - timedelta(days=2), sport="BIKE", duration_seconds=1800, tss=40.0),
            Session(date=END - timedelta(days=1), sport="RUN", duration_seconds=2700),
            Session(date=END - timedelta(days=10), sport="SWIM", duration_seconds=3600, tss=50.0),
        ]
        aggregates = aggregate_by_sport(sessions, END - timedelta(days=6), END)

        assert set(aggregates) == {Sport.BIKE, Sport.RUN}
        assert aggregates[Sport.BIKE] == SportAggregate(hours=1.5, tss=120.0, activity_count=2)
        assert aggregates[Sport.RUN].tss == 0.0
        assert aggregates[Sport.RUN].activity_count == 1

    def test_weekly_baseline(self):
        aggregates = {Sport.BIKE: SportAggregate(hours=30.0, tss=1800.0, activity_count=18)}
        assert weekly_baseline(aggregates, 42) == {Sport.BIKE: pytest.approx(300.0)}
