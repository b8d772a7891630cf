"""
Composite multi-sport score (Tri-Score).

Each sport is scored 0-100 from its weekly TSS relative to the athlete's own
rolling baseline, so athletes with different histories are never compared
on a raw TSS scale. Sports are combined into a weighted overall score and
checked for balance. Sports without activity in the period are left out of
both the overall score and the balance comparison.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional

from ..metrics.fitness import PMCPoint, determine_fitness_level
from ..models.athlete import Session, Sport

SPORT_WEIGHTS: Dict[Sport, float] = {
    Sport.SWIM: 0.20,
    Sport.BIKE: 0.35,
    Sport.RUN: 0.30,
    Sport.STRENGTH: 0.15,
}

# Ratio of weekly TSS to baseline that scores 50
SCORE_HALF_RATIO = 0.5
# Strongest-to-weakest gap (points) above which training is unbalanced
IMBALANCE_GAP = 20.0
LOW_BALANCE_SCORE = 50


@dataclass(frozen=True)
class SportAggregate:
    """Volume of one sport over a period."""

    hours: float = 0.0
    tss: float = 0.0
    activity_count: int = 0

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "hours": self.hours,
            "tss": self.tss,
            "activity_count": self.activity_count,
        }


@dataclass(frozen=True)
class SportScore:
    """Score for one sport in the current period."""

    score: float
    trend: float
    weekly_hours: float
    weekly_tss: float
    activity_count: int

    @property
    def trained(self) -> bool:
        return self.activity_count > 0

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "score": self.score,
            "trend": self.trend,
            "weekly_hours": self.weekly_hours,
            "weekly_tss": self.weekly_tss,
            "activity_count": self.activity_count,
        }


@dataclass(frozen=True)
class BalanceVerdict:
    """Balance across the sports the athlete actually trains."""

    balanced: bool
    balance_score: float
    weakest: Optional[Sport]
    strongest: Optional[Sport]
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "balanced": self.balanced,
            "balance_score": self.balance_score,
            "weakest": self.weakest.value if self.weakest else None,
            "strongest": self.strongest.value if self.strongest else None,
            "recommendations": list(self.recommendations),
        }


@dataclass(frozen=True)
class FitnessSnapshot:
    """PMC state the composite score was computed against."""

    ctl: float
    atl: float
    tsb: float
    ramp_rate: Optional[float]
    fitness_level: str

    @classmethod
    def from_point(cls, point: Optional[PMCPoint]) -> "FitnessSnapshot":
        if point is None:
            return cls(ctl=0.0, atl=0.0, tsb=0.0, ramp_rate=None, fitness_level=determine_fitness_level(0.0))
        return cls(
            ctl=point.ctl,
            atl=point.atl,
            tsb=point.tsb,
            ramp_rate=point.ramp_rate,
            fitness_level=determine_fitness_level(point.ctl),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "ctl": round(self.ctl),
            "atl": round(self.atl),
            "tsb": round(self.tsb),
            "ramp_rate": round(self.ramp_rate, 1) if self.ramp_rate is not None else None,
            "fitness_level": self.fitness_level,
        }


@dataclass(frozen=True)
class CompositeScore:
    """Tri-Score: per-sport scores, overall score, balance and fitness."""

    overall: float
    overall_trend: float
    sports: Dict[Sport, SportScore]
    balance: BalanceVerdict
    fitness: FitnessSnapshot

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        result = {
            "overall": self.overall,
            "overall_trend": self.overall_trend,
        }
        for sport in Sport:
            result[sport.value.lower()] = self.sports[sport].to_dict()
        result["balance"] = self.balance.to_dict()
        result["fitness"] = self.fitness.to_dict()
        return result


@dataclass(frozen=True)
class WeeklyScore:
    """One week of Tri-Score history."""

    week_start: date
    overall: float
    sports: Dict[Sport, float]

    @classmethod
    def from_composite(cls, week_start: date, score: CompositeScore) -> "WeeklyScore":
        return cls(
            week_start=week_start,
            overall=score.overall,
            sports={sport: s.score for sport, s in score.sports.items()},
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        result = {"week": self.week_start.isoformat(), "overall": self.overall}
        for sport in Sport:
            result[sport.value.lower()] = self.sports.get(sport, 0.0)
        return result


def aggregate_by_sport(
    sessions: Iterable[Session],
    start: date,
    end: date,
) -> Dict[Sport, SportAggregate]:
    """
    Sum hours, TSS and session count per sport for sessions in [start, end].

    Sessions without a cached TSS count towards hours and activity count
    with a TSS of 0.
    """
    hours: Dict[Sport, float] = defaultdict(float)
    tss: Dict[Sport, float] = defaultdict(float)
    counts: Dict[Sport, int] = defaultdict(int)

    for session in sessions:
        if not start <= session.date <= end:
            continue
        hours[session.sport] += session.duration_hours
        tss[session.sport] += session.tss or 0.0
        counts[session.sport] += 1

    return {
        sport: SportAggregate(hours=hours[sport], tss=tss[sport], activity_count=counts[sport])
        for sport in counts
    }


def weekly_baseline(aggregates: Mapping[Sport, SportAggregate], days: int) -> Dict[Sport, float]:
    """Convert aggregates over ``days`` into mean weekly TSS per sport."""
    weeks = days / 7
    return {sport: agg.tss / weeks for sport, agg in aggregates.items()}


def score_from_baseline(weekly_tss: float, baseline: float) -> float:
    """
    Score a week's TSS against the personal weekly baseline.

    Score = 100 * r / (r + 0.5) with r = weekly_tss / baseline, so a week
    at baseline scores 66.7 and the score approaches 100 asymptotically.
    Without a baseline the current week is taken as the baseline.

    Args:
        weekly_tss: TSS over the scored week
        baseline: Mean weekly TSS over the baseline window

    Returns:
        Score in [0, 100)
    """
    if weekly_tss <= 0:
        return 0.0
    ratio = weekly_tss / baseline if baseline > 0 else 1.0
    return 100 * ratio / (ratio + SCORE_HALF_RATIO)


def _weighted_overall(scores: Mapping[Sport, float]) -> float:
    total_weight = sum(SPORT_WEIGHTS[sport] for sport in scores)
    if total_weight <= 0:
        return 0.0
    return sum(score * SPORT_WEIGHTS[sport] for sport, score in scores.items()) / total_weight


def calculate_balance(scores: Mapping[Sport, SportScore]) -> BalanceVerdict:
    """
    Compare each trained sport's score with the mean of the other trained sports.

    balanceScore = 100 - 2 * max |score - mean(others)|, floored at 0.
    Training is unbalanced when the strongest sport beats the weakest by
    more than 20 points; the recommendation then names the weakest sport.

    Args:
        scores: Per-sport scores; untrained sports are ignored

    Returns:
        BalanceVerdict
    """
    trained = {sport: s.score for sport, s in scores.items() if s.trained}

    if not trained:
        return BalanceVerdict(
            balanced=True,
            balance_score=100.0,
            weakest=None,
            strongest=None,
            recommendations=["No recent training to assess balance"],
        )
    if len(trained) == 1:
        (only,) = trained
        return BalanceVerdict(
            balanced=True,
            balance_score=100.0,
            weakest=only,
            strongest=only,
            recommendations=[f"Only {only.value.lower()} trained recently; nothing to balance against"],
        )

    max_deviation = 0.0
    for sport, score in trained.items():
        others = [s for other, s in trained.items() if other != sport]
        max_deviation = max(max_deviation, abs(score - sum(others) / len(others)))
    balance_score = max(0.0, round(100 - max_deviation * 2, 1))

    # Ties resolve in enumeration order
    ordered = sorted(trained, key=lambda sport: trained[sport])
    weakest, strongest = ordered[0], ordered[-1]
    balanced = trained[strongest] - trained[weakest] <= IMBALANCE_GAP

    recommendations = []
    if not balanced:
        recommendations.append(f"Focus on {weakest.value.lower()} training to improve balance")
    if balance_score < LOW_BALANCE_SCORE:
        recommendations.append("Work on balancing training across the sports you train")
    if not recommendations:
        recommendations.append("Great balance! Maintain consistent training across your sports")

    return BalanceVerdict(
        balanced=balanced,
        balance_score=balance_score,
        weakest=weakest,
        strongest=strongest,
        recommendations=recommendations,
    )


def calculate_tri_score(
    current: Mapping[Sport, SportAggregate],
    prior: Mapping[Sport, SportAggregate],
    baseline: Mapping[Sport, float],
    pmc_point: Optional[PMCPoint] = None,
) -> CompositeScore:
    """
    Calculate the composite score.

    Args:
        current: Per-sport aggregate for the current week
        prior: Per-sport aggregate for the week before
        baseline: Mean weekly TSS per sport over the baseline window
        pmc_point: Latest PMC point, if any

    Returns:
        CompositeScore covering all four sports
    """
    sports: Dict[Sport, SportScore] = {}
    current_scores: Dict[Sport, float] = {}
    prior_scores: Dict[Sport, float] = {}

    for sport in Sport:
        now = current.get(sport, SportAggregate())
        before = prior.get(sport, SportAggregate())
        sport_baseline = baseline.get(sport, 0.0)

        score = score_from_baseline(now.tss, sport_baseline)
        prior_score = score_from_baseline(before.tss, sport_baseline)

        if now.activity_count > 0:
            current_scores[sport] = score
        if before.activity_count > 0:
            prior_scores[sport] = prior_score

        sports[sport] = SportScore(
            score=round(score, 1),
            trend=round(score - prior_score, 1),
            weekly_hours=round(now.hours, 1),
            weekly_tss=round(now.tss, 1),
            activity_count=now.activity_count,
        )

    overall = _weighted_overall(current_scores)
    overall_trend = overall - _weighted_overall(prior_scores)

    return CompositeScore(
        overall=round(overall, 1),
        overall_trend=round(overall_trend, 1),
        sports=sports,
        balance=calculate_balance(sports),
        fitness=FitnessSnapshot.from_point(pmc_point),
    )
