"""Cross-sport analysis built on the training metrics."""

from .tri_score import (
    SPORT_WEIGHTS,
    BalanceVerdict,
    CompositeScore,
    FitnessSnapshot,
    SportAggregate,
    SportScore,
    WeeklyScore,
    aggregate_by_sport,
    calculate_balance,
    calculate_tri_score,
    score_from_baseline,
    weekly_baseline,
)
from .week_summary import SportTotals, WeekSummary, summarize_week, week_start_for

__all__ = [
    "SPORT_WEIGHTS",
    "BalanceVerdict",
    "CompositeScore",
    "FitnessSnapshot",
    "SportAggregate",
    "SportScore",
    "WeeklyScore",
    "aggregate_by_sport",
    "calculate_balance",
    "calculate_tri_score",
    "score_from_baseline",
    "weekly_baseline",
    # Weekly volume
    "SportTotals",
    "WeekSummary",
    "summarize_week",
    "week_start_for",
]
