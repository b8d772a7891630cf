"""Weekly training volume summary."""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, Iterable

from ..models.athlete import Session, Sport

WEEK_DAYS = 7


def week_start_for(day: date) -> date:
    """Monday of the week containing ``day``."""
    return day - timedelta(days=day.weekday())


@dataclass
class SportTotals:
    """Duration and TSS of one sport within a week."""

    duration_seconds: float = 0.0
    tss: float = 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "duration_seconds": self.duration_seconds,
            "tss": round(self.tss, 1),
        }


@dataclass
class WeekSummary:
    """Totals for the seven days starting at ``week_start``."""

    week_start: date
    total_tss: float = 0.0
    total_duration_seconds: float = 0.0
    total_distance: float = 0.0
    activity_count: int = 0
    by_sport: Dict[Sport, SportTotals] = field(
        default_factory=lambda: {sport: SportTotals() for sport in Sport}
    )

    @property
    def week_end(self) -> date:
        return self.week_start + timedelta(days=WEEK_DAYS - 1)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "week_start": self.week_start.isoformat(),
            "week_end": self.week_end.isoformat(),
            "total_tss": round(self.total_tss, 1),
            "total_duration_seconds": self.total_duration_seconds,
            "total_distance": self.total_distance,
            "activity_count": self.activity_count,
            "by_sport": {sport.value: totals.to_dict() for sport, totals in self.by_sport.items()},
        }


def summarize_week(sessions: Iterable[Session], week_start: date) -> WeekSummary:
    """
    Total the sessions falling in the week starting at ``week_start``.

    Sessions outside the seven days are ignored. Sessions without a cached
    TSS or distance count as 0 for those totals.
    """
    summary = WeekSummary(week_start=week_start)
    for session in sessions:
        if not week_start <= session.date <= summary.week_end:
            continue
        tss = session.tss or 0.0
        summary.total_tss += tss
        summary.total_duration_seconds += session.duration_seconds
        summary.total_distance += session.distance or 0.0
        summary.activity_count += 1

        totals = summary.by_sport[session.sport]
        totals.duration_seconds += session.duration_seconds
        totals.tss += tss
    return summary
