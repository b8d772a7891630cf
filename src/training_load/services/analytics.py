"""
Analytics service.

Orchestrates the metric calculators against stored sessions and thresholds,
and owns the per-athlete PMC cache: new and edited sessions get their TSS
computed here, and any change to a past day's load rebuilds the cached
series from that day forward.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable, Dict, List, Optional, Sequence

from ..analysis.tri_score import (
    CompositeScore,
    SportAggregate,
    WeeklyScore,
    calculate_tri_score,
    weekly_baseline,
)
from ..analysis.week_summary import WEEK_DAYS, WeekSummary, summarize_week, week_start_for
from ..config import Settings, get_settings
from ..exceptions import ValidationError
from ..metrics.efficiency import EFTrend, calculate_ef_trend
from ..metrics.fitness import PMCPoint, build_pmc, materialize_daily_loads, recompute_from
from ..metrics.projection import ProjectionPoint, TaperPlan, project_pmc, simulate_taper
from ..metrics.swim import CssResult, calculate_css
from ..metrics.tss import TssResult, calculate_session_tss
from ..metrics.zones import Zone, compute_zones
from ..models.athlete import AthleteThresholds, Session, Sport
from .base import BaseService, SessionSource, ThresholdSource
from .pmc_store import PMCStore, Series


@dataclass
class PMCResult:
    """History window, projection and current point of an athlete's PMC."""

    history: List[PMCPoint] = field(default_factory=list)
    projections: List[ProjectionPoint] = field(default_factory=list)
    current: Optional[PMCPoint] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "history": [p.to_dict() for p in self.history],
            "projections": [p.to_dict() for p in self.projections],
            "current": self.current.to_dict() if self.current else None,
        }


class AnalyticsService(BaseService):
    """
    Training load analytics for stored athletes.

    Args:
        store: Session and threshold storage (e.g. TrainingDatabase)
        pmc_store: PMC cache, shared between service instances
        settings: Application settings
        today: Clock returning the current calendar day
        logger: Optional logger
    """

    def __init__(
        self,
        store,
        pmc_store: Optional[PMCStore] = None,
        settings: Optional[Settings] = None,
        today: Callable[[], date] = date.today,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__(logger=logger)
        self._sessions: SessionSource = store
        self._thresholds: ThresholdSource = store
        self._pmc_store = pmc_store if pmc_store is not None else PMCStore()
        self._settings = settings or get_settings()
        self._today = today

    @property
    def pmc_store(self) -> PMCStore:
        return self._pmc_store

    @property
    def _recurrence(self) -> Dict[str, int]:
        return {
            "ctl_time_constant": self._settings.ctl_time_constant,
            "atl_time_constant": self._settings.atl_time_constant,
        }

    # === Zones and TSS ===

    def compute_zones(self, thresholds: AthleteThresholds) -> Dict[str, Optional[List[Zone]]]:
        """Zone tables for every threshold that is set."""
        return compute_zones(thresholds)

    def get_athlete_zones(self, athlete_id: str) -> Dict[str, Optional[List[Zone]]]:
        """Zone tables from the athlete's current thresholds."""
        return compute_zones(self._thresholds.get_thresholds(athlete_id))

    def compute_css(self, t400_seconds: float, t200_seconds: float) -> CssResult:
        """Critical Swim Speed from a 400m / 200m time trial."""
        return calculate_css(t400_seconds, t200_seconds)

    def compute_session_tss(self, session: Session, thresholds: AthleteThresholds) -> TssResult:
        """TSS for one session against the given thresholds."""
        return calculate_session_tss(session, thresholds)

    def update_thresholds(
        self,
        athlete_id: str,
        thresholds: AthleteThresholds,
        name: Optional[str] = None,
    ) -> AthleteThresholds:
        """
        Replace an athlete's thresholds.

        Sessions already stored keep their cached TSS; only sessions recorded
        afterwards are scored against the new values.
        """
        saved = self._thresholds.save_thresholds(athlete_id, thresholds, name=name)
        self.logger.info(f"Updated thresholds for athlete {athlete_id}")
        return saved

    # === Sessions ===

    def record_session(self, session: Session) -> Session:
        """
        Score and store a new session.

        A session dated before the end of the cached PMC rebuilds the
        series from its date.
        """
        thresholds = self._thresholds.get_thresholds(session.athlete_id)
        result = calculate_session_tss(session, thresholds)
        stored = self._sessions.save_session(session.with_tss(result.tss, result.method.value))
        self.logger.debug(
            f"Recorded {stored.sport.value} session {stored.id} on {stored.date}: "
            f"{result.tss} TSS ({result.method.value})"
        )
        self._invalidate_from(stored.athlete_id, stored.date)
        return stored

    def update_session(self, session: Session) -> Session:
        """
        Re-score and replace a stored session.

        The PMC is rebuilt from the earlier of the old and new session dates.
        """
        if session.id is None:
            raise ValidationError("Session id is required for an update", field="id")
        previous = self._sessions.get_session(session.id)
        if session.athlete_id is None:
            session.athlete_id = previous.athlete_id

        thresholds = self._thresholds.get_thresholds(session.athlete_id)
        result = calculate_session_tss(session, thresholds)
        stored = self._sessions.save_session(session.with_tss(result.tss, result.method.value))

        self._invalidate_from(previous.athlete_id, min(previous.date, stored.date))
        if stored.athlete_id != previous.athlete_id:
            self._invalidate_from(stored.athlete_id, stored.date)
        return stored

    def delete_session(self, session_id: str) -> bool:
        """Delete a session and rebuild the PMC from its date."""
        previous = self._sessions.get_session(session_id)
        deleted = self._sessions.delete_session(session_id)
        if deleted:
            self._invalidate_from(previous.athlete_id, previous.date)
        return deleted

    def backfill_tss(self, athlete_id: str) -> int:
        """
        Compute and attach TSS for stored sessions that have none.

        Returns:
            Number of sessions updated
        """
        thresholds = self._thresholds.get_thresholds(athlete_id)
        updated = 0
        for session in self._sessions.list_sessions(athlete_id):
            if session.tss is not None:
                continue
            result = calculate_session_tss(session, thresholds)
            self._sessions.update_session_tss(session.id, result.tss, result.method.value)
            updated += 1
        if updated:
            self.logger.info(f"Backfilled TSS for {updated} sessions of athlete {athlete_id}")
        return updated

    # === Performance Management Chart ===

    def _history_start(self, today: date) -> date:
        return today - timedelta(days=self._settings.pmc_max_history_days - 1)

    def _is_past_cap(self, current: Series, today: date) -> bool:
        # A series older than the cap must be rebuilt to match a fresh build
        return current[0].date < self._history_start(today)

    def _full_build(self, athlete_id: str, today: date) -> List[PMCPoint]:
        first = self._sessions.get_first_session_date(athlete_id)
        if first is None or first > today:
            return []
        start = max(first, self._history_start(today))

        self.backfill_tss(athlete_id)
        loads = materialize_daily_loads(
            self._sessions.get_daily_tss(athlete_id, start, today), start, today
        )
        series = build_pmc(loads, **self._recurrence)
        self.logger.info(
            f"Built PMC for athlete {athlete_id}: {len(series)} days from {start.isoformat()}"
        )
        return series

    def _extend(self, athlete_id: str, current: Series, start: date, today: date) -> List[PMCPoint]:
        loads = materialize_daily_loads(
            self._sessions.get_daily_tss(athlete_id, start, today), start, today
        )
        return recompute_from(current, loads, start, **self._recurrence)

    def _invalidate_from(self, athlete_id: str, from_date: date) -> None:
        today = self._today()

        def rebuild(current: Series) -> Sequence[PMCPoint]:
            if not current or from_date <= current[0].date or self._is_past_cap(current, today):
                return self._full_build(athlete_id, today)
            if from_date > today:
                return current
            start = min(from_date, current[-1].date + timedelta(days=1))
            return self._extend(athlete_id, current, start, today)

        if self._pmc_store.update_if_present(athlete_id, rebuild) is not None:
            self.logger.info(f"Recomputed PMC for athlete {athlete_id} from {from_date.isoformat()}")

    def get_pmc_series(self, athlete_id: str) -> Series:
        """
        Return the athlete's full PMC series through today.

        The cached snapshot is reused when current and extended when it
        ends before today. Once the series reaches back past
        ``pmc_max_history_days`` it is rebuilt from the cap instead.
        """
        today = self._today()
        snapshot = self._pmc_store.get(athlete_id)
        if snapshot and snapshot[-1].date >= today:
            return snapshot

        def refresh(current: Optional[Series]) -> Sequence[PMCPoint]:
            if current and current[-1].date >= today:
                return current
            if current and not self._is_past_cap(current, today):
                return self._extend(athlete_id, current, current[-1].date + timedelta(days=1), today)
            return self._full_build(athlete_id, today)

        return self._pmc_store.update(athlete_id, refresh)

    def get_pmc(
        self,
        athlete_id: str,
        days: Optional[int] = None,
        projection_days: Optional[int] = None,
        planned_tss: Optional[Sequence[float]] = None,
    ) -> PMCResult:
        """
        Get the PMC history window, a forward projection and the current point.

        Args:
            athlete_id: Athlete to look up
            days: Days of history to return (default from settings)
            projection_days: Days to project past today (default from settings)
            planned_tss: Optional planned daily TSS for the projection

        Returns:
            PMCResult; empty with current None for an athlete without sessions

        Raises:
            AthleteNotFoundError: If the athlete is unknown
            ValidationError: If days or projection_days are out of range
        """
        days = self._settings.pmc_default_days if days is None else days
        if projection_days is None:
            projection_days = self._settings.projection_days
        if days <= 0:
            raise ValidationError("days must be a positive number", field="days")
        if projection_days < 0:
            raise ValidationError("projection_days must be >= 0", field="projection_days")

        self._thresholds.get_thresholds(athlete_id)
        series = self.get_pmc_series(athlete_id)
        if not series:
            return PMCResult()

        window_start = self._today() - timedelta(days=days - 1)
        return PMCResult(
            history=[p for p in series if p.date >= window_start],
            projections=project_pmc(series, projection_days, planned_tss, **self._recurrence),
            current=series[-1],
        )

    # === Composite scores ===

    def _period_aggregates(self, athlete_id: str, end: date) -> Dict[Sport, SportAggregate]:
        period = self._settings.score_period_days
        return self._sessions.get_sport_aggregates(athlete_id, end - timedelta(days=period - 1), end)

    def _baseline(self, athlete_id: str, end: date) -> Dict[Sport, float]:
        baseline_days = self._settings.score_baseline_days
        return weekly_baseline(
            self._sessions.get_sport_aggregates(
                athlete_id, end - timedelta(days=baseline_days - 1), end
            ),
            baseline_days,
        )

    def get_tri_score(self, athlete_id: str) -> CompositeScore:
        """Composite per-sport score for the current week."""
        self._thresholds.get_thresholds(athlete_id)
        today = self._today()
        period = self._settings.score_period_days

        current = self._period_aggregates(athlete_id, today)
        prior = self._period_aggregates(athlete_id, today - timedelta(days=period))
        baseline = self._baseline(athlete_id, today)

        series = self.get_pmc_series(athlete_id)
        return calculate_tri_score(current, prior, baseline, series[-1] if series else None)

    def get_tri_score_history(self, athlete_id: str, weeks: Optional[int] = None) -> List[WeeklyScore]:
        """
        Tri-Score for each of the last ``weeks`` scoring periods, oldest first.

        Each period is scored against the baseline window ending with it, so
        a past week is judged by the training that preceded it.

        Raises:
            ValidationError: If weeks is not positive
        """
        weeks = self._settings.score_history_weeks if weeks is None else weeks
        if weeks <= 0:
            raise ValidationError("weeks must be a positive number", field="weeks")

        self._thresholds.get_thresholds(athlete_id)
        today = self._today()
        period = self._settings.score_period_days

        history = []
        for i in reversed(range(weeks)):
            end = today - timedelta(days=i * period)
            score = calculate_tri_score(
                self._period_aggregates(athlete_id, end), {}, self._baseline(athlete_id, end)
            )
            history.append(WeeklyScore.from_composite(end - timedelta(days=period - 1), score))
        return history

    def get_week_summary(self, athlete_id: str, week_start: Optional[date] = None) -> WeekSummary:
        """
        Volume and load totals for one week.

        Args:
            athlete_id: Athlete to look up
            week_start: First day of the week (default: Monday of this week)
        """
        self._thresholds.get_thresholds(athlete_id)
        start = week_start or week_start_for(self._today())
        sessions = self._sessions.list_sessions(
            athlete_id, start_date=start, end_date=start + timedelta(days=WEEK_DAYS - 1)
        )
        return summarize_week(sessions, start)

    def get_taper_plan(
        self,
        athlete_id: str,
        race_date: date,
        target_tsb: Optional[float] = None,
    ) -> TaperPlan:
        """
        Suggested daily TSS from tomorrow to race day, starting from today's PMC.

        Raises:
            AthleteNotFoundError: If the athlete is unknown
            ValidationError: If the athlete has no sessions or the race is
                less than a week away
        """
        if target_tsb is None:
            target_tsb = self._settings.taper_target_tsb
        self._thresholds.get_thresholds(athlete_id)
        return simulate_taper(
            self.get_pmc_series(athlete_id), race_date, target_tsb, **self._recurrence
        )

    def get_efficiency_trend(
        self,
        athlete_id: str,
        sport: Sport,
        days: Optional[int] = None,
    ) -> EFTrend:
        """
        Efficiency Factor trend for BIKE or RUN over the last ``days`` days.

        Raises:
            ValidationError: If sport is not BIKE or RUN or days is not positive
        """
        days = self._settings.ef_default_days if days is None else days
        if days <= 0:
            raise ValidationError("days must be a positive number", field="days")

        self._thresholds.get_thresholds(athlete_id)
        today = self._today()
        sport = Sport.from_string(sport)
        sessions = self._sessions.list_sessions(
            athlete_id,
            start_date=today - timedelta(days=days - 1),
            end_date=today,
            sport=sport,
        )
        return calculate_ef_trend(
            sessions,
            sport,
            min_duration_seconds=self._settings.ef_min_duration_sec,
            threshold_pct=self._settings.ef_trend_threshold_pct,
        )
