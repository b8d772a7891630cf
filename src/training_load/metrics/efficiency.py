"""Aerobic efficiency: Efficiency Factor trend and aerobic decoupling."""

import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence

from ..exceptions import ValidationError
from ..models.athlete import Session, Sport

logger = logging.getLogger(__name__)

EF_SPORTS = (Sport.BIKE, Sport.RUN)
MIN_EF_DURATION_SECONDS = 1800
TREND_THRESHOLD_PCT = 2.0
MIN_DECOUPLING_SAMPLES = 20
MIN_HALF_SAMPLES = 10
EF_PRECISION = 3


@dataclass(frozen=True)
class EFPoint:
    """Efficiency Factor of a single qualifying session."""

    date: date
    ef: float
    duration_seconds: float
    session_id: Optional[str] = None
    name: Optional[str] = None
    distance: Optional[float] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "date": self.date.isoformat(),
            "session_id": self.session_id,
            "name": self.name,
            "ef": self.ef,
            "duration_seconds": self.duration_seconds,
            "distance": self.distance,
        }


@dataclass(frozen=True)
class EFTrend:
    """EF trend over a window of sessions."""

    points: List[EFPoint]
    average_ef: float
    trend_direction: str  # 'improving', 'declining', 'stable'
    trend_percent: float
    best_ef: Optional[EFPoint]

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "points": [p.to_dict() for p in self.points],
            "average_ef": self.average_ef,
            "trend_direction": self.trend_direction,
            "trend_percent": self.trend_percent,
            "best_ef": self.best_ef.to_dict() if self.best_ef else None,
        }


@dataclass(frozen=True)
class DecouplingResult:
    """Pw:HR or Pa:HR drift between the two halves of a session."""

    decoupling_percent: float
    ef_first_half: float
    ef_second_half: float
    rating: str  # 'excellent', 'good', 'needs_work', 'deficient'

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "decoupling_percent": self.decoupling_percent,
            "ef_first_half": self.ef_first_half,
            "ef_second_half": self.ef_second_half,
            "rating": self.rating,
        }


def _require_ef_sport(sport) -> Sport:
    sport = Sport.from_string(sport)
    if sport not in EF_SPORTS:
        raise ValidationError(
            f"Efficiency Factor is only defined for BIKE and RUN, got {sport.value}",
            field="sport",
        )
    return sport


def calculate_efficiency_factor(output: float, avg_heart_rate: float, sport: Sport) -> float:
    """
    Calculate Efficiency Factor (EF).

    Higher EF means more output for the same cardiac cost.

    - Bike: NP / avg HR (typically 1.0-2.0 for trained cyclists)
    - Run: speed (m/s) * 60 / avg HR, i.e. meters per minute per beat

    Args:
        output: Normalized power in watts (bike) or speed in m/s (run)
        avg_heart_rate: Average heart rate in bpm
        sport: BIKE or RUN

    Returns:
        EF rounded to 3 decimals, 0.0 without heart rate

    Raises:
        ValidationError: If sport is not BIKE or RUN
    """
    sport = _require_ef_sport(sport)
    if not avg_heart_rate or avg_heart_rate <= 0:
        return 0.0
    if sport == Sport.BIKE:
        return round(output / avg_heart_rate, EF_PRECISION)
    return round(output * 60 / avg_heart_rate, EF_PRECISION)


def session_efficiency_factor(session: Session) -> Optional[float]:
    """EF of a session, or None when it lacks heart rate or output data."""
    if session.sport not in EF_SPORTS or not session.avg_heart_rate:
        return None
    if session.sport == Sport.BIKE:
        output = session.normalized_power or session.avg_power
    else:
        output = session.speed
    if not output:
        return None
    return calculate_efficiency_factor(output, session.avg_heart_rate, session.sport)


def calculate_ef_trend(
    sessions: Sequence[Session],
    sport: Sport,
    min_duration_seconds: float = MIN_EF_DURATION_SECONDS,
    threshold_pct: float = TREND_THRESHOLD_PCT,
) -> EFTrend:
    """
    Analyze the EF trend for one sport.

    Sessions of other sports, shorter than ``min_duration_seconds`` or
    without heart rate and output data are excluded. The trend compares the
    mean EF of the first half of the qualifying sessions (by date) against
    the second half.

    Args:
        sessions: Candidate sessions, any order
        sport: BIKE or RUN
        min_duration_seconds: Shortest session considered (default 30 min)
        threshold_pct: Change needed to call a trend (default 2%)

    Returns:
        EFTrend; fewer than 2 qualifying sessions give a stable 0% trend

    Raises:
        ValidationError: If sport is not BIKE or RUN
    """
    sport = _require_ef_sport(sport)

    points = []
    for session in sorted(sessions, key=lambda s: s.date):
        if session.sport != sport or session.duration_seconds < min_duration_seconds:
            continue
        ef = session_efficiency_factor(session)
        if ef:
            points.append(
                EFPoint(
                    date=session.date,
                    ef=ef,
                    duration_seconds=session.duration_seconds,
                    session_id=session.id,
                    name=session.name,
                    distance=session.distance,
                )
            )

    if not points:
        return EFTrend(points=[], average_ef=0.0, trend_direction="stable", trend_percent=0.0, best_ef=None)

    average_ef = sum(p.ef for p in points) / len(points)
    best_ef = max(points, key=lambda p: p.ef)

    trend_direction = "stable"
    trend_percent = 0.0
    if len(points) >= 2:
        midpoint = len(points) // 2
        first_avg = sum(p.ef for p in points[:midpoint]) / midpoint
        second_avg = sum(p.ef for p in points[midpoint:]) / (len(points) - midpoint)
        trend_percent = (second_avg - first_avg) / first_avg * 100
        if trend_percent > threshold_pct:
            trend_direction = "improving"
        elif trend_percent < -threshold_pct:
            trend_direction = "declining"

    return EFTrend(
        points=points,
        average_ef=round(average_ef, EF_PRECISION),
        trend_direction=trend_direction,
        trend_percent=round(trend_percent, 1),
        best_ef=best_ef,
    )


def _half_ef(pairs: Sequence[tuple]) -> Optional[float]:
    valid = [(hr, out) for hr, out in pairs if hr and out]
    if len(valid) < MIN_HALF_SAMPLES:
        return None
    avg_hr = sum(hr for hr, _ in valid) / len(valid)
    avg_output = sum(out for _, out in valid) / len(valid)
    return avg_output / avg_hr


def determine_decoupling_rating(decoupling_percent: float) -> str:
    """
    Rate aerobic decoupling.

    - < 5%: excellent (fully aerobic)
    - 5-7.5%: good
    - 7.5-10%: needs_work
    - >= 10%: deficient (needs more base training)
    """
    if decoupling_percent < 5:
        return "excellent"
    elif decoupling_percent < 7.5:
        return "good"
    elif decoupling_percent < 10:
        return "needs_work"
    else:
        return "deficient"


def calculate_aerobic_decoupling(
    hr_samples: Sequence[Optional[float]],
    output_samples: Sequence[Optional[float]],
) -> Optional[DecouplingResult]:
    """
    Calculate aerobic decoupling from paired HR and output streams.

    Decoupling % = (EF1 - EF2) / EF1 * 100, with EF1 and EF2 the
    output-per-beat ratios of the first and second half of the session.

    Args:
        hr_samples: Heart rate per sample
        output_samples: Power or speed per sample, aligned with hr_samples

    Returns:
        DecouplingResult, or None with too few usable samples
    """
    pairs = list(zip(hr_samples, output_samples))
    if len(pairs) < MIN_DECOUPLING_SAMPLES:
        logger.debug("Not enough samples for decoupling: %d", len(pairs))
        return None

    midpoint = len(pairs) // 2
    ef_first = _half_ef(pairs[:midpoint])
    ef_second = _half_ef(pairs[midpoint:])
    if not ef_first or ef_second is None:
        return None

    decoupling = round((ef_first - ef_second) / ef_first * 100, 2)
    return DecouplingResult(
        decoupling_percent=decoupling,
        ef_first_half=round(ef_first, EF_PRECISION),
        ef_second_half=round(ef_second, EF_PRECISION),
        rating=determine_decoupling_rating(decoupling),
    )
