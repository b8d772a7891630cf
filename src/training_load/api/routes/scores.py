"""Composite score and efficiency API routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ...services.analytics import AnalyticsService
from ..deps import get_analytics_service
from ..schemas import EFTrendResponse, TriScoreResponse, WeeklyScoreResponse


router = APIRouter()


@router.get("/athletes/{athlete_id}/tri-score", response_model=TriScoreResponse)
async def get_tri_score(
    athlete_id: str,
    service: AnalyticsService = Depends(get_analytics_service),
):
    """
    Get the composite multi-sport score.

    Each sport is scored against the athlete's own six-week baseline.
    Sports without recent sessions are left out of the balance check.
    """
    return TriScoreResponse.from_score(service.get_tri_score(athlete_id))


@router.get("/athletes/{athlete_id}/tri-score/history", response_model=List[WeeklyScoreResponse])
async def get_tri_score_history(
    athlete_id: str,
    weeks: Optional[int] = Query(None, ge=1, le=104),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Weekly overall and per-sport scores, oldest week first."""
    return [
        WeeklyScoreResponse.from_weekly(week)
        for week in service.get_tri_score_history(athlete_id, weeks=weeks)
    ]


@router.get("/athletes/{athlete_id}/efficiency", response_model=EFTrendResponse)
async def get_efficiency_trend(
    athlete_id: str,
    sport: str = Query("BIKE", description="BIKE or RUN"),
    days: Optional[int] = Query(None, ge=1, le=3650),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Efficiency Factor trend for sessions of at least 30 minutes."""
    return EFTrendResponse.from_trend(service.get_efficiency_trend(athlete_id, sport, days=days))
