"""Training load API routes (session TSS, Performance Management Chart, taper, weekly totals)."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...services.analytics import AnalyticsService
from ..deps import get_analytics_service
from ..schemas import PMCResponse, TaperResponse, TssRequest, TssResponse, WeekSummaryResponse


router = APIRouter()


@router.post("/tss", response_model=TssResponse)
async def compute_session_tss(
    request: TssRequest,
    service: AnalyticsService = Depends(get_analytics_service),
):
    """
    Compute TSS for a single session.

    Uses power, pace, heart rate or duration, whichever is the first with
    both data and a matching threshold. The method used is returned.
    """
    result = service.compute_session_tss(
        request.session.to_domain(),
        request.thresholds.to_domain(),
    )
    return TssResponse.from_result(result)


@router.get("/athletes/{athlete_id}/pmc", response_model=PMCResponse)
async def get_pmc(
    athlete_id: str,
    days: Optional[int] = Query(None, ge=1, le=3650, description="Days of history"),
    projection_days: Optional[int] = Query(None, ge=0, le=365, description="Days to project"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """
    Get the Performance Management Chart.

    Returns daily CTL (fitness), ATL (fatigue) and TSB (form) for the
    requested window, a rest projection and the current point.
    """
    result = service.get_pmc(athlete_id, days=days, projection_days=projection_days)
    return PMCResponse.from_result(result)


@router.get("/athletes/{athlete_id}/taper", response_model=TaperResponse)
async def get_taper_plan(
    athlete_id: str,
    race_date: date = Query(..., description="Race day (YYYY-MM-DD)"),
    target_tsb: Optional[float] = Query(None, description="Race-day form to aim for"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """
    Suggested daily TSS from tomorrow to race day.

    Load steps down as the race approaches. The response includes the
    projected TSB on race day and whether it reaches the target.
    """
    return TaperResponse.from_plan(service.get_taper_plan(athlete_id, race_date, target_tsb))


@router.get("/athletes/{athlete_id}/week-summary", response_model=WeekSummaryResponse)
async def get_week_summary(
    athlete_id: str,
    week_start: Optional[date] = Query(None, description="First day of the week (default: this Monday)"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Total TSS, duration, distance and session count for one week, with a per-sport split."""
    return WeekSummaryResponse.from_summary(service.get_week_summary(athlete_id, week_start))
