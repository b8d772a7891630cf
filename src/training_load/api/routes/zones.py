"""Training zone API routes."""

from fastapi import APIRouter, Depends

from ...services.analytics import AnalyticsService
from ..deps import get_analytics_service
from ..schemas import CssRequest, CssResponse, ThresholdsRequest, ZonesResponse


router = APIRouter()


@router.post("/zones", response_model=ZonesResponse)
async def compute_zones(
    thresholds: ThresholdsRequest,
    service: AnalyticsService = Depends(get_analytics_service),
):
    """
    Compute heart rate, heart rate reserve, power, run pace and swim zones.

    Domains whose threshold is missing are returned as null.
    """
    return ZonesResponse.from_tables(service.compute_zones(thresholds.to_domain()))


@router.get("/athletes/{athlete_id}/zones", response_model=ZonesResponse)
async def get_athlete_zones(
    athlete_id: str,
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Zones from the athlete's stored thresholds."""
    return ZonesResponse.from_tables(service.get_athlete_zones(athlete_id))


@router.post("/css", response_model=CssResponse)
async def compute_css(
    request: CssRequest,
    service: AnalyticsService = Depends(get_analytics_service),
):
    """
    Critical Swim Speed from a 400m and a 200m time trial.

    The returned ``css`` (m/s) is the threshold used for swim zones and
    swim TSS.
    """
    return CssResponse.from_result(service.compute_css(request.t400_seconds, request.t200_seconds))
