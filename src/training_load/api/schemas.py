"""Request and response models for the HTTP API (camelCase on the wire)."""

from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..analysis.tri_score import BalanceVerdict, CompositeScore, FitnessSnapshot, SportScore, WeeklyScore
from ..analysis.week_summary import WeekSummary
from ..metrics.efficiency import EFPoint, EFTrend
from ..metrics.fitness import PMCPoint, determine_form, get_training_recommendation
from ..metrics.projection import ProjectionPoint, TaperPlan
from ..metrics.swim import CssResult
from ..metrics.tss import TssResult
from ..metrics.zones import Zone
from ..models.athlete import AthleteThresholds, Session


def to_camel(string: str) -> str:
    """Convert snake_case to camelCase."""
    components = string.split("_")
    return components[0] + "".join(x.title() for x in components[1:])


def _round_optional(value: Optional[float], digits: int = 1) -> Optional[float]:
    return round(value, digits) if value is not None else None


class CamelModel(BaseModel):
    """Base model serialised with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ============================================================================
# Zones
# ============================================================================

class ThresholdsRequest(CamelModel):
    """Athlete thresholds. Omitted or 0 means not set."""

    ftp: Optional[float] = Field(None, description="Functional threshold power (W)")
    lthr: Optional[float] = Field(None, description="Lactate threshold heart rate (bpm)")
    threshold_pace: Optional[float] = Field(None, description="Threshold running speed (m/s)")
    css: Optional[float] = Field(None, description="Critical swim speed (m/s)")
    max_hr: Optional[float] = None
    resting_hr: Optional[float] = None

    def to_domain(self) -> AthleteThresholds:
        return AthleteThresholds(**self.model_dump())


class ZoneResponse(CamelModel):
    zone: int
    name: str
    min: float
    max: Optional[float]
    description: str

    @classmethod
    def from_zone(cls, zone: Zone) -> "ZoneResponse":
        return cls(**zone.to_dict())


class ZonesResponse(CamelModel):
    """Zone tables per domain; null when the threshold is not set."""

    hr: Optional[List[ZoneResponse]] = None
    hr_reserve: Optional[List[ZoneResponse]] = None
    power: Optional[List[ZoneResponse]] = None
    pace: Optional[List[ZoneResponse]] = None
    swim: Optional[List[ZoneResponse]] = None

    @classmethod
    def from_tables(cls, tables: dict) -> "ZonesResponse":
        return cls(**{
            domain: [ZoneResponse.from_zone(z) for z in zones] if zones is not None else None
            for domain, zones in tables.items()
        })


class CssRequest(CamelModel):
    """400m and 200m time trial results."""

    t400_seconds: float = Field(..., gt=0, description="400m time (s)")
    t200_seconds: float = Field(..., gt=0, description="200m time (s)")


class CssResponse(CamelModel):
    css: float
    pace_per_100m: float = Field(alias="pacePer100m")
    pace_formatted: str
    estimated_t750: int
    estimated_t1500: int

    @classmethod
    def from_result(cls, result: CssResult) -> "CssResponse":
        return cls(**result.to_dict())


# ============================================================================
# TSS
# ============================================================================

class SessionRequest(CamelModel):
    """A completed session."""

    date: date
    sport: str
    duration_seconds: float
    avg_heart_rate: Optional[float] = None
    avg_power: Optional[float] = None
    normalized_power: Optional[float] = None
    avg_speed: Optional[float] = Field(None, description="Average speed (m/s)")
    distance: Optional[float] = Field(None, description="Distance (m)")
    name: Optional[str] = None

    def to_domain(self) -> Session:
        return Session(**self.model_dump())


class TssRequest(CamelModel):
    session: SessionRequest
    thresholds: ThresholdsRequest = Field(default_factory=ThresholdsRequest)


class TssResponse(CamelModel):
    tss: float
    intensity_factor: float
    normalized_effort: Optional[float] = None
    method: str

    @classmethod
    def from_result(cls, result: TssResult) -> "TssResponse":
        return cls(**result.to_dict())


# ============================================================================
# Performance Management Chart
# ============================================================================

class PMCPointResponse(CamelModel):
    """PMC day at display precision: whole CTL/ATL/TSB, 1-decimal TSS and ramp."""

    date: date
    tss: float
    ctl: int
    atl: int
    tsb: int
    ramp_rate: Optional[float] = None

    @classmethod
    def from_point(cls, point: PMCPoint) -> "PMCPointResponse":
        return cls(
            date=point.date,
            tss=round(point.tss, 1),
            ctl=round(point.ctl),
            atl=round(point.atl),
            tsb=round(point.tsb),
            ramp_rate=_round_optional(point.ramp_rate),
        )


class ProjectionPointResponse(PMCPointResponse):
    source: str

    @classmethod
    def from_projection(cls, point: ProjectionPoint) -> "ProjectionPointResponse":
        return cls(
            date=point.date,
            tss=round(point.tss, 1),
            ctl=round(point.ctl),
            atl=round(point.atl),
            tsb=round(point.tsb),
            ramp_rate=_round_optional(point.ramp_rate),
            source=point.source,
        )


class PMCResponse(CamelModel):
    history: List[PMCPointResponse]
    projections: List[ProjectionPointResponse]
    current: Optional[PMCPointResponse] = None
    form: Optional[str] = None
    recommendation: Optional[str] = None

    @classmethod
    def from_result(cls, result) -> "PMCResponse":
        current = result.current
        return cls(
            history=[PMCPointResponse.from_point(p) for p in result.history],
            projections=[ProjectionPointResponse.from_projection(p) for p in result.projections],
            current=PMCPointResponse.from_point(current) if current else None,
            form=determine_form(current.tsb) if current else None,
            recommendation=get_training_recommendation(current.tsb) if current else None,
        )


class TaperResponse(CamelModel):
    race_date: date
    days: List[ProjectionPointResponse]
    race_day_tsb: float
    target_tsb: float
    reaches_target: bool

    @classmethod
    def from_plan(cls, plan: TaperPlan) -> "TaperResponse":
        return cls(
            race_date=plan.race_date,
            days=[ProjectionPointResponse.from_projection(p) for p in plan.days],
            race_day_tsb=round(plan.race_day_tsb, 1),
            target_tsb=plan.target_tsb,
            reaches_target=plan.reaches_target,
        )


class SportTotalsResponse(CamelModel):
    duration_seconds: float
    tss: float


class WeekSummaryResponse(CamelModel):
    week_start: date
    week_end: date
    total_tss: float
    total_duration_seconds: float
    total_distance: float
    activity_count: int
    by_sport: Dict[str, SportTotalsResponse]

    @classmethod
    def from_summary(cls, summary: WeekSummary) -> "WeekSummaryResponse":
        return cls(**summary.to_dict())


# ============================================================================
# Composite score
# ============================================================================

class SportScoreResponse(CamelModel):
    score: float
    trend: float
    weekly_hours: float
    weekly_tss: float
    activity_count: int

    @classmethod
    def from_score(cls, score: SportScore) -> "SportScoreResponse":
        return cls(**score.to_dict())


class BalanceResponse(CamelModel):
    balanced: bool
    balance_score: float
    weakest: Optional[str] = None
    strongest: Optional[str] = None
    recommendations: List[str]

    @classmethod
    def from_verdict(cls, verdict: BalanceVerdict) -> "BalanceResponse":
        return cls(**verdict.to_dict())


class FitnessResponse(CamelModel):
    ctl: int
    atl: int
    tsb: int
    ramp_rate: Optional[float] = None
    fitness_level: str

    @classmethod
    def from_snapshot(cls, snapshot: FitnessSnapshot) -> "FitnessResponse":
        return cls(**snapshot.to_dict())


class TriScoreResponse(CamelModel):
    overall: float
    overall_trend: float
    swim: SportScoreResponse
    bike: SportScoreResponse
    run: SportScoreResponse
    strength: SportScoreResponse
    balance: BalanceResponse
    fitness: FitnessResponse

    @classmethod
    def from_score(cls, score: CompositeScore) -> "TriScoreResponse":
        return cls(
            overall=score.overall,
            overall_trend=score.overall_trend,
            balance=BalanceResponse.from_verdict(score.balance),
            fitness=FitnessResponse.from_snapshot(score.fitness),
            **{
                sport.value.lower(): SportScoreResponse.from_score(sport_score)
                for sport, sport_score in score.sports.items()
            },
        )


class WeeklyScoreResponse(CamelModel):
    week: date
    overall: float
    swim: float
    bike: float
    run: float
    strength: float

    @classmethod
    def from_weekly(cls, weekly: WeeklyScore) -> "WeeklyScoreResponse":
        return cls(**weekly.to_dict())


# ============================================================================
# Efficiency factor
# ============================================================================

class EFPointResponse(CamelModel):
    date: date
    session_id: Optional[str] = None
    name: Optional[str] = None
    ef: float
    duration_seconds: float
    distance: Optional[float] = None

    @classmethod
    def from_point(cls, point: EFPoint) -> "EFPointResponse":
        return cls(
            date=point.date,
            session_id=point.session_id,
            name=point.name,
            ef=point.ef,
            duration_seconds=point.duration_seconds,
            distance=point.distance,
        )


class EFTrendResponse(CamelModel):
    points: List[EFPointResponse]
    average_ef: float = Field(alias="averageEF")
    trend_direction: str
    trend_percent: float
    best_ef: Optional[EFPointResponse] = Field(None, alias="bestEF")

    @classmethod
    def from_trend(cls, trend: EFTrend) -> "EFTrendResponse":
        return cls(
            points=[EFPointResponse.from_point(p) for p in trend.points],
            average_ef=trend.average_ef,
            trend_direction=trend.trend_direction,
            trend_percent=trend.trend_percent,
            best_ef=EFPointResponse.from_point(trend.best_ef) if trend.best_ef else None,
        )
