"""Forward projection of the Performance Management Chart."""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List, Mapping, Optional, Sequence, Union

from ..exceptions import ValidationError
from .fitness import (
    ATL_TIME_CONSTANT,
    CTL_TIME_CONSTANT,
    RAMP_RATE_DAYS,
    PMCPoint,
    update_load,
)

# Recommended ceiling on weekly CTL gain
MAX_RAMP_RATE = 6.0
# Ramp rate above which injury risk is flagged
HIGH_RISK_RAMP_RATE = 8.0
RECOVERY_WEEK_INTERVAL = 4
RECOVERY_WEEK_FACTOR = 0.65
# Share of a planned ramp typically realised by the athlete
RAMP_REALISATION = 0.8

TAPER_MIN_DAYS = 7
DEFAULT_TARGET_TSB = 15.0
# (days remaining before the race, share of current CTL), checked in order
TAPER_STEPS = ((3, 0.3), (7, 0.5), (14, 0.7))

PlannedTss = Union[Sequence[float], Mapping[date, float]]


@dataclass(frozen=True)
class ProjectionPoint:
    """
    A projected PMC day beyond the last real point.

    ``source`` is 'planned' when the day's TSS came from a plan and 'rest'
    when no load was assumed.
    """

    date: date
    tss: float
    ctl: float
    atl: float
    tsb: float
    ramp_rate: Optional[float]
    source: str

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "date": self.date.isoformat(),
            "tss": round(self.tss, 1),
            "ctl": round(self.ctl, 1),
            "atl": round(self.atl, 1),
            "tsb": round(self.tsb, 1),
            "ramp_rate": round(self.ramp_rate, 1) if self.ramp_rate is not None else None,
            "source": self.source,
        }


@dataclass
class RequiredLoadPlan:
    """Week-by-week TSS needed to move CTL to a target."""

    weekly_tss: List[int]
    average_ramp_rate: float
    achievable: bool
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "weekly_tss": list(self.weekly_tss),
            "average_ramp_rate": self.average_ramp_rate,
            "achievable": self.achievable,
            "warnings": list(self.warnings),
        }


@dataclass
class TaperPlan:
    """Suggested daily load up to a race and the form it leaves on race day."""

    race_date: date
    days: List[ProjectionPoint]
    race_day_tsb: float
    target_tsb: float
    reaches_target: bool

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "race_date": self.race_date.isoformat(),
            "days": [p.to_dict() for p in self.days],
            "race_day_tsb": round(self.race_day_tsb, 1),
            "target_tsb": self.target_tsb,
            "reaches_target": self.reaches_target,
        }


def _planned_for(planned_tss: Optional[PlannedTss], offset: int, day: date) -> Optional[float]:
    if planned_tss is None:
        return None
    if isinstance(planned_tss, Mapping):
        return planned_tss.get(day)
    if offset < len(planned_tss):
        return planned_tss[offset]
    return None


def project_pmc(
    history: Sequence[PMCPoint],
    horizon_days: int,
    planned_tss: Optional[PlannedTss] = None,
    ctl_time_constant: int = CTL_TIME_CONSTANT,
    atl_time_constant: int = ATL_TIME_CONSTANT,
) -> List[ProjectionPoint]:
    """
    Continue the PMC recurrence past the last real point.

    With no plan this answers "what if I rested": every projected day has
    TSS 0. The real series is only read, never extended.

    Args:
        history: Real PMC series (only the last 7 points are used)
        horizon_days: Number of future days to project
        planned_tss: Daily TSS by offset (0 = the day after the last real
            point) or by date; days not covered are rest days
        ctl_time_constant: Days for CTL (default 42)
        atl_time_constant: Days for ATL (default 7)

    Returns:
        One ProjectionPoint per future day, empty if there is no history

    Raises:
        ValidationError: If horizon_days is negative or a planned TSS is negative
    """
    if horizon_days < 0:
        raise ValidationError("horizon_days must be >= 0", field="horizon_days")
    if not history or horizon_days == 0:
        return []

    last = history[-1]
    ctl, atl = last.ctl, last.atl
    ctl_history = [p.ctl for p in history[-RAMP_RATE_DAYS:]]
    projections = []

    for offset in range(horizon_days):
        day = last.date + timedelta(days=offset + 1)
        planned = _planned_for(planned_tss, offset, day)
        if planned is not None and planned < 0:
            raise ValidationError(
                f"Planned TSS must be >= 0, got {planned} for {day.isoformat()}",
                field="planned_tss",
            )
        tss = planned or 0.0
        source = "planned" if planned is not None else "rest"

        tsb = ctl - atl
        ctl = update_load(ctl, tss, ctl_time_constant)
        atl = update_load(atl, tss, atl_time_constant)

        ramp_rate = None
        if len(ctl_history) >= RAMP_RATE_DAYS:
            ramp_rate = ctl - ctl_history[-RAMP_RATE_DAYS]
        ctl_history.append(ctl)

        projections.append(
            ProjectionPoint(
                date=day,
                tss=tss,
                ctl=ctl,
                atl=atl,
                tsb=tsb,
                ramp_rate=ramp_rate,
                source=source,
            )
        )

    return projections


def forecast_weekly_plan(
    history: Sequence[PMCPoint],
    planned_weeks: Sequence[float],
    ctl_time_constant: int = CTL_TIME_CONSTANT,
    atl_time_constant: int = ATL_TIME_CONSTANT,
) -> List[ProjectionPoint]:
    """
    Project the PMC under a plan of weekly TSS targets.

    Each week's TSS is spread evenly over its seven days, starting the day
    after the last real point.
    """
    daily = [week_tss / 7 for week_tss in planned_weeks for _ in range(7)]
    return project_pmc(
        history,
        len(daily),
        planned_tss=daily,
        ctl_time_constant=ctl_time_constant,
        atl_time_constant=atl_time_constant,
    )


def calculate_required_weekly_tss(
    current_ctl: float,
    target_ctl: float,
    weeks: int,
) -> RequiredLoadPlan:
    """
    Calculate the weekly TSS needed to reach a target CTL.

    Every fourth week is a recovery week at 65% of the current load. Build
    weeks aim for an even share of the remaining gap, capped at
    MAX_RAMP_RATE CTL per week.

    Args:
        current_ctl: Today's CTL
        target_ctl: CTL wanted on race day
        weeks: Weeks available

    Returns:
        RequiredLoadPlan with one TSS figure per week and any warnings

    Raises:
        ValidationError: If weeks is not positive
    """
    if weeks <= 0:
        raise ValidationError("weeks must be a positive number", field="weeks")

    average_ramp_rate = (target_ctl - current_ctl) / weeks

    warnings = []
    if average_ramp_rate > MAX_RAMP_RATE:
        warnings.append(
            f"Required ramp rate ({average_ramp_rate:.1f} CTL/week) exceeds "
            f"recommended maximum ({MAX_RAMP_RATE:g} CTL/week)"
        )
    if average_ramp_rate > HIGH_RISK_RAMP_RATE:
        warnings.append("High injury risk at this ramp rate. Consider extending your timeline.")

    weekly_tss = []
    projected_ctl = current_ctl
    for week in range(weeks):
        if (week + 1) % RECOVERY_WEEK_INTERVAL == 0:
            weekly_tss.append(round(projected_ctl * 7 * RECOVERY_WEEK_FACTOR))
            continue
        weeks_remaining = weeks - week
        target_ramp = min((target_ctl - projected_ctl) / weeks_remaining, MAX_RAMP_RATE)
        weekly_tss.append(max(0, round((projected_ctl + target_ramp) * 7)))
        projected_ctl += target_ramp * RAMP_REALISATION

    return RequiredLoadPlan(
        weekly_tss=weekly_tss,
        average_ramp_rate=round(average_ramp_rate, 1),
        achievable=average_ramp_rate <= MAX_RAMP_RATE,
        warnings=warnings,
    )


def _taper_fraction(days_remaining: int) -> float:
    for limit, fraction in TAPER_STEPS:
        if days_remaining <= limit:
            return fraction
    return 1.0


def simulate_taper(
    history: Sequence[PMCPoint],
    race_date: date,
    target_tsb: float = DEFAULT_TARGET_TSB,
    ctl_time_constant: int = CTL_TIME_CONSTANT,
    atl_time_constant: int = ATL_TIME_CONSTANT,
) -> TaperPlan:
    """
    Plan a pre-race taper and project the resulting form on race day.

    Daily TSS is a share of today's CTL that steps down as the race
    approaches: full load until two weeks out, then 70%, 50% in the last
    week and 30% over the final three days.

    Args:
        history: Real PMC series; the taper starts the day after its last point
        race_date: Day of the race
        target_tsb: Race-day form the athlete is aiming for
        ctl_time_constant: Days for CTL (default 42)
        atl_time_constant: Days for ATL (default 7)

    Returns:
        TaperPlan with one projected day per day up to and including the race

    Raises:
        ValidationError: If there is no history or the race is less than
            TAPER_MIN_DAYS away
    """
    if not history:
        raise ValidationError("No fitness data available for taper planning")

    last = history[-1]
    days_to_race = (race_date - last.date).days
    if days_to_race < TAPER_MIN_DAYS:
        raise ValidationError(
            f"Need at least {TAPER_MIN_DAYS} days to race for taper planning, got {days_to_race}",
            field="race_date",
        )

    planned = [
        float(round(last.ctl * _taper_fraction(days_to_race - day)))
        for day in range(1, days_to_race + 1)
    ]
    days = project_pmc(
        history,
        days_to_race,
        planned_tss=planned,
        ctl_time_constant=ctl_time_constant,
        atl_time_constant=atl_time_constant,
    )
    race_day_tsb = days[-1].tsb

    return TaperPlan(
        race_date=race_date,
        days=days,
        race_day_tsb=race_day_tsb,
        target_tsb=target_tsb,
        reaches_target=race_day_tsb >= target_tsb,
    )
