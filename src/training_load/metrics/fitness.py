"""Performance Management Chart calculations (CTL, ATL, TSB, ramp rate)."""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..exceptions import InvalidDateRangeError

logger = logging.getLogger(__name__)

CTL_TIME_CONSTANT = 42
ATL_TIME_CONSTANT = 7
RAMP_RATE_DAYS = 7

DailyLoad = Tuple[date, float]


@dataclass(frozen=True)
class PMCPoint:
    """
    One calendar day of the Performance Management Chart.

    Values are kept at full precision; rounding happens in ``to_dict``.
    ``tsb`` is the form going into the day, before that day's load is
    applied: ``ctl[t-1] - atl[t-1]``.
    """

    date: date
    tss: float  # sum of the day's session TSS, 0 for rest days
    ctl: float  # Chronic Training Load (fitness)
    atl: float  # Acute Training Load (fatigue)
    tsb: float  # Training Stress Balance (form)
    ramp_rate: Optional[float] = None  # ctl[t] - ctl[t-7]

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "date": self.date.isoformat(),
            "tss": round(self.tss, 1),
            "ctl": round(self.ctl, 1),
            "atl": round(self.atl, 1),
            "tsb": round(self.tsb, 1),
            "ramp_rate": round(self.ramp_rate, 1) if self.ramp_rate is not None else None,
        }


def update_load(previous: float, tss: float, time_constant: int) -> float:
    """
    Advance an exponentially weighted training load by one day.

    Formula: load[t] = load[t-1] + (tss[t] - load[t-1]) / time_constant

    Args:
        previous: Yesterday's load
        tss: Today's total TSS
        time_constant: Days (42 for CTL, 7 for ATL)

    Returns:
        Today's load
    """
    return previous + (tss - previous) / time_constant


def materialize_daily_loads(
    entries: Iterable[DailyLoad],
    start: date,
    end: date,
) -> List[DailyLoad]:
    """
    Sum per-session TSS into one entry per calendar day.

    Every day in [start, end] is present; days without sessions get a TSS
    of 0. Entries outside the range are ignored.

    Raises:
        InvalidDateRangeError: If start is after end
    """
    if start > end:
        raise InvalidDateRangeError(
            f"Start date {start.isoformat()} is after end date {end.isoformat()}",
            details={"start": start.isoformat(), "end": end.isoformat()},
        )

    totals: Dict[date, float] = defaultdict(float)
    for day, tss in entries:
        if start <= day <= end:
            totals[day] += tss or 0.0

    days = (end - start).days + 1
    return [
        (start + timedelta(days=i), totals.get(start + timedelta(days=i), 0.0))
        for i in range(days)
    ]


def _validate_consecutive(daily_loads: Sequence[DailyLoad]) -> None:
    for (prev_day, _), (day, _) in zip(daily_loads, daily_loads[1:]):
        if (day - prev_day).days != 1:
            raise InvalidDateRangeError(
                f"Daily loads must be consecutive days: {prev_day.isoformat()} "
                f"is followed by {day.isoformat()}",
                details={"previous": prev_day.isoformat(), "next": day.isoformat()},
            )
    for day, tss in daily_loads:
        if tss is None or tss < 0:
            raise InvalidDateRangeError(
                f"Daily TSS must be >= 0, got {tss} on {day.isoformat()}",
                details={"date": day.isoformat()},
            )


def build_pmc(
    daily_loads: Sequence[DailyLoad],
    initial_ctl: float = 0.0,
    initial_atl: float = 0.0,
    ctl_time_constant: int = CTL_TIME_CONSTANT,
    atl_time_constant: int = ATL_TIME_CONSTANT,
    prior_ctl: Sequence[float] = (),
) -> List[PMCPoint]:
    """
    Build the PMC series from consecutive daily loads.

    The recurrence is a sequential fold: each day depends on the previous
    day's CTL and ATL, so rebuilding from the same loads always yields the
    same series.

    Args:
        daily_loads: (date, tss) pairs, one per calendar day, ascending
        initial_ctl: CTL before the first day (0 for new athletes)
        initial_atl: ATL before the first day
        ctl_time_constant: Days for CTL (default 42)
        atl_time_constant: Days for ATL (default 7)
        prior_ctl: CTL values of the days immediately before the first load,
            oldest first, so the ramp rate continues across a seeded rebuild

    Returns:
        One PMCPoint per input day

    Raises:
        InvalidDateRangeError: If days are missing, duplicated or unordered
    """
    if not daily_loads:
        return []
    _validate_consecutive(daily_loads)

    ctl_history = list(prior_ctl)[-RAMP_RATE_DAYS:]
    ctl = initial_ctl
    atl = initial_atl
    points = []

    for day, tss in daily_loads:
        tsb = ctl - atl
        ctl = update_load(ctl, tss, ctl_time_constant)
        atl = update_load(atl, tss, atl_time_constant)

        ramp_rate = None
        if len(ctl_history) >= RAMP_RATE_DAYS:
            ramp_rate = ctl - ctl_history[-RAMP_RATE_DAYS]
        ctl_history.append(ctl)

        points.append(PMCPoint(date=day, tss=tss, ctl=ctl, atl=atl, tsb=tsb, ramp_rate=ramp_rate))

    return points


def recompute_from(
    series: Sequence[PMCPoint],
    daily_loads: Sequence[DailyLoad],
    from_date: date,
    initial_ctl: float = 0.0,
    initial_atl: float = 0.0,
    ctl_time_constant: int = CTL_TIME_CONSTANT,
    atl_time_constant: int = ATL_TIME_CONSTANT,
) -> List[PMCPoint]:
    """
    Rebuild every point from ``from_date`` forward.

    Points before ``from_date`` are kept, the recurrence is re-seeded from
    the last kept point, and the suffix is replaced with a fresh fold over
    ``daily_loads``. Also extends a series when ``from_date`` is the day
    after its last point. The input series is not modified.

    Args:
        series: Existing PMC series
        daily_loads: Consecutive daily loads; entries before from_date are skipped
        from_date: First day whose TSS changed
        initial_ctl: Seed used when no point survives before from_date
        initial_atl: Seed used when no point survives before from_date

    Returns:
        A new series: kept prefix plus rebuilt suffix

    Raises:
        InvalidDateRangeError: If the loads do not start at from_date or
            leave a gap after the kept prefix
    """
    prefix = [p for p in series if p.date < from_date]
    suffix_loads = [(day, tss) for day, tss in daily_loads if day >= from_date]

    if suffix_loads and suffix_loads[0][0] != from_date:
        raise InvalidDateRangeError(
            f"Daily loads start at {suffix_loads[0][0].isoformat()}, "
            f"expected {from_date.isoformat()}",
        )
    if prefix and suffix_loads and (suffix_loads[0][0] - prefix[-1].date).days != 1:
        raise InvalidDateRangeError(
            f"Recompute from {from_date.isoformat()} leaves a gap after "
            f"{prefix[-1].date.isoformat()}",
        )

    if prefix:
        seed_ctl, seed_atl = prefix[-1].ctl, prefix[-1].atl
    else:
        seed_ctl, seed_atl = initial_ctl, initial_atl

    logger.debug(
        "Recomputing PMC from %s (%d kept, %d rebuilt)",
        from_date.isoformat(),
        len(prefix),
        len(suffix_loads),
    )

    rebuilt = build_pmc(
        suffix_loads,
        initial_ctl=seed_ctl,
        initial_atl=seed_atl,
        ctl_time_constant=ctl_time_constant,
        atl_time_constant=atl_time_constant,
        prior_ctl=[p.ctl for p in prefix[-RAMP_RATE_DAYS:]],
    )
    return prefix + rebuilt


def determine_fitness_level(ctl: float) -> str:
    """
    Label fitness from CTL.

    - < 25: Beginner
    - 25 - 50: Developing
    - 50 - 75: Intermediate
    - 75 - 100: Advanced
    - >= 100: Elite
    """
    if ctl < 25:
        return "Beginner"
    elif ctl < 50:
        return "Developing"
    elif ctl < 75:
        return "Intermediate"
    elif ctl < 100:
        return "Advanced"
    else:
        return "Elite"


def determine_form(tsb: float) -> str:
    """
    Classify form from TSB.

    Args:
        tsb: Training Stress Balance

    Returns:
        One of 'fresh', 'positive', 'neutral', 'fatigued', 'very_fatigued'
    """
    if tsb > 25:
        return "fresh"
    elif tsb > 0:
        return "positive"
    elif tsb > -10:
        return "neutral"
    elif tsb > -25:
        return "fatigued"
    else:
        return "very_fatigued"


def get_training_recommendation(tsb: float) -> str:
    """Get a training recommendation based on current form."""
    form = determine_form(tsb)
    return {
        "fresh": "Fresh and recovered. Good day for a hard workout.",
        "positive": "Positive form. Can push moderately.",
        "neutral": "Slightly fatigued. Moderate intensity recommended.",
        "fatigued": "Fatigued. Easy training recommended.",
        "very_fatigued": "Very fatigued. Consider rest or very easy activity.",
    }[form]
