"""Training zone calculations (heart rate, power, run pace, swim pace)."""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from ..exceptions import InvalidThresholdError
from ..models.athlete import AthleteThresholds


# Breakpoints are fractions of the domain threshold. N breakpoints give N + 1
# zones; the first zone starts at 0 and the last one is open-ended.

# Joe Friel 7-zone model (% of LTHR)
HR_ZONE_BREAKPOINTS: Tuple[float, ...] = (0.81, 0.89, 0.93, 0.99, 1.02, 1.06)
HR_ZONE_DEFINITIONS: Tuple[Tuple[str, str], ...] = (
    ("Recovery", "Active recovery, very easy effort"),
    ("Aerobic", "Endurance pace, conversational"),
    ("Tempo", "Moderate effort, steady state"),
    ("SubThreshold", "Hard effort, sustainable for 20-60 min"),
    ("SuperThreshold", "Very hard, threshold to VO2max"),
    ("VO2max", "Maximum aerobic capacity"),
    ("Anaerobic", "Maximum effort, very short duration"),
)

# Coggan 7-zone model (% of FTP)
POWER_ZONE_BREAKPOINTS: Tuple[float, ...] = (0.55, 0.75, 0.90, 1.05, 1.20, 1.50)
POWER_ZONE_DEFINITIONS: Tuple[Tuple[str, str], ...] = (
    ("Active Recovery", "Very easy spinning, recovery"),
    ("Endurance", "Long rides, base training"),
    ("Tempo", "Brisk pace, moderate effort"),
    ("Threshold", "FTP efforts, sustainable for 20-60 min"),
    ("VO2max", "3-8 minute intervals"),
    ("Anaerobic", "30s-3min efforts"),
    ("Neuromuscular", "Short sprints, max power"),
)

# Run pace zones (% of threshold speed). Bounds are speeds, so a higher zone
# is a faster speed and a shorter time per kilometer.
PACE_ZONE_BREAKPOINTS: Tuple[float, ...] = (0.75, 0.85, 0.92, 1.00, 1.10)
PACE_ZONE_DEFINITIONS: Tuple[Tuple[str, str], ...] = (
    ("Recovery", "Easy recovery pace"),
    ("Aerobic", "Endurance pace"),
    ("Tempo", "Marathon to half-marathon pace"),
    ("Threshold", "Lactate threshold"),
    ("VO2max", "5K race pace"),
    ("Anaerobic", "Sprint intervals"),
)

# Swim zones (% of critical swim speed)
SWIM_ZONE_BREAKPOINTS: Tuple[float, ...] = (0.85, 0.93, 1.00, 1.05)
SWIM_ZONE_DEFINITIONS: Tuple[Tuple[str, str], ...] = (
    ("Recovery", "Easy swimming, drills"),
    ("Endurance", "Long distance, aerobic base"),
    ("Tempo", "Race pace effort"),
    ("Threshold", "CSS intervals"),
    ("VO2max", "Sprint work"),
)

# Karvonen 5-zone model (% of heart rate reserve). Unlike the tables above,
# zone 1 starts at 50% and zone 5 ends at max HR.
HR_RESERVE_BREAKPOINTS: Tuple[float, ...] = (0.50, 0.60, 0.70, 0.80, 0.90)
HR_RESERVE_DEFINITIONS: Tuple[Tuple[str, str], ...] = (
    ("Recovery", "Very light, warm-up and cool-down"),
    ("Aerobic", "Light, fat burning and base building"),
    ("Tempo", "Moderate, aerobic capacity"),
    ("Threshold", "Hard, lactate threshold"),
    ("VO2max", "Maximum effort"),
)

ZONE_PRECISION = 2


@dataclass(frozen=True)
class Zone:
    """A single training zone. ``max`` is None for the open top zone."""

    zone: int
    name: str
    min: float
    max: Optional[float]
    description: str

    def contains(self, value: float) -> bool:
        """Lower bound inclusive, upper bound exclusive."""
        if value < self.min:
            return False
        return self.max is None or value < self.max

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "zone": self.zone,
            "name": self.name,
            "min": self.min,
            "max": self.max,
            "description": self.description,
        }


def format_pace_per_km(speed_ms: float) -> str:
    """Format a speed in m/s as min:sec per kilometer."""
    if speed_ms <= 0:
        return "--:--"
    total_seconds = round(1000 / speed_ms)
    return f"{total_seconds // 60}:{total_seconds % 60:02d}"


def format_pace_per_100m(speed_ms: float) -> str:
    """Format a speed in m/s as min:sec per 100 meters."""
    if speed_ms <= 0:
        return "--:--"
    total_seconds = round(100 / speed_ms)
    return f"{total_seconds // 60}:{total_seconds % 60:02d}"


def _build_zones(
    threshold: float,
    breakpoints: Sequence[float],
    definitions: Sequence[Tuple[str, str]],
) -> List[Zone]:
    """
    Build a contiguous zone table from a threshold and breakpoint fractions.

    Each bound is computed once and shared by adjacent zones, so
    ``zones[i].max == zones[i + 1].min`` holds exactly.
    """
    bounds: List[Optional[float]] = [0.0]
    bounds.extend(round(threshold * pct, ZONE_PRECISION) for pct in breakpoints)
    bounds.append(None)

    return [
        Zone(
            zone=i + 1,
            name=name,
            min=bounds[i],
            max=bounds[i + 1],
            description=description,
        )
        for i, (name, description) in enumerate(definitions)
    ]


def _require_positive(value: float, label: str) -> None:
    if value is None or value <= 0:
        raise InvalidThresholdError(f"{label} must be a positive number", field=label)


def calculate_hr_zones(lthr: float) -> List[Zone]:
    """
    Calculate 7 heart rate zones from Lactate Threshold Heart Rate.

    Zone boundaries (% of LTHR):
    - Zone 1: <81% - Recovery
    - Zone 2: 81-89% - Aerobic
    - Zone 3: 89-93% - Tempo
    - Zone 4: 93-99% - SubThreshold
    - Zone 5: 99-102% - SuperThreshold
    - Zone 6: 102-106% - VO2max
    - Zone 7: >106% - Anaerobic

    Args:
        lthr: Lactate Threshold Heart Rate in bpm

    Returns:
        List of 7 contiguous zones in bpm

    Raises:
        InvalidThresholdError: If lthr is not positive
    """
    _require_positive(lthr, "lthr")
    return _build_zones(lthr, HR_ZONE_BREAKPOINTS, HR_ZONE_DEFINITIONS)


def calculate_hr_reserve_zones(max_hr: float, resting_hr: float) -> List[Zone]:
    """
    Calculate 5 heart rate zones using the Karvonen (heart rate reserve) method.

    Each bound is resting HR plus a share of the reserve (max HR - resting HR):
    - Zone 1: 50-60% - Recovery
    - Zone 2: 60-70% - Aerobic
    - Zone 3: 70-80% - Tempo
    - Zone 4: 80-90% - Threshold
    - Zone 5: 90-100% - VO2max

    Args:
        max_hr: Maximum heart rate in bpm
        resting_hr: Resting heart rate in bpm

    Returns:
        List of 5 contiguous zones in bpm, the last one ending at max_hr

    Raises:
        InvalidThresholdError: If either value is not positive or max_hr
            does not exceed resting_hr
    """
    _require_positive(max_hr, "max_hr")
    _require_positive(resting_hr, "resting_hr")
    if max_hr <= resting_hr:
        raise InvalidThresholdError(
            f"max_hr ({max_hr}) must be greater than resting_hr ({resting_hr})",
            field="max_hr",
        )

    reserve = max_hr - resting_hr
    bounds = [round(resting_hr + reserve * pct, ZONE_PRECISION) for pct in HR_RESERVE_BREAKPOINTS]
    bounds.append(float(max_hr))

    return [
        Zone(zone=i + 1, name=name, min=bounds[i], max=bounds[i + 1], description=description)
        for i, (name, description) in enumerate(HR_RESERVE_DEFINITIONS)
    ]


def calculate_power_zones(ftp: float) -> List[Zone]:
    """
    Calculate 7 power zones from Functional Threshold Power.

    Uses the classic Coggan power zones model:
    - Zone 1: Active Recovery (<55% FTP)
    - Zone 2: Endurance (55-75% FTP)
    - Zone 3: Tempo (75-90% FTP)
    - Zone 4: Threshold (90-105% FTP)
    - Zone 5: VO2max (105-120% FTP)
    - Zone 6: Anaerobic (120-150% FTP)
    - Zone 7: Neuromuscular (>150% FTP)

    Args:
        ftp: Functional Threshold Power in watts

    Returns:
        List of 7 contiguous zones in watts

    Raises:
        InvalidThresholdError: If ftp is not positive
    """
    _require_positive(ftp, "ftp")
    return _build_zones(ftp, POWER_ZONE_BREAKPOINTS, POWER_ZONE_DEFINITIONS)


def calculate_pace_zones(threshold_speed: float) -> List[Zone]:
    """
    Calculate 6 running pace zones from threshold speed.

    Bounds are speeds in m/s obtained by multiplying the threshold speed,
    never by dividing a time-per-distance pace. Descriptions carry the
    representative pace in min/km for display.

    Args:
        threshold_speed: Threshold running speed in m/s

    Returns:
        List of 6 contiguous zones in m/s

    Raises:
        InvalidThresholdError: If threshold_speed is not positive
    """
    _require_positive(threshold_speed, "threshold_pace")
    zones = _build_zones(threshold_speed, PACE_ZONE_BREAKPOINTS, PACE_ZONE_DEFINITIONS)
    return [_with_pace_description(z, format_pace_per_km, "/km") for z in zones]


def calculate_swim_zones(css: float) -> List[Zone]:
    """
    Calculate 5 swim zones from Critical Swim Speed.

    Args:
        css: Critical Swim Speed in m/s

    Returns:
        List of 5 contiguous zones in m/s

    Raises:
        InvalidThresholdError: If css is not positive
    """
    _require_positive(css, "css")
    zones = _build_zones(css, SWIM_ZONE_BREAKPOINTS, SWIM_ZONE_DEFINITIONS)
    return [_with_pace_description(z, format_pace_per_100m, "/100m") for z in zones]


def _with_pace_description(zone: Zone, formatter, unit: str) -> Zone:
    if zone.max is None:
        label = f"faster than {formatter(zone.min)}{unit}"
    elif zone.min == 0:
        label = f"slower than {formatter(zone.max)}{unit}"
    else:
        label = f"{formatter(zone.min)}-{formatter(zone.max)}{unit}"
    return Zone(
        zone=zone.zone,
        name=zone.name,
        min=zone.min,
        max=zone.max,
        description=f"{zone.description} ({label})",
    )


def compute_zones(thresholds: AthleteThresholds) -> Dict[str, Optional[List[Zone]]]:
    """
    Compute every zone table the athlete's thresholds allow.

    A missing threshold yields None for that domain instead of an error.
    Heart rate reserve zones need both max and resting heart rate.

    Args:
        thresholds: Athlete threshold snapshot

    Returns:
        Dictionary with 'hr', 'hr_reserve', 'power', 'pace' and 'swim'
        zone lists (or None)
    """
    has_reserve = thresholds.is_set(thresholds.max_hr) and thresholds.is_set(thresholds.resting_hr)
    return {
        "hr": calculate_hr_zones(thresholds.lthr) if thresholds.is_set(thresholds.lthr) else None,
        "hr_reserve": (
            calculate_hr_reserve_zones(thresholds.max_hr, thresholds.resting_hr)
            if has_reserve
            else None
        ),
        "power": calculate_power_zones(thresholds.ftp) if thresholds.is_set(thresholds.ftp) else None,
        "pace": (
            calculate_pace_zones(thresholds.threshold_pace)
            if thresholds.is_set(thresholds.threshold_pace)
            else None
        ),
        "swim": calculate_swim_zones(thresholds.css) if thresholds.is_set(thresholds.css) else None,
    }


def get_zone_for_value(value: float, zones: Sequence[Zone]) -> int:
    """
    Return the zone number for a value.

    Args:
        value: Heart rate, power or speed sample
        zones: Zone table from one of the calculators

    Returns:
        Zone number (1-N), or 0 if the value is negative
    """
    if value < 0 or not zones:
        return 0
    for zone in zones:
        if zone.contains(value):
            return zone.zone
    return zones[-1].zone


def calculate_time_in_zones(
    samples: Sequence[Optional[float]],
    zones: Sequence[Zone],
    sample_seconds: float = 1.0,
) -> List[dict]:
    """
    Calculate time spent in each zone from a stream of samples.

    Zero, negative and missing samples (coasting, dropouts) are skipped.

    Args:
        samples: Heart rate, power or speed values, one per sample
        zones: Zone table to classify against
        sample_seconds: Seconds represented by each sample

    Returns:
        One dict per zone with 'zone', 'name', 'seconds' and 'percentage'
    """
    counts = {zone.zone: 0 for zone in zones}
    valid = 0

    for value in samples:
        if value is None or value <= 0:
            continue
        valid += 1
        counts[get_zone_for_value(value, zones)] += 1

    return [
        {
            "zone": zone.zone,
            "name": zone.name,
            "seconds": round(counts[zone.zone] * sample_seconds, 1),
            "percentage": round(counts[zone.zone] / valid * 100, 1) if valid else 0.0,
        }
        for zone in zones
    ]
