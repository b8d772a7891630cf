"""Per-session Training Stress Score calculations."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from ..exceptions import ValidationError
from ..models.athlete import AthleteThresholds, Session, Sport

logger = logging.getLogger(__name__)

# Fixed intensity for sessions without power, pace or heart rate data.
# One hour at IF 0.6 scores 36 TSS.
DURATION_ONLY_INTENSITY = 0.6

NP_WINDOW_SECONDS = 30

TSS_PRECISION = 1
IF_PRECISION = 3


class TssMethod(str, Enum):
    """Which algorithm produced a session's TSS."""
    POWER = "power"
    PACE = "pace"
    HEART_RATE = "heart_rate"
    DURATION = "duration"


@dataclass(frozen=True)
class TssResult:
    """Tagged TSS result: the score, its intensity and the method used."""

    tss: float
    intensity_factor: float
    normalized_effort: Optional[float]  # NP (W), speed (m/s) or HR (bpm)
    method: TssMethod

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "tss": self.tss,
            "intensity_factor": self.intensity_factor,
            "normalized_effort": self.normalized_effort,
            "method": self.method.value,
        }


def calculate_intensity_factor(effort: float, threshold: float) -> float:
    """
    Calculate Intensity Factor (IF).

    IF represents the relative intensity of the workout compared to the
    athlete's threshold. IF = 1.0 means the effort equals threshold.

    Formula: IF = effort / threshold

    Args:
        effort: Normalized power, speed or heart rate
        threshold: The matching threshold (FTP, threshold speed, LTHR)

    Returns:
        Intensity Factor (dimensionless ratio), 0.0 for a missing threshold
    """
    if threshold is None or threshold <= 0:
        return 0.0
    return effort / threshold


def calculate_normalized_power(
    power_samples: Sequence[float],
    sample_seconds: float = 1.0,
) -> float:
    """
    Calculate Normalized Power (NP) from a power stream.

    NP accounts for the physiological cost of variable power output: a
    30-second rolling average is raised to the 4th power, averaged, and
    the 4th root taken.

    Formula: NP = (mean(rolling_30s_power^4))^0.25

    Args:
        power_samples: Power values in watts, one per sample
        sample_seconds: Seconds represented by each sample

    Returns:
        Normalized Power in whole watts. A stream shorter than one window
        returns its plain average; an empty stream returns 0.
    """
    if not power_samples:
        return 0.0
    if sample_seconds <= 0:
        raise ValidationError("sample_seconds must be positive", field="sample_seconds")

    window_size = max(1, round(NP_WINDOW_SECONDS / sample_seconds))
    if len(power_samples) < window_size:
        return float(round(sum(power_samples) / len(power_samples)))

    window_sum = sum(power_samples[:window_size])
    fourth_powers = [(window_sum / window_size) ** 4]
    for i in range(window_size, len(power_samples)):
        window_sum += power_samples[i] - power_samples[i - window_size]
        fourth_powers.append((window_sum / window_size) ** 4)

    return float(round((sum(fourth_powers) / len(fourth_powers)) ** 0.25))


def calculate_variability_index(normalized_power: float, avg_power: float) -> float:
    """
    Calculate Variability Index (VI = NP / average power).

    1.0 is perfectly steady; criteriums and mountain bike races run above
    1.15. Returns 0.0 without an average power.
    """
    if not avg_power or avg_power <= 0:
        return 0.0
    return round(normalized_power / avg_power, IF_PRECISION)


def _stress_score(duration_seconds: float, intensity_factor: float) -> float:
    # (duration * effort * IF) / (threshold * 3600) * 100 == hours * IF^2 * 100
    if duration_seconds <= 0:
        return 0.0
    return duration_seconds / 3600 * intensity_factor ** 2 * 100


def _result(
    duration_seconds: float,
    intensity_factor: float,
    effort: Optional[float],
    method: TssMethod,
) -> TssResult:
    tss = _stress_score(duration_seconds, intensity_factor)
    return TssResult(
        tss=round(tss, TSS_PRECISION),
        intensity_factor=round(intensity_factor, IF_PRECISION),
        normalized_effort=round(effort, 2) if effort is not None else None,
        method=method,
    )


def calculate_power_tss(
    duration_seconds: float,
    normalized_power: float,
    ftp: float,
) -> TssResult:
    """
    Calculate Training Stress Score from power.

    A TSS of 100 represents one hour at FTP.

    Formula: TSS = (duration_sec * NP * IF) / (FTP * 3600) * 100

    Args:
        duration_seconds: Duration of activity in seconds
        normalized_power: Normalized Power in watts
        ftp: Functional Threshold Power in watts

    Returns:
        TssResult tagged with the power method
    """
    intensity_factor = calculate_intensity_factor(normalized_power, ftp)
    return _result(duration_seconds, intensity_factor, normalized_power, TssMethod.POWER)


def calculate_pace_tss(
    duration_seconds: float,
    speed: float,
    threshold_speed: float,
) -> TssResult:
    """
    Calculate Training Stress Score from speed (rTSS / sTSS).

    Same shape as power TSS with the speed ratio standing in for the power
    ratio. Used for running against threshold pace and swimming against CSS.

    Args:
        duration_seconds: Duration of activity in seconds
        speed: Session speed in m/s
        threshold_speed: Threshold running speed or CSS in m/s

    Returns:
        TssResult tagged with the pace method
    """
    intensity_factor = calculate_intensity_factor(speed, threshold_speed)
    return _result(duration_seconds, intensity_factor, speed, TssMethod.PACE)


def calculate_hr_tss(
    duration_seconds: float,
    avg_heart_rate: float,
    lthr: float,
) -> TssResult:
    """
    Calculate heart rate based TSS (hrTSS).

    Intensity is weighted quadratically: TSS = hours * IF^2 * 100 with
    IF = avgHR / LTHR.
    """
    intensity_factor = calculate_intensity_factor(avg_heart_rate, lthr)
    return _result(duration_seconds, intensity_factor, avg_heart_rate, TssMethod.HEART_RATE)


def calculate_duration_tss(duration_seconds: float) -> TssResult:
    """Low-confidence TSS from duration alone at a fixed intensity."""
    return _result(duration_seconds, DURATION_ONLY_INTENSITY, None, TssMethod.DURATION)


def _power_for(session: Session) -> Optional[float]:
    if session.normalized_power:
        return session.normalized_power
    if session.avg_power:
        return session.avg_power
    return None


def _threshold_speed_for(session: Session, thresholds: AthleteThresholds) -> Optional[float]:
    if session.sport == Sport.RUN:
        return thresholds.threshold_pace
    if session.sport == Sport.SWIM:
        return thresholds.css
    return None


def calculate_session_tss(session: Session, thresholds: AthleteThresholds) -> TssResult:
    """
    Calculate TSS for one session using the best data available.

    Capabilities are checked in order, each falling through to the next
    when its data or threshold is missing:

    1. power: BIKE with normalized (or average) power and FTP
    2. pace: RUN with threshold pace, or SWIM with CSS, and a speed
    3. heart_rate: any sport with average HR and LTHR
    4. duration: fixed IF of 0.6

    Never raises for a valid session. Zero duration scores 0.

    Args:
        session: Completed session
        thresholds: The athlete's current thresholds

    Returns:
        TssResult recording the method used
    """
    duration = session.duration_seconds

    if session.sport == Sport.BIKE:
        power = _power_for(session)
        if power and thresholds.is_set(thresholds.ftp):
            return calculate_power_tss(duration, power, thresholds.ftp)

    threshold_speed = _threshold_speed_for(session, thresholds)
    speed = session.speed
    if speed and thresholds.is_set(threshold_speed):
        return calculate_pace_tss(duration, speed, threshold_speed)

    if session.avg_heart_rate and thresholds.is_set(thresholds.lthr):
        return calculate_hr_tss(duration, session.avg_heart_rate, thresholds.lthr)

    logger.debug(
        "No usable power, pace or HR data for %s session on %s, using duration-only TSS",
        session.sport.value,
        session.date,
    )
    return calculate_duration_tss(duration)
