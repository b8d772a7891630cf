"""Critical Swim Speed from a 400m / 200m time trial."""

from dataclasses import dataclass

from ..exceptions import InvalidThresholdError
from .zones import format_pace_per_100m

# Pacing and turn losses over longer race distances
T750_FACTOR = 1.02
T1500_FACTOR = 1.03


@dataclass(frozen=True)
class CssResult:
    """Critical Swim Speed and the race times it predicts."""

    css: float                # m/s
    pace_per_100m: float      # seconds
    pace_formatted: str       # m:ss per 100m
    estimated_t750: int       # seconds
    estimated_t1500: int      # seconds

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "css": self.css,
            "pace_per_100m": self.pace_per_100m,
            "pace_formatted": self.pace_formatted,
            "estimated_t750": self.estimated_t750,
            "estimated_t1500": self.estimated_t1500,
        }


def calculate_css(t400_seconds: float, t200_seconds: float) -> CssResult:
    """
    Calculate Critical Swim Speed from test times.

    CSS is the speed a swimmer can theoretically hold without fatigue,
    the swim counterpart of FTP. It is the slope between the two trials:

    CSS = (400m - 200m) / (T400 - T200)

    The result is the ``css`` threshold used by swim zones and swim TSS.

    Args:
        t400_seconds: Time to swim 400m in seconds (e.g. 360 for 6:00)
        t200_seconds: Time to swim 200m in seconds (e.g. 165 for 2:45)

    Returns:
        CssResult with CSS in m/s, pace per 100m and predicted 750m and
        1500m times

    Raises:
        InvalidThresholdError: If a time is not positive or the 400m time
            does not exceed the 200m time
    """
    if t400_seconds <= 0 or t200_seconds <= 0:
        raise InvalidThresholdError("Both test times must be positive", field="css")
    if t400_seconds <= t200_seconds:
        raise InvalidThresholdError("400m time must be greater than 200m time", field="css")

    css = 200 / (t400_seconds - t200_seconds)

    return CssResult(
        css=round(css, 3),
        pace_per_100m=round(100 / css, 1),
        pace_formatted=format_pace_per_100m(css),
        estimated_t750=round(750 / css * T750_FACTOR),
        estimated_t1500=round(1500 / css * T1500_FACTOR),
    )
