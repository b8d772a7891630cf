"""Athlete thresholds and completed session records."""

from dataclasses import dataclass, fields, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional, Union

from ..exceptions import InvalidSessionError, InvalidThresholdError


class Sport(str, Enum):
    """Sports tracked by the engine."""
    SWIM = "SWIM"
    BIKE = "BIKE"
    RUN = "RUN"
    STRENGTH = "STRENGTH"

    @classmethod
    def from_string(cls, value: Union[str, "Sport"]) -> "Sport":
        """Parse a sport name case-insensitively, accepting common aliases."""
        if isinstance(value, Sport):
            return value
        aliases = {
            "SWIMMING": cls.SWIM,
            "CYCLING": cls.BIKE,
            "RIDE": cls.BIKE,
            "RUNNING": cls.RUN,
            "WEIGHTTRAINING": cls.STRENGTH,
        }
        normalized = str(value).strip().upper().replace("_", "").replace(" ", "")
        if normalized in aliases:
            return aliases[normalized]
        try:
            return cls(normalized)
        except ValueError:
            raise InvalidSessionError(f"Unknown sport: {value!r}", field="sport")


@dataclass(frozen=True)
class AthleteThresholds:
    """
    Snapshot of an athlete's physiological thresholds.

    Every field is optional. A value of None (or 0) means the athlete has not
    set that threshold, and anything derived from it degrades gracefully.
    """

    ftp: Optional[float] = None             # watts
    lthr: Optional[float] = None            # bpm
    threshold_pace: Optional[float] = None  # running threshold speed, m/s
    css: Optional[float] = None             # critical swim speed, m/s
    max_hr: Optional[float] = None          # bpm
    resting_hr: Optional[float] = None      # bpm

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None and value < 0:
                raise InvalidThresholdError(
                    f"{f.name} must be positive, got {value}",
                    field=f.name,
                )

    @staticmethod
    def is_set(value: Optional[float]) -> bool:
        """Return True if a threshold value is present and usable."""
        return value is not None and value > 0

    def to_dict(self) -> Dict[str, Optional[float]]:
        """Convert to dictionary for serialization."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AthleteThresholds":
        """Create thresholds from a dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class Session:
    """
    One completed exercise bout.

    ``tss`` and ``tss_method`` are the cached result of the TSS calculator;
    they are filled in once and recomputing them from the same inputs yields
    the same value.
    """

    date: date
    sport: Sport
    duration_seconds: float
    avg_heart_rate: Optional[float] = None
    avg_power: Optional[float] = None
    normalized_power: Optional[float] = None
    avg_speed: Optional[float] = None       # m/s
    distance: Optional[float] = None        # meters
    id: Optional[str] = None
    athlete_id: Optional[str] = None
    name: Optional[str] = None
    tss: Optional[float] = None
    tss_method: Optional[str] = None

    def __post_init__(self):
        if isinstance(self.date, datetime):
            self.date = self.date.date()
        elif isinstance(self.date, str):
            try:
                self.date = date.fromisoformat(self.date[:10])
            except ValueError:
                raise InvalidSessionError(f"Invalid session date: {self.date!r}", field="date")
        self.sport = Sport.from_string(self.sport)

        if self.duration_seconds is None or self.duration_seconds < 0:
            raise InvalidSessionError(
                f"duration_seconds must be >= 0, got {self.duration_seconds}",
                field="duration_seconds",
            )
        for name in ("avg_heart_rate", "avg_power", "normalized_power", "avg_speed", "distance"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise InvalidSessionError(f"{name} must be >= 0, got {value}", field=name)

    @property
    def duration_hours(self) -> float:
        return self.duration_seconds / 3600

    @property
    def speed(self) -> Optional[float]:
        """Average speed in m/s, preferring distance over duration."""
        if self.distance and self.duration_seconds > 0:
            return self.distance / self.duration_seconds
        if self.avg_speed:
            return self.avg_speed
        return None

    def with_tss(self, tss: float, method: str) -> "Session":
        """Return a copy carrying a computed TSS."""
        return replace(self, tss=tss, tss_method=method)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "athlete_id": self.athlete_id,
            "date": self.date.isoformat(),
            "sport": self.sport.value,
            "name": self.name,
            "duration_seconds": self.duration_seconds,
            "avg_heart_rate": self.avg_heart_rate,
            "avg_power": self.avg_power,
            "normalized_power": self.normalized_power,
            "avg_speed": self.avg_speed,
            "distance": self.distance,
            "tss": self.tss,
            "tss_method": self.tss_method,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Session":
        """Create a session from a dictionary (e.g. a database row)."""
        return cls(
            date=data["date"],
            sport=data["sport"],
            duration_seconds=data.get("duration_seconds", 0),
            avg_heart_rate=data.get("avg_heart_rate"),
            avg_power=data.get("avg_power"),
            normalized_power=data.get("normalized_power"),
            avg_speed=data.get("avg_speed"),
            distance=data.get("distance"),
            id=data.get("id"),
            athlete_id=data.get("athlete_id"),
            name=data.get("name"),
            tss=data.get("tss"),
            tss_method=data.get("tss_method"),
        )
