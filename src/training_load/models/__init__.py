"""Domain models for athletes and sessions."""

from .athlete import AthleteThresholds, Session, Sport

__all__ = [
    "AthleteThresholds",
    "Session",
    "Sport",
]
