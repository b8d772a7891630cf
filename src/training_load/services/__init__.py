"""Service layer for training load analytics."""

from .analytics import AnalyticsService, PMCResult
from .base import BaseService, SessionSource, ThresholdSource
from .pmc_store import PMCStore

__all__ = [
    "AnalyticsService",
    "BaseService",
    "PMCResult",
    "PMCStore",
    "SessionSource",
    "ThresholdSource",
]
