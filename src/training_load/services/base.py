"""
Base service classes and protocols.

Defines the collaborator interfaces the analytics service depends on.
"""

import logging
from abc import ABC
from datetime import date
from typing import Dict, List, Optional, Protocol, Tuple, runtime_checkable

from ..analysis.tri_score import SportAggregate
from ..models.athlete import AthleteThresholds, Session, Sport


@runtime_checkable
class ThresholdSource(Protocol):
    """Protocol for anything that stores athlete thresholds."""

    def get_thresholds(self, athlete_id: str) -> AthleteThresholds:
        """Get the athlete's current thresholds."""
        ...

    def save_thresholds(
        self,
        athlete_id: str,
        thresholds: AthleteThresholds,
        name: Optional[str] = None,
    ) -> AthleteThresholds:
        """Replace the athlete's thresholds."""
        ...


@runtime_checkable
class SessionSource(Protocol):
    """Protocol for session storage queried by athlete and date range."""

    def save_session(self, session: Session) -> Session:
        """Insert or replace a session."""
        ...

    def get_session(self, session_id: str) -> Session:
        """Get one session by ID."""
        ...

    def delete_session(self, session_id: str) -> bool:
        """Delete a session."""
        ...

    def list_sessions(
        self,
        athlete_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        sport: Optional[Sport] = None,
    ) -> List[Session]:
        """Get sessions for an athlete, oldest first."""
        ...

    def update_session_tss(self, session_id: str, tss: float, method: str) -> None:
        """Attach a computed TSS to a session."""
        ...

    def get_first_session_date(self, athlete_id: str) -> Optional[date]:
        """Date of the athlete's earliest session."""
        ...

    def get_daily_tss(
        self, athlete_id: str, start_date: date, end_date: date
    ) -> List[Tuple[date, float]]:
        """Total TSS per day with sessions."""
        ...

    def get_sport_aggregates(
        self, athlete_id: str, start_date: date, end_date: date
    ) -> Dict[Sport, SportAggregate]:
        """Hours, TSS and count per sport over a window."""
        ...


class BaseService(ABC):
    """
    Abstract base class for all services.

    Provides logging setup with an injectable logger.
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger(self.__class__.__name__)

    @property
    def logger(self) -> logging.Logger:
        """Get the logger instance."""
        return self._logger
