"""Dependency injection for API routes."""

from functools import lru_cache

from ..config import get_settings
from ..db.database import TrainingDatabase
from ..services.analytics import AnalyticsService
from ..services.pmc_store import PMCStore


@lru_cache
def get_training_db() -> TrainingDatabase:
    """Get the training database instance."""
    settings = get_settings()
    return TrainingDatabase(str(settings.db_path))


@lru_cache
def get_pmc_store() -> PMCStore:
    """Get the process-wide PMC cache."""
    return PMCStore()


@lru_cache
def get_analytics_service() -> AnalyticsService:
    """Get the analytics service instance."""
    return AnalyticsService(
        get_training_db(),
        pmc_store=get_pmc_store(),
        settings=get_settings(),
    )
