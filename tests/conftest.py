"""Shared fixtures for the training load tests."""

from datetime import date, timedelta

import pytest

from training_load.config import Settings
from training_load.db.database import TrainingDatabase
from training_load.models.athlete import AthleteThresholds, Session
from training_load.services.analytics import AnalyticsService
from training_load.services.pmc_store import PMCStore


TODAY = date(2024, 6, 30)
ATHLETE = "athlete-1"


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a temporary database."""
    return Settings(db_path=tmp_path / "training_load.db", projection_days=7)


@pytest.fixture
def db(settings):
    """Empty temporary database."""
    return TrainingDatabase(str(settings.db_path))


@pytest.fixture
def thresholds():
    return AthleteThresholds(ftp=250, lthr=165, threshold_pace=4.0, css=1.25)


@pytest.fixture
def athlete_db(db, thresholds):
    """Database with one athlete and their thresholds."""
    db.save_thresholds(ATHLETE, thresholds, name="Test Athlete")
    return db


@pytest.fixture
def service(athlete_db, settings):
    """Analytics service over the athlete database with a fixed clock."""
    return AnalyticsService(athlete_db, pmc_store=PMCStore(), settings=settings, today=lambda: TODAY)


def make_session(days_ago: int, sport: str = "BIKE", **metrics) -> Session:
    """Session for ATHLETE dated relative to TODAY."""
    metrics.setdefault("duration_seconds", 3600)
    return Session(date=TODAY - timedelta(days=days_ago), sport=sport, athlete_id=ATHLETE, **metrics)
