"""Configuration settings for the Training Load engine."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


# __file__ = src/training_load/config.py
# .parent.parent.parent = project root
PACKAGE_ROOT = Path(__file__).parent
PROJECT_ROOT = PACKAGE_ROOT.parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TRAINING_LOAD_",
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Storage
    db_path: Path | None = None

    # Performance Management Chart
    ctl_time_constant: int = 42
    atl_time_constant: int = 7
    pmc_default_days: int = 90
    pmc_max_history_days: int = 730
    projection_days: int = 28
    taper_target_tsb: float = 15.0

    # Efficiency factor trend
    ef_min_duration_sec: int = 1800
    ef_trend_threshold_pct: float = 2.0
    ef_default_days: int = 90

    # Composite score windows (days)
    score_period_days: int = 7
    score_baseline_days: int = 42
    score_history_weeks: int = 12

    def model_post_init(self, __context) -> None:
        """Set default database path after initialization."""
        if self.db_path is None:
            self.db_path = PROJECT_ROOT / "training_load.db"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
