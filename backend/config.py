"""Application configuration using pydantic-settings."""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    DATABASE_URL: str = "sqlite:///./cardfolio.db"

    # Primary price provider (TCGdex)
    TCGDEX_BASE_URL: str = "https://api.tcgdex.net/v2"
    TCGDEX_TIMEOUT_SECONDS: float = 10.0

    # Secondary price provider (Boutique API), fallback only
    BOUTIQUE_API_URL: str = "http://localhost:8080/api"
    BOUTIQUE_TIMEOUT_SECONDS: float = 8.0

    # Pacing and caps
    SNAPSHOT_JOB_DELAY_SECONDS: float = 0.2
    MAX_LIVE_PRICE_CALLS: int = 50

    # Scheduling (UTC)
    SCHEDULER_ENABLED: bool = True
    RUN_JOBS_ON_STARTUP: bool = True
    SNAPSHOT_JOB_HOUR: int = 6
    SNAPSHOT_JOB_MINUTE: int = 0
    ALERT_JOB_HOUR: int = 6
    ALERT_JOB_MINUTE: int = 30

    CORS_ORIGINS: list[str] = ["http://localhost:5173"]

    @field_validator("TCGDEX_BASE_URL", "BOUTIQUE_API_URL", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Base URLs are joined with paths starting with ``/``."""
        if isinstance(v, str):
            return v.rstrip("/")
        return v

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize LOG_LEVEL to an uppercase Python logging level."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"LOG_LEVEL must be one of {valid}, got {v!r}")
        return v.upper()

    # App settings
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"


settings = Settings()
