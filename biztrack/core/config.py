"""
BizTrack Configuration
Core settings for the BizTrack reorder and replenishment API
"""
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional
from pathlib import Path


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Application Info
    APP_NAME: str = "BizTrack Replenishment API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./biztrack.db"
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 20

    # Security (tokens are issued by the external auth service)
    SECRET_KEY: str = "your-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # CORS
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = True
    LOG_DIR: Path = Path("logs")
    LOG_FILE: str = "app.log"
    ERROR_LOG_FILE: str = "error.log"

    # API Configuration
    API_V1_STR: str = "/api/v1"
    DOCS_URL: str = "/docs"
    REDOC_URL: str = "/redoc"
    OPENAPI_URL: str = "/openapi.json"

    # Replenishment analytics
    ANALYTICS_WINDOW_DAYS: int = 90
    REVIEW_PERIOD_DAYS: int = 7
    DEFAULT_REORDER_QUANTITY: int = 10
    STOCKOUT_SENTINEL_DAYS: int = 999

    # Notifications
    RECENT_ALERT_LIMIT: int = 7
    ARCHIVE_PAGE_LIMIT: int = 100
    NOTIFICATION_WRITE_ATTEMPTS: int = 3

    # Document numbering
    SEQUENCE_ALLOCATION_ATTEMPTS: int = 5
    SEQUENCE_PAD_WIDTH: int = 6
    REORDER_NUMBER_PREFIX: str = "RO"
    PURCHASE_NUMBER_PREFIX: str = "PO"
    SALE_NUMBER_PREFIX: str = "SALE"

    @field_validator("LOG_DIR", mode="before")
    @classmethod
    def coerce_log_dir(cls, v):
        """Accept plain strings for the log directory"""
        return Path(v) if isinstance(v, str) else v

    @field_validator("NOTIFICATION_WRITE_ATTEMPTS", "SEQUENCE_ALLOCATION_ATTEMPTS")
    @classmethod
    def at_least_one_attempt(cls, v: int) -> int:
        if v < 1:
            raise ValueError("attempt counts must be at least 1")
        return v

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


# Global settings instance
settings = Settings()

# Database connection string for SQLAlchemy
DATABASE_URL = settings.DATABASE_URL

# Test database URL (for testing)
TEST_DATABASE_URL: Optional[str] = "sqlite://"
