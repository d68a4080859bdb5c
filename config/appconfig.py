# config/appconfig.py
"""
Application Configuration
Database, identifier allocation and logging settings for the ICU ISBAR tracker
"""
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

# Calculate the project root
BASE_DIR = Path(__file__).resolve().parent.parent


class AppSettings(BaseSettings):
    """Core application settings"""

    APP_NAME: str = "ICU ISBAR Case Tracker"

    # ============================================================================
    # DATABASE
    # ============================================================================
    DATABASE_URL: str = f"sqlite+aiosqlite:///{BASE_DIR / 'icu_isbar.db'}"
    SQL_ECHO: bool = False

    # ============================================================================
    # PATIENT IDENTIFIERS
    # ============================================================================
    # Random internal IDs only, never hospital identifiers
    PATIENT_ID_PREFIX: str = "PT-"
    PATIENT_ID_MAX_ATTEMPTS: int = Field(default=8, ge=1)

    # ============================================================================
    # LOGGING
    # ============================================================================
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def async_database_url(self) -> str:
        """Render/Heroku style postgres:// URLs need the asyncpg driver name."""
        url = self.DATABASE_URL
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql+asyncpg://", 1)
        elif url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    @property
    def LOGGING_CONFIG(self) -> dict:
        return {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "root": {
                "level": self.LOG_LEVEL,
                "handlers": ["console"],
            },
            "loggers": {
                "sqlalchemy.engine": {"level": "WARNING"},
                "httpx": {"level": "WARNING"},
            },
        }


settings = AppSettings()
