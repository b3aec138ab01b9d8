"""
Settings for the Dice Config API.

Values come from the environment or a .env file in the working directory;
unknown variables (including the frontend's) are ignored.
"""
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    APP_NAME: str = "DiceConfig"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # Last accepted configuration per X-Session-ID
    DATABASE_URL: str = "sqlite:///./data/dice_config.db"
    DB_TIMEOUT: int = 30  # seconds to wait for the SQLite write lock

    # Reject X-Session-ID values that are not UUID v4
    REQUIRE_SESSION_VALIDATION: bool = True

    DATA_DIR: Path = Path("./data")
    LOG_DIR: Path = Path("./data/logs")

    # Comma-separated; the Streamlit frontend by default
    CORS_ORIGINS: str = "http://localhost:8501,http://127.0.0.1:8501"

    @property
    def is_production(self) -> bool:
        return not self.DEBUG

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in (self.CORS_ORIGINS or "").split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Settings are read once per process; tests call get_settings.cache_clear()."""
    return Settings()


settings = get_settings()
