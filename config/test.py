from __future__ import annotations

from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class TestSettings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///:memory:"
    APP_ENV: str = "test"
    SECRET_KEY: str | None = "test-secret-key"
    DEBUG: bool = False
    LOG_LEVEL: str = "WARNING"

    # Empty directory keeps the scan cache in memory
    LOCAL_STORE_DIR: str = ""
    LOCAL_STORE_KEY: str = "scannedAssets"

    ACTIVITY_WINDOW: int = 10
    WARRANTY_WINDOW_DAYS: int = 30

    CREATE_TABLES: bool = True

    model_config = SettingsConfigDict(env_prefix="TEST_")
