from __future__ import annotations

from pathlib import Path
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict

ROOT = Path(__file__).resolve().parents[1]
ENV_FILE = ROOT / "env" / ".env.local"


class LocalSettings(BaseSettings):
    DATABASE_URL: str = f"sqlite+aiosqlite:///{ROOT / 'asset_sync.db'}"
    APP_ENV: str = "local"
    SECRET_KEY: str | None = None
    DEBUG: bool = True
    LOG_LEVEL: str = "DEBUG"

    # Device-local scan cache (one JSON file per storage key)
    LOCAL_STORE_DIR: str = str(ROOT / "local_store")
    LOCAL_STORE_KEY: str = "scannedAssets"

    ACTIVITY_WINDOW: int = 10
    WARRANTY_WINDOW_DAYS: int = 30

    # Create tables from ORM metadata on startup (no migrations locally)
    CREATE_TABLES: bool = True

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE) if ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
    )
