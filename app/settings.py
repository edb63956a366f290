from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

# app/settings.py → parent = app/ → parent = repo root
REPO_ROOT = Path(__file__).resolve().parents[1]

load_dotenv(REPO_ROOT / ".env")


@dataclass
class Settings:
    """
    Centralized application configuration.

    Does NOT depend on pydantic. Values are loaded from environment
    variables via Settings.from_env().
    """

    # --- Data store (required at runtime, validated when the pool is built) ---
    database_url: str = ""

    # --- Connection pool ---
    db_pool_min_size: int = 1
    db_pool_max_size: int = 5
    db_pool_acquire_timeout_sec: float = 10.0
    db_pool_max_idle_sec: float = 10.0

    # --- API keys (comma-separated) ---
    api_keys_raw: str = ""

    # --- App ---
    app_version: str = "dev"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build Settings from environment variables with sane fallbacks."""

        def getenv_int(name: str, default: int) -> int:
            raw = os.getenv(name)
            if raw is None or raw.strip() == "":
                return default
            try:
                return int(raw)
            except ValueError:
                return default

        def getenv_float(name: str, default: float) -> float:
            raw = os.getenv(name)
            if raw is None or raw.strip() == "":
                return default
            try:
                return float(raw)
            except ValueError:
                return default

        return cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url).strip(),
            db_pool_min_size=getenv_int("DB_POOL_MIN_SIZE", cls.db_pool_min_size),
            db_pool_max_size=getenv_int("DB_POOL_MAX_SIZE", cls.db_pool_max_size),
            db_pool_acquire_timeout_sec=getenv_float(
                "DB_POOL_ACQUIRE_TIMEOUT_SEC", cls.db_pool_acquire_timeout_sec
            ),
            db_pool_max_idle_sec=getenv_float(
                "DB_POOL_MAX_IDLE_SEC", cls.db_pool_max_idle_sec
            ),
            api_keys_raw=os.getenv("API_KEYS", cls.api_keys_raw),
            app_version=os.getenv("APP_VERSION", cls.app_version),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings.from_env()
