"""Environment-driven settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv


def _flag(value: str | None) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    database_path: str = "var/pricefeed.db"
    alpha_vantage_key: str = ""
    massive_api_key: str = ""
    enable_stream: bool = False
    redis_url: str = "redis://localhost:6379/0"
    stream_name: str = "price_samples"
    default_symbol: str = "AAPL"
    default_interval_sec: int = 30
    call_timeout_sec: float = 10.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Read settings from the environment, after loading a .env file if present."""
        load_dotenv()
        return cls(
            database_path=os.getenv("DATABASE_PATH", cls.database_path),
            alpha_vantage_key=os.getenv("ALPHA_VANTAGE_KEY", "").strip(),
            massive_api_key=os.getenv("MASSIVE_API_KEY", "").strip(),
            enable_stream=_flag(os.getenv("ENABLE_STREAM")),
            redis_url=os.getenv("REDIS_URL", cls.redis_url),
            stream_name=os.getenv("STREAM_NAME", cls.stream_name),
            default_symbol=os.getenv("DEFAULT_SYMBOL", cls.default_symbol).strip().upper(),
            default_interval_sec=int(os.getenv("DEFAULT_INTERVAL_SEC", cls.default_interval_sec)),
            call_timeout_sec=float(os.getenv("CALL_TIMEOUT_SEC", cls.call_timeout_sec)),
            log_level=os.getenv("LOG_LEVEL", cls.log_level),
        )


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
