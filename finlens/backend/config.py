from __future__ import annotations

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")


def _split_origins(raw: str) -> List[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


class Settings:
    """Runtime settings shared across the backend application."""

    def __init__(self) -> None:
        self.title: str = os.getenv("FINLENS_TITLE", "FinLens Analytics API")
        self.version: str = "1.0.0"
        self.cors_origins: List[str] = _split_origins(
            os.getenv("FINLENS_CORS_ORIGINS", "http://localhost:5173")
        )
        self.analytics_cache_ttl: int = int(os.getenv("ANALYTICS_CACHE_TTL", "300"))
        self.analytics_cache_size: int = int(os.getenv("ANALYTICS_CACHE_SIZE", "256"))
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
        self.host: str = os.getenv("FINLENS_HOST", "127.0.0.1")
        self.port: int = int(os.getenv("FINLENS_PORT", "8000"))


settings = Settings()
