"""
Application settings read from the environment (and a local .env file).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()


def env(key: str, default: Optional[str] = None) -> Optional[str]:
    """Stripped env var; blank counts as unset."""
    value = os.getenv(key)
    if value is None:
        return default
    return value.strip() or default


def _env_int(key: str, default: int) -> int:
    raw = env(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    max_upload_bytes: int
    insights_sample_rows: int
    rows_page_size: int
    cors_allow_origins: List[str]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    origins = env("CORS_ALLOW_ORIGINS", "*") or "*"
    return Settings(
        max_upload_bytes=_env_int("MAX_UPLOAD_BYTES", 20 * 1024 * 1024),
        insights_sample_rows=_env_int("INSIGHTS_SAMPLE_ROWS", 10),
        rows_page_size=_env_int("ROWS_PAGE_SIZE", 10),
        cors_allow_origins=[o.strip() for o in origins.split(",") if o.strip()],
    )
