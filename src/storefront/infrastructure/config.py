"""Runtime configuration, read from the environment (and a ``.env`` file
when present)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import timedelta
from functools import lru_cache

from dotenv import load_dotenv

from storefront.domain.model.reservation import DEFAULT_RESERVATION_TTL

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///storefront.db"


@dataclass(frozen=True)
class Settings:

    database_url: str = DEFAULT_DATABASE_URL
    reservation_ttl: timedelta = field(default=DEFAULT_RESERVATION_TTL)
    log_level: str = "INFO"
    sql_echo: bool = False

    @staticmethod
    def from_env() -> Settings:
        load_dotenv()
        return Settings(
            database_url=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL),
            reservation_ttl=timedelta(
                minutes=_int_env("STOCK_RESERVATION_TTL_MINUTES", 10)
            ),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            sql_echo=os.getenv("SQL_ECHO", "false").lower() in ("1", "true", "yes"),
        )


def _int_env(key: str, default: int) -> int:
    raw = os.getenv(key)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r, using %d", key, raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring non-positive %s=%r, using %d", key, raw, default)
        return default
    return value


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings.from_env()
