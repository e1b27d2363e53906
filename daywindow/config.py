"""
DayWindow: Centralized configuration.

Loads all settings from .env and validates them.
Every other module reads its tunables from here.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (two levels up from daywindow/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Persistence
    DATABASE_PATH: str = "data/daywindow.db"

    # Local clock used for window classification
    TIMEZONE: str = "Europe/Berlin"

    # Daily task materialization
    MAX_DAILY_TASKS: int = 8
    DEFAULT_TASK_DURATION_MINUTES: int = 5

    # Calendar minutes at which a day counts as busy and long tasks shrink
    BUSY_DAY_THRESHOLD_MINUTES: int = 240

    # Progress
    STREAK_LOOKBACK_DAYS: int = 90

    # Circadian fallback when a user's wake time is missing or malformed
    DEFAULT_WAKE_TIME: str = "07:00"

    @field_validator(
        "MAX_DAILY_TASKS",
        "DEFAULT_TASK_DURATION_MINUTES",
        "BUSY_DAY_THRESHOLD_MINUTES",
        "STREAK_LOOKBACK_DAYS",
        mode="before",
    )
    @classmethod
    def parse_int(cls, v: str | int) -> int:
        return int(v)


def _load_settings() -> Settings:
    """Load settings from environment, validating the timezone."""
    timezone = os.getenv("TIMEZONE", "Europe/Berlin")
    try:
        ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError):
        print(f"ERROR: TIMEZONE '{timezone}' is not a known IANA zone", file=sys.stderr)
        sys.exit(1)

    return Settings(
        DATABASE_PATH=os.getenv("DATABASE_PATH", "data/daywindow.db"),
        TIMEZONE=timezone,
        MAX_DAILY_TASKS=os.getenv("MAX_DAILY_TASKS", "8"),
        DEFAULT_TASK_DURATION_MINUTES=os.getenv("DEFAULT_TASK_DURATION_MINUTES", "5"),
        BUSY_DAY_THRESHOLD_MINUTES=os.getenv("BUSY_DAY_THRESHOLD_MINUTES", "240"),
        STREAK_LOOKBACK_DAYS=os.getenv("STREAK_LOOKBACK_DAYS", "90"),
        DEFAULT_WAKE_TIME=os.getenv("DEFAULT_WAKE_TIME", "07:00"),
    )


# Singleton, imported by all other modules as:
#   from daywindow.config import settings
settings = _load_settings()
