"""Shared test fixtures and configuration.

Sets up deterministic environment variables before any daywindow import,
and provides common fixtures like a temp SQLite store and a tracking
service wired to in-memory adapters.
"""

import os

# Patch env vars BEFORE any daywindow imports
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("TIMEZONE", "Europe/Berlin")
os.environ.setdefault("MAX_DAILY_TASKS", "8")
os.environ.setdefault("DEFAULT_TASK_DURATION_MINUTES", "5")
os.environ.setdefault("BUSY_DAY_THRESHOLD_MINUTES", "240")
os.environ.setdefault("STREAK_LOOKBACK_DAYS", "90")
os.environ.setdefault("DEFAULT_WAKE_TIME", "07:00")

import pytest


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_daywindow.db")


@pytest.fixture
def sqlite_store(tmp_db_path):
    """Return a SQLiteStore backed by a temp file."""
    from daywindow.data.db import SQLiteStore
    return SQLiteStore(db_path=tmp_db_path)


@pytest.fixture
def memory_store():
    from daywindow.adapters.memory_store import InMemoryStore
    return InMemoryStore()


@pytest.fixture
def demo_modules():
    """Raw module instances as the backend would return them."""
    return [
        {
            "id": "inst-sleep",
            "slug": "sleep-basics",
            "priority_weight": 70,
            "config": {"wake_time": "07:00"},
            "tasks": [
                {"id": "light", "title_en": "Morning light",
                 "time": "{{config.wake_time}}+30min", "pillar": "sleep"},
                {"id": "screens", "title_en": "Screens off",
                 "time": "22:30", "pillar": "sleep"},
            ],
        },
        {
            "id": "inst-move",
            "slug": "movement",
            "priority_weight": 40,
            "tasks": [
                {"id": "walk", "title_en": "Walk after lunch",
                 "time": "13:00", "pillar": "exercise", "duration_minutes": 20},
                {"id": "stretch", "title_en": "Stretch", "pillar": "movement"},
            ],
        },
    ]


@pytest.fixture
def task_source(demo_modules):
    from daywindow.adapters.static_task_source import StaticTaskSource
    return StaticTaskSource(modules={"u1": demo_modules})


@pytest.fixture
def tracking_service(memory_store, task_source):
    from daywindow.core.tracking_service import TrackingService
    return TrackingService(memory_store, task_source)
