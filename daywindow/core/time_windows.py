"""Time-of-day window classification: pure business logic.

Maps a local clock time, or a task's scheduled time, onto one of the four
fixed windows of the day. Anytime tasks belong to no window and match all.

No I/O: this module only transforms data.
"""

from __future__ import annotations

from datetime import datetime, time
from zoneinfo import ZoneInfo

from daywindow.data.models import (
    ExplicitTime,
    SymbolicTime,
    Task,
    TimeWindow,
    WindowType,
)

MORNING = TimeWindow(WindowType.MORNING, 5, 11, "Morning")
DAY = TimeWindow(WindowType.DAY, 11, 17, "Day")
EVENING = TimeWindow(WindowType.EVENING, 17, 22, "Evening")
NIGHT = TimeWindow(WindowType.NIGHT, 22, 5, "Night")

# Chronological from 05:00; together they cover all 24 hours without gaps.
WINDOWS: tuple[TimeWindow, ...] = (MORNING, DAY, EVENING, NIGHT)


def local_now(tz_name: str | None = None) -> datetime:
    """Current wall-clock time in the configured timezone."""
    if tz_name is None:
        from daywindow.config import settings
        tz_name = settings.TIMEZONE
    return datetime.now(ZoneInfo(tz_name))


def window_for_hour(hour: int) -> TimeWindow:
    """Return the window containing ``hour`` (0-23)."""
    for window in WINDOWS:
        if window.contains_hour(hour % 24):
            return window
    # Unreachable: WINDOWS partitions the day.
    raise AssertionError(f"No window for hour {hour}")


def current_window(now: time | datetime) -> TimeWindow:
    """Classify a moment of the day.

    Boundaries are closed-open, so 11:00 is already "day" and 04:59 is
    still "night".
    """
    return window_for_hour(now.hour)


def next_window(now: time | datetime) -> TimeWindow:
    """Return the window that follows the current one."""
    idx = WINDOWS.index(current_window(now))
    return WINDOWS[(idx + 1) % len(WINDOWS)]


def minutes_until_next_window(now: time | datetime) -> int:
    """Minutes left until the current window ends (handles the night wrap)."""
    window = current_window(now)
    now_min = now.hour * 60 + now.minute
    end_min = window.end_hour * 60
    if end_min <= now_min:
        end_min += 24 * 60
    return end_min - now_min


def window_of(task: Task) -> WindowType:
    """Return the WindowType a task belongs to.

    Explicit clock times go through the same table as current_window;
    symbolic tags are taken as-is; unset times are ANYTIME.
    """
    st = task.scheduled_time
    if isinstance(st, ExplicitTime):
        return window_for_hour(st.hour).type
    if isinstance(st, SymbolicTime):
        return st.window
    return WindowType.ANYTIME
