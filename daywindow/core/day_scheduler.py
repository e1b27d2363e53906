"""
DayWindow: Daily Window Scheduler.

Decides which of today's tasks are relevant "now" (focus mode) and in which
order the full list is displayed. A pure function of the current time and
the task list: no state, no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, time
from enum import Enum

from daywindow.core.time_windows import (
    WINDOWS,
    current_window,
    minutes_until_next_window,
    next_window,
    window_of,
)
from daywindow.data.models import ExplicitTime, Task, TimeWindow, WindowType


class ViewMode(Enum):
    FOCUS = "focus"
    ALL = "all"


@dataclass
class DayView:
    """Everything a UI needs to render today's task list."""

    current_window: TimeWindow
    next_window: TimeWindow
    minutes_remaining: int
    view_mode: ViewMode
    tasks: list[Task] = field(default_factory=list)

    @property
    def pending_count(self) -> int:
        return sum(1 for t in self.tasks if t.is_pending)

    @property
    def is_empty(self) -> bool:
        """True when nothing is scheduled for this window (active recovery)."""
        return not self.tasks


def filter_for_focus(tasks: list[Task], window: TimeWindow) -> list[Task]:
    """Keep tasks of ``window`` plus anytime tasks, preserving input order."""
    return [
        t for t in tasks
        if window_of(t) in (window.type, WindowType.ANYTIME)
    ]


def _display_key(task: Task) -> tuple[int, int, tuple[int, int]]:
    rank = 0 if task.is_pending else 1
    st = task.scheduled_time
    if isinstance(st, ExplicitTime):
        return rank, 0, (st.hour, st.minute)
    return rank, 1, (0, 0)


def order_for_display(tasks: list[Task]) -> list[Task]:
    """Sort tasks for display.

    Pending before completed/skipped; within each group, explicitly timed
    tasks ascending by time, then untimed tasks. sorted() is stable, so
    equal keys keep their input order.
    """
    return sorted(tasks, key=_display_key)


def group_by_window(tasks: list[Task]) -> dict[WindowType, list[Task]]:
    """Bucket tasks by window, in day order, with anytime last."""
    groups: dict[WindowType, list[Task]] = {w.type: [] for w in WINDOWS}
    groups[WindowType.ANYTIME] = []
    for task in tasks:
        groups[window_of(task)].append(task)
    return groups


def build_day_view(
    tasks: list[Task],
    now: time | datetime,
    view_mode: ViewMode = ViewMode.FOCUS,
) -> DayView:
    """Classify ``now`` and produce the ordered focus or full task list."""
    window = current_window(now)
    selected = filter_for_focus(tasks, window) if view_mode is ViewMode.FOCUS else list(tasks)
    return DayView(
        current_window=window,
        next_window=next_window(now),
        minutes_remaining=minutes_until_next_window(now),
        view_mode=view_mode,
        tasks=order_for_display(selected),
    )
