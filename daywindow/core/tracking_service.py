"""
DayWindow: Daily Tracking Service.

Stateless service layer that orchestrates the daily task flow:
materialize today's tasks -> apply complete / skip / undo -> persist ->
return structured response objects.

Each UI adapter calls this service and renders the responses its own way.
The store is the source of truth: a failed write leaves the stored day
untouched and comes back as a retryable ErrorResponse, so the UI can revert
its optimistic state and try again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import TYPE_CHECKING

from daywindow.core.day_scheduler import DayView, ViewMode, build_day_view
from daywindow.core.task_optimizer import is_busy_day
from daywindow.core.task_source import generate_daily_tasks
from daywindow.core.task_state import TRANSITIONS, InvalidTransitionError
from daywindow.data.models import DailyTracking, Task
from daywindow.ports.completion_store import StoreError

if TYPE_CHECKING:
    from daywindow.ports.completion_store import KeyValueStore
    from daywindow.ports.task_source_port import TaskSource

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Response types
# ---------------------------------------------------------------------------


class ResponseKind(Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class ServiceResponse:
    kind: ResponseKind
    message: str


@dataclass
class SuccessResponse(ServiceResponse):
    task: Task | None = None
    tracking: DailyTracking | None = None


@dataclass
class ErrorResponse(ServiceResponse):
    retryable: bool = False


@dataclass
class WeeklySummary:
    week_start: str
    week_end: str
    days_tracked: int
    total_tasks: int
    completed_tasks: int
    completion_rate: int
    daily_breakdown: list[DailyTracking] = field(default_factory=list)


def tracking_key(user_id: str, day: date) -> str:
    """Store key for one user's tracking record on one calendar day."""
    return f"tracking:{user_id}:{day.isoformat()}"


# ---------------------------------------------------------------------------
# TrackingService
# ---------------------------------------------------------------------------


class TrackingService:
    """Orchestrates daily tracking on top of a store and a task source.

    Returns structured response objects; never renders anything.
    """

    def __init__(self, store: KeyValueStore, source: TaskSource) -> None:
        self._store = store
        self._source = source

    # ------------------------------------------------------------------
    # Public: day loading
    # ------------------------------------------------------------------

    def get_daily_tracking(
        self, user_id: str, day: date | None = None,
    ) -> DailyTracking:
        """Load the day's tracking record, materializing it on first access.

        Raises StoreError if the store can't be read or the new record
        can't be saved.
        """
        day = day or date.today()
        key = tracking_key(user_id, day)

        raw = self._store.get(key)
        if raw is not None:
            return DailyTracking.from_dict(raw)

        tracking = self._generate_daily_tracking(user_id, day)
        self._store.set(key, tracking.to_dict())
        logger.info(
            "Generated tracking for %s on %s: %d tasks",
            user_id, day.isoformat(), tracking.tasks_total,
        )
        return tracking

    def _generate_daily_tracking(self, user_id: str, day: date) -> DailyTracking:
        mode = self._source.get_user_mode(user_id) or "normal"
        modules = self._source.list_modules(user_id)

        plans = {}
        for instance in modules:
            plan_id = instance.config.get("plan_id")
            if plan_id and plan_id not in plans:
                plan = self._source.get_plan(plan_id)
                if plan is not None:
                    plans[plan_id] = plan

        tasks = generate_daily_tasks(
            modules, day, mode=mode, plans=plans,
            is_busy_day=self._is_busy_day(user_id, day),
        )
        return DailyTracking(
            user_id=user_id,
            tracking_date=day.isoformat(),
            active_mode=mode,
            tasks=tasks,
        )

    def _is_busy_day(self, user_id: str, day: date) -> bool:
        try:
            durations = self._source.list_event_durations(user_id, day)
        except Exception as exc:
            logger.warning("Calendar load unavailable for %s on %s: %s", user_id, day, exc)
            return False
        return is_busy_day(durations)

    def get_day_view(
        self,
        user_id: str,
        now: datetime | None = None,
        view_mode: ViewMode = ViewMode.FOCUS,
    ) -> DayView:
        """Today's focus (or full) task list for the current window."""
        if now is None:
            from daywindow.core.time_windows import local_now
            now = local_now()
        tracking = self.get_daily_tracking(user_id, now.date())
        return build_day_view(tracking.tasks, now.time(), view_mode)

    # ------------------------------------------------------------------
    # Public: task transitions
    # ------------------------------------------------------------------

    def complete_task(
        self, user_id: str, task_id: str, day: date | None = None,
    ) -> ServiceResponse:
        """Mark a task completed. Completing twice is a no-op."""
        return self._apply(user_id, task_id, day, "complete")

    def skip_task(
        self,
        user_id: str,
        task_id: str,
        reason: str | None = None,
        day: date | None = None,
    ) -> ServiceResponse:
        """Mark a task skipped with an optional reason code."""
        return self._apply(user_id, task_id, day, "skip", reason=reason)

    def undo_task(
        self, user_id: str, task_id: str, day: date | None = None,
    ) -> ServiceResponse:
        """Put a completed or skipped task back to pending."""
        return self._apply(user_id, task_id, day, "undo")

    def _apply(
        self,
        user_id: str,
        task_id: str,
        day: date | None,
        action: str,
        **kwargs,
    ) -> ServiceResponse:
        day = day or date.today()
        try:
            tracking = self.get_daily_tracking(user_id, day)
        except StoreError as exc:
            logger.error("Failed to load tracking for %s on %s: %s", user_id, day, exc)
            return ErrorResponse(
                kind=ResponseKind.ERROR,
                message="Couldn't load today's tasks. Please try again.",
                retryable=True,
            )

        task = tracking.find_task(task_id)
        if task is None:
            return ErrorResponse(
                kind=ResponseKind.ERROR,
                message=f"Task {task_id!r} not found for {day.isoformat()}.",
            )

        try:
            updated = TRANSITIONS[action](task, **kwargs)
        except InvalidTransitionError as exc:
            logger.warning("Rejected %s on %s: %s", action, task_id, exc)
            return ErrorResponse(kind=ResponseKind.ERROR, message=str(exc))

        if updated is task:
            return SuccessResponse(
                kind=ResponseKind.SUCCESS,
                message=f"Task {task_id!r} already {task.state.value}.",
                task=task,
                tracking=tracking,
            )

        tracking.tasks = [updated if t.id == task_id else t for t in tracking.tasks]
        try:
            self._store.set(tracking_key(user_id, day), tracking.to_dict())
        except StoreError as exc:
            logger.error("Failed to persist %s on %s: %s", action, task_id, exc)
            return ErrorResponse(
                kind=ResponseKind.ERROR,
                message="Couldn't save your change. Please try again.",
                retryable=True,
            )

        logger.info(
            "Task %s -> %s (%d/%d done)",
            task_id, updated.state.value,
            tracking.tasks_completed, tracking.tasks_total,
        )
        return SuccessResponse(
            kind=ResponseKind.SUCCESS,
            message=f"Task {task_id!r} {updated.state.value}.",
            task=updated,
            tracking=tracking,
        )

    # ------------------------------------------------------------------
    # Public: history & progress
    # ------------------------------------------------------------------

    def get_tracking_history(
        self, user_id: str, start: date, end: date,
    ) -> list[DailyTracking]:
        """Stored tracking records in [start, end], newest first.

        Raises StoreError if the store can't be read.
        """
        prefix = f"tracking:{user_id}:"
        days: list[date] = []
        for key in self._store.keys(prefix):
            suffix = key[len(prefix):]
            # A user id containing ":" may share the prefix with another user
            if ":" in suffix:
                continue
            try:
                day = date.fromisoformat(suffix)
            except ValueError:
                logger.warning("Ignoring malformed tracking key %r", key)
                continue
            if start <= day <= end:
                days.append(day)

        history: list[DailyTracking] = []
        for day in sorted(days, reverse=True):
            raw = self._store.get(tracking_key(user_id, day))
            if raw is not None:
                history.append(DailyTracking.from_dict(raw))
        return history

    def calculate_streak(self, user_id: str, today: date | None = None) -> int:
        """Consecutive days, ending today or yesterday, with >= 1 completed task.

        Like the other progress queries this is read-only and degrades
        instead of raising: a store failure is logged and reported as 0.
        """
        from daywindow.config import settings

        today = today or date.today()
        start = today - timedelta(days=settings.STREAK_LOOKBACK_DAYS - 1)
        try:
            history = self.get_tracking_history(user_id, start, today)
        except StoreError as exc:
            logger.error("Streak lookup failed for %s: %s", user_id, exc)
            return 0

        streak = 0
        expected = None
        for record in history:
            record_day = date.fromisoformat(record.tracking_date)
            if expected is None:
                # Today may not be tracked yet; yesterday still counts.
                if record_day not in (today, today - timedelta(days=1)):
                    break
            elif record_day != expected:
                break

            if record.tasks_completed > 0:
                streak += 1
                expected = record_day - timedelta(days=1)
            elif record_day == today and expected is None:
                expected = today - timedelta(days=1)
            else:
                break
        return streak

    def get_weekly_summary(
        self, user_id: str, week_start: date | None = None,
    ) -> WeeklySummary:
        """Totals for a Monday-start week.

        A store failure is logged and yields an empty summary, the same
        policy calculate_streak follows.
        """
        if week_start is None:
            today = date.today()
            week_start = today - timedelta(days=today.weekday())
        week_end = week_start + timedelta(days=6)

        try:
            history = self.get_tracking_history(user_id, week_start, week_end)
        except StoreError as exc:
            logger.error("Weekly summary lookup failed for %s: %s", user_id, exc)
            history = []
        total = sum(d.tasks_total for d in history)
        completed = sum(d.tasks_completed for d in history)
        rate = (completed * 100 + total // 2) // total if total else 0

        return WeeklySummary(
            week_start=week_start.isoformat(),
            week_end=week_end.isoformat(),
            days_tracked=sum(1 for d in history if d.tasks_total > 0),
            total_tasks=total,
            completed_tasks=completed,
            completion_rate=rate,
            daily_breakdown=history,
        )


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    from daywindow.adapters.memory_store import InMemoryStore
    from daywindow.adapters.static_task_source import StaticTaskSource

    source = StaticTaskSource(modules={
        "demo": [{
            "id": "m1",
            "slug": "sleep-basics",
            "config": {"wake_time": "07:00"},
            "tasks": [
                {"id": "light", "title": "Morning light", "time": "{{config.wake_time}}+30min"},
                {"id": "walk", "title": "Walk after lunch", "time": "13:00", "pillar": "movement"},
                {"id": "screens", "title": "Screens off", "time": "21:30", "pillar": "sleep"},
                {"id": "water", "title": "Drink water"},
            ],
        }],
    })
    service = TrackingService(InMemoryStore(), source)
    view = service.get_day_view("demo", datetime.combine(date.today(), time(8, 0)))
    print(f"Window: {view.current_window.label} (next: {view.next_window.label})")
    for t in view.tasks:
        print(f"  [{t.state.value}] {t.scheduled_time or '--:--'} {t.title}")
