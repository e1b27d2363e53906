"""
DayWindow: Task Source normalization.

Turns the loosely-shaped task definitions the backend hands us (module task
templates, 30-day plan days) into the single Task shape the scheduler works
on. Scheduled times are resolved here, once, into ExplicitTime /
SymbolicTime / None so nothing downstream has to re-parse strings.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime

from pydantic import BaseModel, Field

from daywindow.core.task_optimizer import optimize_daily_tasks
from daywindow.data.models import (
    ExplicitTime,
    Pillar,
    ScheduledTime,
    SymbolicTime,
    Task,
    WindowType,
)

logger = logging.getLogger(__name__)

PLAN_MODULE_SLUG = "30-day-longevity"
PLAN_LENGTH_DAYS = 30

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?$")
_OFFSET_RE = re.compile(r"\{\{config\.(\w+)\}\}([+-])(\d+)min")
_PLACEHOLDER_RE = re.compile(r"\{\{config\.(\w+)\}\}")
_SUPPLEMENT_COND_RE = re.compile(r"config\.supplements\.includes\('(\w+)'\)")

_SYMBOLIC_TAGS: dict[str, WindowType | None] = {
    "morning": WindowType.MORNING,
    "day": WindowType.DAY,
    "midday": WindowType.DAY,
    "afternoon": WindowType.DAY,
    "evening": WindowType.EVENING,
    "night": WindowType.NIGHT,
    "anytime": None,
}

# Plan "when" hints, mapped to an approximate clock time.
_WHEN_TO_TIME: dict[str, str | None] = {
    "early_morning": "06:30",
    "morning": "07:30",
    "late_morning": "10:00",
    "midday": "12:00",
    "afternoon": "15:00",
    "evening": "19:00",
    "night": "21:00",
    "before_bed": "22:00",
    "anytime": None,
}

_WEEKDAYS = (
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
)


# ---------------------------------------------------------------------------
# Raw shapes from the backend
# ---------------------------------------------------------------------------


class TaskTemplate(BaseModel):
    """One task definition inside a module's task template.

    JSON example:
    {
        "id": "sunlight",
        "title_en": "Get {{config.minutes}} min of sunlight",
        "pillar": "sleep",
        "time": "{{config.wake_time}}+30min",
        "frequency": "daily"
    }
    """
    id: str | int
    title: str | None = None
    title_en: str | None = None
    title_de: str | None = None
    task: str | None = None
    description: str | None = None
    pillar: str | None = None
    duration_minutes: int | None = None
    time: str | None = None
    frequency: str = "daily"          # daily | weekly | monthly | once
    day: str | int | None = None      # weekday name, day of month, or module day
    condition: str | None = None


class ModuleInstance(BaseModel):
    """A user's activated module together with its configuration."""
    id: str
    slug: str
    priority_weight: int = 50
    config: dict = Field(default_factory=dict)
    started_at: str | None = None     # ISO date or datetime
    affected_by_modes: list[str] = Field(default_factory=list)
    tasks: list[TaskTemplate] = Field(default_factory=list)


class PlanTask(BaseModel):
    id: str | int | None = None
    task: str
    pillar: str | None = None
    time_minutes: int | None = None
    when: str | None = None
    evidence: str | None = None


class PlanDay(BaseModel):
    tasks: list[PlanTask] = Field(default_factory=list)


class Plan(BaseModel):
    """A structured 30-day plan, one PlanDay per day."""
    id: str
    start_date: str | None = None     # ISO date
    days: list[PlanDay] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Scalar helpers
# ---------------------------------------------------------------------------


def parse_scheduled_time(raw: str | ScheduledTime) -> ScheduledTime:
    """Resolve a raw scheduled-time field.

    "07:30" / "7:30" / "07:30:00" -> ExplicitTime
    "morning", "evening", ...     -> SymbolicTime
    None, "", "anytime"           -> None

    Anything else is logged and treated as unset (anytime), never raised.
    """
    if raw is None or isinstance(raw, (ExplicitTime, SymbolicTime)):
        return raw

    value = str(raw).strip().lower()
    if not value:
        return None

    if value in _SYMBOLIC_TAGS:
        window = _SYMBOLIC_TAGS[value]
        return SymbolicTime(window) if window is not None else None

    m = _TIME_RE.match(value)
    if m:
        hour, minute = int(m.group(1)), int(m.group(2))
        if 0 <= hour <= 23 and 0 <= minute <= 59:
            return ExplicitTime(hour, minute)

    logger.warning("Unparseable scheduled time %r, treating as anytime", raw)
    return None


def _shift_time(base: str, delta_minutes: int) -> str | None:
    m = _TIME_RE.match(base.strip())
    if not m:
        return None
    total = (int(m.group(1)) * 60 + int(m.group(2)) + delta_minutes) % (24 * 60)
    return f"{total // 60:02d}:{total % 60:02d}"


def resolve_template_value(value: str | None, config: dict) -> str | None:
    """Substitute {{config.key}} placeholders.

    Supports time offsets such as "{{config.wake_time}}+30min". Placeholders
    whose key is missing from ``config`` are left untouched.
    """
    if not value or not isinstance(value, str):
        return value

    def _offset(m: re.Match) -> str:
        base = config.get(m.group(1))
        if not base:
            return m.group(0)
        delta = int(m.group(3)) * (1 if m.group(2) == "+" else -1)
        shifted = _shift_time(str(base), delta)
        return shifted if shifted is not None else m.group(0)

    def _plain(m: re.Match) -> str:
        v = config.get(m.group(1))
        return str(v) if v else m.group(0)

    return _PLACEHOLDER_RE.sub(_plain, _OFFSET_RE.sub(_offset, value))


def evaluate_condition(condition: str | None, config: dict) -> bool:
    """Evaluate the small condition language used in task templates."""
    if not condition:
        return True
    m = _SUPPLEMENT_COND_RE.search(condition)
    if m:
        return m.group(1) in (config.get("supplements") or [])
    if "lab_results.deficiencies.length > 0" in condition:
        # Lab results are not available at materialization time.
        return False
    return True


def _to_date(raw: str | None) -> date | None:
    if not raw:
        return None
    try:
        return datetime.fromisoformat(raw).date()
    except (TypeError, ValueError):
        logger.warning("Invalid start date %r", raw)
        return None


def _duration(raw: int | None, default: int, task_id: str) -> int:
    if raw is None or raw == 0:
        return default
    if raw < 0:
        logger.warning("Task %s has negative duration %d, using %d", task_id, raw, default)
        return default
    return raw


def calculate_day_number(start: date, target: date) -> int:
    """1-based day index of ``target`` in a program started on ``start``."""
    return max(1, (target - start).days + 1)


# ---------------------------------------------------------------------------
# Materialization
# ---------------------------------------------------------------------------


def _is_due(template: TaskTemplate, instance: ModuleInstance, day: date) -> bool:
    freq = template.frequency
    if freq == "weekly":
        return str(template.day).lower() == _WEEKDAYS[day.weekday()]
    if freq == "monthly":
        return str(template.day) == str(day.day)
    if freq == "once":
        start = _to_date(instance.started_at)
        if start is None or template.day is None:
            return False
        return str(template.day) == str(calculate_day_number(start, day))
    return True


def tasks_from_module(
    instance: ModuleInstance,
    day: date,
    default_duration: int | None = None,
) -> list[Task]:
    """Materialize one module's tasks for ``day``."""
    if default_duration is None:
        from daywindow.config import settings
        default_duration = settings.DEFAULT_TASK_DURATION_MINUTES

    config = instance.config
    tasks: list[Task] = []
    for template in instance.tasks:
        if not _is_due(template, instance, day):
            continue
        if not evaluate_condition(template.condition, config):
            continue

        raw_title = (
            template.title or template.title_en or template.title_de
            or template.task or str(template.id)
        )
        task_id = f"{instance.slug}-{template.id}"
        tasks.append(Task(
            id=task_id,
            title=resolve_template_value(raw_title, config),
            pillar=Pillar.from_raw(template.pillar),
            scheduled_time=parse_scheduled_time(
                resolve_template_value(template.time, config)
            ),
            duration_minutes=_duration(template.duration_minutes, default_duration, task_id),
            description=resolve_template_value(template.description, config),
            source_module=instance.slug,
            priority=instance.priority_weight,
        ))
    return tasks


def tasks_from_plan(
    instance: ModuleInstance,
    plan: Plan,
    day: date,
    default_duration: int | None = None,
) -> list[Task]:
    """Materialize the 30-day plan's tasks for ``day``.

    Returns [] outside the plan's 30 days or when the day has no tasks.
    """
    if default_duration is None:
        from daywindow.config import settings
        default_duration = settings.DEFAULT_TASK_DURATION_MINUTES

    start = _to_date(instance.config.get("start_date")) or _to_date(plan.start_date)
    if start is None:
        logger.warning("Plan %s has no start date", plan.id)
        return []

    if day < start:
        return []
    day_number = calculate_day_number(start, day)
    if day_number > PLAN_LENGTH_DAYS or day_number > len(plan.days):
        return []

    tasks: list[Task] = []
    for index, pt in enumerate(plan.days[day_number - 1].tasks):
        raw_id = pt.id if pt.id is not None else f"day{day_number}-task{index}"
        task_id = f"30-day-{raw_id}"
        tasks.append(Task(
            id=task_id,
            title=pt.task,
            pillar=Pillar.from_raw(pt.pillar),
            scheduled_time=parse_scheduled_time(_WHEN_TO_TIME.get(pt.when or "")),
            duration_minutes=_duration(pt.time_minutes, default_duration, task_id),
            description=pt.evidence,
            source_module=PLAN_MODULE_SLUG,
            priority=100 - index,
        ))
    return tasks


def _source_order_key(task: Task) -> tuple[int, tuple[int, int], int]:
    st = task.scheduled_time
    if isinstance(st, ExplicitTime):
        return 0, (st.hour, st.minute), 0
    return 1, (0, 0), -task.priority


def _tasks_for_instance(
    instance: ModuleInstance, day: date, plans: dict[str, Plan],
) -> list[Task]:
    if instance.slug == PLAN_MODULE_SLUG:
        plan = plans.get(instance.config.get("plan_id", ""))
        if plan is None:
            logger.warning("Plan module %s has no loadable plan", instance.id)
            return []
        return tasks_from_plan(instance, plan, day)
    return tasks_from_module(instance, day)


def generate_daily_tasks(
    modules: list[ModuleInstance],
    day: date,
    mode: str = "normal",
    plans: dict[str, Plan] | None = None,
    max_tasks: int | None = None,
    is_busy_day: bool = False,
) -> list[Task]:
    """Aggregate today's tasks across all active modules.

    Modules paused by the current context mode are skipped, and a module
    whose definitions can't be materialized is logged and left out so the
    rest of the day still renders. The result is ordered timed-first by
    clock time, then untimed by priority (highest first), capped at
    ``max_tasks``, and finally passed through the mode-swap and busy-day
    rules of daywindow.core.task_optimizer.
    """
    if max_tasks is None:
        from daywindow.config import settings
        max_tasks = settings.MAX_DAILY_TASKS

    plans = plans or {}
    all_tasks: list[Task] = []
    for instance in modules:
        if mode in instance.affected_by_modes:
            logger.info("Module '%s' paused in mode '%s'", instance.slug, mode)
            continue
        try:
            all_tasks.extend(_tasks_for_instance(instance, day, plans))
        except Exception as exc:
            logger.error("Failed to materialize module %s for %s: %s", instance.slug, day, exc)

    all_tasks.sort(key=_source_order_key)
    if len(all_tasks) > max_tasks:
        logger.info("Capping %d tasks to %d for %s", len(all_tasks), max_tasks, day)
    return optimize_daily_tasks(all_tasks[:max_tasks], mode, is_busy_day)
