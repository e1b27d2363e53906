"""
DayWindow: Task Optimizer.

Rule-based rewrites of an already materialized day:

- Mode swap: in a context mode (sick, travel, deep_work, detox) tasks whose
  title matches a rule are replaced with the mode-appropriate alternative.
- Busy-day buffer: when the calendar is full, long tasks are shortened to a
  known emergency version or, failing that, to half their length.

No I/O: this module only transforms data.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace

from daywindow.data.models import Pillar, Task

logger = logging.getLogger(__name__)

BUSY_DAY_MIN_DURATION = 15      # shorter tasks are never touched
GENERIC_SHORTEN_MIN = 20        # halve anything this long without a specific rule
_DEFAULT_EVENT_MINUTES = 60


@dataclass(frozen=True)
class SwapRule:
    pattern: re.Pattern
    replacement: str
    pillar: Pillar | None       # None keeps the task's own pillar
    reason: str


@dataclass(frozen=True)
class EmergencyVersion:
    original_minutes: int       # only tasks at least this long are swapped
    emergency_minutes: int
    title: str


def _rule(pattern: str, replacement: str, pillar: Pillar | None, reason: str) -> SwapRule:
    return SwapRule(re.compile(pattern, re.IGNORECASE), replacement, pillar, reason)


MODE_SWAP_RULES: dict[str, tuple[SwapRule, ...]] = {
    "sick": (
        _rule(r"hiit|gym|workout|laufen|joggen|cardio|kraft",
              "Gentle yoga or NSDR (10 min)", Pillar.MOVEMENT, "Adjusted for recovery mode"),
        _rule(r"kalt.*dusche|cold.*shower|ice.*bath",
              "Warm shower (5 min)", None, "Spare the immune system"),
        _rule(r"fasten|fasting",
              "Regular, nourishing meals", Pillar.NUTRITION, "The body needs energy to heal"),
    ),
    "travel": (
        _rule(r"gym|fitnessstudio",
              "20-min bodyweight circuit (hotel room)", Pillar.MOVEMENT, "Adjusted for travel mode"),
        _rule(r"meditation|meditieren",
              "Breathing exercise (2-3 min)", Pillar.STRESS, "Shortened for travel"),
        _rule(r"meal.*prep|kochen",
              "Pick a healthy restaurant option", Pillar.NUTRITION, "No kitchen available"),
    ),
    "deep_work": (
        _rule(r"call|anruf|meeting|termin",
              "Batch for later (after 14:00)", None, "Deep work protection"),
        _rule(r"social.*media|instagram|twitter",
              "Blocked during deep work", None, "Distraction removed"),
    ),
    "detox": (
        _rule(r"alkohol|alcohol|wein|bier",
              "Alcohol-free alternative", Pillar.NUTRITION, "Detox mode active"),
        _rule(r"zucker|süß|dessert|candy",
              "Fruit or nuts", Pillar.NUTRITION, "Detox mode active"),
        _rule(r"kaffee|coffee",
              "Green or herbal tea", Pillar.NUTRITION, "Caffeine detox"),
    ),
}

EMERGENCY_TASK_VERSIONS: dict[str, EmergencyVersion] = {
    "meditation": EmergencyVersion(15, 5, "Box breathing (5 min)"),
    "exercise": EmergencyVersion(30, 10, "10 burpees + 10 push-ups"),
    "reading": EmergencyVersion(20, 5, "One article or summary"),
    "cooking": EmergencyVersion(45, 15, "Leftovers or a quick salad"),
    "journaling": EmergencyVersion(10, 3, "3 gratitude bullet points"),
}


def is_busy_day(
    event_durations: list[int | None],
    threshold_minutes: int | None = None,
) -> bool:
    """True when the day's calendar events add up to ``threshold_minutes``.

    Events without a known duration count as one hour.
    """
    if threshold_minutes is None:
        from daywindow.config import settings
        threshold_minutes = settings.BUSY_DAY_THRESHOLD_MINUTES

    total = sum(d if d is not None else _DEFAULT_EVENT_MINUTES for d in event_durations)
    return total >= threshold_minutes


def apply_mode_swap(tasks: list[Task], mode: str = "normal") -> list[Task]:
    """Replace tasks that clash with the active context mode.

    The first matching rule wins; unmatched tasks are returned as-is.
    """
    rules = MODE_SWAP_RULES.get(mode)
    if not rules:
        return tasks

    result: list[Task] = []
    swapped = 0
    for task in tasks:
        rule = next((r for r in rules if r.pattern.search(task.title)), None)
        if rule is None:
            result.append(task)
            continue
        swapped += 1
        logger.debug("Mode swap: %r -> %r", task.title, rule.replacement)
        result.append(replace(
            task,
            title=rule.replacement,
            pillar=rule.pillar or task.pillar,
            original_title=task.original_title or task.title,
            optimization_reason=rule.reason,
        ))

    if swapped:
        logger.info("Mode swap: %d tasks modified for %s mode", swapped, mode)
    return result


def _shorten(task: Task) -> Task:
    if task.duration_minutes < BUSY_DAY_MIN_DURATION:
        return task

    title = task.title.lower()
    for keyword, version in EMERGENCY_TASK_VERSIONS.items():
        if keyword in title and task.duration_minutes >= version.original_minutes:
            return replace(
                task,
                title=version.title,
                duration_minutes=version.emergency_minutes,
                original_title=task.original_title or task.title,
                original_duration=task.duration_minutes,
                optimization_reason="Shortened for a full calendar",
            )

    if task.duration_minutes >= GENERIC_SHORTEN_MIN:
        return replace(
            task,
            duration_minutes=max(5, task.duration_minutes // 2),
            original_duration=task.duration_minutes,
            optimization_reason="Shortened for a full calendar (50%)",
        )
    return task


def apply_buffer_optimization(tasks: list[Task], busy: bool = False) -> list[Task]:
    """On a busy day, shorten long tasks to their emergency versions."""
    if not busy:
        return tasks

    result = [_shorten(t) for t in tasks]
    shortened = sum(1 for before, after in zip(tasks, result) if after is not before)
    if shortened:
        logger.info("Buffer: %d tasks shortened for busy day", shortened)
    return result


def optimize_daily_tasks(
    tasks: list[Task], mode: str = "normal", busy: bool = False,
) -> list[Task]:
    """Apply the mode swap, then the busy-day buffer."""
    return apply_buffer_optimization(apply_mode_swap(tasks, mode), busy)
