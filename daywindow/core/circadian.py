"""Circadian light calculator: pure business logic.

Derives light-exposure windows from a user's wake time: morning light,
a midday boost and the evening blue-light restriction before bedtime.

No I/O: this module only transforms data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

logger = logging.getLogger(__name__)

_AWAKE_HOURS = 16
_BLUE_LIGHT_LEAD = timedelta(hours=2, minutes=30)


@dataclass
class CircadianWindows:
    """Key moments of one day, anchored on the wake time."""

    wake_time: datetime
    morning_light_start: datetime   # wake + 30 min
    morning_light_end: datetime     # wake + 90 min
    midday_start: datetime          # wake + 4 h
    midday_end: datetime            # wake + 6 h
    blue_light_cutoff: datetime     # bedtime - 2.5 h
    bedtime: datetime               # wake + 16 h


@dataclass
class LightWindow:
    start: datetime
    end: datetime
    type: str       # "morning" | "midday" | "evening"
    label: str


@dataclass
class CircadianRecommendation:
    window: LightWindow
    intensity: str
    duration_minutes: int | None   # None = until bedtime
    reason: str
    is_active: bool
    priority: str                  # "low" | "medium" | "high" | "critical"


@dataclass
class CircadianPhase:
    phase: str      # "morning_light" | "midday_boost" | "blue_light_cutoff" | "baseline"
    label: str
    recommendation: CircadianRecommendation | None = None
    minutes_remaining: int = 0


_PHASES = {
    "morning": ("morning_light", "Morning Light Window"),
    "evening": ("blue_light_cutoff", "Blue Light Restriction"),
    "midday": ("midday_boost", "Midday Boost"),
}


def parse_wake_time(wake_time: str | datetime, on: date | None = None) -> datetime:
    """Anchor a wake time on a calendar day.

    Accepts "HH:MM" or a datetime. Malformed strings fall back to the
    configured DEFAULT_WAKE_TIME.
    """
    if isinstance(wake_time, datetime):
        return wake_time
    on = on or date.today()
    try:
        t = datetime.strptime(wake_time.strip(), "%H:%M").time()
    except (ValueError, AttributeError) as exc:
        from daywindow.config import settings

        logger.warning(
            "Invalid wake time %r (%s), using default %s",
            wake_time, exc, settings.DEFAULT_WAKE_TIME,
        )
        t = datetime.strptime(settings.DEFAULT_WAKE_TIME, "%H:%M").time()
    return datetime.combine(on, t)


def get_circadian_windows(
    wake_time: str | datetime, on: date | None = None,
) -> CircadianWindows:
    """Calculate the day's light windows from a wake time."""
    wake = parse_wake_time(wake_time, on)
    bedtime = wake + timedelta(hours=_AWAKE_HOURS)
    return CircadianWindows(
        wake_time=wake,
        morning_light_start=wake + timedelta(minutes=30),
        morning_light_end=wake + timedelta(minutes=90),
        midday_start=wake + timedelta(hours=4),
        midday_end=wake + timedelta(hours=6),
        blue_light_cutoff=bedtime - _BLUE_LIGHT_LEAD,
        bedtime=bedtime,
    )


def _as_datetime(now: datetime | time, anchor: datetime) -> datetime:
    if isinstance(now, datetime):
        return now.replace(tzinfo=None)
    return datetime.combine(anchor.date(), now)


def get_circadian_recommendations(
    wake_time: str | datetime,
    now: datetime | time | None = None,
) -> list[CircadianRecommendation]:
    """Return morning, evening and midday light recommendations for ``now``."""
    now_dt = now if now is not None else datetime.now()
    on = now_dt.date() if isinstance(now_dt, datetime) else None
    w = get_circadian_windows(wake_time, on)
    now_dt = _as_datetime(now_dt, w.wake_time)

    morning = LightWindow(
        w.morning_light_start, w.morning_light_end, "morning", "Morning Light Window",
    )
    evening = LightWindow(
        w.blue_light_cutoff, w.bedtime, "evening", "Blue Light Restriction Window",
    )
    midday = LightWindow(w.midday_start, w.midday_end, "midday", "Midday Light Boost")

    evening_active = now_dt >= evening.start
    return [
        CircadianRecommendation(
            window=morning,
            intensity="10,000 lux or bright sunlight",
            duration_minutes=20,
            reason=(
                "Anchors circadian rhythm, suppresses morning melatonin, "
                "boosts cortisol awakening response"
            ),
            is_active=morning.start <= now_dt <= morning.end,
            priority="high",
        ),
        CircadianRecommendation(
            window=evening,
            intensity="Dim, warm light (<300 lux, >2700K)",
            duration_minutes=None,
            reason=(
                "Prevents melatonin suppression, preserves sleep pressure, "
                "optimizes sleep onset"
            ),
            is_active=evening_active,
            priority="critical" if evening_active else "medium",
        ),
        CircadianRecommendation(
            window=midday,
            intensity="Bright light or brief outdoor exposure",
            duration_minutes=10,
            reason="Reinforces circadian signal, maintains alertness, supports mood",
            is_active=midday.start <= now_dt <= midday.end,
            priority="low",
        ),
    ]


def get_current_phase(
    wake_time: str | datetime,
    now: datetime | time | None = None,
) -> CircadianPhase:
    """Return the first active light phase, or "baseline" if none is active."""
    now_dt = now if now is not None else datetime.now()
    recs = get_circadian_recommendations(wake_time, now_dt)
    active = next((r for r in recs if r.is_active), None)
    if active is None:
        return CircadianPhase(phase="baseline", label="Baseline")

    phase, label = _PHASES[active.window.type]
    current = _as_datetime(now_dt, active.window.start)
    remaining = max(0, -(-int((active.window.end - current).total_seconds()) // 60))
    return CircadianPhase(
        phase=phase,
        label=label,
        recommendation=active,
        minutes_remaining=remaining,
    )


def should_activate_melatonin_guard(
    wake_time: str | datetime, now: datetime | time | None = None,
) -> bool:
    """True once the evening blue-light restriction has started."""
    return get_current_phase(wake_time, now).phase == "blue_light_cutoff"
