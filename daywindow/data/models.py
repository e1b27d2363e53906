"""
DayWindow: Data Models.

Tasks are materialized fresh every calendar day from module templates and
plan days. Their completion state is the only part that lives in the store;
everything else is re-derived from the same templates tomorrow.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum


class WindowType(Enum):
    MORNING = "morning"
    DAY = "day"
    EVENING = "evening"
    NIGHT = "night"
    ANYTIME = "anytime"


class CompletionState(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    SKIPPED = "skipped"


class Pillar(Enum):
    SLEEP = "sleep"
    NUTRITION = "nutrition"
    MOVEMENT = "movement"
    STRESS = "stress"
    MINDFULNESS = "mindfulness"
    SUPPLEMENTS = "supplements"
    CONNECTION = "connection"
    ENVIRONMENT = "environment"
    OTHER = "other"

    @classmethod
    def from_raw(cls, raw: str | None) -> Pillar:
        """Map a free-form pillar tag to a Pillar, defaulting to OTHER."""
        if not raw:
            return cls.OTHER
        value = raw.strip().lower()
        if value == "exercise":
            return cls.MOVEMENT
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True)
class TimeWindow:
    """A named span of the local day.

    Hours are half-open [start_hour, end_hour). end_hour < start_hour means
    the window wraps past midnight.
    """

    type: WindowType
    start_hour: int
    end_hour: int
    label: str

    def contains_hour(self, hour: int) -> bool:
        if self.start_hour <= self.end_hour:
            return self.start_hour <= hour < self.end_hour
        return hour >= self.start_hour or hour < self.end_hour


@dataclass(frozen=True)
class ExplicitTime:
    """A wall-clock time, e.g. 07:30."""

    hour: int
    minute: int

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


@dataclass(frozen=True)
class SymbolicTime:
    """A window tag used in place of a clock time, e.g. "evening"."""

    window: WindowType

    def __str__(self) -> str:
        return self.window.value


# None means "unset": the task is bound to no window.
ScheduledTime = ExplicitTime | SymbolicTime | None


@dataclass
class Task:
    """One task instance for one calendar day.

    Built by daywindow.core.task_source from module templates or plan days;
    never constructed from raw dicts anywhere else.
    """

    id: str
    title: str
    pillar: Pillar = Pillar.OTHER
    scheduled_time: ScheduledTime = None
    duration_minutes: int = 5
    state: CompletionState = CompletionState.PENDING
    skipped_reason: str | None = None
    completed_at: str | None = None     # ISO datetime, set on completion
    description: str | None = None
    source_module: str | None = None    # e.g. "morning-light"
    priority: int = 50
    # Set when a mode-swap or busy-day rule rewrote the task
    original_title: str | None = None
    original_duration: int | None = None
    optimization_reason: str | None = None

    def __post_init__(self) -> None:
        if self.duration_minutes < 0:
            raise ValueError(f"duration_minutes must be >= 0, got {self.duration_minutes}")

    @property
    def is_pending(self) -> bool:
        return self.state is CompletionState.PENDING

    def to_dict(self) -> dict:
        """Plain-JSON form used by the completion store."""
        d = asdict(self)
        d["pillar"] = self.pillar.value
        d["state"] = self.state.value
        d["scheduled_time"] = (
            str(self.scheduled_time) if self.scheduled_time is not None else None
        )
        return d

    @classmethod
    def from_dict(cls, d: dict) -> Task:
        from daywindow.core.task_source import parse_scheduled_time

        return cls(
            id=d["id"],
            title=d.get("title", ""),
            pillar=Pillar.from_raw(d.get("pillar")),
            scheduled_time=parse_scheduled_time(d.get("scheduled_time")),
            duration_minutes=d.get("duration_minutes", 5),
            state=CompletionState(d.get("state", "pending")),
            skipped_reason=d.get("skipped_reason"),
            completed_at=d.get("completed_at"),
            description=d.get("description"),
            source_module=d.get("source_module"),
            priority=d.get("priority", 50),
            original_title=d.get("original_title"),
            original_duration=d.get("original_duration"),
            optimization_reason=d.get("optimization_reason"),
        )


@dataclass
class DailyTracking:
    """All task instances of one user for one calendar day."""

    user_id: str
    tracking_date: str                 # ISO date YYYY-MM-DD
    active_mode: str = "normal"
    tasks: list[Task] = field(default_factory=list)

    @property
    def tasks_total(self) -> int:
        return len(self.tasks)

    @property
    def tasks_completed(self) -> int:
        return sum(1 for t in self.tasks if t.state is CompletionState.COMPLETED)

    @property
    def completion_percentage(self) -> int:
        if not self.tasks:
            return 0
        # Half-up rounding
        return (self.tasks_completed * 100 + self.tasks_total // 2) // self.tasks_total

    def find_task(self, task_id: str) -> Task | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "tracking_date": self.tracking_date,
            "active_mode": self.active_mode,
            "tasks": [t.to_dict() for t in self.tasks],
        }

    @classmethod
    def from_dict(cls, d: dict) -> DailyTracking:
        return cls(
            user_id=d["user_id"],
            tracking_date=d["tracking_date"],
            active_mode=d.get("active_mode", "normal"),
            tasks=[Task.from_dict(t) for t in d.get("tasks", [])],
        )
