"""Task source port: abstract interface for module and plan definitions.

The tracking service asks this port for a user's active modules, plans,
context mode and calendar load; where they come from (hosted backend,
fixtures) is an adapter concern.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from datetime import date

    from daywindow.core.task_source import ModuleInstance, Plan


class TaskSource(Protocol):
    """Abstract task-definition provider used by core modules."""

    def list_modules(self, user_id: str) -> list[ModuleInstance]: ...

    def get_plan(self, plan_id: str) -> Plan | None: ...

    def get_user_mode(self, user_id: str) -> str: ...

    def list_event_durations(self, user_id: str, day: date) -> list[int | None]:
        """Durations in minutes of the user's calendar events on ``day``."""
        ...
