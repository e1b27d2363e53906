"""In-memory TaskSource adapter.

Holds module instances, plans, context modes and calendar event durations
handed to it at construction time. Raw dicts are validated into the
pydantic shapes of daywindow.core.task_source.
"""

from __future__ import annotations

import logging
from datetime import date

from daywindow.core.task_source import ModuleInstance, Plan

logger = logging.getLogger(__name__)


class StaticTaskSource:
    """TaskSource backed by plain Python data."""

    def __init__(
        self,
        modules: dict[str, list[ModuleInstance | dict]] | None = None,
        plans: list[Plan | dict] | None = None,
        modes: dict[str, str] | None = None,
        events: dict[str, dict[str, list[int | None]]] | None = None,
    ) -> None:
        self._modules: dict[str, list[ModuleInstance]] = {
            user_id: [
                m if isinstance(m, ModuleInstance) else ModuleInstance.model_validate(m)
                for m in instances
            ]
            for user_id, instances in (modules or {}).items()
        }
        self._plans: dict[str, Plan] = {}
        for p in plans or []:
            plan = p if isinstance(p, Plan) else Plan.model_validate(p)
            self._plans[plan.id] = plan
        self._modes = dict(modes or {})
        # user_id -> ISO date -> event durations in minutes
        self._events = {user_id: dict(days) for user_id, days in (events or {}).items()}

    def list_modules(self, user_id: str) -> list[ModuleInstance]:
        return list(self._modules.get(user_id, []))

    def get_plan(self, plan_id: str) -> Plan | None:
        return self._plans.get(plan_id)

    def get_user_mode(self, user_id: str) -> str:
        return self._modes.get(user_id, "normal")

    def set_user_mode(self, user_id: str, mode: str) -> None:
        logger.info("User %s switched to mode '%s'", user_id, mode)
        self._modes[user_id] = mode

    def list_event_durations(self, user_id: str, day: date) -> list[int | None]:
        return list(self._events.get(user_id, {}).get(day.isoformat(), []))
