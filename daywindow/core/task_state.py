"""Task completion state machine.

    pending -> completed
    pending -> skipped(reason)
    completed | skipped -> pending   (undo)

Repeating a transition that has already happened is a no-op, so a retried
write cannot double-apply. Anything else (e.g. completed -> skipped) must go
through undo first.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from daywindow.data.models import CompletionState, Task


class InvalidTransitionError(Exception):
    """Raised when a task is moved between two states with no direct edge."""


def complete(task: Task, at: datetime | None = None) -> Task:
    """Return ``task`` marked completed."""
    if task.state is CompletionState.COMPLETED:
        return task
    if task.state is not CompletionState.PENDING:
        raise InvalidTransitionError(
            f"Cannot complete task {task.id!r} from state {task.state.value!r}; undo first"
        )
    at = at or datetime.now()
    return replace(task, state=CompletionState.COMPLETED, completed_at=at.isoformat())


def skip(task: Task, reason: str | None = None) -> Task:
    """Return ``task`` marked skipped with an optional reason code."""
    if task.state is CompletionState.SKIPPED:
        return task
    if task.state is not CompletionState.PENDING:
        raise InvalidTransitionError(
            f"Cannot skip task {task.id!r} from state {task.state.value!r}; undo first"
        )
    return replace(task, state=CompletionState.SKIPPED, skipped_reason=reason)


def undo(task: Task) -> Task:
    """Return ``task`` back in pending, clearing completion/skip details."""
    if task.state is CompletionState.PENDING:
        return task
    return replace(
        task,
        state=CompletionState.PENDING,
        completed_at=None,
        skipped_reason=None,
    )


TRANSITIONS = {
    "complete": complete,
    "skip": skip,
    "undo": undo,
}
