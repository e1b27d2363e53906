"""Completion store port: abstract key-value interface for task state.

Core modules depend on this protocol, never on a specific backend.
Keys are scoped per user and calendar day by the caller.
"""

from __future__ import annotations

from typing import Any, Protocol


class StoreError(Exception):
    """Raised when any store operation fails. Callers may retry."""


class KeyValueStore(Protocol):
    """Abstract key-value interface used by the tracking service."""

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> bool: ...

    def keys(self, prefix: str = "") -> list[str]:
        """Sorted keys starting with ``prefix``; lists a user's tracked days."""
        ...
