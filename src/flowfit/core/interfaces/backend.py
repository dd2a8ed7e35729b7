"""Collaborator interfaces (ABCs) consumed by the scheduler core.

The REST and in-memory backends both implement :class:`BackendInterface`;
the JSON-file and in-memory stores both implement :class:`StorageInterface`.
Keeping the core on these ABCs gives production and test parity.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from flowfit.core.models.settings import ActivityLogEntry, TimeBlock, UserSettings


class BackendError(RuntimeError):
    """A read or write against the data service failed.

    The message is a short, display-ready summary of the cause.
    """


# ---------------------------------------------------------------------------
# Data service
# ---------------------------------------------------------------------------

class BackendInterface(ABC):
    """Per-user reads and the activity-log append.

    All methods are blocking; the core calls them through ``asyncio.to_thread``.
    Failures are raised as :class:`BackendError`.
    """

    @abstractmethod
    def fetch_settings(self, user_id: str) -> UserSettings | None:
        """Return the user's settings, or ``None`` if they have none saved."""

    @abstractmethod
    def fetch_activities(self, user_id: str) -> list[str]:
        """Return the user's activity pool (names), in service order."""

    @abstractmethod
    def fetch_time_blocks(self, user_id: str) -> list[TimeBlock]:
        """Return the user's time blocks, in service order."""

    @abstractmethod
    def insert_activity_log(self, entry: ActivityLogEntry) -> None:
        """Append one activity-log record."""


# ---------------------------------------------------------------------------
# Local durable storage
# ---------------------------------------------------------------------------

class StorageInterface(ABC):
    """String key/value store that survives process restarts."""

    @abstractmethod
    def read(self, key: str) -> str | None:
        """Return the value stored under *key*, or ``None`` if absent."""

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        """Replace the value stored under *key*."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove *key* (no-op if absent)."""
