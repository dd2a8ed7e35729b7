"""In-memory backend for development and tests.

Holds one user's records in plain attributes, with ``simulate_*``
helpers to inject failures.
"""

from __future__ import annotations

import logging

from flowfit.core.interfaces.backend import BackendError, BackendInterface
from flowfit.core.models.settings import ActivityLogEntry, TimeBlock, UserSettings

_log = logging.getLogger(__name__)

DEFAULT_ACTIVITIES = [
    "10 pushups",
    "20 squats",
    "30-second plank",
    "Neck and shoulder rolls",
    "Walk a lap around the office",
]


class InMemoryBackend(BackendInterface):
    """Single-process stand-in for the hosted data service.

    Records are shared by every user id; the backend is not multi-tenant.
    """

    def __init__(
        self,
        settings: UserSettings | None = None,
        activities: list[str] | None = None,
        time_blocks: list[TimeBlock] | None = None,
    ) -> None:
        self.settings = settings
        self.activities = list(DEFAULT_ACTIVITIES if activities is None else activities)
        self.time_blocks = list(time_blocks or [])
        self.activity_logs: list[ActivityLogEntry] = []
        self._fail_reads = False
        self._fail_writes = False

    # -- Simulation helpers --

    def simulate_outage(self, reads: bool = True, writes: bool = True) -> None:
        """Make subsequent calls raise :class:`BackendError`."""
        self._fail_reads = reads
        self._fail_writes = writes

    def restore_service(self) -> None:
        self._fail_reads = False
        self._fail_writes = False

    # -- BackendInterface --

    def fetch_settings(self, user_id: str) -> UserSettings | None:
        self._check(self._fail_reads)
        return self.settings

    def fetch_activities(self, user_id: str) -> list[str]:
        self._check(self._fail_reads)
        return list(self.activities)

    def fetch_time_blocks(self, user_id: str) -> list[TimeBlock]:
        self._check(self._fail_reads)
        return list(self.time_blocks)

    def insert_activity_log(self, entry: ActivityLogEntry) -> None:
        self._check(self._fail_writes)
        self.activity_logs.append(entry)
        _log.debug("Logged activity %r (%d total)", entry.activity_name, len(self.activity_logs))

    @staticmethod
    def _check(failing: bool) -> None:
        if failing:
            raise BackendError("Simulated outage")
