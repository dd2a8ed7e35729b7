"""State persistence — workout snapshot, cycle counter, cached settings.

The cycle counter is written under its own key as well as inside the
snapshot, so a cleared or corrupted snapshot does not lose cycle progress.
Malformed values are logged and treated as absent.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from flowfit.core.interfaces.backend import StorageInterface
from flowfit.core.models.settings import UserSettings
from flowfit.core.models.state import WorkoutState

_log = logging.getLogger(__name__)

WORKOUT_STATE_KEY = "workout_state"
COMPLETED_CYCLES_KEY = "completed_cycles"
SETTINGS_CACHE_KEY = "settings_cache"


class StatePersistence:
    """Serialize / restore scheduler state through a :class:`StorageInterface`.

    Args:
        store: Durable key/value store (usually scoped to one user).
    """

    def __init__(self, store: StorageInterface) -> None:
        self._store = store

    # ------------------------------------------------------------------
    # Workout state
    # ------------------------------------------------------------------

    def save_state(self, state: WorkoutState) -> None:
        """Overwrite the stored snapshot with *state*."""
        self._store.write(WORKOUT_STATE_KEY, state.model_dump_json())

    def save_cycles(self, completed_cycles: int) -> None:
        self._store.write(COMPLETED_CYCLES_KEY, str(completed_cycles))

    def load_state(self) -> WorkoutState:
        """Return the restored state, or defaults when nothing usable is stored.

        A separately stored cycle count overrides the snapshot's value.
        """
        state = self._load_snapshot()
        cycles = self._load_cycles()
        if cycles is not None:
            state = state.model_copy(update={"completed_cycles": cycles})
        return state

    def _load_snapshot(self) -> WorkoutState:
        raw = self._store.read(WORKOUT_STATE_KEY)
        if raw is None:
            return WorkoutState()
        try:
            return WorkoutState.model_validate_json(raw)
        except ValidationError as exc:
            _log.warning(
                "Ignoring unreadable workout snapshot (%d errors) — starting fresh",
                exc.error_count(),
            )
            return WorkoutState()

    def _load_cycles(self) -> int | None:
        raw = self._store.read(COMPLETED_CYCLES_KEY)
        if raw is None:
            return None
        try:
            value = int(raw.strip())
        except ValueError:
            _log.warning("Ignoring unreadable cycle count %r", raw)
            return None
        return max(0, value)

    # ------------------------------------------------------------------
    # Settings cache
    # ------------------------------------------------------------------

    def save_settings(self, settings: UserSettings) -> None:
        self._store.write(SETTINGS_CACHE_KEY, settings.model_dump_json())

    def load_settings(self) -> UserSettings | None:
        """Return the cached settings, or ``None`` if absent or unreadable."""
        raw = self._store.read(SETTINGS_CACHE_KEY)
        if raw is None:
            return None
        try:
            return UserSettings.model_validate_json(raw)
        except ValidationError:
            _log.warning("Ignoring unreadable settings cache")
            return None
