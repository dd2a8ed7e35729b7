"""Settings provider — read-only snapshots of the user's data service records."""

from __future__ import annotations

import logging

from flowfit.core.interfaces.backend import BackendError, BackendInterface
from flowfit.core.models.settings import TimeBlock, UserSettings
from flowfit.core.persistence import StatePersistence

_log = logging.getLogger(__name__)


class SettingsProvider:
    """Holds the settings, activity pool and time blocks the scheduler reads.

    Cached settings seed the provider before the first round-trip.  Each
    resource is refreshed independently by :meth:`reload`; a failed fetch
    keeps the last-known value.

    Args:
        backend: Data service to read from.
        persistence: Where the settings cache lives.
        user_id: Whose records to load.
    """

    def __init__(
        self,
        backend: BackendInterface,
        persistence: StatePersistence,
        user_id: str,
    ) -> None:
        self._backend = backend
        self._persistence = persistence
        self._user_id = user_id

        self._settings = persistence.load_settings() or UserSettings()
        self._activities: list[str] = []
        self._time_blocks: list[TimeBlock] = []

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def settings(self) -> UserSettings:
        return self._settings

    @property
    def activities(self) -> list[str]:
        return list(self._activities)

    @property
    def time_blocks(self) -> list[TimeBlock]:
        return list(self._time_blocks)

    def set_settings(self, settings: UserSettings) -> None:
        """Replace settings locally (e.g. after the user saved the settings form)."""
        self._settings = settings
        self._persistence.save_settings(settings)

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    def reload(self) -> bool:
        """Pull all three resources from the backend.  Blocking; never raises.

        Returns:
            ``True`` if every fetch succeeded.
        """
        ok = True

        try:
            settings = self._backend.fetch_settings(self._user_id)
        except BackendError as exc:
            _log.warning("Settings fetch failed (%s) — keeping %s", exc, self._settings)
            ok = False
        else:
            if settings is not None:
                self._settings = settings
                self._persistence.save_settings(settings)

        try:
            self._activities = self._backend.fetch_activities(self._user_id)
        except BackendError as exc:
            _log.warning("Activity fetch failed (%s) — keeping %d cached", exc, len(self._activities))
            ok = False

        try:
            self._time_blocks = self._backend.fetch_time_blocks(self._user_id)
        except BackendError as exc:
            _log.warning(
                "Time block fetch failed (%s) — keeping %d cached", exc, len(self._time_blocks)
            )
            ok = False

        _log.info(
            "User data loaded: %d activities, %d time blocks, interval=%d min",
            len(self._activities),
            len(self._time_blocks),
            self._settings.interval,
        )
        return ok
