"""SessionManager — startup, reload & shutdown of one user's scheduler session."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable, Sequence

from flowfit.core import events
from flowfit.core.clock import TickClock
from flowfit.core.event_bus import EventBus
from flowfit.core.interfaces.backend import BackendInterface, StorageInterface
from flowfit.core.models.config import FlowFitConfig
from flowfit.core.notifications import NotificationDispatcher
from flowfit.core.persistence import StatePersistence
from flowfit.core.scheduler import Clock, WorkoutScheduler, local_now
from flowfit.core.settings_provider import SettingsProvider
from flowfit.storage.json_store import JsonFileStore

_log = logging.getLogger(__name__)


def user_store(config: FlowFitConfig, user_id: str) -> JsonFileStore:
    """Per-user store under ``system.state_dir``."""
    return JsonFileStore(Path(config.system.state_dir) / user_id)


class SessionManager:
    """Wires and sequences the components of one session.

    Order on start: event bus → user data → restored state → notification
    dispatcher → tick clock.  All heavy logic lives in the components.

    Args:
        config: Validated configuration.
        event_bus: Event bus (not yet started).
        backend: Data service.
        store: Durable store for this user's state; defaults to
            :func:`user_store`.
        dispatcher: Notification dispatcher; one is built from config if omitted.
        clock: Local-time source shared by scheduler and tick loop.
        choose: Activity picker passed to the scheduler.
    """

    def __init__(
        self,
        config: FlowFitConfig,
        event_bus: EventBus,
        backend: BackendInterface,
        store: StorageInterface | None = None,
        dispatcher: NotificationDispatcher | None = None,
        clock: Clock = local_now,
        choose: Callable[[Sequence[str]], str] | None = None,
    ) -> None:
        self._config = config
        self._bus = event_bus
        self._backend = backend
        self._user_id = config.backend.user_id
        self._store = store if store is not None else user_store(config, self._user_id)
        self._dispatcher = dispatcher or NotificationDispatcher(config.notifications)
        self._clock_fn = clock
        self._choose = choose

        self._persistence = StatePersistence(self._store)
        self._provider = SettingsProvider(backend, self._persistence, self._user_id)

        # Created during start()
        self._scheduler: WorkoutScheduler | None = None
        self._clock: TickClock | None = None

    # ------------------------------------------------------------------
    # Public properties
    # ------------------------------------------------------------------

    @property
    def scheduler(self) -> WorkoutScheduler:
        """The scheduler (available after ``start()``)."""
        if self._scheduler is None:
            raise RuntimeError("SessionManager.start() has not been called")
        return self._scheduler

    @property
    def provider(self) -> SettingsProvider:
        return self._provider

    @property
    def dispatcher(self) -> NotificationDispatcher:
        return self._dispatcher

    @property
    def is_running(self) -> bool:
        return self._clock is not None and self._clock.is_running

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def start(self, run_clock: bool = True) -> None:
        """Boot the session.  ``run_clock=False`` leaves ticking to the caller."""
        _log.info("SessionManager starting for user %s …", self._user_id)

        await self._bus.start()

        await self.reload_user_data(announce=False)

        kwargs = {"clock": self._clock_fn, "activity_calories": self._config.backend.activity_calories}
        if self._choose is not None:
            kwargs["choose"] = self._choose
        self._scheduler = WorkoutScheduler(
            self._provider,
            self._persistence,
            self._bus,
            self._backend,
            **kwargs,
        )
        self._scheduler.restore()

        self._dispatcher.attach(self._bus)

        if run_clock:
            self._clock = TickClock(self._scheduler.tick, self._config.system.tick_interval_ms)
            await self._clock.start()

        await self._bus.publish(events.SESSION_STARTED, {"user_id": self._user_id})
        _log.info("SessionManager started (phase=%s)", self._scheduler.phase.value)

    async def reload_user_data(self, announce: bool = True) -> bool:
        """Re-fetch settings, activities and time blocks without blocking the loop."""
        ok = await asyncio.to_thread(self._provider.reload)
        if announce:
            await self._bus.publish(events.USER_DATA_RELOADED, {"ok": ok})
        return ok

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def shutdown(self, reason: str = "user request") -> None:
        """Stop ticking, then stop the bus.  State is already persisted."""
        _log.info("SessionManager shutting down: %s", reason)
        if self._bus.is_running:
            await self._bus.publish(events.SHUTDOWN_INITIATED, {"reason": reason})

        if self._clock is not None:
            await self._clock.stop()
            self._clock = None

        await self._bus.stop()
        _log.info("SessionManager shutdown complete")
