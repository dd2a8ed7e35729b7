"""Integration test — a user session driven through the real composition.

Boots SessionManager with the in-memory backend, a memory store and a fake
clock, then walks the scheduler through workouts, focus intervals, a major
break and a meeting, checking notifications reach the dispatcher.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from flowfit.backend.memory_backend import InMemoryBackend
from flowfit.core import events
from flowfit.core.event_bus import EventBus
from flowfit.core.models.config import FlowFitConfig, SystemConfig
from flowfit.core.models.event import Event
from flowfit.core.models.settings import TimeBlock, UserSettings
from flowfit.core.models.state import Phase
from flowfit.core.notifications import NotificationDispatcher
from flowfit.core.scheduler import WORKOUT_WINDOW_MS
from flowfit.core.session_manager import SessionManager, user_store
from flowfit.storage.json_store import JsonFileStore, MemoryStore
from tests.helpers.fakes import FakeClock
from tests.helpers.runtime import wait_for

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

SETTINGS = UserSettings(
    work_start="09:00",
    work_end="17:00",
    interval=60,
    major_break_interval=4,
    major_break_duration=15,
)


def _push_ok() -> MagicMock:
    resp = MagicMock()
    resp.raise_for_status.return_value = None
    return MagicMock(return_value=resp)


def _titles(post: MagicMock) -> list[str]:
    return [c.kwargs["json"]["title"] for c in post.call_args_list]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def backend() -> InMemoryBackend:
    return InMemoryBackend(settings=SETTINGS, activities=["10 pushups"])


@pytest.fixture
def post() -> MagicMock:
    return _push_ok()


@pytest.fixture
async def session(backend, clock, post):
    config = FlowFitConfig()
    session = SessionManager(
        config=config,
        event_bus=EventBus(),
        backend=backend,
        store=MemoryStore(),
        dispatcher=NotificationDispatcher(config.notifications, post=post),
        clock=clock,
        choose=lambda pool: pool[0],
    )
    await session.start(run_clock=False)
    yield session
    await session.shutdown(reason="test teardown")


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestWorkoutCycleFlow:
    async def test_full_cycle_to_major_break(self, session, clock, post, backend):
        sched = session.scheduler
        assert sched.phase is Phase.IDLE

        assert sched.start() is True
        await wait_for(lambda: post.call_count == 1)

        assert await sched.done() is True
        assert [e.activity_name for e in backend.activity_logs] == ["10 pushups"]

        for cycle in range(1, 5):
            clock.advance(WORKOUT_WINDOW_MS)
            sched.tick()
            if cycle < 4:
                assert sched.phase is Phase.WAITING_FOCUS
                assert sched.state.completed_cycles == cycle
                assert sched.remaining_ms() == 3_600_000
                clock.advance(3_600_000)
                sched.tick()
                assert sched.phase is Phase.WORKOUT_ACTIVE

        assert sched.phase is Phase.WAITING_MAJOR_BREAK
        assert sched.state.completed_cycles == 0
        assert sched.remaining_ms() == 900_000

        await wait_for(lambda: post.call_count == 8)
        assert _titles(post) == [
            "⏰ Time to Move!",
            "🎯 Focus Mode Started",
            "⏰ Time to Move!",
            "🎯 Focus Mode Started",
            "⏰ Time to Move!",
            "🎯 Focus Mode Started",
            "⏰ Time to Move!",
            "🎉 Major Break Time!",
        ]

    async def test_meeting_preempts_and_resumes(self, session, clock, backend, post):
        backend.time_blocks = [
            TimeBlock(id="m1", title="Design review", start_time="10:10", end_time="10:40")
        ]
        assert await session.reload_user_data() is True

        sched = session.scheduler
        sched.start()
        clock.advance(WORKOUT_WINDOW_MS)
        sched.tick()
        assert sched.phase is Phase.WAITING_FOCUS

        clock.set(10, 10)
        sched.tick()
        frozen = sched.remaining_ms()
        assert frozen == 55 * 60_000
        assert sched.snapshot().is_time_block_paused

        clock.set(10, 41)
        sched.tick()
        assert sched.snapshot().is_time_block_paused is False
        assert sched.remaining_ms() == frozen

        await wait_for(lambda: "⏰ Timer Resumed" in _titles(post))
        assert "🌿 Design review" in _titles(post)

    async def test_push_failure_falls_back_to_local_alert(self, session, post):
        post.side_effect = requests.ConnectionError("Connection refused")
        alerts: list[tuple[str, str]] = []
        session.dispatcher.set_local_alert(lambda t, b: alerts.append((t, b)))

        session.scheduler.start()

        await wait_for(lambda: len(alerts) == 1)
        assert alerts[0][0] == "⏰ Time to Move!"
        assert "Let's do: 10 pushups" in alerts[0][1]

    async def test_backend_outage_keeps_cached_data(self, session, backend):
        backend.simulate_outage()
        assert await session.reload_user_data() is False
        assert session.provider.activities == ["10 pushups"]
        assert session.provider.settings.interval == 60


class TestSessionLifecycle:
    async def test_scheduler_unavailable_before_start(self, backend):
        session = SessionManager(FlowFitConfig(), EventBus(), backend, store=MemoryStore())
        with pytest.raises(RuntimeError):
            _ = session.scheduler

    async def test_state_survives_restart(self, tmp_path, backend, clock, post):
        config = FlowFitConfig(system=SystemConfig(state_dir=str(tmp_path)))
        store = user_store(config, config.backend.user_id)
        assert isinstance(store, JsonFileStore)
        assert store.directory == tmp_path / "local-user"

        def make() -> SessionManager:
            return SessionManager(
                config,
                EventBus(),
                backend,
                store=store,
                dispatcher=NotificationDispatcher(config.notifications, post=post),
                clock=clock,
                choose=lambda pool: pool[0],
            )

        first = make()
        await first.start(run_clock=False)
        first.scheduler.start()
        clock.advance(WORKOUT_WINDOW_MS)
        first.scheduler.tick()
        await first.shutdown()

        clock.advance(20 * 60_000)
        second = make()
        await second.start(run_clock=False)
        try:
            assert second.scheduler.phase is Phase.WAITING_FOCUS
            assert second.scheduler.state.completed_cycles == 1
            assert second.scheduler.remaining_ms() == 40 * 60_000
        finally:
            await second.shutdown()

    async def test_running_clock_drives_transitions(self, backend, clock, post):
        config = FlowFitConfig(system=SystemConfig(tick_interval_ms=5))
        bus = EventBus()
        started: list[Event] = []
        session = SessionManager(
            config,
            bus,
            backend,
            store=MemoryStore(),
            dispatcher=NotificationDispatcher(config.notifications, post=post),
            clock=clock,
            choose=lambda pool: pool[0],
        )
        await session.start()
        bus.subscribe(events.PHASE_CHANGED, started.append)
        try:
            assert session.is_running
            session.scheduler.start()
            clock.advance(WORKOUT_WINDOW_MS)

            await wait_for(lambda: session.scheduler.phase is Phase.WAITING_FOCUS)
            await wait_for(lambda: len(started) == 2)
            assert started[-1].payload == {"old_phase": "workout_active", "new_phase": "waiting_focus"}
        finally:
            await session.shutdown()
        assert session.is_running is False
