"""Shared pytest fixtures for FlowFit tests."""

from __future__ import annotations

import pytest

from flowfit.backend.memory_backend import InMemoryBackend
from flowfit.core.event_bus import EventBus
from flowfit.core.models.settings import UserSettings
from flowfit.core.persistence import StatePersistence
from flowfit.core.scheduler import WorkoutScheduler
from flowfit.core.settings_provider import SettingsProvider
from flowfit.storage.json_store import MemoryStore
from tests.helpers.fakes import FakeClock, RecordingBus


@pytest.fixture
async def event_bus():
    """Provide a started EventBus that is stopped after the test."""
    bus = EventBus(queue_size=100)
    await bus.start()
    yield bus
    await bus.stop()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recording_bus() -> RecordingBus:
    return RecordingBus()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def settings() -> UserSettings:
    return UserSettings(
        work_start="09:00",
        work_end="17:00",
        interval=60,
        major_break_interval=4,
        major_break_duration=15,
    )


@pytest.fixture
def backend(settings: UserSettings) -> InMemoryBackend:
    return InMemoryBackend(settings=settings, activities=["10 pushups"])


@pytest.fixture
def persistence(store: MemoryStore) -> StatePersistence:
    return StatePersistence(store)


@pytest.fixture
def provider(backend: InMemoryBackend, persistence: StatePersistence) -> SettingsProvider:
    p = SettingsProvider(backend, persistence, user_id="u-1")
    p.reload()
    return p


@pytest.fixture
def scheduler(provider, persistence, recording_bus, backend, clock) -> WorkoutScheduler:
    """Scheduler on a fake clock that always picks the first activity."""
    return WorkoutScheduler(
        provider,
        persistence,
        recording_bus,
        backend,
        clock=clock,
        choose=lambda pool: pool[0],
    )
