"""Tests for InMemoryBackend and the backend factory."""

from datetime import datetime, timezone

import pytest

from flowfit.backend.factory import create_backend
from flowfit.backend.memory_backend import DEFAULT_ACTIVITIES, InMemoryBackend
from flowfit.backend.rest_backend import RestBackend
from flowfit.config.secrets_manager import SecretsManager
from flowfit.core.interfaces.backend import BackendError
from flowfit.core.models.config import BackendConfig, FlowFitConfig, SystemConfig
from flowfit.core.models.settings import ActivityLogEntry


class TestInMemoryBackend:
    def test_defaults(self):
        b = InMemoryBackend()
        assert b.fetch_settings("any") is None
        assert b.fetch_activities("any") == DEFAULT_ACTIVITIES
        assert b.fetch_time_blocks("any") == []

    def test_insert_appends(self):
        b = InMemoryBackend()
        entry = ActivityLogEntry(user_id="u", activity_name="x", completed_at=datetime.now(timezone.utc))
        b.insert_activity_log(entry)
        assert b.activity_logs == [entry]

    def test_simulated_outage(self):
        b = InMemoryBackend()
        b.simulate_outage(reads=True, writes=False)
        with pytest.raises(BackendError):
            b.fetch_activities("u")

        b.restore_service()
        assert b.fetch_activities("u")

    def test_empty_pool_is_kept(self):
        assert InMemoryBackend(activities=[]).fetch_activities("u") == []


class TestCreateBackend:
    def test_no_url_uses_memory(self):
        assert isinstance(create_backend(FlowFitConfig(), SecretsManager()), InMemoryBackend)

    def test_dev_mode_uses_memory(self):
        cfg = FlowFitConfig(system=SystemConfig(dev_mode=True), backend=BackendConfig(url="https://db"))
        assert isinstance(create_backend(cfg, SecretsManager()), InMemoryBackend)

    def test_url_uses_rest(self, monkeypatch):
        monkeypatch.setenv("FLOWFIT_BACKEND_KEY", "secret")
        cfg = FlowFitConfig(backend=BackendConfig(url="https://db"))
        backend = create_backend(cfg, SecretsManager())
        assert isinstance(backend, RestBackend)
