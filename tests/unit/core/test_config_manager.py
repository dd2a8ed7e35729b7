"""Tests for the config manager (load_config + save_config) and config models."""

import json

import pytest
from pydantic import ValidationError

from flowfit.config.config_manager import ENV_OVERRIDES, load_config, save_config
from flowfit.core.models.config import FlowFitConfig, SystemConfig


class TestLoadConfig:
    def test_load_default_config(self):
        """The shipped flowfit_config.json should load without errors."""
        cfg = load_config()
        assert isinstance(cfg, FlowFitConfig)
        assert cfg.system.webui_port == 8080
        assert cfg.system.tick_interval_ms == 100

    def test_load_custom_config(self, tmp_path):
        config_file = tmp_path / "test_config.json"
        config_file.write_text(
            json.dumps(
                {
                    "system": {"webui_port": 9090, "log_level": "DEBUG"},
                    "backend": {"url": "https://data.example.com", "user_id": "abc"},
                }
            )
        )
        cfg = load_config(config_file)
        assert cfg.system.webui_port == 9090
        assert cfg.system.log_level == "DEBUG"
        assert cfg.backend.url == "https://data.example.com"
        assert cfg.backend.user_id == "abc"

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nonexistent.json")

    def test_config_file_env_var(self, tmp_path, monkeypatch):
        config_file = tmp_path / "elsewhere.json"
        config_file.write_text(json.dumps({"system": {"webui_port": 7070}}))
        monkeypatch.setenv("FLOWFIT_CONFIG_FILE", str(config_file))
        assert load_config().system.webui_port == 7070

    def test_env_override_log_level(self, tmp_path, monkeypatch):
        config_file = tmp_path / "cfg.json"
        config_file.write_text(json.dumps({"system": {"log_level": "INFO"}}))
        monkeypatch.setenv("FLOWFIT_LOG_LEVEL", "DEBUG")
        cfg = load_config(config_file)
        assert cfg.system.log_level == "DEBUG"

    def test_env_override_dev_mode(self, tmp_path, monkeypatch):
        config_file = tmp_path / "cfg.json"
        config_file.write_text(json.dumps({"system": {}}))
        monkeypatch.setenv("FLOWFIT_DEV_MODE", "1")
        cfg = load_config(config_file)
        assert cfg.system.dev_mode is True

    def test_env_override_webui_port(self, tmp_path, monkeypatch):
        config_file = tmp_path / "cfg.json"
        config_file.write_text(json.dumps({}))
        monkeypatch.setenv("FLOWFIT_WEBUI_PORT", "3000")
        cfg = load_config(config_file)
        assert cfg.system.webui_port == 3000

    def test_env_override_backend_and_push(self, tmp_path, monkeypatch):
        config_file = tmp_path / "cfg.json"
        config_file.write_text(json.dumps({}))
        monkeypatch.setenv("FLOWFIT_BACKEND_URL", "https://db.example.com")
        monkeypatch.setenv("FLOWFIT_USER_ID", "user-42")
        monkeypatch.setenv("FLOWFIT_PUSH_URL", "https://push.example.com/api/push/send")
        cfg = load_config(config_file)
        assert cfg.backend.url == "https://db.example.com"
        assert cfg.backend.user_id == "user-42"
        assert cfg.notifications.push_url == "https://push.example.com/api/push/send"


class TestSaveConfig:
    def test_save_then_load_preserves_values(self, tmp_path):
        cfg_file = tmp_path / "cfg.json"
        cfg = FlowFitConfig(system=SystemConfig(webui_port=9191, state_dir="var/state"))

        save_config(cfg, cfg_file)
        reloaded = load_config(cfg_file)

        assert reloaded.system.webui_port == 9191
        assert reloaded.system.state_dir == "var/state"
        assert not list(tmp_path.glob("*.tmp"))


class TestConfigModels:
    def test_defaults(self):
        cfg = FlowFitConfig()
        assert cfg.backend.url == ""
        assert cfg.backend.activity_calories == 10
        assert cfg.notifications.local_alerts_enabled is True
        assert cfg.notifications.icon == "/icon-192.jpg"

    def test_unknown_key_rejected(self):
        with pytest.raises(ValidationError, match="extra"):
            FlowFitConfig(system={"no_such_field": 1})

    def test_system_section_has_only_used_fields(self):
        assert set(SystemConfig.model_fields) == {
            "log_level",
            "log_dir",
            "state_dir",
            "tick_interval_ms",
            "event_bus_queue_size",
            "webui_port",
            "dev_mode",
        }
        with pytest.raises(ValidationError, match="extra"):
            SystemConfig(test_mode=True)

    def test_every_env_override_targets_a_field(self):
        sections = FlowFitConfig.model_fields
        for env_key, (section, field, _parse) in ENV_OVERRIDES.items():
            assert field in sections[section].annotation.model_fields, env_key

    def test_unknown_section_rejected(self):
        with pytest.raises(ValidationError):
            FlowFitConfig(hardware={})

    def test_tick_interval_must_be_positive(self):
        with pytest.raises(ValidationError):
            SystemConfig(tick_interval_ms=0)
