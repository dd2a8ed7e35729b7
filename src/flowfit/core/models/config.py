"""Configuration Pydantic models: FlowFitConfig, SystemConfig, BackendConfig, NotificationConfig."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SystemConfig(BaseModel):
    """Process-level runtime settings."""

    model_config = ConfigDict(extra="forbid")

    log_level: str = Field(default="INFO", description="Root log level")
    log_dir: str = Field(default="logs", description="Directory for rotating log files")
    state_dir: str = Field(
        default="state", description="Directory for persisted workout state (one subdir per user)"
    )
    tick_interval_ms: int = Field(default=100, gt=0, description="Scheduler tick period")
    event_bus_queue_size: int = Field(default=1000, description="Max queued events")
    webui_port: int = Field(default=8080, description="NiceGUI listen port")
    dev_mode: bool = Field(default=False, description="Use the in-memory backend")


class BackendConfig(BaseModel):
    """Hosted data service holding settings, activities, time blocks and logs."""

    model_config = ConfigDict(extra="forbid")

    url: str = Field(default="", description="Base URL of the REST data service; empty = in-memory")
    user_id: str = Field(default="local-user", description="Id of the user whose data is loaded")
    timeout_seconds: float = Field(default=6.0, gt=0)
    retries: int = Field(default=1, ge=0, description="Extra attempts for reads")
    activity_calories: int = Field(default=10, ge=0, description="Calories logged per completed activity")


class NotificationConfig(BaseModel):
    """Push delivery and local alert fallback."""

    model_config = ConfigDict(extra="forbid")

    push_url: str = Field(
        default="http://localhost:8080/api/push/send",
        description="Push-delivery endpoint the dispatcher posts to",
    )
    push_timeout_seconds: float = Field(default=5.0, gt=0)
    icon: str = Field(default="/icon-192.jpg")
    badge: str = Field(default="/icon-192.jpg")
    click_url: str = Field(default="/", description="Page opened when a push is clicked")
    local_alerts_enabled: bool = Field(
        default=True, description="Permission for in-page alerts when push fails"
    )
    vapid_subject: str = Field(default="mailto:flowfit@example.com")
    subscriptions_file: str = Field(default="state/push_subscriptions.json")


class FlowFitConfig(BaseModel):
    """Top-level configuration loaded from ``flowfit_config.json``."""

    model_config = ConfigDict(extra="forbid")

    system: SystemConfig = Field(default_factory=SystemConfig)
    backend: BackendConfig = Field(default_factory=BackendConfig)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)
