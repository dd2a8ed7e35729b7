"""Pydantic models for configuration, user data, and scheduler state."""
from flowfit.core.models.config import BackendConfig, FlowFitConfig, NotificationConfig, SystemConfig
from flowfit.core.models.event import Event
from flowfit.core.models.settings import ActivityLogEntry, TimeBlock, UserSettings, normalize_hhmm
from flowfit.core.models.state import Phase, WorkoutSnapshot, WorkoutState

__all__ = [
    "FlowFitConfig",
    "SystemConfig",
    "BackendConfig",
    "NotificationConfig",
    "Event",
    "UserSettings",
    "TimeBlock",
    "ActivityLogEntry",
    "normalize_hhmm",
    "Phase",
    "WorkoutState",
    "WorkoutSnapshot",
]
