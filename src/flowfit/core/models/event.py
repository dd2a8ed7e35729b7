"""Event carried on the scheduler's event bus."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Event(BaseModel):
    """One published occurrence; see :mod:`flowfit.core.events` for the types."""

    model_config = ConfigDict(frozen=True)

    event_type: str
    payload: dict[str, Any] = Field(default_factory=dict)
    published_at: datetime = Field(default_factory=_utcnow)
