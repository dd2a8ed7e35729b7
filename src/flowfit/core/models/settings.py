"""User-owned data read by the scheduler: settings, time blocks, activity logs."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator

_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{1,2})(?::\d{1,2})?$")

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def normalize_hhmm(value: str) -> str:
    """Return *value* as zero-padded ``HH:MM``.

    Accepts ``H:M``, ``HH:MM`` and ``HH:MM:SS`` (seconds are dropped, as the
    data service stores ``time`` columns with seconds).

    Raises:
        ValueError: If *value* is not a valid time of day.
    """
    match = _HHMM_RE.match(value.strip())
    if match is None:
        raise ValueError(f"Invalid time of day: {value!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f"Invalid time of day: {value!r}")
    return f"{hours:02d}:{minutes:02d}"


class UserSettings(BaseModel):
    """Work hours, interval lengths and major-break policy."""

    model_config = ConfigDict(extra="ignore")

    work_start: str = Field(default="09:00", description="Start of the work day (HH:MM)")
    work_end: str = Field(default="17:00", description="End of the work day, exclusive (HH:MM)")
    interval: int = Field(default=30, gt=0, description="Focus interval in minutes")
    major_break_interval: int = Field(default=4, ge=1, description="Cycles before a major break")
    major_break_duration: int = Field(default=15, gt=0, description="Major break length in minutes")

    @field_validator("work_start", "work_end")
    @classmethod
    def _normalize_time(cls, value: str) -> str:
        return normalize_hhmm(value)

    @field_validator("major_break_interval", "major_break_duration", mode="before")
    @classmethod
    def _fill_missing(cls, value: Any, info: ValidationInfo) -> Any:
        # The data service stores NULL (or 0) for users created before major breaks existed.
        if not value:
            return cls.model_fields[info.field_name].default
        return value

    @property
    def interval_ms(self) -> int:
        return self.interval * 60 * 1000

    @property
    def major_break_ms(self) -> int:
        return self.major_break_duration * 60 * 1000


class TimeBlock(BaseModel):
    """A calendar window (meeting, lunch …) that preempts the scheduler."""

    model_config = ConfigDict(extra="ignore")

    id: str
    title: str = ""
    start_time: str
    end_time: str
    is_recurring: bool = False
    recurring_days: list[str] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, value: Any) -> str:
        return str(value)

    @field_validator("start_time", "end_time")
    @classmethod
    def _normalize_time(cls, value: str) -> str:
        return normalize_hhmm(value)

    @field_validator("recurring_days", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @model_validator(mode="after")
    def _check_order(self) -> TimeBlock:
        if self.start_time >= self.end_time:
            raise ValueError(
                f"Time block {self.id!r} must start before it ends "
                f"({self.start_time} >= {self.end_time})"
            )
        return self


class ActivityLogEntry(BaseModel):
    """One completed activity, appended to the data service on "done"."""

    user_id: str
    activity_name: str
    calories: int = 10
    body_area: str | None = None
    completed_at: datetime

    def to_record(self) -> dict[str, Any]:
        record = self.model_dump()
        record["completed_at"] = self.completed_at.isoformat()
        return record
