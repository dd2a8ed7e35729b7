"""Workout scheduler state, derived phase, and read-only snapshots."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from flowfit.core.models.settings import TimeBlock


class Phase(str, Enum):
    """Which countdown currently drives the scheduler."""

    IDLE = "idle"
    WAITING_FOCUS = "waiting_focus"
    WAITING_MAJOR_BREAK = "waiting_major_break"
    WORKOUT_ACTIVE = "workout_active"
    RECOVERY = "recovery"


class WorkoutState(BaseModel):
    """The scheduler's single mutable entity.

    All instants are epoch milliseconds.  Either the workout window
    (``workout_phase_start_time``) or the waiting countdown
    (``next_workout_time``) drives the timer, never both.
    """

    current_activity: str | None = None
    workout_phase_start_time: int | None = None
    next_workout_time: int | None = None
    last_completed_time: int | None = None
    missed_last_workout: bool = False
    is_paused: bool = False
    paused_at: int | None = None
    paused_time_remaining: int | None = None
    completed_cycles: int = Field(default=0, ge=0)
    is_major_break: bool = False
    is_time_block_paused: bool = False
    active_time_block: TimeBlock | None = None

    @model_validator(mode="after")
    def _pause_fields_consistent(self) -> WorkoutState:
        # Restored snapshots may predate a field; repair rather than reject.
        if self.is_paused and self.paused_time_remaining is None:
            self.paused_time_remaining = 0
        if not self.is_paused:
            self.paused_at = None
            self.paused_time_remaining = None
            self.is_time_block_paused = False
            self.active_time_block = None
        if self.workout_phase_start_time is not None:
            self.next_workout_time = None
        return self

    @property
    def phase(self) -> Phase:
        if self.workout_phase_start_time is not None:
            return Phase.WORKOUT_ACTIVE if self.current_activity else Phase.RECOVERY
        if self.next_workout_time is not None:
            return Phase.WAITING_MAJOR_BREAK if self.is_major_break else Phase.WAITING_FOCUS
        return Phase.IDLE


class WorkoutSnapshot(BaseModel):
    """Immutable view handed to display surfaces."""

    model_config = ConfigDict(frozen=True)

    phase: Phase
    remaining_ms: int
    state: WorkoutState
    within_work_hours: bool

    @property
    def is_paused(self) -> bool:
        return self.state.is_paused

    @property
    def is_time_block_paused(self) -> bool:
        return self.state.is_time_block_paused
