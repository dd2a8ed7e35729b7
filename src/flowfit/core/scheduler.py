"""Workout scheduler — the focus / workout / major-break state machine.

Phases (see :class:`~flowfit.core.models.state.Phase`)::

    IDLE ──start──▶ WORKOUT_ACTIVE ──done──▶ RECOVERY
                      │   ▲                    │
        window expiry │   │ countdown expiry   │ window expiry
                      ▼   │ / skip_wait        ▼
          WAITING_FOCUS or WAITING_MAJOR_BREAK ◀┘

Pause and time-block preemption are flags layered over any phase.  The
tick loop never decrements counters: every tick recomputes remaining time
from the absolute instants stored in :class:`WorkoutState`, so a suspended
host process resumes correctly.

Per tick, in priority order: time-block entry, time-block exit, pause
short-circuit, countdown expiry.  Only one of these happens per tick.

Every mutation is persisted immediately.  Notifications are published on
the event bus and delivered by :class:`NotificationDispatcher`; the
scheduler never waits for them.
"""

from __future__ import annotations

import asyncio
import logging
import random
from datetime import datetime, timezone
from typing import Any, Callable, Sequence

from flowfit.core import events
from flowfit.core.event_bus import EventBus
from flowfit.core.interfaces.backend import BackendError, BackendInterface
from flowfit.core.models.settings import ActivityLogEntry, TimeBlock
from flowfit.core.models.state import Phase, WorkoutSnapshot, WorkoutState
from flowfit.core.persistence import StatePersistence
from flowfit.core.settings_provider import SettingsProvider
from flowfit.core.time_blocks import find_active_time_block, is_within_work_hours
from flowfit.log_config.logger import ContextualLogger

_log = logging.getLogger(__name__)

# Fixed length of the workout / recovery window, independent of settings.
WORKOUT_WINDOW_MS = 300_000

Clock = Callable[[], datetime]
Chooser = Callable[[Sequence[str]], str]

_WORKOUT_PHASES = (Phase.WORKOUT_ACTIVE, Phase.RECOVERY)
_WAITING_PHASES = (Phase.WAITING_FOCUS, Phase.WAITING_MAJOR_BREAK)


def local_now() -> datetime:
    """Wall-clock time in the host's local timezone."""
    return datetime.now()


def to_epoch_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


class WorkoutScheduler:
    """Owns the :class:`WorkoutState` and the command interface over it.

    All methods must be called from the event loop thread.

    Args:
        provider: Source of settings, activity pool and time blocks.
        persistence: Durable snapshot store.
        event_bus: Receives notification requests and phase-change events.
        backend: Data service for activity-log writes on :meth:`done`.
        clock: Returns the current local time.
        choose: Picks an activity from a non-empty pool.
        activity_calories: Calories recorded per completed activity.
    """

    def __init__(
        self,
        provider: SettingsProvider,
        persistence: StatePersistence,
        event_bus: EventBus,
        backend: BackendInterface,
        *,
        clock: Clock = local_now,
        choose: Chooser = random.choice,
        activity_calories: int = 10,
    ) -> None:
        self._provider = provider
        self._persistence = persistence
        self._bus = event_bus
        self._backend = backend
        self._clock = clock
        self._choose = choose
        self._activity_calories = activity_calories

        self._state = WorkoutState()
        self._pool_empty_warned = False
        self._done_pending = False
        self._log = ContextualLogger(_log, user=provider.user_id)

    # ------------------------------------------------------------------
    # Reads (derived, never mutate)
    # ------------------------------------------------------------------

    @property
    def state(self) -> WorkoutState:
        return self._state.model_copy(deep=True)

    @property
    def phase(self) -> Phase:
        return self._state.phase

    def remaining_ms(self) -> int:
        """Time left on whichever countdown drives the current phase."""
        return self._remaining_at(to_epoch_ms(self._clock()))

    def snapshot(self) -> WorkoutSnapshot:
        now = self._clock()
        return WorkoutSnapshot(
            phase=self._state.phase,
            remaining_ms=self._remaining_at(to_epoch_ms(now)),
            state=self.state,
            within_work_hours=is_within_work_hours(self._provider.settings, now),
        )

    def is_within_work_hours(self) -> bool:
        return is_within_work_hours(self._provider.settings, self._clock())

    def active_time_block(self) -> TimeBlock | None:
        return find_active_time_block(self._provider.time_blocks, self._clock())

    def _remaining_at(self, now_ms: int) -> int:
        st = self._state
        if st.is_paused:
            return st.paused_time_remaining or 0
        if st.workout_phase_start_time is not None:
            return max(0, WORKOUT_WINDOW_MS - (now_ms - st.workout_phase_start_time))
        if st.next_workout_time is not None:
            return max(0, st.next_workout_time - now_ms)
        return 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def restore(self) -> None:
        """Replace the in-memory state with the persisted snapshot."""
        self._state = self._persistence.load_state()
        self._log.info(
            "Restored state: phase=%s paused=%s cycles=%d",
            self._state.phase.value,
            self._state.is_paused,
            self._state.completed_cycles,
        )

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def tick(self) -> None:
        """Advance the state machine to the current instant."""
        now = self._clock()
        now_ms = to_epoch_ms(now)
        st = self._state
        block = find_active_time_block(self._provider.time_blocks, now)

        if block is not None and not st.is_time_block_paused:
            self._enter_time_block(block, now_ms)
            return
        if block is None and st.is_time_block_paused:
            self._leave_time_block(now_ms)
            return
        if block is not None:
            if st.active_time_block is None or st.active_time_block.id != block.id:
                self._apply(active_time_block=block)
            return
        if st.is_paused:
            return

        if self._remaining_at(now_ms) > 0:
            return
        if st.phase in _WORKOUT_PHASES:
            self._finish_workout_window(now_ms)
        elif st.phase in _WAITING_PHASES:
            self._begin_workout(now_ms)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """Start a workout now.  Only from Idle, within work hours and outside time blocks."""
        if self._state.phase is not Phase.IDLE:
            self._log.info("Start ignored — already in %s", self._state.phase.value)
            return False
        now = self._clock()
        if not is_within_work_hours(self._provider.settings, now):
            self._log.info("Start ignored — outside work hours")
            return False
        if find_active_time_block(self._provider.time_blocks, now) is not None:
            self._log.info("Start ignored — time block active")
            return False
        return self._begin_workout(to_epoch_ms(now))

    async def done(self) -> bool:
        """Log the current activity and move into the recovery phase.

        The workout window keeps running; only ``current_activity`` is
        cleared.  A failed log write is reported and otherwise ignored.
        While one completion is being logged, further calls return ``False``.
        """
        st = self._state
        activity = st.current_activity
        if activity is None or self._done_pending:
            return False

        now = self._clock()
        entry = ActivityLogEntry(
            user_id=self._provider.user_id,
            activity_name=activity,
            calories=self._activity_calories,
            completed_at=now.astimezone(timezone.utc),
        )
        self._done_pending = True
        try:
            await asyncio.to_thread(self._backend.insert_activity_log, entry)
        except BackendError as exc:
            self._log.warning("Activity log write failed (%s) — continuing", exc)
        finally:
            self._done_pending = False

        current = self._state
        if (
            current.current_activity != activity
            or current.workout_phase_start_time != st.workout_phase_start_time
        ):
            self._log.info("Done for %r arrived after the workout ended — ignored", activity)
            return False

        self._apply(
            current_activity=None,
            last_completed_time=to_epoch_ms(now),
            missed_last_workout=False,
        )
        self._publish(events.ACTIVITY_COMPLETED, {"activity": activity})
        self._log.info("Completed %r — recovering until the window ends", activity)
        return True

    def skip(self) -> bool:
        """Abandon the current workout or countdown and start a fresh focus interval."""
        st = self._state
        if st.phase is Phase.IDLE:
            return False

        now_ms = to_epoch_ms(self._clock())
        settings = self._provider.settings
        updates: dict[str, Any] = {
            "current_activity": None,
            "workout_phase_start_time": None,
            "next_workout_time": now_ms + settings.interval_ms,
            "missed_last_workout": True,
            "is_major_break": False,
        }
        if st.is_paused:
            # Frozen remaining time restarts from the full interval.
            updates["paused_at"] = now_ms
            updates["paused_time_remaining"] = settings.interval_ms
        self._apply(**updates)
        self._log.info("Skipped — focus for %d min", settings.interval)
        self._notify("🎯 Focus Mode Started", f"Back to work! Focus for {settings.interval} minutes.")
        return True

    def pause(self) -> bool:
        st = self._state
        if st.is_paused or st.phase is Phase.IDLE:
            return False
        now_ms = to_epoch_ms(self._clock())
        remaining = self._remaining_at(now_ms)
        self._apply(is_paused=True, paused_at=now_ms, paused_time_remaining=remaining)
        self._log.info("Paused in %s with %d ms left", st.phase.value, remaining)
        return True

    def resume(self) -> bool:
        st = self._state
        if not st.is_paused or st.is_time_block_paused:
            return False
        self._apply(**self._resume_updates(to_epoch_ms(self._clock())))
        self._log.info("Resumed %s", self._state.phase.value)
        return True

    def skip_wait(self) -> bool:
        """Cut the current focus interval or major break short and start a workout."""
        st = self._state
        if st.phase not in _WAITING_PHASES or st.is_time_block_paused:
            return False
        return self._begin_workout(to_epoch_ms(self._clock()))

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _begin_workout(self, now_ms: int) -> bool:
        activity = self._pick_activity()
        if activity is None:
            return False

        ending_major_break = self._state.is_major_break
        self._replace(
            WorkoutState(
                current_activity=activity,
                workout_phase_start_time=now_ms,
                completed_cycles=self._state.completed_cycles,
            )
        )
        self._log.info("Workout started: %r", activity)

        if ending_major_break:
            message = f"Major break over! Let's get back to it: {activity}"
        else:
            message = f"Let's do: {activity}"
        self._notify("⏰ Time to Move!", f"{message}\n\n5 minutes to boost your energy and focus!")
        return True

    def _finish_workout_window(self, now_ms: int) -> None:
        st = self._state
        settings = self._provider.settings
        new_count = st.completed_cycles + 1
        lead = "Relaxation over." if st.current_activity is None else "Workout time ended."

        if new_count >= settings.major_break_interval:
            self._apply(
                current_activity=None,
                workout_phase_start_time=None,
                next_workout_time=now_ms + settings.major_break_ms,
                missed_last_workout=False,
                completed_cycles=0,
                is_major_break=True,
            )
            self._log.info("Cycle %d complete — major break for %d min", new_count, settings.major_break_duration)
            if st.current_activity is None:
                body = (
                    f"Excellent! You've completed {settings.major_break_interval} cycles. "
                    f"Enjoy your {settings.major_break_duration}-minute major break!"
                )
            else:
                body = (
                    f"Great work! You've completed {settings.major_break_interval} cycles. "
                    f"Take a {settings.major_break_duration}-minute break to recharge!"
                )
            self._notify("🎉 Major Break Time!", body)
            return

        self._apply(
            current_activity=None,
            workout_phase_start_time=None,
            next_workout_time=now_ms + settings.interval_ms,
            missed_last_workout=False,
            completed_cycles=new_count,
            is_major_break=False,
        )
        self._log.info("Cycle %d complete — focus for %d min", new_count, settings.interval)
        self._notify(
            "🎯 Focus Mode Started",
            f"{lead} Focus on work for {settings.interval} minutes. "
            f"(Cycle {new_count}/{settings.major_break_interval})",
        )

    def _enter_time_block(self, block: TimeBlock, now_ms: int) -> None:
        updates: dict[str, Any] = {"is_time_block_paused": True, "active_time_block": block}
        if not self._state.is_paused:
            updates.update(
                is_paused=True,
                paused_at=now_ms,
                paused_time_remaining=self._remaining_at(now_ms),
            )
        self._apply(**updates)
        self._log.info("Time block %r started — timer frozen", block.title)
        self._publish(events.TIME_BLOCK_STARTED, {"block_id": block.id, "title": block.title})
        self._notify(
            f"🌿 {block.title}",
            f"Time block started. Timer paused. Enjoy your {block.title.lower()}!",
        )

    def _leave_time_block(self, now_ms: int) -> None:
        block = self._state.active_time_block
        self._apply(**self._resume_updates(now_ms))
        self._log.info("Time block %r ended — timer resumed", block.title if block else "?")
        self._publish(events.TIME_BLOCK_ENDED, {"block_id": block.id if block else None})
        self._notify("⏰ Timer Resumed", "Time block ended. Back to your regular schedule!")

    def _resume_updates(self, now_ms: int) -> dict[str, Any]:
        st = self._state
        remaining = st.paused_time_remaining or 0
        updates: dict[str, Any] = {
            "is_paused": False,
            "paused_at": None,
            "paused_time_remaining": None,
            "is_time_block_paused": False,
            "active_time_block": None,
        }
        if st.workout_phase_start_time is not None:
            updates["workout_phase_start_time"] = now_ms - (WORKOUT_WINDOW_MS - remaining)
        elif st.next_workout_time is not None:
            updates["next_workout_time"] = now_ms + remaining
        return updates

    def _pick_activity(self) -> str | None:
        pool = self._provider.activities
        if not pool:
            if not self._pool_empty_warned:
                self._log.warning("Activity pool is empty — workout deferred until activities exist")
                self._pool_empty_warned = True
            return None
        self._pool_empty_warned = False
        return self._choose(pool)

    # ------------------------------------------------------------------
    # State commit & side effects
    # ------------------------------------------------------------------

    def _apply(self, **changes: Any) -> None:
        self._replace(self._state.model_copy(update=changes))

    def _replace(self, new_state: WorkoutState) -> None:
        old_phase = self._state.phase
        old_cycles = self._state.completed_cycles
        self._state = new_state

        try:
            self._persistence.save_state(new_state)
            if new_state.completed_cycles != old_cycles:
                self._persistence.save_cycles(new_state.completed_cycles)
        except OSError:
            self._log.exception("Persisting workout state failed")

        if new_state.phase is not old_phase:
            self._publish(
                events.PHASE_CHANGED,
                {"old_phase": old_phase.value, "new_phase": new_state.phase.value},
            )

    def _notify(self, title: str, body: str) -> None:
        self._publish(events.NOTIFICATION_REQUESTED, {"title": title, "body": body})

    def _publish(self, event_type: str, payload: dict[str, Any]) -> None:
        self._bus.publish_nowait(event_type, payload)
