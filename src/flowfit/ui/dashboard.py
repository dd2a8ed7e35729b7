"""Dashboard page — reads scheduler snapshots and issues user commands.

Provides the ``@ui.page('/')`` route with:
* Current phase, activity and countdown (refreshed by a page timer)
* Start / Done / Skip / Pause / Resume / Skip-wait / Reload buttons
* In-page alerts for notifications whose push delivery failed
"""

from __future__ import annotations

import logging as _logging
from collections import deque
from typing import Awaitable, Callable

from nicegui import ui

from flowfit.core.models.state import Phase, WorkoutSnapshot
from flowfit.core.session_manager import SessionManager

_log = _logging.getLogger(__name__)

_PHASE_LABELS: dict[Phase, str] = {
    Phase.IDLE: "Not scheduled",
    Phase.WAITING_FOCUS: "Focus time",
    Phase.WAITING_MAJOR_BREAK: "Major break",
    Phase.WORKOUT_ACTIVE: "Time to move",
    Phase.RECOVERY: "Relax and recover",
}


def format_remaining(ms: int) -> str:
    """Render milliseconds as ``MM:SS`` (``H:MM:SS`` from one hour up)."""
    total_seconds = max(0, ms) // 1000
    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:02d}:{seconds:02d}"


def describe(snapshot: WorkoutSnapshot) -> str:
    """One-line status text for *snapshot*."""
    state = snapshot.state
    if state.is_time_block_paused and state.active_time_block is not None:
        return f"Paused for {state.active_time_block.title}"
    if state.is_paused:
        return "Paused"
    if snapshot.phase is Phase.IDLE:
        return "Within work hours" if snapshot.within_work_hours else "Outside work hours"
    if state.missed_last_workout and snapshot.phase is Phase.WAITING_FOCUS:
        return "Last workout skipped"
    return f"Cycle {state.completed_cycles}"


class AlertQueue:
    """Fallback alerts waiting for a page timer to render them."""

    def __init__(self, maxlen: int = 20) -> None:
        self._items: deque[tuple[str, str]] = deque(maxlen=maxlen)

    def __len__(self) -> int:
        return len(self._items)

    def push(self, title: str, body: str) -> None:
        self._items.append((title, body))

    def drain(self) -> list[tuple[str, str]]:
        items = list(self._items)
        self._items.clear()
        return items


class Dashboard:
    """Single-page display surface.

    Args:
        session: Started (or starting) session whose scheduler is shown.
        alerts: Queue the notification dispatcher pushes fallback alerts into.
        refresh_seconds: Page refresh period.
    """

    def __init__(
        self,
        session: SessionManager,
        alerts: AlertQueue,
        refresh_seconds: float = 0.5,
    ) -> None:
        self._session = session
        self._alerts = alerts
        self._refresh_seconds = refresh_seconds

        self._lbl_phase: ui.label | None = None
        self._lbl_activity: ui.label | None = None
        self._lbl_countdown: ui.label | None = None
        self._lbl_status: ui.label | None = None

    def setup_page(self) -> None:
        """Register the ``@ui.page('/')`` route."""

        @ui.page("/")
        def index():
            self._build_page()

    def _build_page(self) -> None:
        ui.dark_mode().enable()

        with ui.column().classes("w-full items-center").style("padding-top: 48px; gap: 12px;"):
            self._lbl_phase = ui.label("").style("font-size: 28px;")
            self._lbl_activity = ui.label("").style("font-size: 20px; color: #5eead4;")
            self._lbl_countdown = ui.label("00:00").style(
                "font-family: 'Courier New', monospace; font-size: 56px;"
            )
            self._lbl_status = ui.label("").style("font-size: 14px; color: #aaaaaa;")

            with ui.row():
                self._button("Start", self._session_cmd("start"))
                self._button("Done", self._on_done)
                self._button("Skip", self._session_cmd("skip"))
                self._button("Pause", self._session_cmd("pause"))
                self._button("Resume", self._session_cmd("resume"))
                self._button("Skip wait", self._session_cmd("skip_wait"))
                self._button("Reload", self._on_reload)

        ui.timer(self._refresh_seconds, self._refresh)

    @staticmethod
    def _button(text: str, handler: Callable[[], Awaitable[None] | None]) -> None:
        ui.button(text, on_click=handler).props("outline")

    def _session_cmd(self, name: str) -> Callable[[], None]:
        def run() -> None:
            accepted = getattr(self._session.scheduler, name)()
            if not accepted:
                ui.notify(f"{name.replace('_', ' ').capitalize()} is not available right now", type="warning")
            self._refresh()

        return run

    async def _on_done(self) -> None:
        if not await self._session.scheduler.done():
            ui.notify("No activity in progress", type="warning")
        self._refresh()

    async def _on_reload(self) -> None:
        ok = await self._session.reload_user_data()
        ui.notify("Reloaded" if ok else "Reload failed — using cached data",
                  type="positive" if ok else "warning")

    def _refresh(self) -> None:
        try:
            snapshot = self._session.scheduler.snapshot()
        except RuntimeError:
            return  # session not started yet

        if self._lbl_phase:
            self._lbl_phase.text = _PHASE_LABELS[snapshot.phase]
        if self._lbl_activity:
            self._lbl_activity.text = snapshot.state.current_activity or ""
        if self._lbl_countdown:
            self._lbl_countdown.text = format_remaining(snapshot.remaining_ms)
        if self._lbl_status:
            self._lbl_status.text = describe(snapshot)

        for title, body in self._alerts.drain():
            ui.notify(f"{title} — {body}", position="top", close_button=True)
