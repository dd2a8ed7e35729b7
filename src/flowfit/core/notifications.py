"""Notification dispatcher — remote push first, local in-page alert as fallback.

The scheduler publishes ``output.notification.requested`` events; the
dispatcher delivers each one exactly once.  Push and local alert are
mutually exclusive: the local alert fires only when the push request
failed.  Nothing is retried and nothing is raised to the caller.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Callable

import requests

from flowfit.backend.error_utils import summarize_error
from flowfit.core import events
from flowfit.core.event_bus import EventBus
from flowfit.core.models.config import NotificationConfig
from flowfit.core.models.event import Event

_log = logging.getLogger(__name__)

# local_alert(title, body) — renders an alert in the open page.
LocalAlertSink = Callable[[str, str], None]


class Delivery(str, Enum):
    """How a notification reached (or failed to reach) the user."""

    PUSH = "push"
    LOCAL = "local"
    DROPPED = "dropped"


class NotificationDispatcher:
    """Deliver scheduler notifications.

    Args:
        config: Push endpoint, payload defaults and local-alert permission.
        post: Callable used for the push request (``requests.post``
            signature); injectable for tests.
    """

    def __init__(
        self,
        config: NotificationConfig,
        post: Callable[..., requests.Response] = requests.post,
    ) -> None:
        self._config = config
        self._post = post
        self._local_alert: LocalAlertSink | None = None
        self._local_permission = config.local_alerts_enabled
        self._sub_id: str | None = None

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------

    def attach(self, event_bus: EventBus) -> None:
        """Subscribe to notification requests on *event_bus*."""
        self._sub_id = event_bus.subscribe(events.NOTIFICATION_REQUESTED, self._on_requested)

    def set_local_alert(self, sink: LocalAlertSink | None) -> None:
        """Register the page that renders fallback alerts (``None`` to detach)."""
        self._local_alert = sink

    def set_local_permission(self, granted: bool) -> None:
        self._local_permission = granted

    @property
    def local_alerts_available(self) -> bool:
        return self._local_permission and self._local_alert is not None

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    async def _on_requested(self, event: Event) -> None:
        await self.dispatch(
            str(event.payload.get("title", "FlowFit")),
            str(event.payload.get("body", "")),
        )

    async def dispatch(self, title: str, body: str) -> Delivery:
        """Deliver one notification.  Never raises."""
        try:
            await asyncio.to_thread(self._send_push, title, body)
        except Exception as exc:  # noqa: BLE001
            _log.warning("Push delivery failed for %r: %s", title, summarize_error(exc))
            return self._deliver_locally(title, body)

        _log.info("Push notification sent: %r", title)
        return Delivery.PUSH

    def build_payload(self, title: str, body: str) -> dict[str, Any]:
        cfg = self._config
        return {
            "title": title,
            "body": body,
            "icon": cfg.icon,
            "badge": cfg.badge,
            "url": cfg.click_url,
        }

    def _send_push(self, title: str, body: str) -> None:
        resp = self._post(
            self._config.push_url,
            json=self.build_payload(title, body),
            timeout=self._config.push_timeout_seconds,
        )
        # 400 means no subscribed devices — nobody got it, fall back.
        resp.raise_for_status()

    def _deliver_locally(self, title: str, body: str) -> Delivery:
        sink = self._local_alert
        if not self._local_permission or sink is None:
            _log.info("No local alert permission — notification %r dropped", title)
            return Delivery.DROPPED
        try:
            sink(title, body)
        except Exception:
            _log.exception("Local alert failed — notification %r dropped", title)
            return Delivery.DROPPED
        return Delivery.LOCAL
