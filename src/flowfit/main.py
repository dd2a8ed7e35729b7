"""FlowFit — Application entry point (NiceGUI composition root).

Wires together: Config → EventBus → Backend → SessionManager → push routes → UI.
NiceGUI owns the event loop; ``app.on_startup`` / ``app.on_shutdown``
handle lifecycle.
"""

from __future__ import annotations

import logging as _logging

from nicegui import app, ui

from flowfit.backend.factory import create_backend
from flowfit.config.config_manager import load_config
from flowfit.config.secrets_manager import SecretsManager
from flowfit.core.event_bus import EventBus
from flowfit.core.notifications import NotificationDispatcher
from flowfit.core.session_manager import SessionManager
from flowfit.log_config.logger import setup_logging
from flowfit.push import PushSender, SubscriptionRegistry, build_push_router
from flowfit.ui.dashboard import AlertQueue, Dashboard

_log = _logging.getLogger(__name__)


def main() -> None:
    """Synchronous entry point — bootstraps and starts NiceGUI."""

    setup_logging(log_dir=None)

    # 1. Load configuration, then re-init logging with configured level/dir
    config = load_config()
    setup_logging(config.system.log_level, config.system.log_dir)
    _log.info("Starting FlowFit for user %s", config.backend.user_id)
    secrets = SecretsManager()

    # 2. Event bus + data service
    bus = EventBus(queue_size=config.system.event_bus_queue_size)
    backend = create_backend(config, secrets)

    # 3. Notifications: push first, in-page alert as fallback
    alerts = AlertQueue()
    dispatcher = NotificationDispatcher(config.notifications)
    dispatcher.set_local_alert(alerts.push)

    session = SessionManager(
        config=config,
        event_bus=bus,
        backend=backend,
        dispatcher=dispatcher,
    )

    # 4. Push-delivery endpoint on the same server
    public_key, private_key = secrets.vapid_keys()
    if not private_key:
        _log.warning("VAPID_PRIVATE_KEY is not set — push delivery will fail and fall back to local alerts")
    registry = SubscriptionRegistry(config.notifications.subscriptions_file)
    sender = PushSender(private_key, config.notifications.vapid_subject)
    app.include_router(build_push_router(registry, sender, public_key))

    # 5. Display surface
    Dashboard(session=session, alerts=alerts).setup_page()

    # 6. Lifecycle hooks
    async def on_startup() -> None:
        _log.info("NiceGUI startup — starting session")
        await session.start()
        _log.info("FlowFit running on http://localhost:%d", config.system.webui_port)

    async def on_shutdown() -> None:
        _log.info("NiceGUI shutdown — stopping session")
        await session.shutdown(reason="nicegui shutdown")
        _log.info("FlowFit stopped")

    app.on_startup(on_startup)
    app.on_shutdown(on_shutdown)

    # 7. Launch NiceGUI (blocks forever)
    ui.run(
        port=config.system.webui_port,
        title="FlowFit",
        reload=False,
        show=False,
    )


if __name__ in {"__main__", "__mp_main__"}:
    main()
