"""HTTP routes for push subscription and delivery (mounted on the NiceGUI app)."""

from __future__ import annotations

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from flowfit.push.models import SendRequest, SubscribeRequest
from flowfit.push.registry import SubscriptionRegistry
from flowfit.push.sender import PushSender

_log = logging.getLogger(__name__)


def build_push_router(
    registry: SubscriptionRegistry,
    sender: PushSender,
    public_key: str = "",
) -> APIRouter:
    """Return a router exposing ``/api/push/subscribe`` and ``/api/push/send``.

    ``send`` answers non-2xx whenever no device received the message (no
    subscriptions, or every delivery failed) so callers can fall back to a
    local alert.
    """
    router = APIRouter(prefix="/api/push", tags=["push"])

    @router.post("/subscribe")
    def subscribe(request: SubscribeRequest):
        total = registry.add(request.subscription)
        return {
            "success": True,
            "message": "Subscription saved successfully",
            "totalSubscriptions": total,
        }

    @router.get("/subscribe")
    def subscription_info():
        return {"totalSubscriptions": len(registry), "publicKey": public_key}

    @router.post("/send")
    async def send(request: SendRequest):
        targets = [request.subscription] if request.subscription else registry.all()
        _log.info("Send request received. Targets: %d", len(targets))
        if not targets:
            return JSONResponse(
                {"success": False, "message": "No push subscriptions found"},
                status_code=400,
            )

        try:
            result = await run_in_threadpool(sender.send, request.to_message(), targets)
        except Exception as exc:
            _log.exception("Error sending push notification")
            return JSONResponse(
                {
                    "success": False,
                    "message": "Failed to send push notification",
                    "error": str(exc),
                },
                status_code=500,
            )

        for endpoint in result.expired:
            registry.remove(endpoint)

        details = {"successful": result.successful, "failed": result.failed, "total": result.total}
        if result.successful == 0:
            return JSONResponse(
                {"success": False, "message": "Push notification reached no devices", "details": details},
                status_code=502,
            )
        return {
            "success": True,
            "message": f"Push notification sent to {result.successful} devices",
            "details": details,
        }

    return router
