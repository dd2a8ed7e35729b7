"""Push-delivery endpoint: subscription registry, Web Push sender, HTTP routes."""

from flowfit.push.models import PushMessage, PushResult, PushSubscription
from flowfit.push.registry import SubscriptionRegistry
from flowfit.push.routes import build_push_router
from flowfit.push.sender import PushSender

__all__ = [
    "PushMessage",
    "PushResult",
    "PushSubscription",
    "SubscriptionRegistry",
    "PushSender",
    "build_push_router",
]
