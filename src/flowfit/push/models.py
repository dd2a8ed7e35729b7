"""Pydantic models for the push-delivery endpoint."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PushKeys(BaseModel):
    p256dh: str
    auth: str


class PushSubscription(BaseModel):
    """A browser ``PushSubscription.toJSON()`` value."""

    model_config = ConfigDict(extra="ignore")

    endpoint: str = Field(min_length=1)
    keys: PushKeys
    expirationTime: float | None = None


class SubscribeRequest(BaseModel):
    subscription: PushSubscription


class PushMessage(BaseModel):
    """Payload delivered to the service worker."""

    title: str = "FlowFit"
    body: str = "Time to move!"
    icon: str = "/icon-192.jpg"
    badge: str = "/icon-192.jpg"
    url: str = "/"


class SendRequest(BaseModel):
    """Body of ``POST /api/push/send``; omitted fields take message defaults."""

    title: str | None = None
    body: str | None = None
    icon: str | None = None
    badge: str | None = None
    url: str | None = None
    subscription: PushSubscription | None = Field(
        default=None, description="Deliver to this subscription only"
    )

    def to_message(self) -> PushMessage:
        fields = self.model_dump(exclude={"subscription"}, exclude_none=True)
        # Empty strings also fall back to defaults.
        return PushMessage(**{k: v for k, v in fields.items() if v})


class PushResult(BaseModel):
    successful: int = 0
    failed: int = 0
    total: int = 0
    expired: list[str] = Field(default_factory=list, description="Endpoints the push service rejected as gone")
