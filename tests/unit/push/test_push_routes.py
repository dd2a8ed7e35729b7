"""Tests for the push HTTP routes (FastAPI TestClient)."""

from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from flowfit.push.models import PushResult, PushSubscription
from flowfit.push.registry import SubscriptionRegistry
from flowfit.push.routes import build_push_router
from flowfit.push.sender import PushSender

SUB = {
    "endpoint": "https://push.example.com/abc",
    "keys": {"p256dh": "p256dh-key", "auth": "auth-key"},
    "expirationTime": None,
}


@pytest.fixture
def registry() -> SubscriptionRegistry:
    return SubscriptionRegistry()


@pytest.fixture
def sender() -> MagicMock:
    return MagicMock(spec=PushSender)


@pytest.fixture
def client(registry, sender) -> TestClient:
    app = FastAPI()
    app.include_router(build_push_router(registry, sender, public_key="PUBKEY"))
    return TestClient(app)


class TestSubscribe:
    def test_subscribe_and_info(self, client, registry):
        resp = client.post("/api/push/subscribe", json={"subscription": SUB})
        assert resp.status_code == 200
        assert resp.json() == {
            "success": True,
            "message": "Subscription saved successfully",
            "totalSubscriptions": 1,
        }

        info = client.get("/api/push/subscribe").json()
        assert info == {"totalSubscriptions": 1, "publicKey": "PUBKEY"}

    def test_malformed_subscription_rejected(self, client, registry):
        resp = client.post("/api/push/subscribe", json={"subscription": {"endpoint": "x"}})
        assert resp.status_code == 422
        assert len(registry) == 0


class TestSend:
    def test_no_subscriptions_is_400(self, client, sender):
        resp = client.post("/api/push/send", json={"title": "T"})
        assert resp.status_code == 400
        assert resp.json()["success"] is False
        sender.send.assert_not_called()

    def test_fan_out(self, client, registry, sender):
        registry.add(PushSubscription.model_validate(SUB))
        sender.send.return_value = PushResult(successful=1, failed=0, total=1)

        resp = client.post("/api/push/send", json={"title": "⏰ Time to Move!", "body": "Let's do: plank"})

        assert resp.status_code == 200
        assert resp.json() == {
            "success": True,
            "message": "Push notification sent to 1 devices",
            "details": {"successful": 1, "failed": 0, "total": 1},
        }
        message, targets = sender.send.call_args.args
        assert message.title == "⏰ Time to Move!"
        assert message.icon == "/icon-192.jpg"
        assert [t.endpoint for t in targets] == [SUB["endpoint"]]

    def test_targeted_subscription(self, client, registry, sender):
        registry.add(PushSubscription.model_validate({**SUB, "endpoint": "https://push.example.com/other"}))
        sender.send.return_value = PushResult(successful=1, total=1)

        client.post("/api/push/send", json={"subscription": SUB})

        _, targets = sender.send.call_args.args
        assert [t.endpoint for t in targets] == [SUB["endpoint"]]

    def test_expired_subscriptions_pruned(self, client, registry, sender):
        registry.add(PushSubscription.model_validate(SUB))
        registry.add(PushSubscription.model_validate({**SUB, "endpoint": "https://push.example.com/live"}))
        sender.send.return_value = PushResult(
            successful=1, failed=1, total=2, expired=[SUB["endpoint"]]
        )

        resp = client.post("/api/push/send", json={})

        assert resp.status_code == 200
        assert [s.endpoint for s in registry.all()] == ["https://push.example.com/live"]

    def test_all_failed_is_502(self, client, registry, sender):
        registry.add(PushSubscription.model_validate(SUB))
        sender.send.return_value = PushResult(successful=0, failed=1, total=1)

        resp = client.post("/api/push/send", json={})
        assert resp.status_code == 502
        assert resp.json()["details"] == {"successful": 0, "failed": 1, "total": 1}

    def test_sender_exception_is_500(self, client, registry, sender):
        registry.add(PushSubscription.model_validate(SUB))
        sender.send.side_effect = RuntimeError("bad key")

        resp = client.post("/api/push/send", json={})
        assert resp.status_code == 500
        assert resp.json()["error"] == "bad key"
