"""Web Push fan-out with VAPID authentication (``pywebpush``)."""

from __future__ import annotations

import logging
from typing import Any, Callable

from pywebpush import WebPushException, webpush

from flowfit.push.models import PushMessage, PushResult, PushSubscription

_log = logging.getLogger(__name__)

# Push-service statuses meaning the subscription no longer exists.
_GONE_STATUSES = (404, 410)


class PushSender:
    """Deliver one message to many subscriptions, counting outcomes.

    Args:
        vapid_private_key: Private key (raw URL-safe base64, DER/PEM string or key file path).
        vapid_subject: ``mailto:`` or ``https:`` contact for the push service.
        timeout: Per-delivery timeout in seconds.
        send: Delivery function with the ``pywebpush.webpush`` signature.
    """

    def __init__(
        self,
        vapid_private_key: str,
        vapid_subject: str,
        timeout: float = 10.0,
        send: Callable[..., Any] = webpush,
    ) -> None:
        self._private_key = vapid_private_key
        self._subject = vapid_subject
        self._timeout = timeout
        self._send = send

    @property
    def configured(self) -> bool:
        return bool(self._private_key)

    def send(self, message: PushMessage, subscriptions: list[PushSubscription]) -> PushResult:
        """Blocking fan-out; never raises for individual delivery failures."""
        data = message.model_dump_json()
        result = PushResult(total=len(subscriptions))

        for sub in subscriptions:
            try:
                self._send(
                    subscription_info=sub.model_dump(exclude={"expirationTime"}),
                    data=data,
                    vapid_private_key=self._private_key,
                    # pywebpush adds aud/exp to the claims dict it is given.
                    vapid_claims={"sub": self._subject},
                    timeout=self._timeout,
                )
            except WebPushException as exc:
                result.failed += 1
                status = getattr(exc.response, "status_code", None)
                if status in _GONE_STATUSES:
                    result.expired.append(sub.endpoint)
                _log.warning("Push to %s failed (status=%s): %s", sub.endpoint, status, exc)
            except Exception as exc:  # noqa: BLE001
                result.failed += 1
                _log.warning("Push to %s failed: %s", sub.endpoint, exc)
            else:
                result.successful += 1

        _log.info(
            "Push notifications sent: %d successful, %d failed", result.successful, result.failed
        )
        return result
