"""Subscription registry — device subscriptions keyed by endpoint."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

from pydantic import ValidationError

from flowfit.push.models import PushSubscription
from flowfit.storage.json_store import atomic_write_text

_log = logging.getLogger(__name__)


class SubscriptionRegistry:
    """Thread-safe set of push subscriptions, optionally persisted to JSON.

    Args:
        path: JSON file to load from and save to; ``None`` keeps
            subscriptions in memory only.
    """

    def __init__(self, path: Path | str | None = None) -> None:
        self._path = Path(path) if path is not None else None
        self._lock = threading.Lock()
        self._subs: dict[str, PushSubscription] = {}
        self._load()

    def __len__(self) -> int:
        return len(self._subs)

    def add(self, subscription: PushSubscription) -> int:
        """Insert or replace *subscription*; returns the new total."""
        with self._lock:
            self._subs[subscription.endpoint] = subscription
            self._save()
            total = len(self._subs)
        _log.info("Subscription saved for %s (total=%d)", subscription.endpoint, total)
        return total

    def remove(self, endpoint: str) -> bool:
        with self._lock:
            if self._subs.pop(endpoint, None) is None:
                return False
            self._save()
        _log.info("Subscription removed for %s", endpoint)
        return True

    def all(self) -> list[PushSubscription]:
        with self._lock:
            return list(self._subs.values())

    def _load(self) -> None:
        if self._path is None or not self._path.is_file():
            return
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            _log.warning("Could not read subscriptions from %s: %s", self._path, exc)
            return
        for item in raw if isinstance(raw, list) else []:
            try:
                sub = PushSubscription.model_validate(item)
            except ValidationError:
                _log.warning("Skipping invalid stored subscription")
                continue
            self._subs[sub.endpoint] = sub
        _log.info("Loaded %d push subscriptions", len(self._subs))

    def _save(self) -> None:
        if self._path is None:
            return
        payload = [sub.model_dump() for sub in self._subs.values()]
        atomic_write_text(self._path, json.dumps(payload, indent=2) + "\n")
