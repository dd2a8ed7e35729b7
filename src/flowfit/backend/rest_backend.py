"""REST backend — PostgREST-style hosted data service.

Tables (one row set per user, filtered with ``user_id=eq.<id>``):

* ``user_settings``  — work hours, interval, major-break policy
* ``activities``     — activity pool (``name``)
* ``time_blocks``    — meetings / breaks that preempt the scheduler
* ``activity_logs``  — append-only completion log
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from flowfit.backend.http_helpers import fetch_json, post_json
from flowfit.core.interfaces.backend import BackendError, BackendInterface
from flowfit.core.models.config import BackendConfig
from flowfit.core.models.settings import ActivityLogEntry, TimeBlock, UserSettings

_log = logging.getLogger(__name__)


class RestBackend(BackendInterface):
    """Data service client over :mod:`requests`.

    Args:
        config: Base URL, timeouts and retry policy.
        api_key: Service key sent as ``apikey`` and bearer token.
    """

    def __init__(self, config: BackendConfig, api_key: str = "") -> None:
        self._base = config.url.rstrip("/") + "/rest/v1"
        self._timeout = config.timeout_seconds
        self._retries = config.retries
        self._headers: dict[str, str] = {}
        if api_key:
            self._headers = {"apikey": api_key, "Authorization": f"Bearer {api_key}"}

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def fetch_settings(self, user_id: str) -> UserSettings | None:
        rows = self._select("user_settings", user_id, columns="*", limit=1)
        if not rows:
            return None
        try:
            return UserSettings.model_validate(rows[0])
        except ValidationError as exc:
            raise BackendError(f"Invalid settings record: {exc.error_count()} errors") from exc

    def fetch_activities(self, user_id: str) -> list[str]:
        rows = self._select("activities", user_id, columns="name")
        return [str(row["name"]) for row in rows if row.get("name")]

    def fetch_time_blocks(self, user_id: str) -> list[TimeBlock]:
        blocks: list[TimeBlock] = []
        for row in self._select("time_blocks", user_id, columns="*"):
            try:
                blocks.append(TimeBlock.model_validate(row))
            except ValidationError:
                _log.warning("Skipping invalid time block %r", row.get("id"))
        return blocks

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert_activity_log(self, entry: ActivityLogEntry) -> None:
        post_json(
            f"{self._base}/activity_logs",
            entry.to_record(),
            headers={**self._headers, "Prefer": "return=minimal"},
            timeout=self._timeout,
        )
        _log.debug("Logged activity %r for %s", entry.activity_name, entry.user_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _select(
        self,
        table: str,
        user_id: str,
        *,
        columns: str,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        params: dict[str, Any] = {"select": columns, "user_id": f"eq.{user_id}"}
        if limit is not None:
            params["limit"] = limit
        data = fetch_json(
            f"{self._base}/{table}",
            params=params,
            headers=self._headers,
            timeout=self._timeout,
            retries=self._retries,
        )
        if not isinstance(data, list):
            raise BackendError(f"Unexpected {table} response: {type(data).__name__}")
        return [row for row in data if isinstance(row, dict)]
