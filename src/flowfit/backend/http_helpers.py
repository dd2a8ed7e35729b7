"""JSON over HTTP for the REST data service.

Reads are retried with a linear backoff; writes are sent once.  Every
transport, HTTP-status or decoding failure surfaces as
:class:`BackendError` whose message is :func:`summarize_error` output.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Mapping

import requests

from flowfit import __version__
from flowfit.backend.error_utils import summarize_error
from flowfit.core.interfaces.backend import BackendError

_log = logging.getLogger(__name__)

USER_AGENT = f"FlowFit/{__version__}"


def _with_defaults(headers: Mapping[str, str] | None) -> dict[str, str]:
    return {"User-Agent": USER_AGENT, "Accept": "application/json", **(headers or {})}


def fetch_json(
    url: str,
    *,
    params: Mapping[str, Any] | None = None,
    headers: Mapping[str, str] | None = None,
    timeout: float = 6.0,
    retries: int = 1,
    backoff: float = 1.5,
) -> Any:
    """GET *url* and decode the JSON body.

    A failed attempt is repeated up to *retries* more times, sleeping
    ``backoff``, ``2 * backoff``, ... seconds in between.

    Raises:
        BackendError: When the last attempt fails.
    """
    merged = _with_defaults(headers)
    attempts = retries + 1
    for attempt in range(1, attempts + 1):
        try:
            resp = requests.get(url, params=params, headers=merged, timeout=timeout)
            resp.raise_for_status()
            return resp.json()
        except (requests.RequestException, ValueError) as exc:
            if attempt == attempts:
                raise BackendError(summarize_error(exc)) from exc
            _log.debug("GET %s failed (%s), attempt %d/%d", url, summarize_error(exc), attempt, attempts)
            time.sleep(backoff * attempt)


def post_json(
    url: str,
    payload: Any,
    *,
    headers: Mapping[str, str] | None = None,
    timeout: float = 6.0,
) -> None:
    """POST *payload* as a JSON body; the response body is ignored.

    Raises:
        BackendError: On any transport error or non-2xx status.
    """
    try:
        requests.post(url, json=payload, headers=_with_defaults(headers), timeout=timeout).raise_for_status()
    except requests.RequestException as exc:
        raise BackendError(summarize_error(exc)) from exc
