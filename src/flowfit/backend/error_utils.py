"""Short, log-friendly summaries of failed data-service and push requests."""

from __future__ import annotations

import requests

# Checked in order; the first matching class wins (subclasses before bases).
_LABELS: tuple[tuple[type[Exception], str], ...] = (
    (requests.exceptions.ConnectTimeout, "Connect timeout"),
    (requests.exceptions.ReadTimeout, "Read timeout"),
    (requests.exceptions.Timeout, "Timeout"),
    (requests.exceptions.SSLError, "TLS/SSL error"),
    (requests.exceptions.TooManyRedirects, "Too many redirects"),
)

_CONNECTION_HINTS: tuple[tuple[str, str], ...] = (
    ("Name or service not known", "DNS failure"),
    ("Temporary failure", "DNS failure"),
    ("Connection refused", "Connection refused"),
)


def _describe_http_error(err: requests.exceptions.HTTPError) -> str:
    resp = err.response
    if resp is None:
        return "HTTP error"
    text = f"HTTP {resp.status_code} {resp.reason or ''}".strip()
    # PostgREST puts the useful part in a JSON "message" field.
    if resp.headers.get("Content-Type", "").startswith("application/json"):
        try:
            detail = resp.json().get("message")
        except (ValueError, AttributeError):
            detail = None
        if detail:
            text = f"{text}: {detail}"
    return text


def _describe(err: Exception) -> str:
    for exc_type, label in _LABELS:
        if isinstance(err, exc_type):
            return label
    if isinstance(err, requests.exceptions.HTTPError):
        return _describe_http_error(err)
    if isinstance(err, requests.exceptions.ConnectionError):
        raw = str(err)
        for hint, label in _CONNECTION_HINTS:
            if hint in raw:
                return label
        return "Connection error"
    if isinstance(err, ValueError) and "JSON" in str(err):
        return "Invalid JSON response"
    return str(err) or type(err).__name__


def summarize_error(err: Exception, max_len: int = 80) -> str:
    """Return a one-line description of *err*, at most *max_len* characters."""
    msg = _describe(err)
    if len(msg) > max_len:
        msg = msg[: max_len - 3] + "..."
    return msg
