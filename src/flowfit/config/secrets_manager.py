"""Secrets: the data-service key and the VAPID key pair.

A value is looked up in ``os.environ`` first, then in a ``KEY=VALUE``
secrets file, then the caller's default.  The file is the first that
exists of ``$FLOWFIT_SECRETS_FILE``, ``secrets/secrets.env`` and
``/etc/flowfit/secrets.env``; it is read once, on first lookup.
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Iterator

_log = logging.getLogger(__name__)

BACKEND_KEY = "FLOWFIT_BACKEND_KEY"
VAPID_PUBLIC_KEY = "VAPID_PUBLIC_KEY"
VAPID_PRIVATE_KEY = "VAPID_PRIVATE_KEY"

SECRETS_FILE_ENV = "FLOWFIT_SECRETS_FILE"
_SEARCH_PATHS = (Path("secrets/secrets.env"), Path("/etc/flowfit/secrets.env"))


def parse_env_text(text: str, source: str = "<string>") -> dict[str, str]:
    """Parse ``KEY=VALUE`` lines; ``#`` comments, blanks and junk lines are skipped."""
    values: dict[str, str] = {}
    for lineno, line in enumerate(text.splitlines(), 1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            _log.warning("%s:%d is not KEY=VALUE, skipped", source, lineno)
            continue
        values[key.strip()] = value.strip().strip("\"'")
    return values


def _candidates() -> Iterator[Path]:
    override = os.environ.get(SECRETS_FILE_ENV)
    if override:
        # An explicit file that is missing is a misconfiguration, not a cue to search.
        if not Path(override).is_file():
            _log.warning("%s=%s does not exist", SECRETS_FILE_ENV, override)
        yield Path(override)
        return
    yield from _SEARCH_PATHS


class SecretsManager:
    """Read-only secrets lookup, safe to share between threads.

    Args:
        path: Use this file instead of searching.
    """

    def __init__(self, path: Path | str | None = None) -> None:
        self._path = Path(path) if path is not None else None
        self._file_values: dict[str, str] | None = None
        self._lock = threading.Lock()

    def get(self, key: str, default: str = "") -> str:
        if key in os.environ:
            return os.environ[key]
        return self._values().get(key, default)

    def require(self, key: str) -> str:
        """Like :meth:`get`, but a missing or empty value raises :class:`KeyError`."""
        value = self.get(key)
        if not value:
            raise KeyError(f"Secret {key} is not configured")
        return value

    def vapid_keys(self) -> tuple[str, str]:
        """``(public_key, private_key)``; either may be empty."""
        return self.get(VAPID_PUBLIC_KEY), self.get(VAPID_PRIVATE_KEY)

    def keys(self) -> list[str]:
        """Keys defined in the secrets file, sorted.  Environment-only keys are not listed."""
        return sorted(self._values())

    def _values(self) -> dict[str, str]:
        with self._lock:
            if self._file_values is None:
                self._file_values = self._read_file()
            return self._file_values

    def _read_file(self) -> dict[str, str]:
        paths = [self._path] if self._path is not None else list(_candidates())
        for path in paths:
            if path.is_file():
                _log.info("Loading secrets from %s", path)
                return parse_env_text(path.read_text(encoding="utf-8"), str(path))
        _log.debug("No secrets file found; using environment only")
        return {}
