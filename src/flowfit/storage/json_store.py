"""Local durable storage — one atomically-replaced file per key."""

from __future__ import annotations

import logging
import re
import tempfile
from pathlib import Path

from flowfit.core.interfaces.backend import StorageInterface

_log = logging.getLogger(__name__)

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


def _check_key(key: str) -> str:
    if not _KEY_RE.match(key):
        raise ValueError(f"Invalid storage key: {key!r}")
    return key


def atomic_write_text(path: Path, content: str) -> None:
    """Write *content* to *path* via a temp file + rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f"{path.name}.", suffix=".tmp", dir=str(path.parent))
    try:
        with open(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
        Path(tmp_name).replace(path)
    finally:
        tmp_path = Path(tmp_name)
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)


class JsonFileStore(StorageInterface):
    """Stores each key as ``<directory>/<key>.json``.

    Args:
        directory: Created on first write.
    """

    def __init__(self, directory: Path | str) -> None:
        self._dir = Path(directory)

    @property
    def directory(self) -> Path:
        return self._dir

    def _path(self, key: str) -> Path:
        return self._dir / f"{_check_key(key)}.json"

    def read(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            _log.warning("Could not read %s: %s", path, exc)
            return None

    def write(self, key: str, value: str) -> None:
        atomic_write_text(self._path(key), value)

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class MemoryStore(StorageInterface):
    """Dict-backed store for tests."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self.data.get(_check_key(key))

    def write(self, key: str, value: str) -> None:
        self.data[_check_key(key)] = value

    def delete(self, key: str) -> None:
        self.data.pop(_check_key(key), None)
