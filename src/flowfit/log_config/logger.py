"""Root logging configuration and the per-user contextual logger.

``setup_logging`` is called twice by ``main``: once with defaults so config
loading is logged, then again with the configured level and directory.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, MutableMapping

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_NAME = "flowfit.log"

# Libraries that log every request at INFO.
_NOISY = ("urllib3", "httpx", "uvicorn.access")


def _file_handler(log_dir: str, max_bytes: int, backup_count: int) -> logging.Handler:
    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        directory / LOG_FILE_NAME,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )


def setup_logging(
    log_level: str = "INFO",
    log_dir: str | None = "logs",
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
) -> None:
    """Send all records at *log_level* and above to stderr and, if *log_dir*
    is given, to a rotating ``flowfit.log`` there.

    Replaces (and closes) any handlers already on the root logger.
    Unknown level names fall back to INFO.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_dir is not None:
        handlers.append(_file_handler(log_dir, max_bytes, backup_count))

    root = logging.getLogger()
    for old in list(root.handlers):
        root.removeHandler(old)
        old.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(level)

    for name in _NOISY:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


class ContextualLogger(logging.LoggerAdapter):
    """Prefix every message with ``[key=value]`` tags.

    ``ContextualLogger(log, user="u-1").info("Paused")`` logs
    ``"[user=u-1] Paused"``.
    """

    def __init__(self, logger: logging.Logger, **context: Any) -> None:
        super().__init__(logger, context)
        self._prefix = " ".join(f"[{key}={value}]" for key, value in context.items())

    def bind(self, **context: Any) -> ContextualLogger:
        """Return a logger carrying this one's tags plus *context*."""
        return ContextualLogger(self.logger, **{**self.extra, **context})

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        if self._prefix:
            msg = f"{self._prefix} {msg}"
        return msg, kwargs
