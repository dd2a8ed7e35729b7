"""Load and save ``flowfit_config.json``.

Lookup order for the file: explicit argument, ``$FLOWFIT_CONFIG_FILE``,
then the copy shipped beside this module.  ``FLOWFIT_*`` environment
variables listed in :data:`ENV_OVERRIDES` replace single fields before the
result is validated as :class:`FlowFitConfig`.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Callable

from flowfit.core.models.config import FlowFitConfig
from flowfit.storage.json_store import atomic_write_text

_log = logging.getLogger(__name__)

CONFIG_FILE_ENV = "FLOWFIT_CONFIG_FILE"
SHIPPED_CONFIG = Path(__file__).resolve().parent / "flowfit_config.json"


def _flag(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


# env var -> (section, field, parser)
ENV_OVERRIDES: dict[str, tuple[str, str, Callable[[str], Any]]] = {
    "FLOWFIT_LOG_LEVEL": ("system", "log_level", str),
    "FLOWFIT_DEV_MODE": ("system", "dev_mode", _flag),
    "FLOWFIT_WEBUI_PORT": ("system", "webui_port", int),
    "FLOWFIT_STATE_DIR": ("system", "state_dir", str),
    "FLOWFIT_BACKEND_URL": ("backend", "url", str),
    "FLOWFIT_USER_ID": ("backend", "user_id", str),
    "FLOWFIT_PUSH_URL": ("notifications", "push_url", str),
}


def config_path(explicit: Path | str | None = None) -> Path:
    """Return the config file that :func:`load_config` would read."""
    if explicit is not None:
        return Path(explicit)
    from_env = os.environ.get(CONFIG_FILE_ENV)
    return Path(from_env) if from_env else SHIPPED_CONFIG


def _apply_env(raw: dict[str, Any]) -> dict[str, Any]:
    for env_key, (section, field, parse) in ENV_OVERRIDES.items():
        value = os.environ.get(env_key)
        if value is None:
            continue
        raw.setdefault(section, {})[field] = parse(value)
        _log.debug("%s overrides %s.%s", env_key, section, field)
    return raw


def load_config(path: Path | str | None = None) -> FlowFitConfig:
    """Read, override and validate the configuration.

    Raises:
        FileNotFoundError: If the resolved config file does not exist.
        pydantic.ValidationError: If the merged values are invalid.
    """
    resolved = config_path(path)
    if not resolved.is_file():
        raise FileNotFoundError(
            f"Config file not found: {resolved} (set {CONFIG_FILE_ENV} to point at one)"
        )
    _log.info("Loading config from %s", resolved)
    raw = json.loads(resolved.read_text(encoding="utf-8"))
    return FlowFitConfig.model_validate(_apply_env(raw))


def save_config(config: FlowFitConfig, path: Path | str | None = None) -> Path:
    """Write *config* as indented JSON, atomically; returns the file written."""
    target = config_path(path)
    atomic_write_text(target, config.model_dump_json(indent=2) + "\n")
    return target
