"""Backend factory — picks the REST or in-memory data service."""

from __future__ import annotations

import logging

from flowfit.config.secrets_manager import BACKEND_KEY, SecretsManager
from flowfit.core.interfaces.backend import BackendInterface
from flowfit.core.models.config import FlowFitConfig

_log = logging.getLogger(__name__)


def create_backend(config: FlowFitConfig, secrets: SecretsManager) -> BackendInterface:
    """Return the :class:`BackendInterface` for this configuration.

    * ``dev_mode`` or no ``backend.url`` → ``InMemoryBackend``
    * otherwise → ``RestBackend`` authenticated with ``FLOWFIT_BACKEND_KEY``
    """
    if config.system.dev_mode or not config.backend.url:
        from flowfit.backend.memory_backend import InMemoryBackend

        _log.info("Using InMemoryBackend (dev_mode=%s, url=%r)",
                  config.system.dev_mode, config.backend.url)
        return InMemoryBackend()

    from flowfit.backend.rest_backend import RestBackend

    api_key = secrets.get(BACKEND_KEY)
    if not api_key:
        _log.warning("FLOWFIT_BACKEND_KEY is not set — requests will be anonymous")
    _log.info("Using RestBackend at %s", config.backend.url)
    return RestBackend(config.backend, api_key=api_key)
