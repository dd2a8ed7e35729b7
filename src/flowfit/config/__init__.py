"""Configuration: config manager, secrets manager, and the default JSON file."""

from flowfit.config.config_manager import load_config, save_config
from flowfit.config.secrets_manager import SecretsManager

__all__ = [
    "load_config",
    "save_config",
    "SecretsManager",
]
