"""Collaborator interfaces consumed by the scheduler core."""

from flowfit.core.interfaces.backend import BackendError, BackendInterface, StorageInterface

__all__ = ["BackendError", "BackendInterface", "StorageInterface"]
