"""Data service backends: REST (hosted) and in-memory (dev / tests)."""

from flowfit.backend.factory import create_backend
from flowfit.backend.memory_backend import InMemoryBackend
from flowfit.backend.rest_backend import RestBackend

__all__ = ["create_backend", "InMemoryBackend", "RestBackend"]
