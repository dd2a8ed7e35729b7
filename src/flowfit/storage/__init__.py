"""Local key/value stores for persisted scheduler state."""

from flowfit.storage.json_store import JsonFileStore, MemoryStore, atomic_write_text

__all__ = ["JsonFileStore", "MemoryStore", "atomic_write_text"]
