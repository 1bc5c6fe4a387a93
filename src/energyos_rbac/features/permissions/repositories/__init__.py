"""Override store implementations."""

from .memory_override_store import InMemoryOverrideStore
from .redis_override_store import RedisOverrideStore
from .postgres_override_store import AsyncPGOverrideStore

__all__ = [
    "InMemoryOverrideStore",
    "RedisOverrideStore",
    "AsyncPGOverrideStore",
]
