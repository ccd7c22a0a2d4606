# interview_slots/services/slots/storage/__init__.py
"""Storage adapters for slots (one per backend, same protocol)."""

from .base import StorageAdapter, filter_by_options, filter_overlapping
from .memory import InMemoryStorageAdapter
from .orm import OrmStorageAdapter
from .redis_store import RedisStorageAdapter
from .sql import SqlStorageAdapter

__all__ = [
    "StorageAdapter",
    "InMemoryStorageAdapter",
    "SqlStorageAdapter",
    "OrmStorageAdapter",
    "RedisStorageAdapter",
    "filter_by_options",
    "filter_overlapping",
]
