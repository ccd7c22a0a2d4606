# interview_slots/services/slots/__init__.py
"""
Slot availability / booking engine.

Time codec and config → validation → overlap math → storage adapter
→ SlotManager (booking, conflicts, free windows, statistics).
"""

from .config import SlotConfig, get_slot_config, index_to_time, time_to_index
from .errors import (
    SlotConflictError,
    SlotError,
    SlotNotFoundError,
    SlotOwnerRequiredError,
    SlotValidationError,
)
from .manager import SlotManager, create_slot_manager
from .overlap import is_overlapping, overlap_minutes
from .storage import (
    InMemoryStorageAdapter,
    OrmStorageAdapter,
    RedisStorageAdapter,
    SqlStorageAdapter,
    StorageAdapter,
)
from .types import (
    AvailabilityOptions,
    CreateSlotInput,
    QueryOptions,
    Slot,
    SlotConflict,
    TimeRange,
)
from .validation import validate_slot_input

__all__ = [
    "SlotConfig",
    "get_slot_config",
    "time_to_index",
    "index_to_time",
    "SlotError",
    "SlotValidationError",
    "SlotConflictError",
    "SlotNotFoundError",
    "SlotOwnerRequiredError",
    "SlotManager",
    "create_slot_manager",
    "is_overlapping",
    "overlap_minutes",
    "StorageAdapter",
    "InMemoryStorageAdapter",
    "SqlStorageAdapter",
    "OrmStorageAdapter",
    "RedisStorageAdapter",
    "AvailabilityOptions",
    "CreateSlotInput",
    "QueryOptions",
    "Slot",
    "SlotConflict",
    "TimeRange",
    "validate_slot_input",
]
