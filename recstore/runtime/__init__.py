"""
recstore runtime package

Host-facing pieces the store is embedded in: the storage backend, expiry
bookkeeping, the event sink, and the Env handle that bundles them.

    from recstore.runtime import Env, LedgerInfo, MemoryBackend, LifecycleManager
"""

from __future__ import annotations

from . import events_api as events
from . import storage_api as storage
from .context import Env, LedgerInfo
from .events_api import Event, EventSink
from .lifecycle import EntryRef, ExpiryMeta, LifecycleManager, TouchRecord
from .storage_api import Durability, MemoryBackend, StorageBackend

__all__ = [
    "Env",
    "LedgerInfo",
    "Durability",
    "MemoryBackend",
    "StorageBackend",
    "EntryRef",
    "ExpiryMeta",
    "LifecycleManager",
    "TouchRecord",
    "Event",
    "EventSink",
    "events",
    "storage",
]
