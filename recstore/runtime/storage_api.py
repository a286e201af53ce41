"""
recstore.runtime.storage_api — host hooks for byte-keyed entry storage.

This module provides the storage primitives that value cells and record
tables are built on.

Design goals
------------
- Deterministic: pure functions over (durability, key, value) with no
  wall-clock or I/O.
- Simple default: in-process memory backend for local runs & tests.
- Pluggable: a tiny backend interface so the host can swap in a real state DB.
- Safe: strict byte-length caps and an optional entry capacity; refusals
  surface as WriteRejected and leave the backend untouched.
- Journaled: begin/commit/rollback so a failed operation can be undone.

Durability tiers
----------------
Entries live in one of three namespaces, each with its own TTL defaults:

- instance    store-wide metadata (init markers, counters)
- persistent  long-lived data (record tables)
- temporary   scratch values that are expected to lapse quickly
"""

from __future__ import annotations

import enum
import logging
import threading
from typing import Dict, Iterator, List, Optional, Protocol, Tuple, runtime_checkable

from recstore.config import load_config
from recstore.errors import WriteRejected

log = logging.getLogger(__name__)


class Durability(str, enum.Enum):
    INSTANCE = "instance"
    PERSISTENT = "persistent"
    TEMPORARY = "temporary"


EntryKey = Tuple[str, bytes]


# ---------------------------- Backend API ---------------------------- #


@runtime_checkable
class StorageBackend(Protocol):
    """Minimal backend interface for entry storage."""

    def get(self, durability: Durability, key: bytes) -> Optional[bytes]: ...
    def set(self, durability: Durability, key: bytes, value: bytes) -> None: ...
    def delete(self, durability: Durability, key: bytes) -> None: ...
    def exists(self, durability: Durability, key: bytes) -> bool: ...
    def begin(self) -> None: ...
    def commit(self) -> None: ...
    def rollback(self) -> None: ...


def _ensure_bytes(name: str, value: object) -> bytes:
    if not isinstance(value, (bytes, bytearray)):
        raise TypeError(f"{name} must be bytes, got {type(value).__name__}")
    return bytes(value)


class MemoryBackend:
    """
    Thread-safe in-memory backend for local runs and tests.

    Parameters
    ----------
    max_key_bytes, max_value_bytes : int | None
        Size caps; default to the values in recstore.config.
    max_entries : int | None
        Maximum number of live entries across all tiers (0 = unbounded).
    read_only : bool
        Reject every write. Hosts use this for view-only invocations.
    """

    def __init__(
        self,
        *,
        max_key_bytes: Optional[int] = None,
        max_value_bytes: Optional[int] = None,
        max_entries: Optional[int] = None,
        read_only: bool = False,
    ) -> None:
        cfg = load_config()
        self.max_key_bytes = cfg.max_key_bytes if max_key_bytes is None else max_key_bytes
        self.max_value_bytes = cfg.max_value_bytes if max_value_bytes is None else max_value_bytes
        self.max_entries = cfg.max_entries if max_entries is None else max_entries
        self.read_only = read_only
        self._store: Dict[EntryKey, bytes] = {}
        self._journal: List[Dict[EntryKey, bytes]] = []
        self._lock = threading.RLock()

    # --------------------------- validation --------------------------- #

    def _key(self, durability: Durability, key: bytes) -> EntryKey:
        bkey = _ensure_bytes("key", key)
        if len(bkey) == 0:
            raise ValueError("storage key must be non-empty")
        return (Durability(durability).value, bkey)

    def _check_write(self, ekey: EntryKey, value: bytes) -> None:
        if self.read_only:
            raise WriteRejected("backend is read-only", reason="read_only")
        if len(ekey[1]) > self.max_key_bytes:
            raise WriteRejected(
                f"storage key too long (>{self.max_key_bytes} bytes)",
                reason="key_too_long",
                details={"len": len(ekey[1])},
            )
        if len(value) > self.max_value_bytes:
            raise WriteRejected(
                f"storage value too large (>{self.max_value_bytes} bytes)",
                reason="value_too_large",
                details={"len": len(value)},
            )
        if self.max_entries and ekey not in self._store and len(self._store) >= self.max_entries:
            raise WriteRejected(
                "storage capacity exhausted",
                reason="capacity",
                details={"max_entries": self.max_entries},
            )

    # ----------------------------- entries ---------------------------- #

    def get(self, durability: Durability, key: bytes) -> Optional[bytes]:
        with self._lock:
            return self._store.get(self._key(durability, key))

    def set(self, durability: Durability, key: bytes, value: bytes) -> None:
        bval = _ensure_bytes("value", value)
        with self._lock:
            ekey = self._key(durability, key)
            try:
                self._check_write(ekey, bval)
            except WriteRejected as e:
                log.warning("storage write rejected tier=%s key=%r: %s", ekey[0], ekey[1], e.message)
                raise
            self._store[ekey] = bval

    def delete(self, durability: Durability, key: bytes) -> None:
        """Delete `key` if present (no-op otherwise)."""
        with self._lock:
            ekey = self._key(durability, key)
            if self.read_only:
                raise WriteRejected("backend is read-only", reason="read_only")
            self._store.pop(ekey, None)

    def exists(self, durability: Durability, key: bytes) -> bool:
        with self._lock:
            return self._key(durability, key) in self._store

    def keys(self) -> Iterator[EntryKey]:
        with self._lock:
            return iter(sorted(self._store))

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    # ---------------------------- journaling --------------------------- #

    def begin(self) -> None:
        with self._lock:
            self._journal.append(dict(self._store))

    def commit(self) -> None:
        with self._lock:
            if not self._journal:
                raise RuntimeError("commit without begin")
            self._journal.pop()

    def rollback(self) -> None:
        with self._lock:
            if not self._journal:
                raise RuntimeError("rollback without begin")
            self._store = self._journal.pop()

    # ---------------------------- snapshots ---------------------------- #

    def dump(self) -> List[List[object]]:
        """Return all entries as sorted [tier, key, value] triples."""
        with self._lock:
            return [[tier, key, value] for (tier, key), value in sorted(self._store.items())]

    def load(self, entries: List[List[object]]) -> None:
        """Replace the backend contents with triples produced by dump()."""
        restored: Dict[EntryKey, bytes] = {}
        for tier, key, value in entries:
            restored[self._key(Durability(tier), key)] = _ensure_bytes("value", value)  # type: ignore[arg-type]
        with self._lock:
            self._store = restored
            self._journal.clear()


__all__ = [
    "Durability",
    "EntryKey",
    "StorageBackend",
    "MemoryBackend",
]
