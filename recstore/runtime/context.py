"""
recstore.runtime.context — the explicit host handle passed to store operations

Every façade operation receives an `Env` as its first argument instead of
reaching for ambient globals. The host owns the Env (and therefore the storage
backend, the lifecycle manager and the event sink); the store only borrows it
for the duration of one call.

Design notes
------------
- `LedgerInfo` is pure data: the current ledger sequence (the unit TTLs are
  measured in) and a consensus-style timestamp. Both must be non-negative.
- `Env.persist()` is the only path by which the core writes an entry. It
  writes first and touches the lifecycle manager only after the backend has
  accepted the write, so expiry bookkeeping can never mask a failed write.
- `Env.config` governs the TTL pairs, the caps of the default backend and the
  codec that cells and tables write with.
- `Env.transaction()` snapshots storage, expiry and events; any exception
  inside the block restores all three before propagating.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterator, Optional

from recstore.config import StoreConfig, load_config
from recstore.runtime.events_api import EventSink
from recstore.runtime.lifecycle import EntryRef, LifecycleManager, TouchRecord
from recstore.runtime.storage_api import Durability, MemoryBackend, StorageBackend

log = logging.getLogger(__name__)


# ----------------------------- helpers ----------------------------- #

class ContextError(Exception):
    """Validation failure for LedgerInfo / Env construction."""


def _require_non_negative_int(name: str, v: Any) -> int:
    if not isinstance(v, int) or isinstance(v, bool):
        raise ContextError(f"{name} must be int, got {type(v).__name__}")
    if v < 0:
        raise ContextError(f"{name} must be non-negative, got {v}")
    return v


# ----------------------------- models ------------------------------ #

@dataclass(frozen=True)
class LedgerInfo:
    """
    Fields
    ------
    sequence:   Ledger sequence number; TTLs are counted in these ticks.
    timestamp:  Host-provided timestamp (seconds or chain-defined unit).
    """
    sequence: int
    timestamp: int = 0

    def __post_init__(self) -> None:
        _require_non_negative_int("sequence", self.sequence)
        _require_non_negative_int("timestamp", self.timestamp)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "LedgerInfo":
        return cls(
            sequence=_require_non_negative_int("sequence", d.get("sequence", 0)),
            timestamp=_require_non_negative_int("timestamp", d.get("timestamp", 0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class Env:
    """Host handle bundling storage, lifecycle, events and ledger position."""

    def __init__(
        self,
        storage: Optional[StorageBackend] = None,
        *,
        lifecycle: Optional[LifecycleManager] = None,
        events: Optional[EventSink] = None,
        ledger: Optional[LedgerInfo] = None,
        config: Optional[StoreConfig] = None,
    ) -> None:
        self.config = config if config is not None else load_config()
        if storage is None:
            storage = MemoryBackend(
                max_key_bytes=self.config.max_key_bytes,
                max_value_bytes=self.config.max_value_bytes,
                max_entries=self.config.max_entries,
            )
        self.storage: StorageBackend = storage
        self.lifecycle = lifecycle if lifecycle is not None else LifecycleManager()
        self.events = events if events is not None else EventSink()
        self.ledger = ledger if ledger is not None else LedgerInfo(sequence=0)
        self._depth = 0

    # ---- ledger ---- #

    @property
    def now(self) -> int:
        return self.ledger.sequence

    def advance(self, ticks: int = 1, *, seconds_per_tick: int = 5) -> LedgerInfo:
        """Move the ledger forward (hosts and tests simulate time with this)."""
        _require_non_negative_int("ticks", ticks)
        self.ledger = LedgerInfo(
            sequence=self.ledger.sequence + ticks,
            timestamp=self.ledger.timestamp + ticks * seconds_per_tick,
        )
        return self.ledger

    # ---- entry access ---- #

    def read(self, durability: Durability, key: bytes) -> Optional[bytes]:
        return self.storage.get(durability, key)

    def persist(self, durability: Durability, key: bytes, value: bytes) -> TouchRecord:
        """Write an entry, then refresh its expiry with the tier's TTL pair."""
        self.storage.set(durability, key, value)
        return self.extend_ttl(durability, key)

    def extend_ttl(
        self,
        durability: Durability,
        key: bytes,
        min_ttl: Optional[int] = None,
        extend_to: Optional[int] = None,
    ) -> TouchRecord:
        d_min, d_ext = self.config.ttl_for(durability)
        return self.lifecycle.touch(
            EntryRef(Durability(durability), bytes(key)),
            d_min if min_ttl is None else min_ttl,
            d_ext if extend_to is None else extend_to,
            self.now,
        )

    def erase(self, durability: Durability, key: bytes) -> None:
        self.storage.delete(durability, key)
        self.lifecycle.forget(EntryRef(Durability(durability), bytes(key)))

    # ---- atomicity ---- #

    @contextmanager
    def transaction(self, op: str = "op") -> Iterator["Env"]:
        """
        Run a block atomically. Nested transactions join the outer one's
        journal entry so a failure anywhere unwinds the whole call.
        """
        if self._depth:
            self._depth += 1
            try:
                yield self
            finally:
                self._depth -= 1
            return

        life_snap = self.lifecycle.snapshot()
        ev_mark = self.events.snapshot()
        self.storage.begin()
        self._depth = 1
        try:
            yield self
        except BaseException as e:
            self.storage.rollback()
            self.lifecycle.restore(life_snap)
            self.events.restore(ev_mark)
            log.warning("transaction %s rolled back: %s", op, e)
            raise
        else:
            self.storage.commit()
        finally:
            self._depth = 0

    # ---- persistence (CLI state files) ---- #

    def to_state(self) -> Dict[str, Any]:
        dump = getattr(self.storage, "dump", None)
        if not callable(dump):
            raise ContextError("storage backend does not support dump()")
        return {
            "ledger": self.ledger.to_dict(),
            "entries": dump(),
            "expiry": self.lifecycle.dump(),
        }

    @classmethod
    def from_state(cls, state: Dict[str, Any], *, config: Optional[StoreConfig] = None) -> "Env":
        env = cls(ledger=LedgerInfo.from_dict(state.get("ledger") or {}), config=config)
        env.storage.load(state.get("entries") or [])  # type: ignore[attr-defined]
        env.lifecycle.load(state.get("expiry") or [])
        return env


__all__ = [
    "ContextError",
    "LedgerInfo",
    "Env",
]
