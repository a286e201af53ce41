from __future__ import annotations
"""
recstore.runtime.lifecycle
==========================

Expiry bookkeeping for stored entries.

This module provides:
- `EntryRef`: identifies one stored entry (durability tier + key).
- `ExpiryMeta`: the (min_remaining_ttl, extend_to) pair requested on a touch.
- `LifecycleManager`: tracks each entry's `live_until` ledger sequence and
  extends it after writes.

Expiry is measured in ledger ticks, never wall-clock time. The manager is
purely advisory: it does not delete anything. Hosts ask `expired(now)` and
decide what to do with lapsed entries.

Rules
-----
- A touch extends `live_until` to `now + extend_to` only when the remaining
  TTL is below `min_remaining_ttl` (or the entry was never tracked).
- `live_until` only moves forward.
- `extend_to < min_remaining_ttl` is rejected with InvalidState.
- Every touch is appended to `touches` so callers can audit which writes
  refreshed which entries.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple
import logging

from recstore.errors import InvalidState
from recstore.runtime.storage_api import Durability

log = logging.getLogger(__name__)


@dataclass(frozen=True, order=True)
class EntryRef:
    durability: Durability
    key: bytes

    def label(self) -> str:
        return f"{self.durability.value}:{self.key.decode('utf-8', errors='replace')}"


@dataclass(frozen=True)
class ExpiryMeta:
    """
    min_remaining_ttl:
        Extend only when fewer than this many ticks remain.

    extend_to:
        New TTL (from `now`) applied when an extension happens.
    """
    min_remaining_ttl: int
    extend_to: int

    def __post_init__(self) -> None:
        for name in ("min_remaining_ttl", "extend_to"):
            v = getattr(self, name)
            if not isinstance(v, int) or isinstance(v, bool) or v < 0:
                raise InvalidState(f"{name} must be a non-negative int", field=name, value=v)
        if self.extend_to < self.min_remaining_ttl:
            raise InvalidState(
                "extend_to must be >= min_remaining_ttl",
                details={"min_remaining_ttl": self.min_remaining_ttl, "extend_to": self.extend_to},
            )


@dataclass(frozen=True)
class TouchRecord:
    ref: EntryRef
    now: int
    meta: ExpiryMeta
    live_until_before: Optional[int]
    live_until_after: int

    @property
    def extended(self) -> bool:
        return self.live_until_before != self.live_until_after


class LifecycleManager:
    """Tracks `live_until` per entry and records every touch."""

    def __init__(self) -> None:
        self._live_until: Dict[EntryRef, int] = {}
        self.touches: List[TouchRecord] = []

    def touch(self, ref: EntryRef, min_ttl: int, extend_to: int, now: int) -> TouchRecord:
        meta = ExpiryMeta(min_ttl, extend_to)
        before = self._live_until.get(ref)
        if before is not None and before - now >= meta.min_remaining_ttl:
            after = before
        else:
            after = max(before or 0, now + meta.extend_to)
        self._live_until[ref] = after
        rec = TouchRecord(ref=ref, now=now, meta=meta, live_until_before=before, live_until_after=after)
        self.touches.append(rec)
        log.debug("touch %s now=%d live_until %s -> %d", ref.label(), now, before, after)
        return rec

    def live_until(self, ref: EntryRef) -> Optional[int]:
        return self._live_until.get(ref)

    def remaining(self, ref: EntryRef, now: int) -> Optional[int]:
        lu = self._live_until.get(ref)
        if lu is None:
            return None
        return max(0, lu - now)

    def is_live(self, ref: EntryRef, now: int) -> bool:
        lu = self._live_until.get(ref)
        return lu is not None and now <= lu

    def expired(self, now: int) -> List[EntryRef]:
        """Entries whose `live_until` is strictly before `now`, sorted."""
        return sorted(ref for ref, lu in self._live_until.items() if lu < now)

    def forget(self, ref: EntryRef) -> None:
        self._live_until.pop(ref, None)

    def touches_for(self, ref: EntryRef) -> List[TouchRecord]:
        return [t for t in self.touches if t.ref == ref]

    # -- transaction support ------------------------------------------------

    def snapshot(self) -> Tuple[Dict[EntryRef, int], int]:
        return dict(self._live_until), len(self.touches)

    def restore(self, snap: Tuple[Dict[EntryRef, int], int]) -> None:
        live, n_touches = snap
        self._live_until = dict(live)
        del self.touches[n_touches:]

    # -- persistence --------------------------------------------------------

    def dump(self) -> List[List[Any]]:
        return [[ref.durability.value, ref.key, lu] for ref, lu in sorted(self._live_until.items())]

    def load(self, rows: List[List[Any]]) -> None:
        self._live_until = {
            EntryRef(Durability(tier), bytes(key)): int(lu) for tier, key, lu in rows
        }
        self.touches.clear()


__all__ = ["EntryRef", "ExpiryMeta", "TouchRecord", "LifecycleManager"]
