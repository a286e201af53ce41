from __future__ import annotations

"""
Value cell: one named slot with default-on-miss reads.

Absence is a normal state. `get(default)` never fails on a missing entry; the
caller always says what "unset" means. Every write goes through Env.persist(),
which refreshes the entry's expiry after the backend accepts it.
"""

import logging
from typing import Any, Optional

from recstore.core import codec
from recstore.errors import NotFound
from recstore.runtime.context import Env
from recstore.runtime.lifecycle import EntryRef, TouchRecord
from recstore.runtime.storage_api import Durability

log = logging.getLogger(__name__)


class ValueCell:
    def __init__(self, env: Env, key: bytes, *, durability: Durability = Durability.INSTANCE) -> None:
        self.env = env
        self.key = bytes(key)
        self.durability = Durability(durability)

    @property
    def ref(self) -> EntryRef:
        return EntryRef(self.durability, self.key)

    def present(self) -> bool:
        return self.env.storage.exists(self.durability, self.key)

    def get(self, default: Any) -> Any:
        """Stored value if present, else `default`."""
        raw = self.env.read(self.durability, self.key)
        if raw is None:
            return default
        return codec.loads(raw)

    def set(self, value: Any) -> TouchRecord:
        blob = codec.dumps(value, fmt=codec.format_for(self.env.config.codec))
        touch = self.env.persist(self.durability, self.key, blob)
        log.debug("cell %s set", self.ref.label())
        return touch

    # Same behavior as set(); callers use it to say "back to the initial value".
    reset = set

    def increment(self, delta: int = 1, default: int = 0) -> int:
        with self.env.transaction("cell.increment"):
            new = self.get(default) + delta
            self.set(new)
        return new

    def clear(self) -> None:
        self.env.erase(self.durability, self.key)

    def extend_ttl(self, min_ttl: Optional[int] = None, extend_to: Optional[int] = None) -> TouchRecord:
        if not self.present():
            raise NotFound("cannot extend TTL of an absent entry", key=self.ref.label())
        return self.env.extend_ttl(self.durability, self.key, min_ttl, extend_to)


__all__ = ["ValueCell"]
