from __future__ import annotations

"""
Record table: an insertion-ordered sequence of records stored as one entry.

Stored layout (codec-encoded map):

    {"next_id": int, "rows": [[id, {field: value, ...}], ...]}

Lookups are linear first-match scans in insertion order. Removal shifts every
later record down by one position, so positions are not stable across
removals while ids are. The table knows nothing about natural keys or field
invariants; the store façade enforces those.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from recstore.core import codec
from recstore.errors import CodecError, DuplicateKey, NotFound
from recstore.runtime.context import Env
from recstore.runtime.lifecycle import EntryRef, TouchRecord
from recstore.runtime.storage_api import Durability

log = logging.getLogger(__name__)

RecordId = Union[int, str]


@dataclass(frozen=True)
class Record:
    id: RecordId
    fields: Dict[str, Any] = field(default_factory=dict)

    def __getitem__(self, name: str) -> Any:
        return self.fields[name]

    def copy(self) -> "Record":
        return Record(self.id, dict(self.fields))

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, **self.fields}


Predicate = Callable[[Record], bool]


class RecordTable:
    def __init__(self, env: Env, name: str, *, durability: Durability = Durability.PERSISTENT) -> None:
        self.env = env
        self.name = name
        self.key = f"{name}:table".encode("utf-8")
        self.durability = Durability(durability)

    @property
    def ref(self) -> EntryRef:
        return EntryRef(self.durability, self.key)

    # ---- raw state ---- #

    def _load(self) -> Dict[str, Any]:
        raw = self.env.read(self.durability, self.key)
        if raw is None:
            return {"next_id": 1, "rows": []}
        state = codec.loads(raw)
        if not isinstance(state, dict) or "rows" not in state or "next_id" not in state:
            raise CodecError("corrupt table entry", details={"table": self.name})
        return state

    def _save(self, state: Mapping[str, Any]) -> TouchRecord:
        blob = codec.dumps(dict(state), fmt=codec.format_for(self.env.config.codec))
        return self.env.persist(self.durability, self.key, blob)

    def exists(self) -> bool:
        return self.env.storage.exists(self.durability, self.key)

    def create(self) -> TouchRecord:
        """Write an empty table (overwrites; the façade guards re-initialization)."""
        return self._save({"next_id": 1, "rows": []})

    # ---- queries ---- #

    def _records(self) -> List[Record]:
        return [Record(row[0], dict(row[1])) for row in self._load()["rows"]]

    def position(self, predicate: Predicate) -> Optional[int]:
        for i, rec in enumerate(self._records()):
            if predicate(rec):
                return i
        return None

    def find(self, predicate: Predicate) -> Optional[Record]:
        for rec in self._records():
            if predicate(rec):
                return rec
        return None

    def all(self) -> List[Record]:
        return self._records()

    def count(self) -> int:
        return len(self._load()["rows"])

    # ---- mutations ---- #

    def append(self, fields: Mapping[str, Any], key: Optional[RecordId] = None) -> RecordId:
        state = self._load()
        if key is None:
            rid: RecordId = int(state["next_id"])
            state["next_id"] = rid + 1
        else:
            if any(row[0] == key for row in state["rows"]):
                raise DuplicateKey(key=key, details={"table": self.name})
            rid = key
        state["rows"].append([rid, dict(fields)])
        self._save(state)
        log.debug("table %s append id=%r", self.name, rid)
        return rid

    def replace(self, index: int, fields: Mapping[str, Any]) -> Record:
        state = self._load()
        rows = state["rows"]
        if not 0 <= index < len(rows):
            raise NotFound("no record at position", key=index, details={"table": self.name})
        rows[index] = [rows[index][0], dict(fields)]
        self._save(state)
        return Record(rows[index][0], dict(fields))

    def remove(self, predicate: Predicate) -> Record:
        """Remove the first match; later records shift down one position."""
        index = self.position(predicate)
        if index is None:
            raise NotFound("no matching record", details={"table": self.name})
        state = self._load()
        row = state["rows"].pop(index)
        self._save(state)
        log.debug("table %s remove id=%r", self.name, row[0])
        return Record(row[0], dict(row[1]))


__all__ = ["Record", "RecordId", "Predicate", "RecordTable"]
