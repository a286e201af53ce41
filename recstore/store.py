"""
recstore.store — the public operation set over value cells and record tables.

Two façades:

- `RecordStore(schema, name)`: initialize / add / find_by_key / remove_by_key /
  list / count / adjust over one record table, keyed by the schema's natural
  key.
- `CounterStore(name)`: initialize / get / increment / reset over one value
  cell.

Every operation takes the host's `Env` as its first argument. Mutating
operations run inside `env.transaction()`, so any failure (validation,
duplicate key, rejected write) leaves storage, expiry and events exactly as
they were before the call.

Policies
--------
- initialize() may run once per store; a second call raises AlreadyInitialized
  whether or not the store holds records.
- Every other operation raises Uninitialized before initialize().
- Natural keys are unique: add() with an existing key raises DuplicateKey.
- add() normalizes (placeholder for empty text, zero for negative numbers);
  adjust() validates and raises InvalidState instead.
- Lookups compare keys exactly, with no case or whitespace folding.

Id policy
---------
`id_policy="ordinal"` gives each record an auto-allocated int id (1, 2, ...),
never reused after removal. `id_policy="natural"` uses the natural key itself
as the record id, so the table's own explicit-key check rejects collisions.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping

from recstore.core.cell import ValueCell
from recstore.core.schema import RecordSchema
from recstore.core.table import Predicate, Record, RecordTable
from recstore.errors import AlreadyInitialized, DuplicateKey, InvalidState, NotFound, Uninitialized
from recstore.runtime.context import Env
from recstore.runtime.storage_api import Durability

log = logging.getLogger(__name__)

Mutation = Callable[[Dict[str, Any]], Mapping[str, Any]]

ID_POLICIES = ("ordinal", "natural")


class RecordStore:
    def __init__(self, schema: RecordSchema, name: str, *, id_policy: str = "ordinal") -> None:
        if id_policy not in ID_POLICIES:
            raise ValueError(f"id_policy must be one of {ID_POLICIES}, got {id_policy!r}")
        self.schema = schema
        self.name = name
        self.id_policy = id_policy

    # ---- handles (fresh per call) ---- #

    def _table(self, env: Env) -> RecordTable:
        return RecordTable(env, self.name)

    def _marker(self, env: Env) -> ValueCell:
        return ValueCell(env, f"{self.name}:init".encode("utf-8"), durability=Durability.INSTANCE)

    def _event(self, suffix: str) -> bytes:
        return f"{self.name}.{suffix}".encode("utf-8")

    def _match(self, key: str) -> Predicate:
        field = self.schema.key
        return lambda rec: rec.fields.get(field) == key

    def _require_init(self, env: Env, op: str) -> None:
        if not self._marker(env).present():
            raise Uninitialized(store=self.name, op=op)

    def _bump_instance(self, env: Env) -> None:
        marker = self._marker(env)
        env.extend_ttl(marker.durability, marker.key)

    def is_initialized(self, env: Env) -> bool:
        return self._marker(env).present()

    # ---- lifecycle ---- #

    def initialize(self, env: Env) -> None:
        with env.transaction(f"{self.name}.initialize"):
            marker = self._marker(env)
            if marker.present():
                raise AlreadyInitialized(store=self.name)
            self._table(env).create()
            marker.set(True)
            env.events.emit(self._event("initialized"), {})
        log.info("store %s initialized at ledger %d", self.name, env.now)

    # ---- writes ---- #

    def add(self, env: Env, **fields: Any) -> Record:
        with env.transaction(f"{self.name}.add"):
            self._require_init(env, "add")
            norm = self.schema.normalize(fields)
            key = self.schema.key_of(norm)
            table = self._table(env)
            if self.id_policy == "natural":
                try:
                    rid = table.append(norm, key=key)
                except DuplicateKey as e:
                    raise DuplicateKey(f"{self.schema.name} {key!r} already exists", key=key) from e
            else:
                if table.find(self._match(key)) is not None:
                    raise DuplicateKey(f"{self.schema.name} {key!r} already exists", key=key)
                rid = table.append(norm)
            self._bump_instance(env)
            env.events.emit(self._event("added"), {"key": key, "id": rid})
        return Record(rid, norm)

    def remove_by_key(self, env: Env, key: str) -> Record:
        with env.transaction(f"{self.name}.remove"):
            self._require_init(env, "remove_by_key")
            try:
                rec = self._table(env).remove(self._match(key))
            except NotFound as e:
                raise NotFound(f"{self.schema.name} {key!r} not found", key=key) from e
            self._bump_instance(env)
            env.events.emit(self._event("removed"), {"key": key, "id": rec.id})
        return rec

    def adjust(self, env: Env, key: str, mutation: Mutation) -> Record:
        """
        Load the record for `key`, apply `mutation` to a copy of its fields and
        store the result in place. The mutation must not change the natural key.
        """
        with env.transaction(f"{self.name}.adjust"):
            self._require_init(env, "adjust")
            table = self._table(env)
            pos = table.position(self._match(key))
            if pos is None:
                raise NotFound(f"{self.schema.name} {key!r} not found", key=key)
            current = table.all()[pos]
            proposed = mutation(dict(current.fields))
            new_fields = self.schema.validate(proposed)
            if self.schema.key_of(new_fields) != key:
                raise InvalidState(
                    f"{self.schema.key} cannot change on adjust",
                    field=self.schema.key,
                    value=self.schema.key_of(new_fields),
                )
            rec = table.replace(pos, new_fields)
            self._bump_instance(env)
            env.events.emit(self._event("adjusted"), {"key": key, "id": rec.id})
        return rec

    def update(self, env: Env, key: str, **changes: Any) -> Record:
        return self.adjust(env, key, lambda f: {**f, **changes})

    # ---- reads ---- #

    def find_by_key(self, env: Env, key: str) -> Record:
        self._require_init(env, "find_by_key")
        rec = self._table(env).find(self._match(key))
        if rec is None:
            raise NotFound(f"{self.schema.name} {key!r} not found", key=key)
        return rec

    def find_where(self, env: Env, predicate: Predicate) -> List[Record]:
        self._require_init(env, "find_where")
        return [r for r in self._table(env).all() if predicate(r)]

    def list(self, env: Env) -> List[Record]:
        self._require_init(env, "list")
        return self._table(env).all()

    def count(self, env: Env) -> int:
        self._require_init(env, "count")
        return self._table(env).count()


class CounterStore:
    """A single non-negative integer cell with explicit initialization."""

    def __init__(self, name: str = "counter") -> None:
        self.name = name

    def _cell(self, env: Env) -> ValueCell:
        return ValueCell(env, f"{self.name}:value".encode("utf-8"), durability=Durability.INSTANCE)

    def _require_init(self, env: Env, op: str) -> ValueCell:
        cell = self._cell(env)
        if not cell.present():
            raise Uninitialized(store=self.name, op=op)
        return cell

    def initialize(self, env: Env) -> None:
        with env.transaction(f"{self.name}.initialize"):
            cell = self._cell(env)
            if cell.present():
                raise AlreadyInitialized(store=self.name)
            cell.set(0)
            env.events.emit(f"{self.name}.initialized".encode("utf-8"), {})
        log.info("counter %s initialized at ledger %d", self.name, env.now)

    def get(self, env: Env) -> int:
        return self._require_init(env, "get").get(0)

    def increment(self, env: Env, delta: int = 1) -> int:
        if isinstance(delta, bool) or not isinstance(delta, int):
            raise InvalidState("delta must be int", field="delta", value=repr(delta))
        with env.transaction(f"{self.name}.increment"):
            new = self._require_init(env, "increment").increment(delta, 0)
            if new < 0:
                raise InvalidState("counter cannot go below zero", field="value", value=new)
            env.events.emit(f"{self.name}.incremented".encode("utf-8"), {"new": new})
        return new

    def reset(self, env: Env, value: int = 0) -> int:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise InvalidState("counter value must be a non-negative int", field="value", value=repr(value))
        with env.transaction(f"{self.name}.reset"):
            self._require_init(env, "reset").reset(value)
            env.events.emit(f"{self.name}.reset".encode("utf-8"), {"value": value})
        return value


__all__ = ["RecordStore", "CounterStore", "Mutation", "ID_POLICIES"]
