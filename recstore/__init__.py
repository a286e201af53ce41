"""
recstore — persistent keyed record store for a contract-style host runtime.

This module exposes a small, stable façade so host code can rely on a
consistent API:

- __version__ / version(): semantic version string
- Env, LedgerInfo: the explicit host handle passed into every operation
- RecordStore, CounterStore: the public operation sets
- RecordSchema, FieldSpec: record shapes with normalization/validation rules
- ValueCell, RecordTable, Record: lower-level building blocks
- the error taxonomy (StoreError and subclasses)

Typical use:

    from recstore import Env
    from recstore.examples import library

    env = Env()
    library.initialize(env)
    library.add_book(env, "1984", "Orwell", 1949)
    library.get_book(env, "1984")
"""

from __future__ import annotations

from .version import __version__ as __version__
from .core.cell import ValueCell
from .core.schema import FieldSpec, RecordSchema
from .core.table import Record, RecordTable
from .errors import (
    AlreadyInitialized,
    CodecError,
    DuplicateKey,
    InvalidState,
    NotFound,
    StoreError,
    Uninitialized,
    WriteRejected,
)
from .runtime.context import Env, LedgerInfo
from .runtime.storage_api import Durability, MemoryBackend
from .store import CounterStore, RecordStore


def version() -> str:
    """Return the recstore semantic version string."""
    return __version__


__all__ = [
    "__version__",
    "version",
    "Env",
    "LedgerInfo",
    "Durability",
    "MemoryBackend",
    "RecordStore",
    "CounterStore",
    "RecordSchema",
    "FieldSpec",
    "ValueCell",
    "RecordTable",
    "Record",
    "StoreError",
    "NotFound",
    "AlreadyInitialized",
    "Uninitialized",
    "DuplicateKey",
    "InvalidState",
    "WriteRejected",
    "CodecError",
]
