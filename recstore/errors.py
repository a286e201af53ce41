from __future__ import annotations
# recstore/errors.py
"""
Error types for the record store. These are lightweight, serializable, and
safe to surface to a host (CLI, RPC, logs).

Exports:
- StoreError (base)
- NotFound
- AlreadyInitialized
- Uninitialized
- DuplicateKey
- InvalidState
- WriteRejected
- CodecError
"""


from typing import Any, Dict, Mapping, Optional
import json


class StoreError(Exception):
    """Base class for record-store errors."""

    code: str = "STORE_ERROR"

    def __init__(self, message: str = "", *, details: Optional[Mapping[str, Any]] = None) -> None:
        self.message = message or self.__class__.__name__
        self.details = dict(details or {})
        super().__init__(self.__str__())

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.details:
            try:
                packed = json.dumps(self.details, sort_keys=True, separators=(",", ":"), default=str)
            except Exception:
                packed = str(self.details)
            return f"{self.code}: {self.message} [{packed}]"
        return f"{self.code}: {self.message}"


class NotFound(StoreError):
    """A key was absent on a read, update or delete path."""
    code = "STORE_NOT_FOUND"

    def __init__(
        self,
        message: str = "not found",
        *,
        key: Optional[Any] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        if key is not None:
            d.setdefault("key", key)
        super().__init__(message, details=d)


class AlreadyInitialized(StoreError):
    """`initialize()` was called on a store that has already been initialized."""
    code = "STORE_ALREADY_INIT"

    def __init__(
        self,
        *,
        store: str,
        message: str = "store already initialized",
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        d["store"] = store
        super().__init__(message, details=d)


class Uninitialized(StoreError):
    """An operation ran before the host called `initialize()`."""
    code = "STORE_UNINITIALIZED"

    def __init__(
        self,
        *,
        store: str,
        op: Optional[str] = None,
        message: str = "store not initialized",
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        d["store"] = store
        if op is not None:
            d["op"] = op
        super().__init__(message, details=d)


class DuplicateKey(StoreError):
    """An explicit or natural key collides with an existing record."""
    code = "STORE_DUPLICATE_KEY"

    def __init__(
        self,
        message: str = "duplicate key",
        *,
        key: Optional[Any] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        if key is not None:
            d.setdefault("key", key)
        super().__init__(message, details=d)


class InvalidState(StoreError):
    """
    A mutation would violate a field invariant (negative quantity, empty key,
    changed identity) or a lifecycle request is malformed.
    """
    code = "STORE_INVALID_STATE"

    def __init__(
        self,
        message: str = "invalid state",
        *,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        if field is not None:
            d["field"] = field
        if value is not None:
            d["value"] = value
        super().__init__(message, details=d)


class WriteRejected(StoreError):
    """The storage backend refused a write (read-only, capacity, size cap)."""
    code = "STORE_WRITE_REJECTED"

    def __init__(
        self,
        message: str = "write rejected",
        *,
        reason: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        if reason is not None:
            d["reason"] = reason
        super().__init__(message, details=d)


class CodecError(StoreError):
    """A stored blob or snapshot could not be encoded or decoded."""
    code = "STORE_CODEC_ERROR"


__all__ = [
    "StoreError",
    "NotFound",
    "AlreadyInitialized",
    "Uninitialized",
    "DuplicateKey",
    "InvalidState",
    "WriteRejected",
    "CodecError",
]
