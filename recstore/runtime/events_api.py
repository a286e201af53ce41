from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Tuple

from recstore.errors import StoreError

# Basic bounds (kept generous; tests only check that we *validate*).
MAX_EVENT_NAME_BYTES = 64
MAX_KEY_LEN = 64
MAX_TEXT_LEN = 4096

# Keys must be identifier-like: letters/underscore, then letters/digits/underscore.
_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class EventError(StoreError):
    code = "STORE_EVENT_INVALID"


@dataclass(frozen=True)
class Event:
    """Representation of an event emitted by a store operation."""

    name: bytes
    args: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name.decode("utf-8", errors="replace"),
            "args": {k: ("0x" + v.hex() if isinstance(v, bytes) else v) for k, v in self.args.items()},
        }


class EventSink:
    """Ordered event list owned by one Env."""

    def __init__(self) -> None:
        self._events: List[Event] = []

    # --- Validation helpers -------------------------------------------------

    def _check_name(self, name: Any) -> bytes:
        if not isinstance(name, (bytes, bytearray)):
            raise EventError("event name must be bytes", details={"where": "name_type"})
        b = bytes(name)
        if len(b) == 0:
            raise EventError("event name must be non-empty", details={"where": "name_empty"})
        if len(b) > MAX_EVENT_NAME_BYTES:
            raise EventError("event name too long", details={"where": "name_length", "len": len(b)})
        return b

    def _check_key(self, key: Any) -> str:
        if isinstance(key, (bytes, bytearray)):
            key = bytes(key).decode("ascii", errors="replace")
        if not isinstance(key, str) or not _KEY_RE.match(key) or len(key) > MAX_KEY_LEN:
            raise EventError("event key has invalid characters", details={"where": "key_grammar", "key": str(key)})
        return key

    def _check_value(self, value: Any) -> Any:
        if isinstance(value, (bytes, bytearray)):
            value = bytes(value)
        if isinstance(value, (bytes, str)):
            if len(value) > MAX_TEXT_LEN:
                raise EventError("event arg too long", details={"where": "value_length", "len": len(value)})
            return value
        # bool is a subclass of int; both pass through unchanged.
        if isinstance(value, (bool, int, float)) or value is None:
            return value
        raise EventError(
            "unsupported event arg type",
            details={"where": "value_type", "py_type": type(value).__name__},
        )

    # --- Core sink operations -----------------------------------------------

    def emit(self, name: bytes, args: Mapping[Any, Any]) -> Event:
        bname = self._check_name(name)
        if not isinstance(args, Mapping):
            raise EventError("event args must be a mapping", details={"where": "args_type"})
        checked = {self._check_key(k): self._check_value(v) for k, v in args.items()}
        ev = Event(bname, checked)
        self._events.append(ev)
        return ev

    def events(self) -> Tuple[Event, ...]:
        # Expose a stable snapshot
        return tuple(self._events)

    def names(self) -> List[bytes]:
        return [e.name for e in self._events]

    def clear(self) -> None:
        self._events.clear()

    def snapshot(self) -> int:
        return len(self._events)

    def restore(self, mark: int) -> None:
        del self._events[mark:]


__all__ = [
    "Event",
    "EventError",
    "EventSink",
    "MAX_EVENT_NAME_BYTES",
    "MAX_KEY_LEN",
    "MAX_TEXT_LEN",
]
