from __future__ import annotations

"""
Record schemas: field kinds, normalization on add, invariant checks on adjust.

Field kinds
-----------
text    str; an empty (or whitespace-only) value is replaced by the field's
        placeholder on add, and is an invariant violation on adjust when the
        field has a placeholder or is the natural key. Longer than
        `max_len` characters is rejected with InvalidState on both paths.
count   non-negative int (quantities, years on shelf, stock).
amount  non-negative finite float (prices, salaries).
int     any int (years, signed deltas).
flag    bool.

Numeric policy
--------------
One policy for every count/amount field: negative values are clamped to zero
on add and rejected with InvalidState on adjust. Values that cannot be coerced
to the field kind at all are rejected with InvalidState on both paths.
"""

import math
import reprlib
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from recstore.errors import InvalidState
from recstore.runtime.events_api import MAX_TEXT_LEN

KINDS = ("text", "count", "amount", "int", "flag")


@dataclass(frozen=True)
class FieldSpec:
    name: str
    kind: str
    default: Any = None
    placeholder: Optional[str] = None
    max_len: int = MAX_TEXT_LEN

    def __post_init__(self) -> None:
        if self.kind not in KINDS:
            raise ValueError(f"unknown field kind {self.kind!r} for {self.name!r}")
        if self.placeholder is not None and self.kind != "text":
            raise ValueError(f"placeholder only applies to text fields ({self.name!r})")

    def zero(self) -> Any:
        if self.default is not None:
            return self.default
        return {"text": "", "count": 0, "amount": 0.0, "int": 0, "flag": False}[self.kind]


def _coerce(spec: FieldSpec, value: Any) -> Any:
    try:
        if spec.kind == "text":
            if not isinstance(value, str):
                raise TypeError(type(value).__name__)
            if len(value) > spec.max_len:
                raise ValueError(f"longer than {spec.max_len} characters")
            return value
        if spec.kind in ("count", "int"):
            if isinstance(value, bool) or not isinstance(value, (int, float, str)):
                raise TypeError(type(value).__name__)
            if isinstance(value, float) and not value.is_integer():
                raise ValueError(value)
            return int(value)
        if spec.kind == "amount":
            if isinstance(value, bool):
                raise TypeError("bool")
            v = float(value)
            if not math.isfinite(v):
                raise ValueError(value)
            return v
        return bool(value)
    except (TypeError, ValueError) as e:
        raise InvalidState(
            f"{spec.name}: cannot use {reprlib.repr(value)} as {spec.kind} ({e})",
            field=spec.name,
            value=reprlib.repr(value),
        ) from e


class RecordSchema:
    """Ordered field specs with one natural-key field."""

    def __init__(self, name: str, fields: Sequence[FieldSpec], *, key: str) -> None:
        self.name = name
        self.fields: Tuple[FieldSpec, ...] = tuple(fields)
        self._by_name = {f.name: f for f in self.fields}
        if len(self._by_name) != len(self.fields):
            raise ValueError(f"duplicate field names in schema {name!r}")
        if key not in self._by_name or self._by_name[key].kind != "text":
            raise ValueError(f"key field {key!r} must be a text field of {name!r}")
        self.key = key

    def field_names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def key_of(self, fields: Mapping[str, Any]) -> str:
        return fields[self.key]

    def _check_unknown(self, raw: Mapping[str, Any]) -> None:
        unknown = sorted(set(raw) - set(self._by_name))
        if unknown:
            raise InvalidState(f"unknown field(s) for {self.name}: {', '.join(unknown)}", details={"fields": unknown})

    def normalize(self, raw: Mapping[str, Any]) -> Dict[str, Any]:
        """Fill defaults, coerce kinds, replace empty text, clamp negatives to zero."""
        self._check_unknown(raw)
        out: Dict[str, Any] = {}
        for spec in self.fields:
            value = raw.get(spec.name)
            if value is None:
                value = spec.zero()
            value = _coerce(spec, value)
            if spec.kind == "text" and spec.placeholder is not None and not value.strip():
                value = spec.placeholder
            elif spec.kind in ("count", "amount") and value < 0:
                value = _coerce(spec, 0)
            out[spec.name] = value
        return out

    def validate(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        """Strict check used on adjust; raises InvalidState instead of fixing values."""
        self._check_unknown(fields)
        out: Dict[str, Any] = {}
        for spec in self.fields:
            if spec.name not in fields:
                raise InvalidState(f"{spec.name}: missing", field=spec.name)
            value = _coerce(spec, fields[spec.name])
            if spec.kind == "text" and (spec.placeholder is not None or spec.name == self.key) and not value.strip():
                raise InvalidState(f"{spec.name}: must not be empty", field=spec.name, value=value)
            if spec.kind in ("count", "amount") and value < 0:
                raise InvalidState(f"{spec.name}: must not be negative", field=spec.name, value=value)
            out[spec.name] = value
        return out


__all__ = ["KINDS", "MAX_TEXT_LEN", "FieldSpec", "RecordSchema"]
