"""
codec.py — Stable value ↔ bytes encoding (CBOR default; msgpack selectable).

Design goals
------------
- Round-trip stable across platforms and Python versions.
- Deterministic ordering (canonical CBOR sorts map keys).
- No pickles or dynamic code; only plain maps, arrays and scalars.
- Self-describing header with magic + version + format so stored entries and
  snapshot files can be decoded regardless of the current default.

Formats
-------
Canonical CBOR via `cbor2` is the default. msgpack via `msgspec` can be chosen
with RECSTORE_CODEC=msgpack. The header embeds the format so decoders dispatch
correctly; a store can hold entries written under both.

Wire layout
-----------
Header (6 bytes):
  0..3 : ASCII magic b"RSTO"
  4    : version byte (0x01)
  5    : format byte  (0x01 = CBOR, 0x02 = MSGPACK)
"""
from __future__ import annotations

from typing import Any, Iterable, List, Optional, Tuple

import cbor2
import msgspec.msgpack

from recstore.config import load_config
from recstore.errors import CodecError

MAGIC = b"RSTO"
VERSION = 1
FMT_CBOR = 0x01
FMT_MSGPACK = 0x02

_FORMATS = {"cbor": FMT_CBOR, "msgpack": FMT_MSGPACK}

_MSGPACK_ENC = msgspec.msgpack.Encoder()
_MSGPACK_DEC = msgspec.msgpack.Decoder()


def format_for(name: str) -> int:
    """Format byte for a configured codec name (`cbor` or `msgpack`)."""
    try:
        return _FORMATS[name]
    except KeyError:
        raise CodecError(f"Unknown codec: {name!r}") from None


def default_format() -> int:
    return format_for(load_config().codec)


def _dumps_payload(obj: Any, fmt: int) -> bytes:
    if fmt == FMT_CBOR:
        # canonical=True enforces deterministic map ordering and integer encodings
        return cbor2.dumps(obj, canonical=True)
    if fmt == FMT_MSGPACK:
        return _MSGPACK_ENC.encode(obj)
    raise CodecError(f"Unknown format byte: {fmt!r}")


def _loads_payload(data: bytes, fmt: int) -> Any:
    if fmt == FMT_CBOR:
        return cbor2.loads(data)
    if fmt == FMT_MSGPACK:
        return _MSGPACK_DEC.decode(data)
    raise CodecError(f"Unknown format byte: {fmt!r}")


def _unwrap_header(blob: bytes) -> Tuple[int, bytes]:
    if len(blob) < 6 or blob[:4] != MAGIC:
        raise CodecError("Unrecognized blob (bad magic)", details={"len": len(blob)})
    ver = blob[4]
    if ver != VERSION:
        raise CodecError(f"Unsupported blob version: {ver} (expected {VERSION})")
    return blob[5], blob[6:]


def dumps(obj: Any, *, fmt: Optional[int] = None) -> bytes:
    """Serialize `obj` with a header. `fmt` defaults to the configured codec."""
    f = default_format() if fmt is None else fmt
    try:
        payload = _dumps_payload(obj, f)
    except CodecError:
        raise
    except Exception as e:
        raise CodecError(f"cannot encode {type(obj).__name__}: {e}") from e
    return MAGIC + bytes((VERSION, f)) + payload


def loads(blob: bytes) -> Any:
    fmt, payload = _unwrap_header(bytes(blob))
    try:
        return _loads_payload(payload, fmt)
    except CodecError:
        raise
    except Exception as e:
        raise CodecError(f"cannot decode payload: {e}", details={"format": fmt}) from e


def format_of(blob: bytes) -> int:
    return _unwrap_header(bytes(blob))[0]


# -----------------------------------------------------------------------------
# Snapshot export for record lists
# -----------------------------------------------------------------------------

def dumps_records(records: Iterable[Any], *, fmt: Optional[int] = None) -> bytes:
    """Encode a list() snapshot as [[id, fields], ...]."""
    return dumps([[r.id, dict(r.fields)] for r in records], fmt=fmt)


def loads_records(blob: bytes) -> List[Any]:
    from recstore.core.table import Record

    rows = loads(blob)
    if not isinstance(rows, list):
        raise CodecError("record snapshot must be an array")
    return [Record(row[0], dict(row[1])) for row in rows]


__all__ = [
    "MAGIC",
    "VERSION",
    "FMT_CBOR",
    "FMT_MSGPACK",
    "format_for",
    "default_format",
    "dumps",
    "loads",
    "format_of",
    "dumps_records",
    "loads_records",
]
