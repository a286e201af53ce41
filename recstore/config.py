"""
recstore.config — TTL defaults per durability tier, storage caps, codec choice.

This module centralizes configuration for the record store. It has NO
third-party deps and is safe to import very early.

Configuration precedence:
  1) Environment variables (RECSTORE_*)
  2) Hardcoded safe defaults below

Key env vars:
  - RECSTORE_INSTANCE_MIN_TTL      (int)    default: 50
  - RECSTORE_INSTANCE_EXTEND_TO    (int)    default: 100
  - RECSTORE_PERSISTENT_MIN_TTL    (int)    default: 100
  - RECSTORE_PERSISTENT_EXTEND_TO  (int)    default: 500
  - RECSTORE_TEMPORARY_MIN_TTL     (int)    default: 10
  - RECSTORE_TEMPORARY_EXTEND_TO   (int)    default: 20
  - RECSTORE_MAX_KEY_BYTES         (int)    default: 64
  - RECSTORE_MAX_VALUE_BYTES       (int)    default: 131_072   (128 KiB)
  - RECSTORE_MAX_ENTRIES           (int)    default: 0 (unbounded)
  - RECSTORE_CODEC                 (str)    default: cbor      (cbor|msgpack)
  - RECSTORE_STATE_PATH            (path)   default: recstore.state
  - RECSTORE_LOG_LEVEL             (str)    default: WARNING

TTL values are measured in ledger ticks. A tier whose extend_to is below its
min_ttl is corrected upward so the extension invariant always holds.

Usage:
    from recstore.config import load_config
    CFG = load_config()
    ttl = CFG.ttl_for("persistent")
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Tuple
import logging
import os


# ----------------------------- helpers ---------------------------------------


def _env_int(name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw, 0)
    except Exception:
        return default
    if v < min_v:
        return min_v
    if v > max_v:
        return max_v
    return v


def _env_choice(name: str, default: str, choices: Tuple[str, ...]) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    val = raw.strip().lower()
    return val if val in choices else default


def _env_log_level(name: str, default: str) -> str:
    raw = (os.getenv(name) or "").strip().upper()
    if raw and isinstance(logging.getLevelName(raw), int):
        return raw
    return default


def _ttl_pair(prefix: str, min_default: int, extend_default: int) -> Tuple[int, int]:
    min_ttl = _env_int(f"RECSTORE_{prefix}_MIN_TTL", min_default, min_v=0, max_v=10_000_000)
    extend_to = _env_int(f"RECSTORE_{prefix}_EXTEND_TO", extend_default, min_v=0, max_v=10_000_000)
    return min_ttl, max(extend_to, min_ttl)


# ------------------------------- config --------------------------------------


@dataclass(frozen=True)
class StoreConfig:
    # (min_ttl, extend_to) per durability tier
    instance_ttl: Tuple[int, int]
    persistent_ttl: Tuple[int, int]
    temporary_ttl: Tuple[int, int]

    # Backend caps
    max_key_bytes: int
    max_value_bytes: int
    max_entries: int

    # Serialization / host
    codec: str
    state_path: Path
    log_level: str

    def ttl_for(self, durability: Any) -> Tuple[int, int]:
        """Return the (min_ttl, extend_to) pair for a Durability or its name."""
        name = getattr(durability, "value", durability)
        if name == "instance":
            return self.instance_ttl
        if name == "persistent":
            return self.persistent_ttl
        if name == "temporary":
            return self.temporary_ttl
        raise KeyError(f"unknown durability: {durability!r}")

    def as_dict(self) -> Dict[str, Any]:
        return {
            "instance_ttl": list(self.instance_ttl),
            "persistent_ttl": list(self.persistent_ttl),
            "temporary_ttl": list(self.temporary_ttl),
            "max_key_bytes": self.max_key_bytes,
            "max_value_bytes": self.max_value_bytes,
            "max_entries": self.max_entries,
            "codec": self.codec,
            "state_path": str(self.state_path),
            "log_level": self.log_level,
        }


@lru_cache(maxsize=1)
def load_config() -> StoreConfig:
    """
    Build and cache a StoreConfig from environment + safe defaults.
    """
    return StoreConfig(
        instance_ttl=_ttl_pair("INSTANCE", 50, 100),
        persistent_ttl=_ttl_pair("PERSISTENT", 100, 500),
        temporary_ttl=_ttl_pair("TEMPORARY", 10, 20),
        max_key_bytes=_env_int("RECSTORE_MAX_KEY_BYTES", 64, min_v=1, max_v=256),
        max_value_bytes=_env_int("RECSTORE_MAX_VALUE_BYTES", 131_072, min_v=32, max_v=16_777_216),
        max_entries=_env_int("RECSTORE_MAX_ENTRIES", 0, min_v=0, max_v=10_000_000),
        codec=_env_choice("RECSTORE_CODEC", "cbor", ("cbor", "msgpack")),
        state_path=Path(os.getenv("RECSTORE_STATE_PATH") or "recstore.state").expanduser(),
        log_level=_env_log_level("RECSTORE_LOG_LEVEL", "WARNING"),
    )


# Eagerly construct a module-level singleton for convenience, but keep load_config()
# as the canonical accessor (cached).
CFG: StoreConfig = load_config()

__all__ = ["StoreConfig", "load_config", "CFG"]
