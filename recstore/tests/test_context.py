from __future__ import annotations

import pytest

from recstore.core import codec
from recstore.errors import WriteRejected
from recstore.examples import library
from recstore.runtime.context import ContextError, Env, LedgerInfo
from recstore.runtime.lifecycle import EntryRef
from recstore.runtime.storage_api import Durability

from .conftest import make_config


def test_ledger_info_validation() -> None:
    assert LedgerInfo(3, 15).to_dict() == {"sequence": 3, "timestamp": 15}
    assert LedgerInfo.from_dict({"sequence": 4}) == LedgerInfo(4, 0)
    for bad in (-1, "1", True):
        with pytest.raises(ContextError):
            LedgerInfo(bad)  # type: ignore[arg-type]


def test_advance_moves_sequence_and_timestamp(env: Env) -> None:
    env.advance(3)
    env.advance(2, seconds_per_tick=1)
    assert env.now == 5
    assert env.ledger.timestamp == 17
    with pytest.raises(ContextError):
        env.advance(-1)


def test_persist_touches_only_after_a_successful_write(env: Env) -> None:
    rec = env.persist(Durability.TEMPORARY, b"k", b"v")
    assert rec.live_until_after == env.now + env.config.ttl_for("temporary")[1]
    with pytest.raises(TypeError):
        env.persist(Durability.TEMPORARY, b"k2", "not bytes")  # type: ignore[arg-type]
    assert env.lifecycle.live_until(EntryRef(Durability.TEMPORARY, b"k2")) is None


def test_erase_drops_entry_and_expiry(env: Env) -> None:
    env.persist(Durability.INSTANCE, b"k", b"v")
    env.erase(Durability.INSTANCE, b"k")
    assert env.read(Durability.INSTANCE, b"k") is None
    assert env.lifecycle.live_until(EntryRef(Durability.INSTANCE, b"k")) is None


def test_state_survives_a_codec_round_trip(lib_env: Env) -> None:
    library.add_book(lib_env, "Emma", "Austen", 1815, price=7.25)
    lib_env.advance(42)

    blob = codec.dumps(lib_env.to_state())
    restored = Env.from_state(codec.loads(blob))

    assert restored.now == 42
    assert library.get_book(restored, "Emma") == library.get_book(lib_env, "Emma")
    assert restored.lifecycle.dump() == lib_env.lifecycle.dump()
    # The restored store is initialized and keeps allocating fresh ordinals.
    assert library.add_book(restored, "Dune", "Herbert", 1965).id == 2


def test_env_config_sets_the_default_backend_caps() -> None:
    env = Env(config=make_config(max_entries=1))
    with pytest.raises(WriteRejected) as excinfo:
        library.initialize(env)
    assert excinfo.value.details["reason"] == "capacity"
    assert len(env.storage) == 0
    assert not library.STORE.is_initialized(env)


def test_env_config_sets_the_value_size_cap() -> None:
    env = Env(config=make_config(max_value_bytes=64))
    library.initialize(env)
    with pytest.raises(WriteRejected):
        library.add_book(env, "A", "x" * 100, 1)
    assert library.book_count(env) == 0


def test_env_config_selects_the_write_codec() -> None:
    env = Env(config=make_config(codec="msgpack"))
    library.initialize(env)
    library.add_book(env, "Emma", "Austen", 1815)
    table_blob = env.read(Durability.PERSISTENT, b"library:table")
    marker_blob = env.read(Durability.INSTANCE, b"library:init")
    assert codec.format_of(table_blob) == codec.FMT_MSGPACK
    assert codec.format_of(marker_blob) == codec.FMT_MSGPACK
    assert library.get_book(env, "Emma")["author"] == "Austen"
