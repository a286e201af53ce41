from __future__ import annotations

import pytest

from recstore.core.cell import ValueCell
from recstore.errors import InvalidState, WriteRejected
from recstore.examples import counter as counter_ex
from recstore.examples import library
from recstore.runtime.context import Env
from recstore.runtime.storage_api import Durability, MemoryBackend

# --------------------------------------------------------------------------------------
# helpers
# --------------------------------------------------------------------------------------


def _state(env: Env):
    """Everything a failed call must leave untouched."""
    return (
        env.storage.dump(),  # type: ignore[attr-defined]
        env.lifecycle.snapshot(),
        env.events.names(),
    )


# --------------------------------------------------------------------------------------
# backend rejections
# --------------------------------------------------------------------------------------


def test_read_only_backend_rejects_add_without_side_effects(lib_env: Env) -> None:
    library.add_book(lib_env, "A", "x", 1)
    before = _state(lib_env)
    lib_env.storage.read_only = True  # type: ignore[attr-defined]

    with pytest.raises(WriteRejected) as excinfo:
        library.add_book(lib_env, "B", "y", 2)
    assert excinfo.value.details["reason"] == "read_only"
    assert _state(lib_env) == before

    lib_env.storage.read_only = False  # type: ignore[attr-defined]
    assert [r["title"] for r in library.list_books(lib_env)] == ["A"]


def test_oversized_record_is_rejected_and_expiry_is_not_refreshed() -> None:
    env = Env(MemoryBackend(max_value_bytes=256))
    library.initialize(env)
    library.add_book(env, "small", "x", 1)
    before = _state(env)
    n_touches = len(env.lifecycle.touches)

    with pytest.raises(WriteRejected):
        library.add_book(env, "big", "y" * 400, 2)

    assert len(env.lifecycle.touches) == n_touches
    assert _state(env) == before
    assert library.book_count(env) == 1


def test_capacity_exhaustion_rejects_new_entries_only() -> None:
    env = Env(MemoryBackend(max_entries=2))
    library.initialize(env)                     # table + init marker
    library.add_book(env, "A", "x", 1)          # overwrites the table entry
    with pytest.raises(WriteRejected) as excinfo:
        counter_ex.initialize(env)
    assert excinfo.value.details["reason"] == "capacity"
    assert len(env.storage) == 2
    assert library.book_count(env) == 1


# --------------------------------------------------------------------------------------
# validation failures mid-call
# --------------------------------------------------------------------------------------


def test_counter_underflow_rolls_back_the_cell_write(env: Env) -> None:
    counter_ex.initialize(env)
    counter_ex.increment(env, 2)
    before = _state(env)
    with pytest.raises(InvalidState):
        counter_ex.increment(env, -3)
    assert _state(env) == before
    assert counter_ex.get(env) == 2


def test_exception_inside_transaction_restores_everything(env: Env) -> None:
    cell = ValueCell(env, b"x")
    cell.set(1)
    before = _state(env)

    with pytest.raises(RuntimeError):
        with env.transaction("test"):
            cell.set(2)
            cell.increment(10, 0)
            env.events.emit(b"noise", {"n": 1})
            raise RuntimeError("boom")

    assert _state(env) == before
    assert cell.get(None) == 1


def test_nested_transactions_join_the_outer_one(env: Env) -> None:
    cell = ValueCell(env, b"x")
    with pytest.raises(RuntimeError):
        with env.transaction("outer"):
            cell.increment(1, 0)            # opens and closes an inner transaction
            assert cell.get(0) == 1
            raise RuntimeError("fail after inner commit")
    assert not cell.present()


def test_successful_transaction_commits(env: Env) -> None:
    with env.transaction("ok"):
        ValueCell(env, b"x").set("kept")
    assert env.storage.get(Durability.INSTANCE, b"x") is not None
    assert ValueCell(env, b"x").get(None) == "kept"
