from __future__ import annotations

import pytest

from recstore.errors import InvalidState
from recstore.examples import library
from recstore.runtime.context import Env
from recstore.runtime.lifecycle import EntryRef, ExpiryMeta, LifecycleManager
from recstore.runtime.storage_api import Durability

from .conftest import make_config

REF = EntryRef(Durability.PERSISTENT, b"t:table")


def test_first_touch_sets_live_until_from_now() -> None:
    lm = LifecycleManager()
    rec = lm.touch(REF, 10, 50, now=7)
    assert rec.live_until_before is None
    assert rec.live_until_after == 57
    assert rec.extended
    assert lm.remaining(REF, 7) == 50
    assert lm.is_live(REF, 57)
    assert not lm.is_live(REF, 58)


def test_touch_only_extends_when_below_threshold() -> None:
    lm = LifecycleManager()
    lm.touch(REF, 10, 50, now=0)            # live_until 50
    rec = lm.touch(REF, 10, 50, now=30)     # 20 remaining >= 10: no change
    assert not rec.extended
    assert lm.live_until(REF) == 50
    rec = lm.touch(REF, 10, 50, now=45)     # 5 remaining < 10: extend
    assert rec.extended
    assert lm.live_until(REF) == 95


def test_expiry_never_moves_backward() -> None:
    lm = LifecycleManager()
    lm.touch(REF, 0, 1000, now=0)
    lm.touch(REF, 5000, 5000, now=0)
    assert lm.live_until(REF) == 5000
    # A smaller extension request cannot shrink the horizon.
    lm.touch(REF, 6000, 6000, now=10)
    lm.touch(REF, 7000, 7000, now=10)
    assert lm.live_until(REF) == 7010
    rec = lm.touch(REF, 10, 10, now=7005)
    assert rec.live_until_after == 7015
    lm.touch(REF, 0, 0, now=7006)
    assert lm.live_until(REF) == 7015


@pytest.mark.parametrize("min_ttl, extend_to", [(10, 5), (-1, 5), (0, -3)])
def test_malformed_extension_requests_are_rejected(min_ttl: int, extend_to: int) -> None:
    lm = LifecycleManager()
    with pytest.raises(InvalidState):
        lm.touch(REF, min_ttl, extend_to, now=0)
    assert lm.touches == []
    with pytest.raises(InvalidState):
        ExpiryMeta(min_ttl, extend_to)


def test_expired_reports_but_does_not_delete(env: Env) -> None:
    library.initialize(env)
    env.advance(10_000)
    table_ref = EntryRef(Durability.PERSISTENT, b"library:table")
    assert table_ref in env.lifecycle.expired(env.now)
    # Entries stay readable; only the host acts on expiry.
    assert library.book_count(env) == 0


def test_every_mutating_call_touches_the_table_and_instance_marker() -> None:
    env = Env(config=make_config(persistent_ttl=(100, 500), instance_ttl=(50, 100)))
    library.initialize(env)
    table_ref = EntryRef(Durability.PERSISTENT, b"library:table")
    marker_ref = EntryRef(Durability.INSTANCE, b"library:init")

    calls = [
        lambda: library.add_book(env, "A", "x", 1, quantity=3),
        lambda: library.sell(env, "A"),
        lambda: library.restock(env, "A", 2),
        lambda: library.remove_book(env, "A"),
    ]
    for call in calls:
        n_table = len(env.lifecycle.touches_for(table_ref))
        n_marker = len(env.lifecycle.touches_for(marker_ref))
        call()
        assert len(env.lifecycle.touches_for(table_ref)) == n_table + 1
        assert len(env.lifecycle.touches_for(marker_ref)) == n_marker + 1


def test_reads_do_not_touch(lib_env: Env) -> None:
    library.add_book(lib_env, "A", "x", 1)
    n = len(lib_env.lifecycle.touches)
    library.get_book(lib_env, "A")
    library.list_books(lib_env)
    library.book_count(lib_env)
    library.books_by_author(lib_env, "x")
    assert len(lib_env.lifecycle.touches) == n


def test_writes_near_expiry_extend_the_table() -> None:
    env = Env(config=make_config(persistent_ttl=(100, 500)))
    library.initialize(env)
    table_ref = EntryRef(Durability.PERSISTENT, b"library:table")
    assert env.lifecycle.live_until(table_ref) == 500

    env.advance(300)                     # 200 left: above threshold
    library.add_book(env, "A", "x", 1)
    assert env.lifecycle.live_until(table_ref) == 500

    env.advance(150)                     # 50 left: below threshold
    library.add_book(env, "B", "y", 2)
    assert env.lifecycle.live_until(table_ref) == 450 + 500


def test_remaining_equal_to_threshold_does_not_extend() -> None:
    lm = LifecycleManager()
    lm.touch(REF, 10, 50, now=0)
    rec = lm.touch(REF, 10, 50, now=40)     # exactly 10 remaining
    assert rec.live_until_before == rec.live_until_after == 50
    rec = lm.touch(REF, 10, 50, now=41)
    assert rec.live_until_after == 91
