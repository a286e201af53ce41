from __future__ import annotations

import pytest

from recstore.core.table import Record, RecordTable
from recstore.errors import DuplicateKey, NotFound
from recstore.runtime.context import Env


@pytest.fixture()
def table(env: Env) -> RecordTable:
    t = RecordTable(env, "t")
    t.create()
    return t


def _names(records) -> list:
    return [r["name"] for r in records]


def test_append_allocates_increasing_ordinals(table: RecordTable) -> None:
    ids = [table.append({"name": n}) for n in ("a", "b", "c")]
    assert ids == [1, 2, 3]
    assert _names(table.all()) == ["a", "b", "c"]


def test_ordinals_are_not_reused_after_removal(table: RecordTable) -> None:
    table.append({"name": "a"})
    table.append({"name": "b"})
    table.remove(lambda r: r["name"] == "b")
    assert table.append({"name": "c"}) == 3


def test_explicit_key_collision_raises_duplicate_key(table: RecordTable) -> None:
    assert table.append({"name": "x"}, key="x") == "x"
    with pytest.raises(DuplicateKey):
        table.append({"name": "x again"}, key="x")
    assert table.count() == 1


def test_find_and_position_return_first_inserted_match(table: RecordTable) -> None:
    table.append({"name": "a", "tag": 1})
    table.append({"name": "b", "tag": 2})
    table.append({"name": "c", "tag": 2})

    hit = table.find(lambda r: r["tag"] == 2)
    assert hit is not None and hit["name"] == "b"
    assert table.position(lambda r: r["tag"] == 2) == 1
    assert table.find(lambda r: r["tag"] == 3) is None
    assert table.position(lambda r: r["tag"] == 3) is None


def test_remove_first_match_shifts_later_records(table: RecordTable) -> None:
    for n in ("a", "b", "c", "b"):
        table.append({"name": n})
    removed = table.remove(lambda r: r["name"] == "b")
    assert removed == Record(2, {"name": "b"})
    assert _names(table.all()) == ["a", "c", "b"]
    assert table.position(lambda r: r["name"] == "c") == 1


def test_remove_without_match_raises_not_found_and_keeps_rows(table: RecordTable) -> None:
    table.append({"name": "a"})
    with pytest.raises(NotFound):
        table.remove(lambda r: r["name"] == "zzz")
    assert table.count() == 1


def test_all_returns_an_independent_snapshot(table: RecordTable) -> None:
    table.append({"name": "a"})
    snap = table.all()
    snap[0].fields["name"] = "mutated"
    snap.append(Record(99, {"name": "extra"}))
    table.append({"name": "b"})
    assert _names(snap) == ["mutated", "extra"]
    assert _names(table.all()) == ["a", "b"]


def test_count_matches_length_of_all_at_every_step(table: RecordTable) -> None:
    assert table.count() == len(table.all()) == 0
    for n in "abcde":
        table.append({"name": n})
        assert table.count() == len(table.all())
    for n in "bd":
        table.remove(lambda r, n=n: r["name"] == n)
        assert table.count() == len(table.all())
    assert table.count() == 3


def test_replace_keeps_id_and_position(table: RecordTable) -> None:
    table.append({"name": "a", "n": 1})
    table.append({"name": "b", "n": 1})
    rec = table.replace(1, {"name": "b", "n": 5})
    assert rec == Record(2, {"name": "b", "n": 5})
    assert [r.to_dict() for r in table.all()] == [
        {"id": 1, "name": "a", "n": 1},
        {"id": 2, "name": "b", "n": 5},
    ]
    with pytest.raises(NotFound):
        table.replace(7, {"name": "nope"})


def test_missing_table_reads_as_empty(env: Env) -> None:
    t = RecordTable(env, "never-created")
    assert not t.exists()
    assert t.all() == []
    assert t.count() == 0
