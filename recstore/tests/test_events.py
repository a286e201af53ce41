from __future__ import annotations

import pytest

from recstore.runtime.events_api import MAX_EVENT_NAME_BYTES, EventError, EventSink


def test_emit_records_events_in_order() -> None:
    sink = EventSink()
    sink.emit(b"a.added", {"key": "x", "id": 1})
    sink.emit(b"a.removed", {"key": "x", "id": 1})
    assert sink.names() == [b"a.added", b"a.removed"]
    assert sink.events()[0].to_dict() == {"name": "a.added", "args": {"key": "x", "id": 1}}


def test_bytes_args_render_as_hex() -> None:
    ev = EventSink().emit(b"e", {"blob": b"\x01\xff"})
    assert ev.to_dict()["args"] == {"blob": "0x01ff"}


@pytest.mark.parametrize(
    "name, args",
    [
        ("str-name", {}),
        (b"", {}),
        (b"x" * (MAX_EVENT_NAME_BYTES + 1), {}),
        (b"ok", {"bad key": 1}),
        (b"ok", {"1st": 1}),
        (b"ok", {"v": [1, 2]}),
        (b"ok", {"v": "x" * 5000}),
        (b"ok", ["not", "a", "mapping"]),
    ],
)
def test_invalid_events_are_rejected(name, args) -> None:
    sink = EventSink()
    with pytest.raises(EventError):
        sink.emit(name, args)
    assert sink.names() == []


def test_snapshot_and_restore_truncate() -> None:
    sink = EventSink()
    sink.emit(b"keep", {})
    mark = sink.snapshot()
    sink.emit(b"drop", {})
    sink.restore(mark)
    assert sink.names() == [b"keep"]
    sink.clear()
    assert sink.events() == ()
