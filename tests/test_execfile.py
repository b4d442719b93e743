from __future__ import annotations

import io
from typing import TYPE_CHECKING

import pytest

from mincov.errors import MalformedInputError
from mincov.inputs.execfile import (
    ExecutionData,
    ExecutionDataStore,
    SessionInfo,
    read_exec_file,
    write_exec_file,
    write_store,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

HEADER = b"\x01\xc0\xc0\x10\x07"


def _load(data: bytes) -> ExecutionDataStore:
    store = ExecutionDataStore()
    read_exec_file(io.BytesIO(data), store, source="test.exec")
    return store


def test_reads_known_byte_layout() -> None:
    # header, then class id 1 "a/B" with probes [True, False, True]
    data = HEADER + b"\x11" + (1).to_bytes(8, "big") + b"\x00\x03a/B" + b"\x03\x05"
    store = _load(data)
    entry = store.get(1)
    assert entry is not None
    assert entry.name == "a/B"
    assert entry.probes == [True, False, True]


def test_writer_produces_reader_input(exec_file: Callable[..., Path]) -> None:
    probes = [i % 3 == 0 for i in range(200)]
    path = exec_file([(-42, "com/example/Big", probes), (7, "a/B", [])])
    store = ExecutionDataStore()
    with path.open("rb") as f:
        assert read_exec_file(f, store) == 2
    big = store.get(-42)
    assert big is not None
    assert big.probes == probes
    assert store.get(7) is not None


def test_sessions_are_kept() -> None:
    buf = io.BytesIO()
    write_exec_file(buf, [], [SessionInfo("host-1", 1000, 2000)])
    assert _load(buf.getvalue()).sessions == [SessionInfo("host-1", 1000, 2000)]


def test_empty_stream_is_valid() -> None:
    assert len(_load(b"")) == 0


def test_concatenated_files_are_read() -> None:
    first, second = io.BytesIO(), io.BytesIO()
    write_exec_file(first, [ExecutionData(1, "a/B", [True, False])])
    write_exec_file(second, [ExecutionData(1, "a/B", [False, True])])
    store = _load(first.getvalue() + second.getvalue())
    entry = store.get(1)
    assert entry is not None
    assert entry.probes == [True, True]


def test_store_merges_probes_with_or() -> None:
    store = ExecutionDataStore()
    store.put(ExecutionData(1, "a/B", [True, False, False]))
    store.put(ExecutionData(1, "a/B", [False, False, True]))
    entry = store.get(1)
    assert entry is not None
    assert entry.probes == [True, False, True]
    assert entry.has_hits


def test_store_does_not_alias_input() -> None:
    data = ExecutionData(1, "a/B", [False])
    store = ExecutionDataStore()
    store.put(data)
    store.put(ExecutionData(1, "a/B", [True]))
    assert data.probes == [False]


def test_store_rejects_conflicting_entries() -> None:
    store = ExecutionDataStore()
    store.put(ExecutionData(1, "a/B", [True]))
    with pytest.raises(MalformedInputError, match="different class names"):
        store.put(ExecutionData(1, "a/C", [True]))
    with pytest.raises(MalformedInputError, match="incompatible execution data"):
        store.put(ExecutionData(1, "a/B", [True, False]))


def test_contents_sorted_by_name() -> None:
    store = ExecutionDataStore()
    store.put(ExecutionData(2, "b/B", []))
    store.put(ExecutionData(1, "a/A", []))
    assert [d.name for d in store.contents()] == ["a/A", "b/B"]
    assert 1 in store
    assert len(store) == 2


def test_write_store_keeps_sessions_and_entries() -> None:
    store = ExecutionDataStore()
    store.sessions.append(SessionInfo("s", 1, 2))
    store.put(ExecutionData(5, "x/Y", [True] * 9))
    buf = io.BytesIO()
    write_store(buf, store)
    again = _load(buf.getvalue())
    assert again.sessions == store.sessions
    entry = again.get(5)
    assert entry is not None
    assert entry.probes == [True] * 9


@pytest.mark.parametrize(
    ("data", "message"),
    [
        (b"\x11\x00", "invalid execution data file"),
        (b"\x01\xca\xfe\x10\x07", "invalid execution data file"),
        (b"\x01\xc0\xc0\x10\x06", "incompatible execution data version 1006"),
        (HEADER + b"\x42", "unknown block type 42"),
        (HEADER + b"\x11\x00\x00", "unexpected end"),
        (HEADER + b"\x11" + (1).to_bytes(8, "big") + b"\x00\x02\xff\xfe\x00", "invalid string"),
    ],
)
def test_malformed_input(data: bytes, message: str) -> None:
    with pytest.raises(MalformedInputError, match=message):
        _load(data)
