"""Reader and writer for JaCoCo execution data (``*.exec``) files.

The format is a sequence of blocks, each introduced by a one byte type:

* ``0x01`` header: magic ``0xC0C0`` and format version ``0x1007``
* ``0x10`` session info: id, start and dump timestamps
* ``0x11`` execution data: class id, VM class name and the probe array

Integers are big endian, strings use Java ``DataOutput.writeUTF`` framing,
and probe arrays are a var-int length followed by bit-packed bytes (least
significant bit first).
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, BinaryIO

from mincov._meta import logger
from mincov.errors import MalformedInputError

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

BLOCK_HEADER = 0x01
BLOCK_SESSIONINFO = 0x10
BLOCK_EXECUTIONDATA = 0x11

MAGIC_NUMBER = 0xC0C0
FORMAT_VERSION = 0x1007

_CHAR = struct.Struct(">H")
_LONG = struct.Struct(">q")


@dataclass(frozen=True, slots=True)
class SessionInfo:
    id: str
    start: int
    dump: int


@dataclass(slots=True)
class ExecutionData:
    """Probe hits recorded for one class."""

    id: int
    name: str
    probes: list[bool] = field(default_factory=list)

    @property
    def has_hits(self) -> bool:
        return any(self.probes)

    def merge(self, other: ExecutionData) -> None:
        """OR the probes of *other* into this entry."""
        if other.id != self.id or other.name != self.name:
            msg = f"different class names {self.name} and {other.name} for id {self.id & 0xFFFFFFFFFFFFFFFF:016x}"
            raise MalformedInputError(msg)
        if len(other.probes) != len(self.probes):
            msg = f"incompatible execution data for class {self.name} with id {self.id & 0xFFFFFFFFFFFFFFFF:016x}"
            raise MalformedInputError(msg)
        self.probes = [a or b for a, b in zip(self.probes, other.probes, strict=True)]


class ExecutionDataStore:
    """Execution data of several exec files, merged by class id."""

    def __init__(self) -> None:
        self._entries: dict[int, ExecutionData] = {}
        self.sessions: list[SessionInfo] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ExecutionData]:
        return iter(self._entries.values())

    def __contains__(self, class_id: object) -> bool:
        return class_id in self._entries

    def get(self, class_id: int) -> ExecutionData | None:
        return self._entries.get(class_id)

    def put(self, data: ExecutionData) -> None:
        existing = self._entries.get(data.id)
        if existing is None:
            self._entries[data.id] = ExecutionData(data.id, data.name, list(data.probes))
        else:
            existing.merge(data)

    def contents(self) -> list[ExecutionData]:
        """Entries sorted by class name, then id."""
        return sorted(self._entries.values(), key=lambda d: (d.name, d.id))


# -----------------------------------------------------------------------------
# Reading
# -----------------------------------------------------------------------------


class _Input:
    def __init__(self, stream: BinaryIO, source: str) -> None:
        self._stream = stream
        self.source = source

    def read_exact(self, n: int) -> bytes:
        data = self._stream.read(n)
        if len(data) != n:
            msg = f"{self.source}: unexpected end of execution data"
            raise MalformedInputError(msg)
        return data

    def read_block_type(self) -> int | None:
        data = self._stream.read(1)
        return data[0] if data else None

    def read_u8(self) -> int:
        return self.read_exact(1)[0]

    def read_char(self) -> int:
        return _CHAR.unpack(self.read_exact(_CHAR.size))[0]

    def read_long(self) -> int:
        return _LONG.unpack(self.read_exact(_LONG.size))[0]

    def read_utf(self) -> str:
        raw = self.read_exact(self.read_char())
        try:
            # modified UTF-8 encodes NUL as two bytes
            return raw.replace(b"\xc0\x80", b"\x00").decode("utf-8")
        except UnicodeDecodeError as exc:
            msg = f"{self.source}: invalid string in execution data: {exc}"
            raise MalformedInputError(msg) from exc

    def read_var_int(self) -> int:
        value = 0
        shift = 0
        while True:
            byte = self.read_u8()
            value |= (byte & 0x7F) << shift
            if not byte & 0x80:
                return value
            shift += 7

    def read_boolean_array(self) -> list[bool]:
        length = self.read_var_int()
        probes: list[bool] = []
        buffer = 0
        for i in range(length):
            if i % 8 == 0:
                buffer = self.read_u8()
            probes.append(bool(buffer & 0x01))
            buffer >>= 1
        return probes


def _read_header(inp: _Input) -> None:
    magic = inp.read_char()
    if magic != MAGIC_NUMBER:
        msg = f"{inp.source}: invalid execution data file"
        raise MalformedInputError(msg)
    version = inp.read_char()
    if version != FORMAT_VERSION:
        msg = f"{inp.source}: incompatible execution data version {version:x}"
        raise MalformedInputError(msg)


def read_exec_file(stream: BinaryIO, store: ExecutionDataStore, *, source: str = "<stream>") -> int:
    """Load every block of *stream* into *store*.

    Returns the number of execution data entries read. An empty stream is
    valid and contributes nothing.
    """
    inp = _Input(stream, source)
    entries = 0
    first = True
    while (block := inp.read_block_type()) is not None:
        if first and block != BLOCK_HEADER:
            msg = f"{source}: invalid execution data file"
            raise MalformedInputError(msg)
        first = False

        if block == BLOCK_HEADER:
            _read_header(inp)
        elif block == BLOCK_SESSIONINFO:
            store.sessions.append(SessionInfo(id=inp.read_utf(), start=inp.read_long(), dump=inp.read_long()))
        elif block == BLOCK_EXECUTIONDATA:
            class_id = inp.read_long()
            name = inp.read_utf()
            store.put(ExecutionData(class_id, name, inp.read_boolean_array()))
            entries += 1
        else:
            msg = f"{source}: unknown block type {block:x}"
            raise MalformedInputError(msg)

    logger.debug("%s: %d execution data entries", source, entries)
    return entries


# -----------------------------------------------------------------------------
# Writing
# -----------------------------------------------------------------------------


def _var_int(value: int) -> bytes:
    out = bytearray()
    while value & ~0x7F:
        out.append(0x80 | (value & 0x7F))
        value >>= 7
    out.append(value)
    return bytes(out)


def _utf(text: str) -> bytes:
    raw = text.encode("utf-8").replace(b"\x00", b"\xc0\x80")
    return _CHAR.pack(len(raw)) + raw


def _boolean_array(values: Sequence[bool]) -> bytes:
    out = bytearray(_var_int(len(values)))
    buffer = 0
    for i, value in enumerate(values):
        if value:
            buffer |= 0x01 << (i % 8)
        if i % 8 == 7:
            out.append(buffer)
            buffer = 0
    if len(values) % 8:
        out.append(buffer)
    return bytes(out)


def write_exec_file(
    stream: BinaryIO,
    entries: Sequence[ExecutionData],
    sessions: Sequence[SessionInfo] = (),
) -> None:
    """Write a header, *sessions* and *entries* to *stream*."""
    stream.write(bytes([BLOCK_HEADER]) + _CHAR.pack(MAGIC_NUMBER) + _CHAR.pack(FORMAT_VERSION))
    for info in sessions:
        stream.write(bytes([BLOCK_SESSIONINFO]) + _utf(info.id) + _LONG.pack(info.start) + _LONG.pack(info.dump))
    for data in entries:
        stream.write(bytes([BLOCK_EXECUTIONDATA]) + _LONG.pack(data.id) + _utf(data.name) + _boolean_array(data.probes))


def write_store(stream: BinaryIO, store: ExecutionDataStore) -> None:
    write_exec_file(stream, store.contents(), store.sessions)


__all__ = [
    "BLOCK_EXECUTIONDATA",
    "BLOCK_HEADER",
    "BLOCK_SESSIONINFO",
    "FORMAT_VERSION",
    "MAGIC_NUMBER",
    "ExecutionData",
    "ExecutionDataStore",
    "SessionInfo",
    "read_exec_file",
    "write_exec_file",
    "write_store",
]
