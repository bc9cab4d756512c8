"""Records, record batches and their binary encoding."""

from __future__ import annotations

import functools
import struct
from dataclasses import dataclass, field
from typing import Union

from extsort.arena import MemoryArena

HEADER = struct.Struct("<QI")
HEADER_SIZE = HEADER.size

Payload = Union[bytes, bytearray, memoryview]


@functools.total_ordering
@dataclass(eq=False)
class Record:
    """A keyed record; only the key takes part in comparisons."""

    key: int
    payload: Payload = b""

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        return self.key == other.key

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        return self.key < other.key

    def __hash__(self) -> int:
        return hash(self.key)


class ArenaBatch:
    """A batch of records whose payloads live in one shared arena."""

    def __init__(self, batch_size: int, arena_size: int) -> None:
        self.batch_size = batch_size
        self.arena = MemoryArena(arena_size)
        self.records: list[Record] = []

    def total_bytes(self, header_size: int = HEADER_SIZE) -> int:
        """Size of the batch once encoded."""
        return self.arena.used() + len(self.records) * header_size


@dataclass
class RecordBatch:
    """A batch of records that tracks its encoded size as it grows."""

    records: list[Record] = field(default_factory=list)
    total_size: int = 0

    def add(self, record: Record) -> None:
        """Append a record and account for its encoded size."""
        self.total_size += len(record.payload) + HEADER_SIZE
        self.records.append(record)

    def __len__(self) -> int:
        return len(self.records)


def encode_record(record: Record, out) -> memoryview:
    """Encode ``record`` at the start of ``out`` and return the unused rest.

    The layout is a little-endian ``uint64`` key, a ``uint32`` payload
    length and the payload bytes.
    """
    view = memoryview(out)
    length = len(record.payload)
    total = HEADER_SIZE + length
    if len(view) < total:
        raise ValueError(
            f"Not enough space left in out_stream for encoding the record of size {total}"
        )
    HEADER.pack_into(view, 0, record.key, length)
    if length:
        view[HEADER_SIZE:total] = record.payload
    return view[total:]