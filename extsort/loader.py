"""Readers that decode records from a binary file."""

from __future__ import annotations

import os
import struct
from typing import Iterator, Optional

from extsort.record import HEADER, HEADER_SIZE, Record

_KEY = struct.Struct("<Q")
_LENGTH = struct.Struct("<I")

DEFAULT_BUFFER_SIZE = 1024 * 1024


class RecordLoader:
    """Reads records one by one straight from the file."""

    def __init__(self, path: str | os.PathLike) -> None:
        self._file = open(path, "rb")

    def read_next(self) -> Optional[Record]:
        """Return the next record, or None at the end of the file."""
        raw_key = self._file.read(_KEY.size)
        if len(raw_key) < _KEY.size:
            return None
        raw_length = self._file.read(_LENGTH.size)
        if len(raw_length) < _LENGTH.size:
            raise ValueError("Truncated record header")
        (length,) = _LENGTH.unpack(raw_length)
        payload = self._file.read(length)
        if len(payload) < length:
            raise ValueError("Truncated record payload")
        (key,) = _KEY.unpack(raw_key)
        return Record(key, payload)

    def __iter__(self) -> Iterator[Record]:
        while (record := self.read_next()) is not None:
            yield record

    def close(self) -> None:
        self._file.close()

    def __enter__(self) -> RecordLoader:
        return self

    def __exit__(self, *args) -> None:
        self.close()


class BufferedRecordLoader:
    """Reads records through an internal buffer, placing payloads with an allocator.

    A record is assumed to fit in the buffer together with whatever of the
    previous buffer was left unread.
    """

    def __init__(self, path: str | os.PathLike, buffer_size: int = DEFAULT_BUFFER_SIZE) -> None:
        if buffer_size < HEADER_SIZE:
            raise ValueError(f"buffer_size must be at least {HEADER_SIZE}")
        self._file = open(path, "rb")
        self._buffer = bytearray(buffer_size)
        with memoryview(self._buffer) as view:
            self._size = self._file.readinto(view) or 0
        self._pos = 0

    def bytes_remaining(self) -> int:
        """Bytes in the buffer not yet consumed."""
        return self._size - self._pos

    def _prefetch(self) -> int:
        if self._pos == 0:
            return 0
        remaining = self.bytes_remaining()
        self._buffer[:remaining] = self._buffer[self._pos : self._size]
        self._pos = 0
        with memoryview(self._buffer) as view:
            read = self._file.readinto(view[remaining:]) or 0
        self._size = remaining + read
        return read

    def read_next(self, allocator) -> Optional[Record]:
        """Return the next record with its payload taken from ``allocator``, or None at the end."""
        if self._file.closed:
            raise ValueError("Input stream not open")

        if HEADER_SIZE > self.bytes_remaining():
            if not self._prefetch():
                return None
            if HEADER_SIZE > self.bytes_remaining():
                raise ValueError("Truncated record header")

        key, length = HEADER.unpack_from(self._buffer, self._pos)
        self._pos += HEADER_SIZE

        if length > self.bytes_remaining():
            self._prefetch()
            if length > self.bytes_remaining():
                raise ValueError("Payload size bigger than buffer's")

        payload = allocator.alloc(length)
        if length == 0:
            raise ValueError("Record length must be positive")
        payload[:] = self._buffer[self._pos : self._pos + length]
        self._pos += length
        return Record(key, payload)

    def close(self) -> None:
        self._file.close()

    def __enter__(self) -> BufferedRecordLoader:
        return self

    def __exit__(self, *args) -> None:
        self.close()