"""Record file generation, reading, temporary paths and text formatting."""

from __future__ import annotations

import itertools
import os
import random
import tempfile
import threading
from pathlib import Path
from typing import Iterable

from extsort.loader import RecordLoader
from extsort.record import HEADER, Record

MINIMUM_PAYLOAD_LENGTH = 8
DEFAULT_SEED = 42

_temp_counter = itertools.count()
_temp_lock = threading.Lock()


def generate_random_file(
    path: str | os.PathLike,
    num_records: int,
    max_payload_length: int,
    seed: int = DEFAULT_SEED,
) -> None:
    """Write ``num_records`` records with random keys and zero-filled payloads.

    Payload lengths are drawn uniformly from
    [MINIMUM_PAYLOAD_LENGTH, max_payload_length].
    """
    if num_records <= 0:
        raise ValueError("num_records must be positive")
    if max_payload_length < MINIMUM_PAYLOAD_LENGTH:
        raise ValueError(f"max_payload_length must be >= {MINIMUM_PAYLOAD_LENGTH}")

    rng = random.Random(seed)
    zeros = bytes(max_payload_length)
    with open(path, "wb") as out:
        for _ in range(num_records):
            length = rng.randint(MINIMUM_PAYLOAD_LENGTH, max_payload_length)
            key = rng.getrandbits(64)
            out.write(HEADER.pack(key, length))
            out.write(zeros[:length])


def read_file(path: str | os.PathLike) -> list[Record]:
    """Decode every record of a record file."""
    with RecordLoader(path) as loader:
        return list(loader)


def temporary_file() -> Path:
    """Return a fresh path in the temporary directory for a sorted run."""
    with _temp_lock:
        number = next(_temp_counter)
    name = f"sorted_run_{threading.get_ident()}_{number}.bin"
    return Path(tempfile.gettempdir()) / name


def _format_byte(byte: int) -> str:
    # Bytes are shown as sign-extended 32-bit values, zero without a prefix.
    value = byte if byte < 0x80 else byte | 0xFFFFFF00
    return hex(value) if value else "0"


def format_record(record: Record) -> str:
    """Render a record as ``(key,bytes)`` with each payload byte in hex."""
    payload = "".join(_format_byte(b) for b in bytes(record.payload))
    return f"({record.key},{payload})"


def format_records(records: Iterable[Record]) -> str:
    """Render a sequence of records inside brackets."""
    return "[" + "".join(format_record(r) for r in records) + "]"