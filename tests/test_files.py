import tempfile
from pathlib import Path

import pytest

from extsort.files import (
    MINIMUM_PAYLOAD_LENGTH,
    format_record,
    format_records,
    generate_random_file,
    read_file,
    temporary_file,
)
from extsort.record import HEADER_SIZE, Record


def test_generated_file_round_trip(tmp_path):
    path = tmp_path / "data.bin"
    generate_random_file(path, 50, 32, 42)
    records = read_file(path)
    assert len(records) == 50
    assert all(MINIMUM_PAYLOAD_LENGTH <= len(r.payload) <= 32 for r in records)
    assert all(bytes(r.payload) == bytes(len(r.payload)) for r in records)
    assert all(0 <= r.key < 2**64 for r in records)
    assert path.stat().st_size == sum(HEADER_SIZE + len(r.payload) for r in records)


def test_generation_is_deterministic(tmp_path):
    first, second, other = tmp_path / "a.bin", tmp_path / "b.bin", tmp_path / "c.bin"
    generate_random_file(first, 20, 16, 7)
    generate_random_file(second, 20, 16, 7)
    generate_random_file(other, 20, 16, 8)
    assert first.read_bytes() == second.read_bytes()
    assert [r.key for r in read_file(first)] != [r.key for r in read_file(other)]


def test_minimum_payload_length(tmp_path):
    path = tmp_path / "min.bin"
    generate_random_file(path, 10, MINIMUM_PAYLOAD_LENGTH)
    assert {len(r.payload) for r in read_file(path)} == {MINIMUM_PAYLOAD_LENGTH}


@pytest.mark.parametrize("num_records,max_len", [(0, 16), (-3, 16), (5, MINIMUM_PAYLOAD_LENGTH - 1)])
def test_generation_rejects_bad_arguments(tmp_path, num_records, max_len):
    with pytest.raises(ValueError):
        generate_random_file(tmp_path / "x.bin", num_records, max_len)


def test_temporary_file_names():
    first, second = temporary_file(), temporary_file()
    assert first != second
    assert first.parent == Path(tempfile.gettempdir())
    assert first.name.startswith("sorted_run_")
    assert first.suffix == ".bin"


def test_format_record():
    assert format_record(Record(5, b"\x00\x01")) == "(5,00x1)"


def test_format_record_high_byte_is_sign_extended():
    assert format_record(Record(1, b"\x80")) == "(1,0xffffff80)"


def test_format_records():
    records = [Record(1, b"\x02"), Record(3, b"\x00")]
    assert format_records(records) == "[(1,0x2)(3,0)]"
    assert format_records(records).count("(") == len(records)