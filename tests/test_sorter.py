from collections import Counter

import pytest

from extsort.files import generate_random_file, read_file
from extsort.record import HEADER, HEADER_SIZE, Record, RecordBatch
from extsort.sorter import (
    external_sort,
    main,
    merge_files,
    read_batches,
    sort_batch,
    write_batch,
    write_batches,
)


@pytest.fixture
def input_file(tmp_path):
    path = tmp_path / "input.bin"
    generate_random_file(path, 50, 64, seed=7)
    return path


def test_read_batches_sizes(input_file):
    batches = list(read_batches(input_file, 12))
    sizes = [len(batch.records) for batch in batches]
    assert all(size == 12 for size in sizes[:-1])
    assert 0 < sizes[-1] <= 12
    assert sum(sizes) == 50


def test_read_batches_keep_file_order(input_file):
    keys = [record.key for batch in read_batches(input_file, 9) for record in batch.records]
    assert keys == [record.key for record in read_file(input_file)]


def test_read_batches_payloads_match(input_file):
    payloads = [bytes(r.payload) for b in read_batches(input_file, 9, 4) for r in b.records]
    assert payloads == [bytes(r.payload) for r in read_file(input_file)]


def test_batches_total_bytes_cover_file(input_file):
    total = sum(batch.total_bytes() for batch in read_batches(input_file, 10))
    assert total == input_file.stat().st_size


def test_read_batches_rejects_bad_batch_size(input_file):
    with pytest.raises(ValueError):
        list(read_batches(input_file, 0))


def test_read_batches_rejects_empty_payload(tmp_path):
    path = tmp_path / "bad.bin"
    path.write_bytes(HEADER.pack(1, 0))
    with pytest.raises(ValueError, match="positive"):
        list(read_batches(path, 4))


def test_sort_batch(input_file):
    batch = next(read_batches(input_file, 20))
    original = Counter(record.key for record in batch.records)
    result = sort_batch(batch)
    keys = [record.key for record in result.records]
    assert keys == sorted(keys)
    assert Counter(keys) == original


def test_write_batch_round_trip(input_file, capsys):
    batch = sort_batch(next(read_batches(input_file, 15)))
    path = write_batch(batch)
    try:
        assert path.stat().st_size == batch.total_bytes()
        assert [r.key for r in read_file(path)] == [r.key for r in batch.records]
        assert f"to {path}" in capsys.readouterr().out
    finally:
        path.unlink(missing_ok=True)


def test_merge_files(input_file):
    runs = [write_batch(sort_batch(batch)) for batch in read_batches(input_file, 11)]
    all_keys = sorted(key for run in runs for key in (r.key for r in read_file(run)))
    merged = list(merge_files(runs, 7))
    keys = [record.key for batch in merged for record in batch.records]
    assert keys == all_keys
    assert all(len(batch) <= 7 for batch in merged)
    for batch in merged:
        assert batch.total_size == sum(len(r.payload) + HEADER_SIZE for r in batch.records)
    assert not any(run.exists() for run in runs)


def test_merge_missing_file_removes_runs(input_file, tmp_path):
    run = write_batch(sort_batch(next(read_batches(input_file, 5))))
    with pytest.raises(FileNotFoundError):
        list(merge_files([run, tmp_path / "missing.bin"]))
    assert not run.exists()


def test_write_batches_round_trip(tmp_path):
    batch = RecordBatch()
    batch.add(Record(3, b"abcdefgh"))
    batch.add(Record(9, b"ijklmnopq"))
    out = tmp_path / "out.bin"
    written = write_batches([batch], out)
    assert written == out.stat().st_size
    records = read_file(out)
    assert [(r.key, bytes(r.payload)) for r in records] == [(3, b"abcdefgh"), (9, b"ijklmnopq")]


@pytest.mark.parametrize("batch_size,num_workers", [(7, 1), (13, 3), (100, 2)])
def test_external_sort(input_file, tmp_path, batch_size, num_workers):
    out = tmp_path / "sorted.bin"
    result = external_sort(input_file, out, batch_size, num_workers)
    original = read_file(input_file)
    sorted_records = read_file(result)
    keys = [r.key for r in sorted_records]
    assert keys == sorted(keys)
    assert Counter(keys) == Counter(r.key for r in original)
    assert sorted(len(r.payload) for r in sorted_records) == sorted(len(r.payload) for r in original)
    assert out.stat().st_size == input_file.stat().st_size


def test_external_sort_rejects_bad_arguments(input_file, tmp_path):
    with pytest.raises(ValueError):
        external_sort(input_file, tmp_path / "o.bin", 0, 1)
    with pytest.raises(ValueError):
        external_sort(input_file, tmp_path / "o.bin", 10, 0)


def test_main(input_file, tmp_path):
    out = tmp_path / "main_sorted.bin"
    assert main(["10", "2", str(input_file), "--output", str(out)]) == 0
    keys = [r.key for r in read_file(out)]
    assert keys == sorted(r.key for r in read_file(input_file))