"""External merge sort of record files: sorted runs on disk, then a k-way merge."""

from __future__ import annotations

import argparse
import heapq
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, Iterator, Sequence

from extsort.arena import DefaultHeapAllocator
from extsort.files import temporary_file
from extsort.loader import DEFAULT_BUFFER_SIZE, BufferedRecordLoader
from extsort.record import ArenaBatch, Record, RecordBatch, encode_record

MERGE_BUFFER_SIZE = 1024
MERGE_BATCH_SIZE = 1000
DEFAULT_BATCH_SIZE = 100_000
DEFAULT_OUTPUT = "sorted.bin"
_WRITER_COUNT = 2


def read_batches(
    path: str | os.PathLike,
    batch_size: int,
    expected_payload_length: int = 8,
) -> Iterator[ArenaBatch]:
    """Yield consecutive batches of at most ``batch_size`` records read from ``path``.

    Every batch keeps its payloads in its own arena, sized for
    ``batch_size * expected_payload_length`` bytes to begin with.
    """
    if batch_size <= 0:
        raise ValueError("batch_size must be positive")
    arena_size = batch_size * expected_payload_length
    with BufferedRecordLoader(path, DEFAULT_BUFFER_SIZE) as loader:
        batch = ArenaBatch(batch_size, arena_size)
        while (record := loader.read_next(batch.arena)) is not None:
            batch.records.append(record)
            if len(batch.records) == batch_size:
                yield batch
                batch = ArenaBatch(batch_size, arena_size)
        if batch.records:
            yield batch


def sort_batch(batch: ArenaBatch) -> ArenaBatch:
    """Sort the batch's records by key in place and return the batch."""
    batch.records.sort(key=lambda record: record.key)
    return batch


def _encode(records: Iterable[Record], size: int) -> bytearray:
    buffer = bytearray(size)
    rest = memoryview(buffer)
    for record in records:
        rest = encode_record(record, rest)
    if len(rest):
        raise ValueError("Encoded records do not fill the expected size")
    rest.release()
    return buffer


def write_batch(batch: ArenaBatch) -> Path:
    """Write the batch to a fresh temporary file and return its path."""
    size = batch.total_bytes()
    buffer = _encode(batch.records, size)
    path = temporary_file()
    try:
        with open(path, "wb") as out:
            out.write(buffer)
    except OSError as error:
        raise OSError(f"Could not open temporary file {path}") from error
    print(f"Written {size} bytes to {path}")
    return path


def merge_files(paths: Sequence[str | os.PathLike], batch_size: int = MERGE_BATCH_SIZE) -> Iterator[RecordBatch]:
    """Merge sorted run files into batches of at most ``batch_size`` records in key order.

    The run files are deleted once merging ends, whether it succeeds or fails.
    """
    if batch_size <= 0:
        raise ValueError("batch_size must be positive")
    run_paths = [Path(p) for p in paths]
    loaders: list[BufferedRecordLoader] = []
    try:
        for run_path in run_paths:
            loaders.append(BufferedRecordLoader(run_path, MERGE_BUFFER_SIZE))

        allocator = DefaultHeapAllocator()
        heap: list[tuple[int, int, Record]] = []
        for index, loader in enumerate(loaders):
            record = loader.read_next(allocator)
            if record is not None:
                heap.append((record.key, index, record))
        heapq.heapify(heap)

        batch = RecordBatch()
        while heap:
            _, index, record = heapq.heappop(heap)
            batch.add(record)
            if len(batch) == batch_size:
                yield batch
                batch = RecordBatch()
            following = loaders[index].read_next(allocator)
            if following is not None:
                heapq.heappush(heap, (following.key, index, following))

        if batch.records:
            yield batch
    finally:
        for loader in loaders:
            loader.close()
        for run_path in run_paths:
            run_path.unlink(missing_ok=True)


def write_batches(batches: Iterable[RecordBatch], path: str | os.PathLike) -> int:
    """Append every batch to ``path`` in order and return the number of bytes written."""
    written = 0
    try:
        out = open(path, "wb")
    except OSError as error:
        raise OSError(f"Could not open output file {path}") from error
    with out:
        for batch in batches:
            out.write(_encode(batch.records, batch.total_size))
            written += batch.total_size
            print(f"Written {batch.total_size} bytes to {path}")
    return written


def _write_when_sorted(sorted_future: Future, slots: threading.BoundedSemaphore) -> Path:
    try:
        return write_batch(sorted_future.result())
    finally:
        slots.release()


def external_sort(
    input_path: str | os.PathLike,
    output_path: str | os.PathLike = DEFAULT_OUTPUT,
    batch_size: int = DEFAULT_BATCH_SIZE,
    num_workers: int = 1,
) -> Path:
    """Sort the records of ``input_path`` by key into ``output_path``.

    Batches are sorted by ``num_workers`` threads and written to temporary
    runs, which are then merged into the output file.
    """
    if batch_size <= 0:
        raise ValueError("batch_size must be positive")
    if num_workers <= 0:
        raise ValueError("num_workers must be positive")

    slots = threading.BoundedSemaphore(2 * (num_workers + _WRITER_COUNT))
    write_futures: list[Future] = []
    try:
        with ThreadPoolExecutor(max_workers=num_workers) as sorters, ThreadPoolExecutor(
            max_workers=_WRITER_COUNT
        ) as writers:
            for batch in read_batches(input_path, batch_size, 1):
                slots.acquire()
                sorted_future = sorters.submit(sort_batch, batch)
                write_futures.append(writers.submit(_write_when_sorted, sorted_future, slots))
        runs = [future.result() for future in write_futures]
    except BaseException:
        for future in write_futures:
            if future.done() and future.exception() is None:
                future.result().unlink(missing_ok=True)
        raise

    write_batches(merge_files(runs, MERGE_BATCH_SIZE), output_path)
    return Path(output_path)


def main(argv: Sequence[str] | None = None) -> int:
    """Sort a record file: ``batch_size num_workers path [--output FILE]``."""
    parser = argparse.ArgumentParser(prog="extsort", description="Sort a binary record file by key.")
    parser.add_argument("batch_size", type=int, help="records per sorted run")
    parser.add_argument("num_workers", type=int, help="number of sorting threads")
    parser.add_argument("path", type=Path, help="file to sort")
    parser.add_argument("--output", type=Path, default=Path(DEFAULT_OUTPUT), help="sorted output file")
    args = parser.parse_args(argv)
    external_sort(args.path, args.output, args.batch_size, args.num_workers)
    return 0