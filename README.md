# extsort

Sort binary files of keyed records that may be larger than the memory you
want to spend on them.

A file is a plain sequence of records, each laid out as

```
<key: unsigned 64-bit little-endian><length: unsigned 32-bit little-endian><payload: length bytes>
```

Records are ordered by key alone. The payload is carried along untouched.

Sorting runs in two phases:

1. The input is read in batches. Each batch is sorted in memory by a pool of
   worker threads and written to its own temporary file (a "sorted run").
2. The sorted runs are merged with a min-heap into the output file, and the
   temporary files are removed.

## Installation

```
pip install .
```

To run the tests as well:

```
pip install ".[test]"
pytest
```

## Command line

Create a file of random records with zero-filled payloads. The seed is
fixed, so the same arguments always give the same file:

```
extsort-create-file 100000 64 input.bin
```

The arguments are the number of records (positive), the largest payload
length (at least 8) and the output path.

Sort it:

```
extsort 100000 4 input.bin
```

The arguments are the batch size (records per sorted run), the number of
sorting threads and the input file. The result goes to `sorted.bin` in the
current directory unless `--output FILE` is given. Every temporary run and
every chunk of the output is reported as it is written.

Print the contents of a record file:

```
extsort-read-file sorted.bin
```

Each record is shown as `(key,payload)`, with each payload byte in hex.

## Library use

```python
from extsort.files import generate_random_file, read_file
from extsort.sorter import external_sort

generate_random_file("input.bin", 10_000, 32, 42)
external_sort("input.bin", "sorted.bin", 1_000, 4)

records = read_file("sorted.bin")
assert [r.key for r in records] == sorted(r.key for r in records)
```

The building blocks are available separately:

- `extsort.loader.RecordLoader` iterates over the records of a file and works
  as a context manager. `extsort.loader.BufferedRecordLoader` reads records
  through a fixed-size buffer and takes each payload from an allocator.
- `extsort.arena.MemoryArena` hands out contiguous slices from large blocks,
  so a batch of payloads shares a few allocations instead of one each.
  `extsort.arena.DefaultHeapAllocator` gives every payload its own buffer.
- `extsort.record` holds `Record`, the batch types `ArenaBatch` and
  `RecordBatch`, and `encode_record`.
- `extsort.files` has `generate_random_file`, `read_file`, `temporary_file`,
  `format_record` and `format_records`.
- `extsort.sorter` exposes each stage: `read_batches`, `sort_batch`,
  `write_batch`, `merge_files` and `write_batches`, as well as
  `external_sort` itself.
- `extsort.stopwatch.StopWatch` measures wall-clock time in a chosen unit
  (`ns`, `us`, `ms`, `s`, `min` or `h`). `elapsed()` returns the time so far,
  `reset()` prints it and starts again, and leaving a `with` block prints it
  unless `print_last` is false.

`extsort.demos` has small examples of the worker patterns the sorter is
built from: `square_farm`, `map_reduce` and `task_pipeline`.

## Limitations

- Runs on a single machine with threads. There is no distributed or
  multi-process mode.
- Every record must have a payload of at least one byte. A zero-length
  payload is rejected.
- Input is read through a 1 MiB buffer and runs are merged through 1024-byte
  buffers, so a record whose payload exceeds 1024 bytes cannot be merged.
- All sorted runs are opened at once during the merge. There is no multi-pass
  merge for very large numbers of runs.