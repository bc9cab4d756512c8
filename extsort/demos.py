"""Small demonstrations of farm, map-reduce and pipeline parallel patterns."""

from __future__ import annotations

import queue
import random
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterator, Optional

MAX_VALUE = 10
WORK_DELAY = 0.1


def _emit_integers(count: int, seed: Optional[int]) -> Iterator[int]:
    rng = random.Random(seed)
    for _ in range(count):
        yield rng.randint(1, MAX_VALUE)


def _square_and_print(value: int) -> int:
    square = value * value
    print(f">> {square}")
    threading.Event().wait(WORK_DELAY)
    return square


def _square(value: int) -> int:
    threading.Event().wait(WORK_DELAY)
    return value * value


def square_farm(num_tasks: int = 100, num_workers: int = 4, seed: Optional[int] = None) -> list[int]:
    """Square random integers in [1, MAX_VALUE] on a farm of workers that print each result.

    Returns the squares in the order the integers were emitted.
    """
    print("Starting pipeline...")
    with ThreadPoolExecutor(max_workers=num_workers) as farm:
        squares = list(farm.map(_square_and_print, _emit_integers(num_tasks, seed)))
    print("Pipeline done.")
    return squares


def map_reduce(num_tasks: int = 100, num_workers: int = 16, seed: Optional[int] = None) -> int:
    """Square random integers on a farm of workers and sum the squares in a collector."""
    total = 0
    with ThreadPoolExecutor(max_workers=num_workers) as farm:
        for square in farm.map(_square, _emit_integers(num_tasks, seed)):
            total += square
    print(f"Count: {total}")
    return total


@dataclass
class Task:
    """A unit of work passed along the pipeline."""

    data: int


def task_pipeline(count: int = 100) -> list[int]:
    """Run an emitter and a collector as two pipeline stages; return the processed data."""
    channel: queue.Queue[Optional[Task]] = queue.Queue()

    def emit() -> None:
        for i in range(count):
            channel.put(Task(i))
        channel.put(None)

    print("Pipe started")
    emitter = threading.Thread(target=emit)
    emitter.start()
    processed = []
    while (task := channel.get()) is not None:
        print(f"Processing object {task.data}")
        processed.append(task.data)
        print(f"Destroying object {task.data}")
    emitter.join()
    print("Pipe ended")
    return processed