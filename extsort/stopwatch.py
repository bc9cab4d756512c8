"""Wall-clock timer that reports elapsed time in a chosen unit."""

from __future__ import annotations

import sys
import time

_NANOSECONDS_PER_UNIT = {
    "ns": 1,
    "us": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "min": 60_000_000_000,
    "h": 3_600_000_000_000,
}


class StopWatch:
    """Measures elapsed time and prints it on reset and when leaving a ``with`` block."""

    def __init__(
        self,
        description: str = "Benchmark results",
        print_last: bool = True,
        unit: str = "ms",
    ) -> None:
        if unit not in _NANOSECONDS_PER_UNIT:
            raise ValueError(f"unknown time unit: {unit!r}")
        self.description = description
        self.print_last = print_last
        self.unit = unit
        self._begin = time.perf_counter_ns()

    def elapsed(self) -> int:
        """Whole units elapsed since start or the last reset."""
        return (time.perf_counter_ns() - self._begin) // _NANOSECONDS_PER_UNIT[self.unit]

    def _report(self) -> str:
        """Write the elapsed-time report to stdout and return its text."""
        text = f"{self.description}\nElapsed time ({self.unit}): {self.elapsed()}\n\n"
        sys.stdout.write(text)
        return text

    def reset(self) -> None:
        """Print the elapsed time and start measuring again."""
        self._report()
        self._begin = time.perf_counter_ns()

    def __enter__(self) -> StopWatch:
        return self

    def __exit__(self, *args) -> None:
        if self.print_last:
            self._report()