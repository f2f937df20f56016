"""Wall-clock stopwatch."""

from __future__ import annotations

from time import perf_counter


class Timer:
    """Measures the time since it was created."""

    def __init__(self) -> None:
        self._start = perf_counter()

    def elapsed(self) -> float:
        """Seconds elapsed since construction."""
        return perf_counter() - self._start