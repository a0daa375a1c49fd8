"""Named wall-clock timers."""

from __future__ import annotations

import sys
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TextIO


class Timer:
    """Starts and stops named timers, optionally reporting each duration."""

    def __init__(
        self,
        *,
        debug: bool = False,
        clock: Callable[[], float] = time.perf_counter,
        stream: TextIO | None = None,
    ) -> None:
        self.debug = debug
        self._clock = clock
        self._stream = stream
        self._starts: dict[str, float] = {}
        self.durations: dict[str, float] = {}

    def start(self, name: str) -> None:
        """Start (or restart) the timer called ``name``."""
        self._starts[name] = self._clock()

    def stop(self, name: str) -> float:
        """Return the seconds elapsed since ``name`` was started."""
        end = self._clock()
        try:
            begin = self._starts[name]
        except KeyError:
            raise KeyError(f"timer {name!r} was never started") from None
        elapsed = end - begin
        self.durations[name] = elapsed
        if self.debug:
            print(f"{name} {1000 * elapsed} ms", file=self._stream or sys.stdout)
        return elapsed

    @contextmanager
    def measure(self, name: str) -> Iterator[None]:
        """Time the body of a ``with`` block under ``name``."""
        self.start(name)
        try:
            yield
        finally:
            self.stop(name)


timer = Timer()