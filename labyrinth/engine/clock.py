"""
labyrinth.engine.clock — Microsecond Clocks
============================================

The dispatcher reads a clock exactly once per operation, so every write
inside an operation shares one timestamp.
"""

from __future__ import annotations

import threading
import time
from typing import Protocol

from labyrinth.constants import MICROS_PER_SECOND


class Clock(Protocol):
    def now_micros(self) -> int: ...


class SystemClock:
    """Wall-clock microseconds that never move backward."""

    def __init__(self) -> None:
        self._last = 0
        self._lock = threading.Lock()

    def now_micros(self) -> int:
        now = time.time_ns() // 1_000
        with self._lock:
            if now < self._last:
                now = self._last
            self._last = now
            return now


class ManualClock:
    """Deterministic clock for tests and replays."""

    def __init__(self, start: int = 1_700_000_000 * MICROS_PER_SECOND) -> None:
        self._now = start

    def now_micros(self) -> int:
        return self._now

    def advance(self, micros: int) -> int:
        if micros < 0:
            raise ValueError("ManualClock cannot move backward")
        self._now += micros
        return self._now

    def set(self, micros: int) -> None:
        if micros < self._now:
            raise ValueError("ManualClock cannot move backward")
        self._now = micros
