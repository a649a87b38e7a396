"""
Time sources.

The recorder measures elapsed time through a `Clock` so hosts can drive
it from their own frame time and tests can step time deterministically.
"""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Anything that can report the current time in seconds."""

    def now(self) -> float:
        ...


class MonotonicClock:
    """Wall-clock independent time source backed by `time.monotonic()`."""

    def now(self) -> float:
        return time.monotonic()


class ManualClock:
    """
    Clock that only moves when told to.

    Used by headless hosts that own their frame timing, by the demo
    script, and by tests.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = float(start)

    def now(self) -> float:
        return self._now

    def advance(self, dt: float) -> float:
        """Move time forward by `dt` seconds and return the new time."""
        if dt < 0:
            raise ValueError(f"ManualClock cannot move backwards (dt={dt})")
        self._now += dt
        return self._now

    def set(self, t: float) -> None:
        """Jump to an absolute time."""
        self._now = float(t)


__all__ = [
    "Clock",
    "MonotonicClock",
    "ManualClock",
]
