"""
Host tick loop.

Reenact is single-threaded and driven by the host's frame loop. Within a
tick, two things can happen: queued grab / release notifications are
delivered, and the recorder takes its sampling pass. `HostLoop` fixes
the order:

1) `event_source.flush()`  - every queued notification, in arrival order
2) `recorder.tick()`       - sampling pass and progress signal

So an event timestamp and the snapshot taken in the same tick always
share the same clock reading, and a release that auto-stops the
recorder prevents that tick's sampling pass.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from common.clock import Clock, ManualClock
from recording.recorder import InteractionRecorder
from scene.interaction_source import InteractionEventSource

LOG = logging.getLogger(__name__)


class HostLoop:
    """
    Minimal driver for headless hosts, the demo script and tests.

    Usage:

        clock = ManualClock()
        loop = HostLoop(clock, event_source, recorder)

        event_source.post_grabbed(cube)
        loop.run([0.0, 1 / 30, 2 / 30])
    """

    def __init__(
        self,
        clock: Clock,
        event_source: InteractionEventSource,
        recorder: Optional[InteractionRecorder] = None,
    ) -> None:
        self._clock = clock
        self._event_source = event_source
        self._recorder = recorder
        self._tick_count = 0

    @property
    def tick_count(self) -> int:
        return self._tick_count

    def tick(self) -> None:
        """Deliver queued notifications, then run the sampling pass."""
        self._event_source.flush()
        if self._recorder is not None:
            self._recorder.tick()
        self._tick_count += 1

    def run(self, frame_times: Iterable[float]) -> int:
        """
        Tick once at each absolute time in `frame_times`.

        Requires a ManualClock, which is set to each time before ticking.

        Returns:
            Number of ticks run.
        """
        if not isinstance(self._clock, ManualClock):
            raise TypeError("HostLoop.run() needs a ManualClock; call tick() from your own loop")

        ran = 0
        for t in frame_times:
            self._clock.set(t)
            self.tick()
            ran += 1
        LOG.debug("HostLoop: ran %d ticks (total %d)", ran, self._tick_count)
        return ran


__all__ = ["HostLoop"]
