"""
Grab / release event source.

The physical sensing of grabs and releases (XR controllers, hand
tracking, a mouse in an editor) belongs to the host. The host reports
what it senses to an `InteractionEventSource`, and Reenact components
subscribe to it while they are armed.

Notifications can be delivered two ways:

- `notify_grabbed()` / `notify_released()` deliver immediately, on the
  caller's stack.
- `post_grabbed()` / `post_released()` queue the notification; `flush()`
  delivers the queue in arrival order. The HostLoop flushes once per
  tick, before the recorder's sampling pass, which gives every tick a
  fixed processing order.
"""

from __future__ import annotations

import logging
from collections import deque
from enum import Enum
from typing import Any, Callable, Deque, Tuple

from common.signals import Signal, SubscriptionGroup
from .interactables import Interactable

LOG = logging.getLogger(__name__)


class NotificationKind(str, Enum):
    GRABBED = "grabbed"
    RELEASED = "released"


class InteractionEventSource:
    """
    Fan-out point for live grab / release notifications.

    Usage:

        source = InteractionEventSource()
        subs = source.subscribe(on_grabbed=handle_grab, on_released=handle_release)
        source.notify_grabbed(cube)
        subs.release()
    """

    def __init__(self) -> None:
        self.grabbed = Signal("grabbed")
        self.released = Signal("released")
        self._queue: Deque[Tuple[NotificationKind, Any]] = deque()

    def subscribe(
        self,
        on_grabbed: Callable[[Interactable], None],
        on_released: Callable[[Interactable], None],
    ) -> SubscriptionGroup:
        """
        Connect a grab and a release handler.

        Returns:
            A SubscriptionGroup; releasing it disconnects both handlers.
        """
        group = SubscriptionGroup()
        group.add(self.grabbed.connect(on_grabbed))
        group.add(self.released.connect(on_released))
        return group

    # --- immediate delivery --------------------------------------------------

    def notify_grabbed(self, obj: Interactable) -> None:
        self.grabbed.emit(obj)

    def notify_released(self, obj: Interactable) -> None:
        self.released.emit(obj)

    # --- queued delivery -----------------------------------------------------

    def post_grabbed(self, obj: Interactable) -> None:
        self._queue.append((NotificationKind.GRABBED, obj))

    def post_released(self, obj: Interactable) -> None:
        self._queue.append((NotificationKind.RELEASED, obj))

    @property
    def pending(self) -> int:
        """Number of queued notifications not yet delivered."""
        return len(self._queue)

    def flush(self) -> int:
        """
        Deliver queued notifications in arrival order.

        Notifications posted by handlers during the flush are delivered
        in the same flush.

        Returns:
            Number of notifications delivered.
        """
        delivered = 0
        while self._queue:
            kind, obj = self._queue.popleft()
            if kind is NotificationKind.GRABBED:
                self.grabbed.emit(obj)
            else:
                self.released.emit(obj)
            delivered += 1
        if delivered:
            LOG.debug("Flushed %d interaction notifications", delivered)
        return delivered

    def clear(self) -> None:
        """Drop queued notifications without delivering them."""
        self._queue.clear()


__all__ = [
    "NotificationKind",
    "InteractionEventSource",
]
