"""
Minimal synchronous signal / subscription primitives.

Components expose their notifications (recording started, object
highlighted, object grabbed, ...) as `Signal` instances. Subscribers
connect a handler and receive a `Subscription` handle; releasing the
handle detaches the handler exactly once.

Delivery is synchronous and single-threaded: `emit()` calls every
connected handler, in connection order, before returning. Emission works
on a copy of the handler list, so a handler may disconnect itself (or
stop the component that emitted) while being notified.

A handler that raises is logged with its traceback; delivery to the
remaining handlers continues.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

LOG = logging.getLogger(__name__)

Handler = Callable[..., Any]


class Subscription:
    """
    Handle for one connected handler.

    `release()` disconnects the handler the first time it is called and
    is a no-op afterwards.
    """

    def __init__(self, signal: "Signal", handler: Handler) -> None:
        self._signal: Optional[Signal] = signal
        self._handler = handler

    @property
    def active(self) -> bool:
        return self._signal is not None

    def release(self) -> None:
        if self._signal is None:
            return
        signal, self._signal = self._signal, None
        signal.disconnect(self._handler)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.release()


class SubscriptionGroup:
    """Several subscriptions released together."""

    def __init__(self, subscriptions: Optional[List[Subscription]] = None) -> None:
        self._subscriptions: List[Subscription] = list(subscriptions or [])

    def add(self, subscription: Subscription) -> None:
        self._subscriptions.append(subscription)

    @property
    def active(self) -> bool:
        return any(s.active for s in self._subscriptions)

    def release(self) -> None:
        subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            subscription.release()

    def __len__(self) -> int:
        return len(self._subscriptions)


class Signal:
    """
    Named, synchronous notification channel.

    Usage:

        started = Signal("recording_started")
        sub = started.connect(lambda: print("started"))
        started.emit()
        sub.release()
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._handlers: List[Handler] = []

    def connect(self, handler: Handler) -> Subscription:
        """Connect a handler and return its subscription handle."""
        self._handlers.append(handler)
        LOG.debug("Connected handler to %s (%d total)", self.name, len(self._handlers))
        return Subscription(self, handler)

    def disconnect(self, handler: Handler) -> bool:
        """
        Remove one registration of `handler`.

        Returns:
            True if the handler was connected, False otherwise.
        """
        try:
            self._handlers.remove(handler)
        except ValueError:
            return False
        LOG.debug("Disconnected handler from %s (%d remaining)", self.name, len(self._handlers))
        return True

    def emit(self, *args: Any) -> None:
        """Call every connected handler with `args`."""
        for handler in list(self._handlers):
            try:
                handler(*args)
            except Exception:
                LOG.exception("Handler for signal %s raised", self.name)

    @property
    def handler_count(self) -> int:
        return len(self._handlers)

    def __repr__(self) -> str:
        return f"Signal({self.name!r}, handlers={len(self._handlers)})"


__all__ = [
    "Handler",
    "Subscription",
    "SubscriptionGroup",
    "Signal",
]
