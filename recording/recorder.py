"""
Interaction recorder for Reenact.

`InteractionRecorder` captures a user's manipulation of interactables as
a `Recording`:

- On start, it snapshots every known object's initial state from the
  ObjectStateProvider and subscribes to the InteractionEventSource.
- On every host tick while armed, it samples object poses, at most once
  per `1 / sampling_frequency` seconds per object.
- On every grab / release notification while armed, it appends an
  InteractionEvent with the object's current pose.
- On stop (explicit, or automatically after the first release), it
  unsubscribes and hands the finalized, immutable Recording to the
  caller.

The recorder never drives the scene. It only reads poses through the
provider and reacts to notifications the host delivers.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from common.clock import Clock, MonotonicClock
from common.errors import InvalidArgumentError
from common.models.recording import (
    InteractionEvent,
    InteractionEventType,
    ObjectId,
    ObjectInitialState,
    Recording,
    TransformSnapshot,
)
from common.signals import Signal, SubscriptionGroup
from scene.interactables import Interactable
from scene.interaction_source import InteractionEventSource
from scene.state_provider import ObjectStateProvider

LOG = logging.getLogger(__name__)


class RecorderState(str, Enum):
    IDLE = "idle"
    ARMED = "armed"


@dataclass
class RecorderConfig:
    """
    Configuration for the InteractionRecorder.

    Attributes:
        sampling_frequency:
            Maximum number of transform snapshots per object per second.
            Ticks that arrive sooner than `1 / sampling_frequency` after an
            object's previous snapshot skip that object.
        record_continuous_transforms:
            If False, no transform snapshots are taken; only initial
            states and interaction events are recorded.
        stop_after_first_release:
            Single-interaction mode: stop recording as soon as the first
            release event has been appended.
    """

    sampling_frequency: float = 30.0
    record_continuous_transforms: bool = True
    stop_after_first_release: bool = True

    @property
    def sampling_period(self) -> float:
        return 1.0 / self.sampling_frequency

    def validate(self) -> None:
        if self.sampling_frequency <= 0:
            raise InvalidArgumentError(
                f"sampling_frequency must be positive, got {self.sampling_frequency}"
            )


class InteractionRecorder:
    """
    Record grab -> move -> release interactions.

    Typical usage:

        recorder = InteractionRecorder(registry, event_source, clock)
        recorder.recording_stopped.connect(store_recording)

        recorder.start_recording()
        # host loop: deliver notifications, then recorder.tick() each frame
        recording = recorder.stop_recording()

    With `stop_after_first_release` enabled (the default) the recording
    ends on its own when the user lets go of the first object; the
    finalized recording is then delivered through `recording_stopped`.
    """

    def __init__(
        self,
        provider: Optional[ObjectStateProvider],
        event_source: Optional[InteractionEventSource] = None,
        clock: Optional[Clock] = None,
        config: Optional[RecorderConfig] = None,
        *,
        base_metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Args:
            provider: ObjectStateProvider used to enumerate objects, read
                poses and map objects to ids.
            event_source: Optional source of live grab / release
                notifications. Without one, the host must call
                `on_object_grabbed` / `on_object_released` itself.
            clock: Time source; defaults to a MonotonicClock.
            config: RecorderConfig; defaults are used if omitted.
            base_metadata: Metadata copied into every Recording produced.
        """
        self._provider = provider
        self._event_source = event_source
        self._clock: Clock = clock or MonotonicClock()
        self._config = config or RecorderConfig()
        self._config.validate()
        self._base_metadata: Dict[str, Any] = dict(base_metadata or {})

        self._state = RecorderState.IDLE
        self._recording_id: str = ""
        self._start_time: float = 0.0
        self._last_event_time: float = 0.0
        self._subscriptions: Optional[SubscriptionGroup] = None

        self._initial_states: List[ObjectInitialState] = []
        self._events: List[InteractionEvent] = []
        self._snapshots: List[TransformSnapshot] = []

        # object_id -> timestamp of that object's latest snapshot
        self._last_sample_time: Dict[ObjectId, float] = {}

        self.recording_started = Signal("recording_started")
        self.recording_stopped = Signal("recording_stopped")
        self.recording_progress = Signal("recording_progress")

    # ------------------------------------------------------------------ #
    # Properties
    # ------------------------------------------------------------------ #

    @property
    def config(self) -> RecorderConfig:
        return self._config

    @property
    def state(self) -> RecorderState:
        return self._state

    @property
    def is_recording(self) -> bool:
        return self._state is RecorderState.ARMED

    @property
    def current_recording_duration(self) -> float:
        """Seconds since recording started, or 0.0 when idle."""
        return self._elapsed() if self.is_recording else 0.0

    # ------------------------------------------------------------------ #
    # Session lifecycle
    # ------------------------------------------------------------------ #

    def start_recording(self) -> bool:
        """
        Arm the recorder.

        Returns:
            True if recording started; False if it was already armed or no
            provider is available (both are logged, state is unchanged).
        """
        if self.is_recording:
            LOG.warning("InteractionRecorder: already recording, start ignored")
            return False

        if self._provider is None:
            LOG.error("InteractionRecorder: no ObjectStateProvider, cannot start recording")
            return False

        self._recording_id = uuid.uuid4().hex
        self._initial_states = list(self._provider.initial_states())
        self._events = []
        self._snapshots = []
        self._last_sample_time.clear()
        self._last_event_time = 0.0
        self._start_time = self._clock.now()

        if self._event_source is not None:
            self._subscriptions = self._event_source.subscribe(
                on_grabbed=self.on_object_grabbed,
                on_released=self.on_object_released,
            )
        else:
            LOG.warning(
                "InteractionRecorder: no event source; grab/release must be reported directly"
            )

        self._state = RecorderState.ARMED
        LOG.info(
            "InteractionRecorder: recording %s started with %d objects",
            self._recording_id,
            len(self._initial_states),
        )
        self.recording_started.emit()
        return True

    def stop_recording(self) -> Optional[Recording]:
        """
        Disarm the recorder and return the finalized recording.

        Safe to call from inside a notification handler (auto-stop on
        release does exactly that).

        Returns:
            The Recording, or None if the recorder was not armed.
        """
        if not self.is_recording:
            LOG.warning("InteractionRecorder: not currently recording, stop ignored")
            return None

        duration = self._elapsed()

        if self._subscriptions is not None:
            self._subscriptions.release()
            self._subscriptions = None

        self._state = RecorderState.IDLE
        recording = self._build_recording(duration)

        # The finalized value belongs to the caller from here on.
        self._initial_states = []
        self._events = []
        self._snapshots = []
        self._last_sample_time.clear()

        LOG.info(
            "InteractionRecorder: recording %s stopped. Duration: %.2fs, %d events, %d snapshots",
            recording.recording_id,
            recording.duration,
            len(recording.interaction_events),
            len(recording.transform_snapshots),
        )
        self.recording_stopped.emit(recording)
        return recording

    def get_current_recording(self) -> Optional[Recording]:
        """
        Immutable snapshot of the recording under construction.

        Returns None when idle; a finished recording is only available
        from `stop_recording()` / `recording_stopped`.
        """
        if not self.is_recording:
            return None
        return self._build_recording(self._elapsed())

    # ------------------------------------------------------------------ #
    # Per-tick sampling
    # ------------------------------------------------------------------ #

    def tick(self) -> None:
        """
        Sampling pass; call once per host frame.

        Does nothing unless armed. Emits `recording_progress(duration)`
        on every armed tick.
        """
        if not self.is_recording:
            return

        now = self._elapsed()
        if self._config.record_continuous_transforms:
            self._sample_transforms(now)

        self.recording_progress.emit(now)

    def _sample_transforms(self, timestamp: float) -> None:
        if self._provider is None:
            LOG.warning("InteractionRecorder: no ObjectStateProvider, sampling skipped")
            return
        period = self._config.sampling_period

        for object_id, obj in self._provider.known_objects().items():
            last = self._last_sample_time.get(object_id)
            if last is not None and timestamp - last < period:
                continue

            self._snapshots.append(
                TransformSnapshot(object_id=object_id, timestamp=timestamp, pose=obj.pose)
            )
            self._last_sample_time[object_id] = timestamp

    # ------------------------------------------------------------------ #
    # Interaction notifications
    # ------------------------------------------------------------------ #

    def on_object_grabbed(self, obj: Interactable) -> None:
        if not self.is_recording:
            LOG.debug("InteractionRecorder: grab ignored while idle")
            return
        self._append_event(obj, InteractionEventType.GRAB)

    def on_object_released(self, obj: Interactable) -> None:
        if not self.is_recording:
            LOG.debug("InteractionRecorder: release ignored while idle")
            return

        if self._append_event(obj, InteractionEventType.RELEASE) is None:
            return

        if self._config.stop_after_first_release:
            self.stop_recording()

    def _append_event(
        self, obj: Interactable, event_type: InteractionEventType
    ) -> Optional[InteractionEvent]:
        if self._provider is None:
            LOG.warning("InteractionRecorder: no ObjectStateProvider, %s skipped", event_type.value)
            return None
        object_id = self._provider.id_of(obj)
        if object_id is None:
            LOG.warning("InteractionRecorder: %s of unknown object %r skipped", event_type.value, obj)
            return None

        # Keep the event list non-decreasing even if the host clock jitters.
        timestamp = max(self._elapsed(), self._last_event_time)
        self._last_event_time = timestamp

        event = InteractionEvent(
            object_id=object_id,
            event_type=event_type,
            timestamp=timestamp,
            pose=obj.pose,
        )
        self._events.append(event)
        LOG.info(
            "InteractionRecorder: object %s %s at %.2fs",
            object_id,
            "grabbed" if event.is_grab else "released",
            timestamp,
        )
        return event

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _elapsed(self) -> float:
        return max(0.0, self._clock.now() - self._start_time)

    def _build_recording(self, duration: float) -> Recording:
        return Recording(
            duration=duration,
            initial_states=tuple(self._initial_states),
            interaction_events=tuple(self._events),
            transform_snapshots=tuple(self._snapshots),
            recording_id=self._recording_id,
            sampling_frequency=self._config.sampling_frequency,
            metadata=dict(self._base_metadata),
        )


__all__ = [
    "RecorderState",
    "RecorderConfig",
    "InteractionRecorder",
]
