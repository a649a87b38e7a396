"""
Recording model for Reenact.

A recording is the artifact produced by one recording session. It holds:

- The initial state of every known interactable when recording began.
- The discrete interaction events (grab / release), in temporal order.
- Periodic transform snapshots sampled while recording was armed.

Recordings are immutable: the recorder accumulates into private lists
and hands out a frozen `Recording` built from them. The player only ever
reads a recording.

Field names double as the dict keys used by `to_dict()` / `from_dict()`;
any host-side serialization should round-trip through them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from common.errors import InvalidArgumentError
from .pose import Pose

# Opaque, stable identifier of one interactable across record and replay.
ObjectId = str


class InteractionEventType(str, Enum):
    """Kind of discrete interaction event."""

    GRAB = "grab"
    RELEASE = "release"


@dataclass(frozen=True)
class ObjectInitialState:
    """
    Pose of an object at the start of a session.

    Attributes:
        object_id:
            Identifier of the interactable.
        pose:
            Pose captured when the provider discovered (or re-captured)
            the object.
    """

    object_id: ObjectId
    pose: Pose

    def to_dict(self) -> Dict[str, Any]:
        return {"object_id": self.object_id, "pose": self.pose.to_dict()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ObjectInitialState":
        return cls(object_id=str(data["object_id"]), pose=Pose.from_dict(data["pose"]))


@dataclass(frozen=True)
class InteractionEvent:
    """
    A grab or release of one object.

    Attributes:
        object_id:
            Identifier of the grabbed / released object.
        event_type:
            GRAB or RELEASE.
        timestamp:
            Seconds since the recording started (>= 0).
        pose:
            Object pose at the moment of the event. For a RELEASE this is
            where the object was placed, i.e. the replay target.
    """

    object_id: ObjectId
    event_type: InteractionEventType
    timestamp: float
    pose: Pose

    @property
    def is_grab(self) -> bool:
        return self.event_type is InteractionEventType.GRAB

    @property
    def is_release(self) -> bool:
        return self.event_type is InteractionEventType.RELEASE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "object_id": self.object_id,
            "event_type": self.event_type.value,
            "timestamp": float(self.timestamp),
            "pose": self.pose.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "InteractionEvent":
        return cls(
            object_id=str(data["object_id"]),
            event_type=InteractionEventType(data["event_type"]),
            timestamp=float(data["timestamp"]),
            pose=Pose.from_dict(data["pose"]),
        )


@dataclass(frozen=True)
class TransformSnapshot:
    """Sampled pose of one object at one sampling tick."""

    object_id: ObjectId
    timestamp: float
    pose: Pose

    def to_dict(self) -> Dict[str, Any]:
        return {
            "object_id": self.object_id,
            "timestamp": float(self.timestamp),
            "pose": self.pose.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TransformSnapshot":
        return cls(
            object_id=str(data["object_id"]),
            timestamp=float(data["timestamp"]),
            pose=Pose.from_dict(data["pose"]),
        )


@dataclass(frozen=True)
class Recording:
    """
    Immutable result of one recording session.

    Attributes:
        duration:
            Seconds between StartRecording and StopRecording. For an
            in-progress snapshot this is the elapsed time so far.
        initial_states:
            Initial state of every object known when recording started,
            in provider discovery order.
        interaction_events:
            Grab / release events; insertion order is temporal order.
        transform_snapshots:
            Periodic pose samples.
        recording_id:
            Session identifier assigned by the recorder.
        sampling_frequency:
            Sampling cadence (Hz) in force while the recording was built.
        metadata:
            Free-form host metadata.
    """

    duration: float = 0.0
    initial_states: Tuple[ObjectInitialState, ...] = ()
    interaction_events: Tuple[InteractionEvent, ...] = ()
    transform_snapshots: Tuple[TransformSnapshot, ...] = ()
    recording_id: str = ""
    sampling_frequency: Optional[float] = None
    metadata: Dict[str, Any] = field(default_factory=dict, hash=False)

    # --- queries ---------------------------------------------------------------

    @property
    def is_empty(self) -> bool:
        """True if no events and no snapshots were captured."""
        return not self.interaction_events and not self.transform_snapshots

    def object_ids(self) -> List[ObjectId]:
        """Ids of all objects in the initial states, in order."""
        return [s.object_id for s in self.initial_states]

    def initial_state_for(self, object_id: ObjectId) -> Optional[ObjectInitialState]:
        for state in self.initial_states:
            if state.object_id == object_id:
                return state
        return None

    def events_for(self, object_id: ObjectId) -> List[InteractionEvent]:
        """Interaction events of a single object, in temporal order."""
        return [e for e in self.interaction_events if e.object_id == object_id]

    def snapshots_for(self, object_id: ObjectId) -> List[TransformSnapshot]:
        """Transform snapshots of a single object, in temporal order."""
        return [s for s in self.transform_snapshots if s.object_id == object_id]

    # --- serialization ---------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize the recording to a JSON-friendly dict.

        The core defines no file format; hosts may persist this dict
        however they like.
        """
        return {
            "recording_id": self.recording_id,
            "duration": float(self.duration),
            "sampling_frequency": self.sampling_frequency,
            "initial_states": [s.to_dict() for s in self.initial_states],
            "interaction_events": [e.to_dict() for e in self.interaction_events],
            "transform_snapshots": [s.to_dict() for s in self.transform_snapshots],
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Recording":
        """
        Rebuild a recording from `to_dict()` output.

        Raises:
            InvalidArgumentError if timestamps are negative or the event
            list is not in non-decreasing temporal order.
        """
        events = tuple(InteractionEvent.from_dict(e) for e in data.get("interaction_events", []))
        _check_event_order(events)
        snapshots = tuple(
            TransformSnapshot.from_dict(s) for s in data.get("transform_snapshots", [])
        )
        for snapshot in snapshots:
            if snapshot.timestamp < 0:
                raise InvalidArgumentError(
                    f"Snapshot for '{snapshot.object_id}' has negative timestamp "
                    f"{snapshot.timestamp}"
                )

        frequency = data.get("sampling_frequency")
        return cls(
            duration=float(data.get("duration", 0.0)),
            initial_states=tuple(
                ObjectInitialState.from_dict(s) for s in data.get("initial_states", [])
            ),
            interaction_events=events,
            transform_snapshots=snapshots,
            recording_id=str(data.get("recording_id") or ""),
            sampling_frequency=float(frequency) if frequency is not None else None,
            metadata=dict(data.get("metadata") or {}),
        )


def _check_event_order(events: Iterable[InteractionEvent]) -> None:
    previous = 0.0
    for event in events:
        if event.timestamp < 0:
            raise InvalidArgumentError(
                f"Event for '{event.object_id}' has negative timestamp {event.timestamp}"
            )
        if event.timestamp < previous:
            raise InvalidArgumentError(
                f"Interaction events out of order: {event.timestamp} after {previous}"
            )
        previous = event.timestamp


__all__ = [
    "ObjectId",
    "InteractionEventType",
    "ObjectInitialState",
    "InteractionEvent",
    "TransformSnapshot",
    "Recording",
]
