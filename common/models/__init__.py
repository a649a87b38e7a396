"""
Shared data models for Reenact.

- Pose primitives (`pose.py`).
- The recording artifact and its parts (`recording.py`).
"""

from .pose import Pose, Quaternion, Vector3
from .recording import (
    InteractionEvent,
    InteractionEventType,
    ObjectId,
    ObjectInitialState,
    Recording,
    TransformSnapshot,
)

__all__ = [
    "Pose",
    "Quaternion",
    "Vector3",
    "InteractionEvent",
    "InteractionEventType",
    "ObjectId",
    "ObjectInitialState",
    "Recording",
    "TransformSnapshot",
]
