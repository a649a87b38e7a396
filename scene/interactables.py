"""
Interactable objects as seen by Reenact.

The scene itself (meshes, physics, XR toolkit components) lives in the
host. Reenact only needs a thin view of each grabbable object: a stable
id, a readable/writable pose, whether it is currently held, and a way to
force it out of the user's hand.

`SimulatedInteractable` is an in-memory implementation used by headless
hosts, the demo script, and tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol

from common.models.pose import Pose


class Interactable(Protocol):
    """
    Protocol for grabbable scene objects.

    Attributes:
        object_id:
            Stable identifier, or None if the registry should assign one.
        pose:
            Current pose; assigning it moves the object.
        is_grabbed:
            True while a user holds the object.
    """

    object_id: Optional[str]
    pose: Pose

    @property
    def is_grabbed(self) -> bool:
        ...

    def force_release(self) -> None:
        """Drop the object if it is held. No-op otherwise."""
        ...


@dataclass(eq=False)
class SimulatedInteractable:
    """
    In-memory interactable.

    Grab / release here only flips the held flag; notifying listeners is
    the job of the host's InteractionEventSource, exactly as with real
    sensing hardware.
    """

    object_id: Optional[str] = None
    pose: Pose = field(default_factory=Pose.identity)
    name: Optional[str] = None
    grabbed: bool = False

    @property
    def is_grabbed(self) -> bool:
        return self.grabbed

    def grab(self) -> None:
        self.grabbed = True

    def release(self) -> None:
        self.grabbed = False

    def force_release(self) -> None:
        self.grabbed = False

    def move_to(self, pose: Pose) -> None:
        self.pose = pose

    def __repr__(self) -> str:
        label = self.name or self.object_id or hex(id(self))
        return f"SimulatedInteractable({label!r}, grabbed={self.grabbed})"


__all__ = [
    "Interactable",
    "SimulatedInteractable",
]
