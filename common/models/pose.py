"""
Pose model for Reenact.

A pose is the full rigid-body placement of an interactable object at a
moment in time: a position, an orientation (unit quaternion), and a
scale. Poses are what the recorder samples, what interaction events
carry, and what the player shows ghosts at.

All types here are immutable value objects; "moving" an object means
assigning it a new Pose.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Sequence


@dataclass(frozen=True)
class Vector3:
    """Three-component vector used for positions and scales."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def as_tuple(self) -> tuple[float, float, float]:
        """Return (x, y, z)."""
        return self.x, self.y, self.z

    def distance_to(self, other: "Vector3") -> float:
        """Euclidean distance between two points."""
        return math.sqrt(
            (self.x - other.x) ** 2 + (self.y - other.y) ** 2 + (self.z - other.z) ** 2
        )

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> "Vector3":
        if len(values) != 3:
            raise ValueError(f"Vector3 needs 3 components, got {len(values)}")
        return cls(float(values[0]), float(values[1]), float(values[2]))

    @classmethod
    def one(cls) -> "Vector3":
        return cls(1.0, 1.0, 1.0)


@dataclass(frozen=True)
class Quaternion:
    """
    Orientation as a quaternion (x, y, z, w).

    `w` is the scalar component; the default value is the identity
    rotation.
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    @classmethod
    def identity(cls) -> "Quaternion":
        return cls(0.0, 0.0, 0.0, 1.0)

    def as_tuple(self) -> tuple[float, float, float, float]:
        """Return (x, y, z, w)."""
        return self.x, self.y, self.z, self.w

    def magnitude(self) -> float:
        return math.sqrt(self.x**2 + self.y**2 + self.z**2 + self.w**2)

    def normalized(self) -> "Quaternion":
        """
        Return a unit-length copy.

        A (near) zero quaternion carries no orientation; the identity is
        returned in that case.
        """
        mag = self.magnitude()
        if mag < 1e-9:
            return Quaternion.identity()
        return Quaternion(self.x / mag, self.y / mag, self.z / mag, self.w / mag)

    def angle_to(self, other: "Quaternion") -> float:
        """Smallest rotation angle (radians) between two orientations."""
        a = self.normalized()
        b = other.normalized()
        dot = abs(a.x * b.x + a.y * b.y + a.z * b.z + a.w * b.w)
        return 2.0 * math.acos(min(1.0, dot))

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> "Quaternion":
        if len(values) != 4:
            raise ValueError(f"Quaternion needs 4 components, got {len(values)}")
        return cls(float(values[0]), float(values[1]), float(values[2]), float(values[3]))


@dataclass(frozen=True)
class Pose:
    """
    Position, orientation and scale of an object.

    Attributes:
        position:
            World-space position.
        rotation:
            World-space orientation (unit quaternion).
        scale:
            Local scale; (1, 1, 1) by default.
    """

    position: Vector3 = field(default_factory=Vector3)
    rotation: Quaternion = field(default_factory=Quaternion.identity)
    scale: Vector3 = field(default_factory=Vector3.one)

    def __post_init__(self) -> None:
        # Rotation is always stored as a unit quaternion.
        if abs(self.rotation.magnitude() - 1.0) > 1e-6:
            object.__setattr__(self, "rotation", self.rotation.normalized())

    @classmethod
    def identity(cls) -> "Pose":
        return cls()

    @classmethod
    def at(cls, x: float, y: float, z: float) -> "Pose":
        """Convenience constructor: identity rotation, unit scale, given position."""
        return cls(position=Vector3(x, y, z))

    def with_position(self, position: Vector3) -> "Pose":
        return Pose(position=position, rotation=self.rotation, scale=self.scale)

    def is_close(self, other: "Pose", tolerance: float = 1e-6) -> bool:
        """
        Compare two poses component-wise within `tolerance`.

        Rotations are compared by angle, so q and -q (the same
        orientation) are considered equal.
        """
        if self.position.distance_to(other.position) > tolerance:
            return False
        if self.scale.distance_to(other.scale) > tolerance:
            return False
        return self.rotation.angle_to(other.rotation) <= tolerance

    # --- serialization --------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-friendly dict of component lists."""
        return {
            "position": list(self.position.as_tuple()),
            "rotation": list(self.rotation.as_tuple()),
            "scale": list(self.scale.as_tuple()),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Pose":
        """Inverse of `to_dict`; a missing scale defaults to (1, 1, 1)."""
        position = Vector3.from_sequence(data.get("position") or (0.0, 0.0, 0.0))
        rotation = Quaternion.from_sequence(data.get("rotation") or (0.0, 0.0, 0.0, 1.0))
        scale = Vector3.from_sequence(data.get("scale") or (1.0, 1.0, 1.0))
        return cls(position=position, rotation=rotation, scale=scale)


__all__ = [
    "Vector3",
    "Quaternion",
    "Pose",
]
