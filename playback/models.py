"""
Models for Reenact playback.

These are pure data structures used by the player, the guidance sink
and presentation layers. They do not touch the scene.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

from common.models.pose import Pose
from common.models.recording import InteractionEvent, ObjectId


# --------------------------------------------------------------------------- #
# Playback state machine
# --------------------------------------------------------------------------- #


class PlaybackState(str, Enum):
    """
    State of a single-interaction playback session.

    IDLE:
        No recording loaded.
    AWAITING_GRAB:
        Recording loaded, target highlighted (if any); waiting for the
        user to pick the object up.
    AWAITING_RELEASE:
        The target is in the user's hand; its ghost shows where to put it.
    COMPLETED:
        A release ended the interaction. Live input is ignored until the
        session is stopped or restarted.
    """

    IDLE = "idle"
    AWAITING_GRAB = "awaiting_grab"
    AWAITING_RELEASE = "awaiting_release"
    COMPLETED = "completed"


# --------------------------------------------------------------------------- #
# Guidance commands
# --------------------------------------------------------------------------- #


class GuidanceCommandKind(str, Enum):
    """Commands the player can send to a guidance sink."""

    HIGHLIGHT = "highlight"
    CLEAR_HIGHLIGHT = "clear_highlight"
    CLEAR_ALL_HIGHLIGHTS = "clear_all_highlights"
    SHOW_GHOST = "show_ghost"
    HIDE_GHOST = "hide_ghost"
    HIDE_ALL_GHOSTS = "hide_all_ghosts"


@dataclass(frozen=True)
class GuidanceCommand:
    """
    One guidance command, as recorded by a CommandLogSink.

    `object_id` is None for the "all" commands; `pose` is only set for
    SHOW_GHOST.
    """

    kind: GuidanceCommandKind
    object_id: Optional[ObjectId] = None
    pose: Optional[Pose] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "object_id": self.object_id,
            "pose": self.pose.to_dict() if self.pose else None,
        }


# --------------------------------------------------------------------------- #
# Correlated interactions
# --------------------------------------------------------------------------- #


@dataclass(frozen=True)
class InteractionPair:
    """
    A grab and the release that answers it (same object, later in time).

    `release` is None when the recording has no matching release.
    """

    grab: InteractionEvent
    release: Optional[InteractionEvent] = None

    @property
    def object_id(self) -> ObjectId:
        return self.grab.object_id

    @property
    def is_complete(self) -> bool:
        return self.release is not None

    @property
    def target_pose(self) -> Optional[Pose]:
        """Where the object should end up, if known."""
        return self.release.pose if self.release is not None else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "object_id": self.object_id,
            "grab": self.grab.to_dict(),
            "release": self.release.to_dict() if self.release else None,
        }


# --------------------------------------------------------------------------- #
# Session snapshot
# --------------------------------------------------------------------------- #


@dataclass
class PlaybackSessionState:
    """
    Read-only snapshot of a player's session, for presentation layers
    and diagnostics.
    """

    state: PlaybackState
    recording_id: Optional[str] = None
    target_object_id: Optional[ObjectId] = None
    held_object_ids: FrozenSet[ObjectId] = frozenset()
    completed_object_ids: FrozenSet[ObjectId] = frozenset()
    pairs: List[InteractionPair] = field(default_factory=list)
    inert: bool = False

    def is_finished(self) -> bool:
        return self.state is PlaybackState.COMPLETED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "recording_id": self.recording_id,
            "target_object_id": self.target_object_id,
            "held_object_ids": sorted(self.held_object_ids),
            "completed_object_ids": sorted(self.completed_object_ids),
            "pairs": [p.to_dict() for p in self.pairs],
            "inert": bool(self.inert),
        }


__all__ = [
    "PlaybackState",
    "GuidanceCommandKind",
    "GuidanceCommand",
    "InteractionPair",
    "PlaybackSessionState",
]
