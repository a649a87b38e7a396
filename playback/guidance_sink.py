"""
Guidance sink interface for Reenact playback.

A guidance sink is whatever shows the user what to do next: an outline
or tint on the object to pick up, and a translucent "ghost" copy of the
object where it should be put down. Rendering is host-specific, so the
player only talks to this narrow command interface.

Commands are fire-and-forget; the player never waits on or inspects a
result.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, Set

from common.models.pose import Pose
from common.models.recording import ObjectId
from scene.interactables import Interactable
from .models import GuidanceCommand, GuidanceCommandKind

LOG = logging.getLogger(__name__)


class GuidanceSink(ABC):
    """
    Abstract base class for guidance sinks.

    Implementations should tolerate redundant commands (clearing a
    highlight that is not shown, showing a ghost twice) without error.
    """

    @abstractmethod
    def highlight(self, obj: Interactable) -> None:
        """Mark `obj` as the object to interact with."""
        raise NotImplementedError

    @abstractmethod
    def clear_highlight(self, obj: Interactable) -> None:
        raise NotImplementedError

    @abstractmethod
    def clear_all_highlights(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def show_ghost(self, obj: Interactable, pose: Pose) -> None:
        """Show a non-interactive copy of `obj` at the target `pose`."""
        raise NotImplementedError

    @abstractmethod
    def hide_ghost(self, obj: Interactable) -> None:
        raise NotImplementedError

    @abstractmethod
    def hide_all_ghosts(self) -> None:
        raise NotImplementedError


class NullGuidanceSink(GuidanceSink):
    """
    A sink that ignores every command.

    Useful when a host wants the playback state machine (completion
    tracking, signals) without any visual guidance.
    """

    def highlight(self, obj: Interactable) -> None:
        pass

    def clear_highlight(self, obj: Interactable) -> None:
        pass

    def clear_all_highlights(self) -> None:
        pass

    def show_ghost(self, obj: Interactable, pose: Pose) -> None:
        pass

    def hide_ghost(self, obj: Interactable) -> None:
        pass

    def hide_all_ghosts(self) -> None:
        pass


class CommandLogSink(GuidanceSink):
    """
    Sink that records every command as a GuidanceCommand.

    Hosts that render on another schedule can drain `commands` each
    frame; tests and the demo script inspect it directly. The sink also
    tracks which objects are currently highlighted / ghosted.

    Args:
        id_of:
            Maps a live object to its id (typically the provider's
            `id_of`). Without it, the object's own `object_id` is used.
    """

    def __init__(self, id_of: Optional[Callable[[Interactable], Optional[ObjectId]]] = None) -> None:
        self._id_of = id_of
        self.commands: List[GuidanceCommand] = []
        self.highlighted: Set[ObjectId] = set()
        self.ghosts: Dict[ObjectId, Pose] = {}

    def _object_id(self, obj: Interactable) -> Optional[ObjectId]:
        if self._id_of is not None:
            return self._id_of(obj)
        return getattr(obj, "object_id", None)

    def _record(self, command: GuidanceCommand) -> None:
        self.commands.append(command)
        LOG.info(
            "Guidance: %s%s",
            command.kind.value,
            f" {command.object_id}" if command.object_id is not None else "",
        )

    def highlight(self, obj: Interactable) -> None:
        object_id = self._object_id(obj)
        if object_id is not None:
            self.highlighted.add(object_id)
        self._record(GuidanceCommand(GuidanceCommandKind.HIGHLIGHT, object_id))

    def clear_highlight(self, obj: Interactable) -> None:
        object_id = self._object_id(obj)
        self.highlighted.discard(object_id)  # type: ignore[arg-type]
        self._record(GuidanceCommand(GuidanceCommandKind.CLEAR_HIGHLIGHT, object_id))

    def clear_all_highlights(self) -> None:
        self.highlighted.clear()
        self._record(GuidanceCommand(GuidanceCommandKind.CLEAR_ALL_HIGHLIGHTS))

    def show_ghost(self, obj: Interactable, pose: Pose) -> None:
        object_id = self._object_id(obj)
        if object_id is not None:
            self.ghosts[object_id] = pose
        self._record(GuidanceCommand(GuidanceCommandKind.SHOW_GHOST, object_id, pose))

    def hide_ghost(self, obj: Interactable) -> None:
        object_id = self._object_id(obj)
        self.ghosts.pop(object_id, None)  # type: ignore[arg-type]
        self._record(GuidanceCommand(GuidanceCommandKind.HIDE_GHOST, object_id))

    def hide_all_ghosts(self) -> None:
        self.ghosts.clear()
        self._record(GuidanceCommand(GuidanceCommandKind.HIDE_ALL_GHOSTS))

    # --- inspection helpers --------------------------------------------------

    def commands_of(self, kind: GuidanceCommandKind) -> List[GuidanceCommand]:
        return [c for c in self.commands if c.kind is kind]

    def drain(self) -> List[GuidanceCommand]:
        """Return and forget all recorded commands."""
        commands, self.commands = self.commands, []
        return commands


__all__ = [
    "GuidanceSink",
    "NullGuidanceSink",
    "CommandLogSink",
]
