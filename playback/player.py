"""
Interaction player for Reenact.

`InteractionPlayer` turns a Recording into guidance for a second user:

1) On start, every object in the recording is put back at its recorded
   initial pose (force-releasing anything held), and the object of the
   first recorded grab is highlighted.

2) When the user grabs an object, the player looks up where that object
   was put down in the recording and shows a ghost there.

3) When the user releases an object, its ghost and highlight are
   cleared and the interaction is marked complete. This ends the
   single-interaction session; a new `start_playback()` is needed to go
   again.

The player is pure logic over three collaborators: an
ObjectStateProvider (id <-> object, pose writes), a GuidanceSink
(highlight / ghost commands) and, optionally, an InteractionEventSource
it subscribes to while active. It never writes into the Recording.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import FrozenSet, Optional, Set

from common.models.recording import ObjectId, Recording
from common.signals import Signal, SubscriptionGroup
from scene.interactables import Interactable
from scene.interaction_source import InteractionEventSource
from scene.state_provider import ObjectStateProvider
from .correlation import find_first_grab, find_release_for_object, pair_interactions
from .guidance_sink import GuidanceSink
from .models import PlaybackSessionState, PlaybackState

LOG = logging.getLogger(__name__)

_LIVE_STATES = (PlaybackState.AWAITING_GRAB, PlaybackState.AWAITING_RELEASE)


@dataclass
class PlayerConfig:
    """
    Configuration for the InteractionPlayer.

    - reset_objects_on_start:
        Put every recorded object back at its initial pose when playback
        starts. Hosts that restore the scene themselves can turn this off.
    """

    reset_objects_on_start: bool = True


class InteractionPlayer:
    """
    Single-interaction replay state machine.

    Typical usage:

        player = InteractionPlayer(registry, sink, event_source)
        player.object_interaction_completed.connect(show_well_done)

        player.start_playback(recording)
        # ... user grabs the highlighted object, ghost appears,
        # ... user releases it, interaction completes
        player.stop_playback()

    States: IDLE -> AWAITING_GRAB -> AWAITING_RELEASE -> COMPLETED, and
    back to IDLE on `stop_playback()`.
    """

    def __init__(
        self,
        provider: Optional[ObjectStateProvider],
        sink: Optional[GuidanceSink] = None,
        event_source: Optional[InteractionEventSource] = None,
        config: Optional[PlayerConfig] = None,
    ) -> None:
        self._provider = provider
        self._sink = sink
        self._event_source = event_source
        self._config = config or PlayerConfig()

        self._state = PlaybackState.IDLE
        self._recording: Optional[Recording] = None
        self._target_id: Optional[ObjectId] = None
        self._inert = False
        self._held: Set[ObjectId] = set()
        self._completed: Set[ObjectId] = set()
        self._subscriptions: Optional[SubscriptionGroup] = None

        self.playback_started = Signal("playback_started")
        self.playback_stopped = Signal("playback_stopped")
        self.object_highlighted = Signal("object_highlighted")
        self.object_interaction_completed = Signal("object_interaction_completed")
        self.ghost_shown = Signal("ghost_shown")

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def is_active(self) -> bool:
        """True from `start_playback()` until `stop_playback()`."""
        return self._state is not PlaybackState.IDLE

    @property
    def current_recording(self) -> Optional[Recording]:
        return self._recording

    @property
    def target_object_id(self) -> Optional[ObjectId]:
        """Object of the first recorded grab, once playback has started."""
        return self._target_id

    @property
    def completed_object_ids(self) -> FrozenSet[ObjectId]:
        return frozenset(self._completed)

    @property
    def is_inert(self) -> bool:
        """True if the active recording has no grab event to guide towards."""
        return self._inert

    def session_state(self) -> PlaybackSessionState:
        """Snapshot of the current session for presentation layers."""
        recording = self._recording
        return PlaybackSessionState(
            state=self._state,
            recording_id=recording.recording_id if recording else None,
            target_object_id=self._target_id,
            held_object_ids=frozenset(self._held),
            completed_object_ids=frozenset(self._completed),
            pairs=pair_interactions(recording.interaction_events) if recording else [],
            inert=self._inert,
        )

    # ------------------------------------------------------------------ #
    # Session lifecycle
    # ------------------------------------------------------------------ #

    def start_playback(self, recording: Optional[Recording]) -> bool:
        """
        Load `recording` and start guiding.

        A playback already in progress is stopped first.

        Returns:
            True if playback started; False if `recording` is None (logged,
            the player's state is left untouched).
        """
        if recording is None:
            LOG.error("InteractionPlayer: cannot start playback, recording is None")
            return False

        if self.is_active:
            self.stop_playback()

        # A playback_stopped handler may have started another session.
        self._release_subscriptions()

        self._recording = recording
        self._target_id = None
        self._inert = False
        self._held.clear()
        self._completed.clear()

        # Reset before subscribing: force-releases must not reach this session.
        if self._config.reset_objects_on_start:
            self._reset_to_initial_states(recording)

        self._state = PlaybackState.AWAITING_GRAB
        self._highlight_first_grab(recording)

        if self._event_source is not None:
            self._subscriptions = self._event_source.subscribe(
                on_grabbed=self.on_object_grabbed,
                on_released=self.on_object_released,
            )

        LOG.info("InteractionPlayer: playback of %s started", recording.recording_id or "<unnamed>")
        self.playback_started.emit()
        return True

    def stop_playback(self) -> None:
        """Clear all guidance and return to IDLE. No-op if not active."""
        if not self.is_active:
            LOG.warning("InteractionPlayer: playback not active, stop ignored")
            return

        self._release_subscriptions()

        if self._sink is not None:
            self._sink.clear_all_highlights()
            self._sink.hide_all_ghosts()
        else:
            LOG.warning("InteractionPlayer: no guidance sink, nothing to clear")

        self._state = PlaybackState.IDLE
        self._recording = None
        self._target_id = None
        self._inert = False
        self._held.clear()
        self._completed.clear()

        LOG.info("InteractionPlayer: playback stopped")
        self.playback_stopped.emit()

    # ------------------------------------------------------------------ #
    # Live interaction notifications
    # ------------------------------------------------------------------ #

    def on_object_grabbed(self, obj: Interactable) -> None:
        """
        Show the ghost for the grabbed object at its recorded placement.

        Ignored unless the session is waiting for input. Objects without
        a recorded grab -> release pair get no ghost.
        """
        recording = self._recording
        if self._state not in _LIVE_STATES or recording is None:
            LOG.debug("InteractionPlayer: grab ignored in state %s", self._state.value)
            return

        object_id = self._id_of(obj)
        if object_id is None:
            LOG.warning("InteractionPlayer: grabbed object %r is unknown", obj)
            return

        self._held.add(object_id)
        if object_id == self._target_id and self._state is PlaybackState.AWAITING_GRAB:
            self._state = PlaybackState.AWAITING_RELEASE

        release_event = find_release_for_object(recording.interaction_events, object_id)
        if release_event is None:
            LOG.info("InteractionPlayer: no recorded placement for %s, no ghost shown", object_id)
            return

        if self._sink is None:
            LOG.warning("InteractionPlayer: no guidance sink, ghost for %s skipped", object_id)
            return

        self._sink.show_ghost(obj, release_event.pose)
        self.ghost_shown.emit(object_id, release_event.pose)

    def on_object_released(self, obj: Interactable) -> None:
        """
        Clear guidance for the released object and complete the session.

        Ignored unless the session is waiting for input.
        """
        if self._state not in _LIVE_STATES:
            LOG.debug("InteractionPlayer: release ignored in state %s", self._state.value)
            return

        object_id = self._id_of(obj)
        if object_id is None:
            LOG.warning("InteractionPlayer: released object %r is unknown", obj)
            return

        self._held.discard(object_id)
        if self._sink is not None:
            self._sink.hide_ghost(obj)
            self._sink.clear_highlight(obj)

        self._completed.add(object_id)
        self._state = PlaybackState.COMPLETED

        LOG.info("InteractionPlayer: interaction with %s completed", object_id)
        self.object_interaction_completed.emit(object_id)

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _release_subscriptions(self) -> None:
        if self._subscriptions is not None:
            self._subscriptions.release()
            self._subscriptions = None

    def _reset_to_initial_states(self, recording: Recording) -> None:
        if self._provider is None:
            LOG.warning("InteractionPlayer: no ObjectStateProvider, objects not reset")
            return

        for initial in recording.initial_states:
            if not self._provider.apply_pose(initial.object_id, initial.pose, release=True):
                LOG.warning(
                    "InteractionPlayer: recorded object %s not in scene, reset skipped",
                    initial.object_id,
                )

    def _highlight_first_grab(self, recording: Recording) -> None:
        grab_event = find_first_grab(recording.interaction_events)
        if grab_event is None:
            self._inert = True
            LOG.warning("InteractionPlayer: no grab event found in recording, nothing to guide")
            return

        object_id = grab_event.object_id
        if object_id in self._completed:
            LOG.info("InteractionPlayer: interaction with %s already completed", object_id)
            return

        self._target_id = object_id

        obj = self._provider.resolve(object_id) if self._provider is not None else None
        if obj is None:
            LOG.warning("InteractionPlayer: grab target %s not found in scene", object_id)
            return

        if self._sink is None:
            LOG.warning("InteractionPlayer: no guidance sink, highlight for %s skipped", object_id)
            return

        self._sink.highlight(obj)
        self.object_highlighted.emit(object_id)

    def _id_of(self, obj: Interactable) -> Optional[ObjectId]:
        if self._provider is None:
            return getattr(obj, "object_id", None)
        return self._provider.id_of(obj)


__all__ = [
    "PlayerConfig",
    "InteractionPlayer",
]
