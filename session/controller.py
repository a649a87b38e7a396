"""
Record / playback / reset session logic.

`InteractionSessionController` is the mode logic behind a three-button
panel ("Record", "Playback", "Reset") without the panel itself. A host
UI binds its buttons to `toggle_recording()`, `toggle_playback()` and
`reset()`, enables them from `can_record` / `can_play`, and displays
`status_label` and `instruction`.

The controller keeps the most recent recording. Recordings that stop on
their own (single-interaction mode) arrive through the recorder's
`recording_stopped` signal, so the host never has to poll for them.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from common.models.recording import ObjectId, Recording
from common.signals import SubscriptionGroup
from playback.guidance_sink import GuidanceSink
from playback.player import InteractionPlayer
from recording.recorder import InteractionRecorder
from scene.state_provider import ObjectStateProvider

LOG = logging.getLogger(__name__)


class SessionMode(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"
    PLAYBACK = "playback"


INSTRUCTION_READY = "Ready. Press Record to capture a single interaction (grab, move, release)."
INSTRUCTION_RECORDING = "Recording... Grab an object, move it, and release it."
INSTRUCTION_PLAYBACK = (
    "Playback active. Pick up the highlighted object and place it at the green ghost location."
)
INSTRUCTION_HIGHLIGHTED = "Pick up the highlighted object."
INSTRUCTION_COMPLETED = "Interaction completed! Press Reset to try again."
INSTRUCTION_NO_RECORDING = "No recording available. Please record an interaction first."

_STATUS_LABELS = {
    SessionMode.IDLE: "Status: IDLE",
    SessionMode.RECORDING: "Status: RECORDING",
    SessionMode.PLAYBACK: "Status: PLAYBACK",
}


class InteractionSessionController:
    """
    Coordinates one recorder and one player over a shared scene.

    Recording and playback are mutually exclusive: starting one stops
    the other first.
    """

    def __init__(
        self,
        recorder: InteractionRecorder,
        player: InteractionPlayer,
        provider: Optional[ObjectStateProvider] = None,
        sink: Optional[GuidanceSink] = None,
    ) -> None:
        self._recorder = recorder
        self._player = player
        self._provider = provider
        self._sink = sink

        self._recording: Optional[Recording] = None
        self._instruction = INSTRUCTION_READY

        self._subscriptions = SubscriptionGroup()
        self._subscriptions.add(recorder.recording_started.connect(self._on_mode_changed))
        self._subscriptions.add(recorder.recording_stopped.connect(self._on_recording_stopped))
        self._subscriptions.add(player.playback_started.connect(self._on_mode_changed))
        self._subscriptions.add(player.playback_stopped.connect(self._on_mode_changed))
        self._subscriptions.add(player.object_highlighted.connect(self._on_object_highlighted))
        self._subscriptions.add(
            player.object_interaction_completed.connect(self._on_interaction_completed)
        )

    # ------------------------------------------------------------------ #
    # Presentation state
    # ------------------------------------------------------------------ #

    @property
    def mode(self) -> SessionMode:
        if self._recorder.is_recording:
            return SessionMode.RECORDING
        if self._player.is_active:
            return SessionMode.PLAYBACK
        return SessionMode.IDLE

    @property
    def can_record(self) -> bool:
        return not self._player.is_active

    @property
    def can_play(self) -> bool:
        return not self._recorder.is_recording and self._recording is not None

    @property
    def status_label(self) -> str:
        return _STATUS_LABELS[self.mode]

    @property
    def instruction(self) -> str:
        return self._instruction

    @property
    def current_recording(self) -> Optional[Recording]:
        """Most recent finished recording, if any."""
        return self._recording

    # ------------------------------------------------------------------ #
    # Button actions
    # ------------------------------------------------------------------ #

    def toggle_recording(self) -> SessionMode:
        """Stop recording if armed, otherwise start (stopping playback first)."""
        if self._recorder.is_recording:
            recording = self._recorder.stop_recording()
            if recording is not None:
                self._recording = recording
        else:
            if self._player.is_active:
                self._player.stop_playback()
            self._recorder.start_recording()

        self._refresh_instruction()
        return self.mode

    def toggle_playback(self) -> SessionMode:
        """
        Stop playback if active, otherwise replay the latest recording.

        A running recording is stopped first and becomes the recording
        that is played back.
        """
        if self._player.is_active:
            self._player.stop_playback()
            self._refresh_instruction()
            return self.mode

        if self._recorder.is_recording:
            recording = self._recorder.stop_recording()
            if recording is not None:
                self._recording = recording

        if self._recording is None:
            LOG.warning("InteractionSessionController: no recording available to play back")
            self._instruction = INSTRUCTION_NO_RECORDING
            return self.mode

        self._player.start_playback(self._recording)
        self._refresh_instruction()
        return self.mode

    def reset(self) -> None:
        """Stop everything, put objects back, clear guidance and forget the recording."""
        if self._recorder.is_recording:
            self._recorder.stop_recording()
        if self._player.is_active:
            self._player.stop_playback()

        if self._provider is not None:
            self._provider.reset_all()
        else:
            LOG.warning("InteractionSessionController: no ObjectStateProvider, objects not reset")

        if self._sink is not None:
            self._sink.clear_all_highlights()
            self._sink.hide_all_ghosts()

        self._recording = None
        self._instruction = INSTRUCTION_READY
        LOG.info("InteractionSessionController: session reset")

    def close(self) -> None:
        """Disconnect from the recorder and player signals."""
        self._subscriptions.release()

    # ------------------------------------------------------------------ #
    # Signal handlers
    # ------------------------------------------------------------------ #

    def _refresh_instruction(self) -> None:
        mode = self.mode
        if mode is SessionMode.RECORDING:
            self._instruction = INSTRUCTION_RECORDING
        elif mode is SessionMode.PLAYBACK:
            self._instruction = INSTRUCTION_PLAYBACK
        else:
            self._instruction = INSTRUCTION_READY

    def _on_mode_changed(self) -> None:
        self._refresh_instruction()

    def _on_recording_stopped(self, recording: Recording) -> None:
        self._recording = recording
        self._refresh_instruction()

    def _on_object_highlighted(self, object_id: ObjectId) -> None:
        self._instruction = INSTRUCTION_HIGHLIGHTED

    def _on_interaction_completed(self, object_id: ObjectId) -> None:
        self._instruction = INSTRUCTION_COMPLETED


__all__ = [
    "SessionMode",
    "InteractionSessionController",
    "INSTRUCTION_READY",
    "INSTRUCTION_RECORDING",
    "INSTRUCTION_PLAYBACK",
    "INSTRUCTION_HIGHLIGHTED",
    "INSTRUCTION_COMPLETED",
    "INSTRUCTION_NO_RECORDING",
]
