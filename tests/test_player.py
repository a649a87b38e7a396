import logging

import pytest

from common.models.pose import Pose
from common.models.recording import (
    InteractionEvent,
    InteractionEventType,
    ObjectInitialState,
    Recording,
)
from playback.guidance_sink import CommandLogSink
from playback.models import GuidanceCommandKind, PlaybackState
from playback.player import InteractionPlayer, PlayerConfig
from scene.interactables import SimulatedInteractable
from scene.state_provider import InteractableRegistry

GRAB = InteractionEventType.GRAB
RELEASE = InteractionEventType.RELEASE

CUBE_START = Pose.at(0.0, 1.0, 0.0)
SPHERE_START = Pose.at(2.0, 1.0, 0.0)
CUBE_TARGET = Pose.at(1.0, 1.0, 0.5)


def _collect(signal):
    calls = []
    signal.connect(lambda *args: calls.append(args))
    return calls


def _recording(*events, states=None):
    if states is None:
        states = (ObjectInitialState("cube", CUBE_START), ObjectInitialState("sphere", SPHERE_START))
    return Recording(
        duration=2.0,
        initial_states=tuple(states),
        interaction_events=tuple(events),
        recording_id="rec-1",
    )


@pytest.fixture
def recording():
    return _recording(
        InteractionEvent("cube", GRAB, 0.5, CUBE_START),
        InteractionEvent("cube", RELEASE, 2.0, CUBE_TARGET),
    )


def test_start_resets_objects_and_highlights_first_grab(player, sink, source, cube, recording) -> None:
    highlighted = _collect(player.object_highlighted)
    started = _collect(player.playback_started)
    cube.grab()
    cube.move_to(Pose.at(7.0, 7.0, 7.0))

    player.start_playback(recording)

    assert player.is_active
    assert player.state is PlaybackState.AWAITING_GRAB
    assert player.current_recording is recording
    assert player.target_object_id == "cube"
    assert cube.pose == CUBE_START
    assert not cube.is_grabbed
    assert sink.highlighted == {"cube"}
    assert highlighted == [("cube",)]
    assert started == [()]
    assert source.grabbed.handler_count == 1


def test_start_with_none_is_a_logged_noop(player, recording, caplog) -> None:
    started = _collect(player.playback_started)
    with caplog.at_level(logging.ERROR, logger="playback.player"):
        assert player.start_playback(None) is False
    assert not player.is_active
    assert started == []
    assert "recording is None" in caplog.text

    assert player.start_playback(recording) is True
    assert player.start_playback(None) is False
    assert player.is_active
    assert player.current_recording is recording
    assert len(started) == 1


def test_restart_stops_current_playback_first(player, source, recording) -> None:
    stopped = _collect(player.playback_stopped)
    player.start_playback(recording)
    player.start_playback(recording)

    assert len(stopped) == 1
    assert player.is_active
    assert source.grabbed.handler_count == 1


def test_restart_from_stopped_handler_keeps_one_subscription(player, sink, source, cube, recording) -> None:
    other = _recording(
        InteractionEvent("sphere", GRAB, 0.1, SPHERE_START),
        InteractionEvent("sphere", RELEASE, 0.2, Pose.at(5.0, 5.0, 5.0)),
        states=(ObjectInitialState("sphere", SPHERE_START),),
    )
    restarted = []

    def restart_once() -> None:
        if not restarted:
            restarted.append(True)
            player.start_playback(other)

    player.playback_stopped.connect(restart_once)
    player.start_playback(recording)
    player.start_playback(recording)

    assert restarted == [True]
    assert player.current_recording is recording
    assert source.grabbed.handler_count == 1
    assert source.released.handler_count == 1

    source.notify_grabbed(cube)
    assert len(sink.commands_of(GuidanceCommandKind.SHOW_GHOST)) == 1

    player.stop_playback()
    assert source.grabbed.handler_count == 0
    assert source.released.handler_count == 0


def test_start_then_stop_leaves_initial_poses(player, sink, source, cube, sphere, recording) -> None:
    cube.move_to(Pose.at(4.0, 0.0, 0.0))
    sphere.move_to(Pose.at(-4.0, 0.0, 0.0))
    stopped = _collect(player.playback_stopped)

    player.start_playback(recording)
    player.stop_playback()

    assert cube.pose == CUBE_START
    assert sphere.pose == SPHERE_START
    assert not player.is_active
    assert player.state is PlaybackState.IDLE
    assert player.current_recording is None
    assert stopped == [()]
    assert sink.highlighted == set()
    assert sink.ghosts == {}
    assert sink.commands_of(GuidanceCommandKind.CLEAR_ALL_HIGHLIGHTS)
    assert sink.commands_of(GuidanceCommandKind.HIDE_ALL_GHOSTS)
    assert source.grabbed.handler_count == 0
    assert source.released.handler_count == 0


def test_stop_while_idle_is_a_logged_noop(player, caplog) -> None:
    stopped = _collect(player.playback_stopped)
    with caplog.at_level(logging.WARNING, logger="playback.player"):
        player.stop_playback()
    assert stopped == []
    assert "not active" in caplog.text


def test_grab_shows_ghost_at_recorded_release(player, sink, source, cube, recording) -> None:
    ghosts = _collect(player.ghost_shown)
    player.start_playback(recording)

    cube.grab()
    source.notify_grabbed(cube)

    assert player.state is PlaybackState.AWAITING_RELEASE
    assert sink.ghosts == {"cube": CUBE_TARGET}
    assert ghosts == [("cube", CUBE_TARGET)]
    assert player.session_state().held_object_ids == frozenset({"cube"})


def test_interleaved_grabs_use_release_of_same_object() -> None:
    a = SimulatedInteractable(object_id="A", pose=Pose.at(0.0, 0.0, 0.0))
    b = SimulatedInteractable(object_id="B", pose=Pose.at(1.0, 0.0, 0.0))
    registry = InteractableRegistry(lambda: [a, b])
    sink = CommandLogSink(id_of=registry.id_of)
    player = InteractionPlayer(registry, sink)

    release_a = Pose.at(5.0, 0.0, 0.0)
    release_b = Pose.at(6.0, 0.0, 0.0)
    recording = _recording(
        InteractionEvent("A", GRAB, 0.0, Pose.at(0.0, 0.0, 0.0)),
        InteractionEvent("B", GRAB, 1.0, Pose.at(1.0, 0.0, 0.0)),
        InteractionEvent("A", RELEASE, 2.0, release_a),
        InteractionEvent("B", RELEASE, 3.0, release_b),
        states=(ObjectInitialState("A", a.pose), ObjectInitialState("B", b.pose)),
    )

    player.start_playback(recording)
    player.on_object_grabbed(a)

    assert sink.ghosts["A"] == release_a
    assert sink.commands_of(GuidanceCommandKind.SHOW_GHOST)[0].pose == release_a


def test_release_completes_and_later_input_is_ignored(player, sink, source, cube, recording) -> None:
    completed = _collect(player.object_interaction_completed)
    highlighted = _collect(player.object_highlighted)
    player.start_playback(recording)

    source.notify_grabbed(cube)
    source.notify_released(cube)

    assert player.state is PlaybackState.COMPLETED
    assert player.is_active
    assert player.completed_object_ids == frozenset({"cube"})
    assert completed == [("cube",)]
    assert sink.ghosts == {}
    assert sink.highlighted == set()

    commands_before = len(sink.commands)
    source.notify_grabbed(cube)
    source.notify_released(cube)

    assert len(sink.commands) == commands_before
    assert highlighted == [("cube",)]
    assert completed == [("cube",)]
    assert player.session_state().is_finished()


def test_restart_after_completion_highlights_again(player, sink, source, cube, recording) -> None:
    player.start_playback(recording)
    source.notify_grabbed(cube)
    source.notify_released(cube)

    player.start_playback(recording)

    assert player.state is PlaybackState.AWAITING_GRAB
    assert player.completed_object_ids == frozenset()
    assert sink.highlighted == {"cube"}


def test_grab_of_object_without_pair_shows_no_ghost(player, sink, source, sphere, recording) -> None:
    player.start_playback(recording)
    source.notify_grabbed(sphere)

    assert sink.ghosts == {}
    assert player.state is PlaybackState.AWAITING_GRAB
    assert player.target_object_id == "cube"


def test_grab_without_recorded_release_is_tolerated(player, sink, source, cube) -> None:
    player.start_playback(_recording(InteractionEvent("cube", GRAB, 0.5, CUBE_START)))
    source.notify_grabbed(cube)

    assert sink.ghosts == {}
    assert player.state is PlaybackState.AWAITING_RELEASE
    assert [p.is_complete for p in player.session_state().pairs] == [False]


def test_release_without_grab_still_completes(player, source, sphere, recording) -> None:
    player.start_playback(recording)
    source.notify_released(sphere)

    assert player.state is PlaybackState.COMPLETED
    assert player.completed_object_ids == frozenset({"sphere"})


def test_recording_without_grab_is_inert(player, sink, caplog) -> None:
    highlighted = _collect(player.object_highlighted)
    with caplog.at_level(logging.WARNING, logger="playback.player"):
        player.start_playback(_recording())

    assert player.is_active
    assert player.is_inert
    assert player.target_object_id is None
    assert highlighted == []
    assert sink.commands_of(GuidanceCommandKind.HIGHLIGHT) == []
    assert "no grab event" in caplog.text


def test_unknown_recorded_objects_are_skipped(player, sink, cube, recording, caplog) -> None:
    ghost_recording = _recording(
        InteractionEvent("ghost-object", GRAB, 0.1, Pose.identity()),
        InteractionEvent("ghost-object", RELEASE, 0.2, Pose.identity()),
        states=(ObjectInitialState("ghost-object", Pose.identity()), ObjectInitialState("cube", CUBE_START)),
    )
    cube.move_to(Pose.at(3.0, 3.0, 3.0))

    with caplog.at_level(logging.WARNING, logger="playback.player"):
        player.start_playback(ghost_recording)

    assert cube.pose == CUBE_START
    assert player.target_object_id == "ghost-object"
    assert sink.highlighted == set()
    assert "ghost-object" in caplog.text


def test_missing_sink_degrades_to_state_only(registry, source, cube, recording) -> None:
    player = InteractionPlayer(registry, None, source)
    highlighted = _collect(player.object_highlighted)
    completed = _collect(player.object_interaction_completed)

    player.start_playback(recording)
    source.notify_grabbed(cube)
    source.notify_released(cube)
    player.stop_playback()

    assert highlighted == []
    assert completed == [("cube",)]
    assert not player.is_active


def test_missing_provider_still_tracks_completion(sink, cube, recording) -> None:
    player = InteractionPlayer(None, sink)
    cube.move_to(Pose.at(3.0, 0.0, 0.0))

    player.start_playback(recording)
    player.on_object_grabbed(cube)
    player.on_object_released(cube)

    assert cube.pose == Pose.at(3.0, 0.0, 0.0)
    assert player.target_object_id == "cube"
    assert player.completed_object_ids == frozenset({"cube"})


def test_reset_can_be_disabled(registry, sink, cube, recording) -> None:
    player = InteractionPlayer(registry, sink, config=PlayerConfig(reset_objects_on_start=False))
    moved = Pose.at(3.0, 0.0, 0.0)
    cube.move_to(moved)

    player.start_playback(recording)

    assert cube.pose == moved


def test_notifications_ignored_while_idle(player, sink, cube) -> None:
    player.on_object_grabbed(cube)
    player.on_object_released(cube)
    assert sink.commands == []
    assert player.state is PlaybackState.IDLE


def test_session_state_snapshot(player, source, cube, recording) -> None:
    player.start_playback(recording)
    source.notify_grabbed(cube)

    data = player.session_state().to_dict()

    assert data["state"] == "awaiting_release"
    assert data["recording_id"] == "rec-1"
    assert data["target_object_id"] == "cube"
    assert data["held_object_ids"] == ["cube"]
    assert data["pairs"][0]["release"]["timestamp"] == 2.0
    assert data["inert"] is False
