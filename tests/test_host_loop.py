import pytest

from common.clock import MonotonicClock
from common.models.pose import Pose
from session.host_loop import HostLoop


def test_tick_flushes_notifications_before_sampling(recorder, source, clock, cube) -> None:
    loop = HostLoop(clock, source, recorder)
    recorder.start_recording()

    clock.set(0.5)
    cube.move_to(Pose.at(1.0, 0.0, 0.0))
    source.post_grabbed(cube)
    loop.tick()

    recording = recorder.get_current_recording()
    grab = recording.interaction_events[0]
    snapshot = recording.snapshots_for("cube")[0]
    assert grab.timestamp == snapshot.timestamp == 0.5
    assert grab.pose == snapshot.pose
    assert source.pending == 0
    assert loop.tick_count == 1


def test_auto_stop_in_flush_skips_sampling(recorder, source, clock, cube) -> None:
    loop = HostLoop(clock, source, recorder)
    stopped = []
    recorder.recording_stopped.connect(stopped.append)
    recorder.start_recording()

    loop.run([0.0, 0.5])
    source.post_grabbed(cube)
    source.post_released(cube)
    loop.run([1.0])

    recording = stopped[0]
    assert [s.timestamp for s in recording.snapshots_for("cube")] == [0.0, 0.5]
    assert recording.duration == pytest.approx(1.0)


def test_run_sets_manual_clock(recorder, source, clock) -> None:
    loop = HostLoop(clock, source, recorder)
    assert loop.run([0.1, 0.2, 0.3]) == 3
    assert clock.now() == 0.3
    assert loop.tick_count == 3


def test_run_requires_manual_clock(source) -> None:
    loop = HostLoop(MonotonicClock(), source)
    with pytest.raises(TypeError):
        loop.run([0.0])


def test_loop_without_recorder_only_flushes(source, clock, cube) -> None:
    grabbed = []
    source.subscribe(on_grabbed=grabbed.append, on_released=lambda obj: None)
    loop = HostLoop(clock, source)

    source.post_grabbed(cube)
    loop.tick()

    assert grabbed == [cube]
