import pytest

from common.clock import ManualClock
from common.models.pose import Pose
from playback.guidance_sink import CommandLogSink
from playback.player import InteractionPlayer
from recording.recorder import InteractionRecorder, RecorderConfig
from scene.interactables import SimulatedInteractable
from scene.interaction_source import InteractionEventSource
from scene.state_provider import InteractableRegistry


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def cube() -> SimulatedInteractable:
    return SimulatedInteractable(object_id="cube", pose=Pose.at(0.0, 1.0, 0.0), name="Cube")


@pytest.fixture
def sphere() -> SimulatedInteractable:
    return SimulatedInteractable(object_id="sphere", pose=Pose.at(2.0, 1.0, 0.0), name="Sphere")


@pytest.fixture
def registry(cube, sphere) -> InteractableRegistry:
    return InteractableRegistry(lambda: [cube, sphere])


@pytest.fixture
def source() -> InteractionEventSource:
    return InteractionEventSource()


@pytest.fixture
def sink(registry) -> CommandLogSink:
    return CommandLogSink(id_of=registry.id_of)


@pytest.fixture
def recorder(registry, source, clock) -> InteractionRecorder:
    return InteractionRecorder(registry, source, clock, RecorderConfig())


@pytest.fixture
def player(registry, sink, source) -> InteractionPlayer:
    return InteractionPlayer(registry, sink, source)
