import logging

from common.models.pose import Pose
from scene.interactables import SimulatedInteractable
from scene.state_provider import InteractableRegistry, RegistryConfig


def test_discovery_captures_initial_states_in_order(registry, cube, sphere) -> None:
    assert len(registry) == 2
    assert list(registry.known_objects()) == ["cube", "sphere"]
    assert [s.object_id for s in registry.initial_states()] == ["cube", "sphere"]
    assert registry.initial_state_of("cube").pose == cube.pose
    assert "sphere" in registry


def test_resolve_and_id_of(registry, cube) -> None:
    assert registry.resolve("cube") is cube
    assert registry.resolve("missing") is None
    assert registry.id_of(cube) == "cube"
    assert registry.id_of(SimulatedInteractable(object_id="cube")) is None


def test_known_objects_is_a_copy(registry) -> None:
    known = registry.known_objects()
    known.clear()
    assert len(registry.known_objects()) == 2


def test_missing_ids_are_generated_and_written_back() -> None:
    anonymous = SimulatedInteractable()
    registry = InteractableRegistry(lambda: [anonymous])

    assert anonymous.object_id
    assert registry.resolve(anonymous.object_id) is anonymous


def test_missing_ids_skipped_without_generation(caplog) -> None:
    anonymous = SimulatedInteractable()
    with caplog.at_level(logging.WARNING):
        registry = InteractableRegistry(
            lambda: [anonymous], RegistryConfig(auto_generate_ids=False)
        )
    assert len(registry) == 0
    assert anonymous.object_id is None
    assert "without object_id" in caplog.text


def test_duplicate_ids_keep_first_registration(caplog) -> None:
    first = SimulatedInteractable(object_id="dup")
    second = SimulatedInteractable(object_id="dup")
    with caplog.at_level(logging.WARNING):
        registry = InteractableRegistry(lambda: [first, second])

    assert registry.resolve("dup") is first
    assert registry.id_of(second) is None
    assert "Duplicate" in caplog.text


def test_reset_all_restores_poses_and_force_releases(registry, cube, sphere) -> None:
    start = cube.pose
    cube.grab()
    cube.move_to(Pose.at(5.0, 5.0, 5.0))
    sphere.move_to(Pose.at(-1.0, 0.0, 0.0))

    registry.reset_all()

    assert cube.pose == start
    assert not cube.is_grabbed
    assert sphere.pose == registry.initial_state_of("sphere").pose


def test_apply_pose_and_reset_object(registry, cube) -> None:
    target = Pose.at(3.0, 0.0, 0.0)
    cube.grab()
    assert registry.apply_pose("cube", target, release=False)
    assert cube.pose == target
    assert cube.is_grabbed

    assert registry.reset_object("cube")
    assert not cube.is_grabbed
    assert cube.pose == registry.initial_state_of("cube").pose

    assert not registry.apply_pose("missing", target)
    assert not registry.reset_object("missing")


def test_capture_current_as_initial(registry, cube) -> None:
    moved = Pose.at(9.0, 0.0, 0.0)
    cube.move_to(moved)
    registry.capture_current_as_initial()
    cube.move_to(Pose.identity())

    registry.reset_all()

    assert cube.pose == moved


def test_rediscover_rebuilds_object_set(cube, sphere) -> None:
    scene = [cube]
    registry = InteractableRegistry(lambda: list(scene))
    assert len(registry) == 1

    cube.move_to(Pose.at(1.0, 1.0, 1.0))
    scene.append(sphere)

    assert registry.rediscover() == 2
    assert registry.initial_state_of("cube").pose == Pose.at(1.0, 1.0, 1.0)
    assert registry.resolve("sphere") is sphere


def test_register_without_discovery() -> None:
    registry = InteractableRegistry()
    assert len(registry) == 0

    obj = SimulatedInteractable(object_id="manual")
    assert registry.register(obj) == "manual"
    assert registry.register(obj) == "manual"
    assert len(registry) == 1
