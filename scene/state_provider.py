"""
Object state provider for Reenact.

The provider is the single owner of "which interactables exist and where
did they start". Its responsibilities are:

- Discover interactables and assign stable object ids.
- Capture each object's initial pose (on discovery or on request).
- Resolve ids to live objects and live objects to ids.
- Write poses back (reset to initial, or an explicit pose) and force
  release held objects while doing so.

The recorder and the player only read through this interface; neither
mutates scene state except via `reset_all`, `reset_object` and
`apply_pose`.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Protocol

from common.models.pose import Pose
from common.models.recording import ObjectId, ObjectInitialState
from .interactables import Interactable

LOG = logging.getLogger(__name__)

DiscoverFn = Callable[[], Iterable[Interactable]]


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0, tzinfo=None).isoformat() + "Z"


class ObjectStateProvider(Protocol):
    """
    Protocol consumed by the recorder and the player.

    All lookups return None for unknown ids / objects rather than
    raising.
    """

    def resolve(self, object_id: ObjectId) -> Optional[Interactable]:
        ...

    def id_of(self, obj: Interactable) -> Optional[ObjectId]:
        ...

    def known_objects(self) -> Dict[ObjectId, Interactable]:
        ...

    def initial_state_of(self, object_id: ObjectId) -> Optional[ObjectInitialState]:
        ...

    def initial_states(self) -> List[ObjectInitialState]:
        ...

    def reset_all(self) -> None:
        ...

    def reset_object(self, object_id: ObjectId) -> bool:
        ...

    def apply_pose(self, object_id: ObjectId, pose: Pose, *, release: bool = True) -> bool:
        ...

    def rediscover(self) -> int:
        ...

    def capture_current_as_initial(self) -> None:
        ...


@dataclass
class TrackedObject:
    """
    Registry entry for one interactable.

    Attributes:
        obj:
            The live interactable.
        initial_state:
            Pose captured on registration or on the last re-capture.
        registered_at:
            ISO 8601 timestamp (UTC) of registration.
    """

    obj: Interactable
    initial_state: ObjectInitialState
    registered_at: str = field(default_factory=_utc_now_iso)


@dataclass
class RegistryConfig:
    """
    Configuration for InteractableRegistry.

    Attributes:
        auto_discover:
            If True, the registry runs discovery once on construction.
        auto_generate_ids:
            If True, objects without an `object_id` get a random id
            assigned (and written back to the object). If False such
            objects are skipped.
    """

    auto_discover: bool = True
    auto_generate_ids: bool = True


class InteractableRegistry:
    """
    In-memory ObjectStateProvider.

    Typical usage:

        registry = InteractableRegistry(lambda: scene.grabbables())

        obj = registry.resolve("cube-1")
        registry.reset_all()

    The registry does not care where interactables come from; the
    discovery callable is invoked on construction (if configured) and on
    every `rediscover()`.
    """

    def __init__(
        self,
        discover: Optional[DiscoverFn] = None,
        config: Optional[RegistryConfig] = None,
    ) -> None:
        self._discover = discover
        self._config = config or RegistryConfig()

        # object_id -> TrackedObject, in discovery order
        self._tracked: Dict[ObjectId, TrackedObject] = {}

        # id(obj) -> object_id
        self._ids_by_identity: Dict[int, ObjectId] = {}

        if self._config.auto_discover and self._discover is not None:
            self.rediscover()

    # ------------------------------------------------------------------ #
    # Registration
    # ------------------------------------------------------------------ #

    def register(self, obj: Interactable) -> Optional[ObjectId]:
        """
        Track a single interactable and capture its initial pose.

        Returns:
            The object's id, or None if it could not be registered
            (missing id with id generation disabled, or duplicate id).
        """
        existing = self._ids_by_identity.get(id(obj))
        if existing is not None:
            return existing

        object_id = obj.object_id
        if not object_id:
            if not self._config.auto_generate_ids:
                LOG.warning("Skipping interactable without object_id: %r", obj)
                return None
            object_id = uuid.uuid4().hex
            obj.object_id = object_id

        if object_id in self._tracked:
            LOG.warning("Duplicate object_id %r ignored (first registration wins)", object_id)
            return None

        self._tracked[object_id] = TrackedObject(
            obj=obj,
            initial_state=ObjectInitialState(object_id=object_id, pose=obj.pose),
        )
        self._ids_by_identity[id(obj)] = object_id
        return object_id

    def rediscover(self) -> int:
        """
        Rebuild the known-object set from the discovery callable and
        re-capture initial poses.

        Returns:
            Number of objects now tracked.
        """
        self._tracked.clear()
        self._ids_by_identity.clear()

        if self._discover is None:
            LOG.warning("InteractableRegistry has no discovery callable; registry is empty")
            return 0

        for obj in self._discover():
            self.register(obj)

        LOG.info("InteractableRegistry: found %d interactable objects", len(self._tracked))
        return len(self._tracked)

    # ------------------------------------------------------------------ #
    # Lookups
    # ------------------------------------------------------------------ #

    def resolve(self, object_id: ObjectId) -> Optional[Interactable]:
        tracked = self._tracked.get(object_id)
        return tracked.obj if tracked is not None else None

    def id_of(self, obj: Interactable) -> Optional[ObjectId]:
        return self._ids_by_identity.get(id(obj))

    def known_objects(self) -> Dict[ObjectId, Interactable]:
        """Snapshot mapping of id -> object, in discovery order."""
        return {object_id: t.obj for object_id, t in self._tracked.items()}

    def initial_state_of(self, object_id: ObjectId) -> Optional[ObjectInitialState]:
        tracked = self._tracked.get(object_id)
        return tracked.initial_state if tracked is not None else None

    def initial_states(self) -> List[ObjectInitialState]:
        return [t.initial_state for t in self._tracked.values()]

    def __len__(self) -> int:
        return len(self._tracked)

    def __contains__(self, object_id: object) -> bool:
        return object_id in self._tracked

    # ------------------------------------------------------------------ #
    # Scene writes
    # ------------------------------------------------------------------ #

    def apply_pose(self, object_id: ObjectId, pose: Pose, *, release: bool = True) -> bool:
        """
        Move a known object to `pose`, force-releasing it first if held
        and `release` is set.

        Returns:
            False if the id is unknown.
        """
        tracked = self._tracked.get(object_id)
        if tracked is None:
            LOG.debug("apply_pose: unknown object_id %r", object_id)
            return False

        obj = tracked.obj
        if release and obj.is_grabbed:
            obj.force_release()
        obj.pose = pose
        return True

    def reset_object(self, object_id: ObjectId) -> bool:
        """Return one object to its stored initial pose."""
        tracked = self._tracked.get(object_id)
        if tracked is None:
            return False
        return self.apply_pose(object_id, tracked.initial_state.pose)

    def reset_all(self) -> None:
        """Return every known object to its stored initial pose."""
        for object_id, tracked in self._tracked.items():
            self.apply_pose(object_id, tracked.initial_state.pose)
        LOG.info("InteractableRegistry: reset %d objects to initial states", len(self._tracked))

    def capture_current_as_initial(self) -> None:
        """Store every object's current pose as its new initial state."""
        for object_id, tracked in self._tracked.items():
            tracked.initial_state = ObjectInitialState(object_id=object_id, pose=tracked.obj.pose)
        LOG.info("InteractableRegistry: captured current states as initial states")


__all__ = [
    "DiscoverFn",
    "ObjectStateProvider",
    "TrackedObject",
    "RegistryConfig",
    "InteractableRegistry",
]
