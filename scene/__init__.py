"""
Scene-facing collaborators for Reenact.

This package contains the narrow views Reenact has of the host scene:

- Interactable: protocol for grabbable objects (plus an in-memory
  SimulatedInteractable).
- ObjectStateProvider / InteractableRegistry: id <-> object lookup,
  initial poses, reset.
- InteractionEventSource: live grab / release notifications.

Rendering, physics and input sensing stay in the host.
"""

from .interactables import Interactable, SimulatedInteractable
from .interaction_source import InteractionEventSource, NotificationKind
from .state_provider import (
    InteractableRegistry,
    ObjectStateProvider,
    RegistryConfig,
    TrackedObject,
)

__all__ = [
    "Interactable",
    "SimulatedInteractable",
    "InteractionEventSource",
    "NotificationKind",
    "InteractableRegistry",
    "ObjectStateProvider",
    "RegistryConfig",
    "TrackedObject",
]
