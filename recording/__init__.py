"""
Recording side of Reenact.

The primary entry point is `InteractionRecorder`, which arms on
`start_recording()`, samples object poses on host ticks, appends
grab / release events, and returns an immutable `Recording` on stop.
"""

from .recorder import InteractionRecorder, RecorderConfig, RecorderState

__all__ = [
    "InteractionRecorder",
    "RecorderConfig",
    "RecorderState",
]
