"""
Playback side of Reenact.

This package contains the framework-agnostic building blocks for
guided replay:

- Data models for playback state, guidance commands and correlated
  grab / release pairs.
- The GuidanceSink interface the player sends highlight / ghost
  commands to.
- Correlation helpers pairing grabs with their releases.
- The InteractionPlayer state machine.

Nothing here renders anything; presentation layers implement
GuidanceSink.
"""

from .models import (
    GuidanceCommand,
    GuidanceCommandKind,
    InteractionPair,
    PlaybackSessionState,
    PlaybackState,
)
from .guidance_sink import CommandLogSink, GuidanceSink, NullGuidanceSink
from .correlation import (
    describe_recording,
    find_first_grab,
    find_release_for_object,
    pair_interactions,
    unmatched_grabs,
)
from .player import InteractionPlayer, PlayerConfig

__all__ = [
    # models
    "GuidanceCommand",
    "GuidanceCommandKind",
    "InteractionPair",
    "PlaybackSessionState",
    "PlaybackState",
    # guidance_sink
    "CommandLogSink",
    "GuidanceSink",
    "NullGuidanceSink",
    # correlation
    "describe_recording",
    "find_first_grab",
    "find_release_for_object",
    "pair_interactions",
    "unmatched_grabs",
    # player
    "InteractionPlayer",
    "PlayerConfig",
]
