"""
Grab / release correlation for Reenact playback.

A recording is a flat, time-ordered list of grab and release events,
possibly for several objects. Playback needs to answer two questions:

- Which object should the user pick up first?  -> `find_first_grab`
- Where should a given object be put down?      -> `find_release_for_object`

The pairing rule is: the first GRAB of an object, then the next RELEASE
of the *same* object after it. Events for other objects in between are
skipped, so interleaved interactions (grab A, grab B, release A,
release B) pair each release with its own object.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence

from common.models.recording import InteractionEvent, ObjectId, Recording
from .models import InteractionPair

LOG = logging.getLogger(__name__)


def find_first_grab(events: Iterable[InteractionEvent]) -> Optional[InteractionEvent]:
    """Return the earliest GRAB event, or None if there is none."""
    for event in events:
        if event.is_grab:
            return event
    return None


def find_release_for_object(
    events: Iterable[InteractionEvent],
    object_id: ObjectId,
) -> Optional[InteractionEvent]:
    """
    Return the release that answers the first grab of `object_id`.

    Scans in order: first the GRAB of `object_id`, then the next
    RELEASE of `object_id` after it.

    Returns:
        The RELEASE event, or None if the object was never grabbed or
        never released after its first grab.
    """
    found_grab = False
    for event in events:
        if event.object_id != object_id:
            continue
        if event.is_grab:
            found_grab = True
        elif found_grab:
            return event
    return None


def pair_interactions(events: Sequence[InteractionEvent]) -> List[InteractionPair]:
    """
    Pair every GRAB with the next RELEASE of the same object.

    Pairs are returned in grab order. A grab with no later release for
    its object produces a pair with `release=None`. A grab that follows
    another unanswered grab of the same object (a re-grab without a
    recorded release) starts a new pair; the earlier one stays open.

    Releases that answer no grab are ignored.
    """
    pairs: List[InteractionPair] = []
    # object_id -> indices into `pairs` still waiting for a release
    open_pairs: Dict[ObjectId, List[int]] = {}

    for event in events:
        if event.is_grab:
            open_pairs.setdefault(event.object_id, []).append(len(pairs))
            pairs.append(InteractionPair(grab=event))
            continue

        waiting = open_pairs.get(event.object_id)
        if not waiting:
            LOG.debug("Release of %s at %.2fs answers no grab", event.object_id, event.timestamp)
            continue
        index = waiting.pop(0)
        pairs[index] = InteractionPair(grab=pairs[index].grab, release=event)

    return pairs


def unmatched_grabs(events: Sequence[InteractionEvent]) -> List[InteractionEvent]:
    """GRAB events that have no matching release."""
    return [p.grab for p in pair_interactions(events) if not p.is_complete]


def describe_recording(recording: Recording) -> Dict[str, object]:
    """
    Summarize a recording for logs and the demo CLI.

    Returns a JSON-friendly dict with counts, the first grab target and
    whether the recording is inert (no grab to guide towards).
    """
    first_grab = find_first_grab(recording.interaction_events)
    pairs = pair_interactions(recording.interaction_events)
    return {
        "recording_id": recording.recording_id,
        "duration": round(float(recording.duration), 3),
        "objects": len(recording.initial_states),
        "events": len(recording.interaction_events),
        "snapshots": len(recording.transform_snapshots),
        "first_grab_object_id": first_grab.object_id if first_grab else None,
        "complete_pairs": sum(1 for p in pairs if p.is_complete),
        "unmatched_grabs": sum(1 for p in pairs if not p.is_complete),
        "inert": first_grab is None,
    }


__all__ = [
    "find_first_grab",
    "find_release_for_object",
    "pair_interactions",
    "unmatched_grabs",
    "describe_recording",
]
