#!/usr/bin/env python3
"""
Record-then-replay demo for Reenact.

This script runs a complete session headlessly, with simulated objects
and a manual clock standing in for an XR scene:

1) Recording: the user grabs the cube at t=0.5s, carries it across the
   table and releases it at t=2.0s. Single-interaction mode stops the
   recording on release.
2) Playback: the cube is put back at its starting pose and highlighted.
   When a second user grabs it, a ghost appears where the first user
   put it down; releasing it completes the interaction.

Every guidance command the player issues is printed (or dumped as JSON).

Typical usage:

    python scripts/replay_demo.py
    python scripts/replay_demo.py -c config/reenact.example.yml --json
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from common.clock import ManualClock
from common.errors import ConfigError
from common.models.pose import Pose, Vector3
from playback.correlation import describe_recording
from playback.guidance_sink import CommandLogSink
from playback.player import InteractionPlayer
from recording.recorder import InteractionRecorder
from scene.interactables import SimulatedInteractable
from scene.interaction_source import InteractionEventSource
from scene.state_provider import InteractableRegistry
from session.controller import InteractionSessionController
from session.host_loop import HostLoop
from session.settings import ReenactSettings, configure_logging, load_settings


FRAME_RATE = 60.0
GRAB_AT = 0.5
RELEASE_AT = 2.0
START_POSITION = Vector3(0.0, 0.8, 0.0)
TARGET_POSITION = Vector3(1.0, 0.8, 0.5)

JSONDict = Dict[str, Any]


# --------------------------------------------------------------------------- #
# Scene & session construction
# --------------------------------------------------------------------------- #


def build_scene() -> List[SimulatedInteractable]:
    return [
        SimulatedInteractable(object_id="cube", pose=Pose(position=START_POSITION), name="Cube"),
        SimulatedInteractable(object_id="sphere", pose=Pose.at(-0.5, 0.8, 0.0), name="Sphere"),
    ]


@dataclass
class DemoSession:
    clock: ManualClock
    source: InteractionEventSource
    registry: InteractableRegistry
    sink: CommandLogSink
    recorder: InteractionRecorder
    player: InteractionPlayer
    loop: HostLoop
    controller: InteractionSessionController


def build_session(settings: ReenactSettings, objects: List[SimulatedInteractable]) -> DemoSession:
    clock = ManualClock()
    source = InteractionEventSource()
    registry = InteractableRegistry(lambda: objects, settings.registry)
    sink = CommandLogSink(id_of=registry.id_of)

    recorder = InteractionRecorder(
        registry,
        source,
        clock,
        settings.recorder,
        base_metadata={"source": "replay_demo"},
    )
    player = InteractionPlayer(registry, sink, source, settings.player)

    return DemoSession(
        clock=clock,
        source=source,
        registry=registry,
        sink=sink,
        recorder=recorder,
        player=player,
        loop=HostLoop(clock, source, recorder),
        controller=InteractionSessionController(recorder, player, registry, sink),
    )


def _lerp(a: Vector3, b: Vector3, t: float) -> Vector3:
    return Vector3(a.x + (b.x - a.x) * t, a.y + (b.y - a.y) * t, a.z + (b.z - a.z) * t)


# --------------------------------------------------------------------------- #
# Scenario
# --------------------------------------------------------------------------- #


def record_interaction(session: DemoSession, obj: SimulatedInteractable) -> None:
    """Grab `obj` at GRAB_AT, carry it to TARGET_POSITION, release at RELEASE_AT."""
    grab_frame = round(GRAB_AT * FRAME_RATE)
    release_frame = round(RELEASE_AT * FRAME_RATE)

    session.controller.toggle_recording()

    for frame in range(release_frame + 1):
        session.clock.set(frame / FRAME_RATE)

        if frame == grab_frame:
            obj.grab()
            session.source.post_grabbed(obj)
        elif grab_frame < frame <= release_frame:
            progress = (frame - grab_frame) / (release_frame - grab_frame)
            obj.move_to(obj.pose.with_position(_lerp(START_POSITION, TARGET_POSITION, progress)))

        if frame == release_frame:
            obj.release()
            session.source.post_released(obj)

        session.loop.tick()

    # Auto-stop may be disabled in settings.
    if session.recorder.is_recording:
        session.controller.toggle_recording()


def replay_interaction(session: DemoSession, obj: SimulatedInteractable) -> None:
    """Start playback and let a second user follow the guidance."""
    session.controller.toggle_playback()

    obj.grab()
    session.source.post_grabbed(obj)
    session.loop.tick()

    obj.move_to(obj.pose.with_position(TARGET_POSITION))
    obj.release()
    session.source.post_released(obj)
    session.loop.tick()


def run_demo(settings: Optional[ReenactSettings] = None) -> JSONDict:
    """
    Run the record -> replay scenario and return a JSON-friendly report.
    """
    settings = settings or ReenactSettings()
    objects = build_scene()
    session = build_session(settings, objects)
    cube = objects[0]

    record_interaction(session, cube)
    recording = session.controller.current_recording
    if recording is None:
        raise RuntimeError("Recording produced no result")

    replay_interaction(session, cube)

    return {
        "recording": describe_recording(recording),
        "interaction_events": [e.to_dict() for e in recording.interaction_events],
        "guidance": [c.to_dict() for c in session.sink.commands],
        "playback": session.player.session_state().to_dict(),
        "status": session.controller.status_label,
        "instruction": session.controller.instruction,
        "ticks": session.loop.tick_count,
    }


# --------------------------------------------------------------------------- #
# Pretty printers
# --------------------------------------------------------------------------- #


def print_report(report: JSONDict) -> None:
    summary = report["recording"]
    print(f"recording_id:  {summary['recording_id']}")
    print(f"duration:      {summary['duration']:.2f}s")
    print(f"objects:       {summary['objects']}")
    print(f"snapshots:     {summary['snapshots']}")
    print(f"first grab:    {summary['first_grab_object_id'] or '-'}")
    print()

    print("Interaction events:")
    for event in report["interaction_events"]:
        position = ", ".join(f"{v:.2f}" for v in event["pose"]["position"])
        print(f"  {event['timestamp']:6.2f}s  {event['event_type']:<8} {event['object_id']}  ({position})")
    print()

    print("Guidance commands:")
    for command in report["guidance"]:
        target = command["object_id"] or "*"
        suffix = ""
        if command["pose"] is not None:
            suffix = " at (" + ", ".join(f"{v:.2f}" for v in command["pose"]["position"]) + ")"
        print(f"  {command['kind']:<22} {target}{suffix}")
    print()

    print(report["status"])
    print(report["instruction"])


# --------------------------------------------------------------------------- #
# Entry point
# --------------------------------------------------------------------------- #


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Record an interaction and replay it as guidance (headless Reenact demo).",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="Path to a Reenact YAML config (default: built-in defaults).",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full report as JSON instead of a summary.",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.config) if args.config else ReenactSettings()
    except ConfigError as exc:
        print(f"ConfigError: {exc}", file=sys.stderr)
        return 2

    configure_logging(settings.logging)
    report = run_demo(settings)

    if args.json:
        print(json.dumps(report, ensure_ascii=False, indent=2))
    else:
        print_report(report)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
