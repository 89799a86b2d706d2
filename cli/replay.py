#!/usr/bin/env python3
"""
Replay a recorded pointer-event script through the box editor.

The script is a JSON document:

    {
      "container_width": 600,
      "container_height": 400,
      "current_label": "Whale",
      "events": [
        {"event": "down", "x": 100, "y": 80},
        {"event": "move", "x": 220, "y": 160},
        {"event": "up", "x": 240, "y": 180},
        {"event": "down", "x": 104, "y": 70},
        {"event": "label", "label": "Kelp"}
      ]
    }

Usage:
    python -m cli.replay --default --image ocean1 --events session.json
    python -m cli.replay --default --image ocean1 --events session.json \\
        --output boxes.json --source photos/ocean1.jpg --snapshot final.png
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

import cv2
from pydantic import ValidationError

from cli import setup_logging
from cli.score import add_catalog_arguments, load_catalog
from src.core import DisplayPoint, GameSession, from_array, load_image, placeholder_image
from src.core.schemas import PointerEventData, PointerScript


def apply_event(editor, event: PointerEventData) -> None:
    point = DisplayPoint(event.x, event.y)
    if event.event == "down":
        editor.pointer_down(point)
    elif event.event == "move":
        editor.pointer_move(point)
    elif event.event == "up":
        editor.pointer_up(point)
    elif event.event == "leave":
        editor.pointer_leave()
    elif event.event == "label":
        editor.choose_label(event.label or "")
    elif event.event == "dismiss":
        editor.dismiss_popup()
    elif event.event == "resize":
        editor.resize(event.width or 0, event.height or 0)


def replay_events(args: argparse.Namespace) -> int:
    events_path = Path(args.events)
    if not events_path.exists():
        print(f"Error: Events file not found: {events_path}")
        return 1

    try:
        catalog = load_catalog(args)
        with open(events_path) as f:
            script = PointerScript.model_validate(json.load(f))
        if args.image is None:
            print("Error: --image is required for replay")
            return 1
        session = GameSession(catalog, round_number=3)
        image = session.select_image(args.image)
        if script.current_label:
            session.set_current_label(script.current_label)
    except (FileNotFoundError, ValueError, ValidationError) as e:
        print(f"Error: {e}")
        return 1

    if args.source:
        result = load_image(args.source)
    else:
        result = from_array(placeholder_image(image.original_width, image.original_height), source=image.image_path)
    if not result.ok:
        print(f"Error: {result.error}")
        return 1

    editor = session.create_editor()
    editor.resize(script.container_width, script.container_height)
    editor.load_image(result, image.original_width, image.original_height)

    for event in script.events:
        apply_event(editor, event)

    annotations = session.annotations
    print(f"Replayed {len(script.events)} event(s) on {image.id}")
    print(f"Final state: {type(editor.state).__name__}")
    print(f"Annotations: {len(annotations)}")
    for annotation in annotations:
        c0, c1 = annotation.coordinates
        print(f"  {annotation.id}  {annotation.label:<20} ({c0.x:.0f}, {c0.y:.0f}) - ({c1.x:.0f}, {c1.y:.0f})")

    if args.output:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, "w") as f:
            json.dump({"imageId": image.id, "annotations": [a.to_dict() for a in annotations]}, f, indent=2)
        print(f"Saved annotations: {output}")

    if args.snapshot:
        snapshot = Path(args.snapshot)
        snapshot.parent.mkdir(parents=True, exist_ok=True)
        cv2.imwrite(str(snapshot), editor.render())
        print(f"Saved snapshot: {snapshot}")

    return 0


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Replay pointer events through the box editor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Print the rectangles a recorded session produces
  python -m cli.replay --default --image ocean1 --events session.json

  # Save them for scoring, plus a rendered snapshot
  python -m cli.replay --default --image ocean1 --events session.json \\
      --output boxes.json --snapshot final.png
        """,
    )
    add_catalog_arguments(parser)
    parser.add_argument("--events", type=str, required=True, help="Pointer event script (JSON)")
    parser.add_argument("--output", type=str, default=None, help="Write resulting annotations as JSON")
    parser.add_argument("--source", type=str, default=None, help="Image file (placeholder if omitted)")
    parser.add_argument("--snapshot", type=str, default=None, help="Write the final canvas as an image")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    args = parser.parse_args()
    setup_logging(args.verbose)

    return replay_events(args)


if __name__ == "__main__":
    sys.exit(main())
