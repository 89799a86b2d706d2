#!/usr/bin/env python3
"""
Draw player rectangles (and optionally the ground truth) over an image.

Usage:
    python -m cli.render --default --image ocean1 --source photos/ocean1.jpg \\
        --annotations my_boxes.json --ground-truth --output overlay.png

    # Render at a specific canvas size
    python -m cli.render --default --image ocean1 --source photos/ocean1.jpg \\
        --output overlay.png --width 600 --height 400
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import cv2
from pydantic import ValidationError

from cli import setup_logging
from cli.score import add_catalog_arguments, load_catalog
from src.core import BoxEditor, load_image, load_user_annotations


def render_overlay(args: argparse.Namespace) -> int:
    try:
        catalog = load_catalog(args)
        annotations = []
        image_id = args.image
        if args.annotations:
            file_image_id, annotations = load_user_annotations(args.annotations)
            image_id = image_id or file_image_id
        if image_id is None:
            print("Error: No image id given")
            return 1
        image = catalog.get(image_id)
    except (FileNotFoundError, ValueError, ValidationError) as e:
        print(f"Error: {e}")
        return 1

    result = load_image(args.source)
    if not result.ok:
        print(f"Error: {result.error}")
        return 1

    editor = BoxEditor(annotations, targets=image.targets, show_ground_truth=args.ground_truth)
    editor.resize(args.width or result.width, args.height or result.height)
    editor.load_image(result, image.original_width, image.original_height)

    canvas = editor.render()
    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    if not cv2.imwrite(str(output), canvas):
        print(f"Error: Could not write {output}")
        return 1

    width, height = editor.canvas_size
    print(f"Rendered {len(annotations)} annotation(s) on {image.id} at {width}x{height}")
    if args.ground_truth:
        print(f"Ground truth: {len(image.targets)} target(s)")
    print(f"Saved: {output}")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Render annotations over an image",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Player boxes plus ground truth
  python -m cli.render --default --image ocean1 --source photos/ocean1.jpg \\
      --annotations my_boxes.json --ground-truth --output overlay.png
        """,
    )
    add_catalog_arguments(parser)
    parser.add_argument("--source", type=str, required=True, help="Image file to draw on")
    parser.add_argument("--output", type=str, required=True, help="Output image path")
    parser.add_argument("--annotations", type=str, default=None, help="Player annotation JSON file")
    parser.add_argument("--ground-truth", action="store_true", help="Overlay the image's targets")
    parser.add_argument("--width", type=int, default=None, help="Canvas container width")
    parser.add_argument("--height", type=int, default=None, help="Canvas container height")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    args = parser.parse_args()
    setup_logging(args.verbose)

    return render_overlay(args)


if __name__ == "__main__":
    sys.exit(main())
