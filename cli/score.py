#!/usr/bin/env python3
"""
Score a player's rectangles against one catalog image.

Usage:
    # Score against the built-in ocean catalog
    python -m cli.score --default --image ocean1 --annotations my_boxes.json

    # Custom catalog, with a time bonus, as JSON
    python -m cli.score --catalog data/catalog.json --image reef2 \\
        --annotations my_boxes.json --time-bonus 12 --json
"""

from __future__ import annotations

import argparse
import json
import sys

from pydantic import ValidationError

from cli import setup_logging
from src.core import ImageCatalog, load_user_annotations, match_summary, round_score, score_feedback


def load_catalog(args: argparse.Namespace) -> ImageCatalog:
    if args.catalog:
        return ImageCatalog.from_json(args.catalog)
    return ImageCatalog.default()


def add_catalog_arguments(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--catalog", type=str, help="Catalog JSON file")
    source.add_argument("--default", action="store_true", help="Use the built-in ocean catalog")
    parser.add_argument("--image", type=str, default=None, help="Image id within the catalog")


def score_annotations(args: argparse.Namespace) -> int:
    try:
        catalog = load_catalog(args)
        file_image_id, annotations = load_user_annotations(args.annotations)
        image_id = args.image or file_image_id
        if image_id is None:
            print("Error: No image id given (use --image or set imageId in the annotation file)")
            return 1
        image = catalog.get(image_id)
    except (FileNotFoundError, ValueError, ValidationError) as e:
        print(f"Error: {e}")
        return 1

    result = round_score(annotations, image.targets)
    summary = match_summary(annotations, image.targets)
    final = result.final(args.time_bonus)

    if args.json:
        print(
            json.dumps(
                {
                    "imageId": image.id,
                    **result.to_dict(),
                    "timeBonus": args.time_bonus,
                    "finalScore": final,
                    "message": summary.message,
                },
                indent=2,
            )
        )
        return 0

    print(f"Image: {image.title or image.id} ({image.difficulty})")
    print(f"Annotations: {len(annotations)}  Targets: {len(image.targets)}")
    print()
    print(f"{'Target':<12} {'Label':<20} {'Score':<7} {'Found':<7} {'Matched':<10}")
    print("-" * 60)
    for item in result.per_target:
        print(
            f"{item.target_id:<12} {item.label:<20} {item.score:<7} "
            f"{'yes' if item.found else 'no':<7} {item.matched_annotation_id or '-':<10}"
        )
    print()
    print(summary.message)
    print(f"Normalized: {result.normalized}  Time bonus: {args.time_bonus}  Final: {final}")
    print(score_feedback(final))

    return 0


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Score player rectangles against ground truth",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Score against the built-in catalog
  python -m cli.score --default --image ocean1 --annotations my_boxes.json

  # JSON output with a time bonus
  python -m cli.score --catalog data/catalog.json --image reef2 \\
      --annotations my_boxes.json --time-bonus 12 --json
        """,
    )
    add_catalog_arguments(parser)
    parser.add_argument("--annotations", type=str, required=True, help="Player annotation JSON file")
    parser.add_argument("--time-bonus", type=int, default=0, help="Time bonus added to the normalized score")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    args = parser.parse_args()
    setup_logging(args.verbose)

    return score_annotations(args)


if __name__ == "__main__":
    sys.exit(main())
