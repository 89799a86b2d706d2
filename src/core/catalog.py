"""Ocean image catalog and ground-truth loading."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

from loguru import logger
from pydantic import ValidationError

from src.core.annotations import TargetAnnotation, UserAnnotation, generate_id
from src.core.geometry import ScoringPoint
from src.core.schemas import AnnotationFile, CatalogFile, OceanImageData, TargetAnnotationData

Difficulty = Literal["easy", "medium", "hard"]

# Difficulties unlocked at each round; later rounds use the last entry
ROUND_DIFFICULTIES: list[tuple[Difficulty, ...]] = [
    ("easy",),
    ("easy", "medium"),
    ("easy", "medium", "hard"),
]


@dataclass
class OceanImage:
    """One photo and its ground truth."""

    id: str
    title: str
    image_path: str
    original_width: int
    original_height: int
    difficulty: Difficulty = "easy"
    description: str = ""
    targets: list[TargetAnnotation] = field(default_factory=list)

    @property
    def labels(self) -> list[str]:
        return list(dict.fromkeys(t.label for t in self.targets))


def _target_from_data(data: TargetAnnotationData) -> TargetAnnotation:
    return TargetAnnotation(
        id=data.id,
        label=data.label,
        coordinates=tuple(ScoringPoint(p.x, p.y) for p in data.coordinates),
        type=data.type,
    )


def _image_from_data(data: OceanImageData) -> OceanImage:
    targets = []
    for raw in data.target_annotations:
        try:
            targets.append(_target_from_data(TargetAnnotationData.model_validate(raw)))
        except ValidationError as e:
            logger.warning(f"Skipping target {raw.get('id', '?')} in image {data.id}: {e.error_count()} error(s)")

    return OceanImage(
        id=data.id,
        title=data.title,
        image_path=data.image_path,
        original_width=data.original_width,
        original_height=data.original_height,
        difficulty=data.difficulty,
        description=data.description,
        targets=targets,
    )


def labels_for(images: list[OceanImage]) -> list[str]:
    """All distinct target labels across a set of images, in first-seen order."""
    return list(dict.fromkeys(label for image in images for label in image.labels))


class ImageCatalog:
    """
    The set of images a game can be played on.

    Images are never mutated after loading; the game only reads their targets.
    """

    def __init__(self, images: list[OceanImage]):
        self._images = list(images)
        self._by_id = {image.id: image for image in self._images}

    @property
    def images(self) -> list[OceanImage]:
        return list(self._images)

    def __len__(self) -> int:
        return len(self._images)

    def get(self, image_id: str) -> OceanImage:
        if image_id not in self._by_id:
            raise ValueError(f"Image '{image_id}' not found in catalog")
        return self._by_id[image_id]

    def progressive_image_set(self, round_number: int) -> list[OceanImage]:
        """
        Images for a round, easiest first.

        Round 1 plays easy images, round 2 adds medium, round 3+ plays all.
        Images without ground truth are left out.
        """
        index = min(max(round_number, 1), len(ROUND_DIFFICULTIES)) - 1
        allowed = ROUND_DIFFICULTIES[index]
        order = {d: i for i, d in enumerate(("easy", "medium", "hard"))}

        images = [img for img in self._images if img.difficulty in allowed and img.targets]
        return sorted(images, key=lambda img: order[img.difficulty])

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ImageCatalog:
        """Build a catalog from a parsed document; malformed entries are skipped."""
        document = CatalogFile.model_validate(data)

        images = []
        for raw in document.images:
            try:
                images.append(_image_from_data(OceanImageData.model_validate(raw)))
            except ValidationError as e:
                logger.warning(f"Skipping image {raw.get('id', '?')}: {e.error_count()} error(s)")

        logger.info(f"Catalog loaded: {len(images)} image(s)")
        return cls(images)

    @classmethod
    def from_json(cls, path: Path | str) -> ImageCatalog:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Catalog not found: {path}")

        with open(path) as f:
            return cls.from_dict(json.load(f))

    @classmethod
    def default(cls) -> ImageCatalog:
        return cls.from_dict(DEFAULT_CATALOG)


def load_user_annotations(path: Path | str) -> tuple[str | None, list[UserAnnotation]]:
    """
    Read a player annotation file.

    Returns:
        (image id from the file if present, list of rectangles)
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Annotation file not found: {path}")

    with open(path) as f:
        document = AnnotationFile.model_validate(json.load(f))

    annotations = [
        UserAnnotation(
            id=item.id or generate_id(),
            label=item.label,
            coordinates=[ScoringPoint(p.x, p.y) for p in item.coordinates],
            is_complete=item.is_complete,
        )
        for item in document.annotations
    ]
    return document.image_id, annotations


def _rect(id: str, label: str, x1: float, y1: float, x2: float, y2: float) -> dict[str, Any]:
    return {
        "id": id,
        "type": "rectangle",
        "coordinates": [{"x": x1, "y": y1}, {"x": x2, "y": y2}],
        "label": label,
    }


DEFAULT_CATALOG: dict[str, Any] = {
    "images": [
        {
            "id": "ocean1",
            "title": "Humpback Breach",
            "imagePath": "images/ocean1.jpg",
            "difficulty": "easy",
            "originalWidth": 1200,
            "originalHeight": 800,
            "description": "A humpback whale jumping out of the water. Can you box the whale?",
            "targetAnnotations": [_rect("whale1", "Whale", 320, 180, 720, 460)],
        },
        {
            "id": "ocean2",
            "title": "Kelp Forest",
            "imagePath": "images/ocean2.jpg",
            "difficulty": "easy",
            "originalWidth": 1200,
            "originalHeight": 800,
            "description": "A great white cruising past swaying kelp.",
            "targetAnnotations": [
                _rect("shark1", "Great White Shark", 420, 300, 900, 520),
                _rect("kelp1", "Kelp", 60, 40, 260, 780),
            ],
        },
        {
            "id": "ocean3",
            "title": "Coral Garden",
            "imagePath": "images/ocean3.jpg",
            "difficulty": "medium",
            "originalWidth": 1200,
            "originalHeight": 800,
            "description": "A shallow reef. Find the coral and both fish.",
            "targetAnnotations": [
                _rect("coral1", "Coral", 100, 480, 620, 780),
                _rect("fish1", "Fish", 700, 200, 860, 300),
                _rect("fish2", "Fish", 880, 420, 1040, 520),
            ],
        },
        {
            "id": "ocean4",
            "title": "Turtle Reef",
            "imagePath": "images/ocean4.jpg",
            "difficulty": "medium",
            "originalWidth": 1200,
            "originalHeight": 800,
            "description": "A sea turtle gliding over the reef with a fish escort.",
            "targetAnnotations": [
                _rect("turtle1", "Sea Turtle", 380, 220, 820, 560),
                _rect("fish3", "Fish", 880, 120, 1000, 200),
            ],
        },
        {
            "id": "ocean5",
            "title": "Deep Blue",
            "imagePath": "images/ocean5.jpg",
            "difficulty": "hard",
            "originalWidth": 1200,
            "originalHeight": 800,
            "description": "Open water. Two jellyfish drift near a passing dolphin.",
            "targetAnnotations": [
                _rect("jelly1", "Jellyfish", 150, 120, 260, 280),
                _rect("jelly2", "Jellyfish", 300, 420, 390, 560),
                _rect("dolphin1", "Dolphin", 640, 300, 1100, 480),
            ],
        },
    ]
}
