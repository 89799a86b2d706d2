"""
Tests for the image catalog and annotation file loading.
"""

import json

import pytest
from pydantic import ValidationError

from src.core.catalog import ImageCatalog, labels_for, load_user_annotations


def write_json(path, data):
    path.write_text(json.dumps(data))
    return path


def image_entry(id, difficulty="easy", targets=None):
    return {
        "id": id,
        "title": id.title(),
        "imagePath": f"images/{id}.jpg",
        "difficulty": difficulty,
        "originalWidth": 800,
        "originalHeight": 600,
        "targetAnnotations": targets
        if targets is not None
        else [
            {
                "id": f"{id}-t1",
                "type": "rectangle",
                "coordinates": [{"x": 10, "y": 10}, {"x": 110, "y": 90}],
                "label": "Fish",
            }
        ],
    }


class TestDefaultCatalog:
    def test_contents(self, catalog):
        assert len(catalog) == 5
        whale = catalog.get("ocean1")
        assert whale.original_width == 1200
        assert whale.labels == ["Whale"]

    def test_unknown_image(self, catalog):
        with pytest.raises(ValueError):
            catalog.get("atlantis")

    def test_progressive_rounds(self, catalog):
        """Round 1 is easy only, round 2 adds medium, round 3+ plays everything"""
        assert [img.id for img in catalog.progressive_image_set(1)] == ["ocean1", "ocean2"]
        assert len(catalog.progressive_image_set(2)) == 4
        assert len(catalog.progressive_image_set(3)) == 5
        assert len(catalog.progressive_image_set(9)) == 5

    def test_progressive_set_is_easiest_first(self, catalog):
        difficulties = [img.difficulty for img in catalog.progressive_image_set(3)]
        assert difficulties == sorted(difficulties, key=["easy", "medium", "hard"].index)

    def test_labels_for(self, catalog):
        images = catalog.progressive_image_set(1)
        assert labels_for(images) == ["Whale", "Great White Shark", "Kelp"]


class TestCatalogFile:
    def test_from_json(self, tmp_path):
        path = write_json(tmp_path / "catalog.json", {"images": [image_entry("reef"), image_entry("deep", "hard")]})

        catalog = ImageCatalog.from_json(path)

        assert [img.id for img in catalog.images] == ["reef", "deep"]
        reef = catalog.get("reef")
        assert reef.image_path == "images/reef.jpg"
        assert reef.targets[0].label == "Fish"
        assert reef.targets[0].bounds.width == 100

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ImageCatalog.from_json(tmp_path / "nope.json")

    def test_not_a_catalog(self, tmp_path):
        path = write_json(tmp_path / "catalog.json", {"pictures": []})
        with pytest.raises(ValidationError):
            ImageCatalog.from_json(path)

    def test_malformed_entries_are_skipped(self, tmp_path):
        """A bad target drops only that target; a bad image drops only that image"""
        bad_target = {"id": "x", "type": "circle", "coordinates": [{"x": 0, "y": 0}], "label": "Fish"}
        good_target = image_entry("reef")["targetAnnotations"][0]
        bad_image = {"id": "broken", "difficulty": "impossible"}
        path = write_json(
            tmp_path / "catalog.json",
            {"images": [image_entry("reef", targets=[bad_target, good_target]), bad_image]},
        )

        catalog = ImageCatalog.from_json(path)

        assert [img.id for img in catalog.images] == ["reef"]
        assert [t.id for t in catalog.get("reef").targets] == ["reef-t1"]

    def test_images_without_targets_are_not_played(self, tmp_path):
        path = write_json(tmp_path / "catalog.json", {"images": [image_entry("empty", targets=[]), image_entry("reef")]})

        catalog = ImageCatalog.from_json(path)

        assert len(catalog) == 2
        assert [img.id for img in catalog.progressive_image_set(1)] == ["reef"]


class TestUserAnnotationFile:
    def test_load(self, tmp_path):
        path = write_json(
            tmp_path / "boxes.json",
            {
                "imageId": "ocean1",
                "annotations": [
                    {"id": "a1", "label": "Whale", "coordinates": [{"x": 320, "y": 180}, {"x": 720, "y": 460}]},
                    {"label": "Kelp", "coordinates": [{"x": 0, "y": 0}, {"x": 5, "y": 5}], "isComplete": False},
                ],
            },
        )

        image_id, annotations = load_user_annotations(path)

        assert image_id == "ocean1"
        assert annotations[0].id == "a1"
        assert annotations[0].is_complete
        assert annotations[1].id
        assert not annotations[1].is_complete

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_user_annotations(tmp_path / "nope.json")
