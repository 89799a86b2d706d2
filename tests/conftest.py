"""
Shared test fixtures and configuration for pytest.
"""

import pytest

from src.core.annotations import TargetAnnotation, UserAnnotation
from src.core.catalog import ImageCatalog
from src.core.config import Settings
from src.core.editor import BoxEditor
from src.core.geometry import ScoringPoint
from src.core.images import from_array, placeholder_image
from src.core.store import InMemoryStore

IMAGE_WIDTH = 1000
IMAGE_HEIGHT = 800


def rect(x1, y1, x2, y2, label="Whale", complete=True):
    """Complete user rectangle in scoring space."""
    return UserAnnotation(
        label=label,
        coordinates=[ScoringPoint(x1, y1), ScoringPoint(x2, y2)],
        is_complete=complete,
    )


def target(x1, y1, x2, y2, label="Whale", id="t1"):
    return TargetAnnotation.from_corners(id, label, x1, y1, x2, y2)


@pytest.fixture
def config():
    """Settings with the documented defaults, independent of the environment."""
    return Settings(_env_file=None)


@pytest.fixture
def ocean_image():
    """In-memory 1000x800 BGR image."""
    return from_array(placeholder_image(IMAGE_WIDTH, IMAGE_HEIGHT), source="ocean-test")


@pytest.fixture
def make_editor(ocean_image, config):
    """Build an editor with an image loaded; display scale defaults to 1."""

    def _make(annotations=(), container=(IMAGE_WIDTH, IMAGE_HEIGHT), **kwargs):
        kwargs.setdefault("available_labels", ["Whale", "Kelp", "Fish"])
        editor = BoxEditor(annotations, config=config, **kwargs)
        editor.resize(*container)
        editor.load_image(ocean_image)
        return editor

    return _make


@pytest.fixture
def catalog():
    return ImageCatalog.default()


@pytest.fixture
def store():
    return InMemoryStore()
