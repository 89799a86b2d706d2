"""Image loading for the annotation canvas."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import cv2
import numpy as np
from loguru import logger
from PIL import Image, UnidentifiedImageError


@dataclass
class ImageLoadResult:
    """
    Outcome of loading an image.

    Failures are reported here rather than raised so that the editor can stay
    non-interactive and tell its owner what went wrong.
    """

    source: str
    image: np.ndarray | None = None  # BGR
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.image is not None and self.error is None

    @property
    def width(self) -> int:
        return 0 if self.image is None else int(self.image.shape[1])

    @property
    def height(self) -> int:
        return 0 if self.image is None else int(self.image.shape[0])

    @classmethod
    def failed(cls, source: str, error: str) -> ImageLoadResult:
        return cls(source=source, error=error)


def load_image(path: Path | str) -> ImageLoadResult:
    """Load an image file as a BGR array."""
    path = Path(path)

    if not path.exists():
        logger.warning(f"Image not found: {path}")
        return ImageLoadResult.failed(str(path), f"Image not found: {path}")

    try:
        with Image.open(path) as img:
            rgb = np.asarray(img.convert("RGB"))
    except (UnidentifiedImageError, OSError) as e:
        logger.warning(f"Failed to load image {path}: {e}")
        return ImageLoadResult.failed(str(path), f"Failed to load image: {e}")

    image = cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)
    logger.info(f"Loaded image {path.name} ({image.shape[1]}x{image.shape[0]})")
    return ImageLoadResult(source=str(path), image=image)


def from_array(image: np.ndarray, source: str = "<array>") -> ImageLoadResult:
    """Wrap an in-memory image (grayscale, BGR or BGRA)."""
    if image is None or image.ndim not in (2, 3) or image.size == 0:
        return ImageLoadResult.failed(source, "Image must be a non-empty 2D or 3D array")

    if image.ndim == 2:
        image = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    elif image.shape[2] == 4:
        image = cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)

    return ImageLoadResult(source=source, image=np.ascontiguousarray(image))


def placeholder_image(width: int, height: int, color: tuple[int, int, int] = (120, 80, 20)) -> np.ndarray:
    """Solid ocean-blue canvas for rendering when no photo is available."""
    canvas = np.zeros((max(1, height), max(1, width), 3), dtype=np.uint8)
    canvas[:] = color
    return canvas
