"""Pydantic models for catalog and annotation JSON documents."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class PointData(BaseModel):
    """A single {x, y} corner."""

    x: float
    y: float


class TargetAnnotationData(BaseModel):
    """Ground-truth rectangle as stored in a catalog file."""

    id: str
    type: Literal["rectangle"] = "rectangle"
    coordinates: list[PointData] = Field(..., min_length=2, max_length=2)
    label: str = Field(..., min_length=1)


class OceanImageData(BaseModel):
    """
    Image entry in a catalog file.

    Targets are kept raw here and validated one by one by the catalog loader,
    so a single bad target does not discard the whole image.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str = ""
    image_path: str = Field("", alias="imagePath")
    difficulty: Literal["easy", "medium", "hard"] = "easy"
    original_width: int = Field(..., gt=0, alias="originalWidth")
    original_height: int = Field(..., gt=0, alias="originalHeight")
    description: str = ""
    target_annotations: list[dict] = Field(default_factory=list, alias="targetAnnotations")


class CatalogFile(BaseModel):
    """Top-level catalog document."""

    images: list[dict]


class UserAnnotationData(BaseModel):
    """Player rectangle as exported by the game or written by hand."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    type: Literal["rectangle"] = "rectangle"
    label: str
    coordinates: list[PointData] = Field(..., min_length=2, max_length=2)
    is_complete: bool = Field(True, alias="isComplete")


class AnnotationFile(BaseModel):
    """A list of player rectangles for one image."""

    model_config = ConfigDict(populate_by_name=True)

    image_id: Optional[str] = Field(None, alias="imageId")
    annotations: list[UserAnnotationData] = []


class PointerEventData(BaseModel):
    """One step of a recorded editor session."""

    event: Literal["down", "move", "up", "leave", "label", "dismiss", "resize"]
    x: float = 0
    y: float = 0
    label: Optional[str] = None
    width: Optional[float] = None
    height: Optional[float] = None


class PointerScript(BaseModel):
    """Recorded pointer events plus the container they were recorded in."""

    container_width: float = Field(..., gt=0)
    container_height: float = Field(..., gt=0)
    current_label: Optional[str] = None
    events: list[PointerEventData] = []
