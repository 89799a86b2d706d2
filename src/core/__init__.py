"""Core logic shared between the game session, the box editor, and CLI tools."""

from src.core.annotations import (
    LABEL_COLORS,
    Annotation,
    TargetAnnotation,
    UserAnnotation,
    color_for_label,
)
from src.core.catalog import ImageCatalog, OceanImage, labels_for, load_user_annotations
from src.core.config import Settings, settings
from src.core.editor import (
    BoxEditor,
    Drawing,
    GestureState,
    Idle,
    LabelPopup,
    Moving,
    Resizing,
)
from src.core.geometry import Bounds, DisplayPoint, ScoringPoint, bounds_of
from src.core.images import ImageLoadResult, from_array, load_image, placeholder_image
from src.core.render import draw_editor, draw_ground_truth
from src.core.scoring import (
    MatchSummary,
    RoundScore,
    TargetScore,
    annotation_set_score,
    final_round_score,
    match_summary,
    rect_overlap_score,
    round_score,
    score,
    score_feedback,
)
from src.core.session import Countdown, GameSession, GameSummary, RoundResult, completion_feedback
from src.core.store import InMemoryStore, KeyValueStore
from src.core.transform import ViewportTransform

__all__ = [
    "Annotation",
    "Bounds",
    "BoxEditor",
    "Countdown",
    "DisplayPoint",
    "Drawing",
    "GameSession",
    "GameSummary",
    "GestureState",
    "Idle",
    "ImageCatalog",
    "ImageLoadResult",
    "InMemoryStore",
    "KeyValueStore",
    "LABEL_COLORS",
    "LabelPopup",
    "MatchSummary",
    "Moving",
    "OceanImage",
    "Resizing",
    "RoundResult",
    "RoundScore",
    "ScoringPoint",
    "Settings",
    "TargetAnnotation",
    "TargetScore",
    "UserAnnotation",
    "ViewportTransform",
    "annotation_set_score",
    "bounds_of",
    "color_for_label",
    "completion_feedback",
    "draw_editor",
    "draw_ground_truth",
    "final_round_score",
    "from_array",
    "labels_for",
    "load_image",
    "load_user_annotations",
    "match_summary",
    "placeholder_image",
    "rect_overlap_score",
    "round_score",
    "score",
    "score_feedback",
    "settings",
]
