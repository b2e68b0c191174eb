"""Predicates deciding whether a frame-to-frame change is significant."""
from __future__ import annotations

from typing import Optional, Sequence

from backend import config
from backend.models.schemas import BoundingBox, CropWindow, EmotionScore


def is_significant_movement(
    current: BoundingBox,
    last: BoundingBox,
    threshold: float = config.SIGNIFICANT_MOVEMENT_THRESHOLD,
) -> bool:
    """True when the face jumped more than ``threshold`` (normalized) on either axis."""
    movement_x = abs(current.left - last.left)
    movement_y = abs(current.top - last.top)
    return movement_x > threshold or movement_y > threshold


def primary_emotion(emotions: Sequence[EmotionScore]) -> Optional[EmotionScore]:
    """Highest-confidence emotion; the latest entry wins a tie."""
    if not emotions:
        return None
    best = emotions[0]
    for emotion in emotions[1:]:
        if emotion.confidence >= best.confidence:
            best = emotion
    return best


def is_significant_emotion_change(
    prev_emotions: Sequence[EmotionScore],
    new_emotions: Sequence[EmotionScore],
    high_confidence_threshold: float = config.HIGH_CONFIDENCE_THRESHOLD,
) -> bool:
    """
    Detect a confident switch of the dominant emotion.

    Both primary emotions must reach ``high_confidence_threshold`` and their
    types must differ. Empty lists never count as a change.
    """
    prev_primary = primary_emotion(prev_emotions)
    new_primary = primary_emotion(new_emotions)
    if prev_primary is None or new_primary is None:
        return False

    return (
        prev_primary.confidence >= high_confidence_threshold
        and new_primary.confidence >= high_confidence_threshold
        and prev_primary.type != new_primary.type
    )


def is_crop_change_significant(
    x: float,
    y: float,
    w: float,
    h: float,
    reference: CropWindow,
    tolerance: float = config.CROP_CHANGE_TOLERANCE,
) -> bool:
    """
    Compare an (unrounded) candidate rectangle with a reference crop.

    Offsets and sizes are measured relative to the reference width/height.
    """
    delta_x = abs(x - reference.x)
    delta_y = abs(y - reference.y)
    delta_w = abs(w - reference.w)
    delta_h = abs(h - reference.h)

    return (
        delta_x > tolerance * reference.w
        or delta_y > tolerance * reference.h
        or delta_w > tolerance * reference.w
        or delta_h > tolerance * reference.h
    )
