"""Crop window computation around a detected face."""
from __future__ import annotations

import math
from typing import Optional

from backend.models.schemas import BoundingBox, CropWindow, ReframeSettings
from backend.services.change_detectors import (
    is_crop_change_significant,
    is_significant_movement,
)

DEFAULT_SETTINGS = ReframeSettings()

# Extra padding applied after a large jump so the next frames are not re-clipped
MOVEMENT_PADDING_BONUS = 0.5


def _round_half_up(value: float) -> int:
    # built-in round() sends .5 to the even neighbour
    return math.floor(value + 0.5)


def calculate_crop_window(
    box: BoundingBox,
    video_width: int,
    video_height: int,
    last_face_position: Optional[BoundingBox] = None,
    last_crop: Optional[CropWindow] = None,
    settings: ReframeSettings = DEFAULT_SETTINGS,
) -> CropWindow:
    """
    Compute the crop rectangle framing ``box`` inside the video frame.

    Args:
        box: Normalized face bounding box
        video_width: Frame width in pixels
        video_height: Frame height in pixels
        last_face_position: Previously retained face box, widens padding on big jumps
        last_crop: Previously emitted crop; returned as-is when the new one
            is not significantly different

    Returns:
        CropWindow in integer pixel coordinates
    """
    padding_factor = settings.padding_factor_base
    if last_face_position is not None and is_significant_movement(
        box, last_face_position, settings.significant_movement_threshold
    ):
        padding_factor += MOVEMENT_PADDING_BONUS

    face_width = box.width * video_width
    face_height = box.height * video_height
    face_center_x = box.left * video_width + face_width / 2
    face_center_y = box.top * video_height + face_height / 2

    crop_width = min(face_width * (1 + padding_factor), video_width)
    crop_height = min(face_height * (1 + padding_factor), video_height)

    # Low side first, then pull back from the far edge. crop size never
    # exceeds the frame, so the pull-back cannot go negative.
    x = max(face_center_x - crop_width / 2, 0)
    y = max(face_center_y - crop_height / 2, 0)
    if x + crop_width > video_width:
        x = video_width - crop_width
    if y + crop_height > video_height:
        y = video_height - crop_height

    if last_crop is not None and not is_crop_change_significant(
        x, y, crop_width, crop_height, last_crop, settings.crop_change_tolerance
    ):
        return last_crop

    w = _round_half_up(crop_width)
    h = _round_half_up(crop_height)
    return CropWindow(
        x=min(_round_half_up(x), video_width - w),
        y=min(_round_half_up(y), video_height - h),
        w=w,
        h=h,
    )
