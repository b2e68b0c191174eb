"""
Shot segmentation - folds per-frame face detections into an editable shot list.

Each event is classified as "Speaking/Smiling" (crop around the face) or
"No Face" (no crop). Consecutive events with the same label and the same crop
extend the open shot; anything else closes it and opens a new shot that
starts exactly where the previous one ended.

Usage:
    from backend.services.shot_segmenter import segment_shots

    shots = segment_shots(events, video_width=1920, video_height=1080)
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from functools import reduce
from typing import Iterable, List, Optional, Tuple

from backend.models.schemas import (
    BoundingBox,
    CropWindow,
    EmotionScore,
    FaceDetectionEvent,
    ReframeSettings,
    Shot,
    ShotLabel,
)
from backend.services.change_detectors import is_significant_emotion_change
from backend.services.crop_geometry import calculate_crop_window

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = ReframeSettings()


@dataclass(frozen=True)
class SegmenterState:
    """Accumulator threaded through the fold. A new instance per event."""
    last_face_position: Optional[BoundingBox] = None
    last_emotions: Tuple[EmotionScore, ...] = ()
    last_crop: Optional[CropWindow] = None
    shots: Tuple[Shot, ...] = ()
    skipped_events: int = 0


def classify_event(
    event: FaceDetectionEvent,
    state: SegmenterState,
    video_width: int,
    video_height: int,
    settings: ReframeSettings = DEFAULT_SETTINGS,
) -> Tuple[ShotLabel, Optional[CropWindow]]:
    """Decide label and crop for a single event given the retained state."""
    face = event.face
    should_crop = (
        face is not None
        and face.confidence >= settings.confidence_threshold
        and (
            face.mouth_open
            or face.smile
            or is_significant_emotion_change(
                state.last_emotions, face.emotions, settings.high_confidence_threshold
            )
        )
    )
    if not should_crop:
        return ShotLabel.NO_FACE, None

    crop = calculate_crop_window(
        face.bounding_box,
        video_width,
        video_height,
        last_face_position=state.last_face_position,
        last_crop=state.last_crop if settings.smooth_crops else None,
        settings=settings,
    )
    return ShotLabel.SPEAKING, crop


def _to_ms(seconds: float) -> int:
    return round(seconds * 1000)


def _min_duration_ms(min_duration: float) -> int:
    # whole milliseconds, never below the requested minimum
    return math.ceil(round(min_duration * 1000, 6))


def _append_or_extend(
    shots: Tuple[Shot, ...],
    timestamp_ms: int,
    label: ShotLabel,
    crop: Optional[CropWindow],
    min_duration_ms: int,
) -> Tuple[Shot, ...]:
    if not shots:
        first = Shot(ts_start=0, ts_end=max(min_duration_ms, timestamp_ms) / 1000, crop=crop, label=label)
        return (first,)

    open_shot = shots[-1]
    end_ms = _to_ms(open_shot.ts_end)
    if open_shot.label == label and open_shot.crop == crop:
        extended = open_shot.model_copy(update={"ts_end": max(end_ms, timestamp_ms) / 1000})
        return shots[:-1] + (extended,)

    new_shot = Shot(
        ts_start=open_shot.ts_end,
        ts_end=max(end_ms + min_duration_ms, timestamp_ms) / 1000,
        crop=crop,
        label=label,
    )
    return shots + (new_shot,)


def step(
    state: SegmenterState,
    event: FaceDetectionEvent,
    video_width: int,
    video_height: int,
    settings: ReframeSettings = DEFAULT_SETTINGS,
) -> SegmenterState:
    """Fold one event into the accumulator."""
    face = event.face
    if face is not None and face.bounding_box is None:
        logger.warning(
            "Skipping detection at %dms: face reported without bounding box",
            event.timestamp_ms,
        )
        return replace(state, skipped_events=state.skipped_events + 1)

    label, crop = classify_event(event, state, video_width, video_height, settings)
    shots = _append_or_extend(
        state.shots, event.timestamp_ms, label, crop, _min_duration_ms(settings.min_shot_duration_sec)
    )

    if face is None:
        return replace(state, shots=shots)

    return replace(
        state,
        shots=shots,
        last_face_position=face.bounding_box,
        last_emotions=tuple(face.emotions),
        last_crop=crop if crop is not None else state.last_crop,
    )


def finalize(state: SegmenterState, settings: ReframeSettings = DEFAULT_SETTINGS) -> List[Shot]:
    """Close the fold, stretching the last shot to the minimum duration."""
    shots = list(state.shots)
    if shots:
        last = shots[-1]
        start_ms = _to_ms(last.ts_start)
        min_duration_ms = _min_duration_ms(settings.min_shot_duration_sec)
        if _to_ms(last.ts_end) - start_ms < min_duration_ms:
            shots[-1] = last.model_copy(
                update={"ts_end": (start_ms + min_duration_ms) / 1000}
            )
    return shots


def run_segmentation(
    events: Iterable[FaceDetectionEvent],
    video_width: int,
    video_height: int,
    settings: ReframeSettings = DEFAULT_SETTINGS,
) -> SegmenterState:
    """Fold all events and return the final accumulator (before finalize)."""
    return reduce(
        lambda state, event: step(state, event, video_width, video_height, settings),
        events,
        SegmenterState(),
    )


def segment_shots(
    events: Iterable[FaceDetectionEvent],
    video_width: int,
    video_height: int,
    settings: ReframeSettings = DEFAULT_SETTINGS,
) -> List[Shot]:
    """
    Build the ordered shot list for a sequence of detection events.

    Args:
        events: Detection events ordered by timestamp
        video_width: Frame width in pixels
        video_height: Frame height in pixels
        settings: Thresholds and durations for this run

    Returns:
        Contiguous shots starting at 0, each at least min_shot_duration_sec long
    """
    state = run_segmentation(events, video_width, video_height, settings)
    if state.skipped_events:
        logger.warning("Skipped %d malformed detection events", state.skipped_events)
    return finalize(state, settings)


def shots_to_dicts(shots: Iterable[Shot]) -> List[dict]:
    """Serialize shots in the JSON shape consumed by the editing tools."""
    return [shot.model_dump(mode="json") for shot in shots]
