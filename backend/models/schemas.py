"""Pydantic models for detection data, shots, settings and API payloads."""
from __future__ import annotations

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from backend import config

_BOX_KEYS = ("Left", "Top", "Width", "Height")


class ShotLabel(str, Enum):
    """Behavioral label attached to every shot."""
    SPEAKING = "Speaking/Smiling"
    NO_FACE = "No Face"


class JobState(str, Enum):
    """Status values reported by the face detection service."""
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


class ReframeSettings(BaseModel):
    """Tunables for one analysis run. Defaults come from backend.config."""
    model_config = ConfigDict(frozen=True)

    high_confidence_threshold: float = config.HIGH_CONFIDENCE_THRESHOLD
    padding_factor_base: float = config.PADDING_FACTOR_BASE
    significant_movement_threshold: float = config.SIGNIFICANT_MOVEMENT_THRESHOLD
    job_check_delay_ms: int = Field(default=config.JOB_CHECK_DELAY_MS, ge=0)
    job_max_wait_sec: float = Field(default=config.JOB_MAX_WAIT_SEC, gt=0)
    poll_max_retries: int = Field(default=config.POLL_MAX_RETRIES, ge=0)
    min_shot_duration_sec: float = Field(default=config.MIN_SHOT_DURATION_SEC, gt=0)
    confidence_threshold: float = config.CONFIDENCE_THRESHOLD
    crop_change_tolerance: float = config.CROP_CHANGE_TOLERANCE
    smooth_crops: bool = config.SMOOTH_CROPS

    @property
    def job_check_delay_sec(self) -> float:
        return self.job_check_delay_ms / 1000.0


class BoundingBox(BaseModel):
    """Face rectangle normalized to the frame size."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    left: float = Field(alias="Left")
    top: float = Field(alias="Top")
    width: float = Field(alias="Width")
    height: float = Field(alias="Height")


class EmotionScore(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: str = Field(alias="Type")
    confidence: float = Field(alias="Confidence", ge=0, le=100)


class FaceDetail(BaseModel):
    """Attributes of the face reported for one frame.

    bounding_box stays optional so that incomplete service output can be
    parsed and rejected by the segmenter instead of failing the whole run.
    """
    model_config = ConfigDict(frozen=True)

    confidence: float = 0.0
    bounding_box: Optional[BoundingBox] = None
    mouth_open: bool = False
    smile: bool = False
    emotions: List[EmotionScore] = Field(default_factory=list)


class FaceDetectionEvent(BaseModel):
    """One timestamped observation from the detection job."""
    model_config = ConfigDict(frozen=True)

    timestamp_ms: int
    face: Optional[FaceDetail] = None

    @property
    def timestamp_sec(self) -> float:
        return self.timestamp_ms / 1000

    @classmethod
    def from_rekognition(cls, item: dict[str, Any]) -> "FaceDetectionEvent":
        """Build an event from one element of Rekognition's ``Faces`` list.

        Raises pydantic.ValidationError when Timestamp is missing or a nested
        value (box, emotion) is invalid.
        """
        raw_face = item.get("Face")
        face = None
        if raw_face:
            raw_box = raw_face.get("BoundingBox") or {}
            has_box = all(raw_box.get(k) is not None for k in _BOX_KEYS)
            face = FaceDetail(
                confidence=raw_face.get("Confidence") or 0.0,
                bounding_box=BoundingBox(**raw_box) if has_box else None,
                mouth_open=bool((raw_face.get("MouthOpen") or {}).get("Value")),
                smile=bool((raw_face.get("Smile") or {}).get("Value")),
                emotions=[EmotionScore(**e) for e in raw_face.get("Emotions") or []],
            )
        return cls(timestamp_ms=item.get("Timestamp"), face=face)


class CropWindow(BaseModel):
    """Pixel rectangle of the source frame. Compared by value."""
    model_config = ConfigDict(frozen=True)

    x: int
    y: int
    w: int
    h: int


class Shot(BaseModel):
    """A contiguous interval with one crop and one label."""
    ts_start: float  # seconds
    ts_end: float  # seconds
    crop: Optional[CropWindow] = None
    label: ShotLabel

    @property
    def duration(self) -> float:
        # boundaries sit on a millisecond grid
        return round(self.ts_end - self.ts_start, 3)


class JobStatusResult(BaseModel):
    """Status snapshot of a detection job."""
    status: JobState
    faces: List[FaceDetectionEvent] = Field(default_factory=list)
    status_message: Optional[str] = None
    frame_width: Optional[int] = None
    frame_height: Optional[int] = None


class AnalyzeRequest(BaseModel):
    """Request to analyze a video stored in S3."""
    bucket: str = Field(..., description="S3 bucket holding the video")
    key: str = Field(..., description="S3 object key of the video")
    video_width: Optional[int] = Field(default=None, gt=0)
    video_height: Optional[int] = Field(default=None, gt=0)
    settings: Optional[ReframeSettings] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "bucket": "my-uploads",
                "key": "videos/interview.mp4",
                "video_width": 1920,
                "video_height": 1080,
            }
        }
    )


class SegmentRequest(BaseModel):
    """Request to segment already collected detection events."""
    events: List[FaceDetectionEvent]
    video_width: int = Field(..., gt=0)
    video_height: int = Field(..., gt=0)
    settings: Optional[ReframeSettings] = None


class ShotListResponse(BaseModel):
    shots: List[Shot]


class TaskStatus(BaseModel):
    """Status of a processing task."""
    task_id: str
    status: str  # "pending", "processing", "completed", "failed", "cancelled"
    progress: float  # 0.0 to 1.0
    message: Optional[str] = None
    result: Optional[dict] = None
