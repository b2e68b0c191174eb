"""End-to-end analysis: detection job -> face events -> shot list."""
from __future__ import annotations

import logging
import threading
from typing import Any, List, Optional

from backend.models.schemas import ReframeSettings, Shot
from backend.services.face_detection_client import RekognitionFaceDetectionClient
from backend.services.job_poller import JobPoller
from backend.services.shot_segmenter import segment_shots

logger = logging.getLogger(__name__)


class VideoAnalyzer:
    """Runs the full pipeline for one video at a time; holds no per-run state."""

    def __init__(
        self,
        client: Optional[Any] = None,
        settings: Optional[ReframeSettings] = None,
    ):
        self.settings = settings or ReframeSettings()
        self.client = client or RekognitionFaceDetectionClient()
        self.poller = JobPoller(self.client, self.settings)

    def analyze(
        self,
        bucket: str,
        key: str,
        video_width: Optional[int] = None,
        video_height: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[Shot]:
        """
        Detect faces in an S3 video and build its shot list.

        Frame size falls back to the dimensions reported by the detection
        service when not given. Any failure propagates; there is no partial
        result.
        """
        job_id = self.poller.submit(bucket, key)
        result = self.poller.await_result(job_id, cancel_event)

        width = video_width or result.frame_width
        height = video_height or result.frame_height
        if not width or not height:
            raise ValueError(f"Frame size unknown for s3://{bucket}/{key}")

        events = sorted(result.faces, key=lambda event: event.timestamp_ms)
        logger.info(
            "Segmenting %d detections for %s (%dx%d)", len(events), key, width, height
        )
        shots = segment_shots(events, width, height, self.settings)
        logger.info("Built %d shots for %s", len(shots), key)
        return shots
