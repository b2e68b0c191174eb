"""Thin wrapper over AWS Rekognition Video face detection."""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

import boto3
from pydantic import ValidationError

from backend import config
from backend.models.schemas import FaceDetectionEvent, JobState, JobStatusResult

logger = logging.getLogger(__name__)


class RekognitionFaceDetectionClient:
    """
    Starts face detection jobs and reads back their status and results.

    The client holds no per-job state, so one instance can serve many
    concurrent analyses.
    """

    def __init__(
        self,
        region_name: str = config.AWS_REGION,
        face_attributes: str = config.REKOGNITION_FACE_ATTRIBUTES,
        max_results: int = config.REKOGNITION_MAX_RESULTS,
        client: Optional[Any] = None,
    ):
        self.client = client or boto3.client("rekognition", region_name=region_name)
        self.face_attributes = face_attributes
        self.max_results = max_results

    def submit_detection_job(self, bucket: str, key: str) -> Optional[str]:
        """Start a face detection job for an S3 object and return its JobId."""
        logger.info("Starting face detection for s3://%s/%s", bucket, key)
        response = self.client.start_face_detection(
            Video={"S3Object": {"Bucket": bucket, "Name": key}},
            FaceAttributes=self.face_attributes,
        )
        return response.get("JobId")

    def get_job_status(self, job_id: str) -> JobStatusResult:
        """
        Fetch the job status; on success collect faces from every result page.

        A missing JobStatus is reported as FAILED.
        """
        response = self._get_page(job_id)
        raw_status = (response.get("JobStatus") or JobState.FAILED.value).strip().upper()
        try:
            status = JobState(raw_status)
        except ValueError:
            logger.warning("Unknown job status %r for job %s, treating as in progress", raw_status, job_id)
            status = JobState.IN_PROGRESS

        result = JobStatusResult(
            status=status,
            status_message=response.get("StatusMessage"),
        )
        if status != JobState.SUCCEEDED:
            return result

        metadata = response.get("VideoMetadata") or {}
        items: List[Dict[str, Any]] = list(response.get("Faces") or [])
        next_token = response.get("NextToken")
        while next_token:
            page = self._get_page(job_id, next_token)
            items.extend(page.get("Faces") or [])
            next_token = page.get("NextToken")

        logger.info("Job %s returned %d face detections", job_id, len(items))
        return result.model_copy(update={
            "faces": parse_detection_items(items),
            "frame_width": metadata.get("FrameWidth"),
            "frame_height": metadata.get("FrameHeight"),
        })

    def _get_page(self, job_id: str, next_token: Optional[str] = None) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {"JobId": job_id, "MaxResults": self.max_results}
        if next_token:
            kwargs["NextToken"] = next_token
        return self.client.get_face_detection(**kwargs)


def parse_detection_items(items: Iterable[Dict[str, Any]]) -> List[FaceDetectionEvent]:
    """Convert raw ``Faces`` items, dropping the ones that fail validation."""
    events = []
    for item in items:
        try:
            events.append(FaceDetectionEvent.from_rekognition(item))
        except ValidationError as e:
            logger.warning(
                "Skipping malformed detection item (Timestamp=%s): %d validation errors",
                item.get("Timestamp"), e.error_count(),
            )
    return events
