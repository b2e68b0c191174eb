"""
Job Poller - submits a face detection job and waits for it to finish.

Usage:
    poller = JobPoller(RekognitionFaceDetectionClient())
    job_id = poller.submit("my-bucket", "videos/clip.mp4")
    events = poller.await_completion(job_id, cancel_event=stop_event)

Waiting is bounded by ``job_max_wait_sec``, can be interrupted through a
``threading.Event`` and tolerates a limited number of consecutive transient
errors while checking status.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Any, List, Optional

from botocore.exceptions import BotoCoreError, ClientError

from backend.models.schemas import FaceDetectionEvent, JobState, JobStatusResult, ReframeSettings
from backend.services.errors import (
    JobCancelledError,
    JobFailedError,
    JobTimeoutError,
    PollFailure,
    SubmissionError,
)

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (BotoCoreError, ClientError, ConnectionError, TimeoutError)

TERMINAL_STATES = {JobState.SUCCEEDED, JobState.FAILED}


class JobPoller:
    """
    Drives one detection job through PENDING -> POLLING -> SUCCEEDED/FAILED.

    ``client`` must expose ``submit_detection_job(bucket, key)`` and
    ``get_job_status(job_id) -> JobStatusResult``.
    """

    def __init__(self, client: Any, settings: Optional[ReframeSettings] = None):
        self.client = client
        self.settings = settings or ReframeSettings()

    def submit(self, bucket: str, key: str) -> str:
        """Start a job; raises SubmissionError if no job id comes back."""
        job_id = self.client.submit_detection_job(bucket, key)
        if not job_id:
            raise SubmissionError(f"Failed to start face detection for s3://{bucket}/{key}")
        logger.info("Submitted face detection job %s (PENDING)", job_id)
        return job_id

    def await_result(
        self,
        job_id: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> JobStatusResult:
        """
        Poll until the job is terminal and return the final status snapshot.

        Raises:
            JobFailedError: If the job ends in FAILED
            JobTimeoutError: If job_max_wait_sec elapses first
            JobCancelledError: If cancel_event is set
            PollFailure: If status checks fail poll_max_retries + 1 times in a row
        """
        cancel_event = cancel_event or threading.Event()
        delay = self.settings.job_check_delay_sec
        max_wait = self.settings.job_max_wait_sec
        start_time = time.monotonic()
        failures = 0
        last_status: Optional[JobState] = None

        while True:
            if cancel_event.is_set():
                raise JobCancelledError(f"Waiting for job {job_id} was cancelled")

            elapsed = time.monotonic() - start_time
            if elapsed > max_wait:
                raise JobTimeoutError(f"Job {job_id} timed out after {max_wait:.0f}s")

            try:
                result = self.client.get_job_status(job_id)
            except TRANSIENT_ERRORS as exc:
                failures += 1
                if failures > self.settings.poll_max_retries:
                    raise PollFailure(
                        f"Status check for job {job_id} failed {failures} times: {exc}"
                    ) from exc
                logger.warning(
                    "Status check for job %s failed (%d/%d): %s",
                    job_id, failures, self.settings.poll_max_retries, exc,
                )
            else:
                failures = 0
                if result.status != last_status:
                    logger.info("Job %s status: %s", job_id, result.status.value)
                    last_status = result.status

                if result.status == JobState.SUCCEEDED:
                    return result
                if result.status == JobState.FAILED:
                    raise JobFailedError(job_id, result.status_message)

            remaining = max_wait - (time.monotonic() - start_time)
            if cancel_event.wait(timeout=max(0.0, min(delay, remaining))):
                raise JobCancelledError(f"Waiting for job {job_id} was cancelled")

    def await_completion(
        self,
        job_id: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[FaceDetectionEvent]:
        """Wait for the job and return its events ordered by timestamp."""
        result = self.await_result(job_id, cancel_event)
        return sorted(result.faces, key=lambda event: event.timestamp_ms)

    def run(
        self,
        bucket: str,
        key: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[FaceDetectionEvent]:
        """Submit and wait in one call."""
        job_id = self.submit(bucket, key)
        return self.await_completion(job_id, cancel_event)
