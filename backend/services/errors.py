"""Exceptions raised by the reframing pipeline.

Every failure is whole-pipeline: callers get either a complete shot list or
one of these errors, never a partial result.
"""
from __future__ import annotations

from typing import Optional


class ReframeError(RuntimeError):
    """Base class for pipeline failures."""


class SubmissionError(ReframeError):
    """The detection service did not return a job identifier."""


class JobFailedError(ReframeError):
    """The detection job reached the FAILED state."""

    def __init__(self, job_id: str, status_message: Optional[str] = None):
        self.job_id = job_id
        self.status_message = status_message
        detail = f": {status_message}" if status_message else ""
        super().__init__(f"Face detection job {job_id} failed{detail}")


class PollFailure(ReframeError):
    """Status checks kept failing after the retry budget was spent."""


class JobTimeoutError(ReframeError, TimeoutError):
    """The job did not reach a terminal state before the deadline."""


class JobCancelledError(ReframeError):
    """Waiting for the job was cancelled by the caller."""
