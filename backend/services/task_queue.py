"""
Task Queue Service - wrapper over Redis Queue (RQ).

Analyses spend most of their time waiting on the detection service, so they
run in worker processes instead of the API process.

Usage:
    from backend.services.task_queue import get_task_queue

    queue = get_task_queue()
    job = queue.enqueue_analysis("my-bucket", "videos/clip.mp4", 1920, 1080)

    # Or check status later
    job = queue.get_job(job.id)
    if job.is_finished:
        shots = job.result["shots"]
"""
from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

from redis import Redis
from rq import Queue
from rq.command import send_stop_job_command
from rq.job import Job

from backend.models.schemas import TaskStatus

logger = logging.getLogger(__name__)

# Redis connection settings
REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))
REDIS_DB = int(os.getenv("REDIS_DB", "0"))

# Queue settings
ANALYSIS_QUEUE_NAME = "reframe_analysis"
DEFAULT_TIMEOUT = 4200  # must outlast JOB_MAX_WAIT_SEC


class TaskQueue:
    """
    Wrapper over RQ for analysis task management.
    """

    def __init__(
        self,
        redis_host: str = REDIS_HOST,
        redis_port: int = REDIS_PORT,
        redis_db: int = REDIS_DB,
        connection: Optional[Redis] = None,
    ):
        self.redis_conn = connection or Redis(
            host=redis_host,
            port=redis_port,
            db=redis_db,
        )
        self.queue = Queue(
            name=ANALYSIS_QUEUE_NAME,
            connection=self.redis_conn,
            default_timeout=DEFAULT_TIMEOUT,
        )
        logger.info(
            "TaskQueue initialized: redis=%s:%d, queue=%s",
            redis_host, redis_port, ANALYSIS_QUEUE_NAME
        )

    def is_redis_available(self) -> bool:
        """Check if Redis is available."""
        try:
            self.redis_conn.ping()
            return True
        except Exception as e:
            logger.error("Redis not available: %s", e)
            return False

    def enqueue_analysis(
        self,
        bucket: str,
        key: str,
        video_width: Optional[int] = None,
        video_height: Optional[int] = None,
        settings: Optional[Dict[str, Any]] = None,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> JobWrapper:
        """
        Enqueue a face detection + shot segmentation task.

        Args:
            bucket: S3 bucket of the video
            key: S3 object key
            video_width: Frame width, or None to use the service's metadata
            video_height: Frame height, or None to use the service's metadata
            settings: ReframeSettings overrides as a plain dict
            timeout: Max execution time in seconds

        Returns:
            JobWrapper with methods to check status and get result
        """
        job = self.queue.enqueue(
            "backend.workers.analysis_tasks.analyze_video",
            bucket=bucket,
            key=key,
            video_width=video_width,
            video_height=video_height,
            settings=settings,
            job_timeout=timeout,
        )

        logger.info(
            "Enqueued analysis task: job_id=%s, video=s3://%s/%s",
            job.id, bucket, key
        )

        return JobWrapper(job)

    def get_job(self, job_id: str) -> Optional[JobWrapper]:
        """Get job by ID."""
        try:
            job = Job.fetch(job_id, connection=self.redis_conn)
            return JobWrapper(job)
        except Exception:
            return None

    def cancel_job(self, job_id: str) -> bool:
        """Cancel a queued job or stop a running one. Returns False if unknown."""
        wrapper = self.get_job(job_id)
        if wrapper is None:
            return False
        if wrapper.is_started:
            send_stop_job_command(self.redis_conn, job_id)
        else:
            wrapper.job.cancel()
        logger.info("Cancellation requested for job %s", job_id)
        return True


class JobWrapper:
    """
    Wrapper over RQ Job with convenient methods.
    """

    def __init__(self, job: Job):
        self.job = job

    @property
    def id(self) -> str:
        return self.job.id

    @property
    def status(self) -> str:
        status = self.job.get_status()
        return getattr(status, "value", status)

    @property
    def is_started(self) -> bool:
        return self.status == "started"

    @property
    def is_finished(self) -> bool:
        return self.status == "finished"

    @property
    def is_failed(self) -> bool:
        return self.status == "failed"

    @property
    def result(self) -> Any:
        """Get job result (None if not finished)."""
        return self.job.return_value()

    @property
    def error(self) -> Optional[str]:
        """Get error message if job failed."""
        if self.is_failed:
            return str(self.job.exc_info)
        return None

    @property
    def progress(self) -> float:
        """Get job progress (0.0 to 1.0)."""
        status = self.status
        if status == "started":
            return 0.5  # We don't have granular progress
        elif status in ("finished", "failed", "canceled", "stopped"):
            return 1.0
        return 0.0

    def to_task_status(self) -> TaskStatus:
        """Map RQ job state onto the API task status."""
        status = self.status
        mapped = {
            "queued": "pending",
            "deferred": "pending",
            "scheduled": "pending",
            "started": "processing",
            "finished": "completed",
            "failed": "failed",
            "canceled": "cancelled",
            "stopped": "cancelled",
        }.get(status, "pending")
        return TaskStatus(
            task_id=self.id,
            status=mapped,
            progress=self.progress,
            message=self.error or f"Job {status}",
            result=self.result if self.is_finished else None,
        )


# Singleton instance
_task_queue: Optional[TaskQueue] = None


def get_task_queue() -> TaskQueue:
    """Get or create TaskQueue singleton."""
    global _task_queue
    if _task_queue is None:
        _task_queue = TaskQueue()
    return _task_queue


def is_queue_available() -> bool:
    """Check if task queue (Redis) is available."""
    try:
        queue = get_task_queue()
        return queue.is_redis_available()
    except Exception:
        return False
