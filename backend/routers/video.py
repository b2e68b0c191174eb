import logging
import threading
import uuid
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, HTTPException, BackgroundTasks

from backend import config
from backend.models.schemas import (
    AnalyzeRequest,
    ReframeSettings,
    SegmentRequest,
    ShotListResponse,
    TaskStatus,
)
from backend.services.errors import JobCancelledError
from backend.services.shot_segmenter import segment_shots, shots_to_dicts
from backend.services.task_queue import get_task_queue, is_queue_available
from backend.services.video_analyzer import VideoAnalyzer
from backend.utils.file_utils import load_shot_list, save_shot_list

router = APIRouter(prefix="/api/video", tags=["video"])

logger = logging.getLogger(__name__)

# In-memory storage for in-process tasks
tasks = {}
cancel_events: dict[str, threading.Event] = {}
# ids of tasks handed to the worker queue (task_id == RQ job id)
queued_tasks: set[str] = set()


def _analyze_video_task(
    task_id: str,
    bucket: str,
    key: str,
    video_width: Optional[int],
    video_height: Optional[int],
    settings: Optional[ReframeSettings],
):
    cancel_event = cancel_events[task_id]
    try:
        tasks[task_id] = {"status": "processing", "progress": 0.1, "message": "Waiting for face detection..."}
        analyzer = VideoAnalyzer(settings=settings)
        shots = analyzer.analyze(bucket, key, video_width, video_height, cancel_event=cancel_event)

        video_id = Path(key).stem
        save_shot_list(video_id, shots)
        tasks[task_id] = {
            "status": "completed",
            "progress": 1.0,
            "message": f"Built {len(shots)} shots",
            "result": {"video_id": video_id, "shots": shots_to_dicts(shots)},
        }
    except JobCancelledError as e:
        logger.info(f"Analysis task {task_id} cancelled")
        tasks[task_id] = {"status": "cancelled", "progress": tasks[task_id]['progress'], "message": str(e)}
    except Exception as e:
        logger.error(f"Error in analysis task {task_id}: {e}", exc_info=True)
        tasks[task_id] = {"status": "failed", "progress": tasks[task_id]['progress'], "message": str(e)}
    finally:
        cancel_events.pop(task_id, None)


@router.post("/analyze", response_model=TaskStatus)
async def analyze_video(request: AnalyzeRequest, background_tasks: BackgroundTasks):
    if config.USE_TASK_QUEUE and is_queue_available():
        job = get_task_queue().enqueue_analysis(
            request.bucket,
            request.key,
            request.video_width,
            request.video_height,
            settings=request.settings.model_dump() if request.settings else None,
        )
        queued_tasks.add(job.id)
        return TaskStatus(task_id=job.id, status="pending", progress=0.0, message="Task queued on worker")

    task_id = str(uuid.uuid4())
    tasks[task_id] = {"status": "pending", "progress": 0.0, "message": "Task queued"}
    cancel_events[task_id] = threading.Event()
    background_tasks.add_task(
        _analyze_video_task,
        task_id,
        request.bucket,
        request.key,
        request.video_width,
        request.video_height,
        request.settings,
    )
    return TaskStatus(task_id=task_id, status="pending", progress=0.0, message="Task queued")


@router.get("/task/{task_id}", response_model=TaskStatus)
async def get_task_status(task_id: str):
    if task_id in queued_tasks:
        job = get_task_queue().get_job(task_id)
        if job is None:
            raise HTTPException(status_code=404, detail="Task not found")
        return job.to_task_status()

    task = tasks.get(task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")

    # If the task is completed, we can add the result to the response
    if task['status'] == 'completed':
        return TaskStatus(task_id=task_id, **task)

    return TaskStatus(task_id=task_id, status=task['status'], progress=task['progress'], message=task['message'])


@router.post("/task/{task_id}/cancel", response_model=TaskStatus)
async def cancel_task(task_id: str):
    if task_id in queued_tasks:
        if not get_task_queue().cancel_job(task_id):
            raise HTTPException(status_code=404, detail="Task not found")
        return TaskStatus(task_id=task_id, status="cancelled", progress=1.0, message="Cancellation requested")

    task = tasks.get(task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")

    event = cancel_events.get(task_id)
    if event is None:
        raise HTTPException(status_code=409, detail=f"Task already {task['status']}")
    event.set()
    return TaskStatus(task_id=task_id, status=task['status'], progress=task['progress'], message="Cancellation requested")


@router.post("/segment", response_model=ShotListResponse)
async def segment_events(request: SegmentRequest):
    """Build a shot list from detection events supplied by the caller."""
    settings = request.settings or ReframeSettings()
    events = sorted(request.events, key=lambda event: event.timestamp_ms)
    shots = segment_shots(events, request.video_width, request.video_height, settings)
    return ShotListResponse(shots=shots)


@router.get("/shots/{video_id}", response_model=ShotListResponse)
async def get_shots(video_id: str):
    """Return the saved shot list of an analyzed video."""
    shots = load_shot_list(video_id)
    if shots is None:
        raise HTTPException(status_code=404, detail="Shot list not found")
    return ShotListResponse(shots=shots)
