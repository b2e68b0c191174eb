"""
Analysis tasks for the RQ worker.

Tasks:
- analyze_video: Rekognition face detection + shot segmentation for one S3 video
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from backend.models.schemas import ReframeSettings
from backend.services.shot_segmenter import shots_to_dicts
from backend.services.video_analyzer import VideoAnalyzer
from backend.utils.file_utils import save_shot_list

logger = logging.getLogger(__name__)


def analyze_video(
    bucket: str,
    key: str,
    video_width: Optional[int] = None,
    video_height: Optional[int] = None,
    settings: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Build the shot list for an S3 video.

    Returns:
        {
            "video_id": "clip",
            "shots": [...],  # serialized Shot objects
            "shots_path": "/.../output/clip/shots.json",
        }
    """
    logger.info("Task: analyze_video started, video=s3://%s/%s", bucket, key)
    analyzer = VideoAnalyzer(settings=ReframeSettings(**(settings or {})))
    shots = analyzer.analyze(bucket, key, video_width, video_height)

    video_id = Path(key).stem
    shots_path = save_shot_list(video_id, shots)
    logger.info("Task: analyze_video finished, %d shots saved to %s", len(shots), shots_path)
    return {
        "video_id": video_id,
        "shots": shots_to_dicts(shots),
        "shots_path": str(shots_path),
    }
