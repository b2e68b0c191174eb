"""Utility helpers for working with the output directory."""
import json
from pathlib import Path
from typing import Iterable, List, Optional

from backend import config
from backend.models.schemas import Shot

SHOTS_FILENAME = "shots.json"


def get_output_dir(video_id: str | None = None, create: bool = True) -> Path:
    """
    Return path to the output directory (optionally namespaced by video_id).
    """
    output_dir = Path(config.OUTPUT_DIR)
    if video_id:
        output_dir = output_dir / video_id
    if create:
        output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir


def save_shot_list(video_id: str, shots: Iterable[Shot]) -> Path:
    """Write shots as JSON to <output>/<video_id>/shots.json and return the path."""
    path = get_output_dir(video_id) / SHOTS_FILENAME
    payload = [shot.model_dump(mode="json") for shot in shots]
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)
    return path


def load_shot_list(video_id: str) -> Optional[List[Shot]]:
    """Read a saved shot list, or None if the video has not been analyzed."""
    path = get_output_dir(video_id, create=False) / SHOTS_FILENAME
    if not path.exists():
        return None
    with open(path, encoding="utf-8") as f:
        return [Shot(**item) for item in json.load(f)]
