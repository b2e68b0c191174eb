"""Configuration settings for the application."""
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")

# Server Configuration
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 8000))

# AWS Rekognition Configuration
AWS_REGION = os.getenv("AWS_REGION", "eu-west-2")
REKOGNITION_FACE_ATTRIBUTES = os.getenv("REKOGNITION_FACE_ATTRIBUTES", "ALL")
REKOGNITION_MAX_RESULTS = int(os.getenv("REKOGNITION_MAX_RESULTS", 1000))

# Job polling
JOB_CHECK_DELAY_MS = int(os.getenv("JOB_CHECK_DELAY_MS", 5000))
JOB_MAX_WAIT_SEC = float(os.getenv("JOB_MAX_WAIT_SEC", 3600))  # 1 hour
POLL_MAX_RETRIES = int(os.getenv("POLL_MAX_RETRIES", 3))

# Shot segmentation thresholds
HIGH_CONFIDENCE_THRESHOLD = float(os.getenv("HIGH_CONFIDENCE_THRESHOLD", 95.0))
PADDING_FACTOR_BASE = float(os.getenv("PADDING_FACTOR_BASE", 1.0))
SIGNIFICANT_MOVEMENT_THRESHOLD = float(os.getenv("SIGNIFICANT_MOVEMENT_THRESHOLD", 0.7))
MIN_SHOT_DURATION_SEC = float(os.getenv("MIN_SHOT_DURATION_SEC", 0.6))
CONFIDENCE_THRESHOLD = float(os.getenv("CONFIDENCE_THRESHOLD", 85.0))
CROP_CHANGE_TOLERANCE = float(os.getenv("CROP_CHANGE_TOLERANCE", 0.6))
SMOOTH_CROPS = _env_flag("SMOOTH_CROPS")  # feed the previous crop back into the geometry engine

# Task execution
USE_TASK_QUEUE = _env_flag("USE_TASK_QUEUE")

# Directories
BASE_DIR = Path(__file__).parent.parent
OUTPUT_DIR = Path(os.getenv("OUTPUT_DIR", BASE_DIR / "output"))
