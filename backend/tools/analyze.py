#!/usr/bin/env python3
"""
Build a shot list from the command line.

Either runs face detection on an S3 video or segments a saved
GetFaceDetection response (JSON with a "Faces" list).

Usage:
    python -m backend.tools.analyze --bucket my-uploads --key videos/clip.mp4
    python -m backend.tools.analyze --response faces.json --width 1920 --height 1080
"""
import argparse
import json
import logging
import sys

from backend.models.schemas import ReframeSettings
from backend.services.errors import ReframeError
from backend.services.face_detection_client import parse_detection_items
from backend.services.shot_segmenter import segment_shots, shots_to_dicts
from backend.services.video_analyzer import VideoAnalyzer

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger("analyze")


def main():
    parser = argparse.ArgumentParser(description="Build an auto-reframe shot list")
    parser.add_argument("--bucket", help="S3 bucket of the video")
    parser.add_argument("--key", help="S3 object key of the video")
    parser.add_argument("--response", help="Saved GetFaceDetection JSON to segment instead of calling AWS")
    parser.add_argument("--width", type=int, default=None, help="Frame width in pixels")
    parser.add_argument("--height", type=int, default=None, help="Frame height in pixels")
    parser.add_argument("--smooth", action="store_true", help="Reuse the previous crop when the change is small")
    parser.add_argument("--output", default=None, help="Output JSON file path (default: stdout)")
    args = parser.parse_args()

    settings = ReframeSettings(smooth_crops=True) if args.smooth else ReframeSettings()

    if args.response:
        with open(args.response, encoding="utf-8") as f:
            data = json.load(f)
        metadata = data.get("VideoMetadata") or {}
        width = args.width or metadata.get("FrameWidth")
        height = args.height or metadata.get("FrameHeight")
        if not width or not height:
            parser.error("--width/--height required when the response has no VideoMetadata")
        events = sorted(
            parse_detection_items(data.get("Faces") or []),
            key=lambda event: event.timestamp_ms,
        )
        shots = segment_shots(events, width, height, settings)
    elif args.bucket and args.key:
        try:
            shots = VideoAnalyzer(settings=settings).analyze(args.bucket, args.key, args.width, args.height)
        except ReframeError as e:
            logger.error("Analysis failed: %s", e)
            sys.exit(1)
    else:
        parser.error("either --response or --bucket and --key are required")

    payload = json.dumps(shots_to_dicts(shots), indent=2)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(payload)
        logger.info("Saved %d shots to %s", len(shots), args.output)
    else:
        print(payload)


if __name__ == "__main__":
    main()
