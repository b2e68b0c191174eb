#!/usr/bin/env python3
"""
Worker for running video analysis tasks.

Each task submits a face detection job, waits for it and builds the shot
list. Start several workers to analyze several videos at once.

Usage:
    # From project root:
    python -m backend.workers.run_worker

Environment variables:
    REDIS_HOST: Redis server host (default: localhost)
    REDIS_PORT: Redis server port (default: 6379)
    AWS_REGION: Rekognition region (default: eu-west-2)
"""
from __future__ import annotations

import logging
import os
import sys

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout),
    ]
)

logger = logging.getLogger("analysis_worker")


def main():
    """Start the analysis worker."""
    from redis import Redis
    from rq import Worker, Queue

    from backend.services.task_queue import ANALYSIS_QUEUE_NAME, REDIS_DB, REDIS_HOST, REDIS_PORT

    logger.info("Connecting to Redis: %s:%d", REDIS_HOST, REDIS_PORT)

    try:
        redis_conn = Redis(
            host=REDIS_HOST,
            port=REDIS_PORT,
            db=REDIS_DB,
        )
        redis_conn.ping()
        logger.info("Redis connection successful")
    except Exception as e:
        logger.error("Failed to connect to Redis: %s", e)
        sys.exit(1)

    queue = Queue(ANALYSIS_QUEUE_NAME, connection=redis_conn)
    logger.info("Listening on queue: %s", queue.name)

    worker = Worker(
        queues=[queue],
        connection=redis_conn,
        name=f"analysis_worker_{os.getpid()}",
    )

    logger.info("Worker ready, waiting for tasks...")
    logger.info("Press Ctrl+C to stop")

    try:
        worker.work(with_scheduler=False)
    except KeyboardInterrupt:
        logger.info("Worker stopped by user")
    except Exception as e:
        logger.error("Worker error: %s", e, exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
