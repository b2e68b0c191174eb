"""Main FastAPI application."""
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend import config
from backend.routers import video
from backend.services.task_queue import is_queue_available

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Auto-Reframe Shot List API",
    description="Builds editable shot lists with face-centred crop windows from video face detection",
    version="1.0.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify exact origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(video.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Auto-Reframe Shot List API",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint; reports whether analyses can go to the worker queue."""
    task_queue = "disabled"
    if config.USE_TASK_QUEUE:
        task_queue = "available" if is_queue_available() else "unavailable"
    return {"status": "healthy", "task_queue": task_queue}


if __name__ == "__main__":
    import uvicorn
    from backend.config import HOST, PORT

    logger.info(f"Starting server on {HOST}:{PORT}")
    uvicorn.run(
        "backend.main:app",
        host=HOST,
        port=PORT,
        reload=True,
        log_level="info"
    )
