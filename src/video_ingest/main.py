"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from ddtrace import patch_all
from fastapi import FastAPI

from video_ingest.dependencies import close_resources, get_storage
from video_ingest.logging import setup_logging
from video_ingest.routes import health_router, videos_router

patch_all()
logger = setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    await get_storage().ensure_bucket_exists()
    logger.info("Video ingest service started")
    yield
    await close_resources()


app = FastAPI(title="Video Ingest Service", lifespan=lifespan)
app.include_router(health_router)
app.include_router(videos_router)
