"""Video ingestion endpoints."""

import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import TypeAdapter

from video_ingest.dependencies import get_orchestrator, get_storage
from video_ingest.domain import (
    ArtifactKind,
    IngestionOptions,
    TranscriptEntry,
    extract_video_id,
    is_valid_video_id,
    storage_key,
)
from video_ingest.exceptions import ErrorKind, ObjectNotFoundError, StoreIOError
from video_ingest.handlers import IngestionOrchestrator
from video_ingest.infrastructure.interfaces import ObjectStore
from video_ingest.logging import setup_logging
from video_ingest.response_models import (
    IngestRequest,
    IngestResponse,
    MetadataResponse,
    TranscriptResponse,
)

logger = setup_logging()

router = APIRouter(prefix="/videos", tags=["videos"])

OrchestratorDep = Annotated[IngestionOrchestrator, Depends(get_orchestrator)]
StorageDep = Annotated[ObjectStore, Depends(get_storage)]

DISCONNECT_POLL_SECONDS = 1.0

_transcript_adapter = TypeAdapter(list[TranscriptEntry])


async def _cancel_on_disconnect(request: Request, task: asyncio.Task) -> None:
    """Cancels the ingestion task if the client goes away before it finishes."""
    while not task.done():
        if await request.is_disconnected():
            logger.warning("Client disconnected, cancelling ingestion")
            task.cancel()
            return
        await asyncio.sleep(DISCONNECT_POLL_SECONDS)


@router.post("/ingest", response_model=IngestResponse)
async def ingest_video(
    body: IngestRequest,
    request: Request,
    orchestrator: OrchestratorDep,
) -> IngestResponse:
    """
    Ingests a YouTube video into object storage.

    Pipeline failures are reported in the response body, never as HTTP errors.
    """
    video_id = extract_video_id(body.url)
    if video_id is None:
        logger.info("Rejected invalid video URL", extra={"url": body.url})
        return IngestResponse(
            success=False,
            error="Invalid YouTube URL",
            error_kind=ErrorKind.INVALID_IDENTIFIER.value,
        )

    options = IngestionOptions(
        fetch_metadata=body.fetch_metadata,
        fetch_transcript=body.fetch_transcript,
    )
    task = asyncio.create_task(orchestrator.ingest(video_id, options))
    watcher = asyncio.create_task(_cancel_on_disconnect(request, task))

    try:
        outcome = await task
    except asyncio.CancelledError:
        if asyncio.current_task().cancelling():
            raise
        return IngestResponse(success=False, error="Request cancelled by client")
    finally:
        watcher.cancel()

    return IngestResponse.from_outcome(outcome)


def _require_video_id(video_id: str) -> str:
    if not is_valid_video_id(video_id):
        raise HTTPException(status_code=422, detail="Invalid video id")
    return video_id


async def _read_artifact(storage: ObjectStore, video_id: str, kind: ArtifactKind) -> bytes:
    try:
        return await storage.read(storage_key(video_id, kind))
    except ObjectNotFoundError:
        raise HTTPException(status_code=404, detail=f"No stored {kind.value} for video")
    except StoreIOError:
        raise HTTPException(status_code=500, detail="Storage read failed")


@router.get("/{video_id}/metadata", response_model=MetadataResponse)
async def get_metadata(video_id: str, storage: StorageDep) -> MetadataResponse:
    """Returns the stored metadata document of an ingested video."""
    video_id = _require_video_id(video_id)
    data = await _read_artifact(storage, video_id, ArtifactKind.METADATA)
    return MetadataResponse.model_validate_json(data)


@router.get("/{video_id}/transcript", response_model=TranscriptResponse)
async def get_transcript(video_id: str, storage: StorageDep) -> TranscriptResponse:
    """Returns the stored transcript of an ingested video."""
    video_id = _require_video_id(video_id)
    data = await _read_artifact(storage, video_id, ArtifactKind.TRANSCRIPT)
    return TranscriptResponse(
        video_id=video_id, entries=_transcript_adapter.validate_json(data)
    )
