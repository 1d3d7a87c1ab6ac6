"""Handler that ingests one YouTube video into object storage."""

import asyncio
import json
import time
from collections.abc import Awaitable, Callable

from video_ingest.domain import (
    ArtifactKind,
    BytePipe,
    IngestionOptions,
    IngestionOutcome,
    TimingLedger,
    normalize_metadata,
    normalize_transcript,
    parse_video_id,
    stopwatch,
    storage_key,
)
from video_ingest.domain.models import VideoKeyLayout
from video_ingest.domain.progress import ProgressCallback
from video_ingest.exceptions import (
    FetchError,
    IngestionError,
    NoTranscriptAvailableError,
)
from video_ingest.infrastructure.interfaces import (
    ArtifactFetcher,
    MediaSource,
    ObjectStore,
)
from video_ingest.logging import setup_logging

logger = setup_logging()


class IngestionOrchestrator:
    """
    Ingests a video, its metadata and its transcript without duplicating work.

    Stages run in a fixed order: auxiliary artifacts (metadata, then
    transcript), then the video existence check, then the remote stream. Each
    stage is skipped when its object already exists in the store, so repeating
    a call is cheap and converges on the same objects.
    """

    def __init__(
        self,
        store: ObjectStore,
        media_source: MediaSource,
        fetcher: ArtifactFetcher,
        video_key_layout: VideoKeyLayout = "nested",
        max_height: int | None = None,
        pipe_max_chunks: int = 8,
    ):
        self._store = store
        self._media_source = media_source
        self._fetcher = fetcher
        self._video_key_layout = video_key_layout
        self._max_height = max_height
        self._pipe_max_chunks = pipe_max_chunks

    async def ingest(
        self,
        video_id: str,
        options: IngestionOptions | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> IngestionOutcome:
        """
        Runs the ingestion pipeline for one video.

        Args:
            video_id: The 11-character YouTube identifier.
            options: Which auxiliary artifacts to fetch.
            on_progress: Optional listener for download progress.

        Returns:
            IngestionOutcome with the video location, or the failure kind and
            message. Pipeline errors never propagate; cancellation does.
        """
        options = options or IngestionOptions()
        ledger = TimingLedger()
        warnings: list[str] = []

        try:
            video_id = parse_video_id(video_id)
            logger.info(
                "Ingestion started",
                extra={
                    "video_id": video_id,
                    "fetch_metadata": options.fetch_metadata,
                    "fetch_transcript": options.fetch_transcript,
                },
            )

            if options.fetch_metadata:
                ledger = await self._ensure_artifact(
                    video_id, ArtifactKind.METADATA, self._metadata_payload, ledger
                )

            if options.fetch_transcript:
                try:
                    ledger = await self._ensure_artifact(
                        video_id,
                        ArtifactKind.TRANSCRIPT,
                        self._transcript_payload,
                        ledger,
                    )
                except NoTranscriptAvailableError as e:
                    logger.warning(
                        "Continuing without transcript",
                        extra={"video_id": video_id, "reason": str(e)},
                    )
                    warnings.append(str(e))

            location, ledger = await self._ensure_video(video_id, ledger, on_progress)
            outcome = IngestionOutcome.succeeded(location, tuple(warnings))

        except IngestionError as e:
            logger.error(
                "Ingestion failed",
                extra={"video_id": video_id, "error_kind": e.kind.value, "error": str(e)},
            )
            outcome = IngestionOutcome.failed(e, tuple(warnings))
        except asyncio.CancelledError:
            logger.warning(
                "Ingestion cancelled",
                extra={"video_id": video_id, "timings": ledger.as_dict()},
            )
            raise
        except Exception as e:
            logger.exception("Unexpected ingestion failure", extra={"video_id": video_id})
            outcome = IngestionOutcome.failed(
                IngestionError(f"Unexpected error: {e}", e), tuple(warnings)
            )

        logger.info(
            "Ingestion finished",
            extra={
                "video_id": video_id,
                "success": outcome.success,
                "location": outcome.location,
                "error_kind": outcome.error.value if outcome.error else None,
                "timings": ledger.as_dict(),
                "total_seconds": round(ledger.total, 6),
            },
        )
        return outcome

    async def _ensure_artifact(
        self,
        video_id: str,
        kind: ArtifactKind,
        build_payload: Callable[[str], Awaitable[bytes]],
        ledger: TimingLedger,
    ) -> TimingLedger:
        """Fetches, normalizes and stores one auxiliary artifact unless present."""
        key = storage_key(video_id, kind)

        with stopwatch() as check:
            present = await self._store.exists(key)
        ledger = ledger.with_stage(f"{kind.value}_check", check.elapsed)

        if present:
            logger.info(
                "Artifact already stored, skipping fetch",
                extra={"video_id": video_id, "artifact": kind.value, "object_name": key},
            )
            return ledger.skipped(f"{kind.value}_fetch").skipped(f"{kind.value}_upload")

        with stopwatch() as fetch:
            payload = await build_payload(video_id)
        ledger = ledger.with_stage(f"{kind.value}_fetch", fetch.elapsed)

        with stopwatch() as upload:
            await self._store.put_bytes(key, payload, kind.content_type)
        return ledger.with_stage(f"{kind.value}_upload", upload.elapsed)

    async def _metadata_payload(self, video_id: str) -> bytes:
        record = await self._fetcher.fetch_metadata(video_id)
        try:
            record = normalize_metadata(record)
        except ValueError as e:
            raise FetchError(video_id, "metadata", e) from e
        return record.model_dump_json().encode("utf-8")

    async def _transcript_payload(self, video_id: str) -> bytes:
        entries = normalize_transcript(await self._fetcher.fetch_transcript(video_id))
        return json.dumps([entry.model_dump() for entry in entries]).encode("utf-8")

    async def _ensure_video(
        self,
        video_id: str,
        ledger: TimingLedger,
        on_progress: ProgressCallback | None,
    ) -> tuple[str, TimingLedger]:
        """Streams the video into the store unless it is already there."""
        key = storage_key(video_id, ArtifactKind.VIDEO, self._video_key_layout)

        with stopwatch() as check:
            present = await self._store.exists(key)
        ledger = ledger.with_stage("video_check", check.elapsed)

        if present:
            logger.info(
                "Video already stored, skipping download",
                extra={"video_id": video_id, "object_name": key},
            )
            return self._store.location(key), ledger

        with stopwatch() as opening:
            stream = await self._media_source.open(video_id, self._max_height)
        ledger = ledger.with_stage("video_open", opening.elapsed)

        started = time.perf_counter()
        if on_progress is not None:
            stream.progress.subscribe(on_progress)

        async with stream:
            async with BytePipe(
                video_id, stream.iter_chunks(), self._pipe_max_chunks
            ) as pipe:
                location = await self._store.put(key, pipe, stream.content_type)

        ledger = ledger.with_stage(
            "video_download", pipe.source_seconds or 0.0
        ).with_stage("video_upload", time.perf_counter() - started)

        logger.info(
            "Video stored",
            extra={
                "video_id": video_id,
                "object_name": key,
                "bytes": stream.progress.bytes_transferred,
            },
        )
        return location, ledger
