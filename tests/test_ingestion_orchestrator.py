"""
End-to-end tests for the ingestion orchestrator.

This test suite covers:
- First ingestion of a video with metadata and transcript
- Idempotent repeat ingestion
- Failure reporting per error kind
- Transcript "warn and continue" policy
- Cancellation of an in-flight upload
"""

import asyncio
import json
import logging

import pytest

from video_ingest.domain import ArtifactKind, IngestionOptions, storage_key
from video_ingest.exceptions import (
    ErrorKind,
    NoStreamAvailableError,
    NotFoundError,
    NoTranscriptAvailableError,
    StoreIOError,
)
from video_ingest.handlers import IngestionOrchestrator

from .fakes import VIDEO_CHUNKS, VIDEO_ID, FakeFetcher, FakeMediaSource

VIDEO_KEY = storage_key(VIDEO_ID, ArtifactKind.VIDEO)
METADATA_KEY = storage_key(VIDEO_ID, ArtifactKind.METADATA)
TRANSCRIPT_KEY = storage_key(VIDEO_ID, ArtifactKind.TRANSCRIPT)


class TestFirstIngestion:
    """Test cases for ingesting into an empty store."""

    @pytest.mark.asyncio
    async def test_stores_video_metadata_and_transcript(self, orchestrator, store):
        outcome = await orchestrator.ingest(VIDEO_ID)

        assert outcome.success
        assert outcome.error is None
        assert outcome.location.endswith("dQw4w9WgXcQ.mp4")
        assert store.keys() == sorted([VIDEO_KEY, METADATA_KEY, TRANSCRIPT_KEY])
        assert await store.read(VIDEO_KEY) == b"".join(VIDEO_CHUNKS)
        assert store.content_type(VIDEO_KEY) == "video/mp4"
        assert store.content_type(METADATA_KEY) == "application/json"

    @pytest.mark.asyncio
    async def test_metadata_is_normalized(self, orchestrator, store):
        await orchestrator.ingest(VIDEO_ID)

        metadata = json.loads(await store.read(METADATA_KEY))
        assert metadata == {
            "title": "Rick Astley - Never Gonna Give You Up",
            "description": "The official video",
            "caption_flag": True,
            "duration": "03:33",
            "thumbnail_url": "https://i.ytimg.com/vi/dQw4w9WgXcQ/maxresdefault.jpg",
        }

    @pytest.mark.asyncio
    async def test_transcript_is_cleaned_and_ordered(self, orchestrator, store):
        await orchestrator.ingest(VIDEO_ID)

        transcript = json.loads(await store.read(TRANSCRIPT_KEY))
        assert transcript == [
            {"text": "We're no strangers to love", "offset": 2.0, "duration": 3.5},
            {"text": "Never gonna give you up", "offset": 18.5, "duration": 2.0},
        ]

    @pytest.mark.asyncio
    async def test_stage_order(self, orchestrator, store):
        """Test auxiliary artifacts are checked before the video."""
        await orchestrator.ingest(VIDEO_ID)

        assert store.exists_calls == [METADATA_KEY, TRANSCRIPT_KEY, VIDEO_KEY]
        assert store.put_calls == [METADATA_KEY, TRANSCRIPT_KEY, VIDEO_KEY]

    @pytest.mark.asyncio
    async def test_options_skip_auxiliary_artifacts(self, orchestrator, store, fetcher):
        outcome = await orchestrator.ingest(
            VIDEO_ID, IngestionOptions(fetch_metadata=False, fetch_transcript=False)
        )

        assert outcome.success
        assert store.keys() == [VIDEO_KEY]
        assert fetcher.metadata_calls == []
        assert fetcher.transcript_calls == []

    @pytest.mark.asyncio
    async def test_progress_listener_is_notified(self, orchestrator):
        updates = []

        await orchestrator.ingest(
            VIDEO_ID, on_progress=lambda done, total, pct: updates.append(pct)
        )

        assert updates
        assert updates[-1] == 100
        assert updates == sorted(updates)

    @pytest.mark.asyncio
    async def test_failing_progress_listener_does_not_abort(self, orchestrator, store):
        def broken_listener(done, total, pct):
            raise ValueError("ui gone")

        outcome = await orchestrator.ingest(VIDEO_ID, on_progress=broken_listener)

        assert outcome.success
        assert await store.read(VIDEO_KEY) == b"".join(VIDEO_CHUNKS)

    @pytest.mark.asyncio
    async def test_flat_layout(self, store, media_source, fetcher):
        orchestrator = IngestionOrchestrator(
            store, media_source, fetcher, video_key_layout="flat"
        )

        outcome = await orchestrator.ingest(VIDEO_ID)

        assert outcome.location == "memory://videos/videos/full-length/dQw4w9WgXcQ.mp4"
        assert await store.exists(METADATA_KEY)

    @pytest.mark.asyncio
    async def test_logs_stage_timings(self, orchestrator, caplog):
        with caplog.at_level(logging.INFO):
            await orchestrator.ingest(VIDEO_ID)

        finished = [r for r in caplog.records if r.getMessage() == "Ingestion finished"]
        assert len(finished) == 1
        assert list(finished[0].timings) == [
            "metadata_check",
            "metadata_fetch",
            "metadata_upload",
            "transcript_check",
            "transcript_fetch",
            "transcript_upload",
            "video_check",
            "video_open",
            "video_download",
            "video_upload",
        ]


class TestRepeatIngestion:
    """Test cases for the deduplication guarantees."""

    @pytest.mark.asyncio
    async def test_second_call_does_no_work(self, orchestrator, store, media_source, fetcher):
        first = await orchestrator.ingest(VIDEO_ID)
        store.reset_calls()

        second = await orchestrator.ingest(VIDEO_ID)

        assert second.success
        assert second.location == first.location
        assert len(store.exists_calls) == 3
        assert store.put_calls == []
        assert media_source.open_calls == [VIDEO_ID]
        assert fetcher.metadata_calls == [VIDEO_ID]
        assert fetcher.transcript_calls == [VIDEO_ID]

    @pytest.mark.asyncio
    async def test_repeat_fills_in_missing_transcript(self, store, media_source):
        fetcher = FakeFetcher(transcript_error=NoTranscriptAvailableError(VIDEO_ID))
        orchestrator = IngestionOrchestrator(store, media_source, fetcher)
        await orchestrator.ingest(VIDEO_ID)
        assert not await store.exists(TRANSCRIPT_KEY)

        fetcher.transcript_error = None
        outcome = await orchestrator.ingest(VIDEO_ID)

        assert outcome.success
        assert outcome.warnings == ()
        assert await store.exists(TRANSCRIPT_KEY)
        assert media_source.open_calls == [VIDEO_ID]

    @pytest.mark.asyncio
    async def test_concurrent_calls_agree_on_location(self, orchestrator, store):
        """Test two simultaneous runs for one video both succeed consistently."""
        first, second = await asyncio.gather(
            orchestrator.ingest(VIDEO_ID), orchestrator.ingest(VIDEO_ID)
        )

        assert first.success
        assert second.success
        assert first.location == second.location
        assert [key for key in store.keys() if key.endswith(".mp4")] == [VIDEO_KEY]
        assert await store.read(VIDEO_KEY) == b"".join(VIDEO_CHUNKS)


class TestFailures:
    """Test cases for failure outcomes."""

    @pytest.mark.asyncio
    async def test_invalid_identifier_touches_nothing(self, orchestrator, store, fetcher):
        outcome = await orchestrator.ingest("not-an-id")

        assert not outcome.success
        assert outcome.location is None
        assert outcome.error is ErrorKind.INVALID_IDENTIFIER
        assert store.exists_calls == []
        assert fetcher.metadata_calls == []

    @pytest.mark.asyncio
    async def test_no_stream_keeps_auxiliary_objects(self, orchestrator, store, media_source):
        media_source.error = NoStreamAvailableError(VIDEO_ID)

        outcome = await orchestrator.ingest(VIDEO_ID)

        assert not outcome.success
        assert outcome.error is ErrorKind.NO_STREAM_AVAILABLE
        assert not await store.exists(VIDEO_KEY)
        assert await store.exists(METADATA_KEY)
        assert await store.exists(TRANSCRIPT_KEY)

    @pytest.mark.asyncio
    async def test_transcript_unavailable_warns_and_continues(self, orchestrator, store, fetcher):
        fetcher.transcript_error = NoTranscriptAvailableError(VIDEO_ID)

        outcome = await orchestrator.ingest(VIDEO_ID)

        assert outcome.success
        assert len(outcome.warnings) == 1
        assert "No transcript available" in outcome.warnings[0]
        assert not await store.exists(TRANSCRIPT_KEY)
        assert await store.exists(VIDEO_KEY)

    @pytest.mark.asyncio
    async def test_other_transcript_errors_abort(self, orchestrator, store, fetcher):
        fetcher.transcript_error = NotFoundError(VIDEO_ID)

        outcome = await orchestrator.ingest(VIDEO_ID)

        assert outcome.error is ErrorKind.NOT_FOUND
        assert not await store.exists(VIDEO_KEY)

    @pytest.mark.asyncio
    async def test_invalid_duration_is_fetch_error(self, orchestrator, fetcher):
        fetcher.metadata = fetcher.metadata.model_copy(update={"duration": "three minutes"})

        outcome = await orchestrator.ingest(VIDEO_ID)

        assert outcome.error is ErrorKind.FETCH_ERROR

    @pytest.mark.asyncio
    async def test_stream_failure_leaves_no_video(self, store, fetcher):
        media_source = FakeMediaSource(fail_after=1)
        orchestrator = IngestionOrchestrator(store, media_source, fetcher)

        outcome = await orchestrator.ingest(VIDEO_ID)

        assert outcome.error is ErrorKind.SOURCE_STREAM_ERROR
        assert not await store.exists(VIDEO_KEY)
        assert media_source.closed_streams == 1

    @pytest.mark.asyncio
    async def test_store_failure_is_reported(self, orchestrator, store, monkeypatch):
        async def broken_exists(key):
            raise StoreIOError(key, "stat", ConnectionError("unreachable"))

        monkeypatch.setattr(store, "exists", broken_exists)

        outcome = await orchestrator.ingest(VIDEO_ID)

        assert outcome.error is ErrorKind.STORE_IO_ERROR

    @pytest.mark.asyncio
    async def test_unexpected_errors_are_contained(self, orchestrator, fetcher):
        fetcher.metadata_error = RuntimeError("boom")

        outcome = await orchestrator.ingest(VIDEO_ID)

        assert not outcome.success
        assert outcome.error is ErrorKind.UNEXPECTED
        assert "boom" in outcome.message


class TestCancellation:
    """Test cases for cancelling an in-flight ingestion."""

    @pytest.mark.asyncio
    async def test_cancel_propagates_and_commits_nothing(self, store, fetcher):
        media_source = FakeMediaSource(stall_after=1)
        orchestrator = IngestionOrchestrator(store, media_source, fetcher)

        task = asyncio.create_task(orchestrator.ingest(VIDEO_ID))
        await asyncio.wait_for(media_source.first_chunk_sent.wait(), timeout=5)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        assert not await store.exists(VIDEO_KEY)
        assert media_source.closed_streams == 1
