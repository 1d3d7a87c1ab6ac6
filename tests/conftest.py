"""Shared fixtures for the video-ingest test suite."""

import pytest

from video_ingest.handlers import IngestionOrchestrator

from .fakes import FakeFetcher, FakeMediaSource, RecordingStore


@pytest.fixture
def store():
    return RecordingStore()


@pytest.fixture
def media_source():
    return FakeMediaSource()


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def orchestrator(store, media_source, fetcher):
    return IngestionOrchestrator(
        store=store, media_source=media_source, fetcher=fetcher, pipe_max_chunks=2
    )
