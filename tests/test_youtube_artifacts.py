"""
Tests for metadata and transcript retrieval from YouTube.
"""

from types import SimpleNamespace
from unittest.mock import Mock

import httpx
import pytest
from youtube_transcript_api import NoTranscriptFound, TranscriptsDisabled, VideoUnavailable

from video_ingest.exceptions import FetchError, NotFoundError, NoTranscriptAvailableError
from video_ingest.infrastructure import YouTubeArtifactFetcher

VIDEO_ID = "dQw4w9WgXcQ"

VIDEO_ITEM = {
    "id": VIDEO_ID,
    "snippet": {
        "title": "Rick Astley - Never Gonna Give You Up",
        "description": "The official video",
        "thumbnails": {
            "default": {"url": "https://i.ytimg.com/vi/dQw4w9WgXcQ/default.jpg"},
            "high": {"url": "https://i.ytimg.com/vi/dQw4w9WgXcQ/hqdefault.jpg"},
        },
    },
    "contentDetails": {"duration": "PT3M33S", "caption": "true"},
}


def _snippet(text, start, duration):
    return SimpleNamespace(text=text, start=start, duration=duration)


def _fetcher(handler=None, transcript_api=None):
    handler = handler or (lambda request: httpx.Response(200, json={"items": [VIDEO_ITEM]}))
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return YouTubeArtifactFetcher(
        client,
        api_key="test-key",
        transcript_api=transcript_api or Mock(),
        languages=("en", "de"),
    )


class TestFetchMetadata:
    """Test cases for the YouTube Data API metadata request."""

    @pytest.mark.asyncio
    async def test_maps_video_item(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json={"items": [VIDEO_ITEM]})

        record = await _fetcher(handler).fetch_metadata(VIDEO_ID)

        assert record.title == "Rick Astley - Never Gonna Give You Up"
        assert record.description == "The official video"
        assert record.caption_flag is True
        assert record.duration == "PT3M33S"
        assert record.thumbnail_url == "https://i.ytimg.com/vi/dQw4w9WgXcQ/hqdefault.jpg"

        request = requests[0]
        assert request.url.params["id"] == VIDEO_ID
        assert request.url.params["part"] == "snippet,contentDetails"
        assert request.headers["X-Goog-Api-Key"] == "test-key"
        assert "key" not in request.url.params

    @pytest.mark.asyncio
    async def test_empty_items_means_not_found(self):
        fetcher = _fetcher(lambda request: httpx.Response(200, json={"items": []}))

        with pytest.raises(NotFoundError):
            await fetcher.fetch_metadata(VIDEO_ID)

    @pytest.mark.asyncio
    async def test_http_error_becomes_fetch_error(self):
        fetcher = _fetcher(lambda request: httpx.Response(403, json={"error": {}}))

        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch_metadata(VIDEO_ID)

        assert exc_info.value.artifact == "metadata"

    @pytest.mark.asyncio
    async def test_invalid_json_becomes_fetch_error(self):
        fetcher = _fetcher(lambda request: httpx.Response(200, content=b"<html>"))

        with pytest.raises(FetchError):
            await fetcher.fetch_metadata(VIDEO_ID)


class TestFetchTranscript:
    """Test cases for timed-text retrieval."""

    @pytest.mark.asyncio
    async def test_returns_entries_in_preferred_language(self):
        api = Mock()
        api.fetch.return_value = [_snippet("hello", 0.0, 1.5), _snippet("world", 1.5, 2.0)]

        entries = await _fetcher(transcript_api=api).fetch_transcript(VIDEO_ID)

        api.fetch.assert_called_once_with(VIDEO_ID, languages=("en", "de"))
        assert [(e.text, e.offset, e.duration) for e in entries] == [
            ("hello", 0.0, 1.5),
            ("world", 1.5, 2.0),
        ]

    @pytest.mark.asyncio
    async def test_falls_back_to_first_listed_transcript(self):
        api = Mock()
        api.fetch.side_effect = NoTranscriptFound(VIDEO_ID, ["en", "de"], Mock())
        spanish = Mock(language_code="es")
        spanish.fetch.return_value = [_snippet("hola", 0.0, 1.0)]
        api.list.return_value = [spanish]

        entries = await _fetcher(transcript_api=api).fetch_transcript(VIDEO_ID)

        assert [e.text for e in entries] == ["hola"]

    @pytest.mark.asyncio
    async def test_disabled_transcripts_are_unavailable(self):
        api = Mock()
        api.fetch.side_effect = TranscriptsDisabled(VIDEO_ID)

        with pytest.raises(NoTranscriptAvailableError):
            await _fetcher(transcript_api=api).fetch_transcript(VIDEO_ID)

    @pytest.mark.asyncio
    async def test_empty_transcript_is_unavailable(self):
        api = Mock()
        api.fetch.return_value = []

        with pytest.raises(NoTranscriptAvailableError):
            await _fetcher(transcript_api=api).fetch_transcript(VIDEO_ID)

    @pytest.mark.asyncio
    async def test_unavailable_video_is_not_found(self):
        api = Mock()
        api.fetch.side_effect = VideoUnavailable(VIDEO_ID)

        with pytest.raises(NotFoundError):
            await _fetcher(transcript_api=api).fetch_transcript(VIDEO_ID)

    @pytest.mark.asyncio
    async def test_other_failures_become_fetch_error(self):
        api = Mock()
        api.fetch.side_effect = ConnectionError("blocked")

        with pytest.raises(FetchError) as exc_info:
            await _fetcher(transcript_api=api).fetch_transcript(VIDEO_ID)

        assert exc_info.value.artifact == "transcript"
