"""YouTube implementation of the ArtifactFetcher interface."""

import asyncio
from typing import Any

import httpx
from youtube_transcript_api import (
    NoTranscriptFound,
    TranscriptsDisabled,
    VideoUnavailable,
    YouTubeTranscriptApi,
)

from video_ingest.domain.models import TranscriptEntry, VideoMetadataRecord
from video_ingest.exceptions import (
    FetchError,
    NotFoundError,
    NoTranscriptAvailableError,
)
from video_ingest.logging import setup_logging

from .interfaces import ArtifactFetcher

logger = setup_logging()

VIDEOS_ENDPOINT = "https://www.googleapis.com/youtube/v3/videos"
_THUMBNAIL_PREFERENCE = ("maxres", "standard", "high", "medium", "default")


class YouTubeArtifactFetcher(ArtifactFetcher):
    """Fetches metadata from the YouTube Data API and transcripts from timed text."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        transcript_api: YouTubeTranscriptApi | None = None,
        languages: tuple[str, ...] = ("en",),
    ):
        self._http = http_client
        self._api_key = api_key
        self._transcript_api = transcript_api or YouTubeTranscriptApi()
        self._languages = languages

    async def fetch_metadata(self, video_id: str) -> VideoMetadataRecord:
        try:
            response = await self._http.get(
                VIDEOS_ENDPOINT,
                params={"part": "snippet,contentDetails", "id": video_id},
                headers={"X-Goog-Api-Key": self._api_key},
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.exception("YouTube Data API request failed", extra={"video_id": video_id})
            raise FetchError(video_id, "metadata", e) from e

        items = payload.get("items") or []
        if not items:
            logger.warning("Video not found upstream", extra={"video_id": video_id})
            raise NotFoundError(video_id)

        record = self._to_record(items[0])
        logger.info(
            "Metadata fetched",
            extra={"video_id": video_id, "title": record.title},
        )
        return record

    async def fetch_transcript(self, video_id: str) -> list[TranscriptEntry]:
        try:
            snippets = await asyncio.to_thread(self._fetch_snippets, video_id)
        except (NoTranscriptFound, TranscriptsDisabled) as e:
            logger.warning("No transcript available", extra={"video_id": video_id})
            raise NoTranscriptAvailableError(video_id, e) from e
        except VideoUnavailable as e:
            raise NotFoundError(video_id, e) from e
        except Exception as e:
            logger.exception("Transcript retrieval failed", extra={"video_id": video_id})
            raise FetchError(video_id, "transcript", e) from e

        if not snippets:
            raise NoTranscriptAvailableError(video_id)

        entries = [
            TranscriptEntry(text=s.text, offset=s.start, duration=s.duration)
            for s in snippets
        ]
        logger.info(
            "Transcript fetched",
            extra={"video_id": video_id, "entry_count": len(entries)},
        )
        return entries

    def _fetch_snippets(self, video_id: str) -> list[Any]:
        """Fetches the preferred-language transcript, else the first one listed."""
        try:
            return list(self._transcript_api.fetch(video_id, languages=self._languages))
        except NoTranscriptFound:
            transcripts = list(self._transcript_api.list(video_id))
            if not transcripts:
                raise
            logger.info(
                "Falling back to first listed transcript",
                extra={
                    "video_id": video_id,
                    "language_code": transcripts[0].language_code,
                },
            )
            return list(transcripts[0].fetch())

    def _to_record(self, item: dict[str, Any]) -> VideoMetadataRecord:
        snippet = item.get("snippet") or {}
        details = item.get("contentDetails") or {}
        thumbnails = snippet.get("thumbnails") or {}
        thumbnail_url = next(
            (
                thumbnails[name]["url"]
                for name in _THUMBNAIL_PREFERENCE
                if thumbnails.get(name, {}).get("url")
            ),
            None,
        )
        return VideoMetadataRecord(
            title=snippet.get("title", ""),
            description=snippet.get("description", ""),
            caption_flag=str(details.get("caption", "false")).lower() == "true",
            duration=details.get("duration", "PT0S"),
            thumbnail_url=thumbnail_url,
        )
