"""Abstract interface for auxiliary artifact retrieval."""

from abc import ABC, abstractmethod

from video_ingest.domain.models import TranscriptEntry, VideoMetadataRecord


class ArtifactFetcher(ABC):
    """Abstract base class for metadata and transcript providers."""

    @abstractmethod
    async def fetch_metadata(self, video_id: str) -> VideoMetadataRecord:
        """
        Retrieves descriptive metadata for a video.

        The returned ``duration`` is the provider's raw ISO-8601 value.

        Raises:
            NotFoundError: If the identifier does not resolve to a video.
            FetchError: If the provider request fails.
        """

    @abstractmethod
    async def fetch_transcript(self, video_id: str) -> list[TranscriptEntry]:
        """
        Retrieves the timed-text transcript for a video.

        Raises:
            NoTranscriptAvailableError: If the video has no timed text.
            NotFoundError: If the video is unavailable.
            FetchError: If the provider request fails.
        """
