"""Abstract interface for remote media sources."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Awaitable, Callable

from video_ingest.domain.progress import ProgressTracker


class MediaStream:
    """An open remote byte stream with progress reporting."""

    def __init__(
        self,
        video_id: str,
        chunks: AsyncIterator[bytes],
        total_bytes: int | None,
        close: Callable[[], Awaitable[None]] | None = None,
        content_type: str = "video/mp4",
    ):
        self.video_id = video_id
        self.content_type = content_type
        self.progress = ProgressTracker(video_id, total_bytes)
        self._chunks = chunks
        self._close = close
        self._closed = False

    @property
    def total_bytes(self) -> int | None:
        return self.progress.total_bytes

    async def iter_chunks(self) -> AsyncIterator[bytes]:
        async for chunk in self._chunks:
            self.progress.advance(len(chunk))
            yield chunk

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._close is not None:
            await self._close()

    async def __aenter__(self) -> "MediaStream":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


class MediaSource(ABC):
    """Abstract base class for remote video providers."""

    @abstractmethod
    async def open(self, video_id: str, max_height: int | None = None) -> MediaStream:
        """
        Opens a byte stream of the best combined audio+video representation.

        Args:
            video_id: The video identifier.
            max_height: Preferred quality ceiling; the highest available
                representation is used when nothing fits under it.

        Returns:
            An open MediaStream; the caller must close it.

        Raises:
            NoStreamAvailableError: If no combined representation exists.
            SourceStreamError: If the provider cannot be reached.
        """
