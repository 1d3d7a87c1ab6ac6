"""Abstract interface for object store operations."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator


async def _single_chunk(data: bytes) -> AsyncIterator[bytes]:
    yield data


class ObjectStore(ABC):
    """Abstract base class for object storage backends."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """
        Checks whether a fully committed object exists under a key.

        Args:
            key: The object key.

        Returns:
            True if the object exists, False if it was never written.

        Raises:
            StoreIOError: If the check itself fails (network, permissions).
        """

    @abstractmethod
    async def put(
        self, key: str, chunks: AsyncIterator[bytes], content_type: str
    ) -> str:
        """
        Streams an object into storage.

        The object becomes visible to ``exists``/``read`` only after every
        chunk has been consumed and the write has been committed.

        Args:
            key: The destination key.
            chunks: Incrementally produced object content.
            content_type: MIME type of the object.

        Returns:
            The object's location URI.

        Raises:
            UploadError: If the write fails.
            SourceStreamError: If the chunk source fails mid-stream.
        """

    @abstractmethod
    async def read(self, key: str) -> bytes:
        """
        Reads a complete object.

        Raises:
            ObjectNotFoundError: If nothing is stored under the key.
            StoreIOError: If the read fails.
        """

    @abstractmethod
    def location(self, key: str) -> str:
        """Returns the stable URI of the object stored under a key."""

    @abstractmethod
    async def ensure_bucket_exists(self) -> None:
        """Ensures the backing bucket (or directory) exists."""

    async def put_bytes(self, key: str, data: bytes, content_type: str) -> str:
        """Stores an in-memory payload."""
        return await self.put(key, _single_chunk(data), content_type)
