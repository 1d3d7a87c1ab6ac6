"""In-memory implementation of the ObjectStore interface."""

from collections.abc import AsyncIterator

from video_ingest.exceptions import IngestionError, ObjectNotFoundError, UploadError
from video_ingest.logging import setup_logging

from .interfaces import ObjectStore

logger = setup_logging()


class StoredObject:
    def __init__(self, data: bytes, content_type: str):
        self.data = data
        self.content_type = content_type


class InMemoryObjectStore(ObjectStore):
    """Keeps committed objects in a dict; uploads are staged until complete."""

    def __init__(self, bucket_name: str = "videos"):
        self._bucket_name = bucket_name
        self._objects: dict[str, StoredObject] = {}

    async def exists(self, key: str) -> bool:
        return key in self._objects

    async def put(
        self, key: str, chunks: AsyncIterator[bytes], content_type: str
    ) -> str:
        staged = bytearray()
        try:
            async for chunk in chunks:
                staged.extend(chunk)
        except IngestionError:
            raise
        except Exception as e:
            raise UploadError(key, e) from e

        self._objects[key] = StoredObject(bytes(staged), content_type)
        logger.info(
            "Object stored in memory",
            extra={"object_name": key, "size": len(staged)},
        )
        return self.location(key)

    async def read(self, key: str) -> bytes:
        stored = self._objects.get(key)
        if stored is None:
            raise ObjectNotFoundError(key)
        return stored.data

    def location(self, key: str) -> str:
        return f"memory://{self._bucket_name}/{key}"

    async def ensure_bucket_exists(self) -> None:
        return None

    def content_type(self, key: str) -> str | None:
        stored = self._objects.get(key)
        return stored.content_type if stored else None

    def keys(self) -> list[str]:
        return sorted(self._objects)
