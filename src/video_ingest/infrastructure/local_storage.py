"""Filesystem implementation of the ObjectStore interface."""

import asyncio
import os
import uuid
from collections.abc import AsyncIterator
from pathlib import Path

from video_ingest.exceptions import (
    IngestionError,
    ObjectNotFoundError,
    StoreIOError,
    UploadError,
)
from video_ingest.logging import setup_logging

from .interfaces import ObjectStore

logger = setup_logging()


class LocalObjectStore(ObjectStore):
    """
    Stores objects as files under a root directory.

    Uploads are written to a hidden ``.partial`` sibling and renamed into
    place once complete, so a half-written file is never seen under its key.
    """

    def __init__(self, root_dir: Path):
        self._root = Path(root_dir).resolve()

    async def exists(self, key: str) -> bool:
        try:
            return await asyncio.to_thread(self._path(key).is_file)
        except OSError as e:
            logger.exception("Local existence check failed", extra={"object_name": key})
            raise StoreIOError(key, "stat", e) from e

    async def put(
        self, key: str, chunks: AsyncIterator[bytes], content_type: str
    ) -> str:
        target = self._path(key)
        partial = target.with_name(f".{target.name}.{uuid.uuid4().hex}.partial")
        try:
            await asyncio.to_thread(target.parent.mkdir, parents=True, exist_ok=True)
            handle = await asyncio.to_thread(open, partial, "wb")
            try:
                async for chunk in chunks:
                    await asyncio.to_thread(handle.write, chunk)
            finally:
                await asyncio.to_thread(handle.close)
            await asyncio.to_thread(os.replace, partial, target)
        except (IngestionError, asyncio.CancelledError):
            partial.unlink(missing_ok=True)
            raise
        except Exception as e:
            partial.unlink(missing_ok=True)
            logger.exception("Local upload failed", extra={"object_name": key})
            raise UploadError(key, e) from e

        logger.info(
            "File stored locally",
            extra={"object_name": key, "path": str(target), "content_type": content_type},
        )
        return self.location(key)

    async def read(self, key: str) -> bytes:
        path = self._path(key)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError as e:
            raise ObjectNotFoundError(key) from e
        except OSError as e:
            logger.exception("Local read failed", extra={"object_name": key})
            raise StoreIOError(key, "read", e) from e

    def location(self, key: str) -> str:
        return self._path(key).as_uri()

    async def ensure_bucket_exists(self) -> None:
        await asyncio.to_thread(self._root.mkdir, parents=True, exist_ok=True)
        logger.info("Storage directory ready", extra={"path": str(self._root)})

    def _path(self, key: str) -> Path:
        path = (self._root / key).resolve()
        if not path.is_relative_to(self._root):
            raise StoreIOError(key, "resolve", ValueError("key escapes storage root"))
        return path
