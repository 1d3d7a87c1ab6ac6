"""S3 implementation of the ObjectStore interface, backed by the MinIO SDK."""

import asyncio
import concurrent.futures
from collections.abc import AsyncIterator
from urllib.parse import quote

from minio import Minio
from minio.error import S3Error

from video_ingest.exceptions import (
    IngestionError,
    ObjectNotFoundError,
    StoreIOError,
    UploadError,
)
from video_ingest.logging import setup_logging

from .interfaces import ObjectStore

logger = setup_logging()

_NOT_FOUND_CODES = frozenset({"NoSuchKey", "NoSuchObject", "NotFound", "ResourceNotFound"})
_POLL_SECONDS = 0.5


async def _next_or_none(iterator: AsyncIterator[bytes]) -> bytes | None:
    try:
        return await iterator.__anext__()
    except StopAsyncIteration:
        return None


class _ChunkReader:
    """
    Blocking file-like view over an async chunk iterator.

    ``put_object`` runs in a worker thread and calls ``read``; each read pulls
    the next chunk from the event loop, so the upload only advances as fast as
    the chunks are produced.
    """

    def __init__(
        self,
        object_name: str,
        chunks: AsyncIterator[bytes],
        loop: asyncio.AbstractEventLoop,
    ):
        self._object_name = object_name
        self._iterator = chunks.__aiter__()
        self._loop = loop
        self._buffer = bytearray()
        self._exhausted = False
        self._aborted = False

    def read(self, size: int = -1) -> bytes:
        while not self._exhausted and (size < 0 or len(self._buffer) < size):
            chunk = self._fetch()
            if chunk is None:
                self._exhausted = True
            else:
                self._buffer.extend(chunk)

        if size < 0 or size > len(self._buffer):
            size = len(self._buffer)
        data = bytes(self._buffer[:size])
        del self._buffer[:size]
        return data

    def abort(self) -> None:
        self._aborted = True

    def _fetch(self) -> bytes | None:
        if self._aborted:
            raise UploadError(self._object_name, RuntimeError("upload cancelled"))
        future = asyncio.run_coroutine_threadsafe(
            _next_or_none(self._iterator), self._loop
        )
        while True:
            try:
                return future.result(timeout=_POLL_SECONDS)
            except concurrent.futures.TimeoutError:
                if self._aborted:
                    future.cancel()
                    raise UploadError(
                        self._object_name, RuntimeError("upload cancelled")
                    )


class S3ObjectStore(ObjectStore):
    """Handles object storage operations against S3 using the MinIO client."""

    def __init__(
        self,
        client: Minio,
        bucket_name: str,
        region: str,
        part_size: int = 10 * 1024 * 1024,
        public_base_url: str | None = None,
    ):
        self._client = client
        self._bucket_name = bucket_name
        self._region = region
        self._part_size = part_size
        self._public_base_url = public_base_url.rstrip("/") if public_base_url else None

    async def exists(self, key: str) -> bool:
        try:
            await asyncio.to_thread(
                self._client.stat_object,
                bucket_name=self._bucket_name,
                object_name=key,
            )
            return True
        except S3Error as e:
            if e.code in _NOT_FOUND_CODES:
                return False
            logger.exception(
                "S3 existence check failed",
                extra={"bucket_name": self._bucket_name, "object_name": key},
            )
            raise StoreIOError(key, "stat", e) from e
        except Exception as e:
            logger.exception(
                "S3 existence check failed",
                extra={"bucket_name": self._bucket_name, "object_name": key},
            )
            raise StoreIOError(key, "stat", e) from e

    async def put(
        self, key: str, chunks: AsyncIterator[bytes], content_type: str
    ) -> str:
        """
        Streams chunks into a multipart upload from a worker thread.

        Cancelling the caller aborts the reader, which fails the next read and
        makes the SDK abort the multipart upload. Once the reader has returned
        EOF no further reads happen: a cancellation that arrives while the
        final part or the completion request is in flight cannot stop it, and
        the object is committed even though the caller sees CancelledError.
        """
        reader = _ChunkReader(key, chunks, asyncio.get_running_loop())
        try:
            await asyncio.to_thread(
                self._client.put_object,
                bucket_name=self._bucket_name,
                object_name=key,
                data=reader,
                length=-1,
                part_size=self._part_size,
                content_type=content_type,
            )
        except asyncio.CancelledError:
            reader.abort()
            logger.warning(
                "S3 upload cancelled",
                extra={"bucket_name": self._bucket_name, "object_name": key},
            )
            raise
        except IngestionError:
            logger.exception(
                "S3 upload aborted",
                extra={"bucket_name": self._bucket_name, "object_name": key},
            )
            raise
        except Exception as e:
            logger.exception(
                "S3 upload failed",
                extra={"bucket_name": self._bucket_name, "object_name": key},
            )
            raise UploadError(key, e) from e

        logger.info(
            "File uploaded to S3",
            extra={
                "bucket_name": self._bucket_name,
                "object_name": key,
                "content_type": content_type,
            },
        )
        return self.location(key)

    async def read(self, key: str) -> bytes:
        try:
            return await asyncio.to_thread(self._download, key)
        except S3Error as e:
            if e.code in _NOT_FOUND_CODES:
                raise ObjectNotFoundError(key) from e
            logger.exception(
                "S3 download failed",
                extra={"bucket_name": self._bucket_name, "object_name": key},
            )
            raise StoreIOError(key, "read", e) from e
        except Exception as e:
            logger.exception(
                "S3 download failed",
                extra={"bucket_name": self._bucket_name, "object_name": key},
            )
            raise StoreIOError(key, "read", e) from e

    def location(self, key: str) -> str:
        if self._public_base_url:
            return f"{self._public_base_url}/{quote(key)}"
        return f"https://{self._bucket_name}.s3.{self._region}.amazonaws.com/{quote(key)}"

    async def ensure_bucket_exists(self) -> None:
        await asyncio.to_thread(self._ensure_bucket_exists)

    def _download(self, key: str) -> bytes:
        response = self._client.get_object(
            bucket_name=self._bucket_name, object_name=key
        )
        try:
            data = response.data
            logger.info(
                "File downloaded from S3",
                extra={"bucket_name": self._bucket_name, "object_name": key},
            )
            return data
        finally:
            response.close()
            response.release_conn()

    def _ensure_bucket_exists(self) -> None:
        if not self._client.bucket_exists(bucket_name=self._bucket_name):
            self._client.make_bucket(bucket_name=self._bucket_name)
            logger.info("Bucket created", extra={"bucket_name": self._bucket_name})
        else:
            logger.info(
                "Bucket already exists", extra={"bucket_name": self._bucket_name}
            )
