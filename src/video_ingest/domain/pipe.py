"""Bounded producer/consumer byte pipe between a download and an upload."""

import asyncio
import time
from collections.abc import AsyncIterator

from video_ingest.exceptions import IngestionError, SourceStreamError
from video_ingest.logging import setup_logging

logger = setup_logging()

_EOF = object()


class _Failure:
    def __init__(self, error: BaseException):
        self.error = error


class BytePipe:
    """
    Couples an async chunk producer to a consumer through a bounded queue.

    A background task pulls chunks from ``source`` and puts them on a queue
    holding at most ``max_chunks`` items: the producer suspends while the
    queue is full and the consumer suspends while it is empty. Exiting the
    context cancels the producer, so an abandoned upload also stops the
    download. ``source_seconds`` is set once the source has been drained.

    Usage::

        async with BytePipe(video_id, stream.iter_chunks(), max_chunks=8) as pipe:
            await store.put(key, pipe, "video/mp4")
    """

    def __init__(self, video_id: str, source: AsyncIterator[bytes], max_chunks: int = 8):
        self._video_id = video_id
        self._source = source
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_chunks)
        self._producer: asyncio.Task | None = None
        self._finished = False
        self._started = 0.0
        self.source_seconds: float | None = None

    async def __aenter__(self) -> "BytePipe":
        self._started = time.perf_counter()
        self._producer = asyncio.create_task(self._produce())
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._producer and not self._producer.done():
            self._producer.cancel()
            try:
                await self._producer
            except asyncio.CancelledError:
                pass

    def __aiter__(self) -> "BytePipe":
        return self

    async def __anext__(self) -> bytes:
        chunk = await self.next_chunk()
        if chunk is None:
            raise StopAsyncIteration
        return chunk

    async def next_chunk(self) -> bytes | None:
        """Returns the next chunk, or None once the source is exhausted."""
        if self._finished:
            return None

        item = await self._queue.get()
        if item is _EOF:
            self._finished = True
            return None
        if isinstance(item, _Failure):
            self._finished = True
            if isinstance(item.error, IngestionError):
                raise item.error
            raise SourceStreamError(self._video_id, item.error) from item.error
        return item

    async def _produce(self) -> None:
        try:
            async for chunk in self._source:
                if chunk:
                    await self._queue.put(chunk)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception(
                "Media stream producer failed", extra={"video_id": self._video_id}
            )
            await self._queue.put(_Failure(e))
            return
        finally:
            aclose = getattr(self._source, "aclose", None)
            if aclose is not None:
                await aclose()
        self.source_seconds = time.perf_counter() - self._started
        await self._queue.put(_EOF)
