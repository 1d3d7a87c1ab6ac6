"""YouTube implementation of the MediaSource interface (yt-dlp + httpx)."""

import asyncio
from collections.abc import AsyncIterator
from typing import Any

import httpx
import yt_dlp
from yt_dlp.utils import DownloadError

from video_ingest.exceptions import NoStreamAvailableError, SourceStreamError
from video_ingest.logging import setup_logging

from .interfaces import MediaSource, MediaStream

logger = setup_logging()

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"


def _is_combined(fmt: dict[str, Any]) -> bool:
    """True for direct HTTP formats that carry both audio and video."""
    return (
        fmt.get("vcodec") not in (None, "none")
        and fmt.get("acodec") not in (None, "none")
        and bool(fmt.get("url"))
        and fmt.get("protocol", "https") in ("http", "https")
    )


def _rank(fmt: dict[str, Any]) -> tuple:
    return (
        fmt.get("height") or 0,
        fmt.get("tbr") or 0,
        fmt.get("filesize") or fmt.get("filesize_approx") or 0,
        str(fmt.get("format_id", "")),
    )


def select_format(
    formats: list[dict[str, Any]], max_height: int | None = None
) -> dict[str, Any] | None:
    """
    Picks the best combined audio+video format.

    MP4 formats are preferred when any exist. With ``max_height`` the best
    format at or below that height wins; if none fits, the highest available
    format is used instead. Ties are broken by format id so the choice is
    deterministic. Returns None when no combined format exists.
    """
    combined = [fmt for fmt in formats if _is_combined(fmt)]
    if not combined:
        return None

    mp4 = [fmt for fmt in combined if fmt.get("ext") == "mp4"]
    candidates = mp4 or combined

    if max_height is not None:
        fitting = [fmt for fmt in candidates if (fmt.get("height") or 0) <= max_height]
        if fitting:
            return max(fitting, key=_rank)

    return max(candidates, key=_rank)


class YouTubeMediaSource(MediaSource):
    """Resolves formats with yt-dlp and streams the chosen one over httpx."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        chunk_size: int = 256 * 1024,
        ydl_options: dict[str, Any] | None = None,
    ):
        self._http = http_client
        self._chunk_size = chunk_size
        self._ydl_options = ydl_options or {}

    async def open(self, video_id: str, max_height: int | None = None) -> MediaStream:
        info = await asyncio.to_thread(self._extract_info, video_id)

        fmt = select_format(info.get("formats") or [], max_height)
        if fmt is None:
            logger.warning("No combined stream available", extra={"video_id": video_id})
            raise NoStreamAvailableError(video_id)

        request = self._http.build_request(
            "GET", fmt["url"], headers=fmt.get("http_headers") or {}
        )
        try:
            response = await self._http.send(request, stream=True)
        except httpx.HTTPError as e:
            logger.exception("Media request failed", extra={"video_id": video_id})
            raise SourceStreamError(video_id, e) from e

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            await response.aclose()
            logger.exception(
                "Media request rejected",
                extra={"video_id": video_id, "status_code": response.status_code},
            )
            raise SourceStreamError(video_id, e) from e

        total_bytes = (
            fmt.get("filesize")
            or fmt.get("filesize_approx")
            or int(response.headers.get("content-length", 0))
            or None
        )

        logger.info(
            "Media stream opened",
            extra={
                "video_id": video_id,
                "format_id": fmt.get("format_id"),
                "height": fmt.get("height"),
                "ext": fmt.get("ext"),
                "total_bytes": total_bytes,
            },
        )

        return MediaStream(
            video_id=video_id,
            chunks=self._iter_response(video_id, response),
            total_bytes=total_bytes,
            close=response.aclose,
        )

    async def _iter_response(
        self, video_id: str, response: httpx.Response
    ) -> AsyncIterator[bytes]:
        try:
            async for chunk in response.aiter_bytes(self._chunk_size):
                yield chunk
        except httpx.HTTPError as e:
            raise SourceStreamError(video_id, e) from e

    def _extract_info(self, video_id: str) -> dict[str, Any]:
        options = {
            "quiet": True,
            "no_warnings": True,
            "noplaylist": True,
            "skip_download": True,
            "ignore_no_formats_error": True,
            **self._ydl_options,
        }
        try:
            with yt_dlp.YoutubeDL(options) as ydl:
                info = ydl.extract_info(WATCH_URL.format(video_id=video_id), download=False)
        except DownloadError as e:
            logger.exception("yt-dlp extraction failed", extra={"video_id": video_id})
            raise SourceStreamError(video_id, e) from e

        if not info:
            raise SourceStreamError(video_id, RuntimeError("yt-dlp returned no info"))
        return info
