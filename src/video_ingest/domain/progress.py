"""Download progress tracking."""

from collections.abc import Callable

from video_ingest.logging import setup_logging

logger = setup_logging()

ProgressCallback = Callable[[int, int | None, int | None], None]

LOG_STEP_PERCENT = 10


class ProgressTracker:
    """
    Tracks bytes transferred for one media stream.

    The percentage never decreases and is capped at 100. A log line is
    emitted each time it crosses another 10-point threshold. Listeners are
    called with (bytes_transferred, total_bytes, percentage) and have no
    influence on the transfer itself.
    """

    def __init__(self, video_id: str, total_bytes: int | None):
        self.video_id = video_id
        self.total_bytes = total_bytes if total_bytes and total_bytes > 0 else None
        self.bytes_transferred = 0
        self._percentage: int | None = 0 if self.total_bytes else None
        self._last_logged = 0
        self._listeners: list[ProgressCallback] = []

    @property
    def percentage(self) -> int | None:
        return self._percentage

    def subscribe(self, callback: ProgressCallback) -> None:
        self._listeners.append(callback)

    def advance(self, byte_count: int) -> None:
        self.bytes_transferred += byte_count

        if self.total_bytes:
            current = min(100, self.bytes_transferred * 100 // self.total_bytes)
            self._percentage = max(self._percentage or 0, current)
            if self._percentage >= self._last_logged + LOG_STEP_PERCENT:
                self._last_logged = (
                    self._percentage // LOG_STEP_PERCENT * LOG_STEP_PERCENT
                )
                logger.info(
                    "Download progress",
                    extra={
                        "video_id": self.video_id,
                        "percentage": self._last_logged,
                        "bytes_transferred": self.bytes_transferred,
                        "total_bytes": self.total_bytes,
                    },
                )

        for listener in self._listeners:
            try:
                listener(self.bytes_transferred, self.total_bytes, self._percentage)
            except Exception:
                logger.exception(
                    "Progress listener failed",
                    extra={
                        "video_id": self.video_id,
                        "bytes_transferred": self.bytes_transferred,
                    },
                )
