"""Domain layer exports."""

from .models import (
    ArtifactKind,
    IngestionOptions,
    IngestionOutcome,
    TranscriptEntry,
    VideoMetadataRecord,
    storage_key,
)
from .normalization import (
    clean_transcript_text,
    format_iso8601_duration,
    normalize_metadata,
    normalize_transcript,
)
from .pipe import BytePipe
from .progress import ProgressTracker
from .timing import TimingLedger, stopwatch
from .video_id import extract_video_id, is_valid_video_id, parse_video_id

__all__ = [
    "ArtifactKind",
    "BytePipe",
    "IngestionOptions",
    "IngestionOutcome",
    "ProgressTracker",
    "TimingLedger",
    "TranscriptEntry",
    "VideoMetadataRecord",
    "clean_transcript_text",
    "extract_video_id",
    "format_iso8601_duration",
    "is_valid_video_id",
    "normalize_metadata",
    "normalize_transcript",
    "parse_video_id",
    "stopwatch",
    "storage_key",
]
