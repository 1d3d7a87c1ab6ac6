"""Request and response models for the video-ingest API."""

from pydantic import BaseModel, Field

from video_ingest.domain import IngestionOutcome, TranscriptEntry, VideoMetadataRecord


class IngestRequest(BaseModel):
    """A request to ingest one YouTube video."""

    url: str = Field(..., min_length=1, description="YouTube URL or video id")
    fetch_metadata: bool = True
    fetch_transcript: bool = True


class IngestResponse(BaseModel):
    """Result returned to the presentation layer."""

    success: bool
    file_path: str | None = Field(default=None, serialization_alias="filePath")
    error: str | None = None
    error_kind: str | None = Field(default=None, serialization_alias="errorKind")
    warnings: list[str] = []

    @classmethod
    def from_outcome(cls, outcome: IngestionOutcome) -> "IngestResponse":
        return cls(
            success=outcome.success,
            file_path=outcome.location,
            error=outcome.message,
            error_kind=outcome.error.value if outcome.error else None,
            warnings=list(outcome.warnings),
        )


class MetadataResponse(VideoMetadataRecord):
    """Stored metadata document."""


class TranscriptResponse(BaseModel):
    """Stored transcript document."""

    video_id: str
    entries: list[TranscriptEntry]
