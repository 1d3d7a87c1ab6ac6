"""Domain models for video ingestion."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from video_ingest.exceptions import ErrorKind, IngestionError

VideoKeyLayout = Literal["nested", "flat"]


class ArtifactKind(str, Enum):
    """Kinds of objects stored per video."""

    VIDEO = "video"
    METADATA = "metadata"
    TRANSCRIPT = "transcript"

    @property
    def content_type(self) -> str:
        return "video/mp4" if self is ArtifactKind.VIDEO else "application/json"


def storage_key(
    video_id: str, kind: ArtifactKind, layout: VideoKeyLayout = "nested"
) -> str:
    """
    Derives the object key for one artifact of a video.

    The mapping is pure: the same (video_id, kind, layout) always produces the
    same key, which is what makes an existence check a valid dedup test.

    Layout:
        videos/<id>/<id>.mp4          (video, nested)
        videos/full-length/<id>.mp4   (video, flat)
        videos/<id>/metadata.json
        videos/<id>/transcript.json
    """
    if kind is ArtifactKind.VIDEO:
        if layout == "flat":
            return f"videos/full-length/{video_id}.mp4"
        return f"videos/{video_id}/{video_id}.mp4"
    return f"videos/{video_id}/{kind.value}.json"


class TranscriptEntry(BaseModel, frozen=True):
    """A single timed-text segment."""

    text: str
    offset: float = Field(ge=0)
    duration: float = Field(ge=0)


class VideoMetadataRecord(BaseModel, frozen=True):
    """Snapshot of a video's descriptive metadata."""

    title: str
    description: str = ""
    caption_flag: bool = False
    duration: str
    thumbnail_url: str | None = None


class IngestionOptions(BaseModel, frozen=True):
    """Which auxiliary artifacts to fetch alongside the video."""

    fetch_metadata: bool = True
    fetch_transcript: bool = True


class IngestionOutcome(BaseModel, frozen=True):
    """
    Terminal result of one ingestion run.

    Exactly one of ``location`` (success) or ``error`` (failure) is set.
    """

    success: bool
    location: str | None = None
    error: ErrorKind | None = None
    message: str | None = None
    warnings: tuple[str, ...] = ()

    @model_validator(mode="after")
    def _check_exclusive(self) -> "IngestionOutcome":
        if self.success and (self.location is None or self.error is not None):
            raise ValueError("A successful outcome needs a location and no error")
        if not self.success and (self.error is None or self.location is not None):
            raise ValueError("A failed outcome needs an error and no location")
        return self

    @classmethod
    def succeeded(
        cls, location: str, warnings: tuple[str, ...] = ()
    ) -> "IngestionOutcome":
        return cls(success=True, location=location, warnings=warnings)

    @classmethod
    def failed(
        cls, error: IngestionError, warnings: tuple[str, ...] = ()
    ) -> "IngestionOutcome":
        return cls(
            success=False, error=error.kind, message=str(error), warnings=warnings
        )
