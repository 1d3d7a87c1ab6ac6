"""Custom exceptions for the video-ingest service."""

from enum import Enum


class ErrorKind(str, Enum):
    """Failure categories surfaced to callers of the ingestion pipeline."""

    INVALID_IDENTIFIER = "InvalidIdentifier"
    NOT_FOUND = "NotFound"
    NO_TRANSCRIPT_AVAILABLE = "NoTranscriptAvailable"
    NO_STREAM_AVAILABLE = "NoStreamAvailable"
    FETCH_ERROR = "FetchError"
    STORE_IO_ERROR = "StoreIOError"
    OBJECT_NOT_FOUND = "ObjectNotFound"
    SOURCE_STREAM_ERROR = "SourceStreamError"
    UPLOAD_ERROR = "UploadError"
    UNEXPECTED = "Unexpected"


class IngestionError(Exception):
    """Base class for every failure the ingestion pipeline knows how to report."""

    kind: ErrorKind = ErrorKind.UNEXPECTED

    def __init__(self, message: str, cause: Exception | None = None):
        self.cause = cause
        super().__init__(message)


class InvalidIdentifierError(IngestionError):
    """Raised when a value is not a well-formed YouTube video identifier."""

    kind = ErrorKind.INVALID_IDENTIFIER

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"'{value}' is not a valid YouTube video identifier")


class NotFoundError(IngestionError):
    """Raised when the upstream provider does not know the video."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, video_id: str, cause: Exception | None = None):
        self.video_id = video_id
        super().__init__(f"Video '{video_id}' was not found", cause)


class NoTranscriptAvailableError(IngestionError):
    """Raised when the provider has no timed text for a video."""

    kind = ErrorKind.NO_TRANSCRIPT_AVAILABLE

    def __init__(self, video_id: str, cause: Exception | None = None):
        self.video_id = video_id
        super().__init__(f"No transcript available for video '{video_id}'", cause)


class NoStreamAvailableError(IngestionError):
    """Raised when a video has no combined audio+video representation."""

    kind = ErrorKind.NO_STREAM_AVAILABLE

    def __init__(self, video_id: str):
        self.video_id = video_id
        super().__init__(f"No combined audio+video stream available for '{video_id}'")


class FetchError(IngestionError):
    """Raised when an upstream metadata or transcript request fails."""

    kind = ErrorKind.FETCH_ERROR

    def __init__(self, video_id: str, artifact: str, cause: Exception | None = None):
        self.video_id = video_id
        self.artifact = artifact
        super().__init__(f"Failed to fetch {artifact} for video '{video_id}'", cause)


class StoreIOError(IngestionError):
    """Raised when an existence check or read against the store fails."""

    kind = ErrorKind.STORE_IO_ERROR

    def __init__(self, object_name: str, operation: str, cause: Exception | None = None):
        self.object_name = object_name
        self.operation = operation
        super().__init__(f"Storage {operation} failed for '{object_name}'", cause)


class ObjectNotFoundError(IngestionError):
    """Raised when reading an object that was never written."""

    kind = ErrorKind.OBJECT_NOT_FOUND

    def __init__(self, object_name: str):
        self.object_name = object_name
        super().__init__(f"Object '{object_name}' does not exist")


class SourceStreamError(IngestionError):
    """Raised when the remote media source cannot be opened or read."""

    kind = ErrorKind.SOURCE_STREAM_ERROR

    def __init__(self, video_id: str, cause: Exception | None = None):
        self.video_id = video_id
        detail = f": {cause}" if cause else ""
        super().__init__(f"Failed to read media stream for '{video_id}'{detail}", cause)


class UploadError(IngestionError):
    """Raised when writing an object to storage fails."""

    kind = ErrorKind.UPLOAD_ERROR

    def __init__(self, object_name: str, cause: Exception | None = None):
        self.object_name = object_name
        super().__init__(f"Failed to upload '{object_name}' to storage", cause)


class ConfigurationError(Exception):
    """Raised when required environment configuration is missing or invalid."""

    def __init__(self, missing: list[str], invalid: list[str] | None = None):
        self.missing = missing
        self.invalid = invalid or []
        problems = []
        if missing:
            problems.append(f"Missing required configuration: {', '.join(sorted(missing))}")
        if self.invalid:
            problems.append(f"Invalid configuration: {'; '.join(self.invalid)}")
        super().__init__(". ".join(problems))
