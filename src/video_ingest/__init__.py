from video_ingest.config import AppConfig, load_config
from video_ingest.exceptions import (
    ConfigurationError,
    ErrorKind,
    FetchError,
    IngestionError,
    InvalidIdentifierError,
    NoStreamAvailableError,
    NoTranscriptAvailableError,
    NotFoundError,
    ObjectNotFoundError,
    SourceStreamError,
    StoreIOError,
    UploadError,
)
from video_ingest.logging import setup_logging

__all__ = [
    "setup_logging",
    "AppConfig",
    "load_config",
    "ConfigurationError",
    "ErrorKind",
    "FetchError",
    "IngestionError",
    "InvalidIdentifierError",
    "NoStreamAvailableError",
    "NoTranscriptAvailableError",
    "NotFoundError",
    "ObjectNotFoundError",
    "SourceStreamError",
    "StoreIOError",
    "UploadError",
]
