"""Infrastructure layer exports."""

from .local_storage import LocalObjectStore
from .memory_storage import InMemoryObjectStore
from .s3_storage import S3ObjectStore
from .youtube_artifacts import YouTubeArtifactFetcher
from .youtube_media_source import YouTubeMediaSource, select_format

__all__ = [
    "InMemoryObjectStore",
    "LocalObjectStore",
    "S3ObjectStore",
    "YouTubeArtifactFetcher",
    "YouTubeMediaSource",
    "select_format",
]
