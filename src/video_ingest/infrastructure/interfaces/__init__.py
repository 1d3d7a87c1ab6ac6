"""Infrastructure interface exports."""

from .artifact_fetcher import ArtifactFetcher
from .media_source import MediaSource, MediaStream
from .object_store import ObjectStore

__all__ = ["ArtifactFetcher", "MediaSource", "MediaStream", "ObjectStore"]
