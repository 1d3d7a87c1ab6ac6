"""Dependency injection configuration for the video-ingest service."""

from functools import lru_cache

import httpx
from minio import Minio

from video_ingest.config import AppConfig, load_config
from video_ingest.handlers import IngestionOrchestrator
from video_ingest.infrastructure import (
    InMemoryObjectStore,
    LocalObjectStore,
    S3ObjectStore,
    YouTubeArtifactFetcher,
    YouTubeMediaSource,
)
from video_ingest.infrastructure.interfaces import ObjectStore
from video_ingest.logging import setup_logging

logger = setup_logging()


def build_storage(config: AppConfig) -> ObjectStore:
    """Creates the object store selected by STORAGE_BACKEND."""
    if config.storage_backend == "memory":
        return InMemoryObjectStore()
    if config.storage_backend == "local":
        return LocalObjectStore(config.local.root_dir)

    s3 = config.s3
    client = Minio(
        endpoint=s3.resolved_endpoint,
        access_key=s3.access_key,
        secret_key=s3.secret_key,
        region=s3.region,
        secure=s3.secure,
    )

    public_base_url = s3.public_base_url
    if public_base_url is None and s3.endpoint:
        scheme = "https" if s3.secure else "http"
        public_base_url = f"{scheme}://{s3.endpoint}/{s3.bucket_name}"

    logger.info(
        "S3 storage configured",
        extra={"endpoint": s3.resolved_endpoint, "bucket_name": s3.bucket_name},
    )
    return S3ObjectStore(
        client,
        bucket_name=s3.bucket_name,
        region=s3.region,
        part_size=s3.part_size_mb * 1024 * 1024,
        public_base_url=public_base_url,
    )


def build_http_client(config: AppConfig) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=config.youtube.http_timeout_seconds, follow_redirects=True
    )


def build_orchestrator(
    config: AppConfig, store: ObjectStore, http_client: httpx.AsyncClient
) -> IngestionOrchestrator:
    """Wires the orchestrator with YouTube adapters around a given store."""
    return IngestionOrchestrator(
        store=store,
        media_source=YouTubeMediaSource(
            http_client, chunk_size=config.pipeline.chunk_size_kb * 1024
        ),
        fetcher=YouTubeArtifactFetcher(
            http_client,
            api_key=config.youtube.api_key,
            languages=config.youtube.transcript_languages,
        ),
        video_key_layout=config.pipeline.video_key_layout,
        max_height=config.youtube.max_height,
        pipe_max_chunks=config.pipeline.pipe_max_chunks,
    )


@lru_cache
def get_config() -> AppConfig:
    """Returns the process-wide configuration."""
    return load_config()


@lru_cache
def get_storage() -> ObjectStore:
    """Returns the configured object store."""
    return build_storage(get_config())


@lru_cache
def get_http_client() -> httpx.AsyncClient:
    """Returns the shared HTTP client."""
    return build_http_client(get_config())


@lru_cache
def get_orchestrator() -> IngestionOrchestrator:
    """Returns the configured ingestion orchestrator."""
    return build_orchestrator(get_config(), get_storage(), get_http_client())


async def close_resources() -> None:
    """Closes the shared HTTP client if one was created."""
    if get_http_client.cache_info().currsize:
        await get_http_client().aclose()
        get_http_client.cache_clear()
    get_orchestrator.cache_clear()
