"""Application configuration loaded from environment variables."""

import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError

from video_ingest.exceptions import ConfigurationError


class S3Config(BaseModel, frozen=True):
    """S3 (or S3-compatible) object store configuration."""

    region: str
    bucket_name: str
    access_key: str
    secret_key: str
    endpoint: str | None = None
    secure: bool = True
    public_base_url: str | None = None
    part_size_mb: int = Field(default=10, ge=5)

    @property
    def resolved_endpoint(self) -> str:
        return self.endpoint or f"s3.{self.region}.amazonaws.com"


class LocalStorageConfig(BaseModel, frozen=True):
    """Filesystem storage configuration."""

    root_dir: Path = Path("storage")


class YouTubeConfig(BaseModel, frozen=True):
    """YouTube data source configuration."""

    api_key: str = ""
    transcript_languages: tuple[str, ...] = ("en",)
    max_height: int | None = None
    http_timeout_seconds: float = 30.0


class PipelineConfig(BaseModel, frozen=True):
    """Streaming pipeline tuning."""

    video_key_layout: Literal["nested", "flat"] = "nested"
    chunk_size_kb: int = Field(default=256, gt=0)
    pipe_max_chunks: int = Field(default=8, gt=0)


class AppConfig(BaseModel, frozen=True):
    """Root application configuration."""

    storage_backend: Literal["s3", "local", "memory"] = "s3"
    s3: S3Config | None = None
    local: LocalStorageConfig = LocalStorageConfig()
    youtube: YouTubeConfig = YouTubeConfig()
    pipeline: PipelineConfig = PipelineConfig()


_ENV_NAMES = {
    ("storage_backend",): "STORAGE_BACKEND",
    ("s3", "part_size_mb"): "S3_PART_SIZE_MB",
    ("youtube", "max_height"): "VIDEO_MAX_HEIGHT",
    ("youtube", "http_timeout_seconds"): "HTTP_TIMEOUT_SECONDS",
    ("pipeline", "video_key_layout"): "VIDEO_KEY_LAYOUT",
    ("pipeline", "chunk_size_kb"): "STREAM_CHUNK_SIZE_KB",
    ("pipeline", "pipe_max_chunks"): "PIPE_MAX_CHUNKS",
}


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _describe(error: dict) -> str:
    loc = tuple(str(part) for part in error["loc"])
    name = _ENV_NAMES.get(loc, ".".join(loc))
    return f"{name}: {error['msg']}"


def load_config(require_api_key: bool = True) -> AppConfig:
    """
    Loads configuration from environment variables.

    Missing required variables and malformed values are collected and
    reported together in one ConfigurationError.

    Args:
        require_api_key: Whether YOUTUBE_API_KEY must be set (metadata fetch).

    Raises:
        ConfigurationError: If required variables are missing or invalid.
    """
    backend = os.getenv("STORAGE_BACKEND", "s3").strip().lower()
    missing: list[str] = []

    s3_settings = None
    if backend == "s3":
        required = {
            "AWS_REGION": os.getenv("AWS_REGION", ""),
            "AWS_S3_BUCKET_NAME": os.getenv("AWS_S3_BUCKET_NAME", ""),
            "AWS_ACCESS_KEY_ID": os.getenv("AWS_ACCESS_KEY_ID", ""),
            "AWS_SECRET_ACCESS_KEY": os.getenv("AWS_SECRET_ACCESS_KEY", ""),
        }
        missing.extend(name for name, value in required.items() if not value)
        if not missing:
            s3_settings = {
                "region": required["AWS_REGION"],
                "bucket_name": required["AWS_S3_BUCKET_NAME"],
                "access_key": required["AWS_ACCESS_KEY_ID"],
                "secret_key": required["AWS_SECRET_ACCESS_KEY"],
                "endpoint": os.getenv("S3_ENDPOINT") or None,
                "secure": _env_flag("S3_SECURE", "true"),
                "public_base_url": os.getenv("S3_PUBLIC_BASE_URL") or None,
                "part_size_mb": os.getenv("S3_PART_SIZE_MB", "10").strip(),
            }

    api_key = os.getenv("YOUTUBE_API_KEY", "")
    if require_api_key and not api_key:
        missing.append("YOUTUBE_API_KEY")

    languages = tuple(
        lang.strip()
        for lang in os.getenv("YOUTUBE_TRANSCRIPT_LANGUAGES", "en").split(",")
        if lang.strip()
    )

    # numeric values are parsed and range-checked by the models
    settings = {
        "storage_backend": backend,
        "s3": s3_settings,
        "local": {"root_dir": os.getenv("LOCAL_STORAGE_DIR", "storage")},
        "youtube": {
            "api_key": api_key,
            "transcript_languages": languages or ("en",),
            "max_height": os.getenv("VIDEO_MAX_HEIGHT", "").strip() or None,
            "http_timeout_seconds": os.getenv("HTTP_TIMEOUT_SECONDS", "30").strip(),
        },
        "pipeline": {
            "video_key_layout": os.getenv("VIDEO_KEY_LAYOUT", "nested").strip(),
            "chunk_size_kb": os.getenv("STREAM_CHUNK_SIZE_KB", "256").strip(),
            "pipe_max_chunks": os.getenv("PIPE_MAX_CHUNKS", "8").strip(),
        },
    }

    try:
        config = AppConfig.model_validate(settings)
    except ValidationError as e:
        raise ConfigurationError(
            missing, [_describe(error) for error in e.errors()]
        ) from e

    if missing:
        raise ConfigurationError(missing)
    return config
