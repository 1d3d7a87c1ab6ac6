"""
Command line entry point.

Ingests a single video and prints the result as JSON:

    video-ingest https://youtu.be/dQw4w9WgXcQ --no-transcript
"""

import argparse
import asyncio
import sys

from video_ingest.config import load_config
from video_ingest.exceptions import ConfigurationError
from video_ingest.dependencies import build_http_client, build_orchestrator, build_storage
from video_ingest.domain import IngestionOptions, extract_video_id
from video_ingest.logging import setup_logging
from video_ingest.response_models import IngestResponse

logger = setup_logging()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="video-ingest",
        description="Store a YouTube video (plus metadata and transcript) in object storage.",
    )
    parser.add_argument("url", help="YouTube URL or 11-character video id")
    parser.add_argument(
        "--no-metadata", action="store_true", help="Skip the metadata document"
    )
    parser.add_argument(
        "--no-transcript", action="store_true", help="Skip the transcript document"
    )
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> IngestResponse:
    video_id = extract_video_id(args.url)
    if video_id is None:
        return IngestResponse(
            success=False, error="Invalid YouTube URL", error_kind="InvalidIdentifier"
        )

    config = load_config(require_api_key=not args.no_metadata)
    store = build_storage(config)
    await store.ensure_bucket_exists()

    async with build_http_client(config) as http_client:
        orchestrator = build_orchestrator(config, store, http_client)
        outcome = await orchestrator.ingest(
            video_id,
            IngestionOptions(
                fetch_metadata=not args.no_metadata,
                fetch_transcript=not args.no_transcript,
            ),
        )
    return IngestResponse.from_outcome(outcome)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        response = asyncio.run(run(args))
    except ConfigurationError as e:
        logger.error(
            "Invalid configuration", extra={"missing": e.missing, "invalid": e.invalid}
        )
        print(str(e), file=sys.stderr)
        return 1
    print(response.model_dump_json(by_alias=True, exclude_none=True))
    return 0 if response.success else 1


if __name__ == "__main__":
    sys.exit(main())
