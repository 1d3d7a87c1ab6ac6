"""YouTube video identifier parsing."""

import re

from video_ingest.exceptions import InvalidIdentifierError

VIDEO_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{11}$")

_URL_PATTERNS = [
    re.compile(
        r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/"
        r"|youtube\.com/v/|youtube\.com/watch\?.*&v=)([^#&?/]*)"
    ),
    re.compile(r"youtube\.com/shorts/([^#&?/]*)"),
]


def is_valid_video_id(value: str) -> bool:
    return bool(value) and VIDEO_ID_PATTERN.match(value) is not None


def parse_video_id(value: str) -> str:
    """
    Validates a raw identifier.

    Raises:
        InvalidIdentifierError: If the value is not an 11-character id.
    """
    candidate = (value or "").strip()
    if not is_valid_video_id(candidate):
        raise InvalidIdentifierError(value)
    return candidate


def extract_video_id(url: str) -> str | None:
    """
    Extracts the video id from the common YouTube URL shapes.

    Accepts watch, short-link, embed, /v/ and shorts URLs as well as a bare
    identifier. Returns None when no 11-character id can be found.
    """
    if not url:
        return None

    url = url.strip()
    if is_valid_video_id(url):
        return url

    for pattern in _URL_PATTERNS:
        match = pattern.search(url)
        if match and is_valid_video_id(match.group(1)):
            return match.group(1)

    return None
