"""Payload normalization applied before auxiliary artifacts are stored."""

import html
import re

from .models import TranscriptEntry, VideoMetadataRecord

_ISO_DURATION = re.compile(
    r"^P(?:(?P<days>\d+)D)?"
    r"(?:T(?:(?P<hours>\d+)H)?(?:(?P<minutes>\d+)M)?(?:(?P<seconds>\d+)(?:\.\d+)?S)?)?$"
)
_LINE_BREAKS = re.compile(r"\s*[\r\n]+\s*")


def format_iso8601_duration(value: str) -> str:
    """
    Converts an ISO-8601 duration (``PT1H2M3S``) into ``MM:SS``.

    Hours and days are folded into the minutes field, so ``PT1H2M3S`` becomes
    ``62:03`` and ``PT45S`` becomes ``00:45``.

    Raises:
        ValueError: If the value is not an ISO-8601 duration.
    """
    match = _ISO_DURATION.match((value or "").strip())
    if not match or value.strip() in ("P", "PT"):
        raise ValueError(f"Invalid ISO-8601 duration: {value!r}")

    parts = {name: int(number or 0) for name, number in match.groupdict().items()}
    minutes = parts["days"] * 24 * 60 + parts["hours"] * 60 + parts["minutes"]
    return f"{minutes:02d}:{parts['seconds']:02d}"


def clean_transcript_text(text: str) -> str:
    """Decodes HTML entities and collapses line breaks into single spaces."""
    return _LINE_BREAKS.sub(" ", html.unescape(text)).strip()


def normalize_transcript(entries: list[TranscriptEntry]) -> list[TranscriptEntry]:
    """Cleans every entry's text and orders entries chronologically."""
    cleaned = [
        entry.model_copy(update={"text": clean_transcript_text(entry.text)})
        for entry in entries
    ]
    return sorted(cleaned, key=lambda entry: entry.offset)


def normalize_metadata(record: VideoMetadataRecord) -> VideoMetadataRecord:
    """Rewrites the raw ISO-8601 duration as ``MM:SS``."""
    return record.model_copy(
        update={"duration": format_iso8601_duration(record.duration)}
    )
