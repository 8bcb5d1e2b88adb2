"""Positional parsers for the date layouts found in sidecar and embedded metadata."""

from __future__ import annotations

import re
from datetime import datetime, tzinfo

from pydantic import ValidationError

from .models import TimestampCandidate, TimestampSource

# `YYYY-MM-DDTHH:MM:SS`; anything after the first 19 characters is ignored.
_ISO_PREFIX = re.compile(r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})$")
# `YYYY:MM:DD HH:MM:SS`, as written by cameras and reported by exiftool.
_EXIF_PREFIX = re.compile(r"^(\d{4}):(\d{2}):(\d{2}) (\d{2}):(\d{2}):(\d{2})$")


class TimestampParseError(ValueError):
    """Raised when a raw value does not describe a valid calendar timestamp."""


def _from_match(pattern: re.Pattern[str], raw: str, source: TimestampSource) -> TimestampCandidate:
    text = raw.strip()
    match = pattern.match(text[:19])
    if match is None:
        raise TimestampParseError(f"unrecognized timestamp layout: {raw!r}")
    year, month, day, hour, minute, second = (int(group) for group in match.groups())
    try:
        return TimestampCandidate(
            year=year,
            month=month,
            day=day,
            hour=hour,
            minute=minute,
            second=second,
            source=source,
        )
    except ValidationError as exc:
        raise TimestampParseError(f"out-of-range timestamp {raw!r}") from exc


def parse_iso_prefix(raw: str, source: TimestampSource) -> TimestampCandidate:
    """Parse the leading `YYYY-MM-DDTHH:MM:SS` of an ISO-8601-like string."""
    return _from_match(_ISO_PREFIX, raw, source)


def parse_exif_datetime(raw: str, source: TimestampSource) -> TimestampCandidate:
    """Parse the leading `YYYY:MM:DD HH:MM:SS` of an EXIF/QuickTime date string.

    Fractional seconds and timezone suffixes (`.123`, `+02:00`, `Z`) are dropped.
    """
    return _from_match(_EXIF_PREFIX, raw, source)


def parse_epoch(raw: object, source: TimestampSource, tz: tzinfo | None = None) -> TimestampCandidate:
    """Convert epoch seconds (decimal string or integer) to calendar fields.

    Args:
        raw: Epoch seconds, typically a decimal string such as `"1609459200"`.
        source: Source tag to attach to the candidate.
        tz: Zone used for the conversion; local time when None.

    Returns:
        TimestampCandidate: Wall-clock fields of the instant in the chosen zone.

    Raises:
        TimestampParseError: If the value is not an integer epoch or cannot be represented.
    """
    if isinstance(raw, bool):
        raise TimestampParseError(f"epoch value must be numeric, got {raw!r}")
    if isinstance(raw, int):
        seconds = raw
    elif isinstance(raw, str) and re.fullmatch(r"\s*-?\d+\s*", raw):
        seconds = int(raw)
    else:
        raise TimestampParseError(f"epoch value must be a decimal string, got {raw!r}")

    try:
        moment = datetime.fromtimestamp(seconds, tz=tz)
    except (OverflowError, OSError, ValueError) as exc:
        raise TimestampParseError(f"epoch value {seconds} cannot be represented") from exc
    try:
        return TimestampCandidate.from_datetime(moment, source)
    except ValidationError as exc:
        raise TimestampParseError(f"epoch value {seconds} is out of range") from exc


__all__ = ["TimestampParseError", "parse_iso_prefix", "parse_exif_datetime", "parse_epoch"]
