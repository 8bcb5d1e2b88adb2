"""Timestamps from metadata embedded in the media file, read through ExifTool."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional, Sequence

import exiftool
from exiftool.exceptions import ExifToolException

from .base import TimestampExtractor
from .models import ExtractionResult, TimestampSource
from .parsing import TimestampParseError, parse_exif_datetime

LOGGER = logging.getLogger(__name__)

DEFAULT_TAGS = ("CreateDate", "DateCreated")


class ExifToolUnavailable(RuntimeError):
    """Raised when the exiftool executable cannot be started."""


def match_tag(metadata: dict[str, Any], tag: str) -> Any:
    """Return the value of `tag` from an ExifTool result, ignoring the group prefix.

    ExifTool reports tags as `Group:Name` (`EXIF:CreateDate`, `QuickTime:CreateDate`);
    the first group that carries the tag wins.
    """
    for key, value in metadata.items():
        if key == "SourceFile":
            continue
        if key == tag or key.rsplit(":", 1)[-1] == tag:
            return value
    return None


class EmbeddedMetadataExtractor(TimestampExtractor):
    """Query `CreateDate` and then `DateCreated` from the file's embedded metadata.

    One exiftool process is kept alive for the lifetime of the extractor and shut
    down by `close()`. If exiftool cannot be started the extractor disables itself
    and reports every file as not found.
    """

    source = TimestampSource.EMBEDDED_METADATA

    def __init__(
        self,
        executable: str = "exiftool",
        tags: Sequence[str] = DEFAULT_TAGS,
        enabled: bool = True,
    ) -> None:
        self.executable = executable
        self.tags = tuple(tags)
        self.enabled = enabled
        self._helper: Optional[exiftool.ExifToolHelper] = None
        self._unavailable: Optional[str] = None

    def __enter__(self) -> "EmbeddedMetadataExtractor":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def extract(self, path: Path) -> ExtractionResult:
        if not self.enabled:
            return ExtractionResult.not_found("embedded metadata lookup disabled")

        malformed: list[str] = []
        missing: list[str] = []
        for tag in self.tags:
            try:
                raw = self._read_tag(path, tag)
            except ExifToolUnavailable as exc:
                return ExtractionResult.not_found(str(exc))
            except (ExifToolException, OSError, ValueError, TypeError) as exc:
                LOGGER.debug("exiftool failed reading %s from %s: %s", tag, path, exc)
                missing.append(f"{tag}: exiftool error ({exc})")
                continue

            if raw is None or raw == "":
                missing.append(f"{tag} absent")
                continue
            if not isinstance(raw, str):
                malformed.append(f"{tag}: unexpected value {raw!r}")
                continue
            try:
                candidate = parse_exif_datetime(raw, self.source)
            except TimestampParseError as exc:
                malformed.append(f"{tag}: {exc}")
                continue
            LOGGER.debug("Embedded %s of %s is %s", tag, path.name, candidate.display())
            return ExtractionResult.found(candidate)

        if malformed:
            return ExtractionResult.malformed("; ".join(malformed + missing))
        return ExtractionResult.not_found("; ".join(missing) or "no embedded date tags")

    def close(self) -> None:
        helper, self._helper = self._helper, None
        if helper is None:
            return
        try:
            helper.terminate()
        except (ExifToolException, OSError) as exc:  # pragma: no cover - shutdown best effort
            LOGGER.debug("exiftool did not terminate cleanly: %s", exc)

    def _read_tag(self, path: Path, tag: str) -> Any:
        """Return the raw value of `tag` for `path`, or None when the file lacks it."""
        helper = self._ensure_helper()
        results = helper.get_tags([str(path)], tags=[tag])
        if not results:
            return None
        return match_tag(results[0], tag)

    def _ensure_helper(self) -> exiftool.ExifToolHelper:
        if self._unavailable is not None:
            raise ExifToolUnavailable(self._unavailable)
        if self._helper is not None:
            return self._helper
        try:
            helper = exiftool.ExifToolHelper(executable=self.executable, common_args=["-G"])
            helper.run()
        except (ExifToolException, OSError) as exc:
            self._unavailable = f"exiftool unavailable ({exc})"
            LOGGER.warning(
                "Embedded metadata lookups disabled: could not start %s (%s).",
                self.executable,
                exc,
            )
            raise ExifToolUnavailable(self._unavailable) from exc
        self._helper = helper
        return helper


__all__ = ["DEFAULT_TAGS", "EmbeddedMetadataExtractor", "ExifToolUnavailable", "match_tag"]
