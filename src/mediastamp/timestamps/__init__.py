"""Timestamp extraction and resolution."""

from __future__ import annotations

from datetime import tzinfo
from zoneinfo import ZoneInfo

from mediastamp.config.models import TimestampSettings

from .base import TimestampExtractor
from .directory import DirectoryYearExtractor
from .embedded import EmbeddedMetadataExtractor
from .models import (
    DecisionAction,
    DecisionRecord,
    ExtractionResult,
    ExtractionStatus,
    InspectionReport,
    TimestampCandidate,
    TimestampSource,
)
from .policy import ResolutionPolicy
from .sidecar import SidecarExtractor


def resolve_timezone(name: str | None) -> tzinfo | None:
    """Return the zone for a configured IANA name; None means the local zone."""
    if not name:
        return None
    return ZoneInfo(name)


def build_policy(settings: TimestampSettings, *, dry_run: bool = False) -> ResolutionPolicy:
    """Assemble the sidecar, embedded, and directory extractors in priority order."""
    tz = resolve_timezone(settings.timezone)
    extractors = [
        SidecarExtractor(tz=tz),
        EmbeddedMetadataExtractor(
            executable=settings.exiftool_path,
            enabled=settings.use_embedded_metadata,
        ),
        DirectoryYearExtractor(min_year=settings.min_year),
    ]
    return ResolutionPolicy(extractors, tz=tz, dry_run=dry_run)


__all__ = [
    "DecisionAction",
    "DecisionRecord",
    "DirectoryYearExtractor",
    "EmbeddedMetadataExtractor",
    "ExtractionResult",
    "ExtractionStatus",
    "InspectionReport",
    "ResolutionPolicy",
    "SidecarExtractor",
    "TimestampCandidate",
    "TimestampExtractor",
    "TimestampSource",
    "build_policy",
    "resolve_timezone",
]
