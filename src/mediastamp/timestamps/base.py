"""Common interface implemented by every timestamp extractor."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from .models import ExtractionResult, TimestampSource


class TimestampExtractor(ABC):
    """Produce a timestamp candidate for a media file from a single source."""

    source: TimestampSource

    @abstractmethod
    def extract(self, path: Path) -> ExtractionResult:
        """Return the extraction outcome for `path`; must never raise for a single file."""

    def close(self) -> None:
        """Release resources held across files."""
