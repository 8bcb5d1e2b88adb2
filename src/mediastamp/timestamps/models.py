"""Value types shared by the timestamp extractors and the resolution policy."""

from __future__ import annotations

import calendar
import re
from datetime import datetime, tzinfo
from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

TOUCH_FORMAT_PATTERN = re.compile(r"^\d{4}\d{2}\d{2}\d{2}\d{2}\.\d{2}$")


class TimestampSource(str, Enum):
    """Origin of a timestamp candidate, listed in resolution priority."""

    SIDECAR_METADATA = "sidecar_metadata"
    EMBEDDED_METADATA = "embedded_metadata"
    DIRECTORY_NAME = "directory_name"

    @property
    def label(self) -> str:
        """Return a human-readable name for reports."""
        return _SOURCE_LABELS[self]


_SOURCE_LABELS = {
    TimestampSource.SIDECAR_METADATA: "JSON companion file",
    TimestampSource.EMBEDDED_METADATA: "embedded metadata",
    TimestampSource.DIRECTORY_NAME: "parent directory name",
}


class TimestampCandidate(BaseModel):
    """A fully specified, not-yet-applied timestamp with a known origin.

    Attributes:
        year: Calendar year (1-9999).
        month: Month of the year (1-12).
        day: Day of the month, bounded by the month length.
        hour: Hour of the day (0-23).
        minute: Minute of the hour (0-59).
        second: Second of the minute (0-59).
        source: Extractor that produced the candidate.
    """

    model_config = ConfigDict(frozen=True)

    year: int = Field(ge=1, le=9999)
    month: int = Field(ge=1, le=12)
    day: int = Field(ge=1, le=31)
    hour: int = Field(default=0, ge=0, le=23)
    minute: int = Field(default=0, ge=0, le=59)
    second: int = Field(default=0, ge=0, le=59)
    source: TimestampSource

    @model_validator(mode="after")
    def _check_day_in_month(self) -> "TimestampCandidate":
        days = calendar.monthrange(self.year, self.month)[1]
        if self.day > days:
            raise ValueError(f"day {self.day} is out of range for {self.year:04d}-{self.month:02d}")
        return self

    @classmethod
    def from_datetime(cls, value: datetime, source: TimestampSource) -> "TimestampCandidate":
        """Build a candidate from the wall-clock fields of a datetime."""
        return cls(
            year=value.year,
            month=value.month,
            day=value.day,
            hour=value.hour,
            minute=value.minute,
            second=value.second,
            source=source,
        )

    def to_datetime(self) -> datetime:
        """Return the candidate as a naive datetime."""
        return datetime(self.year, self.month, self.day, self.hour, self.minute, self.second)

    def to_epoch(self, tz: tzinfo | None = None) -> int:
        """Return the candidate as whole epoch seconds.

        Args:
            tz: Zone the wall-clock fields are interpreted in; local time when None.

        Returns:
            int: Seconds since the Unix epoch.
        """
        moment = self.to_datetime()
        if tz is not None:
            moment = moment.replace(tzinfo=tz)
        return int(moment.timestamp())

    def touch_format(self) -> str:
        """Return the canonical `YYYYMMDDHHMM.SS` layout."""
        return (
            f"{self.year:04d}{self.month:02d}{self.day:02d}"
            f"{self.hour:02d}{self.minute:02d}.{self.second:02d}"
        )

    def display(self) -> str:
        """Return `YYYY-MM-DD HH:MM:SS` for console and report output."""
        return self.to_datetime().strftime("%Y-%m-%d %H:%M:%S")


class ExtractionStatus(str, Enum):
    """Outcome of a single extractor attempt."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    MALFORMED = "malformed"


class ExtractionResult(BaseModel):
    """Explicit result of an extractor: found, not found, or malformed input.

    Attributes:
        status: Outcome of the attempt.
        candidate: Candidate produced when the status is `found`.
        reason: Explanation for `not_found` and `malformed` outcomes.
    """

    model_config = ConfigDict(frozen=True)

    status: ExtractionStatus
    candidate: Optional[TimestampCandidate] = None
    reason: Optional[str] = None

    @classmethod
    def found(cls, candidate: TimestampCandidate) -> "ExtractionResult":
        return cls(status=ExtractionStatus.FOUND, candidate=candidate)

    @classmethod
    def not_found(cls, reason: str | None = None) -> "ExtractionResult":
        return cls(status=ExtractionStatus.NOT_FOUND, reason=reason)

    @classmethod
    def malformed(cls, reason: str) -> "ExtractionResult":
        return cls(status=ExtractionStatus.MALFORMED, reason=reason)

    @property
    def ok(self) -> bool:
        return self.status is ExtractionStatus.FOUND and self.candidate is not None


class DecisionAction(str, Enum):
    """Terminal state reached by the resolution policy for one file."""

    UPDATED = "updated"
    WOULD_UPDATE = "would_update"
    SKIPPED_IDENTICAL = "skipped_identical"
    SKIPPED_NO_TIMESTAMP = "skipped_no_timestamp"
    SKIPPED_INVALID_FORMAT = "skipped_invalid_format"
    SKIPPED_UPDATE_FAILED = "skipped_update_failed"


class DecisionRecord(BaseModel):
    """Outcome of processing one media file.

    Attributes:
        path: File that was processed.
        source: Extractor whose candidate was adopted, if any.
        resolved: Adopted timestamp as naive wall-clock time.
        prior: Modification time before processing, in local wall-clock time.
        action: Terminal state reached for the file.
        notes: Extractor fallbacks and error messages collected along the way.
    """

    path: Path
    source: Optional[TimestampSource] = None
    resolved: Optional[datetime] = None
    prior: Optional[datetime] = None
    action: DecisionAction
    notes: List[str] = Field(default_factory=list)

    @property
    def changed(self) -> bool:
        """Return whether the file's timestamp was (or would be) rewritten."""
        return self.action in (DecisionAction.UPDATED, DecisionAction.WOULD_UPDATE)

    @property
    def source_label(self) -> str:
        return self.source.label if self.source is not None else "none"


class SourceReport(BaseModel):
    """Result of one extractor as shown by `inspect`."""

    source: TimestampSource
    result: ExtractionResult


class InspectionReport(BaseModel):
    """Read-only view of every source for one file.

    Attributes:
        path: File being inspected.
        current: Current modification time in local wall-clock time.
        sources: Result of every extractor, in priority order.
        chosen: Candidate the policy would adopt.
    """

    path: Path
    current: Optional[datetime] = None
    sources: List[SourceReport] = Field(default_factory=list)
    chosen: Optional[TimestampCandidate] = None


__all__ = [
    "TOUCH_FORMAT_PATTERN",
    "TimestampSource",
    "TimestampCandidate",
    "ExtractionStatus",
    "ExtractionResult",
    "DecisionAction",
    "DecisionRecord",
    "SourceReport",
    "InspectionReport",
]
