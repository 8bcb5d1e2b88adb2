"""Configuration models describing mediastamp settings."""

from __future__ import annotations

from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_IMAGE_EXTENSIONS = ["jpg", "jpeg", "png", "heic"]
DEFAULT_VIDEO_EXTENSIONS = ["mp4", "mov", "avi", "m4v", "mkv", "3gp", "wmv"]


class MediastampBaseModel(BaseModel):
    """Shared configuration for mediastamp Pydantic models."""

    model_config = ConfigDict(extra="forbid")


def _normalize_extensions(values: List[str]) -> List[str]:
    normalized: List[str] = []
    for value in values:
        cleaned = value.strip().lstrip(".").lower()
        if cleaned and cleaned not in normalized:
            normalized.append(cleaned)
    return normalized


class ProcessingOptions(MediastampBaseModel):
    """Options governing which files the traversal hands to the resolver.

    Attributes:
        image_extensions: Image extensions treated as media (case-insensitive).
        video_extensions: Video extensions treated as media (case-insensitive).
        process_hidden_files: Whether dot-files and dot-directories are visited.
        follow_symlinks: Whether symlinked directories are descended into.
    """

    image_extensions: List[str] = Field(default_factory=lambda: list(DEFAULT_IMAGE_EXTENSIONS))
    video_extensions: List[str] = Field(default_factory=lambda: list(DEFAULT_VIDEO_EXTENSIONS))
    process_hidden_files: bool = False
    follow_symlinks: bool = False

    @field_validator("image_extensions", "video_extensions")
    @classmethod
    def _clean_extensions(cls, value: List[str]) -> List[str]:
        return _normalize_extensions(value)

    @property
    def media_extensions(self) -> List[str]:
        """Return image and video extensions combined."""
        return [*self.image_extensions, *self.video_extensions]


class TimestampSettings(MediastampBaseModel):
    """Settings for timestamp extraction and comparison.

    Attributes:
        timezone: IANA timezone used to interpret naive timestamps; local time when unset.
        min_year: Earliest year accepted from directory names.
        use_embedded_metadata: Whether exiftool is queried for embedded dates.
        exiftool_path: Executable used for embedded metadata queries.
    """

    timezone: Optional[str] = None
    min_year: int = Field(default=1900, ge=1)
    use_embedded_metadata: bool = True
    exiftool_path: str = "exiftool"

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: Optional[str]) -> Optional[str]:
        if value is None or value == "":
            return None
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone '{value}'") from exc
        return value


class ReportingOptions(MediastampBaseModel):
    """Settings for per-directory result files.

    Attributes:
        results_filename: Name of the report written into every processed directory.
        write_reports: Whether result files are written at all.
        include_file_details: Whether reports list one line per processed file.
    """

    results_filename: str = "image_timestamp_results.txt"
    write_reports: bool = True
    include_file_details: bool = True


class LoggingSettings(MediastampBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        debug_log_path: File receiving debug output when --debug is passed.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of historical log files to retain.
    """

    level: str = "WARNING"
    debug_log_path: Optional[str] = None
    max_size_mb: int = 100
    backup_count: int = 5


class CLIOptions(MediastampBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
    """

    quiet_default: bool = False
    summary_default: bool = False


class MediastampConfig(MediastampBaseModel):
    """Top-level configuration struct for mediastamp.

    Attributes:
        processing: Traversal and file selection settings.
        timestamps: Timestamp extraction settings.
        reporting: Result file settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    processing: ProcessingOptions = Field(default_factory=ProcessingOptions)
    timestamps: TimestampSettings = Field(default_factory=TimestampSettings)
    reporting: ReportingOptions = Field(default_factory=ReportingOptions)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "DEFAULT_IMAGE_EXTENSIONS",
    "DEFAULT_VIDEO_EXTENSIONS",
    "MediastampBaseModel",
    "ProcessingOptions",
    "TimestampSettings",
    "ReportingOptions",
    "LoggingSettings",
    "CLIOptions",
    "MediastampConfig",
]
