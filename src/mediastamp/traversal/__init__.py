"""Directory traversal for mediastamp."""

from __future__ import annotations

from mediastamp.config.models import MediastampConfig
from mediastamp.reporting import ReportRepository
from mediastamp.timestamps import build_policy

from .discovery import DirectoryListing, DirectoryWalker, MediaFilter
from .pipeline import TreeProcessor


def build_processor(config: MediastampConfig, *, dry_run: bool = False) -> TreeProcessor:
    """Wire a tree processor from the effective configuration."""
    walker = DirectoryWalker(
        media_filter=MediaFilter(config.processing.media_extensions),
        include_hidden=config.processing.process_hidden_files,
        follow_symlinks=config.processing.follow_symlinks,
    )
    reports = ReportRepository(
        config.reporting.results_filename,
        include_file_details=config.reporting.include_file_details,
    )
    return TreeProcessor(
        walker,
        build_policy(config.timestamps, dry_run=dry_run),
        reports,
        write_reports=config.reporting.write_reports,
    )


__all__ = [
    "DirectoryListing",
    "DirectoryWalker",
    "MediaFilter",
    "TreeProcessor",
    "build_processor",
]
