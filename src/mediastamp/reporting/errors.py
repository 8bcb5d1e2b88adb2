"""Reporting errors."""


class ReportError(Exception):
    """Base exception for result file operations."""


class MissingReportError(ReportError):
    """Raised when a directory has no result file."""
