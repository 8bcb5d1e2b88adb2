"""Per-directory result files and aggregate roll-up."""

from __future__ import annotations

import re
from collections import defaultdict
from datetime import datetime
from pathlib import Path
from typing import Dict, List

from mediastamp.timestamps.models import DecisionRecord

from .errors import MissingReportError, ReportError
from .models import DirectoryAggregate, DirectorySummary, RunResult

DEFAULT_RESULTS_FILENAME = "image_timestamp_results.txt"

_TOTAL_FILES = "Total media files (including subdirectories)"
_TOTAL_UPDATED = "Total media files updated (including subdirectories)"
_SUMMARY_LINE = re.compile(r"^\s*(?P<label>[^:]+):\s*(?P<value>\S+)\s*$")


class ReportRepository:
    """Collect decisions per directory and persist human-readable result files.

    The tree processor talks to the repository through two calls: `record` for
    each decision and `load` to read back a finished child directory's totals.
    """

    def __init__(
        self,
        filename: str = DEFAULT_RESULTS_FILENAME,
        *,
        include_file_details: bool = True,
    ) -> None:
        """Initialize the repository.

        Args:
            filename: Name of the result file written into each directory.
            include_file_details: Whether reports list every processed file.
        """
        self._filename = filename
        self._include_file_details = include_file_details
        self._pending: Dict[Path, List[DecisionRecord]] = defaultdict(list)

    @property
    def filename(self) -> str:
        """Return the result file name used in every directory."""
        return self._filename

    def report_path(self, directory: Path) -> Path:
        """Return the result file location for `directory`."""
        return directory / self._filename

    def record(self, decision: DecisionRecord) -> None:
        """Buffer a decision until its directory's report is written."""
        self._pending[decision.path.parent].append(decision)

    def write(self, directory: Path, aggregate: DirectoryAggregate) -> Path:
        """Replace the directory's result file with a fresh report.

        Args:
            directory: Directory the report describes.
            aggregate: Totals for the directory and its subtree.

        Returns:
            Path: Location of the written report.

        Raises:
            ReportError: If the report cannot be written.
        """
        decisions = self._pending.pop(directory, [])
        path = self.report_path(directory)
        text = self.render(directory, aggregate, decisions)
        try:
            path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise ReportError(f"Could not write {path}: {exc}") from exc
        return path

    def discard(self, directory: Path) -> None:
        """Forget buffered decisions for `directory` without writing a report."""
        self._pending.pop(directory, None)

    def load(self, directory: Path) -> DirectoryAggregate:
        """Read the subtree totals persisted for `directory`.

        Raises:
            MissingReportError: If the directory has no result file.
            ReportError: If the file lacks parseable totals.
        """
        path = self.report_path(directory)
        if not path.is_file():
            raise MissingReportError(f"No result file found at {path}")
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ReportError(f"Could not read {path}: {exc}") from exc

        values: Dict[str, int] = {}
        for line in text.splitlines():
            match = _SUMMARY_LINE.match(line)
            if match is None:
                continue
            value = match.group("value")
            if value.isdigit():
                values[match.group("label").strip()] = int(value)

        if _TOTAL_FILES not in values or _TOTAL_UPDATED not in values:
            raise ReportError(f"Result file {path} has no totals")

        direct_files = values.get("Direct media files in this directory", 0)
        direct_updated = values.get("Direct media files updated in this directory", 0)
        return DirectoryAggregate(
            direct_files=direct_files,
            direct_updated=direct_updated,
            subtree_files=values[_TOTAL_FILES],
            subtree_updated=values[_TOTAL_UPDATED],
        )

    def render(
        self,
        directory: Path,
        aggregate: DirectoryAggregate,
        decisions: List[DecisionRecord],
    ) -> str:
        """Return the text of a directory report."""
        lines = [
            f"Image Timestamp Update Results - {_now()}",
            f"Directory: {directory}",
            "=====================================",
            "",
            "Summary:",
            f"  Direct media files in this directory: {aggregate.direct_files}",
            f"  Direct media files updated in this directory: {aggregate.direct_updated}",
        ]
        if aggregate.nested_files > 0:
            lines.append(f"  Media files in subdirectories: {aggregate.nested_files}")
            lines.append(f"  Media files updated in subdirectories: {aggregate.nested_updated}")
        lines.append(f"  {_TOTAL_FILES}: {aggregate.subtree_files}")
        lines.append(f"  {_TOTAL_UPDATED}: {aggregate.subtree_updated}")

        if self._include_file_details and decisions:
            lines.extend(["", "Files:"])
            for decision in decisions:
                lines.append(f"  {decision.path.name}: {_describe(decision)}")
                for note in decision.notes:
                    lines.append(f"    - {note}")

        lines.append(f"Completed at: {_now()}")
        return "\n".join(lines) + "\n"


def _now() -> str:
    return datetime.now().strftime("%a %b %d %H:%M:%S %Y")


def _describe(decision: DecisionRecord) -> str:
    action = decision.action.value.replace("_", " ")
    if decision.resolved is None:
        return action
    resolved = decision.resolved.strftime("%Y-%m-%d %H:%M:%S")
    return f"{action} ({resolved} from {decision.source_label})"


__all__ = [
    "DEFAULT_RESULTS_FILENAME",
    "DirectoryAggregate",
    "DirectorySummary",
    "MissingReportError",
    "ReportError",
    "ReportRepository",
    "RunResult",
]
