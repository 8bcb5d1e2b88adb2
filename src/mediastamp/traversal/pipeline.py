"""Post-order processing of a media tree."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Set

from mediastamp.reporting import (
    DirectoryAggregate,
    DirectorySummary,
    MissingReportError,
    ReportError,
    ReportRepository,
    RunResult,
)
from mediastamp.timestamps.models import DecisionAction, DecisionRecord
from mediastamp.timestamps.policy import ResolutionPolicy

from .discovery import DirectoryWalker

LOGGER = logging.getLogger(__name__)


class TreeProcessor:
    """Apply the resolution policy to every media file below a root directory.

    Every subdirectory is processed (and its report written) before the files of
    its parent, so a parent's totals are rolled up from its children's finished
    reports.
    """

    def __init__(
        self,
        walker: DirectoryWalker,
        policy: ResolutionPolicy,
        reports: ReportRepository,
        *,
        write_reports: bool = True,
    ) -> None:
        self.walker = walker
        self.policy = policy
        self.reports = reports
        self.write_reports = write_reports and not policy.dry_run
        self._unwritten: Set[Path] = set()

    def run(self, root: Path) -> RunResult:
        """Process `root` recursively and return the collected results."""
        root = root.expanduser().resolve()
        result = RunResult(root=root, dry_run=self.policy.dry_run)
        self._unwritten.clear()
        try:
            result.aggregate = self._process_directory(root, result)
        finally:
            self.policy.close()
        return result

    def _process_directory(self, directory: Path, result: RunResult) -> DirectoryAggregate:
        LOGGER.info("Processing directory: %s", directory)
        try:
            listing = self.walker.listing(directory)
        except OSError as exc:
            message = f"{directory}: directory unreadable ({exc})"
            LOGGER.warning(message)
            result.errors.append(message)
            return DirectoryAggregate()

        children: List[DirectoryAggregate] = []
        for subdirectory in listing.subdirectories:
            in_memory = self._process_directory(subdirectory, result)
            children.append(self._child_aggregate(subdirectory, in_memory))

        decisions = []
        for path in listing.media_files:
            decision = self._process_file(path, result)
            self.reports.record(decision)
            result.decisions.append(decision)
            decisions.append(decision)

        aggregate = DirectoryAggregate.combine(decisions, children)
        summary = DirectorySummary(directory=directory, aggregate=aggregate)
        if self.write_reports:
            try:
                summary.report_path = self.reports.write(directory, aggregate)
            except ReportError as exc:
                LOGGER.warning("%s", exc)
                result.errors.append(str(exc))
                self._unwritten.add(directory)
        else:
            self.reports.discard(directory)
        result.directories.append(summary)

        LOGGER.info(
            "Directory summary for %s: %d/%d direct files updated, %d/%d in total",
            directory,
            aggregate.direct_updated,
            aggregate.direct_files,
            aggregate.subtree_updated,
            aggregate.subtree_files,
        )
        return aggregate

    def _process_file(self, path: Path, result: RunResult) -> DecisionRecord:
        try:
            return self.policy.process(path)
        except Exception as exc:
            message = f"{path}: {exc}"
            LOGGER.warning("Unexpected failure processing %s", message)
            result.errors.append(message)
            return DecisionRecord(
                path=path,
                action=DecisionAction.SKIPPED_UPDATE_FAILED,
                notes=[f"unexpected error: {exc}"],
            )

    def _child_aggregate(self, directory: Path, in_memory: DirectoryAggregate) -> DirectoryAggregate:
        # A report left over from an earlier run must not stand in for a failed write.
        if not self.write_reports or directory in self._unwritten:
            return in_memory
        try:
            return self.reports.load(directory)
        except MissingReportError:
            return in_memory
        except ReportError as exc:
            LOGGER.warning("Using in-memory totals for %s: %s", directory, exc)
            return in_memory
