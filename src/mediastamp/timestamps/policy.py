"""Resolution and application of the best known timestamp for a media file."""

from __future__ import annotations

import logging
import math
import os
from datetime import datetime, tzinfo
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .base import TimestampExtractor
from .models import (
    TOUCH_FORMAT_PATTERN,
    DecisionAction,
    DecisionRecord,
    ExtractionStatus,
    InspectionReport,
    SourceReport,
    TimestampCandidate,
)

LOGGER = logging.getLogger(__name__)


class ResolutionPolicy:
    """Pick a timestamp from prioritized extractors and apply it to the file's mtime.

    Extractors are consulted strictly in the order given; the first candidate wins.
    A file whose modification time already equals the candidate (to the second) is
    left untouched, which makes repeated runs over the same tree idempotent.
    """

    def __init__(
        self,
        extractors: Sequence[TimestampExtractor],
        *,
        tz: tzinfo | None = None,
        dry_run: bool = False,
    ) -> None:
        """Initialize the policy.

        Args:
            extractors: Extractors in priority order (sidecar, embedded, directory).
            tz: Zone naive candidates are interpreted in; local time when None.
            dry_run: When True, decisions are computed but no file is modified.
        """
        self.extractors = list(extractors)
        self.tz = tz
        self.dry_run = dry_run

    def resolve(self, path: Path) -> Tuple[Optional[TimestampCandidate], List[str]]:
        """Return the first candidate produced by the extractors plus fallback notes."""
        notes: List[str] = []
        for extractor in self.extractors:
            result = extractor.extract(path)
            if result.ok:
                return result.candidate, notes
            label = extractor.source.label
            if result.status is ExtractionStatus.MALFORMED:
                notes.append(f"{label}: malformed ({result.reason})")
            elif result.reason:
                notes.append(f"{label}: {result.reason}")
            LOGGER.debug("%s: no timestamp from %s", path.name, label)
        return None, notes

    def process(self, path: Path) -> DecisionRecord:
        """Resolve and apply a timestamp for one file, returning the decision.

        Never raises for problems with the individual file: extractor failures fall
        through to the next source and filesystem failures become skip actions.
        """
        candidate, notes = self.resolve(path)
        if candidate is None:
            LOGGER.info("Skipping (no timestamp found): %s", path.name)
            return DecisionRecord(
                path=path, action=DecisionAction.SKIPPED_NO_TIMESTAMP, notes=notes
            )

        record = DecisionRecord(
            path=path,
            source=candidate.source,
            resolved=candidate.to_datetime(),
            action=DecisionAction.SKIPPED_IDENTICAL,
            notes=notes,
        )

        try:
            current = math.floor(path.stat().st_mtime)
        except OSError as exc:
            record.action = DecisionAction.SKIPPED_UPDATE_FAILED
            record.notes.append(f"could not read current timestamp: {exc}")
            LOGGER.warning("Could not stat %s: %s", path, exc)
            return record
        record.prior = self._wall_clock(current)

        try:
            target = candidate.to_epoch(self.tz)
        except (OverflowError, OSError, ValueError) as exc:
            record.action = DecisionAction.SKIPPED_INVALID_FORMAT
            record.notes.append(f"timestamp cannot be converted: {exc}")
            LOGGER.warning("Invalid timestamp for %s: %s", path.name, exc)
            return record

        if current == target:
            LOGGER.info("Skipping (timestamp already matches): %s", path.name)
            return record

        layout = candidate.touch_format()
        if not TOUCH_FORMAT_PATTERN.match(layout):
            record.action = DecisionAction.SKIPPED_INVALID_FORMAT
            record.notes.append(f"invalid timestamp format: {layout}")
            LOGGER.warning("Invalid timestamp format %s for %s", layout, path.name)
            return record

        if self.dry_run:
            record.action = DecisionAction.WOULD_UPDATE
            return record

        try:
            os.utime(path, (target, target))
        except OSError as exc:
            record.action = DecisionAction.SKIPPED_UPDATE_FAILED
            record.notes.append(f"failed to update timestamp with format {layout}: {exc}")
            LOGGER.warning("Failed to update timestamp of %s: %s", path, exc)
            return record

        record.action = DecisionAction.UPDATED
        LOGGER.info(
            "Updated %s: %s -> %s (from %s)",
            path.name,
            record.prior.strftime("%Y-%m-%d %H:%M:%S") if record.prior else "?",
            candidate.display(),
            candidate.source.label,
        )
        return record

    def inspect(self, path: Path) -> InspectionReport:
        """Run every extractor without short-circuiting and without touching the file."""
        report = InspectionReport(path=path)
        try:
            report.current = self._wall_clock(math.floor(path.stat().st_mtime))
        except OSError:
            report.current = None
        for extractor in self.extractors:
            result = extractor.extract(path)
            report.sources.append(SourceReport(source=extractor.source, result=result))
            if report.chosen is None and result.ok:
                report.chosen = result.candidate
        return report

    def close(self) -> None:
        """Release resources held by the extractors."""
        for extractor in self.extractors:
            extractor.close()

    def _wall_clock(self, epoch: int) -> datetime:
        moment = datetime.fromtimestamp(epoch, tz=self.tz)
        return moment.replace(tzinfo=None)


__all__ = ["ResolutionPolicy"]
