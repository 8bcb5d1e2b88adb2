"""Aggregate models for per-directory results."""

from __future__ import annotations

from collections import Counter
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from mediastamp.timestamps.models import DecisionAction, DecisionRecord


class DirectoryAggregate(BaseModel):
    """File and update counts for one directory and its whole subtree.

    Attributes:
        direct_files: Media files directly inside the directory.
        direct_updated: Direct media files whose timestamp changed.
        subtree_files: Media files in the directory and all subdirectories.
        subtree_updated: Updated media files in the directory and all subdirectories.
    """

    direct_files: int = 0
    direct_updated: int = 0
    subtree_files: int = 0
    subtree_updated: int = 0

    @property
    def nested_files(self) -> int:
        return self.subtree_files - self.direct_files

    @property
    def nested_updated(self) -> int:
        return self.subtree_updated - self.direct_updated

    @classmethod
    def combine(
        cls,
        decisions: Iterable[DecisionRecord],
        children: Iterable["DirectoryAggregate"] = (),
    ) -> "DirectoryAggregate":
        """Build a directory's aggregate from its own decisions and its children's totals."""
        own = list(decisions)
        direct_files = len(own)
        direct_updated = sum(1 for decision in own if decision.changed)
        nested_files = 0
        nested_updated = 0
        for child in children:
            nested_files += child.subtree_files
            nested_updated += child.subtree_updated
        return cls(
            direct_files=direct_files,
            direct_updated=direct_updated,
            subtree_files=direct_files + nested_files,
            subtree_updated=direct_updated + nested_updated,
        )


class DirectorySummary(BaseModel):
    """Aggregate of one processed directory, as reported back to the caller."""

    directory: Path
    aggregate: DirectoryAggregate
    report_path: Optional[Path] = None


class RunResult(BaseModel):
    """Outcome of processing a whole tree.

    Attributes:
        root: Root directory of the run.
        aggregate: Totals for the root and its subtree.
        decisions: Every decision record in processing order.
        directories: Aggregates for every processed directory in completion order.
        errors: Non-fatal problems such as unreadable directories.
        dry_run: Whether the run left files untouched.
    """

    root: Path
    aggregate: DirectoryAggregate = Field(default_factory=DirectoryAggregate)
    decisions: List[DecisionRecord] = Field(default_factory=list)
    directories: List[DirectorySummary] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
    dry_run: bool = False

    def action_counts(self) -> Dict[str, int]:
        """Return the number of decisions per action, in declaration order."""
        counts = Counter(decision.action for decision in self.decisions)
        return {action.value: counts.get(action, 0) for action in DecisionAction}


__all__ = ["DirectoryAggregate", "DirectorySummary", "RunResult"]
