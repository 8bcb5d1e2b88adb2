"""Directory listing utilities."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List

from mediastamp.config.models import DEFAULT_IMAGE_EXTENSIONS, DEFAULT_VIDEO_EXTENSIONS


def _is_hidden(path: Path) -> bool:
    return path.name.startswith(".")


class MediaFilter:
    """Case-insensitive match of file extensions against known media types."""

    def __init__(self, extensions: Iterable[str] | None = None) -> None:
        if extensions is None:
            extensions = [*DEFAULT_IMAGE_EXTENSIONS, *DEFAULT_VIDEO_EXTENSIONS]
        self.extensions = frozenset(ext.lower().lstrip(".") for ext in extensions)

    def matches(self, path: Path) -> bool:
        """Return whether `path` has a recognized media extension."""
        suffix = path.suffix.lower().lstrip(".")
        return bool(suffix) and suffix in self.extensions


@dataclass
class DirectoryListing:
    """Immediate contents of a directory relevant to processing."""

    directory: Path
    subdirectories: List[Path] = field(default_factory=list)
    media_files: List[Path] = field(default_factory=list)


class DirectoryWalker:
    """List subdirectories and media files one level at a time."""

    def __init__(
        self,
        *,
        media_filter: MediaFilter,
        include_hidden: bool = False,
        follow_symlinks: bool = False,
    ) -> None:
        self.media_filter = media_filter
        self.include_hidden = include_hidden
        self.follow_symlinks = follow_symlinks

    def listing(self, directory: Path) -> DirectoryListing:
        """Return sorted subdirectories and media files directly inside `directory`.

        Raises:
            OSError: If the directory cannot be read.
        """
        listing = DirectoryListing(directory=directory)
        for entry in sorted(directory.iterdir(), key=lambda item: item.name):
            if not self.include_hidden and _is_hidden(entry):
                continue
            if entry.is_symlink() and entry.is_dir() and not self.follow_symlinks:
                continue
            if entry.is_dir():
                listing.subdirectories.append(entry)
            elif entry.is_file() and self.media_filter.matches(entry):
                listing.media_files.append(entry)
        return listing
