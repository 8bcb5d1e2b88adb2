"""Timestamps from companion JSON files such as Google Photos Takeout exports."""

from __future__ import annotations

import json
import logging
from datetime import tzinfo
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple

from .base import TimestampExtractor
from .models import ExtractionResult, TimestampCandidate, TimestampSource
from .parsing import TimestampParseError, parse_epoch, parse_iso_prefix

LOGGER = logging.getLogger(__name__)

SUPPLEMENTAL_SUFFIX = ".supplemental-metadata.json"

# (field path, kind) in lookup order; "epoch" fields hold Unix seconds.
SIDECAR_FIELDS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("photoTakenTime", "timestamp"), "epoch"),
    (("creationTime", "timestamp"), "epoch"),
    (("creationTime",), "iso"),
    (("dateCreated",), "iso"),
    (("createDate",), "iso"),
)


def sidecar_candidates(path: Path) -> List[Path]:
    """Return possible sidecar locations for `path` in lookup precedence."""
    return [
        path.with_name(path.name + SUPPLEMENTAL_SUFFIX),
        path.with_suffix(".json") if path.suffix else path.with_name(path.name + ".json"),
        path.with_name(path.name + ".json"),
    ]


def find_sidecar(path: Path) -> Optional[Path]:
    """Return the first existing sidecar for `path`, if any.

    Candidates that cannot be probed (for example names over the filesystem's
    length limit) are treated as absent.
    """
    for candidate in sidecar_candidates(path):
        try:
            if candidate.is_file():
                return candidate
        except OSError as exc:
            LOGGER.debug("Cannot probe sidecar %s: %s", candidate.name, exc)
    return None


def lookup(document: Any, field_path: Tuple[str, ...]) -> Any:
    """Return the value at `field_path` inside nested mappings, or None."""
    node = document
    for key in field_path:
        if not isinstance(node, dict) or key not in node:
            return None
        node = node[key]
    return node


class SidecarExtractor(TimestampExtractor):
    """Read creation timestamps from a media file's JSON sidecar."""

    source = TimestampSource.SIDECAR_METADATA

    def __init__(self, tz: tzinfo | None = None) -> None:
        """Initialize the extractor.

        Args:
            tz: Zone used to convert epoch values; local time when None.
        """
        self.tz = tz

    def extract(self, path: Path) -> ExtractionResult:
        sidecar = find_sidecar(path)
        if sidecar is None:
            return ExtractionResult.not_found("no sidecar JSON file")

        try:
            document = json.loads(sidecar.read_text(encoding="utf-8-sig"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            LOGGER.debug("Unreadable sidecar %s: %s", sidecar, exc)
            return ExtractionResult.malformed(f"{sidecar.name}: {exc}")

        if not isinstance(document, dict):
            return ExtractionResult.malformed(f"{sidecar.name}: top level is not an object")

        return self.extract_from_document(document, label=sidecar.name)

    def extract_from_document(self, document: dict, *, label: str = "sidecar") -> ExtractionResult:
        """Apply the field lookup order to an already-parsed sidecar document."""
        last_error: str | None = None
        for field_path, kind in SIDECAR_FIELDS:
            value = lookup(document, field_path)
            if value is None:
                continue
            if kind == "iso" and not isinstance(value, str):
                # creationTime is an object in Takeout exports; handled by the epoch entry.
                continue
            parser = self._parser_for(kind)
            dotted = ".".join(field_path)
            try:
                candidate = parser(value)
            except TimestampParseError as exc:
                last_error = f"{label}: {dotted}: {exc}"
                LOGGER.debug("Skipping %s", last_error)
                continue
            LOGGER.debug("Sidecar %s provided %s via %s", label, candidate.display(), dotted)
            return ExtractionResult.found(candidate)

        if last_error is not None:
            return ExtractionResult.malformed(last_error)
        return ExtractionResult.not_found(f"{label}: no recognized timestamp field")

    def _parser_for(self, kind: str) -> Callable[[Any], TimestampCandidate]:
        if kind == "epoch":
            return lambda value: parse_epoch(value, self.source, self.tz)
        return lambda value: parse_iso_prefix(value, self.source)


__all__ = [
    "SUPPLEMENTAL_SUFFIX",
    "SIDECAR_FIELDS",
    "SidecarExtractor",
    "find_sidecar",
    "sidecar_candidates",
    "lookup",
]
