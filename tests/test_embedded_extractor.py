"""Tests for embedded metadata extraction."""

from datetime import datetime
from pathlib import Path
from typing import Any

from exiftool.exceptions import ExifToolException

from mediastamp.timestamps.embedded import EmbeddedMetadataExtractor, match_tag
from mediastamp.timestamps.models import ExtractionStatus, TimestampSource


class FakeEmbeddedExtractor(EmbeddedMetadataExtractor):
    """Embedded extractor answering tag queries from a dictionary."""

    def __init__(self, values: dict[str, Any], failing: tuple[str, ...] = ()) -> None:
        super().__init__()
        self.values = values
        self.failing = failing
        self.queried: list[str] = []

    def _read_tag(self, path: Path, tag: str) -> Any:  # type: ignore[override]
        self.queried.append(tag)
        if tag in self.failing:
            raise ExifToolException(f"cannot read {tag}")
        return self.values.get(tag)


def test_match_tag_ignores_group_prefix() -> None:
    metadata = {"SourceFile": "a.mov", "QuickTime:CreateDate": "2019:01:02 03:04:05"}

    assert match_tag(metadata, "CreateDate") == "2019:01:02 03:04:05"
    assert match_tag(metadata, "DateCreated") is None


def test_create_date_is_preferred(tmp_path: Path) -> None:
    extractor = FakeEmbeddedExtractor(
        {"CreateDate": "2017:07:07 07:07:07", "DateCreated": "2018:05:04 10:20:30"}
    )

    result = extractor.extract(tmp_path / "a.jpg")

    assert result.ok
    assert result.candidate.to_datetime() == datetime(2017, 7, 7, 7, 7, 7)
    assert extractor.queried == ["CreateDate"]


def test_date_created_fallback(tmp_path: Path) -> None:
    extractor = FakeEmbeddedExtractor({"DateCreated": "2018:05:04 10:20:30"})

    result = extractor.extract(tmp_path / "a.jpg")

    candidate = result.candidate
    assert candidate.source is TimestampSource.EMBEDDED_METADATA
    assert (candidate.year, candidate.month, candidate.day) == (2018, 5, 4)
    assert (candidate.hour, candidate.minute, candidate.second) == (10, 20, 30)


def test_tool_error_on_first_tag_falls_back(tmp_path: Path) -> None:
    extractor = FakeEmbeddedExtractor(
        {"DateCreated": "2018:05:04 10:20:30"}, failing=("CreateDate",)
    )

    result = extractor.extract(tmp_path / "a.jpg")

    assert result.ok
    assert extractor.queried == ["CreateDate", "DateCreated"]


def test_malformed_values_are_not_errors(tmp_path: Path) -> None:
    extractor = FakeEmbeddedExtractor({"CreateDate": "0000:00:00 00:00:00", "DateCreated": 2018})

    result = extractor.extract(tmp_path / "a.jpg")

    assert result.status is ExtractionStatus.MALFORMED
    assert result.candidate is None


def test_absent_tags_are_not_found(tmp_path: Path) -> None:
    result = FakeEmbeddedExtractor({}).extract(tmp_path / "a.jpg")

    assert result.status is ExtractionStatus.NOT_FOUND


def test_disabled_extractor_never_queries(tmp_path: Path) -> None:
    extractor = FakeEmbeddedExtractor({"CreateDate": "2017:07:07 07:07:07"})
    extractor.enabled = False

    result = extractor.extract(tmp_path / "a.jpg")

    assert result.status is ExtractionStatus.NOT_FOUND
    assert extractor.queried == []


def test_missing_exiftool_degrades_to_not_found(tmp_path: Path) -> None:
    media = tmp_path / "a.jpg"
    media.write_bytes(b"\xff\xd8\xff")
    extractor = EmbeddedMetadataExtractor(executable=str(tmp_path / "no-such-exiftool"))

    first = extractor.extract(media)
    second = extractor.extract(media)
    extractor.close()

    assert first.status is ExtractionStatus.NOT_FOUND
    assert "exiftool unavailable" in (first.reason or "")
    assert second.reason == first.reason
