"""Tests for directory-name year extraction."""

from datetime import datetime
from pathlib import Path

import pytest

from mediastamp.timestamps.directory import DirectoryYearExtractor, year_tokens
from mediastamp.timestamps.models import ExtractionStatus, TimestampSource


def _extract(tmp_path: Path, directory: str, current_year: int = 2026):
    extractor = DirectoryYearExtractor(min_year=1900, current_year=current_year)
    return extractor.extract(tmp_path / directory / "clip.mp4")


@pytest.mark.parametrize(
    ("directory", "year"),
    [
        ("Trip 2019 Photos", 2019),
        ("Vacation2019", 2019),
        ("2004_06 Beach", 2004),
        ("Summer 2019-2020", 2020),
        ("1999 scans (600dpi 1080)", 1999),
        ("Album 1900", 1900),
        ("Beach2019trip", 2019),
        ("Photos2019_x", 2019),
        ("4000x3000 exports from 2016 trip", 2016),
    ],
)
def test_year_found(tmp_path: Path, directory: str, year: int) -> None:
    result = _extract(tmp_path, directory)

    assert result.ok
    assert result.candidate.source is TimestampSource.DIRECTORY_NAME
    assert result.candidate.to_datetime() == datetime(year, 1, 1, 0, 0, 0)


@pytest.mark.parametrize(
    "directory",
    ["IMG1920x1080", "Holidays", "Export 1080", "Batch 12345", "Future 2031", "Archive 1899"],
)
def test_no_year(tmp_path: Path, directory: str) -> None:
    result = _extract(tmp_path, directory)

    assert result.status is ExtractionStatus.NOT_FOUND
    assert result.candidate is None


def test_last_four_characters_take_precedence(tmp_path: Path) -> None:
    result = _extract(tmp_path, "2001 to 2005")

    assert result.candidate.year == 2005


def test_trailing_non_year_number_uses_earlier_year(tmp_path: Path) -> None:
    result = _extract(tmp_path, "2012 party 0042")

    assert result.candidate.year == 2012


def test_current_year_is_upper_bound(tmp_path: Path) -> None:
    assert _extract(tmp_path, "Trip 2026", current_year=2026).ok
    assert not _extract(tmp_path, "Trip 2026", current_year=2025).ok


def test_year_tokens_reports_every_four_digit_run() -> None:
    tokens = year_tokens("IMG1920x1080 2019 12345", min_year=1900, current_year=2026)

    assert [token.text for token in tokens] == ["1920", "1080", "2019"]
    assert [token.dimension for token in tokens] == [True, True, False]
    assert [token.in_range for token in tokens] == [True, False, True]
