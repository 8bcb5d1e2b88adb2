"""Last-resort timestamps mined from the name of a file's parent directory."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .base import TimestampExtractor
from .models import ExtractionResult, TimestampCandidate, TimestampSource

LOGGER = logging.getLogger(__name__)

_DIGIT_RUN = re.compile(r"[0-9]+")
# Width x height, as in `IMG1920x1080`.
_DIMENSION = re.compile(r"[0-9]+[xX][0-9]+")


@dataclass(frozen=True)
class YearToken:
    """A four-digit run found in a directory name."""

    text: str
    start: int
    dimension: bool
    in_range: bool

    @property
    def value(self) -> int:
        return int(self.text)


def year_tokens(name: str, min_year: int = 1900, current_year: int | None = None) -> List[YearToken]:
    """List every maximal run of exactly four digits in `name`, left to right."""
    upper = current_year if current_year is not None else datetime.now().year
    dimension_spans = [match.span() for match in _DIMENSION.finditer(name)]
    tokens: List[YearToken] = []
    for match in _DIGIT_RUN.finditer(name):
        if len(match.group()) != 4:
            continue
        start, end = match.span()
        tokens.append(
            YearToken(
                text=match.group(),
                start=start,
                dimension=any(left <= start and end <= right for left, right in dimension_spans),
                in_range=min_year <= int(match.group()) <= upper,
            )
        )
    return tokens


class DirectoryYearExtractor(TimestampExtractor):
    """Derive January 1st of a year named by the enclosing directory.

    The last four characters of the directory name are tried first
    (`Vacation2019`). Failing that, the first four-digit token in range
    is used (`Trip 2019 Photos`, `Beach2019trip`). Pixel dimensions such as the
    `1920x1080` in `IMG1920x1080` are not treated as years.
    """

    source = TimestampSource.DIRECTORY_NAME

    def __init__(self, min_year: int = 1900, current_year: int | None = None) -> None:
        self.min_year = min_year
        self._current_year = current_year

    @property
    def current_year(self) -> int:
        return self._current_year if self._current_year is not None else datetime.now().year

    def extract(self, path: Path) -> ExtractionResult:
        name = path.parent.name
        year = self.year_from_name(name)
        if year is None:
            return ExtractionResult.not_found(f"no year in directory name {name!r}")
        LOGGER.debug("Directory %r names year %d", name, year)
        return ExtractionResult.found(
            TimestampCandidate(year=year, month=1, day=1, source=self.source)
        )

    def year_from_name(self, name: str) -> Optional[int]:
        """Return the year named by a directory, or None."""
        tail = name[-4:]
        if len(tail) == 4 and tail.isascii() and tail.isdigit() and self._in_range(int(tail)):
            return int(tail)

        for token in year_tokens(name, self.min_year, self.current_year):
            if token.in_range and not token.dimension:
                return token.value
        return None

    def _in_range(self, year: int) -> bool:
        return self.min_year <= year <= self.current_year


__all__ = ["DirectoryYearExtractor", "YearToken", "year_tokens"]
