# -*- coding: utf-8 -*-
"""
Year Ranges

Parsing and overlap resolution for closed year intervals.

Supplier text often states an approximate range ("2000-2010") that spans
several catalog ranges ("2000-2003", "2004-2007", "2008-2010"). The resolver
returns every catalog range that shares at least one year with the target so
each one can be recorded as an exact, catalog-backed entry.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

logger = logging.getLogger(__name__)


# =============================================================================
# ERRORS
# =============================================================================

class InvalidYearRange(ValueError):
    """Year text that cannot be parsed into a valid closed interval."""


# =============================================================================
# YEAR RANGE
# =============================================================================

YEAR_RANGE_RE = re.compile(r'^\s*(\d{4})\s*(?:-\s*(\d{4})\s*)?$')

# Year expressions inside free text: "2005" or "2000-2007"
YEAR_PATTERN = re.compile(r'(\d{4})(?:-(\d{4}))?')


@dataclass(frozen=True)
class YearRange:
    start: int
    end: int

    def __post_init__(self):
        if self.start > self.end:
            raise InvalidYearRange(f"Inverted year range: {self.start}-{self.end}")

    @classmethod
    def parse(cls, text: Optional[str]) -> 'YearRange':
        """
        Parse "YYYY-YYYY" or "YYYY" into a YearRange.

        Args:
            text: Raw year range string

        Returns:
            YearRange (a single year becomes start == end)

        Raises:
            InvalidYearRange: if the text is empty, not 4-digit years, or inverted
        """
        if text is None:
            raise InvalidYearRange("Missing year range")

        match = YEAR_RANGE_RE.match(str(text))
        if not match:
            raise InvalidYearRange(f"Malformed year range: {text!r}")

        start = int(match.group(1))
        end = int(match.group(2) or match.group(1))
        return cls(start, end)

    def __str__(self) -> str:
        return f"{self.start:04d}-{self.end:04d}"


YearRangeLike = Union[YearRange, str]


def coerce_year_range(value: YearRangeLike) -> YearRange:
    """Accept a YearRange or its string form."""
    if isinstance(value, YearRange):
        return value
    return YearRange.parse(value)


def parse_optional(text: Optional[str]) -> Optional[YearRange]:
    """Parse a year range where blank means "all years"."""
    if text is None or not str(text).strip():
        return None
    return YearRange.parse(text)


# =============================================================================
# OVERLAP
# =============================================================================

def overlaps(a: YearRange, b: YearRange) -> bool:
    """Closed-interval intersection test."""
    return a.start <= b.end and a.end >= b.start


def resolve_overlapping(target: YearRangeLike, candidates: Iterable[YearRangeLike]) -> List[YearRange]:
    """
    Return every candidate range that overlaps target.

    Candidates keep their original order. An empty list means no match.
    String candidates that do not parse are skipped.

    Args:
        target: Range to test against
        candidates: Canonical ranges for one make/model

    Returns:
        List of overlapping candidate ranges
    """
    target = coerce_year_range(target)

    found = []
    for cand in candidates:
        try:
            rng = coerce_year_range(cand)
        except InvalidYearRange:
            logger.debug("Skipping unparseable candidate range %r", cand)
            continue
        if overlaps(target, rng):
            found.append(rng)

    return found


def find_year_ranges(text: Optional[str]) -> List[YearRange]:
    """
    Scan text for year expressions and parse each one.

    Inverted ranges such as "2010-2004" are skipped.
    """
    ranges = []
    for match in YEAR_PATTERN.finditer(text or ''):
        start = int(match.group(1))
        end = int(match.group(2) or match.group(1))
        if start > end:
            logger.debug("Skipping inverted year range %r", match.group(0))
            continue
        ranges.append(YearRange(start, end))
    return ranges
