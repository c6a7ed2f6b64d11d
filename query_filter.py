# -*- coding: utf-8 -*-
"""
Compatibility Query Filter

Decides whether a product's compatibility entries satisfy a make / model /
year selection from the filter page. The most specific part of the query
that is set decides the tier:

- make only:           any entry with the same make
- make + model:        same make, and same model or a universal-model entry
- make + model + year: as above, and a universal-year entry or an
                       overlapping year range

A year without a model matches nothing. Year comparison is always numeric
interval overlap.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from compatibility import CompatibilityEntry, from_selected_compatibility
from year_range import InvalidYearRange, YearRange, overlaps, parse_optional

logger = logging.getLogger(__name__)


# =============================================================================
# QUERY
# =============================================================================

@dataclass(frozen=True)
class CompatibilityQuery:
    make: Optional[str] = None
    model: Optional[str] = None
    year_range: Optional[YearRange] = None

    @classmethod
    def from_params(
        cls,
        make: Optional[str] = None,
        model: Optional[str] = None,
        year_range: Optional[str] = None
    ) -> 'CompatibilityQuery':
        """
        Build a query from URL parameters. Blank strings mean "not set".

        Raises:
            InvalidYearRange: if year_range is set but malformed
        """
        return cls(
            make=(make or '').strip() or None,
            model=(model or '').strip() or None,
            year_range=parse_optional(year_range),
        )

    @property
    def is_empty(self) -> bool:
        return not self.make


# =============================================================================
# MATCHING
# =============================================================================

def entry_matches(query: CompatibilityQuery, entry: CompatibilityEntry) -> bool:
    """Test a single entry against the query tiers."""
    if not query.make or entry.make != query.make:
        return False

    # Year is only a tier together with a model
    if query.year_range is not None and not query.model:
        return False

    if query.model and not (entry.is_universal_model or entry.model == query.model):
        return False

    if query.year_range is not None and not entry.is_universal_year:
        if not overlaps(query.year_range, entry.year_range):
            return False

    return True


def matches(query: CompatibilityQuery, entries: Iterable[CompatibilityEntry]) -> bool:
    """True if any entry satisfies the query. An empty query matches nothing."""
    if query.is_empty:
        return False
    return any(entry_matches(query, e) for e in entries)


def record_matches(query: CompatibilityQuery, record: Mapping[str, Any]) -> bool:
    """
    Test one stored selectedCompatibility record.

    A record whose years do not parse still answers make and make + model
    queries, but never matches a query with a year range.
    """
    try:
        entry = from_selected_compatibility(record)
    except InvalidYearRange as e:
        if query.year_range is not None:
            logger.warning("Stored compatibility record %r has bad years: %s", record, e)
            return False
        entry = CompatibilityEntry(
            make=str(record.get('brand') or '').strip(),
            model=str(record.get('model') or '').strip(),
        )
    return entry_matches(query, entry)


def product_matches(query: CompatibilityQuery, product: Mapping[str, Any]) -> bool:
    """Test a stored product record by its selectedCompatibility list."""
    records = product.get('selectedCompatibility')
    if not isinstance(records, list) or query.is_empty:
        return False
    return any(record_matches(query, rec) for rec in records if isinstance(rec, Mapping))


def filter_products(query: CompatibilityQuery, products: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """
    Keep the products compatible with query.

    Args:
        query: Make / model / year selection
        products: Stored product records

    Returns:
        Matching products in their original order
    """
    if query.is_empty:
        return []

    result = [dict(p) for p in products if product_matches(query, p)]
    logger.debug("Filter %s matched %d products", query, len(result))
    return result
