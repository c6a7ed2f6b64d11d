# -*- coding: utf-8 -*-
"""
Compatibility Data Model

Catalog, compatibility entries, custom fields, and the persisted
selectedCompatibility projection stored on product records.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from year_range import InvalidYearRange, YearRange, parse_optional

logger = logging.getLogger(__name__)


# =============================================================================
# CATALOG
# =============================================================================

class CompatibilityCatalog:
    """
    Read-only make -> model -> canonical year ranges lookup.

    Built once from the provider payload. Unparseable ranges are dropped at
    load time so every stored range is a valid "YYYY-YYYY" string.
    """

    def __init__(self, data: Optional[Mapping[str, Mapping[str, Iterable[str]]]] = None):
        makes = {}
        for make, models in (data or {}).items():
            if not make or not isinstance(models, Mapping):
                continue
            model_map = {}
            for model, ranges in models.items():
                if not model:
                    continue
                canonical = []
                for raw in ranges or []:
                    try:
                        rng = str(YearRange.parse(raw))
                    except InvalidYearRange:
                        logger.warning("Dropping invalid catalog range %r for %s %s", raw, make, model)
                        continue
                    if rng not in canonical:
                        canonical.append(rng)
                model_map[model] = tuple(canonical)
            makes[make] = MappingProxyType(model_map)
        self._makes = MappingProxyType(makes)

    @classmethod
    def empty(cls) -> 'CompatibilityCatalog':
        return cls({})

    def makes(self) -> List[str]:
        return list(self._makes.keys())

    def models(self, make: str) -> List[str]:
        return list(self._makes.get(make, {}).keys())

    def year_ranges(self, make: str, model: str) -> Tuple[str, ...]:
        return self._makes.get(make, {}).get(model, ())

    def items(self):
        return self._makes.items()

    def to_dict(self) -> Dict[str, Dict[str, List[str]]]:
        """Provider-shaped mapping, e.g. for populating dropdowns."""
        return {
            make: {model: list(ranges) for model, ranges in models.items()}
            for make, models in self._makes.items()
        }

    def model_count(self) -> int:
        return sum(len(models) for models in self._makes.values())

    def __len__(self) -> int:
        return len(self._makes)

    def __bool__(self) -> bool:
        return bool(self._makes)

    def __contains__(self, make) -> bool:
        return make in self._makes


# =============================================================================
# ENTRIES
# =============================================================================

@dataclass(frozen=True)
class CompatibilityEntry:
    """
    One vehicle a product fits.

    An empty model means every model of the make, a missing year range means
    every year.
    """
    make: str
    model: str = ''
    year_range: Optional[YearRange] = None

    def __post_init__(self):
        # None and "" both mean "all models"; store one form so equality holds
        if self.model is None:
            object.__setattr__(self, 'model', '')

    @property
    def is_universal_model(self) -> bool:
        return not self.model

    @property
    def is_universal_year(self) -> bool:
        return self.year_range is None

    def key(self) -> Tuple[str, str, Optional[YearRange]]:
        return (self.make, self.model, self.year_range)

    def label(self) -> str:
        parts = [self.make]
        if self.model:
            parts.append(self.model)
        if self.year_range:
            parts.append(str(self.year_range))
        return ' '.join(parts)


@dataclass(frozen=True)
class CustomField:
    label: str
    value: str = ''


# =============================================================================
# SELECTED COMPATIBILITY (persisted shape)
# =============================================================================

def to_selected_compatibility(entry: CompatibilityEntry, key_types: Optional[List[str]] = None) -> Dict[str, Any]:
    """Flatten an entry into the stored {brand, model, yearStart, yearEnd, keyTypes} record."""
    year_start = ''
    year_end = ''
    if entry.year_range is not None:
        year_start = str(entry.year_range.start)
        year_end = str(entry.year_range.end)

    return {
        'brand': entry.make,
        'model': entry.model or '',
        'yearStart': year_start,
        'yearEnd': year_end,
        'keyTypes': list(key_types or []),
    }


def from_selected_compatibility(record: Mapping[str, Any]) -> CompatibilityEntry:
    """
    Rebuild an entry from a stored record.

    Raises:
        InvalidYearRange: if the stored years do not form a valid range
    """
    year_start = str(record.get('yearStart') or '').strip()
    year_end = str(record.get('yearEnd') or '').strip()

    year_range = None
    if year_start:
        year_range = parse_optional(f"{year_start}-{year_end}" if year_end else year_start)

    return CompatibilityEntry(
        make=str(record.get('brand') or '').strip(),
        model=str(record.get('model') or '').strip(),
        year_range=year_range,
    )


def serialize_entries(entries: Iterable[CompatibilityEntry]) -> List[Dict[str, Any]]:
    return [to_selected_compatibility(e) for e in entries]


def deserialize_entries(records: Optional[Iterable[Mapping[str, Any]]]) -> List[CompatibilityEntry]:
    """Rebuild entries from stored records, skipping ones with bad year data."""
    entries = []
    for rec in records or []:
        if not isinstance(rec, Mapping):
            continue
        try:
            entry = from_selected_compatibility(rec)
        except InvalidYearRange as e:
            logger.warning("Skipping stored compatibility record %r: %s", rec, e)
            continue
        if entry.make:
            entries.append(entry)
    return entries
