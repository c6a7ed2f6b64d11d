# -*- coding: utf-8 -*-
"""
Vehicle Pattern Extractor

Turns pasted supplier text ("BMW 3-Series 2000-2007*BMW X3 2004-2010")
into structured compatibility entries backed by the catalog.

Matching per line:
- Make: case-insensitive containment of the catalog make in the line
- Model: case-insensitive containment of each model of a matched make
- Years: every "YYYY" / "YYYY-YYYY" in the line, resolved against the
  model's canonical ranges (one entry per overlapping catalog range)

Recall is preferred over precision: a line that contains several makes or
models records all of them, and the editor reviews the result.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from compatibility import CompatibilityCatalog, CompatibilityEntry, CustomField
from normalizers import clean_line, split_lines
from year_range import find_year_ranges, resolve_overlapping

logger = logging.getLogger(__name__)


# =============================================================================
# EXTRACTION REPORT
# =============================================================================

@dataclass
class ExtractionReport:
    """Entries found plus a detection log the editor can read."""
    entries: List[CompatibilityEntry] = field(default_factory=list)
    log: List[str] = field(default_factory=list)
    lines_scanned: int = 0
    unmatched_years: int = 0

    def add(self, entry: CompatibilityEntry) -> bool:
        """Append entry unless an identical one is already present."""
        if entry in self.entries:
            return False
        self.entries.append(entry)
        return True


# =============================================================================
# EXTRACTOR CLASS
# =============================================================================

class PatternExtractor:
    """
    Free-text vehicle extractor bound to one catalog.

    The catalog is lowercased once here so repeated extractions (one per
    custom field) do not redo it.
    """

    def __init__(self, catalog: Optional[CompatibilityCatalog]):
        self.catalog = catalog or CompatibilityCatalog.empty()

        # (make, make_lower, [(model, model_lower), ...]) in catalog order
        self._index: List[Tuple[str, str, List[Tuple[str, str]]]] = []
        for make, models in self.catalog.items():
            self._index.append((
                make,
                make.lower(),
                [(model, model.lower()) for model in models],
            ))

    def find_vehicles(self, line: str) -> List[Tuple[str, str]]:
        """
        Find every (make, model) pair contained in a line.

        Args:
            line: Cleaned input line

        Returns:
            List of (make, model) pairs in catalog order
        """
        line_lower = line.lower()
        found = []
        for make, make_lower, models in self._index:
            if make_lower not in line_lower:
                continue
            for model, model_lower in models:
                if model_lower in line_lower:
                    found.append((make, model))
        return found

    def extract_line(self, line: str, report: ExtractionReport) -> None:
        """Scan one line and add its entries to report."""
        clean = clean_line(line)
        report.lines_scanned += 1
        report.log.append(f'Processing line: "{line}"')

        vehicles = self.find_vehicles(clean)
        if not vehicles:
            return

        years = find_year_ranges(clean)
        for make, model in vehicles:
            available = self.catalog.year_ranges(make, model)
            for target in years:
                ranges = resolve_overlapping(target, available)

                if not ranges:
                    report.unmatched_years += 1
                    report.log.append(
                        f'No overlapping ranges found for "{target}" in available ranges: {", ".join(available)}'
                    )
                    logger.info("No catalog range for %s %s overlaps %s", make, model, target)
                    continue

                report.log.append(
                    f'Found {len(ranges)} overlapping range(s) for "{target}": '
                    f'{", ".join(str(r) for r in ranges)}'
                )
                for rng in ranges:
                    if report.add(CompatibilityEntry(make, model, rng)):
                        report.log.append(f'Detected: {make} {model} ({rng})')

    def extract_report(self, text: Optional[str]) -> ExtractionReport:
        report = ExtractionReport()
        for line in split_lines(text):
            self.extract_line(line, report)
        return report

    def extract(self, text: Optional[str]) -> List[CompatibilityEntry]:
        return self.extract_report(text).entries

    def extract_fields(self, fields: Iterable[CustomField]) -> ExtractionReport:
        """
        Scan every custom field value (labels are ignored).

        Returns one report with the deduplicated union of all fields.
        """
        report = ExtractionReport()
        for custom_field in fields:
            if not custom_field.label or not custom_field.value:
                continue
            report.log.append(f'Scanning field: "{custom_field.label}"')
            before = len(report.entries)
            for line in split_lines(custom_field.value):
                self.extract_line(line, report)
            if len(report.entries) == before:
                report.log.append(f'No vehicle patterns found in: "{custom_field.value}"')
        return report


# =============================================================================
# MODULE-LEVEL HELPERS
# =============================================================================

def extract(text: Optional[str], catalog: Optional[CompatibilityCatalog]) -> List[CompatibilityEntry]:
    """Extract compatibility entries from free text against catalog."""
    return PatternExtractor(catalog).extract(text)


def extract_from_fields(
    fields: Iterable[CustomField],
    catalog: Optional[CompatibilityCatalog]
) -> List[CompatibilityEntry]:
    """Extract compatibility entries from every custom field value."""
    return PatternExtractor(catalog).extract_fields(fields).entries

