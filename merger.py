# -*- coding: utf-8 -*-
"""
Compatibility Merger

Merges newly extracted compatibility entries and pasted custom fields into
the lists being edited, without duplicating anything already there.
"""

import logging
from typing import Iterable, List, Optional

from compatibility import CompatibilityEntry, CustomField
from field_buckets import bucket_label
from normalizers import dedupe_preserving_order, split_lines, split_value_lines

logger = logging.getLogger(__name__)


# =============================================================================
# COMPATIBILITY ENTRIES
# =============================================================================

def merge_entries(
    existing: Iterable[CompatibilityEntry],
    incoming: Iterable[CompatibilityEntry]
) -> List[CompatibilityEntry]:
    """
    Append incoming entries whose (make, model, year range) is not present yet.

    Existing order is kept, new entries follow in incoming order. Merging the
    same incoming list twice changes nothing the second time.
    """
    merged = list(existing)
    seen = {e.key() for e in merged}

    added = 0
    for entry in incoming:
        if entry.key() in seen:
            continue
        seen.add(entry.key())
        merged.append(entry)
        added += 1

    logger.debug("Merged %d new compatibility entries (%d total)", added, len(merged))
    return merged


# =============================================================================
# CUSTOM FIELDS
# =============================================================================

def merge_custom_field(
    existing: Iterable[CustomField],
    label: str,
    values: Iterable[str]
) -> List[CustomField]:
    """
    Merge values into the field matching label, creating it if missing.

    Both the new label and the existing labels are mapped to their bucket
    before comparing, case-insensitively, so "Compatible vehicles" and
    "Works on the following models" land in the same field. The existing
    field keeps its label.
    Old and new values are split by line and deduplicated in first-seen order.

    Args:
        existing: Current custom fields (not modified)
        label: Source label, e.g. "Fits the following vehicles"
        values: New value strings (each may hold several lines)

    Returns:
        New list of custom fields
    """
    target = bucket_label(label)
    new_lines = []
    for value in values:
        new_lines.extend(split_value_lines(value))

    merged = []
    found = False
    for custom_field in existing:
        if not found and bucket_label(custom_field.label).lower() == target.lower():
            lines = dedupe_preserving_order(split_value_lines(custom_field.value) + new_lines)
            merged.append(CustomField(custom_field.label, '\n'.join(lines)))
            found = True
        else:
            merged.append(custom_field)

    if not found:
        merged.append(CustomField(target, '\n'.join(dedupe_preserving_order(new_lines))))

    return merged


def merge_custom_fields(
    existing: Iterable[CustomField],
    incoming: Iterable[CustomField]
) -> List[CustomField]:
    """Merge each incoming field into existing, in order."""
    merged = list(existing)
    for custom_field in incoming:
        if not custom_field.label:
            continue
        merged = merge_custom_field(merged, custom_field.label, [custom_field.value])
    return merged


# =============================================================================
# SPECIFICATION TABLE
# =============================================================================

def parse_spec_table(text: Optional[str]) -> List[CustomField]:
    """
    Parse a pasted specification table into custom fields.

    A line containing ":" starts a field (label before the first colon,
    inline value after it). Lines without a colon continue the open field.
    Lines before the first label are ignored.

        WORKS ON THE FOLLOWING MODELS:
        BMW 3-Series 2000-2007*
        BUTTONS:
        Lock
        FREQUENCY: 315 MHz
    """
    fields = []
    label = None
    value_lines: List[str] = []

    for raw in (text or '').splitlines():
        line = raw.strip()
        if not line:
            continue

        if ':' in line:
            if label is not None:
                fields.append(CustomField(label, '\n'.join(value_lines).strip()))
            label, _, inline = line.partition(':')
            label = label.strip()
            value_lines = [inline.strip()] if inline.strip() else []
        elif label is not None:
            value_lines.append(line)

    if label is not None:
        fields.append(CustomField(label, '\n'.join(value_lines).strip()))

    return fields


def generate_description(fields: Iterable[CustomField]) -> str:
    """
    Render custom fields as product description text.

    Each field becomes "LABEL:" followed by one indented line per item.
    """
    lines = []
    for custom_field in fields:
        if not custom_field.label or not custom_field.value:
            continue
        lines.append(f"{custom_field.label}:")
        for item in split_lines(custom_field.value):
            lines.append(f"  {item}")
    return '\n'.join(lines)
