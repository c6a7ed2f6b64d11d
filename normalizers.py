# -*- coding: utf-8 -*-
"""
Normalizers

Text normalization shared by the extractor and the custom field merger.
"""

import re
from typing import List, Optional


# =============================================================================
# LINE SPLITTING
# =============================================================================

# Supplier lists separate vehicles with newlines or "*" bullets
LINE_SEPARATOR_RE = re.compile(r'[\n\r*]+')
BULLET_SPACE_RE = re.compile(r'[*\s]+')


def split_lines(text: Optional[str]) -> List[str]:
    """
    Split pasted text into non-empty lines.

    Args:
        text: Raw text (newline or "*" separated)

    Returns:
        Trimmed, non-empty lines in their original order
    """
    if not text:
        return []

    lines = []
    for part in LINE_SEPARATOR_RE.split(text):
        part = part.strip()
        if part:
            lines.append(part)
    return lines


def clean_line(line: Optional[str]) -> str:
    """Collapse runs of whitespace and stray bullets into single spaces."""
    if not line:
        return ''
    return BULLET_SPACE_RE.sub(' ', line).strip()


# =============================================================================
# FIELD VALUES AND LABELS
# =============================================================================

def split_value_lines(value: Optional[str]) -> List[str]:
    """Split a custom field value by line, dropping blanks."""
    if not value:
        return []
    return [v.strip() for v in value.splitlines() if v.strip()]


def dedupe_preserving_order(items: List[str]) -> List[str]:
    seen = set()
    unique = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        unique.append(item)
    return unique


def normalize_label(label: Optional[str]) -> str:
    """
    Normalize a custom field label for display and comparison.

    Strips a trailing colon and collapses whitespace, e.g.
    "  Works on the following models: " -> "WORKS ON THE FOLLOWING MODELS".
    """
    if not label:
        return ''
    label = re.sub(r'\s+', ' ', label).strip()
    label = label.rstrip(':').strip()
    return label.upper()
