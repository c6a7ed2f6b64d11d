# -*- coding: utf-8 -*-
"""
Custom Field Buckets

Maps heterogeneous supplier labels ("Fits Models", "Compatible vehicles",
"Works on the following models") onto one canonical label per bucket so
repeated pastes converge into a single field.
"""

from typing import Callable, List, Optional, Tuple

from normalizers import normalize_label


# =============================================================================
# BUCKET CONSTANTS
# =============================================================================

class FieldBucket:
    MODELS = 'WORKS ON THE FOLLOWING MODELS'
    BUTTONS = 'BUTTONS'
    OEM_PARTS = 'OEM PART #(S)'


# Label keywords (case-insensitive substring match)
BUTTON_KEYWORDS = frozenset([
    'button',
])

OEM_KEYWORDS = frozenset([
    'oem',
    'part #',
    'part#',
    'part number',
    'part no',
])

MODEL_KEYWORDS = frozenset([
    'model',
    'vehicle',
    'works on',
    'fits',
    'compatib',
])


def _mentions(keywords) -> Callable[[str], bool]:
    def predicate(label_lower: str) -> bool:
        return any(kw in label_lower for kw in keywords)
    return predicate


# Evaluated top to bottom, first match wins. "OEM part # for models" is an
# OEM list, so OEM must come before MODELS.
BUCKET_RULES: List[Tuple[Callable[[str], bool], str]] = [
    (_mentions(BUTTON_KEYWORDS), FieldBucket.BUTTONS),
    (_mentions(OEM_KEYWORDS), FieldBucket.OEM_PARTS),
    (_mentions(MODEL_KEYWORDS), FieldBucket.MODELS),
]


# =============================================================================
# CLASSIFICATION
# =============================================================================

def classify_label(label: Optional[str]) -> Optional[str]:
    """
    Return the bucket a label belongs to, or None for free-form labels.

    Args:
        label: Raw label text

    Returns:
        FieldBucket constant or None
    """
    if not label:
        return None

    label_lower = label.lower()
    for predicate, bucket in BUCKET_RULES:
        if predicate(label_lower):
            return bucket
    return None


def bucket_label(label: Optional[str]) -> str:
    """Canonical label: the bucket name, or the normalized label itself."""
    return classify_label(label) or normalize_label(label)
