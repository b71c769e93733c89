# app/utils/labels.py
"""
Helpers for the free-text labels guests and room blocks carry
(floor, wing, group, guest name).

Labels are cleaned once when read and compared through a case-insensitive key,
so "East Wing", " east  wing" and "EAST WING" all name the same wing.
"""

import re
from typing import Optional

_WHITESPACE = re.compile(r"\s+")


def clean_label(value: Optional[str]) -> Optional[str]:
    """Trim and collapse whitespace. Empty or missing labels come back as None."""
    if value is None:
        return None
    cleaned = _WHITESPACE.sub(" ", str(value)).strip()
    return cleaned or None


def label_key(value: Optional[str]) -> Optional[str]:
    """Comparison key for a label: cleaned and casefolded."""
    cleaned = clean_label(value)
    return cleaned.casefold() if cleaned else None
