"""
Natural-key canonicalization.

Two inputs that differ only by case or surrounding whitespace normalize to the
same key. Composite keys normalize each part independently and join them with
KEY_DELIMITER, which is rejected inside any part.
"""

from __future__ import annotations

from typing import Any

# ASCII unit separator.
KEY_DELIMITER = "\x1f"


def normalize_key(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip().casefold()


def composite_key(*parts: Any) -> str:
    """
    Build a composite key, e.g. (sku, channel, country_code).

    Returns "" when any part is empty so callers can treat the record as keyless.
    """
    normalized = [normalize_key(p) for p in parts]
    if any(KEY_DELIMITER in p for p in normalized):
        raise ValueError("Key part contains the reserved delimiter.")
    if not normalized or any(not p for p in normalized):
        return ""
    return KEY_DELIMITER.join(normalized)


def clean_text(value: Any) -> str | None:
    """
    Trim a display value; blank strings become None.
    """
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def country_code(value: Any) -> str | None:
    """
    Canonical country scope as stored: trimmed, upper-case ("us " -> "US").
    """
    text = clean_text(value)
    return text.upper() if text else None
