"""Canonicalize raw extracted values for comparison.

This module provides:
1. normalize_value() - Case, punctuation and whitespace folding
2. is_not_present() / is_pending() / is_error() - Reserved state checks
3. is_excluded_state() - Values that never take part in scoring
"""

from __future__ import annotations

import re

from extractbench.constants import ERROR_PREFIX, NOT_PRESENT, PENDING_PREFIX

# Bracketed asides such as "sixty (60)" or "Acme [US]"
_BRACKETED_RE = re.compile(r"\([^)]*\)|\[[^\]]*\]|\{[^}]*\}")
# Anything that is not a word character or whitespace: commas, periods,
# quotes, currency symbols, percent signs, hyphens, apostrophes...
_PUNCTUATION_RE = re.compile(r"[^\w\s]")
_UNDERSCORE_RE = re.compile(r"_")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_value(value: str | None) -> str:
    """Normalize a value for format-tolerant comparison.

    Trims, lowercases, drops bracketed content, strips punctuation and
    collapses internal whitespace. Punctuation is removed rather than
    replaced, so "Non-Disclosure" becomes "nondisclosure" and
    "$1,000,000" becomes "1000000".

    Args:
        value: Raw extracted or ground truth value

    Returns:
        Normalized string ("" for None or blank input)
    """
    if not value:
        return ""
    text = str(value).strip().lower()
    text = _BRACKETED_RE.sub(" ", text)
    text = _PUNCTUATION_RE.sub("", text)
    text = _UNDERSCORE_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def is_blank(value: str | None) -> bool:
    """Return True for None, empty and whitespace-only values."""
    return value is None or not str(value).strip()


def is_not_present(value: str | None) -> bool:
    """Return True if value is the "Not Present" sentinel.

    Blank strings are not the sentinel.
    """
    return value == NOT_PRESENT


def is_pending(value: str | None) -> bool:
    """Return True if the extraction for this cell has not finished."""
    return value is not None and str(value).startswith(PENDING_PREFIX)


def is_error(value: str | None) -> bool:
    """Return True if the extraction for this cell failed."""
    return value is not None and str(value).startswith(ERROR_PREFIX)


def is_excluded_state(value: str | None) -> bool:
    """Return True for pending or error values, which are never scored."""
    return is_pending(value) or is_error(value)
