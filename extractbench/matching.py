"""Classify a predicted value against its ground truth value.

This module provides:
1. ComparisonResult - The verdict for one (predicted, ground truth) pair
2. compare_values() - Format-tolerant comparison with ordered rules
3. is_partial_match() - Substring containment with length guards
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

from extractbench.config import EvaluationConfig
from extractbench.dates import compare_dates, is_date_like
from extractbench.normalize import (
    is_blank,
    is_excluded_state,
    is_not_present,
    normalize_value,
)

MatchType = Literal["exact", "normalized", "partial", "date_format", "none"]
MatchClassification = Literal["exact", "normalized", "partial", "different-format", "none"]
Confidence = Literal["high", "medium", "low"]

_CLASSIFICATIONS: dict[str, MatchClassification] = {
    "exact": "exact",
    "normalized": "normalized",
    "partial": "partial",
    "date_format": "different-format",
    "none": "none",
}


@dataclass(frozen=True)
class ComparisonResult:
    """Verdict for a single predicted/ground truth pair."""

    is_match: bool
    match_type: MatchType
    confidence: Confidence = "high"

    @property
    def match_classification(self) -> MatchClassification:
        """Reporting label; date_format is shown as different-format."""
        return _CLASSIFICATIONS[self.match_type]

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "is_match": self.is_match,
            "match_type": self.match_type,
            "match_classification": self.match_classification,
            "confidence": self.confidence,
        }


NO_MATCH = ComparisonResult(is_match=False, match_type="none")

# Normalized values made only of digits and spaces
_NUMERIC_RE = re.compile(r"^[\d ]+$")


def is_partial_match(
    normalized_a: str,
    normalized_b: str,
    config: EvaluationConfig | None = None,
) -> bool:
    """Return True if one normalized value contains the other.

    The shorter value must be at least ``partial_min_length`` characters
    and at least ``partial_min_ratio`` of the longer value's length, so
    stray fragments like "corp" never match "beta corp". Numbers are
    never partial matches: "1000" is not a fragment of "1000000".
    """
    if config is None:
        config = EvaluationConfig()
    if not normalized_a or not normalized_b:
        return False
    if _NUMERIC_RE.match(normalized_a) or _NUMERIC_RE.match(normalized_b):
        return False

    shorter, longer = sorted((normalized_a, normalized_b), key=len)
    if len(shorter) < config.partial_min_length:
        return False
    if len(shorter) / len(longer) < config.partial_min_ratio:
        return False
    return shorter in longer


def compare_values(
    predicted: str | None,
    ground_truth: str | None,
    config: EvaluationConfig | None = None,
) -> ComparisonResult:
    """Compare a predicted value to its ground truth.

    Rules are applied in order and the first one that applies wins:

    1. Pending/Error state on either side: no match
    2. "Not Present" sentinel: match only if both are the sentinel
    3. Blank value on either side: no match (two blanks do not match)
    4. Case-sensitive equality: exact
    5. Equality after normalize_value(): normalized
    6. Both date-like: date_format if same calendar date, else no match
    7. Containment after normalization: partial (medium confidence)
    8. Otherwise: no match

    Args:
        predicted: Value produced by a model
        ground_truth: Human-validated value
        config: Partial-match thresholds and date settings

    Returns:
        ComparisonResult
    """
    if config is None:
        config = EvaluationConfig()

    if is_excluded_state(predicted) or is_excluded_state(ground_truth):
        return NO_MATCH

    predicted_absent = is_not_present(predicted)
    ground_truth_absent = is_not_present(ground_truth)
    if predicted_absent and ground_truth_absent:
        return ComparisonResult(is_match=True, match_type="exact")
    if predicted_absent or ground_truth_absent:
        return NO_MATCH

    if is_blank(predicted) or is_blank(ground_truth):
        return NO_MATCH

    if predicted == ground_truth:
        return ComparisonResult(is_match=True, match_type="exact")

    normalized_predicted = normalize_value(predicted)
    normalized_ground_truth = normalize_value(ground_truth)
    # Values made only of punctuation normalize to nothing
    if not normalized_predicted or not normalized_ground_truth:
        return NO_MATCH

    if normalized_predicted == normalized_ground_truth:
        return ComparisonResult(is_match=True, match_type="normalized")

    if is_date_like(predicted) and is_date_like(ground_truth):
        if compare_dates(predicted, ground_truth, config):
            return ComparisonResult(is_match=True, match_type="date_format")
        return NO_MATCH

    if is_partial_match(normalized_predicted, normalized_ground_truth, config):
        return ComparisonResult(is_match=True, match_type="partial", confidence="medium")

    return NO_MATCH
