"""Per-field comparison strategies.

A field can be scored with a stricter or more specialized strategy than
the default semantic comparator, e.g. exact numbers for amounts or
order-insensitive lists for multi-select fields.

This module provides:
1. FieldCompareConfig - Which strategy a field uses
2. StrategyResult - Verdict of a strategy, with optional details
3. compare_with_config() - Guarded dispatch to the configured strategy
4. default_compare_type() - Strategy implied by a template field type
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import dataclass
from typing import Callable, Literal

from extractbench.config import EvaluationConfig
from extractbench.dates import parse_date
from extractbench.exceptions import ConfigurationError
from extractbench.matching import (
    Confidence,
    MatchClassification,
    compare_values,
    is_partial_match,
)
from extractbench.normalize import (
    is_blank,
    is_excluded_state,
    is_not_present,
    normalize_value,
)

logger = logging.getLogger(__name__)

CompareType = Literal[
    "semantic",
    "exact-string",
    "near-exact-string",
    "exact-number",
    "date-exact",
    "boolean",
    "list-unordered",
    "list-ordered",
]

COMPARE_TYPES: tuple[str, ...] = (
    "semantic",
    "exact-string",
    "near-exact-string",
    "exact-number",
    "date-exact",
    "boolean",
    "list-unordered",
    "list-ordered",
)

DEFAULT_COMPARE_TYPE_MAP: dict[str, CompareType] = {
    "string": "near-exact-string",
    "float": "exact-number",
    "number": "exact-number",
    "date": "date-exact",
    "enum": "exact-string",
    "multiSelect": "list-unordered",
}

TRUE_VALUES = frozenset({"true", "yes", "y", "1", "checked", "✓"})
FALSE_VALUES = frozenset({"false", "no", "n", "0", "unchecked"})

_CURRENCY_RE = re.compile(r"[$€£¥,\s]")


@dataclass(frozen=True)
class FieldCompareConfig:
    """Comparison strategy configured for one field."""

    field_key: str
    field_name: str = ""
    compare_type: CompareType = "semantic"
    separator: str | None = None  # List strategies only; auto-detected if None

    def __post_init__(self):
        if self.compare_type not in COMPARE_TYPES:
            raise ConfigurationError(
                f"compare_type must be one of {COMPARE_TYPES}, got {self.compare_type!r}"
            )


@dataclass(frozen=True)
class StrategyResult:
    """Verdict of a configured comparison strategy."""

    is_match: bool
    compare_type: CompareType
    match_classification: MatchClassification = "none"
    confidence: Confidence = "high"
    details: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "is_match": self.is_match,
            "compare_type": self.compare_type,
            "match_classification": self.match_classification,
            "confidence": self.confidence,
            "details": self.details,
        }


def default_compare_type(field_type: str | None) -> CompareType:
    """Return the strategy implied by a template field type."""
    return DEFAULT_COMPARE_TYPE_MAP.get(field_type or "", "semantic")


def compare_with_config(
    predicted: str | None,
    ground_truth: str | None,
    compare_config: FieldCompareConfig,
    config: EvaluationConfig | None = None,
) -> StrategyResult:
    """Compare two values with the strategy configured for their field.

    Pending/Error values, the "Not Present" sentinel and blank values are
    handled before dispatch exactly as compare_values() handles them,
    except that boolean fields read "Not Present" as "No".
    """
    if config is None:
        config = EvaluationConfig()
    compare_type = compare_config.compare_type

    if compare_type == "semantic":
        result = compare_values(predicted, ground_truth, config)
        return StrategyResult(
            is_match=result.is_match,
            compare_type="semantic",
            match_classification=result.match_classification,
            confidence=result.confidence,
        )

    if is_excluded_state(predicted) or is_excluded_state(ground_truth):
        return StrategyResult(False, compare_type, details="Skipped pending/error state")

    if compare_type == "boolean":
        return _compare_boolean(
            "No" if is_not_present(predicted) else predicted,
            "No" if is_not_present(ground_truth) else ground_truth,
        )

    predicted_absent = is_not_present(predicted)
    ground_truth_absent = is_not_present(ground_truth)
    if predicted_absent and ground_truth_absent:
        return StrategyResult(True, compare_type, "exact")
    if predicted_absent or ground_truth_absent or is_blank(predicted) or is_blank(ground_truth):
        return StrategyResult(False, compare_type)

    strategy = _STRATEGIES[compare_type]
    return strategy(str(predicted), str(ground_truth), compare_config, config)


def _compare_exact_string(
    predicted: str, ground_truth: str, compare_config: FieldCompareConfig, config: EvaluationConfig
) -> StrategyResult:
    if predicted == ground_truth:
        return StrategyResult(True, "exact-string", "exact")
    return StrategyResult(False, "exact-string")


def _compare_near_exact_string(
    predicted: str, ground_truth: str, compare_config: FieldCompareConfig, config: EvaluationConfig
) -> StrategyResult:
    normalized_predicted = normalize_value(predicted)
    normalized_ground_truth = normalize_value(ground_truth)
    if normalized_predicted and normalized_predicted == normalized_ground_truth:
        return StrategyResult(True, "near-exact-string", "normalized")
    if is_partial_match(normalized_predicted, normalized_ground_truth, config):
        if len(normalized_predicted) > len(normalized_ground_truth):
            details = "Ground truth is contained in extracted value"
        else:
            details = "Extracted value is contained in ground truth"
        return StrategyResult(True, "near-exact-string", "partial", "medium", details)
    return StrategyResult(False, "near-exact-string")


def parse_number(value: str) -> float | None:
    """Parse a number, ignoring currency symbols, commas and a trailing %."""
    cleaned = _CURRENCY_RE.sub("", value).rstrip("%")
    try:
        return float(cleaned)
    except ValueError:
        return None


def _compare_exact_number(
    predicted: str, ground_truth: str, compare_config: FieldCompareConfig, config: EvaluationConfig
) -> StrategyResult:
    predicted_number = parse_number(predicted)
    ground_truth_number = parse_number(ground_truth)
    if predicted_number is None or ground_truth_number is None:
        return StrategyResult(False, "exact-number", details="Failed to parse as number")
    if predicted_number != ground_truth_number:
        return StrategyResult(False, "exact-number")
    same_format = predicted.strip() == ground_truth.strip()
    return StrategyResult(True, "exact-number", "exact" if same_format else "different-format")


def _compare_date_exact(
    predicted: str, ground_truth: str, compare_config: FieldCompareConfig, config: EvaluationConfig
) -> StrategyResult:
    predicted_date = parse_date(predicted, config)
    ground_truth_date = parse_date(ground_truth, config)
    if predicted_date is None or ground_truth_date is None:
        return StrategyResult(False, "date-exact", details="Failed to parse as date")
    if predicted_date != ground_truth_date:
        return StrategyResult(False, "date-exact")
    same_format = predicted.strip().lower() == ground_truth.strip().lower()
    return StrategyResult(True, "date-exact", "exact" if same_format else "different-format")


def parse_boolean(value: str | None) -> bool | None:
    """Parse yes/no style values; None if the value is not boolean-like."""
    if not value:
        return None
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    return None


def _compare_boolean(predicted: str | None, ground_truth: str | None) -> StrategyResult:
    predicted_bool = parse_boolean(predicted)
    ground_truth_bool = parse_boolean(ground_truth)
    if predicted_bool is None or ground_truth_bool is None:
        return StrategyResult(False, "boolean", details="Failed to parse as boolean")
    if predicted_bool != ground_truth_bool:
        return StrategyResult(False, "boolean")
    same_format = str(predicted).strip().lower() == str(ground_truth).strip().lower()
    return StrategyResult(True, "boolean", "exact" if same_format else "different-format")


def detect_separator(predicted: str, ground_truth: str) -> str:
    """Pick the list separator: pipe if either side uses one, else comma."""
    if "|" in predicted or "|" in ground_truth:
        return "|"
    return ","


def parse_list(value: str, separator: str) -> list[str]:
    """Split a list value into normalized, non-empty items."""
    items = (normalize_value(item) for item in value.split(separator))
    return [item for item in items if item]


def _items_overlap(a: str, b: str) -> bool:
    return a == b or a in b or b in a


def _compare_list_unordered(
    predicted: str, ground_truth: str, compare_config: FieldCompareConfig, config: EvaluationConfig
) -> StrategyResult:
    separator = compare_config.separator or detect_separator(predicted, ground_truth)
    predicted_items = parse_list(predicted, separator)
    ground_truth_items = parse_list(ground_truth, separator)

    if predicted_items and Counter(predicted_items) == Counter(ground_truth_items):
        if predicted_items != ground_truth_items:
            return StrategyResult(
                True,
                "list-unordered",
                "different-format",
                details="Same items in different order",
            )
        return StrategyResult(True, "list-unordered", "normalized")

    found_ground_truth = sum(
        any(_items_overlap(p, g) for p in predicted_items) for g in ground_truth_items
    )
    found_predicted = sum(
        any(_items_overlap(p, g) for g in ground_truth_items) for p in predicted_items
    )
    ground_truth_share = found_ground_truth / len(ground_truth_items) if ground_truth_items else 0.0
    predicted_share = found_predicted / len(predicted_items) if predicted_items else 0.0

    if ground_truth_share >= 0.5 or predicted_share >= 0.5:
        if ground_truth_share == 1.0 and predicted_share == 1.0:
            return StrategyResult(
                True,
                "list-unordered",
                "normalized",
                details="All items match with possible variations",
            )
        return StrategyResult(
            True,
            "list-unordered",
            "partial",
            "medium",
            f"{found_ground_truth}/{len(ground_truth_items)} ground truth items found",
        )
    return StrategyResult(False, "list-unordered")


def _compare_list_ordered(
    predicted: str, ground_truth: str, compare_config: FieldCompareConfig, config: EvaluationConfig
) -> StrategyResult:
    separator = compare_config.separator or detect_separator(predicted, ground_truth)
    predicted_items = parse_list(predicted, separator)
    ground_truth_items = parse_list(ground_truth, separator)

    if predicted_items and predicted_items == ground_truth_items:
        return StrategyResult(True, "list-ordered", "normalized")
    if predicted_items and Counter(predicted_items) == Counter(ground_truth_items):
        return StrategyResult(
            False,
            "list-ordered",
            "different-format",
            details="Same items but in different order",
        )
    return StrategyResult(False, "list-ordered")


_Strategy = Callable[[str, str, FieldCompareConfig, EvaluationConfig], StrategyResult]

_STRATEGIES: dict[str, _Strategy] = {
    "exact-string": _compare_exact_string,
    "near-exact-string": _compare_near_exact_string,
    "exact-number": _compare_exact_number,
    "date-exact": _compare_date_exact,
    "list-unordered": _compare_list_unordered,
    "list-ordered": _compare_list_ordered,
}


def compare_configs_from_fields(
    fields: list[tuple[str, str, str | None]],
    overrides: dict[str, str] | None = None,
) -> dict[str, FieldCompareConfig]:
    """Build compare configs from (key, name, type) triples.

    Args:
        fields: Field key, display name and template type
        overrides: Optional field key -> compare type, taking precedence
            over the type-derived default

    Returns:
        Mapping of field key to FieldCompareConfig
    """
    overrides = overrides or {}
    configs: dict[str, FieldCompareConfig] = {}
    for key, name, field_type in fields:
        compare_type = overrides.get(key) or default_compare_type(field_type)
        if compare_type not in COMPARE_TYPES:
            logger.warning(
                "Unknown compare type %r for field %s, using semantic comparison",
                compare_type,
                key,
            )
            compare_type = "semantic"
        configs[key] = FieldCompareConfig(
            field_key=key,
            field_name=name,
            compare_type=compare_type,  # type: ignore[arg-type]
        )
    return configs


