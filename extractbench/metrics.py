"""Compute field-level metrics from predicted and ground truth values.

This module provides:
1. ConfusionDebugInfo - Confusion counts plus sample pairs per bucket
2. MetricsResult - Accuracy, precision, recall and F1 for one field/model
3. accumulate_confusion() - Fold parallel value arrays into counts
4. calculate_field_metrics() / calculate_field_metrics_with_debug()

A wrong non-empty prediction is charged twice: once as a false positive
(the model asserted an incorrect value) and once as a false negative
(the model failed to produce the correct value). TP + FP + FN + TN can
therefore exceed the number of scored pairs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from extractbench.compare_types import FieldCompareConfig, compare_with_config
from extractbench.config import EvaluationConfig
from extractbench.constants import NOT_PRESENT
from extractbench.exceptions import LengthMismatchError
from extractbench.matching import compare_values
from extractbench.normalize import is_blank, is_excluded_state, is_not_present

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExamplePair:
    """A predicted/ground truth pair kept for debugging."""

    predicted: str
    actual: str

    def to_dict(self) -> dict:
        return {"predicted": self.predicted, "actual": self.actual}


@dataclass
class ConfusionExamples:
    """Bounded sample of pairs per confusion bucket."""

    limit: int = 5
    tp: list[ExamplePair] = field(default_factory=list)
    fp: list[ExamplePair] = field(default_factory=list)
    fn: list[ExamplePair] = field(default_factory=list)
    tn: list[ExamplePair] = field(default_factory=list)

    def add(self, bucket: str, predicted: str, actual: str) -> None:
        samples: list[ExamplePair] = getattr(self, bucket)
        if len(samples) < self.limit:
            samples.append(ExamplePair(predicted=predicted, actual=actual))

    def to_dict(self) -> dict:
        return {
            "tp": [p.to_dict() for p in self.tp],
            "fp": [p.to_dict() for p in self.fp],
            "fn": [p.to_dict() for p in self.fn],
            "tn": [p.to_dict() for p in self.tn],
        }


@dataclass
class ConfusionDebugInfo:
    """Confusion counts for one field/model pair."""

    true_positives: int = 0
    false_positives: int = 0
    false_negatives: int = 0
    true_negatives: int = 0

    # Pairs that were scored (Pending/Error predictions are skipped)
    total_valid_pairs: int = 0
    skipped_pairs: int = 0

    examples: ConfusionExamples = field(default_factory=ConfusionExamples)

    # Per-index verdicts when a compare config was used; None for skipped pairs
    comparisons: list | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        data = {
            "true_positives": self.true_positives,
            "false_positives": self.false_positives,
            "false_negatives": self.false_negatives,
            "true_negatives": self.true_negatives,
            "total_valid_pairs": self.total_valid_pairs,
            "skipped_pairs": self.skipped_pairs,
            "examples": self.examples.to_dict(),
        }
        if self.comparisons is not None:
            data["comparisons"] = [c.to_dict() if c is not None else None for c in self.comparisons]
        return data


@dataclass(frozen=True)
class MetricsResult:
    """Accuracy, precision, recall and F1 for one field/model pair."""

    accuracy: float = 0.0
    precision: float = 0.0
    recall: float = 0.0
    f1_score: float = 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "accuracy": round(self.accuracy, 4),
            "precision": round(self.precision, 4),
            "recall": round(self.recall, 4),
            "f1_score": round(self.f1_score, 4),
        }

    @classmethod
    def from_dict(cls, data: dict) -> MetricsResult:
        """Rebuild from a dictionary; ``f1`` is accepted for ``f1_score``."""
        return cls(
            accuracy=float(data.get("accuracy", 0.0)),
            precision=float(data.get("precision", 0.0)),
            recall=float(data.get("recall", 0.0)),
            f1_score=float(data.get("f1_score", data.get("f1", 0.0))),
        )


@dataclass(frozen=True)
class FieldMetrics(MetricsResult):
    """MetricsResult together with the confusion counts behind it."""

    debug: ConfusionDebugInfo = field(default_factory=ConfusionDebugInfo)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["debug"] = self.debug.to_dict()
        return data


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def _present_or_sentinel(value: str | None) -> str:
    """Blank cells carry no extracted value and score like "Not Present"."""
    return NOT_PRESENT if is_blank(value) else str(value)


def accumulate_confusion(
    predictions: Sequence[str | None],
    ground_truths: Sequence[str | None],
    config: EvaluationConfig | None = None,
    compare_config: FieldCompareConfig | None = None,
) -> ConfusionDebugInfo:
    """Fold parallel prediction/ground truth arrays into confusion counts.

    For each scored index:
    - GT "Not Present", prediction "Not Present" -> TN
    - GT "Not Present", prediction has a value -> FP
    - GT has a value, prediction "Not Present" -> FP and FN
    - GT has a value, prediction matches -> TP
    - GT has a value, prediction doesn't match -> FP and FN

    Pending/Error predictions are skipped and do not count toward
    total_valid_pairs. Blank values on either side count as "Not Present".

    Args:
        predictions: Values produced by one model, one per file
        ground_truths: Ground truth values, same order and length
        config: Evaluation configuration (thresholds, example bound)
        compare_config: Optional per-field compare strategy

    Returns:
        ConfusionDebugInfo

    Raises:
        LengthMismatchError: If the arrays differ in length
    """
    if len(predictions) != len(ground_truths):
        raise LengthMismatchError(len(predictions), len(ground_truths))
    if config is None:
        config = EvaluationConfig()

    info = ConfusionDebugInfo(examples=ConfusionExamples(limit=config.max_examples))
    if compare_config is not None:
        info.comparisons = []

    for raw_predicted, raw_actual in zip(predictions, ground_truths):
        if is_excluded_state(raw_predicted):
            if info.comparisons is not None:
                info.comparisons.append(None)
            continue

        predicted = _present_or_sentinel(raw_predicted)
        actual = _present_or_sentinel(raw_actual)
        info.total_valid_pairs += 1

        if compare_config is not None:
            verdict = compare_with_config(predicted, actual, compare_config, config)
            info.comparisons.append(verdict)
        else:
            verdict = None

        # Boolean fields read "Not Present" as "No", so the strategy decides
        if is_not_present(actual) and (compare_config is None or compare_config.compare_type != "boolean"):
            if is_not_present(predicted):
                info.true_negatives += 1
                info.examples.add("tn", predicted, actual)
            else:
                info.false_positives += 1
                info.examples.add("fp", predicted, actual)
            continue

        if verdict is not None:
            is_match = verdict.is_match
        elif is_not_present(predicted):
            is_match = False
        else:
            is_match = compare_values(predicted, actual, config).is_match

        if is_match:
            info.true_positives += 1
            info.examples.add("tp", predicted, actual)
        else:
            info.false_positives += 1
            info.false_negatives += 1
            info.examples.add("fp", predicted, actual)
            info.examples.add("fn", predicted, actual)

    info.skipped_pairs = len(predictions) - info.total_valid_pairs
    if info.skipped_pairs:
        logger.debug("Skipped %d pending/error predictions", info.skipped_pairs)
    return info


def metrics_from_counts(info: ConfusionDebugInfo) -> MetricsResult:
    """Derive accuracy, precision, recall and F1 from confusion counts.

    Any zero denominator yields 0 for that metric. All values are
    clamped to [0, 1].
    """
    tp, fp, fn, tn = (
        info.true_positives,
        info.false_positives,
        info.false_negatives,
        info.true_negatives,
    )
    accuracy = (tp + tn) / info.total_valid_pairs if info.total_valid_pairs else 0.0
    precision = tp / (tp + fp) if tp + fp else 0.0
    recall = tp / (tp + fn) if tp + fn else 0.0
    f1 = 2 * precision * recall / (precision + recall) if precision + recall else 0.0

    return MetricsResult(
        accuracy=_clamp(accuracy),
        precision=_clamp(precision),
        recall=_clamp(recall),
        f1_score=_clamp(f1),
    )


def calculate_field_metrics_with_debug(
    predictions: Sequence[str | None],
    ground_truths: Sequence[str | None],
    config: EvaluationConfig | None = None,
    compare_config: FieldCompareConfig | None = None,
) -> FieldMetrics:
    """Calculate field metrics and keep the confusion counts.

    Raises:
        LengthMismatchError: If the arrays differ in length
    """
    info = accumulate_confusion(predictions, ground_truths, config, compare_config)
    metrics = metrics_from_counts(info)

    logger.debug(
        "Confusion matrix TP=%d FP=%d FN=%d TN=%d over %d pairs: "
        "accuracy=%.3f precision=%.3f recall=%.3f f1=%.3f",
        info.true_positives,
        info.false_positives,
        info.false_negatives,
        info.true_negatives,
        info.total_valid_pairs,
        metrics.accuracy,
        metrics.precision,
        metrics.recall,
        metrics.f1_score,
    )

    return FieldMetrics(
        accuracy=metrics.accuracy,
        precision=metrics.precision,
        recall=metrics.recall,
        f1_score=metrics.f1_score,
        debug=info,
    )


def calculate_field_metrics(
    predictions: Sequence[str | None],
    ground_truths: Sequence[str | None],
    config: EvaluationConfig | None = None,
    compare_config: FieldCompareConfig | None = None,
) -> MetricsResult:
    """Calculate accuracy, precision, recall and F1 for one field/model.

    Example:
        >>> calculate_field_metrics(["Acme Corp"], ["Acme Corp"])
        MetricsResult(accuracy=1.0, precision=1.0, recall=1.0, f1_score=1.0)

    Raises:
        LengthMismatchError: If the arrays differ in length
    """
    return metrics_from_counts(accumulate_confusion(predictions, ground_truths, config, compare_config))
