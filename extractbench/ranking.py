"""Aggregate per-field metrics into ranked model summaries.

This module provides:
1. MetricsTable - Field key -> model -> MetricsResult, with a MISSING sentinel
2. calculate_model_summaries() - Macro-averaged overall metrics per model
3. determine_field_winners() - Mark the best model(s) for every field
4. assign_ranks() - Stable, deterministic ordering of the summaries

Summaries are fresh objects on every call; winners and ranks are
written onto them in place.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field

from extractbench.config import FieldSettings, parse_field_settings
from extractbench.metrics import MetricsResult

logger = logging.getLogger(__name__)


class _Missing:
    """Marker for a (field, model) pair with no recorded metrics."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()

ZERO_METRICS = MetricsResult()


class MetricsTable:
    """Two-level mapping of field key -> model name -> MetricsResult.

    Lookups of absent pairs return MISSING rather than raising, so
    callers decide how to degrade.

    Example:
        >>> table = MetricsTable()
        >>> table.set("vendor", "gpt-4", MetricsResult(accuracy=0.9))
        >>> table.get("vendor", "claude") is MISSING
        True
    """

    def __init__(self) -> None:
        self._data: dict[str, dict[str, MetricsResult]] = {}

    def set(self, field_key: str, model: str, metrics: MetricsResult) -> None:
        self._data.setdefault(field_key, {})[model] = metrics

    def get(self, field_key: str, model: str) -> MetricsResult | _Missing:
        return self._data.get(field_key, {}).get(model, MISSING)

    def fields(self) -> list[str]:
        return list(self._data)

    def models(self) -> list[str]:
        """Model names in first-seen order across all fields."""
        seen: dict[str, None] = {}
        for per_model in self._data.values():
            for model in per_model:
                seen.setdefault(model, None)
        return list(seen)

    def items(self) -> Iterator[tuple[str, str, MetricsResult]]:
        for field_key, per_model in self._data.items():
            for model, metrics in per_model.items():
                yield field_key, model, metrics

    def __len__(self) -> int:
        return sum(len(per_model) for per_model in self._data.values())

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, tuple) or len(key) != 2:
            return False
        return self.get(key[0], key[1]) is not MISSING

    def to_dict(self) -> dict:
        """Convert to nested dictionary for serialization."""
        return {
            field_key: {model: metrics.to_dict() for model, metrics in per_model.items()}
            for field_key, per_model in self._data.items()
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[str, object]]) -> MetricsTable:
        """Build a table from field -> model -> metrics (objects or dicts)."""
        table = cls()
        for field_key, per_model in data.items():
            for model, metrics in per_model.items():
                if not isinstance(metrics, MetricsResult):
                    metrics = MetricsResult.from_dict(metrics)  # type: ignore[arg-type]
                table.set(field_key, model, metrics)
        return table


@dataclass
class FieldPerformance:
    """One model's result on one field."""

    field_key: str
    field_name: str
    accuracy: float = 0.0
    precision: float = 0.0
    recall: float = 0.0
    f1: float = 0.0
    is_winner: bool = False
    is_shared_victory: bool = False
    is_included_in_metrics: bool = True

    def to_dict(self) -> dict:
        return {
            "field_key": self.field_key,
            "field_name": self.field_name,
            "accuracy": round(self.accuracy, 4),
            "precision": round(self.precision, 4),
            "recall": round(self.recall, 4),
            "f1": round(self.f1, 4),
            "is_winner": self.is_winner,
            "is_shared_victory": self.is_shared_victory,
            "is_included_in_metrics": self.is_included_in_metrics,
        }


@dataclass
class ModelSummary:
    """Overall standing of one model across all fields."""

    model_name: str
    overall_accuracy: float = 0.0
    overall_precision: float = 0.0
    overall_recall: float = 0.0
    overall_f1: float = 0.0
    fields_won: float = 0.0
    total_fields: int = 0
    rank: int = 0
    field_performance: list[FieldPerformance] = field(default_factory=list)

    @property
    def included_fields(self) -> int:
        return sum(1 for fp in self.field_performance if fp.is_included_in_metrics)

    def performance_for(self, field_key: str) -> FieldPerformance | None:
        for performance in self.field_performance:
            if performance.field_key == field_key:
                return performance
        return None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "model_name": self.model_name,
            "rank": self.rank,
            "overall_accuracy": round(self.overall_accuracy, 4),
            "overall_precision": round(self.overall_precision, 4),
            "overall_recall": round(self.overall_recall, 4),
            "overall_f1": round(self.overall_f1, 4),
            "fields_won": round(self.fields_won, 4),
            "total_fields": self.total_fields,
            "field_performance": [fp.to_dict() for fp in self.field_performance],
        }


def _field_key_and_name(item) -> tuple[str, str]:
    """Accept FieldDefinition-like objects, (key, name) pairs or bare keys."""
    if isinstance(item, str):
        return item, item
    if isinstance(item, tuple):
        return item[0], item[1] if len(item) > 1 else item[0]
    return item.key, getattr(item, "name", None) or item.key


def _lookup(
    table: MetricsTable | Mapping[str, Mapping[str, MetricsResult]],
    field_key: str,
    model: str,
) -> MetricsResult | _Missing:
    if isinstance(table, MetricsTable):
        return table.get(field_key, model)
    return table.get(field_key, {}).get(model, MISSING)


def _coerce_field_settings(
    field_settings: Mapping[str, FieldSettings | Mapping] | None,
) -> dict[str, FieldSettings]:
    """Accept FieldSettings values or their raw mapping form."""
    coerced: dict[str, FieldSettings] = {}
    raw: dict[str, Mapping] = {}
    for key, value in (field_settings or {}).items():
        if isinstance(value, FieldSettings):
            coerced[key] = value
        else:
            raw[key] = dict(value) if isinstance(value, Mapping) else value
    coerced.update(parse_field_settings(raw))
    return coerced


def calculate_model_summaries(
    models: list[str],
    fields: list,
    table: MetricsTable | Mapping[str, Mapping[str, MetricsResult]],
    field_settings: Mapping[str, FieldSettings | Mapping] | None = None,
) -> list[ModelSummary]:
    """Build one summary per model from precomputed per-field metrics.

    Overall metrics are the unweighted mean over fields included in
    metrics; with no included fields they are all 0. A missing
    (field, model) entry is logged and scored as zeros.

    Args:
        models: Model names, in input order
        fields: FieldDefinition objects, (key, name) pairs or field keys
        table: Per-field per-model metrics
        field_settings: Optional field key -> FieldSettings, or the raw
            mapping form ({"includeInMetrics": False}) read from YAML

    Returns:
        List of ModelSummary in the same order as models, unranked

    Raises:
        ConfigurationError: If a raw settings mapping is malformed
    """
    field_settings = _coerce_field_settings(field_settings)
    field_items = [_field_key_and_name(item) for item in fields]
    summaries: list[ModelSummary] = []

    for model in models:
        performances: list[FieldPerformance] = []
        for field_key, field_name in field_items:
            metrics = _lookup(table, field_key, model)
            if metrics is MISSING:
                logger.warning("No metrics for field %s and model %s, using zeros", field_key, model)
                metrics = ZERO_METRICS

            settings = field_settings.get(field_key)
            included = settings.include_in_metrics if settings is not None else True
            performances.append(
                FieldPerformance(
                    field_key=field_key,
                    field_name=field_name,
                    accuracy=metrics.accuracy,
                    precision=metrics.precision,
                    recall=metrics.recall,
                    f1=metrics.f1_score,
                    is_included_in_metrics=included,
                )
            )

        included_performances = [fp for fp in performances if fp.is_included_in_metrics]
        count = len(included_performances)
        summary = ModelSummary(
            model_name=model,
            total_fields=len(performances),
            field_performance=performances,
        )
        if count:
            summary.overall_accuracy = sum(fp.accuracy for fp in included_performances) / count
            summary.overall_precision = sum(fp.precision for fp in included_performances) / count
            summary.overall_recall = sum(fp.recall for fp in included_performances) / count
            summary.overall_f1 = sum(fp.f1 for fp in included_performances) / count
        summaries.append(summary)

    return summaries


def determine_field_winners(summaries: list[ModelSummary], fields: list) -> None:
    """Mark the model(s) with the highest accuracy on each field.

    Ties are all winners and flagged as shared victories. Each winner of
    a field shared by n models is credited 1/n in fields_won. Field
    inclusion settings do not affect winners.
    """
    for summary in summaries:
        summary.fields_won = 0.0
        for performance in summary.field_performance:
            performance.is_winner = False
            performance.is_shared_victory = False

    for field_key, _ in (_field_key_and_name(item) for item in fields):
        entries = []
        for summary in summaries:
            performance = summary.performance_for(field_key)
            if performance is not None:
                entries.append((summary, performance))
        if not entries:
            continue

        best = max(performance.accuracy for _, performance in entries)
        winners = [(s, p) for s, p in entries if p.accuracy == best]
        shared = len(winners) > 1
        for summary, performance in winners:
            performance.is_winner = True
            performance.is_shared_victory = shared
            summary.fields_won += 1 / len(winners)


def assign_ranks(summaries: list[ModelSummary]) -> list[ModelSummary]:
    """Sort by overall accuracy, then overall F1, and number the result.

    The list is sorted in place, so the caller's list ends up in rank
    order. The sort is stable: summaries equal on both keys keep their
    input order. Ranks are 1-based positions.

    Returns:
        The same list, now in rank order
    """
    summaries.sort(key=lambda s: (-s.overall_accuracy, -s.overall_f1))
    for position, summary in enumerate(summaries, start=1):
        summary.rank = position
    return summaries
