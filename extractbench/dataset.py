"""Evaluation snapshots and the per-field, per-model metrics driver.

This module provides:
1. FieldDefinition / ResultRow / EvaluationSnapshot - Input model
2. load_snapshot() - Load a snapshot from YAML
3. compute_field_metrics_table() - Metrics for every field x model
4. build_leaderboard() / evaluate_snapshot() - Ranked model summaries

Snapshot YAML layout::

    fields:
      - {key: vendor, name: Vendor Name, type: string}
      - {key: effective_date, name: Effective Date, type: date}
    field_settings:               # optional
      effective_date: {include_in_metrics: false}
    compare_types:                # optional: "auto" or key -> compare type
      effective_date: date-exact
    rows:
      - file_id: doc-1
        file_name: contract.pdf
        fields:
          vendor: {Ground Truth: Acme Corp, gpt-4: ACME Corp.}
"""

from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from extractbench.compare_types import FieldCompareConfig, compare_configs_from_fields
from extractbench.config import EvaluationConfig, FieldSettings, parse_field_settings
from extractbench.constants import GROUND_TRUTH_MODEL
from extractbench.exceptions import ConfigurationError, DatasetError
from extractbench.metrics import FieldMetrics, calculate_field_metrics_with_debug
from extractbench.ranking import (
    MetricsTable,
    ModelSummary,
    assign_ranks,
    calculate_model_summaries,
    determine_field_winners,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldDefinition:
    """A field extracted from every document."""

    key: str
    name: str
    type: str = "string"


@dataclass
class ResultRow:
    """Extracted values for one document.

    ``fields`` maps field key -> model name -> raw value; the ground truth
    is stored under the reserved model name "Ground Truth".
    """

    file_id: str
    file_name: str = ""
    fields: dict[str, dict[str, str]] = field(default_factory=dict)

    def value(self, field_key: str, model: str) -> str:
        """Raw value for a cell; "" when the cell is missing."""
        return self.fields.get(field_key, {}).get(model, "")

    def ground_truth(self, field_key: str) -> str:
        return self.value(field_key, GROUND_TRUTH_MODEL)


@dataclass
class EvaluationSnapshot:
    """Fields, result rows and settings for one evaluation run."""

    fields: list[FieldDefinition]
    rows: list[ResultRow] = field(default_factory=list)
    field_settings: dict[str, FieldSettings] = field(default_factory=dict)
    compare_configs: dict[str, FieldCompareConfig] = field(default_factory=dict)

    def __post_init__(self):
        keys = [f.key for f in self.fields]
        duplicates = sorted({key for key in keys if keys.count(key) > 1})
        if duplicates:
            raise DatasetError(f"Duplicate field keys: {', '.join(duplicates)}")

    def models(self) -> list[str]:
        """Model names other than the ground truth, in first-seen order."""
        seen: dict[str, None] = {}
        for row in self.rows:
            for per_model in row.fields.values():
                for model in per_model:
                    if model != GROUND_TRUTH_MODEL:
                        seen.setdefault(model, None)
        return list(seen)

    def column(self, field_key: str, model: str) -> list[str]:
        """Values of one field for one model (or the ground truth), row order."""
        return [row.value(field_key, model) for row in self.rows]


def _cell_text(value: Any) -> str:
    """Coerce a YAML scalar back into the raw string a model produced."""
    if value is None:
        return ""
    if isinstance(value, bool):
        # YAML 1.1 reads unquoted Yes/No as booleans
        return "Yes" if value else "No"
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    return str(value)


def _parse_field(raw: Any, index: int) -> FieldDefinition:
    if not isinstance(raw, dict):
        raise DatasetError(f"Field #{index} must be a mapping, got {type(raw).__name__}")
    if not raw.get("key"):
        raise DatasetError(f"Field #{index} is missing 'key'")
    key = str(raw["key"])
    return FieldDefinition(
        key=key,
        name=str(raw.get("name") or key),
        type=str(raw.get("type") or "string"),
    )


def _parse_row(raw: Any, index: int) -> ResultRow:
    if not isinstance(raw, dict):
        raise DatasetError(f"Row #{index} must be a mapping, got {type(raw).__name__}")
    raw_fields = raw.get("fields") or {}
    if not isinstance(raw_fields, dict):
        raise DatasetError(f"Row #{index} 'fields' must be a mapping")

    cells: dict[str, dict[str, str]] = {}
    for field_key, per_model in raw_fields.items():
        if not isinstance(per_model, dict):
            raise DatasetError(f"Row #{index} field {field_key!r} must map model names to values")
        cells[str(field_key)] = {str(model): _cell_text(value) for model, value in per_model.items()}

    file_id = str(raw.get("file_id") or raw.get("id") or f"row-{index}")
    return ResultRow(file_id=file_id, file_name=str(raw.get("file_name") or ""), fields=cells)


def _parse_compare_types(raw: Any, fields: list[FieldDefinition]) -> dict[str, FieldCompareConfig]:
    if raw is None:
        return {}
    triples = [(f.key, f.name, f.type) for f in fields]
    if raw == "auto":
        return compare_configs_from_fields(triples)
    if not isinstance(raw, dict):
        raise DatasetError("'compare_types' must be 'auto' or a mapping of field key to compare type")
    overrides = {str(key): str(value) for key, value in raw.items()}
    return compare_configs_from_fields([t for t in triples if t[0] in overrides], overrides)


def snapshot_from_dict(data: dict[str, Any]) -> EvaluationSnapshot:
    """Build an EvaluationSnapshot from parsed YAML/JSON data.

    Raises:
        DatasetError: If the structure is malformed
    """
    if not isinstance(data, dict):
        raise DatasetError("Snapshot must be a mapping with 'fields' and 'rows'")

    raw_fields = data.get("fields")
    if not isinstance(raw_fields, list):
        raise DatasetError("Snapshot 'fields' must be a list")
    fields = [_parse_field(raw, i) for i, raw in enumerate(raw_fields)]

    raw_rows = data.get("rows") or []
    if not isinstance(raw_rows, list):
        raise DatasetError("Snapshot 'rows' must be a list")
    rows = [_parse_row(raw, i) for i, raw in enumerate(raw_rows)]

    try:
        field_settings = parse_field_settings(data.get("field_settings") or {})
    except ConfigurationError as e:
        raise DatasetError(f"Invalid field_settings: {e}") from e

    return EvaluationSnapshot(
        fields=fields,
        rows=rows,
        field_settings=field_settings,
        compare_configs=_parse_compare_types(data.get("compare_types"), fields),
    )


def load_snapshot(path: Path) -> EvaluationSnapshot:
    """Load an evaluation snapshot from YAML.

    Args:
        path: Path to snapshot YAML file

    Returns:
        EvaluationSnapshot

    Raises:
        FileNotFoundError: If the file doesn't exist
        DatasetError: If the YAML is malformed or has the wrong structure
    """
    with open(path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise DatasetError(f"Could not parse {path}: {e}") from e
    snapshot = snapshot_from_dict(data)
    logger.debug(
        "Loaded snapshot %s: %d fields, %d rows", path, len(snapshot.fields), len(snapshot.rows)
    )
    return snapshot


def compute_field_metrics_table(
    snapshot: EvaluationSnapshot,
    models: list[str] | None = None,
    config: EvaluationConfig | None = None,
) -> MetricsTable:
    """Compute metrics for every field x model in the snapshot.

    Cells are stored as FieldMetrics, so the confusion counts travel
    with the table.

    Raises:
        LengthMismatchError: Propagated from the accumulator
    """
    if models is None:
        models = snapshot.models()

    table = MetricsTable()
    for field_def in snapshot.fields:
        ground_truths = snapshot.column(field_def.key, GROUND_TRUTH_MODEL)
        compare_config = snapshot.compare_configs.get(field_def.key)
        for model in models:
            metrics: FieldMetrics = calculate_field_metrics_with_debug(
                snapshot.column(field_def.key, model),
                ground_truths,
                config,
                compare_config,
            )
            table.set(field_def.key, model, metrics)
    return table


def build_leaderboard(
    models: list[str],
    fields: list[FieldDefinition],
    table: MetricsTable,
    field_settings: dict[str, FieldSettings] | None = None,
) -> list[ModelSummary]:
    """Aggregate, mark field winners and rank.

    Returns:
        ModelSummary list in rank order
    """
    summaries = calculate_model_summaries(models, fields, table, field_settings)
    determine_field_winners(summaries, fields)
    return assign_ranks(summaries)


def evaluate_snapshot(
    snapshot: EvaluationSnapshot,
    models: list[str] | None = None,
    config: EvaluationConfig | None = None,
) -> list[ModelSummary]:
    """Score every model in a snapshot and return the ranked leaderboard."""
    if models is None:
        models = snapshot.models()
    table = compute_field_metrics_table(snapshot, models, config)
    return build_leaderboard(models, snapshot.fields, table, snapshot.field_settings)
