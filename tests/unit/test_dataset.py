"""Tests for extractbench.dataset module."""

import pytest

from extractbench.constants import NOT_PRESENT
from extractbench.dataset import (
    EvaluationSnapshot,
    FieldDefinition,
    ResultRow,
    build_leaderboard,
    compute_field_metrics_table,
    evaluate_snapshot,
    load_snapshot,
    snapshot_from_dict,
)
from extractbench.exceptions import DatasetError, LengthMismatchError
from extractbench.metrics import FieldMetrics
from extractbench.ranking import MISSING


class TestSnapshotModel:
    """Tests for snapshot dataclasses."""

    def test_models_first_seen(self, snapshot_data):
        """Test model names exclude the ground truth and keep order."""
        snapshot = snapshot_from_dict(snapshot_data)
        assert snapshot.models() == ["gpt-4", "claude"]

    def test_column(self, snapshot_data):
        """Test values are collected in row order."""
        snapshot = snapshot_from_dict(snapshot_data)
        assert snapshot.column("vendor", "Ground Truth") == ["Acme Corp", "Globex"]
        assert snapshot.column("amount", "gpt-4") == ["$1,000", "Pending"]

    def test_missing_cell_is_blank(self):
        """Test missing cells read as empty strings."""
        row = ResultRow(file_id="doc-1", fields={"vendor": {"Ground Truth": "Acme"}})
        assert row.value("vendor", "gpt-4") == ""
        assert row.value("amount", "gpt-4") == ""
        assert row.ground_truth("vendor") == "Acme"

    def test_duplicate_field_keys(self):
        """Test duplicate keys are rejected."""
        with pytest.raises(DatasetError, match="vendor"):
            EvaluationSnapshot(fields=[FieldDefinition("vendor", "A"), FieldDefinition("vendor", "B")])


class TestSnapshotFromDict:
    """Tests for snapshot_from_dict function."""

    def test_field_defaults(self):
        """Test name and type default sensibly."""
        snapshot = snapshot_from_dict({"fields": [{"key": "vendor"}], "rows": []})
        assert snapshot.fields == [FieldDefinition(key="vendor", name="vendor", type="string")]

    def test_missing_key(self):
        """Test fields need a key."""
        with pytest.raises(DatasetError, match="key"):
            snapshot_from_dict({"fields": [{"name": "Vendor"}], "rows": []})

    def test_fields_not_list(self):
        """Test fields must be a list."""
        with pytest.raises(DatasetError):
            snapshot_from_dict({"fields": {"vendor": "string"}})

    def test_row_not_mapping(self):
        """Test rows must be mappings."""
        with pytest.raises(DatasetError):
            snapshot_from_dict({"fields": [{"key": "vendor"}], "rows": ["doc-1"]})

    def test_not_a_mapping(self):
        """Test the top level must be a mapping."""
        with pytest.raises(DatasetError):
            snapshot_from_dict(None)

    def test_non_string_cells(self):
        """Test YAML scalars are turned back into strings."""
        snapshot = snapshot_from_dict(
            {
                "fields": [{"key": "signed"}],
                "rows": [{"file_id": "doc-1", "fields": {"signed": {"Ground Truth": True, "gpt-4": 500}}}],
            }
        )
        assert snapshot.rows[0].value("signed", "Ground Truth") == "Yes"
        assert snapshot.rows[0].value("signed", "gpt-4") == "500"

    def test_field_settings(self, snapshot_data):
        """Test inclusion settings are parsed."""
        snapshot_data["field_settings"] = {"amount": {"include_in_metrics": False}}
        snapshot = snapshot_from_dict(snapshot_data)
        assert not snapshot.field_settings["amount"].include_in_metrics

    def test_invalid_field_settings(self, snapshot_data):
        """Test bad settings surface as dataset errors."""
        snapshot_data["field_settings"] = {"amount": {"include_in_metrics": "sometimes"}}
        with pytest.raises(DatasetError):
            snapshot_from_dict(snapshot_data)

    def test_compare_types_auto(self, snapshot_data):
        """Test auto derives strategies from field types."""
        snapshot_data["compare_types"] = "auto"
        snapshot = snapshot_from_dict(snapshot_data)
        assert snapshot.compare_configs["vendor"].compare_type == "near-exact-string"
        assert snapshot.compare_configs["effective_date"].compare_type == "date-exact"
        assert snapshot.compare_configs["amount"].compare_type == "exact-number"

    def test_compare_types_mapping(self, snapshot_data):
        """Test explicit strategies only apply to listed fields."""
        snapshot_data["compare_types"] = {"amount": "exact-number"}
        snapshot = snapshot_from_dict(snapshot_data)
        assert list(snapshot.compare_configs) == ["amount"]

    def test_compare_types_invalid(self, snapshot_data):
        """Test compare_types must be auto or a mapping."""
        snapshot_data["compare_types"] = ["exact-number"]
        with pytest.raises(DatasetError):
            snapshot_from_dict(snapshot_data)


class TestLoadSnapshot:
    """Tests for load_snapshot function."""

    def test_load(self, snapshot_file):
        """Test loading a snapshot from YAML."""
        snapshot = load_snapshot(snapshot_file)
        assert [f.key for f in snapshot.fields] == ["vendor", "effective_date", "amount"]
        assert len(snapshot.rows) == 2
        assert snapshot.rows[0].file_name == "acme_contract.pdf"
        assert snapshot.rows[0].value("effective_date", "Ground Truth") == "2025-01-15"

    def test_unquoted_yaml_date(self, tmp_path):
        """Test unquoted YAML dates come back as ISO strings."""
        path = tmp_path / "snapshot.yaml"
        path.write_text(
            "fields:\n"
            "  - key: date\n"
            "rows:\n"
            "  - file_id: doc-1\n"
            "    fields:\n"
            "      date:\n"
            "        Ground Truth: 2025-01-15\n"
        )
        assert load_snapshot(path).rows[0].ground_truth("date") == "2025-01-15"

    def test_malformed_yaml(self, tmp_path):
        """Test unparseable YAML raises DatasetError."""
        path = tmp_path / "snapshot.yaml"
        path.write_text("fields: [\n")
        with pytest.raises(DatasetError):
            load_snapshot(path)

    def test_missing_file(self, tmp_path):
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_snapshot(tmp_path / "missing.yaml")


class TestComputeFieldMetricsTable:
    """Tests for compute_field_metrics_table function."""

    def test_every_field_and_model(self, snapshot_data):
        """Test the table covers every field x model."""
        table = compute_field_metrics_table(snapshot_from_dict(snapshot_data))
        assert table.fields() == ["vendor", "effective_date", "amount"]
        assert table.models() == ["gpt-4", "claude"]
        assert len(table) == 6

    def test_values(self, snapshot_data):
        """Test per-field metrics for both models."""
        table = compute_field_metrics_table(snapshot_from_dict(snapshot_data))

        assert table.get("vendor", "gpt-4").accuracy == 1.0
        assert table.get("vendor", "claude").accuracy == 0.5

        # TP for the date, FP for a value where none exists
        claude_date = table.get("effective_date", "claude")
        assert claude_date.precision == 0.5
        assert claude_date.recall == 1.0

        # Pending prediction is skipped
        gpt_amount = table.get("amount", "gpt-4")
        assert isinstance(gpt_amount, FieldMetrics)
        assert gpt_amount.debug.total_valid_pairs == 1
        assert gpt_amount.accuracy == 1.0

    def test_model_subset(self, snapshot_data):
        """Test only requested models are scored."""
        table = compute_field_metrics_table(snapshot_from_dict(snapshot_data), models=["claude"])
        assert table.models() == ["claude"]
        assert table.get("vendor", "gpt-4") is MISSING

    def test_missing_model_cells(self):
        """Test a model absent from a row scores as Not Present."""
        snapshot = EvaluationSnapshot(
            fields=[FieldDefinition("vendor", "Vendor")],
            rows=[
                ResultRow("doc-1", fields={"vendor": {"Ground Truth": "Acme", "gpt-4": "Acme"}}),
                ResultRow("doc-2", fields={"vendor": {"Ground Truth": NOT_PRESENT}}),
            ],
        )
        metrics = compute_field_metrics_table(snapshot).get("vendor", "gpt-4")
        assert metrics.debug.true_positives == 1
        assert metrics.debug.true_negatives == 1

    def test_compare_config_used(self, snapshot_data):
        """Test configured strategies change verdicts."""
        snapshot_data["compare_types"] = {"vendor": "exact-string"}
        table = compute_field_metrics_table(snapshot_from_dict(snapshot_data))
        # "ACME Corp." is no longer equal to "Acme Corp"
        assert table.get("vendor", "gpt-4").accuracy == 0.5
        assert table.get("vendor", "gpt-4").debug.comparisons is not None

    def test_length_mismatch_propagates(self, monkeypatch, snapshot_data):
        """Test accumulator errors are not swallowed."""
        snapshot = snapshot_from_dict(snapshot_data)
        monkeypatch.setattr(
            EvaluationSnapshot,
            "column",
            lambda self, key, model: ["x"] if model == "Ground Truth" else ["x", "y"],
        )
        with pytest.raises(LengthMismatchError):
            compute_field_metrics_table(snapshot)


class TestEvaluateSnapshot:
    """Tests for build_leaderboard and evaluate_snapshot."""

    def test_leaderboard(self, snapshot_data):
        """Test the perfect model ranks first and wins every field."""
        summaries = evaluate_snapshot(snapshot_from_dict(snapshot_data))
        assert [s.model_name for s in summaries] == ["gpt-4", "claude"]
        assert [s.rank for s in summaries] == [1, 2]

        gpt, claude = summaries
        assert gpt.overall_accuracy == 1.0
        assert claude.overall_accuracy == pytest.approx(0.5)
        assert gpt.fields_won == 3.0
        assert claude.fields_won == 0.0
        assert gpt.total_fields == 3

    def test_field_settings_applied(self, snapshot_data):
        """Test excluded fields leave the overall score but keep winners."""
        snapshot_data["field_settings"] = {
            "vendor": {"include_in_metrics": False},
            "effective_date": {"include_in_metrics": False},
            "amount": {"include_in_metrics": False},
        }
        summaries = evaluate_snapshot(snapshot_from_dict(snapshot_data))
        assert all(s.overall_accuracy == 0.0 for s in summaries)
        assert summaries[0].fields_won == 3.0

    def test_build_leaderboard(self, snapshot_data):
        """Test building from a precomputed table."""
        snapshot = snapshot_from_dict(snapshot_data)
        table = compute_field_metrics_table(snapshot)
        summaries = build_leaderboard(["claude", "gpt-4"], snapshot.fields, table)
        assert summaries[0].model_name == "gpt-4"
        assert summaries[0].field_performance[0].field_name == "Vendor Name"
