"""
Pytest configuration and fixtures for extractbench tests.
"""

from pathlib import Path

import pytest
import yaml


@pytest.fixture(scope="session")
def sample_config():
    """Return a default EvaluationConfig for testing."""
    from extractbench import EvaluationConfig

    return EvaluationConfig()


@pytest.fixture
def snapshot_data() -> dict:
    """Two documents, three fields, two models.

    gpt-4 gets every scored cell right; claude misses one value per field.
    """
    return {
        "fields": [
            {"key": "vendor", "name": "Vendor Name", "type": "string"},
            {"key": "effective_date", "name": "Effective Date", "type": "date"},
            {"key": "amount", "name": "Contract Amount", "type": "number"},
        ],
        "rows": [
            {
                "file_id": "doc-1",
                "file_name": "acme_contract.pdf",
                "fields": {
                    "vendor": {
                        "Ground Truth": "Acme Corp",
                        "gpt-4": "ACME Corp.",
                        "claude": "Beta Inc",
                    },
                    "effective_date": {
                        "Ground Truth": "2025-01-15",
                        "gpt-4": "01/15/2025",
                        "claude": "2025-01-15",
                    },
                    "amount": {
                        "Ground Truth": "$1,000",
                        "gpt-4": "$1,000",
                        "claude": "Not Present",
                    },
                },
            },
            {
                "file_id": "doc-2",
                "file_name": "globex_nda.pdf",
                "fields": {
                    "vendor": {
                        "Ground Truth": "Globex",
                        "gpt-4": "Globex",
                        "claude": "Globex",
                    },
                    "effective_date": {
                        "Ground Truth": "Not Present",
                        "gpt-4": "Not Present",
                        "claude": "2024-12-01",
                    },
                    "amount": {
                        "Ground Truth": "500",
                        "gpt-4": "Pending",
                        "claude": "500",
                    },
                },
            },
        ],
    }


@pytest.fixture
def snapshot_file(tmp_path: Path, snapshot_data: dict) -> Path:
    """Write snapshot_data to a YAML file and return its path."""
    path = tmp_path / "snapshot.yaml"
    with open(path, "w") as f:
        yaml.safe_dump(snapshot_data, f, sort_keys=False)
    return path
