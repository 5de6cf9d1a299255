"""
Configuration for accuracy evaluation.

All options have sensible defaults; the partial-match thresholds are
the only knobs that change which pairs count as matches.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from extractbench.exceptions import ConfigurationError


@dataclass
class EvaluationConfig:
    """
    Configuration for value comparison and confusion accounting.

    Example:
        >>> config = EvaluationConfig(partial_min_ratio=0.5)
        >>> compare_values("123 Main St", "123 Main Street", config)
    """

    # Partial containment: the shorter normalized value must have at least
    # this many characters...
    partial_min_length: int = 4
    # ...and at least this fraction of the longer value's length.
    partial_min_ratio: float = 0.5

    # Sample pairs kept per confusion bucket
    max_examples: int = 5

    # Two-digit years below the pivot are 20xx, the rest 19xx
    two_digit_year_pivot: int = 50

    def __post_init__(self):
        """Validate configuration."""
        for name in ("partial_min_length", "max_examples", "two_digit_year_pivot"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")
        if isinstance(self.partial_min_ratio, bool) or not isinstance(
            self.partial_min_ratio, (int, float)
        ):
            raise ConfigurationError(
                f"partial_min_ratio must be a number, got {self.partial_min_ratio!r}"
            )
        if self.partial_min_length < 1:
            raise ConfigurationError(
                f"partial_min_length must be >= 1, got {self.partial_min_length}"
            )
        if not 0.0 < self.partial_min_ratio <= 1.0:
            raise ConfigurationError(
                f"partial_min_ratio must be in (0, 1], got {self.partial_min_ratio}"
            )
        if self.max_examples < 0:
            raise ConfigurationError(f"max_examples must be >= 0, got {self.max_examples}")
        if not 0 <= self.two_digit_year_pivot <= 100:
            raise ConfigurationError(
                f"two_digit_year_pivot must be between 0 and 100, got {self.two_digit_year_pivot}"
            )


@dataclass(frozen=True)
class FieldSettings:
    """Per-field toggle controlling inclusion in overall model scores."""

    include_in_metrics: bool = True


def _read_yaml_mapping(path: Path) -> dict[str, Any]:
    with open(path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Could not parse {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Expected a mapping at the top level of {path}")
    return data


def load_config(path: Path) -> EvaluationConfig:
    """Load an EvaluationConfig from YAML.

    Args:
        path: Path to a YAML file whose keys mirror EvaluationConfig fields

    Returns:
        Validated EvaluationConfig

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigurationError: If a key is unknown or a value is invalid
    """
    data = _read_yaml_mapping(Path(path))
    known = {f.name for f in fields(EvaluationConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}")
    return EvaluationConfig(**data)


def parse_field_settings(data: dict[str, Any]) -> dict[str, FieldSettings]:
    """Convert a raw ``field_key -> {include_in_metrics: bool}`` mapping."""
    settings: dict[str, FieldSettings] = {}
    for field_key, raw in data.items():
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Settings for field {field_key!r} must be a mapping")
        include = raw.get("include_in_metrics", raw.get("includeInMetrics", True))
        if not isinstance(include, bool):
            raise ConfigurationError(
                f"include_in_metrics for field {field_key!r} must be a boolean, got {include!r}"
            )
        settings[str(field_key)] = FieldSettings(include_in_metrics=include)
    return settings


def load_field_settings(path: Path) -> dict[str, FieldSettings]:
    """Load per-field inclusion settings from YAML.

    Both ``include_in_metrics`` and the camelCase ``includeInMetrics``
    spellings are accepted.
    """
    return parse_field_settings(_read_yaml_mapping(Path(path)))
