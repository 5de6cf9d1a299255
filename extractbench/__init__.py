"""
extractbench: Accuracy evaluation and ranking for document extraction models.

Compares values extracted by several models against human-validated
ground truth, computes per-field accuracy, precision, recall and F1,
and ranks the models on a leaderboard.

Example:
    >>> import extractbench
    >>> extractbench.compare_values("2025-01-15", "01/15/2025").match_type
    'date_format'

    >>> snapshot = extractbench.load_snapshot("contracts.yaml")
    >>> for summary in extractbench.evaluate_snapshot(snapshot):
    ...     print(summary.rank, summary.model_name, summary.overall_accuracy)
"""

__version__ = "0.1.0"

from extractbench.compare_types import (  # noqa: E402
    FieldCompareConfig,
    StrategyResult,
    compare_with_config,
    default_compare_type,
)
from extractbench.config import (  # noqa: E402
    EvaluationConfig,
    FieldSettings,
    load_config,
    load_field_settings,
)
from extractbench.constants import (  # noqa: E402
    ERROR_PREFIX,
    GROUND_TRUTH_MODEL,
    NOT_PRESENT,
    PENDING_PREFIX,
)
from extractbench.dataset import (  # noqa: E402
    EvaluationSnapshot,
    FieldDefinition,
    ResultRow,
    build_leaderboard,
    compute_field_metrics_table,
    evaluate_snapshot,
    load_snapshot,
)
from extractbench.dates import compare_dates, is_date_like, parse_date  # noqa: E402
from extractbench.exceptions import (  # noqa: E402
    ConfigurationError,
    DatasetError,
    ExtractBenchError,
    LengthMismatchError,
)
from extractbench.matching import ComparisonResult, compare_values  # noqa: E402
from extractbench.metrics import (  # noqa: E402
    ConfusionDebugInfo,
    FieldMetrics,
    MetricsResult,
    calculate_field_metrics,
    calculate_field_metrics_with_debug,
)
from extractbench.normalize import normalize_value  # noqa: E402
from extractbench.ranking import (  # noqa: E402
    MISSING,
    FieldPerformance,
    MetricsTable,
    ModelSummary,
    assign_ranks,
    calculate_model_summaries,
    determine_field_winners,
)

__all__ = [
    # Comparison
    "compare_values",
    "ComparisonResult",
    "normalize_value",
    "is_date_like",
    "parse_date",
    "compare_dates",
    "compare_with_config",
    "default_compare_type",
    "FieldCompareConfig",
    "StrategyResult",
    # Metrics
    "calculate_field_metrics",
    "calculate_field_metrics_with_debug",
    "MetricsResult",
    "FieldMetrics",
    "ConfusionDebugInfo",
    # Ranking
    "calculate_model_summaries",
    "determine_field_winners",
    "assign_ranks",
    "MetricsTable",
    "MISSING",
    "ModelSummary",
    "FieldPerformance",
    # Dataset
    "FieldDefinition",
    "ResultRow",
    "EvaluationSnapshot",
    "load_snapshot",
    "compute_field_metrics_table",
    "build_leaderboard",
    "evaluate_snapshot",
    # Configuration
    "EvaluationConfig",
    "FieldSettings",
    "load_config",
    "load_field_settings",
    # Constants
    "NOT_PRESENT",
    "PENDING_PREFIX",
    "ERROR_PREFIX",
    "GROUND_TRUTH_MODEL",
    # Exceptions
    "ExtractBenchError",
    "LengthMismatchError",
    "ConfigurationError",
    "DatasetError",
]
