"""
Exception classes for extractbench.

All extractbench exceptions inherit from ExtractBenchError,
making it easy to catch all library errors.

Example:
    >>> try:
    ...     calculate_field_metrics(["a", "b"], ["a"])
    ... except extractbench.LengthMismatchError as e:
    ...     print(f"Bad input: {e}")
    ... except extractbench.ExtractBenchError as e:
    ...     print(f"extractbench error: {e}")
"""


class ExtractBenchError(Exception):
    """
    Base exception for all extractbench errors.

    Catch this to handle any extractbench-specific error.
    """

    pass


class LengthMismatchError(ExtractBenchError, ValueError):
    """
    Raised when predictions and ground truths are not parallel.

    Example:
        >>> calculate_field_metrics(["Acme"], [])
        LengthMismatchError: Predictions and ground truths must have the same length (1 != 0)
    """

    def __init__(self, predictions_length: int, ground_truths_length: int):
        self.predictions_length = predictions_length
        self.ground_truths_length = ground_truths_length
        super().__init__(
            "Predictions and ground truths must have the same length "
            f"({predictions_length} != {ground_truths_length})"
        )


class ConfigurationError(ExtractBenchError, ValueError):
    """
    Raised for invalid configuration.

    Example:
        >>> EvaluationConfig(partial_min_ratio=0)
        ConfigurationError: partial_min_ratio must be in (0, 1], got 0
    """

    pass


class DatasetError(ExtractBenchError):
    """
    Raised when an evaluation snapshot is malformed.

    Duplicate field keys, rows that are not mappings and similar
    structural problems end up here.
    """

    pass
