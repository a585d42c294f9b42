"""Metrics calculator for validation scoring.

Supported Metrics:
- RMSPE: Root Mean Squared Percentage Error (default selection metric)
- RMSE: Root Mean Squared Error
- MAE: Mean Absolute Error
- sMAPE: Symmetric Mean Absolute Percentage Error

CRITICAL: All metrics handle edge cases (zeros, empty arrays) without
raising. A value that must never win model selection is reported as +inf.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Literal

import numpy as np

MetricName = Literal["rmspe", "rmse", "mae", "smape"]


@dataclass
class MetricResult:
    """Result of a single metric calculation.

    Attributes:
        name: Name of the metric.
        value: Calculated value (inf for degenerate input).
        n_samples: Number of samples used in calculation.
        warnings: List of warnings generated during calculation.
    """

    name: str
    value: float
    n_samples: int
    warnings: list[str] = field(default_factory=lambda: [])


def _check_lengths(
    actuals: np.ndarray[Any, np.dtype[np.floating[Any]]],
    predictions: np.ndarray[Any, np.dtype[np.floating[Any]]],
) -> None:
    if len(actuals) != len(predictions):
        raise ValueError(
            f"Length mismatch: actuals={len(actuals)}, predictions={len(predictions)}"
        )


class MetricsCalculator:
    """Calculate forecasting accuracy metrics.

    Provides methods for computing validation metrics with proper edge
    case handling.

    CRITICAL: All metrics handle edge cases (zeros, empty arrays).
    """

    @staticmethod
    def rmspe(
        actuals: np.ndarray[Any, np.dtype[np.floating[Any]]],
        predictions: np.ndarray[Any, np.dtype[np.floating[Any]]],
    ) -> MetricResult:
        """Root Mean Squared Percentage Error.

        Formula: sqrt(mean(((A - F) / A)^2)) over entries where A != 0

        CRITICAL: Zero actuals are skipped. When no actual is nonzero the
        metric is undefined and reported as +inf so the candidate can
        never win selection.

        Args:
            actuals: Ground truth values.
            predictions: Predicted values.

        Returns:
            MetricResult with RMSPE value (0 for a perfect forecast).

        Raises:
            ValueError: If arrays have different lengths.
        """
        warnings: list[str] = []

        if len(actuals) == 0:
            return MetricResult(
                name="rmspe", value=float("inf"), n_samples=0, warnings=["Empty array"]
            )

        _check_lengths(actuals, predictions)

        nonzero = actuals != 0
        n_valid = int(np.sum(nonzero))
        n_zeros = len(actuals) - n_valid

        if n_valid == 0:
            warnings.append("All actuals are zero; RMSPE undefined")
            return MetricResult(
                name="rmspe", value=float("inf"), n_samples=0, warnings=warnings
            )

        if n_zeros > 0:
            warnings.append(f"{n_zeros} samples with zero actuals skipped")

        ratios = (actuals[nonzero] - predictions[nonzero]) / actuals[nonzero]
        rmspe_value = float(np.sqrt(np.mean(np.square(ratios))))

        return MetricResult(
            name="rmspe", value=rmspe_value, n_samples=n_valid, warnings=warnings
        )

    @staticmethod
    def rmse(
        actuals: np.ndarray[Any, np.dtype[np.floating[Any]]],
        predictions: np.ndarray[Any, np.dtype[np.floating[Any]]],
    ) -> MetricResult:
        """Root Mean Squared Error.

        Formula: sqrt(mean((A - F)^2))
        """
        if len(actuals) == 0:
            return MetricResult(
                name="rmse", value=float("inf"), n_samples=0, warnings=["Empty array"]
            )

        _check_lengths(actuals, predictions)

        rmse_value = float(np.sqrt(np.mean(np.square(actuals - predictions))))
        return MetricResult(name="rmse", value=rmse_value, n_samples=len(actuals))

    @staticmethod
    def mae(
        actuals: np.ndarray[Any, np.dtype[np.floating[Any]]],
        predictions: np.ndarray[Any, np.dtype[np.floating[Any]]],
    ) -> MetricResult:
        """Mean Absolute Error.

        Formula: mean(|actual - predicted|)

        Args:
            actuals: Ground truth values.
            predictions: Predicted values.

        Returns:
            MetricResult with MAE value.

        Raises:
            ValueError: If arrays have different lengths.
        """
        if len(actuals) == 0:
            return MetricResult(
                name="mae", value=float("inf"), n_samples=0, warnings=["Empty array"]
            )

        _check_lengths(actuals, predictions)

        mae_value = float(np.mean(np.abs(actuals - predictions)))
        return MetricResult(name="mae", value=mae_value, n_samples=len(actuals))

    @staticmethod
    def smape(
        actuals: np.ndarray[Any, np.dtype[np.floating[Any]]],
        predictions: np.ndarray[Any, np.dtype[np.floating[Any]]],
    ) -> MetricResult:
        """Symmetric Mean Absolute Percentage Error.

        Formula: 100/n * sum(2 * |A - F| / (|A| + |F|))

        CRITICAL: When both A and F are 0, contributes 0 to sum (perfect forecast).

        Returns:
            MetricResult with sMAPE value (0-200 scale).
        """
        warnings: list[str] = []

        if len(actuals) == 0:
            return MetricResult(
                name="smape", value=float("inf"), n_samples=0, warnings=["Empty array"]
            )

        _check_lengths(actuals, predictions)

        numerator = 2.0 * np.abs(actuals - predictions)
        denominator = np.abs(actuals) + np.abs(predictions)

        with np.errstate(divide="ignore", invalid="ignore"):
            ratios = np.where(denominator == 0, 0.0, numerator / denominator)

        smape_value = float(100.0 * np.mean(ratios))

        n_zeros = int(np.sum((actuals == 0) | (predictions == 0)))
        if n_zeros > 0:
            warnings.append(f"{n_zeros} samples with zero values")

        return MetricResult(
            name="smape", value=smape_value, n_samples=len(actuals), warnings=warnings
        )

    def get(
        self, name: str
    ) -> Callable[
        [
            np.ndarray[Any, np.dtype[np.floating[Any]]],
            np.ndarray[Any, np.dtype[np.floating[Any]]],
        ],
        MetricResult,
    ]:
        """Look up a metric function by name.

        Raises:
            ValueError: If the metric is unknown.
        """
        metrics = {
            "rmspe": self.rmspe,
            "rmse": self.rmse,
            "mae": self.mae,
            "smape": self.smape,
        }
        if name not in metrics:
            raise ValueError(f"Unknown metric: {name}. Valid metrics: {sorted(metrics)}")
        return metrics[name]


class Evaluator:
    """Score predicted values against a validation slice.

    Lower is better for every supported metric. Non-finite predictions or
    results score +inf, which disqualifies the candidate.

    Attributes:
        metric_name: Name of the metric used by score().
    """

    def __init__(self, metric_name: MetricName = "rmspe") -> None:
        self.metric_name = metric_name
        self._metric = MetricsCalculator().get(metric_name)

    def evaluate(
        self,
        predicted: np.ndarray[Any, np.dtype[np.floating[Any]]],
        actual: np.ndarray[Any, np.dtype[np.floating[Any]]],
    ) -> MetricResult:
        """Compute the configured metric with warnings.

        Raises:
            ValueError: If arrays have different lengths.
        """
        predicted = np.asarray(predicted, dtype=np.float64)
        actual = np.asarray(actual, dtype=np.float64)

        if not np.all(np.isfinite(predicted)):
            _check_lengths(actual, predicted)
            return MetricResult(
                name=self.metric_name,
                value=float("inf"),
                n_samples=len(actual),
                warnings=["Non-finite predictions"],
            )

        result = self._metric(actual, predicted)
        if not np.isfinite(result.value):
            result.value = float("inf")
        return result

    def score(
        self,
        predicted: np.ndarray[Any, np.dtype[np.floating[Any]]],
        actual: np.ndarray[Any, np.dtype[np.floating[Any]]],
    ) -> float:
        """Metric value for predicted vs actual; +inf when degenerate."""
        return self.evaluate(predicted, actual).value
