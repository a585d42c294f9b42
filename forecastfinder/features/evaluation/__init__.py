"""Validation metrics for candidate scoring."""

from forecastfinder.features.evaluation.metrics import (
    Evaluator,
    MetricName,
    MetricResult,
    MetricsCalculator,
)

__all__ = [
    "Evaluator",
    "MetricName",
    "MetricResult",
    "MetricsCalculator",
]
