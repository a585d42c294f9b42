"""Per-entity model selection."""

from forecastfinder.features.selection.finder import (
    BestModelFinder,
    fit_with_timeout,
    select_best,
)
from forecastfinder.features.selection.schemas import BestRecord, Evaluation
from forecastfinder.features.selection.splitter import ValidationSplit, split_validation

__all__ = [
    "BestModelFinder",
    "BestRecord",
    "Evaluation",
    "ValidationSplit",
    "fit_with_timeout",
    "select_best",
    "split_validation",
]
