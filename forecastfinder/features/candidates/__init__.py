"""Candidate hyperparameter spaces per model family."""

from forecastfinder.features.candidates.grid import (
    CandidateSpace,
    all_positive,
    arima_space,
    generate_grid,
    gradient_boosting_space,
    holt_winters_space,
    inclusive_range,
    moving_average_space,
    not_all_zero,
)

__all__ = [
    "CandidateSpace",
    "all_positive",
    "arima_space",
    "generate_grid",
    "gradient_boosting_space",
    "holt_winters_space",
    "inclusive_range",
    "moving_average_space",
    "not_all_zero",
]
