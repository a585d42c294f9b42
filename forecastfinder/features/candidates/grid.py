"""Hyperparameter candidate spaces per model family.

CRITICAL: Enumeration order is fixed and reproducible run-to-run. A
candidate's position in its space is the tie-break when two candidates
score the same validation error.

Grid Example (ranges p=[0, 1], d=[0], q=[0, 1], all-zero excluded):
    0: (0, 0, 1)
    1: (1, 0, 0)
    2: (1, 0, 1)
"""

from __future__ import annotations

import itertools
from collections.abc import Callable, Iterator, Mapping, Sequence

from forecastfinder.features.forecasting.schemas import (
    ArimaModelConfig,
    GradientBoostingModelConfig,
    HoltWintersModelConfig,
    ModelConfig,
    MovingAverageModelConfig,
)

ParamValidator = Callable[[dict[str, int]], bool]


def inclusive_range(low: int, high: int) -> list[int]:
    """Integer range with both bounds included.

    Raises:
        ValueError: If low > high.
    """
    if low > high:
        raise ValueError(f"Empty range: low={low} > high={high}")
    return list(range(low, high + 1))


def generate_grid(
    ranges: Mapping[str, Sequence[int]],
    is_valid: ParamValidator | None = None,
) -> list[dict[str, int]]:
    """Cross-product of integer ranges, filtered by a validity predicate.

    Parameters vary in insertion order of ranges, the last one fastest.

    Args:
        ranges: Parameter name to the values it may take.
        is_valid: Predicate that keeps a combination when True.

    Returns:
        Ordered list of parameter dictionaries.
    """
    names = list(ranges)
    grid: list[dict[str, int]] = []
    for values in itertools.product(*(ranges[name] for name in names)):
        params = dict(zip(names, values, strict=True))
        if is_valid is None or is_valid(params):
            grid.append(params)
    return grid


def not_all_zero(params: dict[str, int]) -> bool:
    """Reject the degenerate combination whose parameters are all zero."""
    return any(value != 0 for value in params.values())


def all_positive(params: dict[str, int]) -> bool:
    """Keep combinations whose parameters are all strictly positive."""
    return all(value > 0 for value in params.values())


class CandidateSpace:
    """Ordered, immutable collection of candidate configs for one family.

    Attributes:
        family: Model family name (e.g. "arima").
    """

    def __init__(self, family: str, candidates: Sequence[ModelConfig]) -> None:
        self.family = family
        self._candidates: tuple[ModelConfig, ...] = tuple(candidates)

    def __iter__(self) -> Iterator[ModelConfig]:
        return iter(self._candidates)

    def __len__(self) -> int:
        return len(self._candidates)

    def __getitem__(self, index: int) -> ModelConfig:
        return self._candidates[index]

    def __repr__(self) -> str:
        return f"CandidateSpace(family={self.family!r}, n_candidates={len(self)})"

    def index(self, config: ModelConfig) -> int:
        """Position of config in the enumeration order."""
        return self._candidates.index(config)


def arima_space(param_range: Sequence[int]) -> CandidateSpace:
    """ARIMA grid over (p, d, q), excluding the all-zero order.

    Args:
        param_range: Values each of p, d and q may take.
    """
    grid = generate_grid(
        {"p": param_range, "d": param_range, "q": param_range},
        is_valid=not_all_zero,
    )
    return CandidateSpace("arima", [ArimaModelConfig(**params) for params in grid])


def holt_winters_space(seasonal_periods: int | None = None) -> CandidateSpace:
    """Singleton Holt-Winters space."""
    return CandidateSpace(
        "holt_winters", [HoltWintersModelConfig(seasonal_periods=seasonal_periods)]
    )


def moving_average_space(window_size: int) -> CandidateSpace:
    """Singleton moving-average space for one window size."""
    return CandidateSpace(
        f"moving_average_{window_size}", [MovingAverageModelConfig(window_size=window_size)]
    )


def gradient_boosting_space(
    n_estimators: Sequence[int], max_depths: Sequence[int]
) -> CandidateSpace:
    """Gradient-boosting grid over (n_estimators, max_depth)."""
    grid = generate_grid(
        {"n_estimators": n_estimators, "max_depth": max_depths},
        is_valid=all_positive,
    )
    return CandidateSpace(
        "gradient_boosting", [GradientBoostingModelConfig(**params) for params in grid]
    )
