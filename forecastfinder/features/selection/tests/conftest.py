"""Test fixtures for selection module."""

import numpy as np
import pytest

from forecastfinder.features.series.builder import Series


def make_series(key, values, features=None) -> Series:
    """Build a Series with integer timestamps."""
    values = np.asarray(values, dtype=np.float64)
    return Series(
        key=key,
        timestamps=list(range(len(values))),
        values=values,
        features=features,
    )


@pytest.fixture
def level_shift_series() -> Series:
    """40 points: 10.0 for the first 24, then 100.0.

    With horizon 6 the training prefix ends with ten values of 100, so a
    window-8 moving average is exact on validation while a window-16 one
    still averages in the earlier level.
    """
    return make_series("shift", [10.0] * 24 + [100.0] * 16)


@pytest.fixture
def constant_series() -> Series:
    """30 points all equal to 50."""
    return make_series("flat", [50.0] * 30)


@pytest.fixture
def short_series() -> Series:
    """5 points, too short for horizon 6."""
    return make_series("short", [1.0, 2.0, 3.0, 4.0, 5.0])


@pytest.fixture
def noisy_series() -> Series:
    """Noisy upward trend with 40 points."""
    rng = np.random.default_rng(42)
    return make_series("noisy", np.linspace(50, 90, 40) + rng.normal(0, 2, 40))


@pytest.fixture
def feature_series() -> Series:
    """Series with a linear dependence on its first feature."""
    rng = np.random.default_rng(7)
    x0 = rng.uniform(0, 10, 60)
    x1 = rng.uniform(0, 1, 60)
    return make_series("feat", 3.0 * x0 + 10.0, features=np.column_stack([x0, x1]))
