"""Test fixtures for forecasting module."""

import numpy as np
import pytest

from forecastfinder.features.forecasting.schemas import (
    ArimaModelConfig,
    GradientBoostingModelConfig,
    HoltWintersModelConfig,
    MovingAverageModelConfig,
)


@pytest.fixture
def sample_time_series() -> np.ndarray:
    """Create sample time series data for testing.

    Returns 60 days of sequential values (1, 2, 3, ...) for easy verification.
    """
    return np.array(range(1, 61), dtype=np.float64)


@pytest.fixture
def sample_constant_series() -> np.ndarray:
    """Create constant time series for testing.

    Returns 30 days of constant value (100) for testing moving average.
    """
    return np.full(30, 100.0, dtype=np.float64)


@pytest.fixture
def sample_seasonal_series() -> np.ndarray:
    """Create a noisy series with a 6-step season and a gentle trend."""
    rng = np.random.default_rng(7)
    pattern = np.array([10.0, 14.0, 18.0, 16.0, 12.0, 8.0])
    trend = np.linspace(0.0, 5.0, 48)
    return np.tile(pattern, 8) + trend + 100.0 + rng.normal(0, 0.5, 48)


@pytest.fixture
def sample_feature_data() -> tuple[np.ndarray, np.ndarray]:
    """Create a linear regression problem y = 3 * x0 + 10."""
    x0 = np.arange(40, dtype=np.float64)
    x1 = np.tile([0.0, 1.0], 20)
    X = np.column_stack([x0, x1])
    y = 3.0 * x0 + 10.0
    return X, y


@pytest.fixture
def sample_arima_config() -> ArimaModelConfig:
    """Create sample ARIMA(1, 1, 0) configuration."""
    return ArimaModelConfig(p=1, d=1, q=0)


@pytest.fixture
def sample_holt_winters_config() -> HoltWintersModelConfig:
    """Create sample Holt-Winters configuration with a 6-step season."""
    return HoltWintersModelConfig(seasonal_periods=6)


@pytest.fixture
def sample_mavg_config() -> MovingAverageModelConfig:
    """Create sample moving average configuration."""
    return MovingAverageModelConfig(window_size=8)


@pytest.fixture
def sample_gbm_config() -> GradientBoostingModelConfig:
    """Create sample gradient boosting configuration."""
    return GradientBoostingModelConfig(n_estimators=50, max_depth=3)


@pytest.fixture
def sample_noisy_trend() -> np.ndarray:
    """Create 60 points of an upward trend with Gaussian noise."""
    rng = np.random.default_rng(42)
    return np.linspace(50.0, 110.0, 60) + rng.normal(0, 2.0, 60)
