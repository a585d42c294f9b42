"""Test fixtures for assembly module."""

import numpy as np
import pandas as pd
import pytest

from forecastfinder.features.forecasting.models import (
    GradientBoostingForecaster,
    MovingAverageForecaster,
)
from forecastfinder.features.forecasting.schemas import (
    GradientBoostingModelConfig,
    MovingAverageModelConfig,
)
from forecastfinder.features.selection.schemas import BestRecord


def constant_record(key, level: float) -> BestRecord:
    """BestRecord whose model forecasts a constant level."""
    model = MovingAverageForecaster(window_size=1).fit(np.array([level]))
    return BestRecord(
        key=key,
        family="moving_average_1",
        config=MovingAverageModelConfig(window_size=1),
        model=model,
        metric=0.0,
        candidate_index=0,
        n_evaluated=1,
        n_failed=0,
    )


@pytest.fixture
def best_records() -> dict:
    """Constant-level records for stores A and B."""
    return {"A": constant_record("A", 10.4), "B": constant_record("B", 20.5)}


@pytest.fixture
def future_rows() -> pd.DataFrame:
    """Six future days per store, delivered shuffled, with working columns."""
    days = [6, 1, 2, 5, 3, 4]
    return pd.DataFrame(
        {
            "id": [12, 7, 8, 11, 9, 10, 6, 1, 2, 5, 3, 4],
            "store": ["B"] * 6 + ["A"] * 6,
            "day": days + days,
            "sales": [0.0] * 12,
            "validation": [False] * 12,
        }
    )


@pytest.fixture
def linear_gbm_record() -> BestRecord:
    """Feature-based record trained on y = 3 * x + 10."""
    x = np.arange(0, 40, dtype=np.float64)
    model = GradientBoostingForecaster(n_estimators=50, max_depth=3).fit(
        3.0 * x + 10.0, x.reshape(-1, 1)
    )
    return BestRecord(
        key="A",
        family="gradient_boosting",
        config=GradientBoostingModelConfig(n_estimators=50, max_depth=3),
        model=model,
        metric=0.0,
        candidate_index=0,
        n_evaluated=1,
        n_failed=0,
    )
