"""Test fixtures for pipeline module."""

import numpy as np
import pandas as pd
import pytest


@pytest.fixture
def scenario_a_train() -> pd.DataFrame:
    """Stores A and B with 30 daily points each, rows interleaved.

    A: sales 1..30 (mean of last 8 = 26.5)
    B: sales 2, 4, ..., 60 (mean of last 8 = 53.0)
    """
    days = np.arange(1, 31)
    frame = pd.DataFrame(
        {
            "store": ["B"] * 30 + ["A"] * 30,
            "day": np.concatenate([days, days]),
            "sales": np.concatenate([2.0 * days, days.astype(float)]),
        }
    )
    return frame.sample(frac=1.0, random_state=0).reset_index(drop=True)


@pytest.fixture
def scenario_a_future() -> pd.DataFrame:
    """Six future days per store with placeholder working columns."""
    days = np.arange(31, 37)
    return pd.DataFrame(
        {
            "id": np.arange(12, 0, -1),
            "store": ["B"] * 6 + ["A"] * 6,
            "day": np.concatenate([days, days]),
            "sales": 0.0,
            "validation": False,
        }
    )


@pytest.fixture
def time_series_params() -> dict:
    """Keyword parameters for a window-8 moving average run."""
    return {
        "algorithm": "moving_average_8",
        "label_col": "sales",
        "features_col": ["sales"],
        "time_col": "day",
        "group_by_col": "store",
        "horizon": 6,
        "n_jobs": 1,
    }


@pytest.fixture
def feature_train() -> pd.DataFrame:
    """Two stores whose sales depend on price and region."""
    rng = np.random.default_rng(3)
    frames = []
    for store, region in [("A", "north"), ("B", "south")]:
        price = rng.uniform(1.0, 10.0, 40)
        offset = 5.0 if region == "north" else 0.0
        frames.append(
            pd.DataFrame(
                {
                    "store": store,
                    "day": np.arange(1, 41),
                    "price": price,
                    "region": region,
                    "sales": 3.0 * price + 10.0 + offset,
                }
            )
        )
    return pd.concat(frames, ignore_index=True)


@pytest.fixture
def feature_future() -> pd.DataFrame:
    """Six future rows per store with known prices."""
    prices = [2.0, 4.0, 6.0, 8.0, 3.0, 5.0]
    return pd.DataFrame(
        {
            "store": ["A"] * 6 + ["B"] * 6,
            "day": list(range(41, 47)) * 2,
            "price": prices * 2,
            "region": ["north"] * 6 + ["south"] * 6,
            "sales": 0.0,
        }
    )
