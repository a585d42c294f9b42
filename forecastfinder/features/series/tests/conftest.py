"""Test fixtures for series module."""

import pandas as pd
import pytest


@pytest.fixture
def shuffled_rows() -> pd.DataFrame:
    """Rows for two stores delivered out of time order.

    Store "B" appears first in the input; store "A" has a duplicated
    timestamp on day 2 with values 21 then 22 in input order.
    """
    return pd.DataFrame(
        {
            "store": ["B", "A", "B", "A", "A", "B", "A"],
            "day": [3, 2, 1, 1, 2, 2, 3],
            "sales": [33.0, 21.0, 31.0, 11.0, 22.0, 32.0, 30.0],
            "region": ["n", "s", "n", "s", "s", "n", "s"],
        }
    )
