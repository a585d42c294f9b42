"""Tests for candidate space generation."""

import pytest

from forecastfinder.features.candidates.grid import (
    CandidateSpace,
    arima_space,
    generate_grid,
    gradient_boosting_space,
    holt_winters_space,
    inclusive_range,
    moving_average_space,
    not_all_zero,
)
from forecastfinder.features.forecasting.schemas import (
    ArimaModelConfig,
    HoltWintersModelConfig,
    MovingAverageModelConfig,
)


class TestGenerateGrid:
    """Tests for the filtered cross-product."""

    def test_raw_cross_product_size(self):
        """Test three parameters over [0, 1, 2] give 27 combinations."""
        grid = generate_grid({"p": [0, 1, 2], "d": [0, 1, 2], "q": [0, 1, 2]})

        assert len(grid) == 27

    def test_all_zero_excluded(self):
        """Test the degenerate all-zero tuple is filtered out."""
        grid = generate_grid(
            {"p": [0, 1, 2], "d": [0, 1, 2], "q": [0, 1, 2]},
            is_valid=not_all_zero,
        )

        assert len(grid) == 26
        assert {"p": 0, "d": 0, "q": 0} not in grid

    def test_last_parameter_varies_fastest(self):
        """Test enumeration order of the product."""
        grid = generate_grid({"a": [0, 1], "b": [5, 6]})

        assert grid == [
            {"a": 0, "b": 5},
            {"a": 0, "b": 6},
            {"a": 1, "b": 5},
            {"a": 1, "b": 6},
        ]

    def test_order_is_reproducible(self):
        """Test two generations agree element by element."""
        ranges = {"p": [2, 0, 1], "q": [1, 0]}

        assert generate_grid(ranges) == generate_grid(ranges)

    def test_empty_range_gives_empty_grid(self):
        """Test an empty parameter range yields no candidates."""
        assert generate_grid({"p": [], "q": [0, 1]}) == []


class TestInclusiveRange:
    """Tests for inclusive_range."""

    def test_bounds_included(self):
        """Test both bounds are part of the range."""
        assert inclusive_range(0, 2) == [0, 1, 2]

    def test_single_value(self):
        """Test low == high gives one value."""
        assert inclusive_range(3, 3) == [3]

    def test_inverted_bounds_raise(self):
        """Test low > high raises ValueError."""
        with pytest.raises(ValueError, match="Empty range"):
            inclusive_range(2, 1)


class TestFamilySpaces:
    """Tests for the per-family factories."""

    def test_arima_space(self):
        """Test ARIMA space has 26 configs starting at (0, 0, 1)."""
        space = arima_space([0, 1, 2])

        assert space.family == "arima"
        assert len(space) == 26
        assert space[0] == ArimaModelConfig(p=0, d=0, q=1)
        assert space[-1] == ArimaModelConfig(p=2, d=2, q=2)
        assert space.index(ArimaModelConfig(p=1, d=0, q=0)) == 8

    def test_holt_winters_is_singleton(self):
        """Test Holt-Winters reports a single fixed configuration."""
        space = holt_winters_space(seasonal_periods=6)

        assert list(space) == [HoltWintersModelConfig(seasonal_periods=6)]

    def test_moving_average_is_singleton(self):
        """Test moving average reports one config for its window."""
        space = moving_average_space(16)

        assert space.family == "moving_average_16"
        assert list(space) == [MovingAverageModelConfig(window_size=16)]

    def test_gradient_boosting_grid(self):
        """Test gradient boosting grid and positivity filter."""
        space = gradient_boosting_space(n_estimators=[50, 100], max_depths=[0, 3])

        assert [(c.n_estimators, c.max_depth) for c in space] == [(50, 3), (100, 3)]

    def test_space_is_immutable_sequence(self):
        """Test CandidateSpace exposes a tuple-backed sequence."""
        space = CandidateSpace("x", [MovingAverageModelConfig(window_size=8)])

        assert len(space) == 1
        assert "n_candidates=1" in repr(space)
