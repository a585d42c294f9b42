"""Tests for pipeline configuration."""

import pytest
from pydantic import ValidationError

from forecastfinder.features.pipeline.schemas import Algorithm, PipelineConfig


def _config(**overrides) -> PipelineConfig:
    params = {
        "algorithm": Algorithm.ARIMA,
        "label_col": "sales",
        "features_col": ["sales"],
        "time_col": "day",
        "group_by_col": "store",
    }
    params.update(overrides)
    return PipelineConfig(**params)


class TestPipelineConfig:
    """Tests for PipelineConfig validation and defaults."""

    def test_defaults_from_settings(self):
        """Test defaults come from Settings."""
        config = _config()

        assert config.horizon == 6
        assert config.param_range == [0, 1, 2]
        assert config.moving_average_windows == [8, 16, 26]
        assert config.moving_average_window == 8
        assert config.metric_name == "rmspe"
        assert config.id_col is None
        assert config.validation_col == "validation"

    def test_frozen(self):
        """Test config is immutable."""
        config = _config()

        with pytest.raises(ValidationError):
            config.horizon = 3

    def test_empty_features_col_rejected(self):
        """Test an empty feature column list is invalid."""
        with pytest.raises(ValidationError):
            _config(features_col=[])

    def test_blank_feature_name_rejected(self):
        """Test blank names inside features_col are invalid."""
        with pytest.raises(ValidationError, match="empty names"):
            _config(features_col=["price", ""])

    def test_unknown_algorithm_rejected(self):
        """Test unknown algorithm tags are invalid."""
        with pytest.raises(ValidationError):
            _config(algorithm="xgboost")

    def test_non_positive_horizon_rejected(self):
        """Test horizon must be positive."""
        with pytest.raises(ValidationError):
            _config(horizon=0)

    def test_negative_param_range_rejected(self):
        """Test ARIMA parameters are non-negative."""
        with pytest.raises(ValidationError, match="param_range"):
            _config(param_range=[-1, 0])

    def test_extra_fields_rejected(self):
        """Test unknown parameters are invalid."""
        with pytest.raises(ValidationError):
            _config(window=8)

    def test_zero_timeout_disables(self):
        """Test a zero fit timeout means no timeout."""
        assert _config(fit_timeout_seconds=0).fit_timeout_seconds is None

    def test_internal_cols(self):
        """Test working columns dropped from the output."""
        assert _config(validation_col="is_val").internal_cols == ["sales", "features", "is_val"]

    def test_sort_col(self):
        """Test id column wins over the group column for sorting."""
        assert _config().sort_col == "store"
        assert _config(id_col="id").sort_col == "id"

    def test_seasonal_periods_defaults_to_horizon(self):
        """Test Holt-Winters season length falls back to the horizon."""
        assert _config(horizon=4).effective_seasonal_periods == 4
        assert _config(horizon=1).effective_seasonal_periods is None
        assert _config(seasonal_periods=12).effective_seasonal_periods == 12


class TestCandidateSpaces:
    """Tests for the algorithm to candidate space mapping."""

    def test_arima(self):
        """Test ARIMA searches the filtered (p, d, q) grid."""
        spaces = _config(algorithm="arima").candidate_spaces()

        assert [s.family for s in spaces] == ["arima"]
        assert len(spaces[0]) == 26

    @pytest.mark.parametrize(
        ("algorithm", "family"),
        [
            ("moving_average_8", "moving_average_8"),
            ("moving_average_16", "moving_average_16"),
            ("moving_average_26", "moving_average_26"),
        ],
    )
    def test_fixed_windows(self, algorithm, family):
        """Test fixed-window algorithms map to one family."""
        spaces = _config(algorithm=algorithm).candidate_spaces()

        assert [s.family for s in spaces] == [family]

    def test_custom_window(self):
        """Test MOVING_AVERAGE uses the configured window."""
        spaces = _config(algorithm="moving_average", moving_average_window=12).candidate_spaces()

        assert [s.family for s in spaces] == ["moving_average_12"]

    def test_find_best_forecast(self):
        """Test the ensemble searches ARIMA, Holt-Winters and each window."""
        spaces = _config(algorithm="find_best_forecast").candidate_spaces()

        assert [s.family for s in spaces] == [
            "arima",
            "holt_winters",
            "moving_average_8",
            "moving_average_16",
            "moving_average_26",
        ]
        assert sum(len(s) for s in spaces) == 30

    def test_gradient_boosting(self):
        """Test the feature-based grid."""
        spaces = _config(
            algorithm="gradient_boosting", gbm_n_estimators=[50, 100], gbm_max_depths=[3]
        ).candidate_spaces()

        assert [s.family for s in spaces] == ["gradient_boosting"]
        assert len(spaces[0]) == 2

    def test_feature_based_flag(self):
        """Test only gradient boosting is feature-based."""
        assert Algorithm.GRADIENT_BOOSTING.feature_based
        assert not any(a.feature_based for a in Algorithm if a is not Algorithm.GRADIENT_BOOSTING)
