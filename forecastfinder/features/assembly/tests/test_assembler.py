"""Tests for forecast assembly."""

from dataclasses import replace

import numpy as np
import pandas as pd
import pytest

from forecastfinder.core.exceptions import ConfigurationError
from forecastfinder.features.assembly.assembler import (
    ForecastAssembler,
    round_half_up,
    save_result,
)
from forecastfinder.features.forecasting.models import MovingAverageForecaster
from forecastfinder.features.series.encoding import FeatureEncoder


def _assembler(**kwargs) -> ForecastAssembler:
    params = {
        "key_col": "store",
        "time_col": "day",
        "horizon": 6,
        "internal_cols": ["sales", "features", "validation"],
    }
    params.update(kwargs)
    return ForecastAssembler(**params)


class TestRoundHalfUp:
    """Tests for prediction rounding."""

    def test_halves_round_up(self):
        """Test .5 rounds toward +inf, including negatives."""
        result = round_half_up(np.array([0.5, 1.5, 2.5, -0.5, -1.5]))

        np.testing.assert_array_equal(result, [1, 2, 3, 0, -1])

    def test_dtype_is_int64(self):
        """Test rounding returns int64."""
        assert round_half_up(np.array([1.2])).dtype == np.int64


class TestForecastAssembler:
    """Tests for ForecastAssembler.assemble."""

    def test_one_row_per_future_row(self, best_records, future_rows):
        """Test every future row receives a prediction."""
        result = _assembler().assemble(best_records, future_rows)

        assert len(result) == 12
        assert result.groupby("store").size().to_dict() == {"A": 6, "B": 6}

    def test_output_schema(self, best_records, future_rows):
        """Test internal columns are dropped and prediction appended."""
        result = _assembler().assemble(best_records, future_rows)

        assert list(result.columns) == ["id", "store", "day", "prediction"]
        assert result["prediction"].dtype == np.int64

    def test_predictions_rounded(self, best_records, future_rows):
        """Test constant forecasts are rounded per entity."""
        result = _assembler().assemble(best_records, future_rows)

        assert set(result.loc[result["store"] == "A", "prediction"]) == {10}
        assert set(result.loc[result["store"] == "B", "prediction"]) == {21}

    def test_sorted_by_key_then_time(self, best_records, future_rows):
        """Test default ordering is by entity key with time order kept."""
        result = _assembler().assemble(best_records, future_rows)

        assert list(result["store"]) == ["A"] * 6 + ["B"] * 6
        assert list(result["day"]) == [1, 2, 3, 4, 5, 6] * 2

    def test_sorted_by_id_column(self, best_records, future_rows):
        """Test the id column drives ordering when configured."""
        result = _assembler(sort_col="id").assemble(best_records, future_rows)

        assert list(result["id"]) == list(range(1, 13))

    def test_fewer_future_rows_than_horizon(self, best_records, future_rows):
        """Test 3 future rows with horizon 6 give 3 output rows."""
        subset = future_rows[(future_rows["store"] == "A") & (future_rows["day"] <= 3)]

        result = _assembler().assemble(best_records, subset)

        assert len(result) == 3
        assert list(result["day"]) == [1, 2, 3]

    def test_more_future_rows_than_horizon(self, best_records, future_rows):
        """Test surplus future rows beyond the horizon are dropped."""
        result = _assembler(horizon=4).assemble(best_records, future_rows)

        assert len(result) == 8
        assert list(result.loc[result["store"] == "A", "day"]) == [1, 2, 3, 4]

    def test_entity_without_record_is_skipped(self, best_records, future_rows):
        """Test inner-join semantics on the entity key."""
        result = _assembler().assemble({"A": best_records["A"]}, future_rows)

        assert set(result["store"]) == {"A"}

    def test_empty_output_keeps_schema(self, future_rows):
        """Test no matches give an empty frame with the output schema."""
        result = _assembler().assemble({}, future_rows)

        assert result.empty
        assert list(result.columns) == ["id", "store", "day", "prediction"]

    def test_missing_time_column_raises(self, best_records, future_rows):
        """Test a missing time column raises ConfigurationError."""
        with pytest.raises(ConfigurationError, match="not found in future schema"):
            _assembler().assemble(best_records, future_rows.drop(columns=["day"]))

    def test_key_sort_callable(self, best_records, future_rows):
        """Test an explicit key sort reverses the entity order."""
        order = {"A": 1, "B": 0}

        result = _assembler(key_sort=order.__getitem__).assemble(best_records, future_rows)

        assert list(result["store"]) == ["B"] * 6 + ["A"] * 6

    def test_feature_based_predicts_per_row(self, linear_gbm_record):
        """Test feature-based winners predict from each future row."""
        future = pd.DataFrame({"store": ["A"] * 3, "day": [3, 1, 2], "x": [5.0, 20.0, 35.0]})
        encoder = FeatureEncoder(["x"]).fit(future)

        result = _assembler(feature_encoder=encoder).assemble({"A": linear_gbm_record}, future)

        assert list(result["day"]) == [1, 2, 3]
        preds = result["prediction"].to_numpy()
        assert len(preds) == 3
        # y = 3x + 10 is increasing in x; day order maps to x = 20, 35, 5
        assert preds[2] < preds[0] < preds[1]

    def test_feature_based_without_encoder_raises(self, linear_gbm_record, future_rows):
        """Test feature-based records require an encoder."""
        with pytest.raises(ConfigurationError, match="feature encoder"):
            _assembler().assemble({"A": linear_gbm_record}, future_rows)

    def test_non_finite_predictions_dropped(self, best_records, future_rows):
        """Test rows with NaN forecasts are left out instead of cast to int."""
        nan_model = MovingAverageForecaster(window_size=1).fit(np.array([np.nan]))
        records = {**best_records, "B": replace(best_records["B"], model=nan_model)}

        result = _assembler().assemble(records, future_rows)

        assert set(result["store"]) == {"A"}
        assert set(result["prediction"]) == {10}
        assert result["prediction"].dtype == np.int64


class TestSaveResult:
    """Tests for save_result."""

    def test_writes_key_prediction_lines(self, best_records, future_rows, tmp_path):
        """Test CSV lines hold key and prediction without a header."""
        result = _assembler().assemble(best_records, future_rows)

        path = save_result(result, tmp_path / "out" / "result.csv", key_col="store")

        lines = path.read_text().splitlines()
        assert len(lines) == 12
        assert lines[0] == "A,10"
        assert lines[-1] == "B,21"
