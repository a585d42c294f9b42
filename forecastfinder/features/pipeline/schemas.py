"""Pipeline configuration and algorithm selection.

PipelineConfig is validated once, before any entity is processed, and is
immutable afterwards. Defaults come from Settings.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from forecastfinder.core.config import get_settings
from forecastfinder.features.candidates.grid import (
    CandidateSpace,
    arima_space,
    gradient_boosting_space,
    holt_winters_space,
    moving_average_space,
)
from forecastfinder.features.evaluation.metrics import MetricName

FEATURES_PLACEHOLDER_COL = "features"


class Algorithm(str, Enum):
    """Model families a pipeline can search.

    - ARIMA: grid over (p, d, q)
    - HOLT_WINTERS: additive trend and seasonality
    - MOVING_AVERAGE: configured window
    - MOVING_AVERAGE_8/16/26: fixed windows
    - FIND_BEST_FORECAST: ARIMA, Holt-Winters and every moving-average window
    - GRADIENT_BOOSTING: feature-based LightGBM regression
    """

    ARIMA = "arima"
    HOLT_WINTERS = "holt_winters"
    MOVING_AVERAGE = "moving_average"
    MOVING_AVERAGE_8 = "moving_average_8"
    MOVING_AVERAGE_16 = "moving_average_16"
    MOVING_AVERAGE_26 = "moving_average_26"
    FIND_BEST_FORECAST = "find_best_forecast"
    GRADIENT_BOOSTING = "gradient_boosting"

    @property
    def feature_based(self) -> bool:
        """True for families that regress on feature columns."""
        return self is Algorithm.GRADIENT_BOOSTING


_FIXED_WINDOWS = {
    Algorithm.MOVING_AVERAGE_8: 8,
    Algorithm.MOVING_AVERAGE_16: 16,
    Algorithm.MOVING_AVERAGE_26: 26,
}


def _settings_default(name: str) -> Callable[[], Any]:
    return lambda: getattr(get_settings(), name)


class PipelineConfig(BaseModel):
    """Configuration of one forecasting pipeline.

    Column roles:
    - group_by_col: entity key, one series per distinct value
    - time_col: orders each entity's rows
    - label_col: series values, and the regression target of
      feature-based families
    - features_col: regressors of feature-based families
    - id_col: optional output sort column (entity key when absent)

    Attributes:
        algorithm: Model family selector.
        horizon: Forecast and validation horizon.
        param_range: Values each ARIMA order parameter may take.
        moving_average_windows: Windows searched by FIND_BEST_FORECAST.
        moving_average_window: Window of MOVING_AVERAGE.
        seasonal_periods: Holt-Winters season length (horizon when None).
        metric_name: Validation metric.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    algorithm: Algorithm
    label_col: str = Field(..., min_length=1)
    features_col: list[str] = Field(..., min_length=1)
    time_col: str = Field(..., min_length=1)
    group_by_col: str = Field(..., min_length=1)
    id_col: str | None = None
    validation_col: str = Field(default="validation", min_length=1)

    horizon: int = Field(default_factory=_settings_default("forecast_default_horizon"), ge=1)
    param_range: list[int] = Field(
        default_factory=_settings_default("forecast_default_param_range"), min_length=1
    )
    moving_average_windows: list[int] = Field(
        default_factory=_settings_default("forecast_moving_average_windows"), min_length=1
    )
    moving_average_window: int = Field(
        default_factory=_settings_default("forecast_default_moving_average_window"),
        ge=1,
        le=365,
    )
    seasonal_periods: int | None = Field(default=None, ge=2)
    metric_name: MetricName = "rmspe"
    gbm_n_estimators: list[int] = Field(
        default_factory=_settings_default("forecast_gbm_n_estimators"), min_length=1
    )
    gbm_max_depths: list[int] = Field(
        default_factory=_settings_default("forecast_gbm_max_depths"), min_length=1
    )

    fit_timeout_seconds: float | None = Field(
        default_factory=_settings_default("forecast_fit_timeout_seconds")
    )
    n_jobs: int = Field(default_factory=_settings_default("forecast_n_jobs"))
    random_state: int = Field(default_factory=_settings_default("forecast_random_seed"))

    @field_validator("features_col")
    @classmethod
    def validate_features_col(cls, v: list[str]) -> list[str]:
        """Reject blank feature column names."""
        if any(not name for name in v):
            raise ValueError("features_col must not contain empty names")
        return v

    @field_validator("param_range")
    @classmethod
    def validate_param_range(cls, v: list[int]) -> list[int]:
        """ARIMA order parameters are non-negative."""
        if any(value < 0 for value in v):
            raise ValueError(f"param_range values must be >= 0, got {v}")
        return v

    @field_validator("moving_average_windows")
    @classmethod
    def validate_windows(cls, v: list[int]) -> list[int]:
        """Moving-average windows are positive."""
        if any(not 1 <= value <= 365 for value in v):
            raise ValueError(f"moving_average_windows values must be in [1, 365], got {v}")
        return v

    @field_validator("fit_timeout_seconds")
    @classmethod
    def normalize_timeout(cls, v: float | None) -> float | None:
        """Treat a zero or negative timeout as disabled."""
        if v is not None and v <= 0:
            return None
        return v

    @property
    def internal_cols(self) -> list[str]:
        """Working columns dropped from the output."""
        return [self.label_col, FEATURES_PLACEHOLDER_COL, self.validation_col]

    @property
    def sort_col(self) -> str:
        """Column the output is sorted by."""
        return self.id_col or self.group_by_col

    @property
    def effective_seasonal_periods(self) -> int | None:
        """Holt-Winters season length; None disables seasonality."""
        if self.seasonal_periods is not None:
            return self.seasonal_periods
        return self.horizon if self.horizon >= 2 else None

    def candidate_spaces(self) -> list[CandidateSpace]:
        """Candidate spaces searched for the configured algorithm, in family order."""
        if self.algorithm is Algorithm.ARIMA:
            return [arima_space(self.param_range)]
        if self.algorithm is Algorithm.HOLT_WINTERS:
            return [holt_winters_space(self.effective_seasonal_periods)]
        if self.algorithm is Algorithm.MOVING_AVERAGE:
            return [moving_average_space(self.moving_average_window)]
        if self.algorithm in _FIXED_WINDOWS:
            return [moving_average_space(_FIXED_WINDOWS[self.algorithm])]
        if self.algorithm is Algorithm.FIND_BEST_FORECAST:
            return [
                arima_space(self.param_range),
                holt_winters_space(self.effective_seasonal_periods),
                *(moving_average_space(w) for w in self.moving_average_windows),
            ]
        return [gradient_boosting_space(self.gbm_n_estimators, self.gbm_max_depths)]
