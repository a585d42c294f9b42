"""Forecasting models with unified scikit-learn-style interface.

All forecasters implement a common interface:
- fit(y, X=None) -> self
- predict(horizon, X=None) -> np.ndarray
- get_params() -> dict
- set_params(**params) -> self

Time-series families (ARIMA, Holt-Winters, moving average) extrapolate y and
ignore X. The gradient-boosted family regresses y on X and requires X in
both fit and predict.

CRITICAL: All implementations must be deterministic with fixed random_state.
"""

from __future__ import annotations

import warnings
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

import numpy as np
from lightgbm import LGBMRegressor
from statsmodels.tsa.arima.model import ARIMA
from statsmodels.tsa.holtwinters import ExponentialSmoothing

if TYPE_CHECKING:
    from forecastfinder.features.forecasting.schemas import ModelConfig


class BaseForecaster(ABC):
    """Abstract base class for all forecasting models.

    CRITICAL: All implementations must be deterministic with fixed random_state.

    Interface follows scikit-learn conventions:
    - fit(y, X=None) -> self
    - predict(horizon, X=None) -> np.ndarray
    - get_params() -> dict
    - set_params(**params) -> self

    Attributes:
        random_state: Random seed for reproducibility.
    """

    def __init__(self, random_state: int = 42) -> None:
        """Initialize the forecaster.

        Args:
            random_state: Random seed for reproducibility.
        """
        self.random_state = random_state
        self._is_fitted = False

    @abstractmethod
    def fit(
        self,
        y: np.ndarray[Any, np.dtype[np.floating[Any]]],
        X: np.ndarray[Any, np.dtype[np.floating[Any]]] | None = None,
    ) -> BaseForecaster:
        """Fit the model on historical data.

        Args:
            y: Target values (1D array of shape [n_samples]).
            X: Optional exogenous features (2D array of shape [n_samples, n_features]).

        Returns:
            self (for method chaining).

        Raises:
            ValueError: If y is empty or has insufficient observations.
        """

    @abstractmethod
    def predict(
        self, horizon: int, X: np.ndarray[Any, np.dtype[np.floating[Any]]] | None = None
    ) -> np.ndarray[Any, np.dtype[np.floating[Any]]]:
        """Generate forecasts for the specified horizon.

        Args:
            horizon: Number of steps to forecast.
            X: Optional exogenous features for forecast period.

        Returns:
            Array of forecasts with shape [horizon].

        Raises:
            RuntimeError: If model has not been fitted.
        """

    @abstractmethod
    def get_params(self) -> dict[str, Any]:
        """Get model parameters (scikit-learn convention).

        Returns:
            Dictionary of parameter names to values.
        """

    def set_params(self, **params: Any) -> BaseForecaster:  # noqa: ANN401
        """Set model parameters (scikit-learn convention).

        Args:
            **params: Parameter names and values to set.

        Returns:
            self (for method chaining).
        """
        for key, value in params.items():
            setattr(self, key, value)
        return self

    @property
    def is_fitted(self) -> bool:
        """Check if the model has been fitted.

        Returns:
            True if fit() has been called successfully.
        """
        return self._is_fitted

    def _check_fitted(self) -> None:
        if not self._is_fitted:
            raise RuntimeError("Model must be fitted before predict")


class MovingAverageForecaster(BaseForecaster):
    """Moving average forecaster: predicts mean of last N observations.

    Formula: y_hat[t+h] = mean(y[t-window+1:t+1])

    CRITICAL: Does NOT update recursively - uses same average for all horizons.

    Attributes:
        window_size: Window size for averaging (default: 8).
    """

    def __init__(self, window_size: int = 8, random_state: int = 42) -> None:
        """Initialize the moving average forecaster.

        Args:
            window_size: Window size for averaging.
            random_state: Random seed for reproducibility (unused but kept for interface).
        """
        super().__init__(random_state)
        self.window_size = window_size
        self._forecast_value: float = 0.0

    def fit(
        self,
        y: np.ndarray[Any, np.dtype[np.floating[Any]]],
        X: np.ndarray[Any, np.dtype[np.floating[Any]]] | None = None,  # noqa: ARG002
    ) -> MovingAverageForecaster:
        """Fit by computing mean of last window_size values.

        Args:
            y: Target values (1D array).
            X: Ignored for moving average model.

        Returns:
            self (for method chaining).

        Raises:
            ValueError: If y has fewer observations than window_size.
        """
        if len(y) < self.window_size:
            raise ValueError(f"Need at least {self.window_size} observations")
        window = np.asarray(y[-self.window_size :], dtype=np.float64)
        self._forecast_value = float(np.mean(window))
        self._is_fitted = True
        return self

    def predict(
        self,
        horizon: int,
        X: np.ndarray[Any, np.dtype[np.floating[Any]]] | None = None,  # noqa: ARG002
    ) -> np.ndarray[Any, np.dtype[np.floating[Any]]]:
        """Predict constant value (mean) for all horizons."""
        self._check_fitted()
        return np.full(horizon, self._forecast_value, dtype=np.float64)

    def get_params(self) -> dict[str, Any]:
        """Get model parameters.

        Returns:
            Dictionary with window_size and random_state.
        """
        return {"window_size": self.window_size, "random_state": self.random_state}


class ArimaForecaster(BaseForecaster):
    """ARIMA(p, d, q) forecaster backed by statsmodels.

    Convergence and estimation warnings are silenced; a genuine estimation
    failure surfaces as an exception from fit().

    Attributes:
        order: (p, d, q) order tuple.
    """

    def __init__(self, order: tuple[int, int, int] = (1, 0, 0), random_state: int = 42) -> None:
        super().__init__(random_state)
        self.order = tuple(order)
        self._result: Any = None

    def fit(
        self,
        y: np.ndarray[Any, np.dtype[np.floating[Any]]],
        X: np.ndarray[Any, np.dtype[np.floating[Any]]] | None = None,  # noqa: ARG002
    ) -> ArimaForecaster:
        """Estimate ARIMA coefficients on y.

        Raises:
            ValueError: If y is shorter than the number of estimated terms.
        """
        p, d, q = self.order
        min_obs = p + d + q + 1
        if len(y) < min_obs:
            raise ValueError(f"Need at least {min_obs} observations for order {self.order}")
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            model = ARIMA(np.asarray(y, dtype=np.float64), order=self.order)
            self._result = model.fit()
        self._is_fitted = True
        return self

    def predict(
        self,
        horizon: int,
        X: np.ndarray[Any, np.dtype[np.floating[Any]]] | None = None,  # noqa: ARG002
    ) -> np.ndarray[Any, np.dtype[np.floating[Any]]]:
        """Forecast the next horizon steps."""
        self._check_fitted()
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            forecast = self._result.forecast(steps=horizon)
        return np.asarray(forecast, dtype=np.float64)

    def get_params(self) -> dict[str, Any]:
        """Get model parameters."""
        return {"order": self.order, "random_state": self.random_state}


class HoltWintersForecaster(BaseForecaster):
    """Holt-Winters exponential smoothing backed by statsmodels.

    Seasonality needs two full cycles of history. Shorter series fall back
    to a trend-only model rather than failing.

    Attributes:
        seasonal_periods: Season length in steps (None disables seasonality).
        trend: Trend component type ("add", "mul" or None).
        seasonal: Seasonal component type ("add", "mul" or None).
    """

    def __init__(
        self,
        seasonal_periods: int | None = None,
        trend: str | None = "add",
        seasonal: str | None = "add",
        random_state: int = 42,
    ) -> None:
        super().__init__(random_state)
        self.seasonal_periods = seasonal_periods
        self.trend = trend
        self.seasonal = seasonal
        self._result: Any = None

    def fit(
        self,
        y: np.ndarray[Any, np.dtype[np.floating[Any]]],
        X: np.ndarray[Any, np.dtype[np.floating[Any]]] | None = None,  # noqa: ARG002
    ) -> HoltWintersForecaster:
        """Fit smoothing parameters on y.

        Raises:
            ValueError: If y has fewer than 3 observations.
        """
        if len(y) < 3:
            raise ValueError("Need at least 3 observations")
        values = np.asarray(y, dtype=np.float64)

        seasonal = self.seasonal
        seasonal_periods = self.seasonal_periods
        if seasonal_periods is None or len(values) < 2 * seasonal_periods:
            seasonal = None
            seasonal_periods = None

        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            model = ExponentialSmoothing(
                values,
                trend=self.trend,
                seasonal=seasonal,
                seasonal_periods=seasonal_periods,
                initialization_method="estimated",
            )
            self._result = model.fit()
        self._is_fitted = True
        return self

    def predict(
        self,
        horizon: int,
        X: np.ndarray[Any, np.dtype[np.floating[Any]]] | None = None,  # noqa: ARG002
    ) -> np.ndarray[Any, np.dtype[np.floating[Any]]]:
        """Forecast the next horizon steps."""
        self._check_fitted()
        return np.asarray(self._result.forecast(horizon), dtype=np.float64)

    def get_params(self) -> dict[str, Any]:
        """Get model parameters."""
        return {
            "seasonal_periods": self.seasonal_periods,
            "trend": self.trend,
            "seasonal": self.seasonal,
            "random_state": self.random_state,
        }


class GradientBoostingForecaster(BaseForecaster):
    """Feature-based LightGBM regressor.

    Predicts one value per row of X; horizon must equal len(X).

    Attributes:
        n_estimators: Number of boosting rounds.
        max_depth: Maximum depth of trees.
        learning_rate: Learning rate for gradient boosting.
        min_child_samples: Minimum number of rows in a leaf.
    """

    def __init__(
        self,
        n_estimators: int = 100,
        max_depth: int = 3,
        learning_rate: float = 0.1,
        min_child_samples: int = 2,
        random_state: int = 42,
    ) -> None:
        super().__init__(random_state)
        self.n_estimators = n_estimators
        self.max_depth = max_depth
        self.learning_rate = learning_rate
        self.min_child_samples = min_child_samples
        self._regressor: LGBMRegressor | None = None

    def fit(
        self,
        y: np.ndarray[Any, np.dtype[np.floating[Any]]],
        X: np.ndarray[Any, np.dtype[np.floating[Any]]] | None = None,
    ) -> GradientBoostingForecaster:
        """Train the regressor on (X, y).

        Raises:
            ValueError: If X is missing, empty, or not aligned with y.
        """
        if X is None:
            raise ValueError("GradientBoostingForecaster requires features X")
        if len(y) == 0:
            raise ValueError("Cannot fit on empty array")
        if len(X) != len(y):
            raise ValueError(f"X and y must have same length: {len(X)} vs {len(y)}")

        regressor = LGBMRegressor(
            n_estimators=self.n_estimators,
            max_depth=self.max_depth,
            learning_rate=self.learning_rate,
            min_child_samples=self.min_child_samples,
            random_state=self.random_state,
            n_jobs=1,
            verbose=-1,
        )
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            regressor.fit(np.asarray(X, dtype=np.float64), np.asarray(y, dtype=np.float64))
        self._regressor = regressor
        self._is_fitted = True
        return self

    def predict(
        self,
        horizon: int,
        X: np.ndarray[Any, np.dtype[np.floating[Any]]] | None = None,
    ) -> np.ndarray[Any, np.dtype[np.floating[Any]]]:
        """Predict one value per feature row.

        Raises:
            RuntimeError: If model has not been fitted.
            ValueError: If X is missing or its length differs from horizon.
        """
        regressor = self._regressor
        if regressor is None:
            raise RuntimeError("Model must be fitted before predict")
        if X is None:
            raise ValueError("GradientBoostingForecaster requires features X")
        if len(X) != horizon:
            raise ValueError(f"Expected {horizon} feature rows, got {len(X)}")
        if horizon == 0:
            return np.array([], dtype=np.float64)
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            predictions = regressor.predict(np.asarray(X, dtype=np.float64))
        return np.asarray(predictions, dtype=np.float64)

    def get_params(self) -> dict[str, Any]:
        """Get model parameters."""
        return {
            "n_estimators": self.n_estimators,
            "max_depth": self.max_depth,
            "learning_rate": self.learning_rate,
            "min_child_samples": self.min_child_samples,
            "random_state": self.random_state,
        }


def model_factory(config: ModelConfig, random_state: int = 42) -> BaseForecaster:
    """Create a forecaster instance from a configuration.

    Args:
        config: Model configuration.
        random_state: Random seed for reproducibility.

    Returns:
        Instantiated, unfitted forecaster.

    Raises:
        ValueError: If model_type is unknown.
    """
    from forecastfinder.features.forecasting.schemas import (
        ArimaModelConfig,
        GradientBoostingModelConfig,
        HoltWintersModelConfig,
        MovingAverageModelConfig,
    )

    if isinstance(config, ArimaModelConfig):
        return ArimaForecaster(order=config.order, random_state=random_state)
    elif isinstance(config, HoltWintersModelConfig):
        return HoltWintersForecaster(
            seasonal_periods=config.seasonal_periods,
            trend=config.trend,
            seasonal=config.seasonal,
            random_state=random_state,
        )
    elif isinstance(config, MovingAverageModelConfig):
        return MovingAverageForecaster(
            window_size=config.window_size,
            random_state=random_state,
        )
    elif isinstance(config, GradientBoostingModelConfig):
        return GradientBoostingForecaster(
            n_estimators=config.n_estimators,
            max_depth=config.max_depth,
            learning_rate=config.learning_rate,
            min_child_samples=config.min_child_samples,
            random_state=random_state,
        )
    else:
        raise ValueError(f"Unknown model type: {getattr(config, 'model_type', config)!r}")
