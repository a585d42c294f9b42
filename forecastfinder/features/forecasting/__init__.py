"""Forecasting model families behind a unified fit/predict interface.

Exports:
    Models:
        - BaseForecaster: Abstract base class for all forecasters
        - ArimaForecaster: ARIMA(p, d, q) via statsmodels
        - HoltWintersForecaster: Exponential smoothing via statsmodels
        - MovingAverageForecaster: Mean of last N observations
        - GradientBoostingForecaster: Feature-based LightGBM regressor
        - model_factory: Create forecaster from config

    Schemas:
        - ModelConfig: Union of all model configurations
        - ArimaModelConfig, HoltWintersModelConfig, MovingAverageModelConfig,
          GradientBoostingModelConfig
"""

from forecastfinder.features.forecasting.models import (
    ArimaForecaster,
    BaseForecaster,
    GradientBoostingForecaster,
    HoltWintersForecaster,
    MovingAverageForecaster,
    model_factory,
)
from forecastfinder.features.forecasting.schemas import (
    ArimaModelConfig,
    GradientBoostingModelConfig,
    HoltWintersModelConfig,
    ModelConfig,
    ModelConfigBase,
    MovingAverageModelConfig,
)

__all__ = [
    "ArimaForecaster",
    "ArimaModelConfig",
    "BaseForecaster",
    "GradientBoostingForecaster",
    "GradientBoostingModelConfig",
    "HoltWintersForecaster",
    "HoltWintersModelConfig",
    "ModelConfig",
    "ModelConfigBase",
    "MovingAverageForecaster",
    "MovingAverageModelConfig",
    "model_factory",
]
