"""Pydantic schemas for forecasting model configuration.

Model configs are the candidate hyperparameters of a model family and are
designed to be:
- Immutable (frozen=True) so one instance can be shared across entity tasks
- Versioned (schema_version) for persisted model collections
- Hashable (config_hash) for deduplication and logging
"""

from __future__ import annotations

import hashlib
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# Model Configuration Schemas
# =============================================================================


class ModelConfigBase(BaseModel):
    """Base configuration for all forecasting models.

    All model configs inherit from this base to ensure:
    - Immutability after creation (frozen=True)
    - No extra fields allowed (extra="forbid")
    - Schema versioning for reproducibility
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    # Feature-based families regress on exogenous features instead of
    # extrapolating the series itself.
    feature_based: ClassVar[bool] = False

    schema_version: str = Field(
        default="1.0",
        description="Semantic version of this config schema",
        pattern=r"^\d+\.\d+(\.\d+)?$",
    )

    def config_hash(self) -> str:
        """Generate deterministic hash of configuration.

        Returns:
            16-character hex string hash of config JSON.
        """
        config_json = self.model_dump_json()
        return hashlib.sha256(config_json.encode()).hexdigest()[:16]

    def hyperparameters(self) -> dict[str, Any]:
        """Hyperparameters without bookkeeping fields."""
        return self.model_dump(exclude={"schema_version", "model_type"})


class ArimaModelConfig(ModelConfigBase):
    """Configuration for an ARIMA(p, d, q) forecaster.

    Attributes:
        p: Autoregressive order.
        d: Differencing order.
        q: Moving-average order.
    """

    model_type: Literal["arima"] = "arima"
    p: int = Field(default=1, ge=0, le=10, description="Autoregressive order")
    d: int = Field(default=0, ge=0, le=3, description="Differencing order")
    q: int = Field(default=0, ge=0, le=10, description="Moving-average order")

    @property
    def order(self) -> tuple[int, int, int]:
        """ARIMA order tuple in statsmodels convention."""
        return (self.p, self.d, self.q)


class HoltWintersModelConfig(ModelConfigBase):
    """Configuration for Holt-Winters exponential smoothing.

    When the training series holds fewer than two full seasonal cycles the
    forecaster drops the seasonal component and keeps the trend.

    Attributes:
        seasonal_periods: Season length in steps (None disables seasonality).
        trend: Trend component type.
        seasonal: Seasonal component type.
    """

    model_type: Literal["holt_winters"] = "holt_winters"
    seasonal_periods: int | None = Field(
        default=None,
        ge=2,
        description="Season length in steps",
    )
    trend: Literal["add", "mul"] | None = "add"
    seasonal: Literal["add", "mul"] | None = "add"


class MovingAverageModelConfig(ModelConfigBase):
    """Configuration for moving average forecaster.

    Predicts the mean of the last N observations for all horizons.
    Formula: y_hat[t+h] = mean(y[t-window+1:t+1])

    CRITICAL: Does NOT update recursively - uses same average for all horizons.

    Attributes:
        window_size: Window size for averaging (default: 8).
    """

    model_type: Literal["moving_average"] = "moving_average"
    window_size: int = Field(
        default=8,
        ge=1,
        le=365,
        description="Window size for averaging",
    )


class GradientBoostingModelConfig(ModelConfigBase):
    """Configuration for the feature-based LightGBM regressor.

    Attributes:
        n_estimators: Number of boosting rounds.
        max_depth: Maximum depth of trees.
        learning_rate: Learning rate for gradient boosting.
        min_child_samples: Minimum rows per leaf; kept small because each
            entity trains on its own short history.
    """

    feature_based: ClassVar[bool] = True

    model_type: Literal["gradient_boosting"] = "gradient_boosting"
    n_estimators: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Number of boosting rounds",
    )
    max_depth: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Maximum depth of trees",
    )
    learning_rate: float = Field(
        default=0.1,
        ge=0.001,
        le=1.0,
        description="Learning rate for gradient boosting",
    )
    min_child_samples: int = Field(
        default=2,
        ge=1,
        le=100,
        description="Minimum number of rows in a leaf",
    )


# Union type for all model configs
ModelConfig = (
    ArimaModelConfig
    | HoltWintersModelConfig
    | MovingAverageModelConfig
    | GradientBoostingModelConfig
)
