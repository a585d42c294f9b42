"""Application configuration via Pydantic Settings v2."""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    # Forecasting
    forecast_random_seed: int = 42
    forecast_default_horizon: int = 6
    forecast_default_param_range: list[int] = [0, 1, 2]
    forecast_moving_average_windows: list[int] = [8, 16, 26]
    forecast_default_moving_average_window: int = 8
    forecast_gbm_n_estimators: list[int] = [100]
    forecast_gbm_max_depths: list[int] = [3]
    forecast_fit_timeout_seconds: float | None = 60.0
    forecast_n_jobs: int = -1

    # Artifacts
    forecast_model_artifacts_dir: str = "./artifacts/models"
    forecast_results_dir: str = "./artifacts/results"

    @field_validator("forecast_default_horizon")
    @classmethod
    def validate_horizon(cls, v: int) -> int:
        """Ensure the default horizon is a positive number of steps.

        Args:
            v: Horizon value.

        Returns:
            Validated horizon.

        Raises:
            ValueError: If horizon is not positive.
        """
        if v < 1:
            raise ValueError(f"forecast_default_horizon must be >= 1, got {v}")
        return v

    @field_validator("forecast_fit_timeout_seconds")
    @classmethod
    def normalize_timeout(cls, v: float | None) -> float | None:
        """Treat a zero or negative timeout as disabled."""
        if v is not None and v <= 0:
            return None
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton."""
    return Settings()
