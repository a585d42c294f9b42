"""Core infrastructure: config, logging, exceptions."""

from forecastfinder.core.config import Settings, get_settings
from forecastfinder.core.exceptions import (
    ConfigurationError,
    FitFailureError,
    FitTimeoutError,
    ForecastFinderError,
    InsufficientDataError,
)
from forecastfinder.core.logging import configure_logging, get_logger, run_id_ctx

__all__ = [
    "ConfigurationError",
    "FitFailureError",
    "FitTimeoutError",
    "ForecastFinderError",
    "InsufficientDataError",
    "Settings",
    "configure_logging",
    "get_logger",
    "get_settings",
    "run_id_ctx",
]
