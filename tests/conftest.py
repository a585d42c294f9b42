"""Shared pytest fixtures for ForecastFinder tests."""

import pytest

from forecastfinder.core.config import get_settings
from forecastfinder.core.logging import configure_logging


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Give every test freshly loaded settings."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True, scope="session")
def configured_logging():
    """Configure structlog once per test session."""
    configure_logging()
