"""Series construction: per-entity grouping, time ordering and feature encoding."""

from forecastfinder.features.series.builder import (
    Series,
    SeriesBuilder,
    require_columns,
    sort_keys,
)
from forecastfinder.features.series.encoding import FeatureEncoder

__all__ = [
    "FeatureEncoder",
    "Series",
    "SeriesBuilder",
    "require_columns",
    "sort_keys",
]
