"""Group raw rows into per-entity, time-ordered series.

CRITICAL: Each Series is built once per batch and is read-only afterwards;
entity tasks never share or mutate each other's series.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import numpy as np
import pandas as pd
import structlog

from forecastfinder.core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from forecastfinder.features.series.encoding import FeatureEncoder

logger = structlog.get_logger()

KeySort = Callable[[Any], Any]


def require_columns(frame: pd.DataFrame, columns: Sequence[str], frame_name: str) -> None:
    """Raise ConfigurationError if any column is absent from frame.

    Args:
        frame: Input table.
        columns: Required column names.
        frame_name: Name used in the error message ("train", "future").

    Raises:
        ConfigurationError: If a column is missing.
    """
    missing = [col for col in columns if col not in frame.columns]
    if missing:
        raise ConfigurationError(
            f"Column(s) {missing} not found in {frame_name} schema",
            details={"missing": missing, "available": [str(c) for c in frame.columns]},
        )


def sort_keys(keys: list[Any], key_sort: KeySort | None = None) -> list[Any]:
    """Order entity keys with an explicit sort key, or their natural order."""
    return sorted(keys, key=key_sort) if key_sort is not None else sorted(keys)


@dataclass
class Series:
    """One entity's observations in time order.

    Attributes:
        key: Entity key.
        timestamps: Observation times, non-decreasing.
        values: Observed values as float64.
        features: Optional encoded feature matrix aligned with values.
        n_observations: Number of observations.
    """

    key: Hashable
    timestamps: list[Any]
    values: np.ndarray[Any, np.dtype[np.floating[Any]]]
    features: np.ndarray[Any, np.dtype[np.floating[Any]]] | None = None
    n_observations: int = field(init=False)

    def __post_init__(self) -> None:
        """Compute derived fields."""
        self.n_observations = len(self.values)
        if len(self.timestamps) != self.n_observations:
            raise ValueError(
                f"timestamps and values must have same length: "
                f"{len(self.timestamps)} vs {self.n_observations}"
            )
        if self.features is not None and len(self.features) != self.n_observations:
            raise ValueError(
                f"features and values must have same length: "
                f"{len(self.features)} vs {self.n_observations}"
            )


class SeriesBuilder:
    """Build a key -> Series mapping from a raw rows table.

    Rows are grouped by the key column and each group is stably sorted by
    the time column, so rows sharing a timestamp keep their input order.

    Attributes:
        key_col: Entity key column.
        time_col: Timestamp column.
        value_col: Observed value column.
        feature_encoder: Optional encoder producing the feature matrix.
        key_sort: Optional sort key callable defining the entity order.
    """

    def __init__(
        self,
        key_col: str,
        time_col: str,
        value_col: str,
        feature_encoder: FeatureEncoder | None = None,
        key_sort: KeySort | None = None,
    ) -> None:
        self.key_col = key_col
        self.time_col = time_col
        self.value_col = value_col
        self.feature_encoder = feature_encoder
        self.key_sort = key_sort

    def required_columns(self) -> list[str]:
        """Columns the training rows must carry."""
        columns = [self.key_col, self.time_col, self.value_col]
        if self.feature_encoder is not None:
            columns.extend(self.feature_encoder.feature_cols)
        return columns

    def build(self, rows: pd.DataFrame) -> dict[Hashable, Series]:
        """Group rows into series.

        Args:
            rows: Raw training rows.

        Returns:
            Mapping of entity key to Series, ordered by key.

        Raises:
            ConfigurationError: If a named column is absent from rows.
        """
        require_columns(rows, self.required_columns(), "train")

        features_all: np.ndarray[Any, np.dtype[np.floating[Any]]] | None = None
        if self.feature_encoder is not None:
            if not self.feature_encoder.is_fitted:
                self.feature_encoder.fit(rows)
            features_all = self.feature_encoder.transform(rows)

        positions = pd.RangeIndex(len(rows))
        groups = pd.Series(positions).groupby(rows[self.key_col].to_numpy(), sort=False)
        indices = {key: idx.to_numpy() for key, idx in groups}

        series_map: dict[Hashable, Series] = {}
        for key in sort_keys(list(indices), self.key_sort):
            group = rows.iloc[indices[key]]
            order = np.argsort(group[self.time_col].to_numpy(), kind="stable")
            ordered = group.iloc[order]
            series_map[key] = Series(
                key=key,
                timestamps=ordered[self.time_col].tolist(),
                values=ordered[self.value_col].to_numpy(dtype=np.float64),
                features=(
                    features_all[indices[key][order]] if features_all is not None else None
                ),
            )

        logger.debug(
            "series.built",
            n_rows=len(rows),
            n_entities=len(series_map),
        )
        return series_map
