"""Join winning models' forecasts back onto future request rows.

For every entity with both a BestRecord and future rows, the future rows
are stably sorted by time and zipped positionally with the model's
predictions. Surplus rows or predictions are dropped (the shorter side
wins) and the mismatch is logged. Rows whose prediction is NaN or infinite
are dropped with a warning; they have no integer value.

CRITICAL: The join is an inner join on the entity key. Entities without a
BestRecord contribute no rows; BestRecords without future rows are ignored.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any

import numpy as np
import pandas as pd
import structlog

from forecastfinder.core.exceptions import ConfigurationError
from forecastfinder.features.series.builder import KeySort, require_columns, sort_keys

if TYPE_CHECKING:
    from forecastfinder.features.selection.schemas import BestRecord
    from forecastfinder.features.series.encoding import FeatureEncoder

logger = structlog.get_logger()

PREDICTION_COL = "prediction"


def round_half_up(
    values: np.ndarray[Any, np.dtype[np.floating[Any]]],
) -> np.ndarray[Any, np.dtype[np.int64]]:
    """Round to the nearest integer, halves upward: floor(x + 0.5)."""
    return np.floor(np.asarray(values, dtype=np.float64) + 0.5).astype(np.int64)


class ForecastAssembler:
    """Build the output table from best records and future rows.

    Attributes:
        key_col: Entity key column.
        time_col: Timestamp column of the future rows.
        horizon: Steps predicted by time-series families.
        internal_cols: Working columns dropped from the output.
        sort_col: Output sort column (id column, else entity key).
        feature_encoder: Fitted encoder for feature-based families.
        key_sort: Optional sort key callable for entity keys.
    """

    def __init__(
        self,
        key_col: str,
        time_col: str,
        horizon: int,
        internal_cols: Sequence[str] = (),
        sort_col: str | None = None,
        feature_encoder: FeatureEncoder | None = None,
        key_sort: KeySort | None = None,
    ) -> None:
        self.key_col = key_col
        self.time_col = time_col
        self.horizon = horizon
        self.internal_cols = list(internal_cols)
        self.sort_col = sort_col or key_col
        self.feature_encoder = feature_encoder
        self.key_sort = key_sort

    def required_columns(self) -> list[str]:
        """Columns the future rows must carry."""
        columns = [self.key_col, self.time_col]
        if self.sort_col not in columns:
            columns.append(self.sort_col)
        if self.feature_encoder is not None:
            columns.extend(c for c in self.feature_encoder.feature_cols if c not in columns)
        return columns

    def output_columns(self, future_rows: pd.DataFrame) -> list[str]:
        """Future columns kept in the output, in input order."""
        dropped = set(self.internal_cols) | {PREDICTION_COL}
        return [col for col in future_rows.columns if col not in dropped]

    def assemble(
        self,
        best_records: Mapping[Hashable, BestRecord],
        future_rows: pd.DataFrame,
    ) -> pd.DataFrame:
        """Produce one output row per (future row, prediction) pair.

        Args:
            best_records: Winning model per entity key.
            future_rows: Caller's future request rows.

        Returns:
            Future columns minus internal columns, plus an int64
            prediction column, stably sorted by sort_col.

        Raises:
            ConfigurationError: If a required column is missing, or a
                feature-based winner has no feature encoder.
        """
        require_columns(future_rows, self.required_columns(), "future")
        if self.feature_encoder is None and any(
            record.feature_based for record in best_records.values()
        ):
            raise ConfigurationError(
                "Feature-based models need a fitted feature encoder to predict",
                details={"key_col": self.key_col},
            )

        columns = self.output_columns(future_rows)

        positions = pd.Series(pd.RangeIndex(len(future_rows)))
        groups = positions.groupby(future_rows[self.key_col].to_numpy(), sort=False)
        indices = {key: idx.to_numpy() for key, idx in groups}

        frames: list[pd.DataFrame] = []
        for key in sort_keys([k for k in indices if k in best_records], self.key_sort):
            group = future_rows.iloc[indices[key]]
            order = np.argsort(group[self.time_col].to_numpy(), kind="stable")
            ordered = group.iloc[order]

            predicted = self._predict(best_records[key], ordered)

            n = min(len(predicted), len(ordered))
            if len(predicted) != len(ordered):
                logger.warning(
                    "assembly.length_mismatch",
                    key=key,
                    n_predictions=len(predicted),
                    n_future_rows=len(ordered),
                    n_emitted=n,
                )

            values = np.asarray(predicted[:n], dtype=np.float64)
            finite = np.flatnonzero(np.isfinite(values))
            if len(finite) != n:
                logger.warning(
                    "assembly.non_finite_predictions",
                    key=key,
                    n_predictions=n,
                    n_dropped=n - len(finite),
                )

            chunk = ordered.iloc[finite][columns].copy()
            chunk[PREDICTION_COL] = round_half_up(values[finite])
            frames.append(chunk)

        if frames:
            result = pd.concat(frames, ignore_index=True)
        else:
            result = future_rows.iloc[0:0][columns].copy()
            result[PREDICTION_COL] = pd.Series(dtype=np.int64)

        result = result.sort_values(self.sort_col, kind="stable", key=self._column_sort_key())
        result = result.reset_index(drop=True)

        logger.info(
            "assembly.completed",
            n_entities=len(frames),
            n_rows=len(result),
        )

        return result

    def _column_sort_key(self) -> Callable[[pd.Series], pd.Series] | None:
        key_sort = self.key_sort
        if key_sort is None or self.sort_col != self.key_col:
            return None

        def apply(column: pd.Series) -> pd.Series:
            return column.map(key_sort)

        return apply

    def _predict(
        self,
        record: BestRecord,
        ordered: pd.DataFrame,
    ) -> np.ndarray[Any, np.dtype[np.floating[Any]]]:
        if not record.feature_based:
            return record.model.predict(self.horizon)
        if self.feature_encoder is None:
            raise ConfigurationError(
                "Feature-based models need a fitted feature encoder to predict",
                details={"key_col": self.key_col},
            )
        X = self.feature_encoder.transform(ordered)
        return record.model.predict(len(X), X)


def save_result(frame: pd.DataFrame, path: str | Path, key_col: str) -> Path:
    """Write `key,prediction` lines, one per output row, without a header.

    Args:
        frame: Assembled output table.
        path: Destination file.
        key_col: Entity key column.

    Returns:
        Path to the written file.
    """
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    frame[[key_col, PREDICTION_COL]].to_csv(file_path, header=False, index=False)

    logger.info(
        "assembly.result_saved",
        file_path=str(file_path),
        n_rows=len(frame),
    )

    return file_path
