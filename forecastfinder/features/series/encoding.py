"""Feature matrix encoding for feature-based model families.

String and categorical columns are ordinal-encoded with scikit-learn's
OrdinalEncoder; numeric columns pass through as float64. Categories unseen
at fit time encode to -1.
"""

from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd
from pandas.api.types import is_numeric_dtype
from sklearn.preprocessing import OrdinalEncoder  # type: ignore[import-untyped]

UNKNOWN_CATEGORY = -1


class FeatureEncoder:
    """Encode a fixed list of feature columns into a float matrix.

    The encoder is fitted once on the training rows of a batch and then
    shared read-only by every entity task and by forecast assembly.

    Attributes:
        feature_cols: Ordered feature column names.
    """

    def __init__(self, feature_cols: list[str]) -> None:
        self.feature_cols = list(feature_cols)
        self._categorical_cols: list[str] = []
        self._encoder: OrdinalEncoder | None = None
        self._is_fitted = False

    @property
    def is_fitted(self) -> bool:
        """True once fit() has been called."""
        return self._is_fitted

    @property
    def categorical_cols(self) -> list[str]:
        """Columns that are ordinal-encoded."""
        return list(self._categorical_cols)

    def fit(self, rows: pd.DataFrame) -> FeatureEncoder:
        """Learn categories of the non-numeric feature columns.

        Args:
            rows: Training rows holding all feature columns.

        Returns:
            self (for method chaining).
        """
        self._categorical_cols = [
            col for col in self.feature_cols if not is_numeric_dtype(rows[col])
        ]
        if self._categorical_cols:
            self._encoder = OrdinalEncoder(
                handle_unknown="use_encoded_value",
                unknown_value=UNKNOWN_CATEGORY,
                dtype=np.float64,
            )
            self._encoder.fit(rows[self._categorical_cols].astype(str))
        self._is_fitted = True
        return self

    def transform(self, rows: pd.DataFrame) -> np.ndarray[Any, np.dtype[np.floating[Any]]]:
        """Encode rows into a matrix with one column per feature.

        Raises:
            RuntimeError: If the encoder has not been fitted.
        """
        if not self._is_fitted:
            raise RuntimeError("FeatureEncoder must be fitted before transform")

        matrix = np.empty((len(rows), len(self.feature_cols)), dtype=np.float64)
        if len(rows) == 0:
            return matrix
        if self._encoder is not None:
            encoded = self._encoder.transform(rows[self._categorical_cols].astype(str))
        else:
            encoded = np.empty((len(rows), 0), dtype=np.float64)

        for position, col in enumerate(self.feature_cols):
            if col in self._categorical_cols:
                matrix[:, position] = encoded[:, self._categorical_cols.index(col)]
            else:
                matrix[:, position] = rows[col].to_numpy(dtype=np.float64)
        return matrix
