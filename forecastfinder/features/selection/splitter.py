"""Hold out the trailing horizon of a series for validation.

CRITICAL: Respects temporal order - the validation slice is always the
last `horizon` observations, the training prefix everything before it.
"""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass

from forecastfinder.core.exceptions import InsufficientDataError
from forecastfinder.features.series.builder import Series


@dataclass
class ValidationSplit:
    """A series partitioned into training prefix and validation suffix.

    Attributes:
        key: Entity key.
        train: Training prefix.
        validation: Validation suffix of length horizon.
    """

    key: Hashable
    train: Series
    validation: Series

    @property
    def horizon(self) -> int:
        """Length of the validation slice."""
        return self.validation.n_observations


def _slice(series: Series, start: int, stop: int) -> Series:
    return Series(
        key=series.key,
        timestamps=series.timestamps[start:stop],
        values=series.values[start:stop],
        features=series.features[start:stop] if series.features is not None else None,
    )


def split_validation(series: Series, horizon: int) -> ValidationSplit:
    """Split a series into train and validation by horizon.

    Example (n=30, horizon=6):
        train: [0..24), validation: [24..30)

    Args:
        series: Entity series in time order.
        horizon: Number of trailing observations to hold out.

    Returns:
        ValidationSplit with len(train) + len(validation) == len(series).

    Raises:
        ValueError: If horizon is not positive.
        InsufficientDataError: If the series has no more than horizon points.
    """
    if horizon < 1:
        raise ValueError(f"horizon must be >= 1, got {horizon}")

    n = series.n_observations
    if n <= horizon:
        raise InsufficientDataError(
            f"Series {series.key!r} has {n} observations, need more than {horizon}",
            details={"key": series.key, "n_observations": n, "horizon": horizon},
        )

    cut = n - horizon
    return ValidationSplit(
        key=series.key,
        train=_slice(series, 0, cut),
        validation=_slice(series, cut, n),
    )
