"""Records produced by model selection."""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass

from forecastfinder.features.forecasting.models import BaseForecaster
from forecastfinder.features.forecasting.schemas import ModelConfig


@dataclass
class Evaluation:
    """One candidate fitted on the training prefix and scored on validation.

    Ordering: ascending metric, then family_index, then candidate_index.

    Attributes:
        family_index: Position of the candidate's family in the search.
        candidate_index: Position of the candidate in its family space.
        family: Family name.
        config: Candidate configuration.
        model: Forecaster fitted on the training prefix.
        metric: Validation metric (lower is better, +inf disqualified).
    """

    family_index: int
    candidate_index: int
    family: str
    config: ModelConfig
    model: BaseForecaster
    metric: float

    @property
    def sort_key(self) -> tuple[float, int, int]:
        """Total order used for winner selection."""
        return (self.metric, self.family_index, self.candidate_index)


@dataclass
class BestRecord:
    """Winning model of one entity, refit on its whole series.

    Attributes:
        key: Entity key.
        family: Winning family name.
        config: Winning configuration.
        model: Forecaster refit on the full series.
        metric: Validation metric of the winner.
        candidate_index: Position of the winner in its family space.
        n_evaluated: Candidates that fitted and were scored.
        n_failed: Candidates that failed to fit or predict.
    """

    key: Hashable
    family: str
    config: ModelConfig
    model: BaseForecaster
    metric: float
    candidate_index: int
    n_evaluated: int
    n_failed: int

    @property
    def feature_based(self) -> bool:
        """True when the winner predicts from feature rows."""
        return self.config.feature_based
