"""Per-entity best-model search.

For each entity the finder holds out the trailing horizon, fits every
candidate of every family on the training prefix, scores the validation
predictions and keeps the minimum. The winner is refit on the whole series.

CRITICAL: Selection is deterministic. Candidates are ordered by
(metric, family_index, candidate_index), so the winner does not depend on
evaluation order or on how entities are scheduled across workers.

Failure isolation:
- Candidate: any fit/predict exception or timeout skips the candidate.
- Entity: insufficient data, no surviving candidate or a failed refit
  drops the entity from the output. The batch always continues.
"""

from __future__ import annotations

import contextvars
import math
import time
from collections.abc import Hashable, Iterable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any

import numpy as np
import structlog
from joblib import Parallel, delayed  # type: ignore[import-untyped]

from forecastfinder.core.exceptions import (
    FitFailureError,
    FitTimeoutError,
    InsufficientDataError,
)
from forecastfinder.features.candidates.grid import CandidateSpace
from forecastfinder.features.evaluation.metrics import Evaluator
from forecastfinder.features.forecasting.models import BaseForecaster, model_factory
from forecastfinder.features.forecasting.schemas import ModelConfig
from forecastfinder.features.selection.schemas import BestRecord, Evaluation
from forecastfinder.features.selection.splitter import ValidationSplit, split_validation
from forecastfinder.features.series.builder import Series

logger = structlog.get_logger()


def select_best(evaluations: Iterable[Evaluation]) -> Evaluation | None:
    """Pick the evaluation with the smallest metric.

    Ties are broken by earliest family, then earliest candidate. Non-finite
    metrics never win.

    Returns:
        Winning evaluation, or None if none qualifies.
    """
    qualified = [e for e in evaluations if math.isfinite(e.metric)]
    return min(qualified, key=lambda e: e.sort_key, default=None)


def fit_with_timeout(
    model: BaseForecaster,
    y: np.ndarray[Any, np.dtype[np.floating[Any]]],
    X: np.ndarray[Any, np.dtype[np.floating[Any]]] | None = None,
    timeout: float | None = None,
) -> BaseForecaster:
    """Fit model, giving up after timeout seconds.

    The fit runs on a worker thread. On timeout the thread is abandoned and
    its result discarded.

    Raises:
        FitTimeoutError: If the fit does not finish in time.
    """
    if timeout is None:
        return model.fit(y, X)

    executor = ThreadPoolExecutor(max_workers=1)
    future = executor.submit(model.fit, y, X)
    try:
        return future.result(timeout=timeout)
    except FutureTimeoutError as e:
        raise FitTimeoutError(
            f"Fit exceeded {timeout}s",
            details={"timeout_seconds": timeout},
        ) from e
    finally:
        executor.shutdown(wait=False, cancel_futures=True)


class BestModelFinder:
    """Search candidate spaces for the best model of each entity.

    Attributes:
        spaces: Candidate spaces, in family order.
        horizon: Validation and forecast horizon.
        evaluator: Validation scorer.
        fit_timeout: Per-fit timeout in seconds (None disables).
        random_state: Seed passed to every forecaster.
    """

    def __init__(
        self,
        spaces: Sequence[CandidateSpace],
        horizon: int,
        evaluator: Evaluator | None = None,
        fit_timeout: float | None = None,
        random_state: int = 42,
    ) -> None:
        if horizon < 1:
            raise ValueError(f"horizon must be >= 1, got {horizon}")
        self.spaces = list(spaces)
        self.horizon = horizon
        self.evaluator = evaluator or Evaluator()
        self.fit_timeout = fit_timeout
        self.random_state = random_state

    @property
    def n_candidates(self) -> int:
        """Total number of candidates across all families."""
        return sum(len(space) for space in self.spaces)

    def find(self, series: Series) -> BestRecord | None:
        """Best model of one entity, or None if the entity is dropped."""
        record, _reason = self._search(series)
        return record

    def find_all(
        self,
        series_map: Mapping[Hashable, Series],
        n_jobs: int = 1,
    ) -> tuple[dict[Hashable, BestRecord], dict[Hashable, str]]:
        """Run the search for every entity.

        Entities are processed in parallel worker threads; results are
        collected in the order of series_map.

        Args:
            series_map: Entity key to series.
            n_jobs: joblib worker count (-1 uses all cores).

        Returns:
            Tuple of (best records by key, drop reason by key).
        """
        keys = list(series_map)
        start_time = time.perf_counter()

        results = Parallel(n_jobs=n_jobs, prefer="threads")(
            delayed(contextvars.copy_context().run)(self._search, series_map[key])
            for key in keys
        )

        records: dict[Hashable, BestRecord] = {}
        dropped: dict[Hashable, str] = {}
        for key, (record, reason) in zip(keys, results, strict=True):
            if record is not None:
                records[key] = record
            else:
                dropped[key] = reason or "dropped"

        duration_ms = (time.perf_counter() - start_time) * 1000

        logger.info(
            "selection.batch_completed",
            n_entities=len(keys),
            n_selected=len(records),
            n_dropped=len(dropped),
            n_candidates=self.n_candidates,
            duration_ms=duration_ms,
        )

        return records, dropped

    def _search(self, series: Series) -> tuple[BestRecord | None, str | None]:
        try:
            split = split_validation(series, self.horizon)
        except InsufficientDataError as e:
            logger.warning(
                "selection.insufficient_data",
                key=series.key,
                n_observations=series.n_observations,
                horizon=self.horizon,
            )
            return None, e.message

        family_winners: list[Evaluation] = []
        n_evaluated = 0
        n_failed = 0
        for family_index, space in enumerate(self.spaces):
            evaluations, failed = self._evaluate_family(family_index, space, split)
            n_evaluated += len(evaluations)
            n_failed += failed

            family_best = select_best(evaluations)
            if family_best is not None:
                family_winners.append(family_best)
                logger.debug(
                    "selection.family_winner",
                    key=series.key,
                    family=space.family,
                    candidate_index=family_best.candidate_index,
                    metric=family_best.metric,
                )

        winner = select_best(family_winners)
        if winner is None:
            logger.warning(
                "selection.no_candidate",
                key=series.key,
                n_evaluated=n_evaluated,
                n_failed=n_failed,
            )
            return None, "no candidate produced a finite validation metric"

        try:
            model = self._fit(winner.config, series.values, series.features)
        except FitFailureError as e:
            logger.warning(
                "selection.refit_failed",
                key=series.key,
                family=winner.family,
                config_hash=winner.config.config_hash(),
                error=e.message,
                error_type=e.code,
            )
            return None, f"refit failed: {e.message}"

        logger.warning(
            "selection.best_model",
            key=series.key,
            family=winner.family,
            candidate_index=winner.candidate_index,
            hyperparameters=winner.config.hyperparameters(),
            metric=winner.metric,
            metric_name=self.evaluator.metric_name,
        )

        record = BestRecord(
            key=series.key,
            family=winner.family,
            config=winner.config,
            model=model,
            metric=winner.metric,
            candidate_index=winner.candidate_index,
            n_evaluated=n_evaluated,
            n_failed=n_failed,
        )
        return record, None

    def _evaluate_family(
        self,
        family_index: int,
        space: CandidateSpace,
        split: ValidationSplit,
    ) -> tuple[list[Evaluation], int]:
        evaluations: list[Evaluation] = []
        n_failed = 0
        for candidate_index, config in enumerate(space):
            try:
                model = self._fit(config, split.train.values, split.train.features)
                predicted = self._predict_validation(model, config, split)
            except FitFailureError as e:
                n_failed += 1
                logger.warning(
                    "selection.candidate_failed",
                    key=split.key,
                    family=space.family,
                    candidate_index=candidate_index,
                    error=e.message,
                    error_type=e.code,
                )
                continue

            metric = self.evaluator.score(predicted, split.validation.values)
            evaluations.append(
                Evaluation(
                    family_index=family_index,
                    candidate_index=candidate_index,
                    family=space.family,
                    config=config,
                    model=model,
                    metric=metric,
                )
            )
        return evaluations, n_failed

    def _fit(
        self,
        config: ModelConfig,
        y: np.ndarray[Any, np.dtype[np.floating[Any]]],
        features: np.ndarray[Any, np.dtype[np.floating[Any]]] | None,
    ) -> BaseForecaster:
        """Create and fit a forecaster for config.

        Raises:
            FitFailureError: If creation or fitting fails or times out.
        """
        X = features if config.feature_based else None
        try:
            model = model_factory(config, random_state=self.random_state)
            return fit_with_timeout(model, y, X, self.fit_timeout)
        except FitFailureError:
            raise
        except Exception as e:
            raise FitFailureError(
                str(e),
                details={"model_type": config.model_type, "error_type": type(e).__name__},
            ) from e

    def _predict_validation(
        self,
        model: BaseForecaster,
        config: ModelConfig,
        split: ValidationSplit,
    ) -> np.ndarray[Any, np.dtype[np.floating[Any]]]:
        """Forecast the validation slice.

        Raises:
            FitFailureError: If predict fails or returns the wrong number of values.
        """
        try:
            if config.feature_based:
                predicted = model.predict(split.horizon, split.validation.features)
            else:
                predicted = model.predict(split.horizon)
        except Exception as e:
            raise FitFailureError(
                f"Predict failed: {e}",
                details={"model_type": config.model_type, "error_type": type(e).__name__},
            ) from e

        if len(predicted) != split.horizon:
            raise FitFailureError(
                f"Predict returned {len(predicted)} values, expected {split.horizon}",
                details={"model_type": config.model_type, "n_predictions": len(predicted)},
            )
        return predicted
