"""Forecast pipeline and service entry points.

Orchestrates:
- Synchronous validation of the configuration and input schemas
- Grouping training rows into per-entity series
- Per-entity best-model search (parallel over entities)
- Assembly of forecasts onto the caller's future rows

CRITICAL: Configuration errors are raised before any entity is processed.
Per-entity problems never fail the call; they are logged and recorded in
ForecastPipelineModel.dropped_entities.
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Hashable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd
import structlog
from pydantic import ValidationError

from forecastfinder.core.config import Settings, get_settings
from forecastfinder.core.exceptions import ConfigurationError
from forecastfinder.core.logging import run_id_ctx
from forecastfinder.features.assembly.assembler import ForecastAssembler, save_result
from forecastfinder.features.evaluation.metrics import Evaluator
from forecastfinder.features.pipeline.persistence import (
    ModelCollectionBundle,
    save_model_collection,
)
from forecastfinder.features.pipeline.schemas import Algorithm, PipelineConfig
from forecastfinder.features.selection.finder import BestModelFinder
from forecastfinder.features.selection.schemas import BestRecord
from forecastfinder.features.series.builder import KeySort, SeriesBuilder, require_columns
from forecastfinder.features.series.encoding import FeatureEncoder

logger = structlog.get_logger()


def build_config(**params: Any) -> PipelineConfig:  # noqa: ANN401
    """Validate keyword parameters into a PipelineConfig.

    Raises:
        ConfigurationError: If a parameter is missing, empty or invalid.
    """
    try:
        return PipelineConfig(**params)
    except ValidationError as e:
        errors = [
            {"field": ".".join(str(loc) for loc in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        raise ConfigurationError(
            f"Invalid pipeline configuration: {errors[0]['field']}: {errors[0]['message']}",
            details={"errors": errors},
        ) from e


@dataclass
class ForecastPipelineModel:
    """Fitted pipeline: the per-entity model collection.

    Attributes:
        config: Pipeline configuration.
        best_records: Winning model per entity key.
        dropped_entities: Reason per entity excluded from the output.
        feature_encoder: Fitted encoder for feature-based families.
        run_id: Identifier of the fit run.
        key_sort: Sort key callable defining the entity order.
    """

    config: PipelineConfig
    best_records: dict[Hashable, BestRecord]
    dropped_entities: dict[Hashable, str] = field(default_factory=lambda: {})
    feature_encoder: FeatureEncoder | None = None
    run_id: str = ""
    key_sort: KeySort | None = None

    def assembler(self) -> ForecastAssembler:
        """Assembler matching this model's configuration."""
        return ForecastAssembler(
            key_col=self.config.group_by_col,
            time_col=self.config.time_col,
            horizon=self.config.horizon,
            internal_cols=self.config.internal_cols,
            sort_col=self.config.sort_col,
            feature_encoder=self.feature_encoder,
            key_sort=self.key_sort,
        )

    def transform(self, future_rows: pd.DataFrame) -> pd.DataFrame:
        """Forecast for the future rows of every selected entity.

        Raises:
            ConfigurationError: If a required column is missing from future_rows.
        """
        return self.assembler().assemble(self.best_records, future_rows)


class ForecastPipeline:
    """Fit per-entity best models from training rows.

    Attributes:
        config: Pipeline configuration.
        key_sort: Sort key callable defining the entity order. Required when
            entity keys have no natural order (e.g. mixed int and str keys).
    """

    def __init__(self, config: PipelineConfig, key_sort: KeySort | None = None) -> None:
        """Initialize the pipeline.

        Args:
            config: Pipeline configuration.
            key_sort: Sort key callable applied to entity keys wherever they
                are grouped or ordered. Natural key order when None.

        Raises:
            ConfigurationError: If a hyperparameter range yields an invalid
                candidate configuration.
        """
        self.config = config
        self.key_sort = key_sort
        try:
            spaces = config.candidate_spaces()
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid candidate hyperparameters: {e.errors()[0]['msg']}",
                details={"algorithm": config.algorithm.value},
            ) from e

        self.builder = self._series_builder()
        self.finder = BestModelFinder(
            spaces=spaces,
            horizon=config.horizon,
            evaluator=Evaluator(metric_name=config.metric_name),
            fit_timeout=config.fit_timeout_seconds,
            random_state=config.random_state,
        )

    def _series_builder(self) -> SeriesBuilder:
        """Series builder with a fresh, unfitted feature encoder when needed."""
        encoder = (
            FeatureEncoder(self.config.features_col)
            if self.config.algorithm.feature_based
            else None
        )
        return SeriesBuilder(
            key_col=self.config.group_by_col,
            time_col=self.config.time_col,
            value_col=self.config.label_col,
            feature_encoder=encoder,
            key_sort=self.key_sort,
        )

    def validate(self, train: pd.DataFrame, future: pd.DataFrame | None = None) -> None:
        """Check input schemas before any entity is processed.

        Raises:
            ConfigurationError: If a required column is missing.
        """
        require_columns(train, self.builder.required_columns(), "train")
        if future is not None:
            assembler = ForecastAssembler(
                key_col=self.config.group_by_col,
                time_col=self.config.time_col,
                horizon=self.config.horizon,
                sort_col=self.config.sort_col,
                feature_encoder=self.builder.feature_encoder,
                key_sort=self.key_sort,
            )
            require_columns(future, assembler.required_columns(), "future")

    def fit(self, train: pd.DataFrame) -> ForecastPipelineModel:
        """Select and refit the best model of every entity.

        Args:
            train: Training rows.

        Returns:
            ForecastPipelineModel with the model collection.

        Raises:
            ConfigurationError: If a required column is missing.
        """
        self.validate(train)

        run_id = run_id_ctx.get() or uuid.uuid4().hex[:16]
        token = run_id_ctx.set(run_id)
        try:
            start_time = time.perf_counter()

            logger.info(
                "pipeline.fit_started",
                algorithm=self.config.algorithm.value,
                horizon=self.config.horizon,
                n_rows=len(train),
                n_candidates=self.finder.n_candidates,
            )

            builder = self._series_builder()
            series_map = builder.build(train)
            best_records, dropped = self.finder.find_all(series_map, n_jobs=self.config.n_jobs)

            duration_ms = (time.perf_counter() - start_time) * 1000

            logger.info(
                "pipeline.fit_completed",
                algorithm=self.config.algorithm.value,
                n_entities=len(series_map),
                n_selected=len(best_records),
                n_dropped=len(dropped),
                duration_ms=duration_ms,
            )
        finally:
            run_id_ctx.reset(token)

        return ForecastPipelineModel(
            config=self.config,
            best_records=best_records,
            dropped_entities=dropped,
            feature_encoder=builder.feature_encoder,
            run_id=run_id,
            key_sort=self.key_sort,
        )

    def fit_transform(self, train: pd.DataFrame, future: pd.DataFrame) -> pd.DataFrame:
        """Fit on train and forecast future in one call."""
        self.validate(train, future)
        return self.fit(train).transform(future)


@dataclass
class ForecastResult:
    """Output of a service call.

    Attributes:
        predictions: Future rows with an int64 prediction column.
        model: Fitted model collection.
        duration_ms: Wall-clock duration of the call.
    """

    predictions: pd.DataFrame
    model: ForecastPipelineModel
    duration_ms: float


class ForecastService:
    """Entry points for per-entity best-model forecasting.

    - predict: any algorithm
    - predict_time_series: every algorithm except GRADIENT_BOOSTING
    - predict_feature_based: GRADIENT_BOOSTING only

    CRITICAL: All operations use Settings for reproducibility.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    def predict(
        self,
        train: pd.DataFrame,
        future: pd.DataFrame,
        key_sort: KeySort | None = None,
        **params: Any,  # noqa: ANN401
    ) -> ForecastResult:
        """Fit best models on train and forecast the future rows.

        Args:
            train: Training rows.
            future: Future request rows.
            key_sort: Sort key callable for entity keys without a natural
                order. Natural key order when None.
            **params: PipelineConfig fields (algorithm, label_col, ...).

        Returns:
            ForecastResult with predictions and the model collection.

        Raises:
            ConfigurationError: If the configuration or input schemas are invalid.
        """
        config = build_config(**params)
        return self._run(config, train, future, key_sort)

    def predict_time_series(
        self,
        train: pd.DataFrame,
        future: pd.DataFrame,
        key_sort: KeySort | None = None,
        **params: Any,  # noqa: ANN401
    ) -> ForecastResult:
        """Forecast with a time-series family.

        Raises:
            ConfigurationError: If the algorithm is feature-based or the
                configuration is invalid.
        """
        config = build_config(**params)
        if config.algorithm.feature_based:
            raise ConfigurationError(
                f"Algorithm '{config.algorithm.value}' is feature-based; "
                "use predict_feature_based",
                details={"algorithm": config.algorithm.value},
            )
        return self._run(config, train, future, key_sort)

    def predict_feature_based(
        self,
        train: pd.DataFrame,
        future: pd.DataFrame,
        key_sort: KeySort | None = None,
        **params: Any,  # noqa: ANN401
    ) -> ForecastResult:
        """Forecast with the feature-based gradient-boosting family.

        Raises:
            ConfigurationError: If the algorithm is not feature-based or the
                configuration is invalid.
        """
        params.setdefault("algorithm", Algorithm.GRADIENT_BOOSTING)
        config = build_config(**params)
        if not config.algorithm.feature_based:
            raise ConfigurationError(
                f"Algorithm '{config.algorithm.value}' is not feature-based; "
                "use predict_time_series",
                details={"algorithm": config.algorithm.value},
            )
        return self._run(config, train, future, key_sort)

    def save_model(self, model: ForecastPipelineModel, filename: str | None = None) -> Path:
        """Save the model collection under the configured artifacts directory.

        The model's key_sort is pickled with it, so it must be a module-level
        callable (e.g. str), not a lambda.

        Args:
            model: Fitted pipeline model.
            filename: Optional file name. Defaults to <run_id>.joblib.

        Returns:
            Path to the saved bundle.
        """
        bundle = ModelCollectionBundle(
            model=model,
            metadata={
                "algorithm": model.config.algorithm.value,
                "n_entities": len(model.best_records),
            },
        )
        name = filename or f"{model.run_id or uuid.uuid4().hex[:16]}.joblib"
        return save_model_collection(
            bundle, Path(self.settings.forecast_model_artifacts_dir) / name
        )

    def save_predictions(self, result: ForecastResult, filename: str | None = None) -> Path:
        """Write `key,prediction` lines under the configured results directory."""
        name = filename or f"{result.model.run_id or uuid.uuid4().hex[:16]}.csv"
        return save_result(
            result.predictions,
            Path(self.settings.forecast_results_dir) / name,
            key_col=result.model.config.group_by_col,
        )

    def _run(
        self,
        config: PipelineConfig,
        train: pd.DataFrame,
        future: pd.DataFrame,
        key_sort: KeySort | None = None,
    ) -> ForecastResult:
        pipeline = ForecastPipeline(config, key_sort=key_sort)
        pipeline.validate(train, future)

        start_time = time.perf_counter()
        token = run_id_ctx.set(uuid.uuid4().hex[:16])
        try:
            model = pipeline.fit(train)
            predictions = model.transform(future)
        finally:
            run_id_ctx.reset(token)
        duration_ms = (time.perf_counter() - start_time) * 1000

        logger.info(
            "pipeline.predict_completed",
            run_id=model.run_id,
            algorithm=config.algorithm.value,
            n_rows=len(predictions),
            n_dropped=len(model.dropped_entities),
            duration_ms=duration_ms,
        )

        return ForecastResult(predictions=predictions, model=model, duration_ms=duration_ms)
