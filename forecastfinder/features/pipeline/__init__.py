"""Forecast pipeline: configuration, fitting, service entry points."""

from forecastfinder.features.pipeline.persistence import (
    ModelCollectionBundle,
    load_model_collection,
    save_model_collection,
)
from forecastfinder.features.pipeline.schemas import Algorithm, PipelineConfig
from forecastfinder.features.pipeline.service import (
    ForecastPipeline,
    ForecastPipelineModel,
    ForecastResult,
    ForecastService,
    build_config,
)

__all__ = [
    "Algorithm",
    "ForecastPipeline",
    "ForecastPipelineModel",
    "ForecastResult",
    "ForecastService",
    "ModelCollectionBundle",
    "PipelineConfig",
    "build_config",
    "load_model_collection",
    "save_model_collection",
]
