"""Forecast assembly onto future request rows."""

from forecastfinder.features.assembly.assembler import (
    PREDICTION_COL,
    ForecastAssembler,
    round_half_up,
    save_result,
)

__all__ = [
    "PREDICTION_COL",
    "ForecastAssembler",
    "round_half_up",
    "save_result",
]
