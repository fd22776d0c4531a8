"""Core data types for the R-Shield engine."""

from rshield.types.checks import CheckResult
from rshield.types.parameters import InterventionControls, SimulationParameters
from rshield.types.series import (
    DEFAULT_OBSERVED,
    ChartPoint,
    ChartSeries,
    ObservedPoint,
    ObservedSeries,
    SimulationState,
)

__all__ = [
    # parameters
    "InterventionControls",
    "SimulationParameters",
    # series
    "DEFAULT_OBSERVED",
    "ObservedPoint",
    "ObservedSeries",
    "SimulationState",
    "ChartPoint",
    "ChartSeries",
    # checks
    "CheckResult",
]
