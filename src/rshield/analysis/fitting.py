"""Grid-search fit of population and rates to the observed peak.

Each candidate runs the full delayed model and is scored on how well the
simulated spreader peak matches the observed one:

    error = 1000 * |day_sim - day_obs| + 100 * |I_sim - I_obs| / I_obs

Peak timing dominates the score; magnitude only breaks near-ties.
The grid is fixed and finite, so the fit is deterministic.
"""
from __future__ import annotations

import itertools
import logging
import threading
from typing import Callable

import numpy as np
from pydantic import BaseModel, Field

from rshield.errors import FitCancelledError
from rshield.simulation.delayed_seir import integrate
from rshield.types.parameters import SimulationParameters
from rshield.types.series import ObservedSeries, SimulationState

logger = logging.getLogger(__name__)

MIN_OBSERVED_POINTS = 3
DAY_WEIGHT = 1000.0
MAGNITUDE_WEIGHT = 100.0

ProgressCallback = Callable[[int, int], None]


class FitGrid(BaseModel):
    """Candidate values for the grid search.

    Population candidates are multiples of the observed peak value. An
    empty ``alpha_values`` keeps the current alpha.
    """

    population_multipliers: list[float] = Field(
        default_factory=lambda: [1.5, 3.0, 5.0, 10.0]
    )
    beta_values: list[float] = Field(
        default_factory=lambda: [0.5, 1.0, 2.0, 3.0, 5.0, 8.0, 10.0, 15.0]
    )
    gamma_values: list[float] = Field(
        default_factory=lambda: [0.5, 1.0, 5.0, 10.0, 20.0, 50.0, 100.0]
    )
    alpha_values: list[float] = Field(default_factory=lambda: [0.5, 1.0, 1.2, 2.0])

    @property
    def size(self) -> int:
        return (
            len(self.population_multipliers)
            * len(self.beta_values)
            * len(self.gamma_values)
            * max(len(self.alpha_values), 1)
        )


class FitResult(BaseModel):
    """Outcome of a grid search."""

    parameters: SimulationParameters
    error: float = float("inf")
    evaluations: int = 0
    peak_observed_day: int = 0
    peak_observed_value: float = 0.0
    peak_simulated_day: float = 0.0
    peak_simulated_value: float = 0.0

    @property
    def fitted(self) -> bool:
        return self.evaluations > 0


def simulated_peak(state: SimulationState) -> tuple[float, float]:
    """(time, value) of the first maximum of the spreader curve."""
    idx = int(np.argmax(state.I))
    return idx * state.step, float(state.I[idx])


def peak_error(
    sim_day: float, sim_value: float, real_day: float, real_value: float,
) -> float:
    """Weighted peak-timing plus relative peak-magnitude error."""
    return (
        DAY_WEIGHT * abs(sim_day - real_day)
        + MAGNITUDE_WEIGHT * abs(sim_value - real_value) / real_value
    )


def grid_search(
    params: SimulationParameters,
    observed: ObservedSeries,
    grid: FitGrid | None = None,
    progress: ProgressCallback | None = None,
    cancel: threading.Event | None = None,
) -> FitResult:
    """Evaluate every grid candidate and keep the lowest-error one.

    Args:
        params: Current parameters; fields not on the grid are copied.
        observed: Observed series supplying the initial condition and peak.
        grid: Candidate values, defaults to FitGrid().
        progress: Called with (done, total) after each candidate.
        cancel: When set, the search stops with FitCancelledError.

    Returns:
        FitResult; ``evaluations == 0`` means the search was a no-op and
        ``parameters`` is the input unchanged.
    """
    if grid is None:
        grid = FitGrid()

    if len(observed) < MIN_OBSERVED_POINTS:
        logger.info(
            f"Auto-fit skipped: {len(observed)} observed points "
            f"(need {MIN_OBSERVED_POINTS})"
        )
        return FitResult(parameters=params)

    real_day, real_value = observed.peak()
    if real_value <= 0:
        logger.info("Auto-fit skipped: observed peak is zero")
        return FitResult(parameters=params)

    alphas = grid.alpha_values or [params.alpha]
    candidates = itertools.product(
        [m * real_value for m in grid.population_multipliers],
        grid.beta_values,
        grid.gamma_values,
        alphas,
    )
    total = grid.size
    if total == 0:
        logger.info("Auto-fit skipped: empty candidate grid")
        return FitResult(parameters=params)
    logger.info(
        f"Auto-fit over {total} candidates "
        f"(observed peak {real_value:.0f} on day {real_day})"
    )

    best: FitResult | None = None
    for n, (population, beta, gamma, alpha) in enumerate(candidates, 1):
        if cancel is not None and cancel.is_set():
            raise FitCancelledError(f"Auto-fit cancelled after {n - 1}/{total} candidates")

        trial = params.with_updates(
            population=population, beta=beta, gamma=gamma, alpha=alpha,
        )
        sim_day, sim_value = simulated_peak(integrate(trial, observed))
        error = peak_error(sim_day, sim_value, real_day, real_value)

        if best is None or error < best.error:
            best = FitResult(
                parameters=trial,
                error=error,
                peak_observed_day=real_day,
                peak_observed_value=real_value,
                peak_simulated_day=sim_day,
                peak_simulated_value=sim_value,
            )

        if progress is not None:
            progress(n, total)

    best.evaluations = total
    best.parameters = best.parameters.with_updates(
        population=float(round(best.parameters.population))
    )
    p = best.parameters
    logger.info(
        f"Best fit: N={p.population:.0f}, beta={p.beta}, gamma={p.gamma}, "
        f"alpha={p.alpha}, error={best.error:.3f}"
    )
    return best


def auto_fit(
    params: SimulationParameters,
    observed: ObservedSeries,
    grid: FitGrid | None = None,
) -> SimulationParameters:
    """Best-fit parameters, or ``params`` unchanged when data is too sparse."""
    return grid_search(params, observed, grid).parameters
