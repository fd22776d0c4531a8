"""Tests for the grid-search fit and its background job."""
from __future__ import annotations

import itertools
import threading

import numpy as np
import pytest

from rshield.analysis.fitting import (
    FitGrid,
    FitResult,
    auto_fit,
    grid_search,
    peak_error,
    simulated_peak,
)
from rshield.analysis.jobs import FitJob
from rshield.errors import FitCancelledError
from rshield.simulation.delayed_seir import integrate
from rshield.types.parameters import SimulationParameters
from rshield.types.series import ObservedSeries, SimulationState


def _small_grid(**overrides) -> FitGrid:
    grid = dict(
        population_multipliers=[1.5, 5.0],
        beta_values=[1.0, 5.0],
        gamma_values=[5.0, 50.0],
        alpha_values=[1.2],
    )
    grid.update(overrides)
    return FitGrid(**grid)


class TestFitGrid:
    def test_defaults(self):
        grid = FitGrid()
        assert grid.population_multipliers == [1.5, 3.0, 5.0, 10.0]
        assert grid.beta_values == sorted(grid.beta_values)
        assert grid.gamma_values == sorted(grid.gamma_values)
        assert grid.size == 4 * 8 * 7 * 4

    def test_size_without_alpha(self):
        assert _small_grid(alpha_values=[]).size == 8


class TestScoring:
    def test_peak_error_weights(self):
        # one day late, 10% too high
        assert peak_error(5.0, 110.0, 4, 100.0) == pytest.approx(1010.0)

    def test_timing_dominates_magnitude(self):
        on_time_but_double = peak_error(4.0, 200.0, 4, 100.0)
        one_day_late_exact = peak_error(5.0, 100.0, 4, 100.0)
        assert on_time_but_double < one_day_late_exact

    def test_simulated_peak_first_maximum(self):
        state = SimulationState(
            S=np.zeros(5), E=np.zeros(5), R=np.zeros(5),
            I=np.array([1.0, 3.0, 7.0, 7.0, 2.0]),
            step=0.5,
        )
        assert simulated_peak(state) == (1.0, 7.0)


class TestGridSearch:
    def test_sparse_data_is_noop(self):
        params = SimulationParameters()
        obs = ObservedSeries.from_pairs([(0, 10.0), (1, 20.0)])
        result = grid_search(params, obs, _small_grid())
        assert result.evaluations == 0
        assert not result.fitted
        assert result.parameters is params

    def test_auto_fit_sparse_returns_input(self):
        params = SimulationParameters()
        obs = ObservedSeries.from_pairs([(0, 10.0)])
        assert auto_fit(params, obs) == params

    def test_zero_peak_is_noop(self):
        params = SimulationParameters()
        obs = ObservedSeries.from_pairs([(0, 0.0), (1, 0.0), (2, 0.0)])
        assert grid_search(params, obs, _small_grid()).parameters is params

    def test_empty_grid_is_noop(self, observed):
        params = SimulationParameters()
        assert grid_search(params, observed, _small_grid(beta_values=[])).parameters is params

    def test_deterministic(self, observed):
        params = SimulationParameters()
        a = grid_search(params, observed, _small_grid())
        b = grid_search(params, observed, _small_grid())
        assert a == b

    def test_selects_minimum_error(self, observed):
        params = SimulationParameters()
        grid = _small_grid()
        result = grid_search(params, observed, grid)

        real_day, real_value = observed.peak()
        errors = []
        for m, beta, gamma, alpha in itertools.product(
            grid.population_multipliers, grid.beta_values,
            grid.gamma_values, grid.alpha_values,
        ):
            trial = params.with_updates(
                population=m * real_value, beta=beta, gamma=gamma, alpha=alpha,
            )
            day, value = simulated_peak(integrate(trial, observed))
            errors.append(peak_error(day, value, real_day, real_value))

        assert result.error == pytest.approx(min(errors))
        assert result.evaluations == grid.size
        assert result.peak_observed_day == 4
        assert result.peak_observed_value == 600000.0

    def test_result_values_come_from_grid(self, observed):
        grid = _small_grid()
        fitted = auto_fit(SimulationParameters(), observed, grid)
        assert fitted.beta in grid.beta_values
        assert fitted.gamma in grid.gamma_values
        assert fitted.alpha in grid.alpha_values
        assert fitted.population in [round(m * 600000.0) for m in grid.population_multipliers]

    def test_population_rounded(self):
        obs = ObservedSeries.from_pairs([(0, 10.0), (1, 333.0), (2, 50.0)])
        fitted = auto_fit(SimulationParameters(), obs, _small_grid())
        assert fitted.population == round(fitted.population)

    def test_other_fields_copied(self, observed):
        params = SimulationParameters(delay=2.0, horizon=9).with_controls(suppression=0.3)
        fitted = auto_fit(params, observed, _small_grid())
        assert fitted.delay == 2.0
        assert fitted.horizon == 9
        assert fitted.controls == params.controls

    def test_empty_alpha_keeps_current(self, observed):
        params = SimulationParameters(alpha=0.7)
        fitted = auto_fit(params, observed, _small_grid(alpha_values=[]))
        assert fitted.alpha == 0.7

    def test_progress_reported(self, observed):
        calls = []
        grid = _small_grid()
        grid_search(SimulationParameters(), observed, grid, progress=lambda d, t: calls.append((d, t)))
        assert len(calls) == grid.size
        assert calls[0] == (1, grid.size)
        assert calls[-1] == (grid.size, grid.size)

    def test_cancel_event(self, observed):
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(FitCancelledError):
            grid_search(SimulationParameters(), observed, _small_grid(), cancel=cancel)

    def test_does_not_mutate_inputs(self, observed):
        params = SimulationParameters()
        snapshot = params.model_dump()
        obs_snapshot = observed.model_dump()
        grid_search(params, observed, _small_grid())
        assert params.model_dump() == snapshot
        assert observed.model_dump() == obs_snapshot


class TestFitJob:
    def test_matches_direct_search(self, observed):
        params = SimulationParameters()
        grid = _small_grid()
        with FitJob(params, observed, grid) as job:
            result = job.submit().result(timeout=120)
        assert isinstance(result, FitResult)
        assert result == grid_search(params, observed, grid)

    def test_progress_attribute(self, observed):
        grid = _small_grid()
        with FitJob(SimulationParameters(), observed, grid) as job:
            job.submit().result(timeout=120)
            assert job.progress == (grid.size, grid.size)

    def test_submit_once(self, observed):
        with FitJob(SimulationParameters(), observed, _small_grid()) as job:
            job.submit().result(timeout=120)
            with pytest.raises(RuntimeError):
                job.submit()

    def test_cancel_while_running(self, observed):
        holder: dict[str, FitJob] = {}

        def _stop_after_first(done: int, total: int) -> None:
            if done == 1:
                holder["job"].cancel()

        job = FitJob(SimulationParameters(), observed, _small_grid(), on_progress=_stop_after_first)
        holder["job"] = job
        with job:
            future = job.submit()
            with pytest.raises(FitCancelledError):
                future.result(timeout=120)
        assert job.cancelled
        assert job.progress == (1, _small_grid().size)

    def test_cancel_before_start(self, observed):
        with FitJob(SimulationParameters(), observed, _small_grid()) as job:
            job.cancel()
            future = job.submit()
            with pytest.raises(FitCancelledError):
                future.result(timeout=120)
        assert not future.cancelled()
        assert job.progress == (0, _small_grid().size)
