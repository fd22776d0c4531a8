"""Delayed SEIR rumor-propagation model with three intervention channels.

Equations (t >= 0, tau = delay, N = population):
    infection  = beta * S(t-tau) * I(t-tau) / N
    attrition  = gamma * I * (I + R) / N
    dS/dt = -infection - u_p*S
    dE/dt =  infection - alpha*E - rho*u_g*E - 0.05*E
    dI/dt =  alpha*E - attrition - v*I
    dR/dt =  attrition + v*I + u_p*S + rho*u_g*E

where:
    S = susceptible audience, E = exposed (seen the rumor, not spreading),
    I = active spreaders, R = disengaged
    u_p, u_g, v = prevention, correction, suppression (zero before the
                  intervention start), rho = correction efficiency

The attrition term is self-limiting: it scales with both the active
spreaders and the already-disengaged mass rather than linearly with I.
The 0.05*E leak models exposed users losing interest before converting and
is the only flow that leaves the system.

The delay is an index lag on the step grid. History before t=0 is taken to
be the initial condition.
"""
from __future__ import annotations

import logging
import math

import numpy as np

from rshield.simulation.base import SimulationEnvironment
from rshield.types.parameters import SimulationParameters
from rshield.types.series import (
    ChartPoint,
    ChartSeries,
    ObservedSeries,
    SimulationState,
)

logger = logging.getLogger(__name__)

EXPOSED_LEAK = 0.05


def grid_size(params: SimulationParameters, observed: ObservedSeries) -> int:
    """Number of integration steps covering the horizon and all observed days."""
    end = max(params.horizon, observed.last_day)
    return int(math.floor(end / params.step)) + 1


def initial_conditions(
    params: SimulationParameters, observed: ObservedSeries,
) -> tuple[float, float, float, float]:
    """Initial (S0, E0, I0, R0) seeded from the day-0 observation.

    I0 is the day-0 value, never below 1; E0 = 2*I0; the rest of the
    population starts susceptible.
    """
    seed = observed.value_on(0)
    I0 = max(1.0, seed if seed is not None else 1.0)
    E0 = 2.0 * I0
    R0 = 0.0
    S0 = max(0.0, params.population - E0 - I0 - R0)
    return S0, E0, I0, R0


class DelayedRumorSimulation(SimulationEnvironment):
    """Explicit Euler integration of the delayed rumor model.

    State rows: [S, E, I, R]. Every update is clamped at zero; without the
    clamp large steps or strong controls drive compartments negative.
    """

    def __init__(
        self, params: SimulationParameters, observed: ObservedSeries,
    ) -> None:
        try:
            params.validate_for_integration()
        except ValueError as e:
            logger.warning(f"Rejected simulation parameters: {e}")
            raise
        super().__init__(params, grid_size(params, observed))
        self.observed = observed
        self.lag_steps = int(math.floor(params.delay / params.step))

    def reset(self) -> np.ndarray:
        """Seed step 0 from the observed data and clear later steps."""
        self._states[:] = 0.0
        self._states[:, 0] = initial_conditions(self.params, self.observed)
        self._step_count = 0
        return self.observe()

    def step(self) -> np.ndarray:
        """Advance one Euler step, reading S and I at the lagged index."""
        i = self._step_count
        if i >= self.n_steps - 1:
            raise RuntimeError(f"Time grid exhausted after {self.n_steps} steps")

        dt = self.params.step
        derivs = self._derivatives(i)
        for row in range(self.n_compartments):
            self._states[row, i + 1] = max(0.0, self._states[row, i] + derivs[row] * dt)

        self._step_count = i + 1
        return self.observe()

    def _derivatives(self, i: int) -> tuple[float, float, float, float]:
        """Right-hand side at step i."""
        p = self.params
        N = p.population
        S, E, Ip, R = (float(x) for x in self._states[:, i])  # noqa: N806

        j = i - self.lag_steps
        if j >= 0:
            S_lag, I_lag = float(self._states[0, j]), float(self._states[2, j])
        else:
            S_lag, I_lag = float(self._states[0, 0]), float(self._states[2, 0])

        c = p.controls.active(i * p.step)

        infection = p.beta * S_lag * I_lag / N
        incubation = p.alpha * E
        attrition = p.gamma * Ip * (Ip + R) / N
        control_S = c.prevention * S
        control_E = c.effective_correction * E
        control_I = c.suppression * Ip
        leak = EXPOSED_LEAK * E

        dS = -infection - control_S
        dE = infection - incubation - control_E - leak
        dI = incubation - attrition - control_I
        dR = attrition + control_I + control_S + control_E
        return dS, dE, dI, dR


def integrate(
    params: SimulationParameters, observed: ObservedSeries,
) -> SimulationState:
    """Run the delayed model over its full time grid."""
    return DelayedRumorSimulation(params, observed).run()


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def chart_series(
    state: SimulationState,
    params: SimulationParameters,
    observed: ObservedSeries,
) -> ChartSeries:
    """Sample the step arrays on integer days and attach observations."""
    max_day = int(math.floor(max(params.horizon, observed.last_day)))
    last = state.n_steps - 1
    points = []
    for d in range(max_day + 1):
        idx = min(int(math.floor(d / params.step)), last)
        points.append(
            ChartPoint(
                day=d,
                susceptible=_round_half_up(state.S[idx]),
                exposed=_round_half_up(state.E[idx]),
                infected=_round_half_up(state.I[idx]),
                recovered=_round_half_up(state.R[idx]),
                observed=observed.value_on(d),
            )
        )
    return ChartSeries(points=points)


def simulate_chart(
    params: SimulationParameters, observed: ObservedSeries,
) -> ChartSeries:
    """Integrate and sample in one call; always recomputed from scratch."""
    state = integrate(params, observed)
    return chart_series(state, params, observed)
