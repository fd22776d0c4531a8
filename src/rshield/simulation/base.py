"""Abstract base class for fixed-step compartmental simulations."""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np

from rshield.types.parameters import SimulationParameters
from rshield.types.series import SimulationState


class SimulationEnvironment(ABC):
    """Base class for step-wise simulations over a preallocated time grid.

    Subclasses implement the model via reset/step/observe and validate their
    parameters before calling this constructor. The base class owns the
    per-run state arrays and packages a finished run into a SimulationState.
    Every instance allocates its own arrays, so separate runs never share
    mutable state.
    """

    n_compartments = 4

    def __init__(self, params: SimulationParameters, n_steps: int) -> None:
        self.params = params
        self.n_steps = n_steps
        self._step_count = 0
        self._states = np.zeros((self.n_compartments, n_steps), dtype=np.float64)

    @abstractmethod
    def reset(self) -> np.ndarray:
        """Reset to initial conditions and return the initial state."""

    @abstractmethod
    def step(self) -> np.ndarray:
        """Advance by one timestep and return the new state."""

    def observe(self) -> np.ndarray:
        """Return the state at the current step."""
        return self._states[:, self._step_count].copy()

    @property
    def time(self) -> float:
        return self._step_count * self.params.step

    def run(self) -> SimulationState:
        """Integrate over the whole grid and collect the arrays."""
        self.reset()
        for _ in range(self.n_steps - 1):
            self.step()
        return self.get_state()

    def get_state(self) -> SimulationState:
        """Package the per-step arrays into a SimulationState."""
        S, E, I, R = (row.copy() for row in self._states)  # noqa: E741
        return SimulationState(S=S, E=E, I=I, R=R, step=self.params.step)
