"""Simulation parameter records: model rates, time grid, intervention controls."""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, Field

from rshield.errors import ConfigurationError


class InterventionControls(BaseModel):
    """The three intervention channels and the correction efficiency.

    prevention (u_p) removes susceptibles, correction (u_g) scaled by
    correction_efficiency (rho) removes exposed, suppression (v) removes
    active spreaders. All three are zero before ``start``.
    """

    model_config = {"frozen": True}

    start: float = 4.0
    prevention: float = Field(default=0.5, ge=0.0)
    correction: float = Field(default=0.0, ge=0.0)
    suppression: float = Field(default=0.8, ge=0.0)
    correction_efficiency: float = Field(default=0.8, ge=0.0)

    def active(self, t: float) -> InterventionControls:
        """Controls in effect at simulation time t."""
        if t >= self.start:
            return self
        return self.model_copy(
            update={"prevention": 0.0, "correction": 0.0, "suppression": 0.0}
        )

    @property
    def effective_correction(self) -> float:
        """rho * u_g, the rate at which exposed are corrected."""
        return self.correction_efficiency * self.correction


class SimulationParameters(BaseModel):
    """Immutable parameter set for one simulation run.

    Edits replace the whole record (see ``with_updates``). Non-positive
    population or step are representable so that an in-progress edit can be
    held, but ``validate_for_integration`` rejects them.
    """

    model_config = {"frozen": True}

    population: float = 10_000_000.0  # N
    delay: float = Field(default=1.0, ge=0.0)  # tau
    step: float = 0.05  # dt
    horizon: float = 7.0  # T_end
    beta: float = Field(default=10.0, ge=0.0)
    alpha: float = Field(default=1.2, ge=0.0)
    gamma: float = Field(default=50.0, ge=0.0)
    controls: InterventionControls = Field(default_factory=InterventionControls)

    def validate_for_integration(self) -> None:
        """Raise ConfigurationError if the time grid or population is invalid.

        NaN and infinite values are rejected along with non-positive ones.
        """
        for name in ("population", "step", "horizon"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ConfigurationError(f"{name} must be finite and > 0 (got {value})")

    def with_updates(self, **fields: Any) -> SimulationParameters:
        """Return a copy with the given top-level fields replaced."""
        return self.model_copy(update=fields)

    def with_controls(self, **fields: Any) -> SimulationParameters:
        """Return a copy with the given control fields replaced."""
        return self.model_copy(update={"controls": self.controls.model_copy(update=fields)})
