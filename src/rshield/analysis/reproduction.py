"""Controlled reproduction indicator Rc for the delayed rumor model.

    Rc = beta * s0 * alpha / ((alpha + rho*u_g) * v)

with s0 = S0/N the initial susceptible fraction. Rc <= 1 means the rumor is
contained by the current controls; Rc > 1 means outbreak risk.
"""
from __future__ import annotations

from rshield.simulation.delayed_seir import initial_conditions
from rshield.types.parameters import SimulationParameters
from rshield.types.series import ObservedSeries


def susceptible_fraction(
    params: SimulationParameters, observed: ObservedSeries,
) -> float:
    """Initial susceptible fraction s0 = S0 / N."""
    params.validate_for_integration()
    S0, _, _, _ = initial_conditions(params, observed)
    return S0 / params.population


def estimate_rc(params: SimulationParameters, observed: ObservedSeries) -> float:
    """Rc under the configured controls.

    Returns 0.0 when the denominator vanishes (no suppression, or no
    incubation and no correction): without that control there is no
    threshold to report.
    """
    s0 = susceptible_fraction(params, observed)
    c = params.controls
    denominator = (params.alpha + c.effective_correction) * c.suppression
    if denominator == 0:
        return 0.0
    return (params.beta * s0 * params.alpha) / denominator


def is_controlled(rc: float) -> bool:
    return rc <= 1.0
