"""Mass-balance and positivity checks on a simulation run."""

from __future__ import annotations

import numpy as np

from rshield.simulation.delayed_seir import EXPOSED_LEAK
from rshield.types.checks import CheckResult
from rshield.types.series import SimulationState


def check_mass_balance(
    state: SimulationState, tolerance: float = 1e-6,
) -> CheckResult:
    """Check that step-to-step mass change equals the exposed leak.

    All flows between compartments cancel, so
        total[i+1] = total[i] - 0.05 * E[i] * dt
    up to clamping and rounding. The drift is measured relative to the
    initial total.

    Args:
        state: Finished run.
        tolerance: Maximum allowed relative deviation at any step.
    """
    if state.n_steps < 2:
        return CheckResult(
            name="mass_balance",
            passed=True,
            value=0.0,
            threshold=tolerance,
            message="Single state, trivially balanced.",
        )

    totals = state.totals
    expected = totals[:-1] - EXPOSED_LEAK * state.E[:-1] * state.step
    scale = abs(totals[0]) + 1e-30
    max_drift = float(np.max(np.abs(totals[1:] - expected)) / scale)

    return CheckResult(
        name="mass_balance",
        passed=bool(max_drift < tolerance),
        value=max_drift,
        threshold=tolerance,
        message=f"Max relative deviation from leak-only balance: {max_drift:.2e}",
    )


def check_positivity(state: SimulationState) -> CheckResult:
    """Check that every compartment stays non-negative."""
    min_val = float(np.min(state.stacked()))
    passed = min_val >= 0.0

    return CheckResult(
        name="positivity",
        passed=bool(passed),
        value=min_val,
        threshold=0.0,
        message=f"Min value: {min_val:.4e}",
    )
