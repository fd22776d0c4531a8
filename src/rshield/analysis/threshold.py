"""Solve for the control scaling that puts Rc exactly at 1.

Suppression v and correction u_g are scaled together by k:

    v' = k * v_base,  u_g' = k * ug_base

Substituting into Rc = beta*s0*alpha / ((alpha + rho*u_g')*v') = 1 gives

    A*k^2 + B*k + C = 0
    A = v_base * rho * ug_base,  B = v_base * alpha,  C = -beta*s0*alpha

The correction efficiency rho is a property of the channel and is never
changed here.
"""
from __future__ import annotations

import logging
import math

from rshield.analysis.reproduction import susceptible_fraction
from rshield.types.parameters import SimulationParameters
from rshield.types.series import ObservedSeries

logger = logging.getLogger(__name__)

_ZERO_CONTROL = 1e-9
_LINEAR_EPS = 1e-12

# Largest |Rc - 1| accepted from the rounded controls
RC_TOLERANCE = 1e-3

# Floors used when a control is currently off, so there is something to scale
DEFAULT_SUPPRESSION_BASE = 0.05
DEFAULT_CORRECTION_BASE = 0.5


def _usable(k: float) -> bool:
    return math.isfinite(k) and k > 0


def _rc(params: SimulationParameters, s0: float, v: float, ug: float) -> float:
    denominator = (params.alpha + params.controls.correction_efficiency * ug) * v
    if denominator == 0:
        return 0.0
    return params.beta * s0 * params.alpha / denominator


def solve_scale(a: float, b: float, c: float) -> float | None:
    """Positive root of a*k^2 + b*k + c = 0, or None.

    Degrades to the linear solution when a is negligible; otherwise takes
    the larger quadratic root.
    """
    if abs(a) < _LINEAR_EPS:
        if b == 0:
            return None
        k = -c / b
        return k if _usable(k) else None

    disc = b * b - 4.0 * a * c
    if disc < 0:
        return None
    sqrt_disc = math.sqrt(disc)
    k = max((-b + sqrt_disc) / (2.0 * a), (-b - sqrt_disc) / (2.0 * a))
    return k if _usable(k) else None


def solve_for_rc_one(
    params: SimulationParameters,
    observed: ObservedSeries | None = None,
    precision: int = 3,
) -> SimulationParameters:
    """Rescale suppression and correction so that Rc = 1.

    Args:
        params: Current parameters.
        observed: Source of the initial condition (s0). Defaults to no
            observations, i.e. a single initial spreader.
        precision: Decimal digits kept on the rescaled controls. The exact
            values are kept instead when rounding would zero a control or
            move Rc more than RC_TOLERANCE away from 1.

    Returns:
        New parameters with ``suppression`` and ``correction`` replaced, or
        ``params`` itself when no positive finite scaling exists.
    """
    if observed is None:
        observed = ObservedSeries()
    s0 = susceptible_fraction(params, observed)
    c = params.controls

    v_base = c.suppression if c.suppression > _ZERO_CONTROL else DEFAULT_SUPPRESSION_BASE
    ug_base = c.correction if c.correction > _ZERO_CONTROL else DEFAULT_CORRECTION_BASE

    a = v_base * c.correction_efficiency * ug_base
    b = v_base * params.alpha
    k = solve_scale(a, b, -(params.beta * s0 * params.alpha))
    if k is None:
        logger.info("No positive scaling reaches Rc=1; parameters unchanged")
        return params

    logger.info(f"Rc=1 scaling k={k:.6g} (v_base={v_base}, ug_base={ug_base})")
    v, ug = v_base * k, ug_base * k
    v_rounded, ug_rounded = round(v, precision), round(ug, precision)
    rounded_rc = _rc(params, s0, v_rounded, ug_rounded)
    if v_rounded > 0 and ug_rounded > 0 and abs(rounded_rc - 1.0) <= RC_TOLERANCE:
        v, ug = v_rounded, ug_rounded
    else:
        logger.debug(
            f"Rounding to {precision} digits gives Rc={rounded_rc:.6g}; "
            f"keeping v={v:.6g}, u_g={ug:.6g}"
        )
    return params.with_controls(suppression=v, correction=ug)
