"""Simulation environments."""

from rshield.simulation.delayed_seir import (
    DelayedRumorSimulation,
    chart_series,
    initial_conditions,
    integrate,
    simulate_chart,
)

__all__ = [
    "DelayedRumorSimulation",
    "chart_series",
    "initial_conditions",
    "integrate",
    "simulate_chart",
]
