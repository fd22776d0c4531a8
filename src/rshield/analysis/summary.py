"""Headline indicators for one simulation run."""

from __future__ import annotations

from pydantic import BaseModel

from rshield.analysis.reproduction import estimate_rc, is_controlled
from rshield.simulation.delayed_seir import simulate_chart
from rshield.types.parameters import SimulationParameters
from rshield.types.series import ChartSeries, ObservedSeries


class SimulationSummary(BaseModel):
    """Peak, final-state and threshold figures shown beside the chart."""

    peak_simulated: int = 0
    peak_observed: float = 0.0
    final_infected: int = 0
    final_recovered: int = 0
    rc: float = 0.0
    controlled: bool = True


def summarize_chart(
    chart: ChartSeries, observed: ObservedSeries, rc: float,
) -> SimulationSummary:
    last = chart.points[-1] if chart.points else None
    return SimulationSummary(
        peak_simulated=max(chart.infected(), default=0),
        peak_observed=observed.peak()[1],
        final_infected=last.infected if last else 0,
        final_recovered=last.recovered if last else 0,
        rc=rc,
        controlled=is_controlled(rc),
    )


def summarize(
    params: SimulationParameters, observed: ObservedSeries,
) -> SimulationSummary:
    """Run the model and collect its headline indicators."""
    chart = simulate_chart(params, observed)
    return summarize_chart(chart, observed, estimate_rc(params, observed))
