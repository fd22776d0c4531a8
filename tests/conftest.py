"""Shared test fixtures for R-Shield."""

import pytest

from rshield.types.parameters import InterventionControls, SimulationParameters
from rshield.types.series import ObservedSeries


@pytest.fixture
def observed():
    """The default eight-day observed series (peak 600 000 on day 4)."""
    return ObservedSeries.default()


@pytest.fixture
def scenario_params():
    """Two-million audience with interventions from day 10."""
    return SimulationParameters(
        population=2_000_000,
        beta=2.0,
        alpha=1.0,
        gamma=0.5,
        delay=1.0,
        step=0.05,
        horizon=30,
        controls=InterventionControls(
            start=10, prevention=0.1, correction=0.0, suppression=0.2,
        ),
    )


@pytest.fixture
def scenario_observed():
    return ObservedSeries.from_pairs([(0, 5000), (1, 30000), (2, 150000)])
