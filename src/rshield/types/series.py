"""Observed data, raw simulation state, and the day-indexed chart series."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from pydantic import BaseModel, Field, field_validator

# Default observed interest, day -> estimated active spreaders
DEFAULT_OBSERVED: tuple[tuple[int, float], ...] = (
    (0, 5000.0),
    (1, 30000.0),
    (2, 150000.0),
    (3, 450000.0),
    (4, 600000.0),
    (5, 350000.0),
    (6, 120000.0),
    (7, 50000.0),
)


class ObservedPoint(BaseModel):
    """One observed value on an integer day."""

    model_config = {"frozen": True}

    day: int = Field(ge=0)
    value: float = Field(ge=0.0)


class ObservedSeries(BaseModel):
    """Observed values with unique days, kept sorted by day."""

    model_config = {"frozen": True}

    points: list[ObservedPoint] = Field(default_factory=list)

    @field_validator("points")
    @classmethod
    def _sorted_unique_days(cls, points: list[ObservedPoint]) -> list[ObservedPoint]:
        ordered = sorted(points, key=lambda p: p.day)
        for prev, cur in zip(ordered, ordered[1:]):
            if prev.day == cur.day:
                raise ValueError(f"duplicate observed day {cur.day}")
        return ordered

    @classmethod
    def from_pairs(cls, pairs) -> ObservedSeries:
        """Build from an iterable of (day, value) pairs."""
        return cls(points=[ObservedPoint(day=d, value=v) for d, v in pairs])

    @classmethod
    def default(cls) -> ObservedSeries:
        return cls.from_pairs(DEFAULT_OBSERVED)

    def __len__(self) -> int:
        return len(self.points)

    def value_on(self, day: int) -> float | None:
        """Observed value for ``day``, or None when that day has no point."""
        for p in self.points:
            if p.day == day:
                return p.value
        return None

    @property
    def last_day(self) -> int:
        return self.points[-1].day if self.points else 0

    def peak(self) -> tuple[int, float]:
        """(day, value) of the first occurrence of the maximum value."""
        if not self.points:
            return (0, 0.0)
        best = self.points[0]
        for p in self.points[1:]:
            if p.value > best.value:
                best = p
        return (best.day, best.value)


@dataclass
class SimulationState:
    """Per-step compartment arrays from one integration run."""

    S: np.ndarray
    E: np.ndarray
    I: np.ndarray  # noqa: E741
    R: np.ndarray
    step: float

    @property
    def n_steps(self) -> int:
        return len(self.S)

    @property
    def times(self) -> np.ndarray:
        return np.arange(self.n_steps) * self.step

    @property
    def totals(self) -> np.ndarray:
        """S + E + I + R at every step."""
        return self.S + self.E + self.I + self.R

    def stacked(self) -> np.ndarray:
        """States as an (n_steps, 4) array in S, E, I, R column order."""
        return np.column_stack([self.S, self.E, self.I, self.R])


class ChartPoint(BaseModel):
    """Rounded compartment values on one integer day."""

    model_config = {"frozen": True}

    day: int
    susceptible: int
    exposed: int
    infected: int
    recovered: int
    observed: float | None = None


class ChartSeries(BaseModel):
    """Day-indexed output handed to the presentation layer."""

    model_config = {"frozen": True}

    points: list[ChartPoint] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.points)

    def infected(self) -> list[int]:
        return [p.infected for p in self.points]
