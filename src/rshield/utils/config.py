"""Configuration loading and validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from rshield.analysis.fitting import FitGrid
from rshield.analysis.reach import K_FACTOR
from rshield.types.parameters import SimulationParameters
from rshield.types.series import DEFAULT_OBSERVED, ObservedSeries

# Default config directory relative to package root
_PACKAGE_ROOT = Path(__file__).resolve().parent.parent.parent.parent
_CONFIGS_DIR = _PACKAGE_ROOT / "configs"


class BackendConfig(BaseModel):
    """Generative-AI command line backend settings."""

    executable: str = "gemini"
    max_retries: int = 3
    timeout: int = 120


class RShieldConfig(BaseModel):
    """Top-level configuration: starting parameters, data and services."""

    log_level: str = "INFO"
    locale: str = "en"
    k_factor: float = K_FACTOR
    parameters: SimulationParameters = Field(default_factory=SimulationParameters)
    observed: list[tuple[int, float]] = Field(
        default_factory=lambda: list(DEFAULT_OBSERVED)
    )
    fit_grid: FitGrid = Field(default_factory=FitGrid)
    backend: BackendConfig = Field(default_factory=BackendConfig)

    def observed_series(self) -> ObservedSeries:
        return ObservedSeries.from_pairs(self.observed)


def load_config(path: str | Path | None = None) -> RShieldConfig:
    """Load config from a YAML file.

    Falls back to configs/default.yaml if no path is given, and to built-in
    defaults if the file does not exist.
    """
    if path is None:
        path = _CONFIGS_DIR / "default.yaml"
    path = Path(path)

    if not path.exists():
        return RShieldConfig()

    with open(path) as f:
        raw: dict[str, Any] = yaml.safe_load(f) or {}

    return RShieldConfig(**raw)
