"""R-Shield: delayed rumor-propagation simulation with intervention controls."""

__version__ = "0.1.0"

from rshield.analysis.fitting import auto_fit
from rshield.analysis.reproduction import estimate_rc
from rshield.analysis.threshold import solve_for_rc_one
from rshield.simulation.delayed_seir import integrate, simulate_chart

__all__ = [
    "__version__",
    "auto_fit",
    "estimate_rc",
    "integrate",
    "simulate_chart",
    "solve_for_rc_one",
]
