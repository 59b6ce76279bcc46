"""Peg simulation harness."""

from peg_engine.simulation.paths import PegPathGenerator, PricePath
from peg_engine.simulation.engine import PegSimulation, SimulationResult

__all__ = [
    "PegPathGenerator",
    "PricePath",
    "PegSimulation",
    "SimulationResult",
]
