"""Application simulation – batch policy "what if" runs."""
from mp_access.application.simulation.cases import SimulationCase, SimulationOutcome, SimulationReport
from mp_access.application.simulation.simulator import Simulator, load_simulation_cases

__all__ = [
    "SimulationCase",
    "SimulationOutcome",
    "SimulationReport",
    "Simulator",
    "load_simulation_cases",
]
