from typing import Optional

from ..circuit.circuit import Circuit
from .base import Engine, EngineState
from .bistable import BistableEngine, TickHandler, relax
from .config import BistableConfig
from .kink import KinkEnergyCache, kink_energy
from .neighbors import NeighborFinder, find_neighbors
from .results import OutputResult, RunResults, SampleStatus

ENGINES = {
    BistableEngine.name: BistableEngine,
}


def is_valid_engine_name(name: str) -> bool:
    return name in ENGINES


def create_engine(name: str, circuit: Circuit, config_file: Optional[str] = None, **overrides) -> Engine:
    """Builds a registered engine, reading its settings file and applying overrides."""
    if not is_valid_engine_name(name):
        raise ValueError(f"Invalid engine name: {name}")
    return ENGINES[name].from_config_file(circuit, config_file, **overrides)
