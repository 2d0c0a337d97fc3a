import logging
import time
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Optional, TYPE_CHECKING

from ..circuit.circuit import Circuit
from .results import RunResults

if TYPE_CHECKING:
    from ..formats.vector_table import VectorTable

logger = logging.getLogger(__name__)


class EngineState(Enum):
    IDLE = "idle"
    INITIALIZED = "initialized"
    RUNNING = "running"
    COMPLETED = "completed"
    STOPPED = "stopped"


class Engine(ABC):
    """
    Abstract base class for simulation engines.

    An engine is initialized against a vector table, then run once over a
    fixed number of samples. `stop()` is cooperative and takes effect
    between samples.
    """

    name: str = ""

    def __init__(self, circuit: Circuit):
        if circuit is None:
            raise ValueError("An engine needs a circuit.")
        self.circuit = circuit
        self.state = EngineState.IDLE
        self._stop_requested = False

    @abstractmethod
    def initialize(self, vector_table: Optional["VectorTable"] = None):
        """Prepares the circuit for a run."""
        pass

    @abstractmethod
    def run(self, on_sample: Optional[Callable[[int], None]] = None) -> RunResults:
        """Runs the simulation; `on_sample(k)` is called after sample k completes."""
        pass

    def stop(self):
        self._stop_requested = True

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested

    def simulate(self, vector_table: Optional["VectorTable"] = None,
                 on_sample: Optional[Callable[[int], None]] = None) -> RunResults:
        """Initializes and runs, timing both phases."""
        start = time.perf_counter()
        self.initialize(vector_table)
        init_time = time.perf_counter() - start

        start = time.perf_counter()
        results = self.run(on_sample)
        results.init_time = init_time
        results.run_time = time.perf_counter() - start

        logger.info(f"{self.name} engine: init {init_time:.3f}s, run {results.run_time:.3f}s")
        return results
