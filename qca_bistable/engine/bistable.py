import logging
import math
import random
from typing import Callable, List, Optional, Sequence, Tuple, TYPE_CHECKING

import networkx as nx

from ..circuit.circuit import Circuit
from ..circuit.clock import Clock
from ..circuit.units import Cell
from ..constants import SATURATION_LIMIT, LINEAR_LIMIT
from ..exceptions import EngineError
from .base import Engine, EngineState
from .config import BistableConfig
from .kink import KinkEnergyCache
from .neighbors import NeighborFinder
from .results import OutputResult, RunResults, SampleStatus

if TYPE_CHECKING:
    from ..formats.vector_table import VectorTable

logger = logging.getLogger(__name__)


def relax(x: float) -> float:
    """Bistable response: saturating x / sqrt(1 + x^2), linear near zero."""
    if x > SATURATION_LIMIT:
        return 1.0
    if x < -SATURATION_LIMIT:
        return -1.0
    if abs(x) < LINEAR_LIMIT:
        return x
    return x / math.sqrt(1.0 + x * x)


class TickHandler:
    """
    Per-cell update strategy: a closure over the cell's neighbors, their
    kink energies and the cell's clock.
    """

    __slots__ = ("cell", "neighbors", "kink_energies", "clock", "tolerance")

    def __init__(self, cell: Cell, neighbors: Sequence[Cell], kink_energies: Sequence[float],
                 clock: Clock, tolerance: float):
        if len(neighbors) != len(kink_energies):
            raise ValueError("Every neighbor needs exactly one kink energy.")
        self.cell = cell
        self.neighbors = tuple(neighbors)
        self.kink_energies = tuple(kink_energies)
        self.clock = clock
        self.tolerance = tolerance

    def tick(self) -> bool:
        """Updates the cell's polarization; returns True if it moved by no more than the tolerance."""
        cell = self.cell
        old_polarization = cell.polarization

        x = 0.0
        for energy, neighbor in zip(self.kink_energies, self.neighbors):
            x += energy * neighbor.polarization
        x /= 2.0 * self.clock.peek()

        new_polarization = relax(x)
        cell.set_polarization(new_polarization)
        return abs(new_polarization - old_polarization) <= self.tolerance


class BistableEngine(Engine):
    """
    Bistable-approximation engine.

    Initialization finds every cell's neighbors and kink energies once; the
    run then steps the clocks and inputs sample by sample and sweeps the
    cells until no polarization moves by more than the convergence
    tolerance, or the iteration cap is reached.

    Cells are updated in place, so later cells in a sweep already see the
    new polarizations of earlier ones.
    """

    name = "bistable"

    def __init__(self, circuit: Circuit, config: Optional[BistableConfig] = None):
        super().__init__(circuit)
        self.config = config or BistableConfig()
        self.kink_cache: Optional[KinkEnergyCache] = None
        self._rng = random.Random(self.config.random_seed)
        self._layers: List[List[Cell]] = []
        self._cell_matrix: List[List[Cell]] = []
        self._active_inputs = []

    @classmethod
    def from_config_file(cls, circuit: Circuit, filename: Optional[str], **overrides) -> "BistableEngine":
        config = BistableConfig.from_file(filename) if filename else BistableConfig()
        if overrides:
            config = config.with_overrides(**overrides)
        return cls(circuit, config)

    @property
    def coupling_graph(self) -> Optional[nx.Graph]:
        """Graph over cell indices; edges carry the cached kink energies."""
        return self.kink_cache.graph if self.kink_cache is not None else None

    @property
    def cell_matrix(self) -> List[List[Cell]]:
        """Relaxing cells per layer, in current evaluation order."""
        return self._cell_matrix

    def initialize(self, vector_table: Optional["VectorTable"] = None):
        if self.state is EngineState.RUNNING:
            raise EngineError("Can't initialize an engine while it is running.")

        logger.info("Bistable engine initializing...")
        config = self.config
        circuit = self.circuit
        samples = config.number_of_samples

        if vector_table is not None:
            circuit.update_inputs(vector_table, samples)
            cycles = len(vector_table)
        else:
            if circuit.input_cells:
                logger.info("No vector table given; all input cells relax as normal cells.")
            circuit.deactivate_inputs()
            cycles = 1

        circuit.update_outputs(samples)
        circuit.update_clocks(cycles, samples, config.clock_low, config.clock_high,
                              config.clock_amplitude_factor, config.clock_shift)

        # Only aggregate polarizations matter to this engine.
        for cell in circuit.cells:
            cell.update_dots = False
            cell.tick_handler = None
            cell.reset()

        layers = circuit.cell_matrix()
        if config.randomize_cells:
            self._randomize_cells(layers)

        self._layers = layers
        self._cell_matrix = self._relaxing_cells(layers)
        self._init_cells(self._cell_matrix)

        self._active_inputs = [cell for cell in circuit.input_cells if cell.active]
        self._stop_requested = False
        self.state = EngineState.INITIALIZED
        logger.info("Bistable engine finished initializing.")

    @staticmethod
    def _relaxing_cells(layers: List[List[Cell]]) -> List[List[Cell]]:
        return [[cell for cell in layer if cell.relaxes] for layer in layers]

    def _randomize_cells(self, layers: List[List[Cell]]):
        """Makes as many random swaps in each layer as it has cells, fixed and driven cells included."""
        rng = self._rng
        for layer in reversed(layers):
            count = len(layer)
            for _ in range(count):
                i = rng.randrange(count)
                j = rng.randrange(count)
                layer[i], layer[j] = layer[j], layer[i]

    def _init_cells(self, cell_matrix: List[List[Cell]]):
        """Computes neighbors and kink energies and binds a TickHandler to each relaxing cell."""
        config = self.config
        finder = NeighborFinder(self.circuit.cells, config.radius_of_effect, config.layer_separation)
        cache = KinkEnergyCache(config.epsilon_r, config.layer_separation)

        for layer in cell_matrix:
            for cell in layer:
                neighbors = finder.find(cell)
                energies = cache.energies(cell, neighbors)
                cache.add_cell(cell)
                cell.tick_handler = TickHandler(
                    cell, neighbors, energies,
                    self.circuit.clock(cell.clock_index),
                    config.convergence_tolerance,
                )

        self.kink_cache = cache
        logger.info(
            f"Coupled {cache.graph.number_of_nodes()} cells through {len(cache)} pairs "
            f"(radius {config.radius_of_effect}nm)."
        )

    def run(self, on_sample: Optional[Callable[[int], None]] = None) -> RunResults:
        if self.state is not EngineState.INITIALIZED:
            raise EngineError(f"Engine must be initialized before running (state: {self.state.value}).")

        logger.info("Bistable engine running...")
        self.state = EngineState.RUNNING
        config = self.config
        clocks = self.circuit.clocks
        output_cells = self.circuit.output_cells

        statuses: List[SampleStatus] = []
        iterations: List[int] = []

        try:
            for sample in range(config.number_of_samples):
                if self._stop_requested:
                    break

                for clock in clocks:
                    clock.tick()

                for cell in self._active_inputs:
                    cell.tick()

                if config.randomize_cells:
                    self._randomize_cells(self._layers)
                    self._cell_matrix = self._relaxing_cells(self._layers)

                status, sweeps = self._relax()
                statuses.append(status)
                iterations.append(sweeps)
                if status is SampleStatus.MAX_ITERATIONS_EXCEEDED:
                    logger.debug(f"Sample {sample} did not converge within {sweeps} sweeps.")

                for cell in output_cells:
                    cell.plot_polarization()

                if on_sample is not None:
                    on_sample(sample + 1)
        except Exception as e:
            self.state = EngineState.IDLE
            logger.error(f"Bistable engine failed at sample {len(statuses)}: {e}", exc_info=True)
            raise

        stopped = len(statuses) < config.number_of_samples
        self.state = EngineState.STOPPED if stopped else EngineState.COMPLETED

        results = self._collect_results(statuses, iterations, stopped)
        if stopped:
            logger.warning(f"Simulation stopped after {len(statuses)}/{config.number_of_samples} samples.")
        if results.non_converged_samples:
            logger.warning(
                f"{len(results.non_converged_samples)} of {results.samples_completed} samples "
                f"hit the iteration cap ({config.max_iterations_per_sample})."
            )
        logger.info("Bistable engine finished running.")
        return results

    def _relax(self) -> Tuple[SampleStatus, int]:
        """Sweeps until every cell settles or max_iterations_per_sample + 1 sweeps are done."""
        cell_matrix = self._cell_matrix
        max_sweeps = self.config.max_iterations_per_sample + 1

        for sweep in range(1, max_sweeps + 1):
            settled = True
            for layer in reversed(cell_matrix):
                for cell in reversed(layer):
                    if not cell.tick():
                        settled = False
            if settled:
                return SampleStatus.CONVERGED, sweep

        return SampleStatus.MAX_ITERATIONS_EXCEEDED, max_sweeps

    def _collect_results(self, statuses: List[SampleStatus], iterations: List[int], stopped: bool) -> RunResults:
        results = RunResults(
            number_of_samples=self.config.number_of_samples,
            sample_status=statuses,
            iterations=iterations,
            stopped=stopped,
        )
        for cell in self.circuit.output_cells:
            clock = self.circuit.clock(cell.clock_index)
            key = cell.name
            if key in results.outputs:
                key = f"{cell.name}#{cell.index}"
            results.outputs[key] = OutputResult(
                name=key,
                values=cell.get_values(clock),
                trace=cell.trace.filled.copy(),
            )
        return results
