import logging
from typing import Callable, List, Optional, Sequence

import networkx as nx
import numpy as np

from ..circuit.units import Cell
from ..constants import QCHARGE_SQRD_OVER_FOUR, FOUR_PI_EPSILON, NANOMETRE

logger = logging.getLogger(__name__)

# +1 where dot i of one cell and dot j of the other sit on the same diagonal.
SAME_POLARIZATION_SIGNS = np.array([[1.0 if (i + j) % 2 == 0 else -1.0 for j in range(4)] for i in range(4)])


def _dot_positions(cell: Cell) -> np.ndarray:
    return np.array([(dot.x, dot.y) for dot in cell.dots], dtype=float)


def kink_energy(cell_a: Cell, cell_b: Cell, epsilon_r: float, layer_separation: float) -> float:
    """
    Electrostatic cost of cells a and b holding opposite rather than equal
    polarizations, summed over all 16 dot pairs.
    """
    z_diff = abs(cell_a.layer - cell_b.layer) * layer_separation
    offsets = _dot_positions(cell_a)[:, None, :] - _dot_positions(cell_b)[None, :, :]
    distance = NANOMETRE * np.sqrt((offsets ** 2).sum(axis=2) + z_diff * z_diff)
    if np.any(distance == 0):
        raise ValueError(f"Cells {cell_a.index} and {cell_b.index} have coincident quantum dots.")

    same_terms = SAME_POLARIZATION_SIGNS * QCHARGE_SQRD_OVER_FOUR / distance
    energy_same = float(same_terms.sum())
    energy_diff = -energy_same
    return (energy_diff - energy_same) / (FOUR_PI_EPSILON * epsilon_r)


class KinkEnergyCache:
    """
    Symmetric memo of pairwise kink energies.

    Backed by an undirected graph over cell indices: each unordered pair is
    one edge carrying `kink_energy`, computed the first time either ordering
    is requested. The graph doubles as the circuit's coupling graph.
    """

    def __init__(self, epsilon_r: float, layer_separation: float,
                 energy_fn: Optional[Callable[[Cell, Cell], float]] = None):
        self.epsilon_r = epsilon_r
        self.layer_separation = layer_separation
        self._energy_fn = energy_fn or (lambda a, b: kink_energy(a, b, epsilon_r, layer_separation))
        self.graph = nx.Graph()
        self.computations = 0
        self.hits = 0

    def __len__(self) -> int:
        return self.graph.number_of_edges()

    def __contains__(self, pair) -> bool:
        a, b = pair
        return self.graph.has_edge(a.index, b.index)

    def get(self, cell_a: Cell, cell_b: Cell) -> float:
        u, v = cell_a.index, cell_b.index
        if u is None or v is None:
            raise ValueError("Cells must belong to a circuit before their kink energy is cached.")
        if self.graph.has_edge(u, v):
            self.hits += 1
            return self.graph.edges[u, v]["kink_energy"]

        energy = self._energy_fn(cell_a, cell_b)
        self.computations += 1
        self.add_cell(cell_a)
        self.add_cell(cell_b)
        self.graph.add_edge(u, v, kink_energy=energy)
        return energy

    def energies(self, cell: Cell, neighbors: Sequence[Cell]) -> List[float]:
        return [self.get(cell, neighbor) for neighbor in neighbors]

    def add_cell(self, cell: Cell):
        if cell.index not in self.graph:
            self.graph.add_node(
                cell.index, x=cell.x, y=cell.y, layer=cell.layer,
                function=cell.function.value, clock=cell.clock_index, name=cell.name,
            )
