import logging
from typing import List, Sequence

import numpy as np

from ..circuit.units import Cell

logger = logging.getLogger(__name__)


class NeighborFinder:
    """
    Finds the cells within the radius of effect of a given cell.

    Layers are stacked `layer_separation` apart. The scan covers every cell of
    the circuit, vectorised over a coordinate table built once per circuit.
    """

    def __init__(self, cells: Sequence[Cell], radius_of_effect: float, layer_separation: float):
        self.cells = list(cells)
        self.radius_of_effect = radius_of_effect
        self.layer_separation = layer_separation
        self._radius_sqrd = radius_of_effect * radius_of_effect
        self._coords = np.array(
            [(c.x, c.y, c.layer * layer_separation) for c in self.cells], dtype=float
        ).reshape(-1, 3)

    def find(self, cell: Cell) -> List[Cell]:
        """Cells strictly inside the radius, in circuit order, excluding `cell` itself."""
        if not self.cells:
            return []
        origin = np.array([cell.x, cell.y, cell.layer * self.layer_separation])
        distance_sqrd = ((self._coords - origin) ** 2).sum(axis=1)
        hits = np.flatnonzero(distance_sqrd < self._radius_sqrd)
        return [self.cells[i] for i in hits if self.cells[i] is not cell]


def find_neighbors(cells: Sequence[Cell], cell: Cell, radius_of_effect: float,
                   layer_separation: float) -> List[Cell]:
    """One-off neighbor query; use NeighborFinder for repeated queries."""
    return NeighborFinder(cells, radius_of_effect, layer_separation).find(cell)
