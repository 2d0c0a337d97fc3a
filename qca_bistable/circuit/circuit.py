import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, TYPE_CHECKING

from ..constants import NUM_CLOCKS
from .clock import Clock
from .units import Cell, CellFunction, InputCell, OutputCell

if TYPE_CHECKING:
    from ..formats.vector_table import VectorTable

logger = logging.getLogger(__name__)


@dataclass
class Layer:
    """A cell layer; `index` is its position among all layers of the design."""
    index: int
    description: str = ""
    cells: List[Cell] = field(default_factory=list)


class Circuit:
    """
    A QCA circuit: cell layers, four clocks and the derived input, output
    and fixed cell lists.

    Cells receive a stable integer index (their position in `cells`) that the
    engine uses to address them.
    """

    def __init__(self, layers: Sequence[Layer], version: Optional[float] = None, source: Optional[str] = None):
        self.layers: List[Layer] = list(layers)
        self.version = version
        self.source = source

        self.cells: List[Cell] = []
        self.input_cells: List[InputCell] = []
        self.output_cells: List[OutputCell] = []
        self.fixed_cells: List[Cell] = []
        self.clocks: List[Optional[Clock]] = [None] * NUM_CLOCKS

        for layer in self.layers:
            for cell in layer.cells:
                if cell.layer != layer.index:
                    raise ValueError(
                        f"Cell at ({cell.x}, {cell.y}) claims layer {cell.layer} but sits in layer {layer.index}."
                    )
                cell.index = len(self.cells)
                self.cells.append(cell)

                if cell.function is CellFunction.INPUT:
                    self.input_cells.append(cell)
                elif cell.function is CellFunction.OUTPUT:
                    self.output_cells.append(cell)
                elif cell.function is CellFunction.FIXED:
                    self.fixed_cells.append(cell)

        self._name_outputs()

    @classmethod
    def from_cells(cls, cells: Sequence[Cell], **kwargs) -> "Circuit":
        """Groups loose cells into layers by their layer index."""
        indices = sorted({cell.layer for cell in cells})
        layers = [Layer(i, cells=[c for c in cells if c.layer == i]) for i in indices]
        return cls(layers, **kwargs)

    def _name_outputs(self):
        for i, cell in enumerate(self.output_cells):
            if not cell.name:
                cell.name = f"output_{i}"
                logger.warning(f"Output cell {cell.index} has no label; naming it '{cell.name}'.")
        counts = Counter(cell.name for cell in self.output_cells)
        for name, count in counts.items():
            if count > 1:
                logger.warning(f"{count} output cells share the name '{name}'; later ones are reported as '{name}#<index>'.")

    @property
    def cell_count(self) -> int:
        return len(self.cells)

    def cell_matrix(self) -> List[List[Cell]]:
        """Fresh per-layer lists of cells, safe to reorder."""
        return [list(layer.cells) for layer in self.layers]

    def clock(self, number: int) -> Clock:
        if number < 0 or number > 3:
            raise ValueError(f"Clock number must be between 0 and 3, got {number}.")
        return self.clocks[number]

    def update_inputs(self, vector_table: "VectorTable", granularity: int):
        """Encodes each input's column of the vector table into its waveform."""
        if vector_table is None or len(vector_table) == 0:
            raise ValueError("Can't use an empty vector table.")
        if vector_table.width != len(self.input_cells):
            raise ValueError(
                f"Invalid vector table: {vector_table.width} inputs for {len(self.input_cells)} input cells."
            )
        for i, cell in enumerate(self.input_cells):
            cell.active = vector_table.active[i]
            cell.set_values(vector_table.inputs_for(i), granularity)

    def deactivate_inputs(self):
        for cell in self.input_cells:
            cell.active = False

    def update_outputs(self, granularity: int):
        if granularity <= 0:
            raise ValueError(f"The granularity of the outputs must be greater than 0, got {granularity}.")
        for cell in self.output_cells:
            cell.set_trace_size(granularity)

    def update_clocks(self, cycles: int, granularity: int, clock_low: float, clock_high: float,
                      amplitude_factor: float, clock_shift: float):
        self.clocks = [
            Clock(i, cycles, granularity, clock_low, clock_high, amplitude_factor, clock_shift)
            for i in range(NUM_CLOCKS)
        ]

    def __repr__(self) -> str:
        return (f"Circuit(layers={len(self.layers)}, cells={self.cell_count}, "
                f"inputs={len(self.input_cells)}, outputs={len(self.output_cells)})")
