import logging
from dataclasses import dataclass, replace
from enum import Enum, IntEnum
from typing import List, Optional, Sequence, Tuple, TYPE_CHECKING

import numpy as np

from ..constants import (
    QCHARGE, DOTS_PER_CELL, DEFAULT_CELL_SIZE, DEFAULT_DOT_DIAMETER,
    INPUT_HIGH, INPUT_LOW, LOGIC_ONE_THRESHOLD, LOGIC_ZERO_THRESHOLD,
    CLOCK_LOW_MARGIN, CLOCK_HIGH_MARGIN,
)
from .trace import DataTrace

if TYPE_CHECKING:
    from .clock import Clock

logger = logging.getLogger(__name__)


class CellMode(Enum):
    """Geometric mode of a cell as drawn in the layout."""
    NORMAL = "NORMAL"
    VERTICAL = "VERTICAL"
    CROSSOVER = "CROSSOVER"


class CellFunction(Enum):
    """Role a cell plays in the circuit."""
    NORMAL = "NORMAL"
    INPUT = "INPUT"
    OUTPUT = "OUTPUT"
    FIXED = "FIXED"


class Logic(IntEnum):
    """Digitized output sample."""
    INVALID = -1
    ZERO = 0
    ONE = 1


@dataclass(frozen=True)
class QuantumDot:
    x: float
    y: float
    diameter: float
    charge: float
    spin: float = 0.0
    potential: float = 0.0


def dot_charges(polarization: float) -> Tuple[float, float, float, float]:
    """Charges of dots 0..3 for a given polarization."""
    half = QCHARGE / 2.0
    high = half * (1.0 + polarization)
    low = half * (1.0 - polarization)
    return high, low, high, low


def polarization_from_dots(dots: Sequence[QuantumDot]) -> float:
    """P = ((q0 + q2) - (q1 + q3)) / (2e), clipped to [-1, 1]."""
    p = ((dots[0].charge + dots[2].charge) - (dots[1].charge + dots[3].charge)) / (2 * QCHARGE)
    # Charges read from files are rounded, so |P| can overshoot 1 by a few ulps.
    return min(1.0, max(-1.0, p))


def make_dots(x: float, y: float, cell_size: float = DEFAULT_CELL_SIZE,
              dot_diameter: float = DEFAULT_DOT_DIAMETER,
              polarization: float = 0.0) -> Tuple[QuantumDot, ...]:
    """
    Builds the four dots of a cell centred on (x, y).

    Dots follow QCADesigner ordering with screen coordinates (y grows down):
    0 top-right, 1 bottom-right, 2 bottom-left, 3 top-left.
    """
    offset = cell_size / 4.0
    positions = [
        (x + offset, y - offset),
        (x + offset, y + offset),
        (x - offset, y + offset),
        (x - offset, y - offset),
    ]
    return tuple(
        QuantumDot(px, py, dot_diameter, q)
        for (px, py), q in zip(positions, dot_charges(polarization))
    )


def digitize(polarization: float) -> Logic:
    if polarization > LOGIC_ONE_THRESHOLD:
        return Logic.ONE
    if polarization < LOGIC_ZERO_THRESHOLD:
        return Logic.ZERO
    return Logic.INVALID


def encode_waveform(values: Sequence[bool], granularity: int) -> np.ndarray:
    """
    Spreads a boolean sequence over `granularity` ticks.

    Each value holds for granularity // len(values) ticks; the leftover ticks
    go one at a time to every (len(values) // leftover)-th value.
    """
    value_count = len(values)
    if value_count == 0:
        raise ValueError("Input values can't be empty.")
    if granularity < value_count:
        raise ValueError(
            f"Granularity ({granularity}) must be at least equal to the number of values ({value_count})."
        )

    ticks_per_value = granularity // value_count
    excess_ticks = granularity - ticks_per_value * value_count
    extra_insert_freq = value_count // excess_ticks if excess_ticks > 0 else 0

    waveform = []
    for i, value in enumerate(values):
        level = INPUT_HIGH if value else INPUT_LOW
        waveform.extend([level] * ticks_per_value)
        if excess_ticks > 0 and i % extra_insert_freq == 0:
            waveform.append(level)
            excess_ticks -= 1

    return np.asarray(waveform, dtype=float)


class Cell:
    """
    One QCA cell: four quantum dots, a clock zone and a polarization.

    The polarization update is delegated to a tick handler that the engine
    binds during initialization.
    """

    FUNCTIONS = (CellFunction.NORMAL, CellFunction.FIXED)

    def __init__(self, x: float, y: float, dots: Sequence[QuantumDot], clock: int = 0,
                 mode: CellMode = CellMode.NORMAL, layer: int = 0,
                 function: CellFunction = CellFunction.NORMAL,
                 dot_diameter: Optional[float] = None, name: Optional[str] = None):
        if len(dots) != DOTS_PER_CELL:
            raise ValueError(f"A cell needs exactly {DOTS_PER_CELL} quantum dots, got {len(dots)}.")
        if not 0 <= clock <= 3:
            raise ValueError(f"Clock number must be between 0 and 3, got {clock}.")
        if function not in self.FUNCTIONS:
            raise ValueError(f"Use the dedicated cell class for {function.value} cells.")

        self.x = x
        self.y = y
        self.dots: Tuple[QuantumDot, ...] = tuple(dots)
        self.clock_index = clock
        self.mode = mode
        self.layer = layer
        self.function = function
        self.dot_diameter = dot_diameter if dot_diameter is not None else self.dots[0].diameter
        self.name = name

        # Stable position in the owning circuit, assigned by Circuit.
        self.index: Optional[int] = None

        self.update_dots = False
        self.tick_handler = None
        self._polarization = polarization_from_dots(self.dots)
        self._initial_dots = self.dots
        self._initial_polarization = self._polarization

    @classmethod
    def from_center(cls, x: float, y: float, polarization: float = 0.0,
                    cell_size: float = DEFAULT_CELL_SIZE,
                    dot_diameter: float = DEFAULT_DOT_DIAMETER, **kwargs) -> "Cell":
        dots = make_dots(x, y, cell_size, dot_diameter, polarization)
        return cls(x, y, dots, dot_diameter=dot_diameter, **kwargs)

    @property
    def polarization(self) -> float:
        return self._polarization

    @polarization.setter
    def polarization(self, value: float):
        self.set_polarization(value)

    def set_polarization(self, polarization: float):
        if polarization < -1.0 or polarization > 1.0:
            raise ValueError(f"A cell's polarization must be between -1.0 and 1.0, got {polarization}.")
        if self.update_dots:
            self.dots = tuple(
                replace(dot, charge=q) for dot, q in zip(self.dots, dot_charges(polarization))
            )
        self._polarization = polarization

    @property
    def relaxes(self) -> bool:
        """Whether the relaxation loop updates this cell."""
        return self.function in (CellFunction.NORMAL, CellFunction.OUTPUT)

    def tick(self) -> bool:
        """Runs the bound update strategy; returns True if the cell settled."""
        if self.tick_handler is None:
            raise RuntimeError(f"Cell {self.index} doesn't have a tick handler set.")
        return self.tick_handler.tick()

    def reset(self):
        """Restores the polarization and dots the cell was loaded with."""
        self.dots = self._initial_dots
        self._polarization = self._initial_polarization

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(index={self.index}, x={self.x}, y={self.y}, "
                f"layer={self.layer}, clock={self.clock_index}, P={self._polarization:.4f})")


class InputCell(Cell):
    """Cell driven by an encoded boolean waveform while active."""

    FUNCTIONS = (CellFunction.INPUT,)

    def __init__(self, x: float, y: float, dots: Sequence[QuantumDot], clock: int = 0,
                 mode: CellMode = CellMode.NORMAL, layer: int = 0,
                 dot_diameter: Optional[float] = None, name: Optional[str] = None):
        super().__init__(x, y, dots, clock, mode, layer, CellFunction.INPUT, dot_diameter, name)
        self.active = True
        self._input_values = DataTrace(name or "Input")

    @property
    def waveform(self) -> DataTrace:
        return self._input_values

    @property
    def relaxes(self) -> bool:
        return not self.active

    def set_values(self, values: Sequence[bool], granularity: int):
        if values is None:
            raise ValueError("InputCell values can't be None.")
        waveform = encode_waveform(values, granularity)
        self._input_values.set_size(granularity)
        self._input_values.fill(waveform)

    def tick(self) -> bool:
        if not self.active:
            return super().tick()
        if not self._input_values.has_next():
            self._input_values.reset_index()
        self.set_polarization(self._input_values.get_next())
        return True

    def reset(self):
        super().reset()
        self._input_values.reset_index()


class OutputCell(Cell):
    """Cell whose converged polarization is recorded once per sample."""

    FUNCTIONS = (CellFunction.OUTPUT,)

    def __init__(self, x: float, y: float, dots: Sequence[QuantumDot], clock: int = 0,
                 mode: CellMode = CellMode.NORMAL, layer: int = 0,
                 dot_diameter: Optional[float] = None, name: Optional[str] = None):
        super().__init__(x, y, dots, clock, mode, layer, CellFunction.OUTPUT, dot_diameter, name)
        self._value_cache = DataTrace(name or "Output")

    @property
    def trace(self) -> DataTrace:
        return self._value_cache

    def set_trace_size(self, size: int):
        self._value_cache.set_size(size)
        self._value_cache.name = self.name or self._value_cache.name

    def plot_polarization(self):
        if not self._value_cache.has_next():
            raise RuntimeError(f"Output cell {self.name} is out of trace space.")
        self._value_cache.add_next(self._polarization)

    def get_values(self, clock: "Clock") -> List[Logic]:
        """
        Digitizes the recorded trace, one sample per clock period.

        A sample is taken the first time the clock drops below its low level
        and sampling re-arms once the clock rises back near its high level.
        """
        recorded = self._value_cache.filled
        low_mark = clock.clock_low * CLOCK_LOW_MARGIN
        high_mark = clock.clock_high * CLOCK_HIGH_MARGIN

        values = []
        sampled = False
        for polarization, clock_value in zip(recorded, clock.iter_values(len(recorded))):
            if not sampled and clock_value < low_mark:
                sampled = True
                values.append(digitize(polarization))
            elif sampled and clock_value > high_mark:
                sampled = False
        return values

    def reset(self):
        super().reset()
        self._value_cache.reset_index()

