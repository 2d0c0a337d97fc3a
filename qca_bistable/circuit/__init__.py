from .trace import DataTrace
from .units import (
    QuantumDot, Cell, InputCell, OutputCell, CellMode, CellFunction, Logic,
    make_dots, digitize, encode_waveform,
)
from .clock import Clock
from .circuit import Layer, Circuit
