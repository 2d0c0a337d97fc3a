import logging
import math
from typing import Iterator

import numpy as np

from .trace import DataTrace

logger = logging.getLogger(__name__)


class Clock:
    """
    One of the four phased clock signals.

    The full waveform is precomputed once as a trace of `granularity`
    samples; `tick()` walks it and wraps around at the end.
    """

    def __init__(self, number: int, cycles: int, granularity: int, clock_low: float,
                 clock_high: float, amplitude_factor: float, clock_shift: float = 0.0):
        if number < 0 or number > 3:
            raise ValueError(f"Clock number must be between 0 and 3, got {number}.")
        if cycles <= 0:
            raise ValueError(f"Clock must be at least one cycle, got {cycles}.")
        if granularity <= 0:
            raise ValueError(f"Granularity must be greater than 0, got {granularity}.")

        self.number = number
        self.cycles = cycles
        self.granularity = granularity
        self.clock_low = clock_low
        self.clock_high = clock_high
        self.amplitude_factor = amplitude_factor
        self.clock_shift = clock_shift

        self._trace = DataTrace(f"Clock {number}", granularity, bounded=False)
        self._trace.fill(self._waveform())
        self._current = None

    def _waveform(self) -> np.ndarray:
        samples = np.arange(self.granularity, dtype=float)
        phase = samples * (2 * math.pi * self.cycles / self.granularity) - math.pi * self.number / 2
        prefactor = (self.clock_high - self.clock_low) * self.amplitude_factor
        offset = (self.clock_high + self.clock_low) / 2 + self.clock_shift
        return np.clip(prefactor * np.cos(phase) + offset, self.clock_low, self.clock_high)

    @property
    def trace(self) -> DataTrace:
        return self._trace

    def reset(self):
        self._trace.reset_index()
        self._current = None

    def tick(self) -> float:
        """Advances one sample and returns the new value."""
        if not self._trace.has_next():
            self._trace.reset_index()
        self._current = self._trace.get_next()
        return self._current

    def peek(self) -> float:
        """Last value returned by `tick()`, without advancing."""
        return self._current

    check = peek

    def iter_values(self, count: int) -> Iterator[float]:
        """Yields `count` samples from the start of the period, wrapping, without moving the cursor."""
        data = self._trace.data
        for i in range(count):
            yield float(data[i % self.granularity])

    def __repr__(self) -> str:
        return f"Clock(number={self.number}, cycles={self.cycles}, granularity={self.granularity})"
