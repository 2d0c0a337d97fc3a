import logging
from typing import Union
import os

import numpy as np

logger = logging.getLogger(__name__)


def write_table(values, filename: Union[str, os.PathLike]):
    """Writes "<index>,<value>" lines, indices starting at 1."""
    with open(filename, "w", encoding="utf-8") as f:
        for i, value in enumerate(values, 1):
            f.write(f"{i},{float(value)!r}\n")


class DataTrace:
    """
    Fixed-capacity sequence of samples with a read/write cursor.

    Used for clock waveforms, input waveforms and recorded output
    polarizations. Bounded traces only accept values in [-1, 1].
    """

    def __init__(self, name: str = "", size: int = 0, bounded: bool = True):
        if name is None:
            raise ValueError("DataTrace can't have a null name.")
        if size < 0:
            raise ValueError(f"DataTrace can't have a negative size: {size}")
        self.name = name
        self.bounded = bounded
        self._data = np.zeros(size, dtype=float)
        self._index = 0

    def __len__(self) -> int:
        return self._data.shape[0]

    @property
    def size(self) -> int:
        return self._data.shape[0]

    @property
    def index(self) -> int:
        return self._index

    @property
    def data(self) -> np.ndarray:
        """Read-only view of the whole trace."""
        view = self._data.view()
        view.flags.writeable = False
        return view

    @property
    def filled(self) -> np.ndarray:
        """Read-only view of the values written so far."""
        return self.data[:self._index]

    def set_size(self, size: int):
        """Resizes the trace, clearing all previous values."""
        if size < 0:
            raise ValueError(f"DataTrace can't have a negative size: {size}")
        self._data = np.zeros(size, dtype=float)
        self._index = 0

    def reset_index(self):
        self._index = 0

    def set_index(self, index: int):
        self._check_index(index)
        self._index = index

    def has_next(self) -> bool:
        return self._index < self._data.shape[0]

    def add_next(self, value: float):
        if self._index >= self._data.shape[0]:
            raise RuntimeError(f"DataTrace '{self.name}' is full, can't add another value.")
        self._check_value(value)
        self._data[self._index] = value
        self._index += 1

    def get_next(self) -> float:
        if self._index >= self._data.shape[0]:
            raise RuntimeError(f"DataTrace '{self.name}' is exhausted, can't get another value.")
        value = self._data[self._index]
        self._index += 1
        return float(value)

    def get(self, index: int) -> float:
        self._check_index(index)
        return float(self._data[index])

    def set(self, index: int, value: float):
        self._check_index(index)
        self._check_value(value)
        self._data[index] = value

    def fill(self, values):
        """Overwrites the whole trace with `values` and rewinds the cursor."""
        values = np.asarray(values, dtype=float)
        if values.shape != self._data.shape:
            raise ValueError(f"Expected {self.size} values for '{self.name}', got {values.shape[0]}.")
        if self.bounded and values.size and (values.min() < -1.0 or values.max() > 1.0):
            raise ValueError("DataTrace values must be between -1.0 and 1.0.")
        self._data[:] = values
        self._index = 0

    def write_table(self, filename: Union[str, os.PathLike], filled_only: bool = False):
        values = self.filled if filled_only else self._data
        write_table(values, filename)
        logger.debug(f"Wrote {len(values)} samples of '{self.name}' to {filename}")

    def _check_index(self, index: int):
        if index < 0 or index >= self._data.shape[0]:
            raise IndexError(f"Invalid DataTrace index: {index}")

    def _check_value(self, value: float):
        if self.bounded and (value < -1.0 or value > 1.0):
            raise ValueError("DataTrace values must be between -1.0 and 1.0.")

    def __repr__(self) -> str:
        return f"DataTrace(name={self.name!r}, size={self.size}, index={self._index})"
