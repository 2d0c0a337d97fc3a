import itertools
import logging
from typing import Iterable, List, Sequence

from ..exceptions import ParseError

logger = logging.getLogger(__name__)

MAGIC_HEADER = "%%VECTOR TABLE%%"


class VectorTable:
    """
    Boolean input vectors driving the circuit's input cells.

    `active[i]` says whether input i is driven; `vectors[t][i]` is input i's
    value at time step t.
    """

    def __init__(self, active: Sequence[bool], vectors: Sequence[Sequence[bool]]):
        width = len(active)
        for t, vector in enumerate(vectors):
            if len(vector) != width:
                raise ValueError(
                    f"Vector {t} has {len(vector)} values; every vector needs exactly one per input ({width})."
                )
        self.active: List[bool] = [bool(a) for a in active]
        self.vectors: List[List[bool]] = [[bool(v) for v in vector] for vector in vectors]

    @property
    def width(self) -> int:
        return len(self.active)

    def __len__(self) -> int:
        return len(self.vectors)

    def inputs_for(self, input_index: int) -> List[bool]:
        """Time sequence of one input."""
        return [vector[input_index] for vector in self.vectors]

    @classmethod
    def exhaustive(cls, input_count: int) -> "VectorTable":
        """All 2^n combinations in counting order, every input active."""
        vectors = [list(bits) for bits in itertools.product([False, True], repeat=input_count)]
        return cls([True] * input_count, vectors)

    @classmethod
    def parse(cls, lines: Iterable[str]) -> "VectorTable":
        rows = []
        magic_seen = False
        for line_number, line in enumerate(lines, 1):
            line = line.strip()
            if not magic_seen:
                if not line:
                    continue
                if line != MAGIC_HEADER:
                    raise ParseError(f"File must start with '{MAGIC_HEADER}'.", line_number)
                magic_seen = True
                continue
            if not line or line.startswith("#"):
                continue
            rows.append(_parse_vector(line, line_number))

        if not magic_seen:
            raise ParseError(f"File must start with '{MAGIC_HEADER}'.")
        if not rows:
            raise ParseError("No active vector found.")

        active, vectors = rows[0], rows[1:]
        try:
            return cls(active, vectors)
        except ValueError as e:
            raise ParseError(str(e)) from e

    @classmethod
    def load(cls, filename: str) -> "VectorTable":
        with open(filename, "r", encoding="utf-8") as f:
            table = cls.parse(f)
        logger.info(f"Loaded vector table {filename}: {table.width} inputs, {len(table)} vectors")
        return table

    def dumps(self) -> str:
        lines = [MAGIC_HEADER, _format_vector(self.active)]
        lines.extend(_format_vector(v) for v in self.vectors)
        return "\n".join(lines) + "\n"


def _parse_vector(line: str, line_number: int) -> List[bool]:
    vector = []
    for char in line:
        if char not in "01":
            raise ParseError(f"Vectors may only contain '0' and '1', found '{char}'.", line_number)
        vector.append(char == "1")
    return vector


def _format_vector(vector: Sequence[bool]) -> str:
    return "".join("1" if v else "0" for v in vector)
