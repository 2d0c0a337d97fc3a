import logging
import os
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Union

import numpy as np

from ..circuit.trace import write_table
from ..circuit.units import Logic

logger = logging.getLogger(__name__)


class SampleStatus(Enum):
    """Outcome of the relaxation loop for one time sample."""
    CONVERGED = "converged"
    MAX_ITERATIONS_EXCEEDED = "max_iterations_exceeded"


@dataclass
class OutputResult:
    """Digitized values and raw polarization trace of one output cell."""
    name: str
    values: List[Logic]
    trace: np.ndarray

    def logic_string(self) -> str:
        """Values as a compact string, '-' for unsettled samples."""
        return "".join("-" if v is Logic.INVALID else str(int(v)) for v in self.values)


@dataclass
class RunResults:
    """Everything a run produced, keyed by output name."""
    number_of_samples: int
    outputs: Dict[str, OutputResult] = field(default_factory=dict)
    sample_status: List[SampleStatus] = field(default_factory=list)
    iterations: List[int] = field(default_factory=list)
    stopped: bool = False
    init_time: float = 0.0
    run_time: float = 0.0

    @property
    def samples_completed(self) -> int:
        return len(self.sample_status)

    @property
    def non_converged_samples(self) -> List[int]:
        return [i for i, s in enumerate(self.sample_status) if s is SampleStatus.MAX_ITERATIONS_EXCEEDED]

    @property
    def converged(self) -> bool:
        return not self.non_converged_samples

    def output_names(self) -> List[str]:
        return list(self.outputs)

    def get_output_values(self, name: str) -> List[Logic]:
        return self.outputs[name].values

    def get_output_trace(self, name: str) -> np.ndarray:
        return self.outputs[name].trace

    def write_trace_tables(self, directory: Union[str, os.PathLike]) -> Dict[str, str]:
        """Writes one "<index>,<polarization>" table per output; returns name -> path."""
        os.makedirs(directory, exist_ok=True)
        paths = {}
        for name, output in self.outputs.items():
            safe_name = re.sub(r"[^A-Za-z0-9_.-]", "_", name)
            path = os.path.join(directory, f"{safe_name}.trace.csv")
            write_table(output.trace, path)
            paths[name] = path
        logger.info(f"Wrote {len(paths)} output trace tables to {directory}")
        return paths
