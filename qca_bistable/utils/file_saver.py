import json
import logging
import os
from typing import Any, Dict, Optional

from ..engine.results import RunResults

logger = logging.getLogger(__name__)


class FileSaver:
    """Writes the artifacts of a simulation run under one output directory."""

    def __init__(self, output_dir: str = "results"):
        self.output_dir = output_dir

    def _ensure_dir(self, subdir: str = "") -> str:
        path = os.path.join(self.output_dir, subdir) if subdir else self.output_dir
        os.makedirs(path, exist_ok=True)
        return path

    def path_for(self, filename: str, subdir: str = "") -> str:
        return os.path.join(self._ensure_dir(subdir), filename)

    def save_traces(self, results: RunResults) -> Dict[str, str]:
        """One "<index>,<polarization>" table per output cell, under traces/."""
        return results.write_trace_tables(self._ensure_dir("traces"))

    def save_summary(self, results: RunResults, basename: str,
                     metadata: Optional[Dict[str, Any]] = None) -> str:
        """JSON summary: run metadata, timings, convergence and per-output logic values."""
        data = {
            "metadata": metadata or {},
            "number_of_samples": results.number_of_samples,
            "samples_completed": results.samples_completed,
            "stopped": results.stopped,
            "init_time": results.init_time,
            "run_time": results.run_time,
            "non_converged_samples": results.non_converged_samples,
            "outputs": {
                name: {
                    "values": [int(v) for v in output.values],
                    "logic": output.logic_string(),
                }
                for name, output in results.outputs.items()
            },
        }
        path = self.path_for(f"{basename}.json")
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        logger.info(f"Saved run summary to {path}")
        return path
