import logging
import os
from dataclasses import asdict
from typing import Any, Dict, Optional

from .circuit.circuit import Circuit
from .engine import ENGINES, create_engine, is_valid_engine_name
from .engine.base import Engine
from .engine.results import RunResults
from .formats.circuit_loader import load_circuit
from .formats.vector_table import VectorTable
from .utils.file_saver import FileSaver
from .utils.visualizer import GraphVisualizer

logger = logging.getLogger(__name__)


class SimulationTask:
    """
    One simulation run: loads the circuit, engine settings and vector table,
    runs the engine and saves whatever was asked for.
    """

    def __init__(self, circuit_file: str, engine: str = "bistable", config_file: Optional[str] = None,
                 vector_table_file: Optional[str] = None, output_dir: Optional[str] = None,
                 overrides: Optional[Dict[str, Any]] = None, visualize: bool = False):
        self.circuit_file = circuit_file
        self.engine_name = engine
        self.config_file = config_file
        self.vector_table_file = vector_table_file
        self.output_dir = output_dir
        self.overrides = overrides or {}
        self.visualize = visualize

        self.file_saver = FileSaver(output_dir) if output_dir else None
        self.circuit: Optional[Circuit] = None
        self.engine: Optional[Engine] = None
        self.results: Optional[RunResults] = None
        self.saved_paths: Dict[str, str] = {}
        self._validate_configuration()

    def _validate_configuration(self):
        if not is_valid_engine_name(self.engine_name):
            raise ValueError(f"Invalid engine '{self.engine_name}'. Available: {', '.join(ENGINES)}")
        if self.visualize and not self.output_dir:
            raise ValueError("--visualize needs an output directory.")

    def run(self) -> bool:
        try:
            self.results = self.simulate()
        except Exception as e:
            logger.error(f"Error during simulation: {e}", exc_info=True)
            return False

        if self.file_saver:
            try:
                self._save()
            except OSError as e:
                logger.error(f"Error saving results to {self.output_dir}: {e}", exc_info=True)
                return False
        return True

    def simulate(self) -> RunResults:
        """Loads everything and runs the engine; errors propagate."""
        self.circuit = load_circuit(self.circuit_file)
        vector_table = VectorTable.load(self.vector_table_file) if self.vector_table_file else None

        self.engine = create_engine(self.engine_name, self.circuit, self.config_file, **self.overrides)
        logger.info(f"Starting simulation: {self.engine_name} engine, {self.circuit}")
        return self.engine.simulate(vector_table, on_sample=self._log_progress)

    def _log_progress(self, completed: int):
        total = self.engine.config.number_of_samples
        step = max(1, total // 10)
        if completed % step == 0 or completed == total:
            logger.info(f"Progress: {completed}/{total} samples")

    def _save(self):
        basename = os.path.splitext(os.path.basename(self.circuit_file))[0]
        metadata = {
            "circuit_file": self.circuit_file,
            "engine": self.engine_name,
            "config_file": self.config_file,
            "vector_table_file": self.vector_table_file,
            "cell_count": self.circuit.cell_count,
            "config": asdict(self.engine.config) if hasattr(self.engine, "config") else {},
        }

        self.saved_paths.update(self.file_saver.save_traces(self.results))
        self.saved_paths["summary"] = self.file_saver.save_summary(self.results, basename, metadata)

        if self.visualize:
            graph = GraphVisualizer.coupling_graph(self.circuit, getattr(self.engine, "coupling_graph", None))
            dot_path = self.file_saver.path_for(f"{basename}.coupling.dot")
            GraphVisualizer.generate_physical_dot(graph, dot_path)
            grid_path = self.file_saver.path_for(f"{basename}.grid")
            GraphVisualizer.save_layout_grid(self.circuit, grid_path)
            self.saved_paths["dot"] = dot_path
            self.saved_paths["grid"] = grid_path
