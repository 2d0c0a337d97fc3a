from .circuit_loader import build_circuit, load_circuit, loads_circuit
from .sections import Section, parse_file, parse_sections
from .vector_table import VectorTable
