import logging
from typing import List, Optional

from ..circuit.circuit import Circuit, Layer
from ..circuit.units import Cell, CellFunction, CellMode, InputCell, OutputCell, QuantumDot
from ..exceptions import CircuitError
from .sections import Section, parse_file, parse_sections

logger = logging.getLogger(__name__)

FILE_VERSION = 2.0

CELL_LAYER = 1
IGNORED_LAYERS = (0, 2, 3)  # clock, substrate, drawing

CELL_SETTINGS = (
    "cell_options.cxCell", "cell_options.cyCell", "cell_options.dot_diameter",
    "cell_options.clock", "cell_options.mode", "cell_function",
)
DOT_SETTINGS = ("x", "y", "diameter", "charge", "spin", "potential")

# QCADesigner writes NaN this way on Windows builds.
NAN_TOKEN = "-1.#QNAN0"


def load_circuit(filename: str) -> Circuit:
    logger.info(f"Loading circuit file {filename}")
    root = parse_file(filename)
    circuit = build_circuit(root, source=filename)
    logger.info(f"Loaded {circuit}")
    return circuit


def loads_circuit(text: str) -> Circuit:
    return build_circuit(parse_sections(text.splitlines()))


def build_circuit(root: Section, source: Optional[str] = None) -> Circuit:
    version_section = root.first("VERSION")
    design_section = root.first("TYPE:DESIGN")
    if version_section is None or design_section is None:
        raise CircuitError("Invalid circuit file: the VERSION and TYPE:DESIGN sections are required.")

    version = _check_version(version_section, source)
    layers = _load_design(design_section)
    return Circuit(layers, version=version, source=source)


def _check_version(section: Section, source: Optional[str]) -> float:
    if not section.has_settings("qcadesigner_version"):
        raise CircuitError("The VERSION section must contain a qcadesigner_version setting.")
    version = _to_float(section.settings["qcadesigner_version"], "qcadesigner_version")
    if version != FILE_VERSION:
        logger.warning(
            f"The circuit file {source or '<memory>'} appears to be from version {version} of QCADesigner; "
            f"some features may not be supported."
        )
    return version


def _load_design(design: Section) -> List[Layer]:
    layer_sections = design.group("TYPE:QCADLayer")
    if not layer_sections:
        raise CircuitError("The design has no TYPE:QCADLayer sections.")

    layers = []
    for file_index, layer_section in enumerate(layer_sections):
        logger.debug(f"Loading layer {file_index}")
        layer = _load_layer(layer_section, file_index)
        if layer is not None:
            layers.append(layer)
    return layers


def _load_layer(section: Section, file_index: int) -> Optional[Layer]:
    if not section.has_settings("type"):
        raise CircuitError(f"Layer {file_index} is missing its type setting.")

    layer_type = _to_int(section.settings["type"], "layer type")
    if layer_type in IGNORED_LAYERS:
        return None
    if layer_type != CELL_LAYER:
        raise CircuitError(f"Invalid layer type: {layer_type}")

    layer = Layer(file_index, section.settings.get("pszDescription", ""))
    for cell_section in section.group("TYPE:QCADCell"):
        layer.cells.append(_load_cell(cell_section, file_index))
    return layer


def _load_cell(section: Section, layer: int) -> Cell:
    if not section.has_settings(*CELL_SETTINGS):
        raise CircuitError("Cell does not contain enough settings.")
    settings = section.settings

    dot_diameter = _to_float(settings["cell_options.dot_diameter"], "dot_diameter")
    clock = _to_int(settings["cell_options.clock"], "clock")
    mode = _match_suffix(settings["cell_options.mode"], CellMode, "cell mode")
    function = _match_suffix(settings["cell_function"], CellFunction, "cell function")

    dot_sections = section.group("TYPE:CELL_DOT")
    if len(dot_sections) != 4:
        raise CircuitError(f"A cell needs exactly 4 TYPE:CELL_DOT sections, found {len(dot_sections)}.")
    dots = [_load_dot(d) for d in dot_sections]

    x, y = _cell_centre(section, dots)
    name = _cell_label(section) if function in (CellFunction.INPUT, CellFunction.OUTPUT) else None

    try:
        if function is CellFunction.INPUT:
            return InputCell(x, y, dots, clock, mode, layer, dot_diameter=dot_diameter, name=name)
        if function is CellFunction.OUTPUT:
            return OutputCell(x, y, dots, clock, mode, layer, dot_diameter=dot_diameter, name=name)
        return Cell(x, y, dots, clock, mode, layer, function, dot_diameter=dot_diameter)
    except ValueError as e:
        raise CircuitError(f"Invalid cell at ({x}, {y}): {e}") from e


def _load_dot(section: Section) -> QuantumDot:
    if not section.has_settings(*DOT_SETTINGS):
        raise CircuitError("Quantum dot does not have enough settings.")
    values = {key: _to_float(section.settings[key], key) for key in DOT_SETTINGS}
    return QuantumDot(**values)


def _cell_centre(section: Section, dots: List[QuantumDot]):
    design_object = section.first("TYPE:QCADDesignObject")
    if design_object is not None and design_object.has_settings("x", "y"):
        return (_to_float(design_object.settings["x"], "x"),
                _to_float(design_object.settings["y"], "y"))
    return (sum(d.x for d in dots) / len(dots),
            sum(d.y for d in dots) / len(dots))


def _cell_label(section: Section) -> Optional[str]:
    label = section.first("TYPE:QCADLabel")
    if label is None or not label.settings.get("psz"):
        return None
    return label.settings["psz"]


def _match_suffix(value: str, enum_type, what: str):
    # Files store e.g. QCAD_CELL_MODE_NORMAL or QCAD_CELL_INPUT.
    for member in enum_type:
        if value.endswith(member.value):
            return member
    raise CircuitError(f"Unknown {what}: {value}")


def _to_float(value: str, what: str) -> float:
    if value == NAN_TOKEN:
        return 0.0
    try:
        return float(value)
    except ValueError:
        raise CircuitError(f"Invalid number for {what}: {value}") from None


def _to_int(value: str, what: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise CircuitError(f"Invalid integer for {what}: {value}") from None
