import pytest

from qca_bistable.circuit import Cell, CellFunction, Circuit, InputCell, OutputCell, make_dots
from qca_bistable.engine import BistableConfig

# Clock pinned at its low level: every cell is fully active on every sample.
LOW = 3.8e-23


def make_cell(x, y, function=CellFunction.NORMAL, clock=0, layer=0, polarization=0.0, name=None):
    if function is CellFunction.INPUT:
        return InputCell.from_center(x, y, polarization, clock=clock, layer=layer, name=name)
    if function is CellFunction.OUTPUT:
        return OutputCell.from_center(x, y, polarization, clock=clock, layer=layer, name=name)
    return Cell.from_center(x, y, polarization, clock=clock, layer=layer, function=function)


def fixed_cell(x, y, polarization, **kwargs):
    return make_cell(x, y, CellFunction.FIXED, polarization=polarization, **kwargs)


def constant_clock_config(**kwargs) -> BistableConfig:
    values = dict(number_of_samples=20, clock_low=LOW, clock_high=LOW, randomize_cells=False)
    values.update(kwargs)
    return BistableConfig(**values)


@pytest.fixture
def wire():
    """FIXED(+1) -> NORMAL -> OUTPUT, 20nm apart on one layer."""
    return Circuit.from_cells([
        fixed_cell(0, 0, 1.0),
        make_cell(20, 0),
        make_cell(40, 0, CellFunction.OUTPUT, name="out"),
    ])


@pytest.fixture
def input_wire():
    """INPUT -> NORMAL -> OUTPUT, 20nm apart on one layer."""
    return Circuit.from_cells([
        make_cell(0, 0, CellFunction.INPUT, name="a"),
        make_cell(20, 0),
        make_cell(40, 0, CellFunction.OUTPUT, name="out"),
    ])


CELL_FUNCTIONS = {
    CellFunction.NORMAL: "QCAD_CELL_NORMAL",
    CellFunction.INPUT: "QCAD_CELL_INPUT",
    CellFunction.OUTPUT: "QCAD_CELL_OUTPUT",
    CellFunction.FIXED: "QCAD_CELL_FIXED",
}


def design_text(cells, version="2.000000", extra_layers=()):
    """
    QCADesigner design file for `cells`, given as dicts with x, y and
    optionally function, clock, polarization and label.
    """
    lines = ["[VERSION]", f"qcadesigner_version={version}", "[#VERSION]", "[TYPE:DESIGN]"]
    for layer_type, description in extra_layers:
        lines += ["[TYPE:QCADLayer]", f"type={layer_type}", "status=0",
                  f"pszDescription={description}", "[#TYPE:QCADLayer]"]

    lines += ["[TYPE:QCADLayer]", "type=1", "status=0", "pszDescription=Main Cell Layer"]
    for cell in cells:
        function = cell.get("function", CellFunction.NORMAL)
        lines += [
            "[TYPE:QCADCell]",
            "[TYPE:QCADDesignObject]", f"x={cell['x']:.6f}", f"y={cell['y']:.6f}", "bSelected=FALSE",
            "[#TYPE:QCADDesignObject]",
            "cell_options.cxCell=18.000000", "cell_options.cyCell=18.000000",
            "cell_options.dot_diameter=5.000000", f"cell_options.clock={cell.get('clock', 0)}",
            "cell_options.mode=QCAD_CELL_MODE_NORMAL", f"cell_function={CELL_FUNCTIONS[function]}",
        ]
        for dot in make_dots(cell["x"], cell["y"], polarization=cell.get("polarization", 0.0)):
            lines += ["[TYPE:CELL_DOT]", f"x={dot.x!r}", f"y={dot.y!r}", f"diameter={dot.diameter!r}",
                      f"charge={dot.charge!r}", "spin=0.000000", "potential=0.000000", "[#TYPE:CELL_DOT]"]
        if "label" in cell:
            lines += ["[TYPE:QCADLabel]", f"psz={cell['label']}", "[#TYPE:QCADLabel]"]
        lines.append("[#TYPE:QCADCell]")
    lines += ["[#TYPE:QCADLayer]", "[#TYPE:DESIGN]"]
    return "\n".join(lines) + "\n"


@pytest.fixture
def wire_file(tmp_path):
    path = tmp_path / "wire.qca"
    path.write_text(design_text([
        {"x": 0.0, "y": 0.0, "function": CellFunction.INPUT, "label": "a"},
        {"x": 20.0, "y": 0.0},
        {"x": 40.0, "y": 0.0, "function": CellFunction.OUTPUT, "label": "out"},
    ]))
    return path


@pytest.fixture
def vector_file(tmp_path):
    path = tmp_path / "wire.vt"
    path.write_text("%%VECTOR TABLE%%\n# active mask\n1\n1\n")
    return path


@pytest.fixture
def constant_clock_config_file(tmp_path):
    path = tmp_path / "bistable.cfg"
    path.write_text(
        "[BISTABLE_OPTIONS]\n"
        "number_of_samples=20\n"
        f"clock_low={LOW!r}\n"
        f"clock_high={LOW!r}\n"
        "randomize_cells=FALSE\n"
        "[#BISTABLE_OPTIONS]\n"
    )
    return path
