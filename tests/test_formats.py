import logging

import pytest

from qca_bistable.circuit import CellFunction, CellMode, InputCell, OutputCell
from qca_bistable.exceptions import CircuitError, ParseError
from qca_bistable.formats import VectorTable, load_circuit, loads_circuit, parse_sections

from conftest import design_text


class TestSections:

    def test_nested_sections(self):
        root = parse_sections([
            "[VERSION]",
            "qcadesigner_version=2.000000",
            "[#VERSION]",
            "",
            "[TYPE:DESIGN]",
            "[TYPE:BUS_LAYOUT]",
            "[BUS_DATA]",
            "1 2 3",
            "4",
            "[#BUS_DATA]",
            "[#TYPE:BUS_LAYOUT]",
            "[#TYPE:DESIGN]",
        ])

        assert root.first("VERSION").settings == {"qcadesigner_version": "2.000000"}
        bus_data = root.first("TYPE:DESIGN").first("TYPE:BUS_LAYOUT").first("BUS_DATA")
        assert bus_data.data == [[1, 2, 3], [4]]

    def test_groups_keep_file_order(self):
        root = parse_sections(["[A]", "n=1", "[#A]", "[A]", "n=2", "[#A]"])
        assert [s.settings["n"] for s in root.group("A")] == ["1", "2"]
        assert root.group("missing") == []

    def test_values_may_contain_equals(self):
        root = parse_sections(["[A]", "expr=a=b", "[#A]"])
        assert root.first("A").settings["expr"] == "a=b"

    def test_has_settings(self):
        section = parse_sections(["[A]", "x=1", "y=2", "[#A]"]).first("A")
        assert section.has_settings("x", "y")
        assert not section.has_settings("x", "z")

    @pytest.mark.parametrize("lines, line_number", [
        (["[A]", "x=1", "[#B]"], 3),
        (["[A]", "x 1", "[#A]"], 2),
        (["[A]", "1 2 x", "[#A]"], 2),
        (["x=1"], 1),
        (["[A", "[#A]"], 1),
        (["[A]", "x=1", "2 3", "[#A]"], 3),
    ])
    def test_errors_carry_line_numbers(self, lines, line_number):
        with pytest.raises(ParseError) as excinfo:
            parse_sections(lines)
        assert excinfo.value.line_number == line_number

    def test_missing_close_tag(self):
        with pytest.raises(ParseError):
            parse_sections(["[A]", "x=1"])


class TestCircuitLoader:

    def test_loads_cells_roles_and_labels(self, wire_file):
        circuit = load_circuit(str(wire_file))

        assert circuit.cell_count == 3
        assert circuit.version == 2.0
        assert circuit.source == str(wire_file)
        assert isinstance(circuit.input_cells[0], InputCell)
        assert circuit.input_cells[0].name == "a"
        assert isinstance(circuit.output_cells[0], OutputCell)
        assert circuit.output_cells[0].name == "out"
        assert circuit.cells[1].function is CellFunction.NORMAL
        assert circuit.cells[1].mode is CellMode.NORMAL

    def test_cell_centre_comes_from_the_design_object(self):
        circuit = loads_circuit(design_text([{"x": 120.0, "y": -40.0}]))
        cell = circuit.cells[0]
        assert (cell.x, cell.y) == (120.0, -40.0)
        assert cell.dots[0].x == 124.5

    def test_cell_centre_falls_back_to_dot_centroid(self):
        text = design_text([{"x": 60.0, "y": 20.0}])
        lines = text.splitlines()
        start = lines.index("[TYPE:QCADDesignObject]")
        end = lines.index("[#TYPE:QCADDesignObject]")
        del lines[start:end + 1]

        cell = loads_circuit("\n".join(lines)).cells[0]
        assert (cell.x, cell.y) == pytest.approx((60.0, 20.0))

    def test_fixed_cell_polarization(self):
        circuit = loads_circuit(design_text([
            {"x": 0.0, "y": 0.0, "function": CellFunction.FIXED, "polarization": -1.0},
        ]))
        assert circuit.fixed_cells[0].polarization == pytest.approx(-1.0)

    def test_non_cell_layers_are_skipped(self):
        circuit = loads_circuit(design_text(
            [{"x": 0.0, "y": 0.0}], extra_layers=[(2, "Substrate"), (3, "Drawing Layer")],
        ))
        assert len(circuit.layers) == 1
        # Layers keep their position in the file.
        assert circuit.layers[0].index == 2
        assert circuit.cells[0].layer == 2

    def test_unknown_layer_type(self):
        with pytest.raises(CircuitError):
            loads_circuit(design_text([], extra_layers=[(7, "Mystery")]))

    def test_version_mismatch_warns(self, caplog):
        with caplog.at_level(logging.WARNING):
            circuit = loads_circuit(design_text([{"x": 0.0, "y": 0.0}], version="1.4"))
        assert circuit.version == 1.4
        assert "version 1.4" in caplog.text

    def test_missing_label_gets_a_generated_name(self):
        circuit = loads_circuit(design_text([{"x": 0.0, "y": 0.0, "function": CellFunction.OUTPUT}]))
        assert circuit.output_cells[0].name == "output_0"

    def test_nan_values_read_as_zero(self):
        text = design_text([{"x": 0.0, "y": 0.0}]).replace("spin=0.000000", "spin=-1.#QNAN0")
        assert loads_circuit(text).cells[0].dots[0].spin == 0.0

    @pytest.mark.parametrize("old, new", [
        ("cell_options.clock=0", "cell_options.clock=zero"),
        ("QCAD_CELL_MODE_NORMAL", "QCAD_CELL_MODE_SIDEWAYS"),
        ("cell_function=QCAD_CELL_NORMAL", "cell_function=QCAD_CELL_MAGIC"),
        ("cell_options.clock=0", "cell_options.clock=5"),
        ("cell_options.dot_diameter=5.000000\n", ""),
    ])
    def test_invalid_cells(self, old, new):
        text = design_text([{"x": 0.0, "y": 0.0}]).replace(old, new)
        with pytest.raises(CircuitError):
            loads_circuit(text)

    def test_missing_design(self):
        with pytest.raises(CircuitError):
            loads_circuit("[VERSION]\nqcadesigner_version=2.0\n[#VERSION]\n")

    def test_wrong_number_of_dots(self):
        text = design_text([{"x": 0.0, "y": 0.0}])
        start = text.index("[TYPE:CELL_DOT]")
        end = text.index("[#TYPE:CELL_DOT]") + len("[#TYPE:CELL_DOT]\n")
        with pytest.raises(CircuitError):
            loads_circuit(text[:start] + text[end:])


class TestVectorTable:

    def test_parse(self):
        table = VectorTable.parse([
            "%%VECTOR TABLE%%",
            "# inputs a b",
            "11",
            "",
            "00",
            "01",
            "10",
        ])
        assert table.active == [True, True]
        assert table.width == 2
        assert len(table) == 3
        assert table.inputs_for(0) == [False, False, True]
        assert table.inputs_for(1) == [False, True, False]

    def test_load(self, vector_file):
        table = VectorTable.load(str(vector_file))
        assert table.active == [True]
        assert table.vectors == [[True]]

    def test_exhaustive(self):
        table = VectorTable.exhaustive(2)
        assert table.active == [True, True]
        assert table.vectors == [[False, False], [False, True], [True, False], [True, True]]

    def test_dumps_parses_back(self):
        table = VectorTable([True, False], [[True, True], [False, True]])
        again = VectorTable.parse(table.dumps().splitlines())
        assert again.active == table.active
        assert again.vectors == table.vectors

    @pytest.mark.parametrize("lines", [
        ["11", "01"],
        ["%%VECTOR TABLE%%"],
        ["%%VECTOR TABLE%%", "11", "0"],
        ["%%VECTOR TABLE%%", "11", "0x"],
    ])
    def test_invalid_tables(self, lines):
        with pytest.raises(ParseError):
            VectorTable.parse(lines)

    def test_vectors_must_match_width(self):
        with pytest.raises(ValueError):
            VectorTable([True, True], [[True]])
