import logging
from typing import Optional

import networkx as nx

from ..circuit.circuit import Circuit
from ..circuit.units import CellFunction

logger = logging.getLogger(__name__)

NODE_STYLES = {
    CellFunction.INPUT.value: ("#2ECC71", "IN"),
    CellFunction.OUTPUT.value: ("#E74C3C", "OUT"),
    CellFunction.FIXED.value: ("#F1C40F", "FIX"),
    CellFunction.NORMAL.value: ("#3498DB", ""),
}

GRID_SYMBOLS = {
    CellFunction.INPUT: " I ",
    CellFunction.OUTPUT: "OUT",
    CellFunction.FIXED: " F ",
    CellFunction.NORMAL: " # ",
}


class GraphVisualizer:
    """Exports a circuit's coupling graph to DOT and its layout to an ASCII grid."""

    @staticmethod
    def coupling_graph(circuit: Circuit, graph: Optional[nx.Graph] = None) -> nx.Graph:
        """The engine's coupling graph, or a bare graph of the circuit's cells if none was built."""
        if graph is not None:
            return graph
        bare = nx.Graph()
        for cell in circuit.cells:
            bare.add_node(cell.index, x=cell.x, y=cell.y, layer=cell.layer,
                          function=cell.function.value, clock=cell.clock_index, name=cell.name)
        return bare

    @staticmethod
    def generate_physical_dot(graph: nx.Graph, filename: str, scale: float = 4.0):
        """
        Writes a DOT file with every cell pinned to its layout position.

        Edges are the coupled pairs; their width grows with the kink energy
        relative to the strongest coupling in the circuit.
        """
        if not graph or not graph.nodes:
            logger.warning("Coupling graph is empty, no .dot file to generate.")
            return

        energies = [abs(e) for _, _, e in graph.edges(data="kink_energy", default=0.0)]
        strongest = max(energies) if energies else 0.0

        with open(filename, "w", encoding="utf-8") as f:
            f.write("graph CouplingGraph {\n")
            f.write("    layout=neato;\n")
            f.write("    node [shape=square, style=filled, fixedsize=true, width=0.5, fontsize=8];\n")
            f.write("    splines=false;\n")

            for node, data in graph.nodes(data=True):
                color, label = NODE_STYLES.get(data.get("function"), ("white", "?"))
                if data.get("name"):
                    label = data["name"]
                # Layout y grows downwards, Graphviz y grows upwards.
                pos = f"{data.get('x', 0.0) * scale:.2f},{-data.get('y', 0.0) * scale:.2f}!"
                f.write(f'    "{node}" [pos="{pos}", label="{label}", fillcolor="{color}", '
                        f'layer="{data.get("layer", 0)}"];\n')

            f.write("\n")
            for u, v, energy in sorted(graph.edges(data="kink_energy", default=0.0)):
                width = 0.5 + 2.5 * abs(energy) / strongest if strongest else 1.0
                f.write(f'    "{u}" -- "{v}" [color="#7F8C8D", penwidth={width:.2f}];\n')
            f.write("}\n")
        logger.info(f"Saved coupling graph to {filename}")

    @staticmethod
    def render_layout_grid(circuit: Circuit, pitch: float = 20.0) -> str:
        """ASCII grid of every layer, one column per `pitch` nanometres."""
        if not circuit.cells:
            return "Empty circuit\n"

        min_x = min(c.x for c in circuit.cells)
        min_y = min(c.y for c in circuit.cells)
        cols = int(round((max(c.x for c in circuit.cells) - min_x) / pitch)) + 1
        rows = int(round((max(c.y for c in circuit.cells) - min_y) / pitch)) + 1

        lines = [f"Dimensions: {rows}x{cols} (pitch {pitch}nm)",
                 "Legend: I=Input, OUT=Output, F=Fixed, #=Normal, digit=clock zone, .=Empty", ""]
        for layer in circuit.layers:
            grid = [[" . " for _ in range(cols)] for _ in range(rows)]
            for cell in layer.cells:
                r = int(round((cell.y - min_y) / pitch))
                c = int(round((cell.x - min_x) / pitch))
                symbol = GRID_SYMBOLS[cell.function]
                if cell.function is CellFunction.NORMAL:
                    symbol = f" {cell.clock_index} "
                grid[r][c] = symbol

            lines.append(f"Layer {layer.index} {layer.description}".rstrip())
            lines.append("    " + "".join(f"{c:^3}" for c in range(cols)))
            lines.append("    " + "---" * cols)
            for r in range(rows):
                lines.append(f"{r:3} |" + "".join(grid[r]) + "|")
            lines.append("    " + "---" * cols)
            lines.append("")
        return "\n".join(lines)

    @staticmethod
    def save_layout_grid(circuit: Circuit, filename: str, pitch: float = 20.0):
        with open(filename, "w", encoding="utf-8") as f:
            f.write(GraphVisualizer.render_layout_grid(circuit, pitch))
        logger.info(f"Saved layout grid to {filename}")
