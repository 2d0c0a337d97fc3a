import argparse

from .engine import ENGINES


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qca-bistable",
        description="Simulates QCADesigner circuits with the bistable approximation.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    simulate = subparsers.add_parser("simulate", help="Run one simulation")
    simulate.add_argument("-f", "--file", dest="circuit_file", required=True,
                          help="QCADesigner circuit file (.qca)")
    simulate.add_argument("-e", "--engine", default="bistable",
                          help=f"Simulation engine ({', '.join(ENGINES)})")
    simulate.add_argument("-c", "--config", dest="config_file",
                          help="Engine settings file with a [BISTABLE_OPTIONS] section")
    simulate.add_argument("--vt", dest="vector_table_file",
                          help="Vector table file; without one, input cells relax freely")
    simulate.add_argument("-n", "--samples", dest="number_of_samples", type=int,
                          help="Override the number of samples")
    simulate.add_argument("-t", "--radius", dest="radius_of_effect", type=float,
                          help="Override the radius of effect (nm)")
    simulate.add_argument("--seed", dest="random_seed", type=int,
                          help="Seed for the cell order shuffle")
    simulate.add_argument("-o", "--output-dir", dest="output_dir",
                          help="Directory for trace tables and the run summary")
    simulate.add_argument("--visualize", action="store_true",
                          help="Also save the coupling graph (.dot) and an ASCII layout grid")
    simulate.add_argument("-v", "--verbose", action="store_true", default=argparse.SUPPRESS,
                          help="Enable debug logging")
    simulate.add_argument("--gui", action="store_true", help="Graphical mode (not available)")

    return parser
