import logging
import os
import sys

from .cli import create_parser
from .controller import SimulationTask
from .engine import is_valid_engine_name
from .utils.logger_setup import setup_logger
from .utils.run_report import print_run_report, summarize

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_BAD_ARGUMENT = 1
EXIT_USAGE = 2
EXIT_BAD_ENGINE = 3
EXIT_SIMULATION_FAILED = 4
EXIT_GUI_UNAVAILABLE = 5


def run_simulation(args) -> int:
    if args.gui:
        print("GUI mode is not implemented.", file=sys.stderr)
        return EXIT_GUI_UNAVAILABLE

    if not is_valid_engine_name(args.engine):
        print(f"Invalid engine name: {args.engine}", file=sys.stderr)
        return EXIT_BAD_ENGINE

    for label, path in (("circuit", args.circuit_file), ("config", args.config_file),
                        ("vector table", args.vector_table_file)):
        if path is not None and not os.access(path, os.R_OK):
            print(f"Can't read {label} file: {path}", file=sys.stderr)
            return EXIT_BAD_ARGUMENT

    overrides = {
        "number_of_samples": args.number_of_samples,
        "radius_of_effect": args.radius_of_effect,
        "random_seed": args.random_seed,
    }

    try:
        task = SimulationTask(
            circuit_file=args.circuit_file,
            engine=args.engine,
            config_file=args.config_file,
            vector_table_file=args.vector_table_file,
            output_dir=args.output_dir,
            overrides=overrides,
            visualize=args.visualize,
        )
    except ValueError as e:
        print(f"Invalid arguments: {e}", file=sys.stderr)
        return EXIT_BAD_ARGUMENT

    if not task.run():
        print("Simulation failed.", file=sys.stderr)
        return EXIT_SIMULATION_FAILED

    print_run_report(summarize(task.results))
    if task.output_dir:
        print(f"Results in: {os.path.abspath(task.output_dir)}")
    return EXIT_OK


def main(argv=None) -> int:
    parser = create_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        # argparse exits 0 for --help and 2 for usage errors.
        return e.code if isinstance(e.code, int) else EXIT_USAGE

    setup_logger(verbose=args.verbose)

    if args.command == "simulate":
        return run_simulation(args)

    parser.print_help()
    return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
