"""
Run reporting

Condenses RunResults into a RunSummary and prints it.
"""

from dataclasses import dataclass, field
from typing import Dict, List

import numpy as np

from ..engine.results import RunResults


@dataclass
class RunSummary:
    """Headline numbers of one simulation run."""
    samples_requested: int
    samples_completed: int
    stopped: bool
    init_time: float
    run_time: float

    converged_samples: int = 0
    non_converged_samples: int = 0
    min_iterations: int = 0
    max_iterations: int = 0
    avg_iterations: float = 0.0

    # Output name -> logic string ("-" marks an unsettled sample)
    outputs: Dict[str, str] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    @property
    def convergence_rate(self) -> float:
        if self.samples_completed == 0:
            return 0.0
        return self.converged_samples / self.samples_completed


def summarize(results: RunResults) -> RunSummary:
    iterations = np.asarray(results.iterations, dtype=int)
    non_converged = len(results.non_converged_samples)

    summary = RunSummary(
        samples_requested=results.number_of_samples,
        samples_completed=results.samples_completed,
        stopped=results.stopped,
        init_time=results.init_time,
        run_time=results.run_time,
        converged_samples=results.samples_completed - non_converged,
        non_converged_samples=non_converged,
        outputs={name: output.logic_string() for name, output in results.outputs.items()},
    )
    if iterations.size:
        summary.min_iterations = int(iterations.min())
        summary.max_iterations = int(iterations.max())
        summary.avg_iterations = float(iterations.mean())

    if results.stopped:
        summary.warnings.append(
            f"Run stopped after {results.samples_completed} of {results.number_of_samples} samples."
        )
    if non_converged:
        summary.warnings.append(f"{non_converged} samples hit the iteration cap.")
    for name, logic in summary.outputs.items():
        if "-" in logic:
            summary.warnings.append(f"Output '{name}' has unsettled values.")
    return summary


def print_run_report(summary: RunSummary):
    print("\n" + "=" * 60)
    print("QCA BISTABLE SIMULATION REPORT")
    print("=" * 60)

    status = "STOPPED" if summary.stopped else "COMPLETED"
    print(f"\nStatus: {status}")

    if summary.warnings:
        print(f"\nWarnings ({len(summary.warnings)}):")
        for i, warning in enumerate(summary.warnings, 1):
            print(f"  {i}. {warning}")

    print("\nStatistics:")
    print(f"  Samples:              {summary.samples_completed}/{summary.samples_requested}")
    print(f"  Converged samples:    {summary.converged_samples} ({summary.convergence_rate:.1%})")
    print(f"  Sweeps per sample:    {summary.min_iterations} - {summary.max_iterations} "
          f"(avg {summary.avg_iterations:.2f})")
    print(f"  Init time:            {summary.init_time:.3f}s")
    print(f"  Run time:             {summary.run_time:.3f}s")

    if summary.outputs:
        print("\nOutputs:")
        width = max(len(name) for name in summary.outputs)
        for name, logic in summary.outputs.items():
            print(f"  {name:<{width}}  {logic}")

    print("=" * 60 + "\n")
