# scripts/runner.py

"""
Runs the simulator from a source checkout without installing it.

    python scripts/runner.py simulate -f circuit.qca --vt vectors.vt -o results
"""

import os
import sys

# The project root must be importable before qca_bistable is imported.
current_dir = os.path.dirname(os.path.abspath(__file__))
parent_dir = os.path.dirname(current_dir)
sys.path.append(parent_dir)

from qca_bistable.runner import main

if __name__ == "__main__":
    sys.exit(main())
