"""Physical constants and engine defaults shared across the simulator."""

import math

# Elementary charge and derived values (SI).
QCHARGE = 1.602176432e-19
QCHARGE_SQRD_OVER_FOUR = 6.417423538e-39

EPSILON = 8.8541878e-12
FOUR_PI_EPSILON = 4 * math.pi * EPSILON

# Layout coordinates are in nanometres.
NANOMETRE = 1e-9

# Bistable engine defaults.
DEFAULT_NUMBER_OF_SAMPLES = 12500
DEFAULT_CONVERGENCE_TOLERANCE = 0.001
DEFAULT_RADIUS_OF_EFFECT = 65.0
DEFAULT_EPSILON_R = 12.9
DEFAULT_CLOCK_HIGH = 9.8e-22
DEFAULT_CLOCK_LOW = 3.8e-23
DEFAULT_CLOCK_SHIFT = 0.0
DEFAULT_CLOCK_AMPLITUDE_FACTOR = 2.0
DEFAULT_MAX_ITERATIONS_PER_SAMPLE = 15
DEFAULT_LAYER_SEPARATION = 10.0
DEFAULT_RANDOMIZE_CELLS = True

# Analog levels driven by input cells.
INPUT_HIGH = 1.0
INPUT_LOW = -0.1

# Output digitization.
LOGIC_ONE_THRESHOLD = 0.9
LOGIC_ZERO_THRESHOLD = -0.9
CLOCK_LOW_MARGIN = 1.001
CLOCK_HIGH_MARGIN = 0.999

# Saturation bounds of the bistable response.
SATURATION_LIMIT = 1000.0
LINEAR_LIMIT = 0.001

NUM_CLOCKS = 4
DOTS_PER_CELL = 4

# QCADesigner defaults for cell geometry.
DEFAULT_CELL_SIZE = 18.0
DEFAULT_DOT_DIAMETER = 5.0
