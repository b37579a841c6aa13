"""
Global defaults for networks, data and views.
"""
import os
from pathlib import Path

# Network defaults
NETWORK_DEFAULT_TOPOLOGY = (2, 6, 4, 1)
NETWORK_DEFAULT_ETA = 0.03
NETWORK_DEFAULT_BATCHSIZE = 10000  # sample presentations per training call
NETWORK_INITIAL_RANGE = 0.5
NETWORK_MINIBATCH = 16
NETWORK_MAX_NEURONS_PER_LAYER = 32

DEFAULT_ENGINE = 'torch'

# Data
NUM_INPUTS = 2
NUM_OUTPUTS = 1
DATA_RANGE = (-1.0, 1.0)
POSITIVE = 1.0
NEGATIVE = -1.0
DEFAULT_TEST_FRACTION = 0.2

# Last used project, reloaded on startup
DATA_FILE = Path(os.environ.get('NNPLAYGROUND_DATA_FILE',
                                Path.home() / 'nnplayground.tmp'))

# Views
OUTPUT_GRID_RESOLUTION = 60
NEURON_GRID_RESOLUTION = 20
DELETE_RADIUS = 0.08
PAINT_INTERVAL_MS = 60
DEFAULT_REPAINT_INTERVAL = 5  # batches between heavy repaints
ERROR_GRAPH_MAX_POINTS = 500

POSITIVE_COLOR = '#1f77b4'
NEGATIVE_COLOR = '#ff7f0e'
NEUTRAL_COLOR = '#f0f0f0'
