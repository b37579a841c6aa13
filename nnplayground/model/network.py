"""
Common interface of the network engines.

Neurons are numbered globally starting at 0, layer after layer. Bias neurons
are engine internals and never get a number; their weights are reachable
through get_bias_weight().
"""
import logging
import time
from abc import ABC, abstractmethod

import numpy as np

from nnplayground.config import (
    NETWORK_DEFAULT_TOPOLOGY, NETWORK_DEFAULT_ETA, NETWORK_DEFAULT_BATCHSIZE,
    NETWORK_INITIAL_RANGE, NETWORK_MAX_NEURONS_PER_LAYER, POSITIVE, NEGATIVE
)

logger = logging.getLogger(__name__)

# Width of the output range, scales the squared error percentage
OUTPUT_SPAN = POSITIVE - NEGATIVE


def check_topology(topology):
    topology = [int(n) for n in topology]
    if len(topology) < 2:
        raise ValueError(f"A network needs at least an input and an output layer, got {topology}")
    if any(n < 1 for n in topology):
        raise ValueError(f"Every layer needs at least one neuron, got {topology}")
    return topology


class NetworkWrapper(ABC):
    """Base class for the wrapped neural network engines"""

    def __init__(self, topology=None, initial_range=None, behavior=0):
        self.eta = NETWORK_DEFAULT_ETA
        self.batch_size = NETWORK_DEFAULT_BATCHSIZE
        self.initial_range = NETWORK_INITIAL_RANGE if initial_range is None else initial_range
        self.behavior = behavior
        self.output_batch_size = 0
        self.create_network(NETWORK_DEFAULT_TOPOLOGY if topology is None else topology)

    # --- Engine specific ---

    @abstractmethod
    def create_network(self, topology):
        """(Re)create a randomly initialised network of the given layer sizes"""

    @abstractmethod
    def get_topology(self):
        """Neurons per layer as a list"""

    @abstractmethod
    def get_layer_weights(self):
        """List of (W, b) per connection layer, W shaped (from, to), b shaped (to,)"""

    @abstractmethod
    def set_layer_weights(self, weights):
        """Inverse of get_layer_weights(), shapes must match the topology"""

    @abstractmethod
    def get_activations(self, X):
        """Outputs of every layer for a batch of inputs, the first entry is X itself"""

    @abstractmethod
    def _train_batch(self, X, Y, epochs):
        """Run backpropagation for the given number of epochs, returns the presentations made"""

    @abstractmethod
    def clone(self):
        pass

    @abstractmethod
    def get_behavior_descriptions(self):
        pass

    @abstractmethod
    def get_engine_name(self):
        pass

    # --- Structure ---

    def count_layers(self):
        return len(self.get_topology())

    def count_neurons_in_layer(self, layer):
        return self.get_topology()[layer]

    def count_neurons(self):
        return sum(self.get_topology())

    def get_max_neurons_in_layers(self):
        return max(self.get_topology())

    def get_first_neuron_in_layer(self, layer):
        return sum(self.get_topology()[:layer])

    def get_layer_of_neuron(self, num):
        if num < 0:
            return -1
        last = 0
        for layer, size in enumerate(self.get_topology()):
            last += size
            if num < last:
                return layer
        return -1

    def is_synapse_existent(self, from_neuron, to_neuron):
        from_layer = self.get_layer_of_neuron(from_neuron)
        to_layer = self.get_layer_of_neuron(to_neuron)
        if from_layer < 0 or to_layer < 0:
            return False
        return to_layer == from_layer + 1

    def get_weight(self, from_neuron, to_neuron):
        if not self.is_synapse_existent(from_neuron, to_neuron):
            return float('nan')
        layer = self.get_layer_of_neuron(from_neuron)
        W, _ = self.get_layer_weights()[layer]
        i = from_neuron - self.get_first_neuron_in_layer(layer)
        j = to_neuron - self.get_first_neuron_in_layer(layer + 1)
        return float(W[i, j])

    def get_bias_weight(self, num):
        layer = self.get_layer_of_neuron(num)
        if layer < 1:
            # Input neurons have no bias
            return float('nan')
        _, b = self.get_layer_weights()[layer - 1]
        return float(b[num - self.get_first_neuron_in_layer(layer)])

    # --- Propagation and training ---

    def propagate(self, inputs):
        return self.propagate_many(np.atleast_2d(np.asarray(inputs, dtype=float)))[0]

    def propagate_many(self, X):
        return np.asarray(self.get_activations(X)[-1], dtype=float)

    def train(self, data, tracker=None):
        """Train one batch of about batch_size presentations of the training lesson"""
        lesson = data.get_training_lesson()
        n = lesson.size()
        if n == 0:
            return

        if tracker is not None:
            tracker.add_record(self.get_training_error(data), self.get_test_error(data))

        X, Y = lesson.as_arrays()
        epochs = max(1, self.batch_size // n)

        start = time.perf_counter()
        self.output_batch_size = self._train_batch(X, Y, epochs)
        elapsed = time.perf_counter() - start

        if tracker is not None:
            tracker.add_time(elapsed)
            tracker.add_presentations(self.output_batch_size)

    def _lesson_error(self, lesson):
        # Squared error percentage (Prechelt), divided by 100
        X, Y = lesson.as_arrays()
        if len(X) == 0:
            return 0.0
        out = self.propagate_many(X)
        return float(OUTPUT_SPAN * np.mean((out - Y) ** 2))

    def get_training_error(self, data):
        if data is None:
            return 0.0
        return self._lesson_error(data.get_training_lesson())

    def get_test_error(self, data):
        if data is None:
            return 0.0
        return self._lesson_error(data.get_test_lesson())

    # --- Parameters ---

    def get_eta(self):
        return self.eta

    def set_eta(self, eta):
        self.eta = float(eta)

    def get_batch_size(self):
        return self.batch_size

    def set_batch_size(self, size):
        self.batch_size = int(size)

    def get_output_batch_size(self):
        return self.output_batch_size

    def get_initial_range(self):
        return self.initial_range

    def set_initial_range(self, initial_range):
        self.initial_range = float(initial_range)

    def get_behavior(self):
        return self.behavior

    def set_behavior(self, behavior):
        if behavior < 0 or behavior >= len(self.get_behavior_descriptions()):
            return
        if behavior == self.behavior:
            return
        self.behavior = behavior
        self.create_network(self.get_topology())

    def set_parameters_from(self, network):
        self.set_eta(network.get_eta())
        self.set_batch_size(network.get_batch_size())
        self.set_initial_range(network.get_initial_range())

    # --- Topology editing ---

    def add_layer(self, position, neurons, reset=False):
        """Insert a hidden layer in front of the layer currently at position"""
        topology = self.get_topology()
        if position < 1 or position >= len(topology) or neurons < 1:
            return
        new = topology[:position] + [int(neurons)] + topology[position:]
        # Connections into and out of the new layer start fresh
        mapping = [k if k < position - 1 else None if k <= position else k - 1
                   for k in range(len(new) - 1)]
        self._rebuild(new, mapping, reset)

    def remove_layer(self, layer, reset=False):
        topology = self.get_topology()
        if layer < 1 or layer >= len(topology) - 1:
            return
        new = topology[:layer] + topology[layer + 1:]
        mapping = [k if k < layer - 1 else None if k == layer - 1 else k + 1
                   for k in range(len(new) - 1)]
        self._rebuild(new, mapping, reset)

    def add_neuron(self, layer, reset=False):
        topology = self.get_topology()
        if layer < 1 or layer >= len(topology) - 1:
            return
        if topology[layer] >= NETWORK_MAX_NEURONS_PER_LAYER:
            return
        topology[layer] += 1
        self._rebuild(topology, list(range(len(topology) - 1)), reset)

    def remove_neuron(self, layer, reset=False):
        topology = self.get_topology()
        if layer < 1 or layer >= len(topology) - 1:
            return
        if topology[layer] < 2:
            return
        topology[layer] -= 1
        self._rebuild(topology, list(range(len(topology) - 1)), reset)

    def set_neurons_in_layer(self, layer, count, reset=False):
        while 0 < layer < self.count_layers() - 1 and self.count_neurons_in_layer(layer) != count:
            before = self.count_neurons_in_layer(layer)
            if before < count:
                self.add_neuron(layer, reset)
            else:
                self.remove_neuron(layer, reset)
            if self.count_neurons_in_layer(layer) == before:
                break

    def _rebuild(self, topology, mapping, reset):
        """Recreate the network; mapping gives the old connection layer kept for each new one"""
        old = self.get_layer_weights()
        self.create_network(topology)
        if reset:
            return

        weights = self.get_layer_weights()
        for k, old_k in enumerate(mapping):
            if old_k is None:
                continue
            W, b = weights[k]
            old_W, old_b = old[old_k]
            rows = min(W.shape[0], old_W.shape[0])
            cols = min(W.shape[1], old_W.shape[1])
            W[:rows, :cols] = old_W[:rows, :cols]
            b[:cols] = old_b[:cols]
        self.set_layer_weights(weights)
        logger.debug(f"Rebuilt network as {topology}, kept weights of {sum(m is not None for m in mapping)} layers")
