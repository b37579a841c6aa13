"""
Network engine on top of scikit-learn's MLPRegressor.

The estimator learns its layer sizes from the first partial_fit() call, so a
new network is fitted once on a zero sample and its weights are then replaced
by uniformly random values.
"""
import copy

import numpy as np
import sklearn
from sklearn.neural_network import MLPRegressor

from nnplayground.config import NETWORK_MINIBATCH
from nnplayground.model.network import NetworkWrapper, check_topology


def _relu(x):
    return np.maximum(x, 0.0)


def _logistic(x):
    return 1.0 / (1.0 + np.exp(-x))


# (label, MLPRegressor activation, numpy implementation for the activation maps)
BEHAVIORS = [
    ('ReLU', 'relu', _relu),
    ('Identity', 'identity', lambda x: x),
    ('Logistic', 'logistic', _logistic),
    ('Tanh', 'tanh', np.tanh),
]


def _targets(Y):
    Y = np.asarray(Y, dtype=float)
    # MLPRegressor wants a 1-d target for a single output
    return Y.ravel() if Y.ndim == 2 and Y.shape[1] == 1 else Y


class SklearnNetworkWrapper(NetworkWrapper):
    """Wrapper for a scikit-learn MLPRegressor trained with plain SGD"""

    def create_network(self, topology):
        topology = check_topology(topology)
        self.net = MLPRegressor(
            hidden_layer_sizes=tuple(topology[1:-1]),
            activation=BEHAVIORS[self.behavior][1],
            solver='sgd',
            learning_rate='constant',
            learning_rate_init=self.eta,
            momentum=0.0,
            nesterovs_momentum=False,
            alpha=0.0,
            # "auto" sizes the batch to the single zero sample below
            batch_size='auto',
            shuffle=True,
        )
        self.net.partial_fit(np.zeros((1, topology[0])), _targets(np.zeros((1, topology[-1]))))

        rng = np.random.default_rng()
        r = self.initial_range
        # Overwrite in place, the estimator's optimizer may hold references to these arrays
        for W, b in zip(self.net.coefs_, self.net.intercepts_):
            W[...] = rng.uniform(-r, r, size=W.shape)
            b[...] = rng.uniform(-r, r, size=b.shape)

    def get_topology(self):
        coefs = self.net.coefs_
        return [coefs[0].shape[0]] + [W.shape[1] for W in coefs]

    def get_layer_weights(self):
        return [(W.copy(), b.copy()) for W, b in zip(self.net.coefs_, self.net.intercepts_)]

    def set_layer_weights(self, weights):
        for (W, b), (new_W, new_b) in zip(zip(self.net.coefs_, self.net.intercepts_), weights):
            W[...] = new_W
            b[...] = new_b

    def get_activations(self, X):
        activation = BEHAVIORS[self.behavior][2]
        a = np.asarray(X, dtype=float)
        outputs = [a]
        last = len(self.net.coefs_) - 1
        for i, (W, b) in enumerate(zip(self.net.coefs_, self.net.intercepts_)):
            a = a @ W + b
            # MLPRegressor has an identity output layer
            if i < last:
                a = activation(a)
            outputs.append(a)
        return outputs

    def _train_batch(self, X, Y, epochs):
        y = _targets(Y)
        # A batch larger than the lesson makes MLPRegressor warn on every call
        self.net.set_params(batch_size=min(NETWORK_MINIBATCH, len(X)))
        for _ in range(epochs):
            self.net.partial_fit(X, y)
        return epochs * len(X)

    def set_eta(self, eta):
        super().set_eta(eta)
        if not hasattr(self, 'net'):
            return
        self.net.set_params(learning_rate_init=self.eta)
        # The SGD optimizer is stateless without momentum; partial_fit() rebuilds it with the new rate
        if hasattr(self.net, '_optimizer'):
            del self.net._optimizer

    def clone(self):
        ret = SklearnNetworkWrapper(self.get_topology(), self.initial_range, self.behavior)
        ret.net = copy.deepcopy(self.net)
        ret.set_parameters_from(self)
        return ret

    def get_behavior_descriptions(self):
        return [label for label, _, _ in BEHAVIORS]

    def get_engine_name(self):
        return f"scikit-learn {sklearn.__version__}"
