"""
Network engine on top of PyTorch.
"""
import copy

import numpy as np
import torch
import torch.nn as nn
import torch.optim as optim

from nnplayground.config import NETWORK_MINIBATCH
from nnplayground.model.network import NetworkWrapper, check_topology


class Gaussian(nn.Module):
    def forward(self, x):
        return torch.exp(-x * x)


class Sine(nn.Module):
    def forward(self, x):
        return torch.sin(x)


# (label, activation module factory) for the hidden layers
BEHAVIORS = [
    ('ReLU', nn.ReLU),
    ('Linear', nn.Identity),
    ('Ramp', nn.Hardtanh),
    ('Sigmoid', nn.Sigmoid),
    ('Tanh', nn.Tanh),
    ('Gaussian', Gaussian),
    ('Softsign', nn.Softsign),
    ('Sine', Sine),
    ('ELU', nn.ELU),
    ('Leaky ReLU', nn.LeakyReLU),
]


class FeedForwardNet(nn.Module):
    def __init__(self, layer_sizes, activation_factory):
        super().__init__()
        self.layers = nn.ModuleList(
            nn.Linear(layer_sizes[i], layer_sizes[i + 1]) for i in range(len(layer_sizes) - 1)
        )
        self.activation = activation_factory()
        # Output neurons always use tanh so that both classes (+1 / -1) are reachable
        self.output_activation = nn.Tanh()

    def forward_layers(self, x):
        outputs = [x]
        for i, layer in enumerate(self.layers):
            x = layer(x)
            if i < len(self.layers) - 1:
                x = self.activation(x)
            else:
                x = self.output_activation(x)
            outputs.append(x)
        return outputs

    def forward(self, x):
        return self.forward_layers(x)[-1]


class TorchNetworkWrapper(NetworkWrapper):
    """Wrapper for a torch multi layer perceptron"""

    def create_network(self, topology):
        topology = check_topology(topology)
        self.net = FeedForwardNet(topology, BEHAVIORS[self.behavior][1])
        with torch.no_grad():
            for layer in self.net.layers:
                nn.init.uniform_(layer.weight, -self.initial_range, self.initial_range)
                nn.init.uniform_(layer.bias, -self.initial_range, self.initial_range)

    def get_topology(self):
        layers = self.net.layers
        return [layers[0].in_features] + [layer.out_features for layer in layers]

    def get_layer_weights(self):
        return [(layer.weight.detach().cpu().numpy().T.copy(), layer.bias.detach().cpu().numpy().copy())
                for layer in self.net.layers]

    def set_layer_weights(self, weights):
        with torch.no_grad():
            for layer, (W, b) in zip(self.net.layers, weights):
                layer.weight.copy_(torch.as_tensor(np.asarray(W).T, dtype=layer.weight.dtype))
                layer.bias.copy_(torch.as_tensor(np.asarray(b), dtype=layer.bias.dtype))

    def get_activations(self, X):
        x = torch.as_tensor(np.asarray(X, dtype=np.float32))
        self.net.eval()
        with torch.no_grad():
            outputs = self.net.forward_layers(x)
        return [o.numpy().astype(float) for o in outputs]

    def _train_batch(self, X, Y, epochs):
        X_t = torch.as_tensor(X, dtype=torch.float32)
        Y_t = torch.as_tensor(Y, dtype=torch.float32)
        n = len(X_t)

        # Plain SGD keeps no state, so a fresh optimizer always sees the current eta
        optimizer = optim.SGD(self.net.parameters(), lr=self.eta)
        criterion = nn.MSELoss()

        self.net.train()
        for _ in range(epochs):
            permutation = torch.randperm(n)
            for i in range(0, n, NETWORK_MINIBATCH):
                idx = permutation[i:i + NETWORK_MINIBATCH]
                optimizer.zero_grad()
                loss = criterion(self.net(X_t[idx]), Y_t[idx])
                loss.backward()
                optimizer.step()
        return epochs * n

    def clone(self):
        ret = TorchNetworkWrapper(self.get_topology(), self.initial_range, self.behavior)
        ret.net = copy.deepcopy(self.net)
        ret.set_parameters_from(self)
        return ret

    def get_behavior_descriptions(self):
        return [label for label, _ in BEHAVIORS]

    def get_engine_name(self):
        return f"PyTorch {torch.__version__}"
