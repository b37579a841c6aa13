import threading

import numpy as np
import pytest
import torch

from nnplayground.model import DataModel, create_network
from nnplayground.model import presets


class Workspace:
    """Minimal stand-in for the Application, as seen by the project loader"""

    def __init__(self, engine='torch'):
        self.data = DataModel()
        self.net = create_network(engine)
        self.lock = threading.Lock()

    def get_data(self):
        return self.data

    def get_network(self):
        return self.net

    def set_network(self, net):
        self.net = net

    def get_network_lock(self):
        return self.lock


@pytest.fixture(autouse=True)
def seed():
    np.random.seed(0)
    torch.manual_seed(0)


@pytest.fixture(params=['torch', 'sklearn'])
def engine(request):
    return request.param


@pytest.fixture
def network(engine):
    return create_network(engine, [2, 4, 3, 1])


@pytest.fixture
def linear_data():
    data = DataModel()
    X, values = presets.generate('linear', n_samples=80, seed=1)
    data.set_samples(X, values)
    return data


@pytest.fixture
def workspace():
    return Workspace()
