from nnplayground.model.data import DataModel, Lesson
from nnplayground.model.network import NetworkWrapper
from nnplayground.model.sklearn_network import SklearnNetworkWrapper
from nnplayground.model.torch_network import TorchNetworkWrapper
from nnplayground.model.tracker import TrainingTracker, TrackerRecord

# Engine key -> (menu label, wrapper class)
ENGINES = {
    'torch': ('PyTorch', TorchNetworkWrapper),
    'sklearn': ('scikit-learn', SklearnNetworkWrapper),
}


def create_network(engine, topology=None, initial_range=None, behavior=0):
    if engine not in ENGINES:
        raise ValueError(f"Unknown engine '{engine}', choose one of {sorted(ENGINES)}")
    return ENGINES[engine][1](topology, initial_range, behavior)


def engine_of(network):
    for key, (_, cls) in ENGINES.items():
        if type(network) is cls:
            return key
    raise ValueError(f"{type(network).__name__} is not a registered engine")
