"""One training step, shared by the background worker and the tests."""


def train_step(network, data, tracker, lock):
    """Train one batch and return a clone of the network for publishing to the UI"""
    with lock:
        network.train(data, tracker)
        return network.clone()
