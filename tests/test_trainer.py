import threading

import numpy as np

from nnplayground.model import DataModel, TrainingTracker
from nnplayground.model.trainer import train_step


def test_train_step_publishes_independent_clone(network, linear_data):
    tracker = TrainingTracker()
    lock = threading.Lock()

    published = train_step(network, linear_data, tracker, lock)

    assert not lock.locked()
    assert tracker.get_iterations() == 1
    assert published is not network
    for (W1, _), (W2, _) in zip(network.get_layer_weights(), published.get_layer_weights()):
        np.testing.assert_allclose(W1, W2)

    train_step(network, linear_data, tracker, lock)
    assert tracker.get_iterations() == 2
    changed = any(not np.allclose(W1, W2) for (W1, _), (W2, _)
                  in zip(network.get_layer_weights(), published.get_layer_weights()))
    assert changed


def test_train_step_without_samples(network):
    tracker = TrainingTracker()
    published = train_step(network, DataModel(), tracker, threading.Lock())
    assert tracker.get_iterations() == 0
    assert published.get_topology() == network.get_topology()


def test_concurrent_edits_wait_for_the_lock(network, linear_data):
    tracker = TrainingTracker()
    lock = threading.Lock()
    worker = threading.Thread(target=lambda: [train_step(network, linear_data, tracker, lock) for _ in range(5)])
    worker.start()
    for _ in range(5):
        with lock:
            linear_data.add_sample(0.0, 0.0, 1.0)
    worker.join()

    assert tracker.get_iterations() == 5
    assert linear_data.get_num_of_samples(True) == 85
