import numpy as np

from nnplayground.config import NETWORK_MAX_NEURONS_PER_LAYER


def test_add_layer_keeps_outer_weights(network):
    before = network.get_layer_weights()
    network.add_layer(2, 5)

    assert network.get_topology() == [2, 4, 5, 3, 1]
    after = network.get_layer_weights()
    np.testing.assert_allclose(after[0][0], before[0][0])
    np.testing.assert_allclose(after[3][0], before[2][0])
    np.testing.assert_allclose(after[3][1], before[2][1])


def test_add_layer_rejects_invalid_positions(network):
    network.add_layer(0, 3)
    network.add_layer(4, 3)
    network.add_layer(1, 0)
    assert network.get_topology() == [2, 4, 3, 1]


def test_remove_layer(network):
    before = network.get_layer_weights()
    network.remove_layer(2)
    assert network.get_topology() == [2, 4, 1]
    np.testing.assert_allclose(network.get_layer_weights()[0][0], before[0][0])

    # Input and output layers stay
    network.remove_layer(0)
    network.remove_layer(2)
    assert network.get_topology() == [2, 4, 1]


def test_add_neuron_preserves_existing_weights(network):
    before = network.get_layer_weights()
    network.add_neuron(1)

    assert network.get_topology() == [2, 5, 3, 1]
    after = network.get_layer_weights()
    np.testing.assert_allclose(after[0][0][:, :4], before[0][0])
    np.testing.assert_allclose(after[0][1][:4], before[0][1])
    np.testing.assert_allclose(after[1][0][:4, :], before[1][0])
    np.testing.assert_allclose(after[2][0], before[2][0])


def test_remove_neuron_preserves_remaining_weights(network):
    before = network.get_layer_weights()
    network.remove_neuron(2)

    assert network.get_topology() == [2, 4, 2, 1]
    after = network.get_layer_weights()
    np.testing.assert_allclose(after[1][0], before[1][0][:, :2])
    np.testing.assert_allclose(after[2][0], before[2][0][:2, :])


def test_neuron_edits_are_limited_to_hidden_layers(network):
    network.add_neuron(0)
    network.add_neuron(3)
    network.remove_neuron(3)
    assert network.get_topology() == [2, 4, 3, 1]


def test_neuron_count_bounds(network):
    network.set_neurons_in_layer(1, 1)
    assert network.count_neurons_in_layer(1) == 1
    network.remove_neuron(1)
    assert network.count_neurons_in_layer(1) == 1

    network.set_neurons_in_layer(2, NETWORK_MAX_NEURONS_PER_LAYER + 5)
    assert network.count_neurons_in_layer(2) == NETWORK_MAX_NEURONS_PER_LAYER


def test_reset_reinitialises_weights(network):
    network.set_layer_weights([(np.full_like(W, 5.0), b) for W, b in network.get_layer_weights()])
    network.add_neuron(1, reset=True)
    for W, _ in network.get_layer_weights():
        assert np.all(np.abs(W) <= network.get_initial_range() + 1e-6)


def test_edited_network_still_propagates(network):
    network.add_layer(1, 6)
    network.remove_neuron(2)
    out = network.propagate_many(np.zeros((3, 2)))
    assert out.shape == (3, 1)
    assert network.count_neurons() == 2 + 6 + 3 + 3 + 1
