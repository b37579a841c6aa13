import numpy as np
import pytest

from nnplayground.model import DataModel, Lesson
from nnplayground.model import presets


def test_empty_lesson_arrays():
    X, Y = Lesson('training').as_arrays()
    assert X.shape == (0, 2)
    assert Y.shape == (0, 1)


def test_lesson_rejects_wrong_dimensions():
    lesson = Lesson('training')
    with pytest.raises(ValueError):
        lesson.add((0.1, 0.2, 0.3), (1.0,))


def test_add_sample_routes_and_clips():
    data = DataModel()
    data.add_sample(0.5, -0.5, 1.0)
    data.add_sample(3.0, -7.0, -1.0, test=True)

    assert data.get_num_of_samples(True) == 1
    assert data.get_num_of_samples(False) == 1
    assert data.get_test_lesson().get_inputs() == [[1.0, -1.0]]
    assert data.get_test_lesson().get_desired_outputs() == [[-1.0]]


def test_remove_samples_within_radius():
    data = DataModel()
    data.add_sample(0.0, 0.0, 1.0)
    data.add_sample(0.05, 0.0, -1.0, test=True)
    data.add_sample(0.5, 0.5, 1.0)

    assert data.remove_samples(0.0, 0.0, 0.1) == 2
    assert data.get_training_lesson().get_inputs() == [[0.5, 0.5]]
    assert data.get_num_of_samples(False) == 0


def test_split_and_merge_test_samples():
    data = DataModel()
    for i in range(10):
        data.add_sample(i / 10.0, 0.0, 1.0 if i % 2 else -1.0)

    moved = data.split_test_samples(0.2, seed=3)
    assert moved == 2
    assert data.get_num_of_samples(True) == 8
    assert data.get_num_of_samples(False) == 2

    assert data.merge_test_samples() == 2
    assert data.get_num_of_samples(True) == 10
    assert data.get_num_of_samples(False) == 0


def test_split_edge_cases():
    data = DataModel()
    data.add_sample(0.0, 0.0, 1.0)
    assert data.split_test_samples(0.5) == 0
    with pytest.raises(ValueError):
        data.split_test_samples(1.0)


def test_set_samples_with_test_mask():
    data = DataModel()
    X = np.array([[0.1, 0.2], [0.3, 0.4], [0.5, 0.6]])
    data.set_samples(X, [1, -1, 1], test=[False, True, False])
    assert data.get_num_of_samples(True) == 2
    assert data.get_num_of_samples(False) == 1

    with pytest.raises(ValueError):
        data.set_samples(X, [1, -1])


def test_dict_round_trip():
    data = DataModel()
    data.add_sample(0.1, 0.2, 1.0)
    data.add_sample(-0.3, 0.4, -1.0, test=True)

    restored = DataModel.from_dict(data.to_dict())
    assert restored.to_dict() == data.to_dict()

    with pytest.raises(ValueError):
        DataModel.from_dict({'training': [[0.1, 0.2]]})


def test_copy_from_keeps_instance():
    data = DataModel()
    other = DataModel()
    other.add_sample(0.2, 0.2, 1.0)
    lesson = data.get_training_lesson()

    data.copy_from(other)
    other.clear()
    assert data.get_training_lesson() is lesson
    assert data.get_num_of_samples(True) == 1


@pytest.mark.parametrize('name', presets.PRESETS)
def test_presets(name):
    X, values = presets.generate(name, n_samples=60, seed=0)
    assert X.shape == (60, 2)
    assert np.all(np.abs(X) <= 0.9 + 1e-9)
    assert set(np.unique(values)) == {-1.0, 1.0}


def test_unknown_preset():
    with pytest.raises(ValueError):
        presets.generate('spirals')


@pytest.mark.parametrize('n, fraction', [(3, 0.9), (2, 0.8), (10, 0.96)])
def test_split_keeps_one_training_sample(n, fraction):
    data = DataModel()
    for i in range(n):
        data.add_sample(i / 10.0, 0.0, 1.0)

    assert data.split_test_samples(fraction, seed=0) == n - 1
    assert data.get_num_of_samples(True) == 1
    assert data.get_num_of_samples(False) == n - 1
