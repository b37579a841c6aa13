"""
Training data: two lessons (training and test) of 2-D points with a desired output.
"""
import logging

import numpy as np
from sklearn.model_selection import train_test_split

from nnplayground.config import DATA_RANGE, NUM_INPUTS, NUM_OUTPUTS

logger = logging.getLogger(__name__)


class Lesson:
    """A named collection of input / desired output pairs"""

    def __init__(self, name):
        self.name = name
        self.inputs = []
        self.outputs = []

    def __len__(self):
        return len(self.inputs)

    def size(self):
        return len(self.inputs)

    def add(self, inputs, outputs):
        if len(inputs) != NUM_INPUTS or len(outputs) != NUM_OUTPUTS:
            raise ValueError(f"Lesson '{self.name}' expects {NUM_INPUTS} inputs and {NUM_OUTPUTS} outputs")
        self.inputs.append([float(v) for v in inputs])
        self.outputs.append([float(v) for v in outputs])

    def get_inputs(self):
        return self.inputs

    def get_desired_outputs(self):
        return self.outputs

    def as_arrays(self):
        """Return (X, Y) as float arrays of shape (n, inputs) and (n, outputs)"""
        X = np.array(self.inputs, dtype=float).reshape(-1, NUM_INPUTS)
        Y = np.array(self.outputs, dtype=float).reshape(-1, NUM_OUTPUTS)
        return X, Y

    def remove_within(self, x, y, radius):
        """Remove all samples closer than radius to (x, y), returns the number removed"""
        keep = [i for i, p in enumerate(self.inputs) if (p[0] - x) ** 2 + (p[1] - y) ** 2 > radius ** 2]
        removed = len(self.inputs) - len(keep)
        if removed:
            self.inputs = [self.inputs[i] for i in keep]
            self.outputs = [self.outputs[i] for i in keep]
        return removed

    def clear(self):
        self.inputs = []
        self.outputs = []


class DataModel:
    """Editable point classification data set, split into training and test lesson"""

    def __init__(self):
        self.training = Lesson('training')
        self.test = Lesson('test')

    def get_training_lesson(self):
        return self.training

    def get_test_lesson(self):
        return self.test

    def get_num_of_samples(self, training):
        return self.training.size() if training else self.test.size()

    def add_sample(self, x, y, value, test=False):
        lo, hi = DATA_RANGE
        x = min(max(float(x), lo), hi)
        y = min(max(float(y), lo), hi)
        lesson = self.test if test else self.training
        lesson.add((x, y), (value,))

    def remove_samples(self, x, y, radius):
        return self.training.remove_within(x, y, radius) + self.test.remove_within(x, y, radius)

    def clear(self):
        self.training.clear()
        self.test.clear()

    def set_samples(self, X, values, test=None):
        """Replace all samples. test is an optional boolean mask selecting test samples."""
        X = np.asarray(X, dtype=float).reshape(-1, NUM_INPUTS)
        values = np.asarray(values, dtype=float).ravel()
        if len(X) != len(values):
            raise ValueError(f"Got {len(X)} points but {len(values)} values")
        mask = np.zeros(len(X), dtype=bool) if test is None else np.asarray(test, dtype=bool).ravel()
        if len(mask) != len(X):
            raise ValueError(f"Got {len(X)} points but a test mask of {len(mask)}")

        self.clear()
        for point, value, is_test in zip(X, values, mask):
            self.add_sample(point[0], point[1], value, test=bool(is_test))

    def split_test_samples(self, fraction, seed=None):
        """Move a random fraction of the training samples into the test lesson"""
        if not 0.0 <= fraction < 1.0:
            raise ValueError(f"Test fraction must be in [0, 1), got {fraction}")

        n = self.training.size()
        # At least one sample stays in training
        n_test = min(int(round(n * fraction)), n - 1)
        if n < 2 or n_test == 0:
            return 0

        X, Y = self.training.as_arrays()
        X_train, X_test, Y_train, Y_test = train_test_split(X, Y, test_size=n_test, random_state=seed)

        self.training.clear()
        for point, out in zip(X_train, Y_train):
            self.training.add(point, out)
        for point, out in zip(X_test, Y_test):
            self.test.add(point, out)

        logger.info(f"Moved {len(X_test)} of {n} samples to the test lesson")
        return len(X_test)

    def merge_test_samples(self):
        moved = self.test.size()
        for point, out in zip(self.test.get_inputs(), self.test.get_desired_outputs()):
            self.training.add(point, out)
        self.test.clear()
        return moved

    def to_dict(self):
        return {
            'training': [p + o for p, o in zip(self.training.inputs, self.training.outputs)],
            'test': [p + o for p, o in zip(self.test.inputs, self.test.outputs)],
        }

    @classmethod
    def from_dict(cls, d):
        data = cls()
        for key, lesson in (('training', data.training), ('test', data.test)):
            for row in d.get(key, []):
                if len(row) != NUM_INPUTS + NUM_OUTPUTS:
                    raise ValueError(f"Malformed {key} sample: {row!r}")
                lesson.add(row[:NUM_INPUTS], row[NUM_INPUTS:])
        return data

    def copy_from(self, other):
        """Take over the samples of another data model (keeps this instance)"""
        self.training.inputs = [list(p) for p in other.training.inputs]
        self.training.outputs = [list(o) for o in other.training.outputs]
        self.test.inputs = [list(p) for p in other.test.inputs]
        self.test.outputs = [list(o) for o in other.test.outputs]
