"""Preset data sets generated with scikit-learn."""
import numpy as np
from sklearn.datasets import make_moons, make_circles, make_classification, make_blobs
from sklearn.preprocessing import MinMaxScaler

from nnplayground.config import POSITIVE, NEGATIVE

PRESETS = ['Moons', 'Circles', 'Linear', 'XOR']


def generate(name, n_samples=200, noise=0.1, seed=None):
    """Return (X, values) for a preset, X scaled into [-0.9, 0.9], values in {+1, -1}"""
    key = name.lower()
    if key == 'moons':
        X, y = make_moons(n_samples=n_samples, noise=noise, random_state=seed)
    elif key == 'circles':
        X, y = make_circles(n_samples=n_samples, noise=noise, factor=0.5, random_state=seed)
    elif key == 'linear':
        X, y = make_classification(n_samples=n_samples, n_features=2, n_redundant=0,
                                   n_informative=2, random_state=seed, n_clusters_per_class=1, class_sep=2)
    elif key == 'xor':
        centers = [(-1, -1), (1, 1), (-1, 1), (1, -1)]
        X, cluster = make_blobs(n_samples=n_samples, centers=centers,
                                cluster_std=0.3 + noise, random_state=seed)
        y = (cluster >= 2).astype(int)
    else:
        raise ValueError(f"Unknown preset '{name}', choose one of {PRESETS}")

    X = MinMaxScaler(feature_range=(-0.9, 0.9)).fit_transform(X)
    values = np.where(y == 1, POSITIVE, NEGATIVE)
    return X, values
