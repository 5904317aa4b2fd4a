import matplotlib
matplotlib.use('Agg')  # Non-interactive backend for figure tests

import numpy as np
import pandas as pd
import pytest

from pca_regression.datasets import load_mtcars, mtcars_features


@pytest.fixture
def cars():
    """Full mtcars table"""
    return load_mtcars()


@pytest.fixture
def features(cars):
    """mtcars without mpg, vs, am"""
    return mtcars_features(cars)


@pytest.fixture
def mpg(cars):
    return cars['mpg']


@pytest.fixture
def random_features():
    """Correlated random data: 40 rows, 5 features from 2 latent factors + noise"""
    rng = np.random.default_rng(42)
    Z = rng.standard_normal((40, 2))
    W = rng.standard_normal((2, 5))
    X = Z @ W + rng.standard_normal((40, 5)) * 0.3
    X[:, 4] = X[:, 4] * 100 + 50  # one feature on a much larger scale
    return pd.DataFrame(X, columns=['a', 'b', 'c', 'd', 'e'])
