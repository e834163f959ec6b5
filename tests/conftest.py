"""Shared fixtures for the gdbench test suite."""
from __future__ import annotations

import numpy as np
import pytest

from gdbench.data import make_dataset, min_max_normalize


@pytest.fixture
def separable():
    """Four points split cleanly on the single feature."""
    x = np.array([
        [1.0, 0.0],
        [1.0, 0.1],
        [1.0, 0.9],
        [1.0, 1.0],
    ])
    y = np.array([0.0, 0.0, 1.0, 1.0])
    return x, y


@pytest.fixture
def synthetic():
    x, y = make_dataset(n_samples=203, n_features=2, seed=7)
    x, _ = min_max_normalize(x)
    return x, y
