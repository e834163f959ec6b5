"""Single-threaded gradient descent, the baseline the parallel trainer is measured against."""
from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from gdbench.batches import batch_gradient, minibatch_ranges
from gdbench.validation import check_dataset, check_learning_rate, check_positive_int

logger = logging.getLogger(__name__)


def train_sequential(
    x,
    y,
    learning_rate: float = 0.1,
    iterations: int = 1000,
    batch_size: Optional[int] = None,
) -> np.ndarray:
    """Train logistic-regression weights with plain gradient descent.

    With ``batch_size=None`` every epoch computes one gradient over the whole
    dataset and applies one update. Otherwise the epoch walks contiguous
    minibatches in order and updates after each one; a short final batch is
    averaged over its own length.
    """
    x, y = check_dataset(x, y)
    learning_rate = check_learning_rate(learning_rate)
    iterations = check_positive_int("iterations", iterations)
    n_samples, n_features = x.shape
    if batch_size is None:
        batches = [(0, n_samples)]
    else:
        batches = minibatch_ranges(n_samples, check_positive_int("batch_size", batch_size))

    logger.debug(
        "sequential training: %d samples, %d features, %d epochs, %d batch(es) per epoch",
        n_samples, n_features, iterations, len(batches),
    )

    w = np.zeros(n_features, dtype=np.float64)
    for _ in range(iterations):
        for start, end in batches:
            grad = batch_gradient(x, y, w, start, end)
            w -= learning_rate * grad / (end - start)
    return w
