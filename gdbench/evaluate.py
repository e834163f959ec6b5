from __future__ import annotations

import numpy as np

from gdbench.model import predict_proba
from gdbench.validation import check_dataset, check_weights


def calculate_accuracy(x, y, w) -> float:
    """Percentage of rows whose thresholded prediction matches the label.

    A probability of exactly 0.5 counts as class 1. Raises ``DatasetError``
    for an empty dataset, whose accuracy is undefined.
    """
    x, y = check_dataset(x, y)
    w = check_weights(x, w)
    predicted = (predict_proba(x, w) >= 0.5).astype(np.float64)
    correct = int(np.count_nonzero(predicted == y))
    return correct / len(y) * 100
