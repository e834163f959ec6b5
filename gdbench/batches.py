"""Minibatch partitioning and the per-batch gradient kernel."""
from __future__ import annotations

from typing import List, Tuple

import numpy as np

from gdbench.model import predict_proba


def minibatch_ranges(n_samples: int, batch_size: int) -> List[Tuple[int, int]]:
    """Split ``[0, n_samples)`` into contiguous ``(start, end)`` ranges.

    Every range holds ``batch_size`` rows except possibly the last one, which
    holds the remainder. A dataset smaller than one batch is a single range.
    """
    return [
        (start, min(start + batch_size, n_samples))
        for start in range(0, n_samples, batch_size)
    ]


def batch_gradient(x, y, w, start: int, end: int) -> np.ndarray:
    """Summed (not averaged) log-loss gradient of rows ``[start, end)``."""
    xb = x[start:end]
    yb = y[start:end]
    preds = predict_proba(xb, w)
    return xb.T @ (preds - yb)
