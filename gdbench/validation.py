"""Up-front checks shared by the trainers and the evaluator.

Everything here runs before a training loop starts, so bad input is rejected
instead of being discovered halfway through an epoch.
"""
from __future__ import annotations

import math
from numbers import Integral, Real

import numpy as np

from gdbench.errors import ConfigurationError, DatasetError


def check_dataset(x, y):
    """Return ``x`` and ``y`` as float64 arrays after validating their shapes."""
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    if x.ndim != 2:
        raise ConfigurationError(f"feature matrix must be 2-D, got {x.ndim}-D")
    if y.ndim != 1:
        raise ConfigurationError(f"label vector must be 1-D, got {y.ndim}-D")
    if x.shape[0] == 0:
        raise DatasetError("dataset is empty")
    if x.shape[1] == 0:
        raise ConfigurationError("feature vectors have no columns")
    if x.shape[0] != y.shape[0]:
        raise ConfigurationError(
            f"{x.shape[0]} feature vectors but {y.shape[0]} labels"
        )
    if not np.all((y == 0.0) | (y == 1.0)):
        raise DatasetError("labels must be 0.0 or 1.0")
    return x, y


def check_weights(x, w):
    w = np.asarray(w, dtype=np.float64)
    if w.ndim != 1 or w.shape[0] != x.shape[1]:
        raise ConfigurationError(
            f"weight vector has shape {w.shape}, expected ({x.shape[1]},)"
        )
    return w


def check_positive_int(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral) or value <= 0:
        raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")
    return int(value)


def check_learning_rate(value) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ConfigurationError(f"learning_rate must be a number, got {value!r}")
    if not math.isfinite(value) or value <= 0:
        raise ConfigurationError(f"learning_rate must be positive and finite, got {value!r}")
    return float(value)


def check_choice(name: str, value, choices) -> str:
    if not isinstance(value, str) or value not in choices:
        raise ConfigurationError(
            f"unknown {name} {value!r}; expected one of {', '.join(sorted(choices))}"
        )
    return value
