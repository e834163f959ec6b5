import numpy as np


def sigmoid(z):
    # exp(-log(1 + e^-z)) never overflows, so extreme scores saturate quietly.
    return np.exp(-np.logaddexp(0.0, -np.asarray(z, dtype=np.float64)))


def predict(x, w):
    """Probability that a single feature vector belongs to class 1."""
    return float(sigmoid(np.dot(x, w)))


def predict_proba(x, w):
    return sigmoid(x @ w)
