"""Tests for the logistic predictor."""
from __future__ import annotations

import warnings

import numpy as np
import pytest

from gdbench.model import predict, predict_proba, sigmoid


class TestSigmoid:
    def test_zero_is_one_half(self):
        assert sigmoid(0.0) == pytest.approx(0.5)

    def test_symmetry(self):
        z = np.linspace(-8, 8, 33)
        np.testing.assert_allclose(sigmoid(z) + sigmoid(-z), 1.0, atol=1e-12)

    def test_extreme_scores_saturate_without_warnings(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            low = sigmoid(-1e6)
            high = sigmoid(1e6)
        assert low == pytest.approx(0.0)
        assert high == pytest.approx(1.0)


class TestPredict:
    @pytest.mark.parametrize("seed", range(5))
    def test_probability_is_strictly_between_zero_and_one(self, seed):
        rng = np.random.default_rng(seed)
        x = np.concatenate([[1.0], rng.uniform(-3, 3, size=4)])
        w = rng.uniform(-3, 3, size=5)
        p = predict(x, w)
        assert 0.0 < p < 1.0

    def test_zero_weights_give_one_half(self):
        assert predict([1.0, 0.3, 0.7], np.zeros(3)) == pytest.approx(0.5)

    def test_matches_hand_computation(self):
        x = np.array([1.0, 2.0])
        w = np.array([0.5, -1.0])
        assert predict(x, w) == pytest.approx(1.0 / (1.0 + np.exp(1.5)))

    def test_length_mismatch_is_a_programming_error(self):
        with pytest.raises(ValueError):
            predict(np.ones(3), np.ones(2))

    def test_vectorized_form_agrees_with_single_rows(self):
        x = np.array([[1.0, 0.2], [1.0, -0.4], [1.0, 3.0]])
        w = np.array([0.1, 0.8])
        expected = [predict(row, w) for row in x]
        np.testing.assert_allclose(predict_proba(x, w), expected)
