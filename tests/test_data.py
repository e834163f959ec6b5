"""Tests for CSV loading, normalization and splitting."""
from __future__ import annotations

import numpy as np
import pytest

from gdbench.data import apply_bounds, load_csv, make_dataset, min_max_normalize, split_dataset
from gdbench.errors import DatasetError

HEADER = "business_id,name,city,state,stars_text,rating,review_count\n"


def _write_csv(tmp_path, rows, header=HEADER):
    path = tmp_path / "reviews.csv"
    path.write_text(header + "".join(rows))
    return path


class TestLoadCsv:
    def test_reads_bias_rating_and_reviews(self, tmp_path):
        path = _write_csv(tmp_path, [
            "a,Cafe,Austin,TX,x,4.5,120\n",
            "b,Diner,Austin,TX,x,3.0,15\n",
            "c,Bar,Reno,NV,x,4.0,8\n",
        ])
        x, y = load_csv(path)
        np.testing.assert_array_equal(x, [[1.0, 4.5, 120.0], [1.0, 3.0, 15.0], [1.0, 4.0, 8.0]])
        np.testing.assert_array_equal(y, [1.0, 0.0, 1.0])

    def test_skips_rows_that_do_not_parse(self, tmp_path):
        path = _write_csv(tmp_path, [
            "a,Cafe,Austin,TX,x,4.5,120\n",
            "b,Diner,Austin,TX,x,n/a,15\n",
            "c,Bar,Reno,NV,x,2.5,\n",
            "d,Deli,Reno,NV,x,2.0,3\n",
        ])
        x, y = load_csv(path)
        assert x.shape == (2, 3)
        np.testing.assert_array_equal(y, [1.0, 0.0])

    def test_columns_by_name_and_custom_threshold(self, tmp_path):
        path = _write_csv(tmp_path, ["a,Cafe,Austin,TX,x,3.5,10\n", "b,Deli,Reno,NV,x,2.5,4\n"])
        x, y = load_csv(path, rating_column="rating", reviews_column="review_count", threshold=3.0)
        np.testing.assert_array_equal(y, [1.0, 0.0])
        np.testing.assert_array_equal(x[:, 2], [10.0, 4.0])

    def test_no_usable_rows(self, tmp_path):
        path = _write_csv(tmp_path, ["a,Cafe,Austin,TX,x,bad,worse\n"])
        with pytest.raises(DatasetError):
            load_csv(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("")
        with pytest.raises(DatasetError):
            load_csv(path)

    def test_unknown_column(self, tmp_path):
        path = _write_csv(tmp_path, ["a,Cafe,Austin,TX,x,3.5,10\n"])
        with pytest.raises(DatasetError):
            load_csv(path, rating_column="stars")
        with pytest.raises(DatasetError):
            load_csv(path, reviews_column=12)


class TestNormalize:
    def test_scales_features_and_keeps_bias(self):
        x = np.array([[1.0, 2.0, 100.0], [1.0, 4.0, 300.0], [1.0, 3.0, 200.0]])
        out, (mins, maxs) = min_max_normalize(x)
        np.testing.assert_array_equal(out[:, 0], 1.0)
        np.testing.assert_allclose(out[:, 1], [0.0, 1.0, 0.5])
        np.testing.assert_allclose(out[:, 2], [0.0, 1.0, 0.5])
        np.testing.assert_array_equal(mins, [2.0, 100.0])
        np.testing.assert_array_equal(maxs, [4.0, 300.0])

    def test_does_not_modify_input(self):
        x = np.array([[1.0, 2.0], [1.0, 4.0]])
        min_max_normalize(x)
        np.testing.assert_array_equal(x, [[1.0, 2.0], [1.0, 4.0]])

    def test_constant_column_becomes_zero(self):
        x = np.array([[1.0, 5.0, 1.0], [1.0, 5.0, 2.0]])
        out, _ = min_max_normalize(x)
        np.testing.assert_array_equal(out[:, 1], [0.0, 0.0])
        assert np.all(np.isfinite(out))

    def test_apply_bounds_to_a_new_sample(self):
        x = np.array([[1.0, 1.0, 0.0], [1.0, 5.0, 200.0]])
        _, bounds = min_max_normalize(x)
        np.testing.assert_allclose(apply_bounds([4.2, 120.0], bounds), [0.8, 0.6])

    def test_empty(self):
        with pytest.raises(DatasetError):
            min_max_normalize(np.empty((0, 3)))


class TestSplit:
    def test_zero_test_size_scores_on_training_data(self):
        x, y = make_dataset(n_samples=20)
        x_train, x_test, y_train, y_test = split_dataset(x, y, test_size=0.0)
        assert x_train is x and x_test is x
        assert y_train is y and y_test is y

    def test_fraction(self):
        x, y = make_dataset(n_samples=100)
        x_train, x_test, y_train, y_test = split_dataset(x, y, test_size=0.25, seed=1)
        assert len(x_train) == len(y_train) == 75
        assert len(x_test) == len(y_test) == 25

    def test_same_seed_same_split(self):
        x, y = make_dataset(n_samples=50)
        a = split_dataset(x, y, test_size=0.2, seed=3)
        b = split_dataset(x, y, test_size=0.2, seed=3)
        for left, right in zip(a, b):
            np.testing.assert_array_equal(left, right)

    @pytest.mark.parametrize("test_size", [1.0, -0.1, 1.5])
    def test_invalid_fraction(self, test_size):
        x, y = make_dataset(n_samples=10)
        with pytest.raises(DatasetError):
            split_dataset(x, y, test_size=test_size)


class TestMakeDataset:
    def test_shape_bias_and_labels(self):
        x, y = make_dataset(n_samples=40, n_features=3, seed=0)
        assert x.shape == (40, 4)
        np.testing.assert_array_equal(x[:, 0], 1.0)
        assert set(np.unique(y)) <= {0.0, 1.0}

    def test_seeded(self):
        a = make_dataset(n_samples=10, seed=5)
        b = make_dataset(n_samples=10, seed=5)
        np.testing.assert_array_equal(a[0], b[0])
        np.testing.assert_array_equal(a[1], b[1])
