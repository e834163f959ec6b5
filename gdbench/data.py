"""Loading, normalizing and splitting the review dataset."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Tuple, Union

import numpy as np
import pandas as pd
from sklearn.model_selection import train_test_split

from gdbench.errors import DatasetError

logger = logging.getLogger(__name__)

Column = Union[int, str]
Bounds = Tuple[np.ndarray, np.ndarray]


def _column(df: pd.DataFrame, column: Column) -> pd.Series:
    if isinstance(column, int):
        if not 0 <= column < df.shape[1]:
            raise DatasetError(f"column index {column} out of range for {df.shape[1]} columns")
        return df.iloc[:, column]
    if column not in df.columns:
        raise DatasetError(f"no column named {column!r}")
    return df[column]


def load_csv(
    path: Union[str, Path],
    rating_column: Column = 5,
    reviews_column: Column = 6,
    threshold: float = 4.0,
) -> Tuple[np.ndarray, np.ndarray]:
    """Read ``[1, rating, num_reviews]`` feature rows and labels from a CSV.

    The first line is a header. Rows whose rating or review count is not a
    number are skipped. A row is labelled 1.0 when its raw rating is at least
    ``threshold``.
    """
    try:
        df = pd.read_csv(path, dtype=str)
    except pd.errors.EmptyDataError as exc:
        raise DatasetError(f"{path} has no data") from exc

    rating = pd.to_numeric(_column(df, rating_column), errors="coerce")
    reviews = pd.to_numeric(_column(df, reviews_column), errors="coerce")
    usable = rating.notna() & reviews.notna()
    skipped = int((~usable).sum())
    if skipped:
        logger.warning("skipped %d row(s) of %s with non-numeric values", skipped, path)
    if not usable.any():
        raise DatasetError(f"{path} has no rows with a numeric rating and review count")

    rating = rating[usable].to_numpy(dtype=np.float64)
    reviews = reviews[usable].to_numpy(dtype=np.float64)
    x = np.column_stack([np.ones_like(rating), rating, reviews])
    y = (rating >= threshold).astype(np.float64)
    logger.info("loaded %d rows from %s (%d positive)", len(y), path, int(y.sum()))
    return x, y


def min_max_normalize(x) -> Tuple[np.ndarray, Bounds]:
    """Scale every column except the bias column to ``[0, 1]``.

    Returns the scaled copy and the ``(mins, maxs)`` bounds of the non-bias
    columns. A constant column becomes all zeros.
    """
    x = np.asarray(x, dtype=np.float64)
    if x.shape[0] == 0:
        raise DatasetError("cannot normalize an empty dataset")
    features = x[:, 1:]
    bounds = (features.min(axis=0), features.max(axis=0))
    out = x.copy()
    out[:, 1:] = apply_bounds(features, bounds)
    return out, bounds


def apply_bounds(features, bounds: Bounds) -> np.ndarray:
    """Scale raw (non-bias) feature values with previously computed bounds."""
    mins, maxs = bounds
    span = maxs - mins
    safe = np.where(span == 0, 1.0, span)
    return np.where(span == 0, 0.0, (np.asarray(features, dtype=np.float64) - mins) / safe)


def split_dataset(x, y, test_size: float = 0.0, seed: int = 42):
    """Return ``(x_train, x_test, y_train, y_test)``.

    ``test_size == 0`` evaluates on the training data itself.
    """
    if test_size == 0:
        return x, x, y, y
    if not 0 < test_size < 1:
        raise DatasetError(f"test_size must be in [0, 1), got {test_size}")
    return train_test_split(x, y, test_size=test_size, random_state=seed)


def make_dataset(n_samples=1000, n_features=2, seed=42):
    """Synthetic dataset with a leading bias column and a linear decision rule."""
    rng = np.random.default_rng(seed)
    raw = rng.standard_normal((n_samples, n_features), dtype=np.float64)
    true_w = rng.standard_normal(n_features)
    y = (raw @ true_w > 0).astype(np.float64)
    x = np.column_stack([np.ones(n_samples), raw])
    return x, y
