"""Minibatch gradient descent with the batches of each epoch computed concurrently.

Two synchronization strategies are available:

``accumulate``
    Every task computes the summed gradient of its batch into a private
    buffer and never touches the weights. Once the pool's ``map`` returns
    (the epoch barrier) the gradients are summed in batch order and a single
    update ``w -= lr * total / n_samples`` is applied. The result matches
    full-batch sequential training for any batch size and is identical from
    run to run.

``per_batch``
    Every task reads the shared weights without the lock, computes its batch
    gradient, then takes the lock and applies
    ``w -= lr * grad / batch_len`` itself. Which weights a task observes
    depends on scheduling, so final weights vary between runs. With a single
    worker the batches run in order and the result equals sequential
    minibatch training.

In both cases epoch N+1 starts only after every task of epoch N finished.
"""
from __future__ import annotations

import logging
import multiprocessing as mp
import threading
from multiprocessing.pool import ThreadPool
from typing import Optional

import numpy as np

from gdbench.batches import batch_gradient, minibatch_ranges
from gdbench.validation import (
    check_choice,
    check_dataset,
    check_learning_rate,
    check_positive_int,
)

logger = logging.getLogger(__name__)

STRATEGIES = frozenset({"accumulate", "per_batch"})
BACKENDS = frozenset({"thread", "process"})

# Worker state lives per worker thread: a thread pool's workers share this
# module, and a process pool's worker runs tasks on its main thread.
_LOCAL = threading.local()


def default_workers() -> int:
    return min(4, mp.cpu_count())


def init_worker(x, y, shared_w=None, lock=None):
    _LOCAL.x = x
    _LOCAL.y = y
    _LOCAL.shared_w = shared_w
    _LOCAL.lock = lock


def grad_for_range(args):
    s, e, w = args
    return batch_gradient(_LOCAL.x, _LOCAL.y, w, s, e)


def apply_range(args):
    s, e, lr = args
    w = np.frombuffer(_LOCAL.shared_w, dtype=np.float64)
    # Read without the lock; another task may be halfway through its update.
    snapshot = w.copy()
    grad = batch_gradient(_LOCAL.x, _LOCAL.y, snapshot, s, e)
    with _LOCAL.lock:
        w -= lr * grad / (e - s)


def _make_pool(backend, workers, initargs):
    if backend == "thread":
        return ThreadPool(processes=workers, initializer=init_worker, initargs=initargs)
    # Use spawn for stability with NumPy/BLAS on macOS.
    ctx = mp.get_context("spawn")
    return ctx.Pool(processes=workers, initializer=init_worker, initargs=initargs)


def train_parallel(
    x,
    y,
    learning_rate: float = 0.1,
    iterations: int = 1000,
    batch_size: int = 100,
    strategy: str = "accumulate",
    workers: Optional[int] = None,
    backend: str = "thread",
) -> np.ndarray:
    """Train logistic-regression weights with one concurrent task per minibatch.

    ``backend`` selects a thread pool or a spawn-context process pool. All
    arguments are validated before the pool starts.
    """
    x, y = check_dataset(x, y)
    learning_rate = check_learning_rate(learning_rate)
    iterations = check_positive_int("iterations", iterations)
    batch_size = check_positive_int("batch_size", batch_size)
    strategy = check_choice("strategy", strategy, STRATEGIES)
    backend = check_choice("backend", backend, BACKENDS)
    workers = default_workers() if workers is None else check_positive_int("workers", workers)

    n_samples = x.shape[0]
    batches = minibatch_ranges(n_samples, batch_size)
    logger.debug(
        "parallel training (%s, %s x%d): %d samples, %d epochs, %d batches per epoch",
        strategy, backend, workers, n_samples, iterations, len(batches),
    )

    if strategy == "accumulate":
        return _train_accumulate(x, y, learning_rate, iterations, batches, workers, backend)
    return _train_per_batch(x, y, learning_rate, iterations, batches, workers, backend)


def _train_accumulate(x, y, lr, iterations, batches, workers, backend):
    n_samples, n_features = x.shape
    w = np.zeros(n_features, dtype=np.float64)
    with _make_pool(backend, workers, (x, y)) as pool:
        for _ in range(iterations):
            tasks = [(s, e, w) for s, e in batches]
            grads = pool.map(grad_for_range, tasks, chunksize=1)
            w -= lr * np.sum(grads, axis=0) / n_samples
    return w


def _train_per_batch(x, y, lr, iterations, batches, workers, backend):
    n_features = x.shape[1]
    if backend == "thread":
        shared_w = mp.RawArray("d", n_features)
        lock = threading.Lock()
    else:
        ctx = mp.get_context("spawn")
        shared_w = ctx.RawArray("d", n_features)
        lock = ctx.Lock()

    with _make_pool(backend, workers, (x, y, shared_w, lock)) as pool:
        for _ in range(iterations):
            pool.map(apply_range, [(s, e, lr) for s, e in batches], chunksize=1)
    return np.frombuffer(shared_w, dtype=np.float64).copy()
