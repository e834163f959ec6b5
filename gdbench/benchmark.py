"""Repeated wall-clock timing of trainers, summarized with a trimmed mean.

Individual runs are noisy (scheduler jitter, pool start-up, page faults), so
each trainer is run many times and the ``trim`` fastest and slowest samples
are dropped before averaging.
"""
from __future__ import annotations

import logging
import statistics
import time
from dataclasses import dataclass, field
from numbers import Integral
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
from tqdm.auto import tqdm

from gdbench.errors import ConfigurationError, DatasetError
from gdbench.validation import check_positive_int

logger = logging.getLogger(__name__)

Trainer = Callable[[np.ndarray, np.ndarray], np.ndarray]
ProgressCallback = Callable[[str, int, float], None]


def trimmed_mean(samples: Sequence[float], trim: int) -> float:
    """Mean of ``samples`` after discarding the ``trim`` smallest and largest.

    Raises ``DatasetError`` unless there are more than ``2 * trim`` samples.
    """
    if isinstance(trim, bool) or not isinstance(trim, Integral) or trim < 0:
        raise DatasetError(f"trim count must be a non-negative integer, got {trim!r}")
    if len(samples) <= 2 * trim:
        raise DatasetError(
            f"need more than {2 * trim} samples to trim {trim} from each end, got {len(samples)}"
        )
    ordered = sorted(samples)
    kept = ordered[trim:len(ordered) - trim]
    return sum(kept) / len(kept)


def time_call(fn: Callable[..., Any], *args, **kwargs) -> Tuple[float, Any]:
    """Run ``fn`` once and return ``(elapsed_seconds, result)``."""
    t0 = time.perf_counter()
    result = fn(*args, **kwargs)
    return time.perf_counter() - t0, result


@dataclass
class TrainerTiming:
    """Timing samples collected for one trainer."""

    name: str
    trim: int
    samples: List[float] = field(default_factory=list)
    weights: Optional[np.ndarray] = None

    @property
    def trimmed_mean(self) -> float:
        return trimmed_mean(self.samples, self.trim)

    @property
    def median(self) -> float:
        return statistics.median(self.samples)

    @property
    def fastest(self) -> float:
        return min(self.samples)

    @property
    def slowest(self) -> float:
        return max(self.samples)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "runs": len(self.samples),
            "trim": self.trim,
            "trimmed_mean": self.trimmed_mean,
            "median": self.median,
            "fastest": self.fastest,
            "slowest": self.slowest,
            "weights": None if self.weights is None else self.weights.tolist(),
        }


@dataclass
class BenchmarkReport:
    repetitions: int
    trim: int
    timings: Dict[str, TrainerTiming] = field(default_factory=dict)

    def __getitem__(self, name: str) -> TrainerTiming:
        return self.timings[name]

    def speedup(self, baseline: str, candidate: str) -> float:
        """How many times faster ``candidate`` is than ``baseline``, by trimmed mean."""
        return self.timings[baseline].trimmed_mean / self.timings[candidate].trimmed_mean

    def to_dict(self) -> Dict[str, Any]:
        return {
            "repetitions": self.repetitions,
            "trim": self.trim,
            "trainers": [t.to_dict() for t in self.timings.values()],
        }


def run_benchmark(
    trainers: Mapping[str, Trainer],
    x,
    y,
    repetitions: int = 1000,
    trim: int = 10,
    progress: bool = False,
    callback: Optional[ProgressCallback] = None,
) -> BenchmarkReport:
    """Time every trainer ``repetitions`` times on the same data.

    ``trainers`` maps a display name to a callable taking ``(x, y)`` and
    returning weights. Trainers run one after another, never overlapping, so
    one trainer's pool does not compete with another's. ``progress`` shows a
    tqdm bar per trainer and ``callback(name, run_index, seconds)`` is called
    after each run; neither affects the recorded samples.
    """
    repetitions = check_positive_int("repetitions", repetitions)
    if isinstance(trim, bool) or not isinstance(trim, Integral) or trim < 0:
        raise ConfigurationError(f"trim must be a non-negative integer, got {trim!r}")
    if repetitions <= 2 * trim:
        raise ConfigurationError(
            f"repetitions ({repetitions}) must exceed twice the trim count ({trim})"
        )
    if not trainers:
        raise ConfigurationError("no trainers to benchmark")

    report = BenchmarkReport(repetitions=repetitions, trim=trim)
    for name, trainer in trainers.items():
        timing = TrainerTiming(name=name, trim=trim)
        runs = tqdm(range(repetitions), desc=name, unit="run", disable=not progress)
        for run_idx in runs:
            elapsed, weights = time_call(trainer, x, y)
            timing.samples.append(elapsed)
            timing.weights = weights
            if callback is not None:
                callback(name, run_idx, elapsed)
        report.timings[name] = timing
        logger.info(
            "%s: trimmed mean %.6fs over %d runs (trim %d), fastest %.6fs, slowest %.6fs",
            name, timing.trimmed_mean, repetitions, trim, timing.fastest, timing.slowest,
        )
    return report
