"""Logistic regression by gradient descent, sequential and parallel, with a timing harness."""
from gdbench.benchmark import BenchmarkReport, TrainerTiming, run_benchmark, trimmed_mean
from gdbench.errors import ConfigurationError, DatasetError, GDBenchError
from gdbench.evaluate import calculate_accuracy
from gdbench.model import predict, predict_proba, sigmoid
from gdbench.parallel import train_parallel
from gdbench.sequential import train_sequential

__all__ = [
    "BenchmarkReport",
    "ConfigurationError",
    "DatasetError",
    "GDBenchError",
    "TrainerTiming",
    "calculate_accuracy",
    "predict",
    "predict_proba",
    "run_benchmark",
    "sigmoid",
    "train_parallel",
    "train_sequential",
    "trimmed_mean",
]

__version__ = "0.1.0"
