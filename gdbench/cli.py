"""Command line entry point: train, compare and benchmark the two trainers."""
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from functools import partial
from pathlib import Path
from typing import List, Optional

import numpy as np

from gdbench.benchmark import run_benchmark, time_call
from gdbench.config import TrainConfig, load_config
from gdbench.data import apply_bounds, load_csv, make_dataset, min_max_normalize, split_dataset
from gdbench.errors import ConfigurationError, GDBenchError
from gdbench.evaluate import calculate_accuracy
from gdbench.model import predict
from gdbench.parallel import BACKENDS, STRATEGIES, train_parallel
from gdbench.sequential import train_sequential

logger = logging.getLogger(__name__)


def configure_logging(verbosity: int = 0) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--data", help="CSV file with rating and review-count columns (synthetic data if omitted).")
    common.add_argument("--config", help="JSON file with training settings.")
    common.add_argument("--learning-rate", type=float, help="Gradient descent step size.")
    common.add_argument("--iterations", type=int, help="Number of epochs.")
    common.add_argument("--batch-size", type=int, help="Rows per minibatch.")
    common.add_argument("--strategy", choices=sorted(STRATEGIES), help="Parallel synchronization strategy.")
    common.add_argument("--backend", choices=sorted(BACKENDS), help="Thread or process pool.")
    common.add_argument("--workers", type=int, help="Pool size (default: min(4, cpu_count)).")
    common.add_argument("--test-size", type=float, help="Held-out fraction for accuracy (0 scores on training data).")
    common.add_argument("--seed", type=int, help="Seed for the split and the synthetic dataset.")
    common.add_argument("-v", "--verbose", action="count", default=0, help="-v for INFO, -vv for DEBUG.")

    parser = argparse.ArgumentParser(
        prog="gdbench",
        description="Sequential vs. parallel gradient descent for logistic regression.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    seq = sub.add_parser("sequential", parents=[common], help="Train with the sequential trainer.")
    seq.add_argument("--minibatch", action="store_true", help="Update after every minibatch instead of once per epoch.")
    sub.add_parser("parallel", parents=[common], help="Train with the parallel trainer.")
    sub.add_parser("compare", parents=[common], help="Train with both once and compare.")

    bench = sub.add_parser("benchmark", parents=[common], help="Time both trainers repeatedly.")
    bench.add_argument("--repetitions", type=int, help="Runs per trainer.")
    bench.add_argument("--trim", type=int, help="Samples dropped from each end before averaging.")
    bench.add_argument("--no-progress", action="store_true", help="Hide progress bars.")
    bench.add_argument("--output", help="Write the benchmark report as JSON to this path.")
    return parser


def _resolve_config(args: argparse.Namespace) -> TrainConfig:
    cfg = load_config(args.config) if args.config else TrainConfig()
    return cfg.with_overrides(
        learning_rate=args.learning_rate,
        iterations=args.iterations,
        batch_size=args.batch_size,
        strategy=args.strategy,
        backend=args.backend,
        workers=args.workers,
        test_size=args.test_size,
        seed=args.seed,
        repetitions=getattr(args, "repetitions", None),
        trim=getattr(args, "trim", None),
    ).validate()


def _load(args: argparse.Namespace, cfg: TrainConfig):
    if args.data:
        x, y = load_csv(args.data)
    else:
        x, y = make_dataset(seed=cfg.seed)
    x, bounds = min_max_normalize(x)
    if len(cfg.sample) != x.shape[1]:
        raise ConfigurationError(
            f"sample has {len(cfg.sample)} values but the data has {x.shape[1]} features"
        )
    sample = np.concatenate([[1.0], apply_bounds(cfg.sample[1:], bounds)])
    x_train, x_test, y_train, y_test = split_dataset(x, y, cfg.test_size, cfg.seed)
    return x_train, x_test, y_train, y_test, sample


def _sequential_trainer(cfg: TrainConfig, minibatch: bool = False):
    return partial(
        train_sequential,
        learning_rate=cfg.learning_rate,
        iterations=cfg.iterations,
        batch_size=cfg.batch_size if minibatch else None,
    )


def _baseline_trainer(cfg: TrainConfig):
    # per_batch follows the minibatch update rule, accumulate the full-batch one.
    return _sequential_trainer(cfg, minibatch=cfg.strategy == "per_batch")


def _parallel_trainer(cfg: TrainConfig):
    return partial(
        train_parallel,
        learning_rate=cfg.learning_rate,
        iterations=cfg.iterations,
        batch_size=cfg.batch_size,
        strategy=cfg.strategy,
        workers=cfg.workers,
        backend=cfg.backend,
    )


def _report_training(title, weights, accuracy, probability, elapsed) -> None:
    print(f"--- {title} ---")
    print(f"Weights: {weights.tolist()}")
    print(f"Accuracy: {accuracy:.2f}%")
    print(f"Sample probability: {probability:.4f}")
    print(f"Elapsed: {elapsed:.4f}s")


def _cmd_train(args, cfg, data) -> None:
    x_train, x_test, y_train, y_test, sample = data
    if args.command == "sequential":
        trainer = _sequential_trainer(cfg, minibatch=args.minibatch)
        title = "Sequential (minibatch)" if args.minibatch else "Sequential"
    else:
        trainer = _parallel_trainer(cfg)
        title = f"Parallel ({cfg.strategy}, {cfg.backend})"
    elapsed, weights = time_call(trainer, x_train, y_train)
    _report_training(
        title, weights, calculate_accuracy(x_test, y_test, weights), predict(sample, weights), elapsed
    )


def _cmd_compare(args, cfg, data) -> None:
    x_train, x_test, y_train, y_test, sample = data
    t_seq, w_seq = time_call(_baseline_trainer(cfg), x_train, y_train)
    t_par, w_par = time_call(_parallel_trainer(cfg), x_train, y_train)
    print("--- Comparison ---")
    for label, elapsed, weights in (("Sequential", t_seq, w_seq), ("Parallel", t_par, w_par)):
        acc = calculate_accuracy(x_test, y_test, weights)
        print(
            f"{label:<10}: time {elapsed:.4f}s | accuracy {acc:.2f}% | "
            f"probability {predict(sample, weights):.4f}"
        )
    print(f"Max weight difference: {float(np.max(np.abs(w_seq - w_par))):.3e}")
    print(f"Speedup: {t_seq / t_par:.4f}x")


def _cmd_benchmark(args, cfg, data) -> None:
    x_train, x_test, y_train, y_test, _ = data
    trainers = {
        "sequential": _baseline_trainer(cfg),
        "parallel": _parallel_trainer(cfg),
    }
    report = run_benchmark(
        trainers,
        x_train,
        y_train,
        repetitions=cfg.repetitions,
        trim=cfg.trim,
        progress=not args.no_progress,
    )
    print(f"--- Benchmark ({cfg.repetitions} runs, trim {cfg.trim}) ---")
    for name, timing in report.timings.items():
        acc = calculate_accuracy(x_test, y_test, timing.weights)
        print(f"{name:<10}: trimmed mean {timing.trimmed_mean:.6f}s | accuracy {acc:.2f}%")
    print(f"Speedup: {report.speedup('sequential', 'parallel'):.4f}x")
    if args.output:
        Path(args.output).write_text(json.dumps(report.to_dict(), indent=2))
        logger.info("wrote benchmark report to %s", args.output)


COMMANDS = {
    "sequential": _cmd_train,
    "parallel": _cmd_train,
    "compare": _cmd_compare,
    "benchmark": _cmd_benchmark,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    # Make BLAS single-thread to expose pool-level speedup.
    os.environ.setdefault("OMP_NUM_THREADS", "1")
    os.environ.setdefault("MKL_NUM_THREADS", "1")
    os.environ.setdefault("OPENBLAS_NUM_THREADS", "1")

    try:
        cfg = _resolve_config(args)
        data = _load(args, cfg)
        COMMANDS[args.command](args, cfg, data)
    except (GDBenchError, OSError) as exc:
        logger.error("%s", exc)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
