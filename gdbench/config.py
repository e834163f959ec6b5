"""Training and benchmark configuration."""
from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, fields, replace
from numbers import Real
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from gdbench.errors import ConfigurationError
from gdbench.parallel import BACKENDS, STRATEGIES
from gdbench.validation import check_choice, check_learning_rate, check_positive_int


@dataclass
class TrainConfig:
    learning_rate: float = 0.1
    iterations: int = 1000
    batch_size: int = 100
    strategy: str = "accumulate"
    backend: str = "thread"
    workers: Optional[int] = None  # None means min(4, cpu_count)
    repetitions: int = 1000
    trim: int = 10
    test_size: float = 0.0
    seed: int = 42
    sample: List[float] = field(default_factory=lambda: [1.0, 4.2, 120.0])  # raw [bias, rating, reviews]

    def validate(self) -> "TrainConfig":
        """Raise ``ConfigurationError`` for any value the trainers would reject."""
        check_learning_rate(self.learning_rate)
        check_positive_int("iterations", self.iterations)
        check_positive_int("batch_size", self.batch_size)
        check_choice("strategy", self.strategy, STRATEGIES)
        check_choice("backend", self.backend, BACKENDS)
        if self.workers is not None:
            check_positive_int("workers", self.workers)
        check_positive_int("repetitions", self.repetitions)
        if isinstance(self.trim, bool) or not isinstance(self.trim, int) or self.trim < 0:
            raise ConfigurationError(f"trim must be a non-negative integer, got {self.trim!r}")
        if self.repetitions <= 2 * self.trim:
            raise ConfigurationError(
                f"repetitions ({self.repetitions}) must exceed twice the trim count ({self.trim})"
            )
        if isinstance(self.test_size, bool) or not isinstance(self.test_size, Real) or not 0 <= self.test_size < 1:
            raise ConfigurationError(f"test_size must be in [0, 1), got {self.test_size!r}")
        if not isinstance(self.sample, (list, tuple)) or not self.sample or not all(
            isinstance(v, Real) and not isinstance(v, bool) for v in self.sample
        ):
            raise ConfigurationError(f"sample must be a non-empty list of numbers, got {self.sample!r}")
        return self

    def with_overrides(self, **overrides: Any) -> "TrainConfig":
        """Copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrainConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"unknown config key(s): {', '.join(unknown)}")
        return cls(**data).validate()


def load_config(path: Union[str, Path]) -> TrainConfig:
    """Load a ``TrainConfig`` from JSON, either flat or nested under ``"train"``."""
    try:
        raw = json.loads(Path(path).read_text())
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"{path} is not valid JSON: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{path} must contain a JSON object")
    data = raw.get("train", raw)
    if not isinstance(data, dict):
        raise ConfigurationError(f"'train' section of {path} must be an object")
    return TrainConfig.from_dict(data)
