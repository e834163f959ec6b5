"""Exceptions raised by gdbench."""


class GDBenchError(Exception):
    """Base class for every error gdbench raises on purpose."""


class ConfigurationError(GDBenchError, ValueError):
    """Invalid hyperparameters, unknown options or mismatched dimensions."""


class DatasetError(GDBenchError, ValueError):
    """Empty or malformed data, or too few samples for a statistic."""
