"""Custom exceptions for projroot operations."""

from pathlib import Path
from typing import Iterable


class ProjRootError(Exception):
    """Base exception for projroot operations."""

    pass


class ConfigError(ProjRootError):
    """Raised when the configuration file cannot be loaded."""

    def __init__(self, path: Path, message: str):
        self.path = path
        self.message = message
        super().__init__(f"Invalid configuration in {path}: {message}")


class InvalidDetectionMethodError(ProjRootError):
    """Raised when an unknown detection method is configured."""

    def __init__(self, method: str, valid_methods: Iterable[str]):
        self.method = method
        self.valid_methods = set(valid_methods)
        message = (
            f"Invalid detection method: {method}. "
            f"Valid methods are: {', '.join(sorted(self.valid_methods))}"
        )
        super().__init__(message)


class HistoryError(ProjRootError):
    """Raised when the project history file cannot be read or written."""

    def __init__(self, operation: str, path: Path, message: str):
        self.operation = operation
        self.path = path
        self.message = message
        super().__init__(f"Failed to {operation} {path}: {message}")


class SubmissionError(ProjRootError):
    """Raised when a resolution job cannot be handed to the worker pool."""

    def __init__(self, start_dir: Path, message: str):
        self.start_dir = start_dir
        self.message = message
        super().__init__(f"Could not schedule root resolution for {start_dir}: {message}")
