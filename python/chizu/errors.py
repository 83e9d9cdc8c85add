"""
Errors - Custom exceptions for fatal conditions.

Only environment problems get their own types. Per-file read and
extraction errors are not wrapped: they propagate with their original
type and abort the run.
"""

from pathlib import Path


class ChizuError(Exception):
    """Base exception for mapper errors."""
    pass


class CacheOpenError(ChizuError):
    """The cache directory or database could not be created or opened."""
    def __init__(self, path: Path, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"Cannot open cache at {path}: {cause}")


class TargetNotFoundError(ChizuError):
    """The directory to map does not exist."""
    def __init__(self, path: Path):
        self.path = path
        super().__init__(f'Directory "{path}" does not exist.')
