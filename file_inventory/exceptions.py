"""
Custom exception hierarchy for the file inventory.

Per-file problems are recorded on the FileRecord rather than raised; these
exceptions cover the run-level failures that reach the operator.
"""


class FileInventoryError(Exception):
    """Base exception for all file inventory errors."""
    pass


class ConfigurationError(FileInventoryError):
    """Raised when run parameters are invalid (concurrency, digest kinds, start dir)."""
    pass


class FileHashError(FileInventoryError):
    """Raised when a file cannot be opened or read for digesting."""
    pass


class OutputWriteError(FileInventoryError):
    """Raised when the report cannot be written to its destination."""
    pass
