"""
Error taxonomy for the memory stores.
Absence (unknown id, missing biography) is reported as a value, not raised.
"""


class MemoryServerError(Exception):
    """Base class for faults surfaced to tool callers."""


class ValidationError(MemoryServerError):
    """Missing or malformed caller input."""


class EmbeddingError(MemoryServerError):
    """The embedding provider failed or is unavailable."""


class StorageError(MemoryServerError):
    """The storage engine failed to read or write."""
