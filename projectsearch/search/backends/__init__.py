"""Search engine client implementations."""

from .base import (
    EngineRejected,
    IndexingError,
    QueryError,
    SearchBackend,
    SearchError,
)
from .memory import MemoryBackend

__all__ = [
    "EngineRejected",
    "IndexingError",
    "MemoryBackend",
    "QueryError",
    "SearchBackend",
    "SearchError",
]
