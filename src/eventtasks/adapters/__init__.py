"""Adapters - I/O implementations of ports."""

from .memory_store import MemoryStore
from .json_store import JsonFileStore
from .basecamp_api import BasecampAdapter, AuthenticationError

__all__ = [
    "MemoryStore",
    "JsonFileStore",
    "BasecampAdapter",
    "AuthenticationError",
]
