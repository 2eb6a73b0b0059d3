"""
Storage backends for graph states.

Provides pluggable storage backends for different deployment needs:
- InMemoryStorage: Fast, ephemeral storage for development and tests
- FileStorage: One JSON file per project on local disk
"""

from .backends import StorageBackend, InMemoryStorage, FileStorage, create_storage_backend

__all__ = [
    "StorageBackend",
    "InMemoryStorage",
    "FileStorage",
    "create_storage_backend",
]
