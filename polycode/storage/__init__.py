"""
Storage abstractions.

- KeyValueStorage → localStorage-shaped string store
- InMemoryKeyValueStorage → tests
- FileKeyValueStorage → CLI (one file per key)
"""

from polycode.storage.base import KeyValueStorage, StorageKeys
from polycode.storage.local import (
    FileKeyValueStorage,
    InMemoryKeyValueStorage,
    create_local_storage,
)

__all__ = [
    "KeyValueStorage",
    "StorageKeys",
    "FileKeyValueStorage",
    "InMemoryKeyValueStorage",
    "create_local_storage",
]
