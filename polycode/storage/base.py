"""
Storage abstraction layer.

Client-side state (conversion history, active theme) goes through a small
string key-value interface, the same shape as browser localStorage. This
allows swapping implementations (in-memory for tests, a directory of files
for the CLI) without changing the stores that use it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class KeyValueStorage(ABC):
    """
    Persistent string key-value storage.

    Implementations raise ``PersistenceError`` when the backing medium is
    unavailable; callers decide whether that is fatal.
    """

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Get a stored value, or None when absent."""
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""
        pass


class StorageKeys:
    """Standard key names."""

    HISTORY = "polycode_history"
    THEME = "theme"
