"""
Local storage implementations.

In-memory storage for tests and a filesystem-backed storage for the CLI.
Neither needs any external service.
"""

from __future__ import annotations

import re
from pathlib import Path

from polycode.core.errors import PersistenceError
from polycode.storage.base import KeyValueStorage


# =============================================================================
# In-Memory Storage
# =============================================================================


class InMemoryKeyValueStorage(KeyValueStorage):
    """Dictionary-backed storage."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value


# =============================================================================
# Local Filesystem Storage
# =============================================================================


_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class FileKeyValueStorage(KeyValueStorage):
    """Store each key as a UTF-8 text file under ``base_path``."""

    def __init__(self, base_path: str = "./data/state"):
        self.base_path = Path(base_path)

    def _key_to_path(self, key: str) -> Path:
        return self.base_path / _UNSAFE_KEY_CHARS.sub("_", key)

    async def get(self, key: str) -> str | None:
        path = self._key_to_path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceError(f"Failed to read {key}: {e}") from e

    async def set(self, key: str, value: str) -> None:
        path = self._key_to_path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(value, encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Failed to write {key}: {e}") from e


# =============================================================================
# Factory
# =============================================================================


def create_local_storage(data_dir: str = "./data") -> KeyValueStorage:
    """Create the filesystem storage used by the CLI."""
    return FileKeyValueStorage(f"{data_dir}/state")
