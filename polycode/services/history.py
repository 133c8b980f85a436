"""
Conversion history.

A bounded, newest-first list of past conversions mirrored to storage.
Persistence is write-through: every mutation serializes and stores the
whole list before returning. Storage failures never propagate; the
in-memory list stays authoritative and the failure is logged.
"""

from __future__ import annotations

import logging

from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaError

from polycode.core.errors import PersistenceError
from polycode.core.events import HISTORY_CHANGED, EventBus
from polycode.core.models import ConversionRecord
from polycode.storage.base import KeyValueStorage, StorageKeys

logger = logging.getLogger(__name__)

HISTORY_CAPACITY = 10

_records_adapter = TypeAdapter(list[ConversionRecord])


class HistoryCache:
    """
    Most recent conversions, newest first.

    Usage:
        history = HistoryCache(storage, bus)
        await history.load()            # once, at startup
        await history.add(record)       # after each successful conversion
        history.get(0)                  # newest record, or None
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        bus: EventBus | None = None,
        capacity: int = HISTORY_CAPACITY,
        key: str = StorageKeys.HISTORY,
    ):
        self.storage = storage
        self.bus = bus
        self.capacity = capacity
        self.key = key
        self._records: list[ConversionRecord] = []

    def __len__(self) -> int:
        return len(self._records)

    def all(self) -> list[ConversionRecord]:
        """Snapshot of all records, newest first."""
        return list(self._records)

    def get(self, index: int) -> ConversionRecord | None:
        """Record at ``index``, or None when out of range."""
        if 0 <= index < len(self._records):
            return self._records[index]
        return None

    async def load(self) -> None:
        """
        Populate from storage.

        Absent data leaves the cache empty; corrupt data resets it to empty
        and is logged. Never raises.
        """
        try:
            saved = await self.storage.get(self.key)
            records = _records_adapter.validate_json(saved) if saved else []
        except (PersistenceError, SchemaError) as e:
            logger.error(f"Failed to load history: {e}")
            records = []

        self._records = records[: self.capacity]
        await self._changed()

    async def add(self, record: ConversionRecord) -> None:
        """Insert at the front, evicting the oldest beyond capacity."""
        self._records.insert(0, record)
        del self._records[self.capacity:]
        await self._save()
        await self._changed()

    async def clear(self) -> None:
        """Remove every record."""
        self._records = []
        await self._save()
        await self._changed()

    async def _save(self) -> None:
        data = _records_adapter.dump_json(self._records, by_alias=True).decode("utf-8")
        try:
            await self.storage.set(self.key, data)
        except PersistenceError as e:
            logger.error(f"Failed to save history: {e}")

    async def _changed(self) -> None:
        if self.bus is not None:
            await self.bus.emit(HISTORY_CHANGED, count=len(self._records))
