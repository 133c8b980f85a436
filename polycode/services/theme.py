"""
Active theme persistence.
"""

from __future__ import annotations

import logging

from polycode.core.errors import PersistenceError
from polycode.core.events import THEME_CHANGED, EventBus
from polycode.storage.base import KeyValueStorage, StorageKeys

logger = logging.getLogger(__name__)

THEMES = ("dark", "light")
DEFAULT_THEME = "dark"


class ThemeStore:
    """Remembers whether the UI is dark or light."""

    def __init__(self, storage: KeyValueStorage, bus: EventBus | None = None):
        self.storage = storage
        self.bus = bus
        self.current = DEFAULT_THEME

    async def load(self) -> str:
        try:
            saved = await self.storage.get(StorageKeys.THEME)
        except PersistenceError as e:
            logger.error(f"Failed to load theme: {e}")
            saved = None

        self.current = saved if saved in THEMES else DEFAULT_THEME
        return self.current

    async def toggle(self) -> str:
        self.current = "light" if self.current == "dark" else "dark"
        try:
            await self.storage.set(StorageKeys.THEME, self.current)
        except PersistenceError as e:
            logger.error(f"Failed to save theme: {e}")

        if self.bus is not None:
            await self.bus.emit(THEME_CHANGED, theme=self.current)
        return self.current
