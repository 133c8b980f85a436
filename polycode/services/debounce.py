"""
Trailing-edge debouncing on the asyncio loop.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)


class Debouncer:
    """
    Delay a callback until calls stop arriving for ``delay`` seconds.

    Every ``trigger`` cancels the pending timer and arms a new one, so a
    burst of calls results in a single invocation with the last arguments.
    The callback may be a plain function or a coroutine function.

    Usage:
        detect = Debouncer(0.6, on_quiet)
        detect.trigger(text)   # on every keystroke
    """

    def __init__(self, delay: float, callback: Callable[..., Any]):
        self.delay = delay
        self.callback = callback
        self._pending: asyncio.Task | None = None

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def trigger(self, *args: Any, **kwargs: Any) -> None:
        """Cancel any pending call and rearm the timer. Requires a running loop."""
        self.cancel()
        self._pending = asyncio.get_running_loop().create_task(self._fire(args, kwargs))

    def cancel(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    async def wait(self) -> None:
        """Wait for the pending call (if any) to run."""
        task = self._pending
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            if task.cancelled():
                return
            raise

    async def _fire(self, args: tuple, kwargs: dict) -> None:
        await asyncio.sleep(self.delay)
        try:
            result = self.callback(*args, **kwargs)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("Debounced callback failed")
