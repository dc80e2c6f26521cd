"""
Debounce timer.

Delays a callback until input stops changing for a fixed window. Each
schedule() supersedes the previous one, so only the last call inside the
window fires.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from search_select.models import DEFAULT_DEBOUNCE_MS

logger = logging.getLogger(__name__)

DebounceCallback = Callable[[str], Union[None, Awaitable[Any]]]


class Debouncer:
    """
    Asyncio debounce timer owned by a single selector.

    Usage:
        debouncer = Debouncer(delay_ms=300)
        debouncer.schedule("ab", run_search)
        debouncer.schedule("abc", run_search)  # "ab" never fires
    """

    def __init__(self, delay_ms: int = DEFAULT_DEBOUNCE_MS):
        self.delay_ms = delay_ms
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def schedule(
        self,
        query: str,
        callback: DebounceCallback,
        after_ms: Optional[int] = None,
    ) -> asyncio.Task:
        """
        Arm the timer for `query`, cancelling any pending one.

        Must be called from a running event loop.
        """
        self.cancel()
        delay = self.delay_ms if after_ms is None else after_ms
        self._task = asyncio.get_running_loop().create_task(
            self._fire_after(query, callback, delay / 1000.0)
        )
        return self._task

    def cancel(self) -> bool:
        """Drop the pending timer. Returns True if one was armed."""
        if self.pending:
            self._task.cancel()
            self._task = None
            return True
        self._task = None
        return False

    async def wait(self) -> None:
        """Wait until no timer is armed, following supersessions."""
        while self.pending:
            await asyncio.wait({self._task})

    async def _fire_after(self, query: str, callback: DebounceCallback, delay: float) -> None:
        await asyncio.sleep(delay)
        logger.debug("Debounce window elapsed for %r", query)
        result = callback(query)
        if inspect.isawaitable(result):
            await result
