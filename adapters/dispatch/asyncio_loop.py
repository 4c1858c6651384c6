from __future__ import annotations

import asyncio
from collections.abc import Callable

from domain.ports.dispatch import ResultDispatcher


class AsyncioLoopDispatcher(ResultDispatcher):
    """Runs callbacks on an event loop owned by another thread.

    The calling worker blocks until the loop has executed the callback, and
    any exception raised by it is re-raised in the worker.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop, timeout: float | None = None) -> None:
        self.loop = loop
        self.timeout = timeout

    def dispatch(self, callback: Callable[[], None]) -> None:
        future = asyncio.run_coroutine_threadsafe(self._invoke(callback), self.loop)
        future.result(timeout=self.timeout)

    async def _invoke(self, callback: Callable[[], None]) -> None:
        callback()
