from __future__ import annotations

import asyncio
import threading
from collections.abc import Generator

import pytest

from adapters.dispatch.asyncio_loop import AsyncioLoopDispatcher
from adapters.dispatch.inline import InlineDispatcher


@pytest.fixture
def running_loop() -> Generator[tuple[asyncio.AbstractEventLoop, threading.Thread], None, None]:
    loop = asyncio.new_event_loop()
    thread = threading.Thread(target=loop.run_forever, daemon=True)
    thread.start()
    yield loop, thread
    loop.call_soon_threadsafe(loop.stop)
    thread.join(timeout=5)
    loop.close()


def test_inline_dispatcher_runs_on_calling_thread() -> None:
    seen: list[int] = []
    InlineDispatcher().dispatch(lambda: seen.append(threading.get_ident()))

    assert seen == [threading.get_ident()]


def test_asyncio_dispatcher_runs_on_loop_thread(
    running_loop: tuple[asyncio.AbstractEventLoop, threading.Thread],
) -> None:
    loop, thread = running_loop
    seen: list[int] = []

    AsyncioLoopDispatcher(loop, timeout=5).dispatch(lambda: seen.append(threading.get_ident()))

    assert seen == [thread.ident]


def test_asyncio_dispatcher_reraises_callback_errors(
    running_loop: tuple[asyncio.AbstractEventLoop, threading.Thread],
) -> None:
    loop, _ = running_loop

    def broken() -> None:
        raise ValueError("callback failed")

    with pytest.raises(ValueError, match="callback failed"):
        AsyncioLoopDispatcher(loop, timeout=5).dispatch(broken)
