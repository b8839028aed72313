"""Blocking bridge onto the async drivers.

Each session gets its own event loop running in a daemon thread, so
``run()`` works the same whether or not the calling thread already has a
loop running.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Coroutine
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EventLoopRunner:
    """Runs coroutines to completion on a private event loop."""

    def __init__(self, name: str = "pgtext-session") -> None:
        """Start the loop thread."""
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._serve, name=name, daemon=True)
        self._closed = False
        self._thread.start()

    @property
    def closed(self) -> bool:
        return self._closed

    def in_loop_thread(self) -> bool:
        """True when called from the thread that runs this loop."""
        return threading.current_thread() is self._thread

    def run(self, coro: Coroutine[Any, Any, T]) -> T:
        """Block until ``coro`` finishes and return its result (or raise its error)."""
        if self._closed:
            coro.close()
            raise RuntimeError("event loop runner is closed")
        if self.in_loop_thread():
            coro.close()
            raise RuntimeError("run() called from the runner's own loop thread")
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        return future.result()

    def shutdown(self, coro: Coroutine[Any, Any, Any] | None = None) -> None:
        """Run ``coro`` as the loop's last task, then stop the loop.

        Blocks until the loop thread exits, except on the loop thread itself,
        where the shutdown is only scheduled. Safe to call more than once.
        """
        if self._closed:
            if coro is not None:
                coro.close()
            return
        self._closed = True
        if self.in_loop_thread():
            self._loop.create_task(self._final(coro))
            return
        asyncio.run_coroutine_threadsafe(self._final(coro), self._loop)
        self._thread.join()

    def close(self) -> None:
        """Stop the loop and join its thread. Safe to call more than once."""
        self.shutdown()

    async def _final(self, coro: Coroutine[Any, Any, Any] | None) -> None:
        try:
            if coro is not None:
                await coro
        finally:
            self._loop.stop()

    def _serve(self) -> None:
        asyncio.set_event_loop(self._loop)
        try:
            self._loop.run_forever()
        finally:
            self._loop.run_until_complete(self._loop.shutdown_asyncgens())
            self._loop.close()
            logger.debug("Event loop %s closed", self._thread.name)
