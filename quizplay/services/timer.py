import asyncio
from typing import Callable, Protocol

Cancel = Callable[[], None]


class Scheduler(Protocol):
    """Runs ``callback`` once after ``delay`` seconds and returns a cancel handle."""

    def schedule(self, delay: float, callback: Callable[[], None]) -> Cancel: ...


class AsyncioScheduler:
    """Schedules callbacks on an event loop.

    Without an explicit ``loop`` the running loop is used, so scheduling
    must then happen from inside a coroutine or callback.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    def schedule(self, delay: float, callback: Callable[[], None]) -> Cancel:
        loop = self._loop
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError as exc:
                raise RuntimeError(
                    "AsyncioScheduler needs a running event loop; pass loop= or schedule from a coroutine"
                ) from exc
        handle = loop.call_later(delay, callback)
        return handle.cancel
