import asyncio
from typing import Callable, Optional

class Scheduler:
    """Runs callbacks after a delay on the asyncio event loop.

    schedule() returns a handle with cancel(); the caller owns it.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def schedule(self, delay_seconds: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay_seconds, callback)
