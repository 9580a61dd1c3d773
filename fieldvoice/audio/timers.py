"""Single-slot cancellable timer on the asyncio event loop."""

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class CancellableTimer:
    """One pending callback at a time; starting the timer cancels the previous one."""

    def __init__(self, name: str, delay_ms: int, callback: Callable[[], None],
                 loop: Optional[asyncio.AbstractEventLoop] = None):
        """Initialize the timer.

        Args:
            name: Name used in log messages
            delay_ms: Delay before the callback fires
            callback: Called on the event loop thread when the timer expires
            loop: Event loop to schedule on; defaults to the running loop at start()
        """
        self.name = name
        self.delay_ms = delay_ms
        self._callback = callback
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def is_pending(self) -> bool:
        return self._handle is not None

    def start(self) -> None:
        """(Re)start the timer."""
        self.cancel()
        loop = self._loop or asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay_ms / 1000.0, self._fire)
        logger.debug(f"Timer '{self.name}' started ({self.delay_ms}ms)")

    def cancel(self) -> bool:
        """Cancel the pending callback. Returns True if one was pending."""
        if self._handle is None:
            return False
        self._handle.cancel()
        self._handle = None
        logger.debug(f"Timer '{self.name}' cancelled")
        return True

    def _fire(self) -> None:
        self._handle = None
        logger.debug(f"Timer '{self.name}' expired")
        self._callback()
