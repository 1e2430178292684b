"""Trailing-edge debouncing on the running asyncio loop."""

import asyncio
from collections.abc import Callable

import structlog

log = structlog.stdlib.get_logger()


class Debouncer:
    """Coalesces bursts of triggers into a single trailing call.

    The debouncer owns at most one pending timer handle. Each trigger cancels
    the pending handle and schedules a new one, so only the last trigger in a
    quiet period of `delay` seconds reaches the callback.
    """

    def __init__(self, delay: float, callback: Callable[[], object]) -> None:
        """Initialize the debouncer.

        Args:
            delay: Quiet period in seconds
            callback: Function called once the quiet period has elapsed
        """
        self.delay = delay
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        """Whether a call is scheduled."""
        return self._handle is not None

    def trigger(self) -> None:
        """Schedule the callback, replacing any call still pending.

        Must be called from within a running event loop.
        """
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        """Drop the pending call, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def flush(self) -> None:
        """Run the pending call immediately."""
        if self._handle is not None:
            self.cancel()
            self._callback()

    def _fire(self) -> None:
        self._handle = None
        try:
            self._callback()
        except Exception as e:
            log.error("Debounced callback failed", error=str(e), exc_info=True)
            raise
