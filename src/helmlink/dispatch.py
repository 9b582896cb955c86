"""Thread-to-loop handoff for inbound deliveries.

Subscriptions are delivered on the MQTT network thread.  Track state is
owned by the asyncio loop that runs the bridge.  :class:`Dispatcher` is the
only crossing point between the two: producers hand a decoded value to
:meth:`Dispatcher.submit` and return immediately; the value is applied on
the loop by the handler registered for its channel.

Ordering: ``call_soon_threadsafe`` callbacks run in FIFO order, so values
submitted on the same channel are applied in submission order.  No
ordering is promised across channels.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

_logger = logging.getLogger(__name__)

Handler = Callable[[Any], None]


class Dispatcher:
    """Marshal values from producer threads onto a single event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop
        self._handlers: dict[str, Handler] = {}
        self._closed = False

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    @property
    def closed(self) -> bool:
        return self._closed

    def register(self, channel: str, handler: Handler) -> None:
        """Register the handler applied on the loop for *channel*."""
        self._handlers[channel] = handler

    def submit(self, channel: str, value: Any) -> bool:
        """Hand *value* to the loop.  Safe to call from any thread.

        Never blocks and never raises.  Returns ``False`` when the value
        was dropped because the dispatcher or its loop is closed.
        """
        if self._closed or self._loop.is_closed():
            return False
        try:
            self._loop.call_soon_threadsafe(self._deliver, channel, value)
        except RuntimeError:
            # Loop closed between the check and the call.
            _logger.debug("Dispatch dropped channel=%s (loop closed)", channel)
            return False
        return True

    def _deliver(self, channel: str, value: Any) -> None:
        handler = self._handlers.get(channel)
        if handler is None:
            _logger.debug("No handler for channel=%s; dropping update", channel)
            return
        try:
            handler(value)
        except Exception:
            _logger.warning("Handler for channel=%s failed; update dropped", channel, exc_info=True)

    async def flush(self) -> None:
        """Wait until everything submitted before this call has been applied."""
        done: asyncio.Future[None] = self._loop.create_future()
        self._loop.call_soon_threadsafe(done.set_result, None)
        await done

    def close(self) -> None:
        """Refuse further submissions.

        Values already handed to the loop are still applied.
        """
        self._closed = True
