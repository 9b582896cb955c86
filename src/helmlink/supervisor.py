"""Connection lifecycle supervisor.

A fixed-interval poll drives a two-state machine::

    DISCONNECTED --(substrate reachable)--> CONNECTED
    CONNECTED --(substrate unreachable)--> DISCONNECTED

Attaching opens a link, lets the owner register its subscriptions and
publications on it, and starts delivery.  Detaching closes the link,
which releases every handle.  Each transition emits exactly one
connectivity notification; ticks without a transition emit nothing.
The next tick is scheduled after every tick regardless of outcome, at a
constant interval (no backoff).

The reachability probe, ``link.start()`` and ``link.close()`` block on
sockets and threads, so they run in the loop's default executor.  State
changes and notifications happen on the loop.

Reachability, link creation and scheduling are injected so the machine
can be driven deterministically without a broker.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any, Protocol

from helmlink.models.track import ConnectionState

_logger = logging.getLogger(__name__)


class Link(Protocol):
    def subscribe(self, topic: str, channel: str, model: Any) -> Any: ...

    def advertise(self, topic: str) -> Any: ...

    def start(self) -> None: ...

    def close(self) -> None: ...


class _Cancellable(Protocol):
    def cancel(self) -> Any: ...


Scheduler = Callable[[float, Callable[[], Any]], _Cancellable]


class ConnectionSupervisor:
    """Poll the substrate and attach/detach as reachability changes.

    Parameters
    ----------
    probe
        Returns whether the substrate is reachable.  Runs in the default
        executor.  Exceptions count as unreachable.
    connect
        Opens a new (not yet started) link.
    on_attach
        Called on the loop with a freshly opened link to register
        subscriptions and publications before delivery starts.
    on_connectivity
        Called with ``True``/``False`` on each transition.
    interval
        Seconds between polls.
    schedule
        ``schedule(delay, callback)`` returning a handle with ``cancel()``.
        Defaults to ``loop.call_later`` on the running loop.
    """

    def __init__(
        self,
        *,
        probe: Callable[[], bool],
        connect: Callable[[], Link],
        on_attach: Callable[[Link], None],
        on_connectivity: Callable[[bool], None] | None = None,
        interval: float = 1.0,
        schedule: Scheduler | None = None,
    ) -> None:
        self._probe = probe
        self._connect = connect
        self._on_attach = on_attach
        self._on_connectivity = on_connectivity
        self._interval = interval
        self._schedule = schedule
        self._state = ConnectionState.DISCONNECTED
        self._link: Link | None = None
        self._handle: _Cancellable | None = None
        self._tick_task: asyncio.Task[bool] | None = None
        self._running = False

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    @property
    def link(self) -> Link | None:
        """The open link while connected, else ``None``."""
        return self._link

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Run the first poll now and keep polling every interval."""
        if self._running:
            return
        if self._schedule is None:
            self._schedule = asyncio.get_running_loop().call_later
        self._running = True
        await self.tick()

    async def stop(self) -> None:
        """Stop polling, wait for an in-flight poll, and detach if connected."""
        self._running = False
        handle = self._handle
        self._handle = None
        if handle is not None:
            handle.cancel()
        task = self._tick_task
        self._tick_task = None
        if task is not None and not task.done():
            try:
                await task
            except Exception:
                _logger.debug("In-flight poll failed during stop", exc_info=True)
        if self._state is ConnectionState.CONNECTED:
            await self._detach()

    def _on_timer(self) -> asyncio.Task[bool] | None:
        self._handle = None
        if not self._running:
            return None
        self._tick_task = asyncio.get_running_loop().create_task(self.tick())
        return self._tick_task

    async def tick(self) -> bool:
        """Run one poll step.  Returns ``True`` if the state changed."""
        self._handle = None
        try:
            reachable = await self._check_reachable()
            if self._state is ConnectionState.DISCONNECTED:
                return reachable and await self._attach()
            if not reachable:
                await self._detach()
                return True
            return False
        finally:
            if self._running and self._schedule is not None:
                self._handle = self._schedule(self._interval, self._on_timer)

    async def _check_reachable(self) -> bool:
        loop = asyncio.get_running_loop()
        try:
            return bool(await loop.run_in_executor(None, self._probe))
        except Exception:
            _logger.debug("Reachability probe failed", exc_info=True)
            return False

    async def _attach(self) -> bool:
        loop = asyncio.get_running_loop()
        link: Link | None = None
        try:
            link = self._connect()
            self._on_attach(link)
            await loop.run_in_executor(None, link.start)
        except Exception:
            _logger.warning("Attach failed; retrying in %.1fs", self._interval, exc_info=True)
            if link is not None:
                await self._close_quietly(link)
            return False

        self._link = link
        self._state = ConnectionState.CONNECTED
        _logger.info("Connected to messaging substrate")
        self._notify(True)
        return True

    async def _detach(self) -> None:
        link = self._link
        self._link = None
        self._state = ConnectionState.DISCONNECTED
        if link is not None:
            await self._close_quietly(link)
        _logger.info("Disconnected from messaging substrate")
        self._notify(False)

    @staticmethod
    async def _close_quietly(link: Link) -> None:
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, link.close)
        except Exception:
            _logger.debug("Link close failed", exc_info=True)

    def _notify(self, connected: bool) -> None:
        if self._on_connectivity is None:
            return
        try:
            self._on_connectivity(connected)
        except Exception:
            _logger.debug("Connectivity callback failed", exc_info=True)
