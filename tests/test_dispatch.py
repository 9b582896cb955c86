from __future__ import annotations

import asyncio
import threading

import pytest

from helmlink.dispatch import Dispatcher


@pytest.mark.asyncio
async def test_same_channel_order_preserved_across_producer_threads() -> None:
    dispatcher = Dispatcher(asyncio.get_running_loop())
    seen: dict[str, list[int]] = {"position": [], "heading": []}
    applied_on: set[int] = set()

    def handler_for(channel: str):
        def _handle(value: int) -> None:
            applied_on.add(threading.get_ident())
            seen[channel].append(value)

        return _handle

    for channel in seen:
        dispatcher.register(channel, handler_for(channel))

    def produce(channel: str) -> None:
        for i in range(200):
            assert dispatcher.submit(channel, i)

    workers = [threading.Thread(target=produce, args=(channel,)) for channel in seen]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join()

    await dispatcher.flush()

    assert seen["position"] == list(range(200))
    assert seen["heading"] == list(range(200))
    assert applied_on == {threading.get_ident()}


@pytest.mark.asyncio
async def test_submit_returns_before_handler_runs() -> None:
    dispatcher = Dispatcher(asyncio.get_running_loop())
    applied: list[str] = []
    dispatcher.register("origin", applied.append)

    assert dispatcher.submit("origin", "x")
    assert applied == []

    await dispatcher.flush()
    assert applied == ["x"]


@pytest.mark.asyncio
async def test_failing_handler_drops_only_that_update() -> None:
    dispatcher = Dispatcher(asyncio.get_running_loop())
    applied: list[int] = []

    def handler(value: int) -> None:
        if value == 2:
            raise ValueError("malformed")
        applied.append(value)

    dispatcher.register("ais", handler)
    for value in (1, 2, 3):
        dispatcher.submit("ais", value)
    await dispatcher.flush()

    assert applied == [1, 3]


@pytest.mark.asyncio
async def test_unregistered_channel_is_ignored() -> None:
    dispatcher = Dispatcher(asyncio.get_running_loop())
    assert dispatcher.submit("unknown", 1)
    await dispatcher.flush()


@pytest.mark.asyncio
async def test_close_refuses_new_submissions_but_applies_queued() -> None:
    dispatcher = Dispatcher(asyncio.get_running_loop())
    applied: list[int] = []
    dispatcher.register("position", applied.append)

    assert dispatcher.submit("position", 1)
    dispatcher.close()

    assert dispatcher.submit("position", 2) is False
    await dispatcher.flush()
    assert applied == [1]


def test_submit_after_loop_closed_is_dropped() -> None:
    loop = asyncio.new_event_loop()
    dispatcher = Dispatcher(loop)
    loop.close()

    assert dispatcher.submit("position", 1) is False
