from __future__ import annotations

from collections.abc import Callable

import pytest
from fakes import FakeLink, FakeScheduler

from helmlink.dispatch import Dispatcher


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def links() -> list[FakeLink]:
    return []


@pytest.fixture
def link_factory(links: list[FakeLink]) -> Callable[[Dispatcher], FakeLink]:
    def _factory(dispatcher: Dispatcher) -> FakeLink:
        link = FakeLink(dispatcher)
        links.append(link)
        return link

    return _factory
