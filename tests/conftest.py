"""Shared fixtures: a scripted fetcher standing in for the network."""

import asyncio

import pytest

from vostok.core import Response, classify
from vostok.gemtext import SequenceGenerator
from vostok.navigation import NavigationEngine


class FakeFetcher:
    """Answers each URL from a script of responses or exceptions."""

    def __init__(self, script: dict | None = None, delay: float = 0.0):
        self.script = dict(script or {})
        self.delay = delay
        self.requests: list[str] = []

    def add(self, url: str, status: int, meta: str = "", body: str = ""):
        self.script[url] = classify(status, meta, body)

    async def fetch(self, url: str) -> Response:
        self.requests.append(url)
        if self.delay:
            await asyncio.sleep(self.delay)
        answer = self.script[url]
        if isinstance(answer, Exception):
            raise answer
        return answer


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def engine(fetcher):
    return NavigationEngine(fetcher=fetcher, ids=SequenceGenerator())
