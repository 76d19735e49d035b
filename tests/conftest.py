"""
Shared fakes for crawler tests.

``FakeSite`` stands in for both the page fetcher and the robots.txt source so
engine tests never touch the network.
"""
from __future__ import annotations

import asyncio
from collections import Counter
from typing import Dict, List, Optional, Union

import pytest

from product_crawler.config import CrawlConfig
from product_crawler.engines.base import FetchOutcome, OutcomeKind
from product_crawler.engines.robots import RobotsPolicyCache
from product_crawler.engines.simple_engine import SimpleCrawlEngine

PageSpec = Union[List[str], FetchOutcome, List[FetchOutcome]]


class FakeSite:
    """
    ``pages`` maps URL to either a list of links, a single outcome, or a
    list of outcomes served one per call (the last one repeats).
    Unknown URLs answer 404.
    """

    def __init__(
        self,
        pages: Optional[Dict[str, PageSpec]] = None,
        robots: Optional[Dict[str, str]] = None,
        delays: Optional[Dict[str, float]] = None,
    ) -> None:
        self.pages = pages or {}
        self.robots = robots or {}
        self.delays = delays or {}
        self.fetched: List[str] = []
        self.robots_requests: List[str] = []
        self._calls: Counter = Counter()

    async def fetch(self, url: str) -> FetchOutcome:
        self.fetched.append(url)
        call = self._calls[url]
        self._calls[url] += 1
        if url in self.delays:
            await asyncio.sleep(self.delays[url])

        spec = self.pages.get(url)
        if spec is None:
            return FetchOutcome.failure(OutcomeKind.HTTP_ERROR, status=404)
        if isinstance(spec, FetchOutcome):
            return spec
        if spec and isinstance(spec[0], FetchOutcome):
            return spec[min(call, len(spec) - 1)]
        return FetchOutcome.success(spec)

    async def fetch_text(self, url: str) -> Optional[str]:
        self.robots_requests.append(url)
        await asyncio.sleep(0)
        return self.robots.get(url)


def fast_config(**overrides) -> CrawlConfig:
    values = dict(request_delay=0.0, retry_delay=0.0, max_concurrency=4)
    values.update(overrides)
    return CrawlConfig(**values)


def make_engine(site: FakeSite, **overrides) -> SimpleCrawlEngine:
    cfg = fast_config(**overrides)
    return SimpleCrawlEngine(cfg, fetcher=site, robots=RobotsPolicyCache(site, scheme=cfg.robots_scheme))


@pytest.fixture
def shop_site() -> FakeSite:
    return FakeSite(
        pages={
            "https://shop.test": [
                "https://shop.test/product/1",
                "https://elsewhere.test/product/2",
                "https://shop.test/about",
                "mailto:sales@shop.test",
            ],
            "https://shop.test/about": ["https://shop.test/"],
            "https://shop.test/": [],
        }
    )
