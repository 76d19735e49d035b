from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional, Set

from aiohttp import ClientSession

from .base import CrawlEngine, CrawlJob, CrawlReport, FetchOutcome, LinkFetcher, OutcomeKind
from .retry import RetryDecision, RetryHandler
from .robots import RobotsPolicyCache
from .session import CrawlSession
from ..config import CrawlConfig
from ..errors import InvalidURL
from ..utils.http import HttpLinkFetcher, create_session
from ..utils.parsing import host_of, is_product_url, is_valid_scheme, same_domain

logger = logging.getLogger(__name__)


class SimpleCrawlEngine(CrawlEngine):
    """
    Async product-URL crawler.
    - One session (visited set + product set) per seed.
    - Each session drains its own bounded queue with a fixed worker pool.
    - Fetches across all sessions share one semaphore.
    - The robots cache lives as long as the engine and is shared by sessions.

    Without an injected fetcher the engine owns an aiohttp session; use
    ``async with engine:`` or :meth:`crawl`, which opens it on demand.
    """
    def __init__(
        self,
        config: CrawlConfig,
        fetcher: Optional[LinkFetcher] = None,
        robots: Optional[RobotsPolicyCache] = None,
    ) -> None:
        self.config = config
        self.fetcher = fetcher
        self.robots = robots
        self.retry = RetryHandler(max_retries=config.max_retries, retry_delay=config.retry_delay)
        self._fetch_slots = asyncio.Semaphore(config.max_concurrency)
        self._http: Optional[ClientSession] = None
        self._owns_robots = robots is None

    # ---- Lifecycle ----

    async def __aenter__(self) -> "SimpleCrawlEngine":
        if self.fetcher is None:
            self._http = create_session()
            self.fetcher = HttpLinkFetcher(
                self._http, timeout=self.config.request_timeout, user_agent=self.config.user_agent
            )
        if self.robots is None:
            self.robots = RobotsPolicyCache(self.fetcher, scheme=self.config.robots_scheme)  # type: ignore[arg-type]
        elif self._owns_robots:
            # Keep cached policies across re-entry, but fetch through the new session.
            self.robots.source = self.fetcher  # type: ignore[assignment]
        return self

    async def __aexit__(self, *exc_info) -> None:
        if self._http is not None:
            await self._http.close()
            self._http = None
            self.fetcher = None

    @property
    def is_open(self) -> bool:
        return self.fetcher is not None and self.robots is not None

    # ---- Public API ----

    async def crawl(self) -> CrawlReport:
        if self.is_open:
            return await self._report(self.config.start_urls)
        async with self:
            return await self._report(self.config.start_urls)

    async def crawl_many(self, seeds: List[str]) -> Dict[str, Set[str]]:
        report = await self._report(seeds)
        return report.discovered

    async def crawl_domain(self, seed: str) -> Set[str]:
        self._require_open()
        session = await self._run_session(seed)
        return set(session.products) if session else set()

    # ---- Internals ----

    def _require_open(self) -> None:
        if not self.is_open:
            raise RuntimeError("engine is not open; use 'async with engine:'")

    async def _report(self, seeds: List[str]) -> CrawlReport:
        self._require_open()

        results = await asyncio.gather(*(self._run_session(s) for s in seeds), return_exceptions=True)

        report = CrawlReport()
        for seed, result in zip(seeds, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, BaseException):
                logger.error("Failed crawling %s: %r", seed, result, exc_info=result)
                report.discovered[seed] = set()
                continue
            if result is None:
                report.discovered[seed] = set()
                continue
            report.discovered[seed] = set(result.products)
            report.visited_count += len(result.visited)
            report.outcomes.update(result.outcomes)
        return report

    async def _run_session(self, seed: str) -> Optional[CrawlSession]:
        try:
            target_domain = host_of(seed)
        except InvalidURL:
            logger.warning("Skipping seed with no parseable host: %r", seed)
            return None

        session = CrawlSession(seed=seed, target_domain=target_domain)
        timeout = self.config.session_timeout
        try:
            if timeout > 0:
                await asyncio.wait_for(self._drain(session), timeout=timeout)
            else:
                await self._drain(session)
        except asyncio.TimeoutError:
            logger.warning(
                "Session for %s hit its %.1fs deadline; returning %d product(s) found so far",
                seed, timeout, len(session.products),
            )
        logger.info(
            "Crawled %s: visited=%d products=%d dropped=%d",
            seed, len(session.visited), len(session.products), session.dropped_links,
        )
        return session

    async def _drain(self, session: CrawlSession) -> None:
        cfg = self.config
        q: asyncio.Queue[CrawlJob] = asyncio.Queue(maxsize=cfg.max_frontier)
        q.put_nowait(CrawlJob(url=session.seed, depth=0, target_domain=session.target_domain))

        async def worker() -> None:
            while True:
                job = await q.get()
                try:
                    await self._process(session, job, q)
                except asyncio.CancelledError:
                    raise
                except Exception:
                    logger.exception("Unexpected error processing %s", job.url)
                finally:
                    q.task_done()

        workers = [asyncio.create_task(worker()) for _ in range(cfg.max_concurrency)]
        try:
            await q.join()
        finally:
            for w in workers:
                w.cancel()
            await asyncio.gather(*workers, return_exceptions=True)

    def _enqueue(self, session: CrawlSession, q: asyncio.Queue, job: CrawlJob) -> None:
        try:
            q.put_nowait(job)
        except asyncio.QueueFull:
            session.dropped_links += 1
            logger.warning("Frontier full for %s; dropping %s", session.seed, job.url)

    async def _process(self, session: CrawlSession, job: CrawlJob, q: asyncio.Queue) -> None:
        cfg = self.config

        if job.depth > cfg.max_depth:
            session.record(OutcomeKind.DEPTH_EXCEEDED)
            return
        # Retries were admitted on their first attempt.
        if job.attempt == 0 and not session.visited.try_admit(job.url):
            session.record(OutcomeKind.ALREADY_VISITED)
            return
        if not await self.robots.is_allowed(job.url):
            logger.debug("Disallowed by robots.txt: %s", job.url)
            session.record(OutcomeKind.DISALLOWED)
            return

        async with self._fetch_slots:
            await asyncio.sleep(cfg.request_delay)
            outcome = await self.fetcher.fetch(job.url)
        session.record(outcome.kind)

        if not outcome.ok:
            await self._handle_failure(session, job, outcome, q)
            return

        for link in outcome.links:
            if not is_valid_scheme(link):
                continue
            if not same_domain(link, job.target_domain):
                session.record(OutcomeKind.OFF_DOMAIN)
                continue
            if is_product_url(link):
                session.add_product(link)
            else:
                self._enqueue(session, q, job.child(link))

    async def _handle_failure(
        self, session: CrawlSession, job: CrawlJob, outcome: FetchOutcome, q: asyncio.Queue
    ) -> None:
        if self.retry.decide(job, outcome) is not RetryDecision.RETRY:
            return
        # No fetch slot is held while backing off.
        await asyncio.sleep(self.retry.retry_delay)
        self._enqueue(session, q, job.retry())
