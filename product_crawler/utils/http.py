from __future__ import annotations

import asyncio
from typing import Optional
from aiohttp import ClientSession, ClientTimeout
import aiohttp
import logging

from ..engines.base import FetchOutcome, OutcomeKind
from .parsing import extract_links

logger = logging.getLogger(__name__)

_HTML_TYPES = ("text/html", "application/xhtml+xml")


async def fetch_text(
    session: ClientSession,
    url: str,
    *,
    timeout: float = 15.0,
    user_agent: Optional[str] = None,
) -> Optional[str]:
    """
    Fetch a URL and return body text. Returns None on a non-2xx status or any
    client error; callers decide what a missing document means.
    """
    headers = {}
    if user_agent:
        headers["User-Agent"] = user_agent

    try:
        async with session.get(url, headers=headers, timeout=ClientTimeout(total=timeout)) as resp:
            resp.raise_for_status()
            return await resp.text(errors="replace")
    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
        logger.debug("fetch_text failed for %s: %r", url, exc)
        return None


def create_session() -> ClientSession:
    """
    Create a shared aiohttp ClientSession.
    """
    # Note: caller is responsible for closing the session (await session.close()).
    connector = aiohttp.TCPConnector(limit=0)  # unlimited; concurrency managed via semaphore
    return aiohttp.ClientSession(connector=connector)


class HttpLinkFetcher:
    """
    aiohttp-backed fetch-and-extract collaborator.

    Implements both ``LinkFetcher`` (pages) and ``TextSource`` (robots.txt)
    over one client session. Statuses are classified rather than raised.
    """

    def __init__(self, session: ClientSession, *, timeout: float = 15.0, user_agent: Optional[str] = None) -> None:
        self.session = session
        self.timeout = timeout
        self.user_agent = user_agent

    def _headers(self) -> dict:
        return {"User-Agent": self.user_agent} if self.user_agent else {}

    async def fetch(self, url: str) -> FetchOutcome:
        try:
            async with self.session.get(
                url, headers=self._headers(), timeout=ClientTimeout(total=self.timeout)
            ) as resp:
                status = resp.status
                if status == 429:
                    return FetchOutcome.failure(OutcomeKind.RATE_LIMITED, status=status)
                if 500 <= status <= 599:
                    return FetchOutcome.failure(OutcomeKind.SERVER_ERROR, status=status)
                if status >= 400:
                    return FetchOutcome.failure(OutcomeKind.HTTP_ERROR, status=status)
                if resp.content_type not in _HTML_TYPES:
                    logger.debug("Skipping non-HTML body at %s (%s)", url, resp.content_type)
                    return FetchOutcome.success([], status=status)
                html = await resp.text(errors="replace")
                # Resolve against the post-redirect URL.
                return FetchOutcome.success(extract_links(html, base_url=str(resp.url)), status=status)
        except asyncio.TimeoutError:
            return FetchOutcome.failure(OutcomeKind.NETWORK_ERROR, error="timeout")
        except aiohttp.ClientError as exc:
            return FetchOutcome.failure(OutcomeKind.NETWORK_ERROR, error=repr(exc))

    async def fetch_text(self, url: str) -> Optional[str]:
        return await fetch_text(self.session, url, timeout=self.timeout, user_agent=self.user_agent)
