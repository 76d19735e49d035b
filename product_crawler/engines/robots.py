"""
robots.txt policy cache.

Only ``Disallow:`` lines are understood, and a path is blocked when it
contains any disallowed fragment as a substring. No wildcards, anchors,
crawl-delay or per-agent groups. An unreachable robots.txt allows everything.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, FrozenSet
from urllib.parse import urlparse

from .base import TextSource
from ..errors import InvalidURL
from ..utils.parsing import host_of

logger = logging.getLogger(__name__)

_DIRECTIVE = "Disallow:"


def _authority(url: str) -> str:
    """Host of ``url``, plus the port when one is given explicitly."""
    host = host_of(url)
    if ":" in host:
        host = f"[{host}]"  # IPv6 literal
    try:
        port = urlparse(url).port
    except ValueError as exc:
        raise InvalidURL(url) from exc
    return f"{host}:{port}" if port else host


def parse_robots(text: str) -> FrozenSet[str]:
    """Return the set of non-empty ``Disallow:`` fragments in ``text``."""
    out = set()
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line.startswith(_DIRECTIVE):
            continue
        fragment = line[len(_DIRECTIVE):].strip()
        if fragment:
            out.add(fragment)
    return frozenset(out)


class RobotsPolicyCache:
    """
    Per-domain disallow lists, fetched lazily and kept for the life of the cache.

    First access for a domain is serialized on a lock owned by that domain,
    so concurrent workers trigger one fetch and other domains are not held up.
    """

    def __init__(self, source: TextSource, scheme: str = "https") -> None:
        self.source = source
        self.scheme = scheme
        self._policies: Dict[str, FrozenSet[str]] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def robots_url(self, domain: str) -> str:
        return f"{self.scheme}://{domain}/robots.txt"

    async def policy_for(self, domain: str) -> FrozenSet[str]:
        cached = self._policies.get(domain)
        if cached is not None:
            return cached

        lock = self._locks.setdefault(domain, asyncio.Lock())
        async with lock:
            # Another worker may have filled it while we waited.
            cached = self._policies.get(domain)
            if cached is not None:
                return cached

            text = await self.source.fetch_text(self.robots_url(domain))
            if text is None:
                logger.warning("robots.txt unavailable for %s; allowing all paths", domain)
                policy: FrozenSet[str] = frozenset()
            else:
                policy = parse_robots(text)
                logger.info("Parsed robots.txt for %s: %d disallowed fragment(s)", domain, len(policy))
            self._policies[domain] = policy
            return policy

    async def is_allowed(self, url: str) -> bool:
        try:
            domain = _authority(url)
        except InvalidURL:
            logger.debug("Cannot check robots.txt for %s; allowing", url)
            return True

        disallowed = await self.policy_for(domain)
        path = urlparse(url).path
        return not any(fragment in path for fragment in disallowed)

    def __contains__(self, domain: object) -> bool:
        return domain in self._policies
