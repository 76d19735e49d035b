from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Set

from .base import OutcomeKind


class VisitedStore:
    """
    URLs admitted for fetch within one session.

    ``try_admit`` has no await inside, so on a single event loop the
    membership test and the insert cannot interleave with another worker.
    URLs are compared as exact strings.
    """

    def __init__(self) -> None:
        self._seen: Set[str] = set()

    def try_admit(self, url: str) -> bool:
        if url in self._seen:
            return False
        self._seen.add(url)
        return True

    def __contains__(self, url: object) -> bool:
        return url in self._seen

    def __len__(self) -> int:
        return len(self._seen)


@dataclass
class CrawlSession:
    """State scoped to a single seed crawl."""

    seed: str
    target_domain: str
    visited: VisitedStore = field(default_factory=VisitedStore)
    products: Set[str] = field(default_factory=set)
    outcomes: Counter = field(default_factory=Counter)
    dropped_links: int = 0

    def record(self, kind: OutcomeKind) -> None:
        self.outcomes[kind] += 1

    def add_product(self, url: str) -> None:
        self.products.add(url)
