from __future__ import annotations

from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional, Protocol, Set


class OutcomeKind(str, Enum):
    LINKS = "links"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    NETWORK_ERROR = "network_error"
    HTTP_ERROR = "http_error"
    DISALLOWED = "disallowed"
    ALREADY_VISITED = "already_visited"
    DEPTH_EXCEEDED = "depth_exceeded"
    OFF_DOMAIN = "off_domain"


@dataclass(frozen=True)
class FetchOutcome:
    """Tagged result of processing one URL. ``links`` is only set for LINKS."""

    kind: OutcomeKind
    links: List[str] = field(default_factory=list)
    status: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.LINKS

    @classmethod
    def success(cls, links: List[str], status: int = 200) -> "FetchOutcome":
        return cls(OutcomeKind.LINKS, links=list(links), status=status)

    @classmethod
    def failure(cls, kind: OutcomeKind, status: Optional[int] = None, error: Optional[str] = None) -> "FetchOutcome":
        return cls(kind, status=status, error=error)


@dataclass(frozen=True)
class CrawlJob:
    url: str
    depth: int
    target_domain: str
    attempt: int = 0

    def child(self, url: str) -> "CrawlJob":
        return CrawlJob(url=url, depth=self.depth + 1, target_domain=self.target_domain)

    def retry(self) -> "CrawlJob":
        return replace(self, attempt=self.attempt + 1)


class LinkFetcher(Protocol):
    """Fetch a page and return its absolute hyperlinks, or a classified failure."""

    async def fetch(self, url: str) -> FetchOutcome:
        ...


class TextSource(Protocol):
    """Fetch a plain-text document; ``None`` on any failure."""

    async def fetch_text(self, url: str) -> Optional[str]:
        ...


@dataclass
class CrawlReport:
    discovered: Dict[str, Set[str]] = field(default_factory=dict)  # seed -> product URLs
    visited_count: int = 0
    outcomes: Counter = field(default_factory=Counter)  # OutcomeKind -> count


class CrawlEngine(ABC):
    """
    Abstract engine interface. Implementations own the crawl lifecycle.
    """
    async def __aenter__(self) -> "CrawlEngine":
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None

    @abstractmethod
    async def crawl(self) -> CrawlReport:  # pragma: no cover - interface
        ...

    @abstractmethod
    async def crawl_many(self, seeds: List[str]) -> Dict[str, Set[str]]:  # pragma: no cover - interface
        ...
