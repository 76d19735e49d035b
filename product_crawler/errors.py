from __future__ import annotations


class CrawlerError(Exception):
    """Base class for errors raised by the crawler."""


class InvalidURL(CrawlerError, ValueError):
    """A URL whose host component cannot be determined."""

    def __init__(self, url: str) -> None:
        super().__init__(f"cannot determine host of {url!r}")
        self.url = url
