from __future__ import annotations

import logging
from enum import Enum

from .base import CrawlJob, FetchOutcome, OutcomeKind

logger = logging.getLogger(__name__)


class RetryDecision(Enum):
    RETRY = "retry"
    DROP = "drop"


class RetryHandler:
    """
    Decide what happens to a job whose fetch failed.

    Only 429 responses are retried, and at most ``max_retries`` times for a
    given job. The engine owns the backoff sleep and re-enqueues
    ``job.retry()`` into the same session.
    """

    def __init__(self, max_retries: int = 1, retry_delay: float = 5.0) -> None:
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    def decide(self, job: CrawlJob, outcome: FetchOutcome) -> RetryDecision:
        kind = outcome.kind
        if kind is OutcomeKind.RATE_LIMITED:
            if job.attempt < self.max_retries:
                logger.warning(
                    "Too many requests fetching %s (status=429); retrying in %.1fs (attempt %d/%d)",
                    job.url, self.retry_delay, job.attempt + 1, self.max_retries,
                )
                return RetryDecision.RETRY
            logger.warning("Too many requests fetching %s (status=429); giving up", job.url)
        elif kind is OutcomeKind.SERVER_ERROR:
            logger.warning("Server error fetching %s (status=%s)", job.url, outcome.status)
        elif kind is OutcomeKind.HTTP_ERROR:
            logger.error("Error fetching %s (status=%s)", job.url, outcome.status)
        else:
            logger.error("Error fetching %s: %s", job.url, outcome.error or kind.value)
        return RetryDecision.DROP
