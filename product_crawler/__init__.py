from .version import __version__
from .config import CrawlConfig
from .engines.base import CrawlJob, CrawlReport, FetchOutcome, OutcomeKind
from .engines.simple_engine import SimpleCrawlEngine

__all__ = [
    "__version__",
    "CrawlConfig",
    "CrawlJob",
    "CrawlReport",
    "FetchOutcome",
    "OutcomeKind",
    "SimpleCrawlEngine",
]
