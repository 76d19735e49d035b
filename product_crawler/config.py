from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import List, Dict, Any
from pathlib import Path
import os
import json

from .version import __version__, CONFIG_SCHEMA_VERSION

DEFAULT_ENGINE = "product_crawler.engines.simple_engine:SimpleCrawlEngine"
DEFAULT_EXPORTER = "product_crawler.export.json_exporter:JSONExporter"


@dataclass
class CrawlConfig:
    """
    Canonical configuration object passed throughout the system.
    Keep it dataclass-only (no heavy deps) to stay upgrade-friendly.

    Delays are in seconds. ``session_timeout`` of 0 disables the per-session
    deadline; ``max_frontier`` of 0 leaves the session queue unbounded.
    """
    schema_version: int = CONFIG_SCHEMA_VERSION
    start_urls: List[str] = field(default_factory=list)
    max_depth: int = 2
    max_concurrency: int = 10
    request_delay: float = 2.0
    retry_delay: float = 5.0
    max_retries: int = 1
    request_timeout: float = 15.0
    session_timeout: float = 0.0
    max_frontier: int = 10000
    robots_scheme: str = "https"
    user_agent: str = f"product_crawler/{__version__}"
    # Dotted paths for engine/exporter to allow runtime swapping without code changes.
    engine: str = DEFAULT_ENGINE
    exporter: str = DEFAULT_EXPORTER
    # Where to write results
    output_path: str = "output/product_urls.json"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    # ---------- Loaders ----------

    @classmethod
    def from_env(cls) -> "CrawlConfig":
        """
        Build config from environment variables (all optional).
        """
        urls = os.getenv("CRAWLER_START_URLS", "")
        start_urls = [u.strip() for u in urls.split(",") if u.strip()]

        def _get(name: str, default: str) -> str:
            return os.getenv(name, default)

        return cls(
            start_urls=start_urls,
            max_depth=int(_get("CRAWLER_MAX_DEPTH", "2")),
            max_concurrency=int(_get("CRAWLER_MAX_CONCURRENCY", "10")),
            request_delay=float(_get("CRAWLER_REQUEST_DELAY", "2.0")),
            retry_delay=float(_get("CRAWLER_RETRY_DELAY", "5.0")),
            max_retries=int(_get("CRAWLER_MAX_RETRIES", "1")),
            request_timeout=float(_get("CRAWLER_REQUEST_TIMEOUT", "15.0")),
            session_timeout=float(_get("CRAWLER_SESSION_TIMEOUT", "0")),
            max_frontier=int(_get("CRAWLER_MAX_FRONTIER", "10000")),
            robots_scheme=_get("CRAWLER_ROBOTS_SCHEME", "https"),
            user_agent=_get("CRAWLER_USER_AGENT", f"product_crawler/{__version__}"),
            engine=_get("CRAWLER_ENGINE", DEFAULT_ENGINE),
            exporter=_get("CRAWLER_EXPORTER", DEFAULT_EXPORTER),
            output_path=_get("CRAWLER_OUTPUT_PATH", "output/product_urls.json"),
        )

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> "CrawlConfig":
        """
        Load configuration from a JSON file. Supports schema migration for older versions.
        """
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        data = migrate_config(data)
        return cls(**data)

    # ---------- Validation ----------

    def validate(self, require_urls: bool = True) -> None:
        if require_urls and not self.start_urls:
            raise ValueError("start_urls cannot be empty; provide at least one URL.")
        if self.max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        if self.max_concurrency <= 0:
            raise ValueError("max_concurrency must be > 0")
        if self.request_delay < 0 or self.retry_delay < 0:
            raise ValueError("request_delay and retry_delay must be >= 0")
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.session_timeout < 0:
            raise ValueError("session_timeout must be >= 0")
        if self.max_frontier < 0:
            raise ValueError("max_frontier must be >= 0")
        if self.robots_scheme not in ("http", "https"):
            raise ValueError("robots_scheme must be 'http' or 'https'")
        if not self.output_path or Path(self.output_path).is_dir():
            raise ValueError("output_path must name a file")


_V1_ONLY_KEYS = ("allowed_domains", "extra_adapters", "retries", "keywords")


def migrate_config(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Migrate config dict to the latest schema version.
    Keep this pure and additive. Add migrations here as you bump schema.
    """
    data = dict(raw)
    schema = data.get("schema_version", 1)

    if schema < 2:
        # v1 retried every failed fetch; v2 only retries 429s.
        if "retries" in data and "max_retries" not in data:
            data["max_retries"] = min(int(data["retries"]), 1)
        for key in _V1_ONLY_KEYS:
            data.pop(key, None)
        data["schema_version"] = 2

    # Ensure a schema_version is present
    data.setdefault("schema_version", CONFIG_SCHEMA_VERSION)
    return data
