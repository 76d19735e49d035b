from __future__ import annotations

import argparse
import asyncio
import logging
from typing import List

from ..config import CrawlConfig
from ..utils.logging import setup_logging
from ..utils.loader import load_symbol
from ..engines.base import CrawlReport
from ..export.base import Exporter

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Discover product pages reachable from seed domains")
    p.add_argument("urls", nargs="*", help="Seed URLs, one per domain (space-separated)")
    p.add_argument("--config", type=str, help="Path to config JSON", default=None)
    p.add_argument("--max-depth", type=int, default=None, help="Max crawl depth (default from config)")
    p.add_argument("--max-concurrency", type=int, default=None, help="Max concurrent fetches (default from config)")
    p.add_argument("--request-delay", type=float, default=None, help="Seconds to wait before each fetch")
    p.add_argument("--retry-delay", type=float, default=None, help="Seconds to wait before retrying a 429")
    p.add_argument("--session-timeout", type=float, default=None,
                   help="Per-seed deadline in seconds (0 disables)")
    p.add_argument("--engine", type=str, default=None, help="Engine dotted path (module:ClassName)")
    p.add_argument("--exporter", type=str, default=None, help="Exporter dotted path (module:ClassName)")
    p.add_argument("--output", type=str, default=None, help="Output file path")
    p.add_argument("--log-level", type=str, default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
    p.add_argument("--serve", action="store_true", help="Run REST API server instead of CLI crawl")
    p.add_argument("--host", type=str, default="127.0.0.1", help="API host (when --serve)")
    p.add_argument("--port", type=int, default=8000, help="API port (when --serve)")
    return p


def _load_config(args: argparse.Namespace) -> CrawlConfig:
    if args.config:
        cfg = CrawlConfig.from_file(args.config)
    else:
        cfg = CrawlConfig.from_env()

    if args.urls:
        cfg.start_urls = list(args.urls)
    if args.max_depth is not None:
        cfg.max_depth = args.max_depth
    if args.max_concurrency is not None:
        cfg.max_concurrency = args.max_concurrency
    if args.request_delay is not None:
        cfg.request_delay = args.request_delay
    if args.retry_delay is not None:
        cfg.retry_delay = args.retry_delay
    if args.session_timeout is not None:
        cfg.session_timeout = args.session_timeout
    if args.engine:
        cfg.engine = args.engine
    if args.exporter:
        cfg.exporter = args.exporter
    if args.output:
        cfg.output_path = args.output

    cfg.validate()
    return cfg


def run_server(host: str, port: int) -> None:
    try:
        import uvicorn  # type: ignore
    except ImportError as exc:  # pragma: no cover - optional dep
        raise SystemExit("To run the API, install dependencies: pip install uvicorn") from exc
    uvicorn.run("product_crawler.apis.app:app", host=host, port=port)


def run_cli(argv: List[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    setup_logging(args.log_level)

    if args.serve:
        run_server(args.host, args.port)
        return 0

    try:
        cfg = _load_config(args)
    except ValueError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    # Dynamic engine + exporter loading so upgrades don't require code edits.
    engine_cls = load_symbol(cfg.engine)
    exporter_cls = load_symbol(cfg.exporter)

    async def _run() -> CrawlReport:
        engine = engine_cls(cfg)
        async with engine:
            return await engine.crawl()

    report: CrawlReport = asyncio.run(_run())

    exporter: Exporter = exporter_cls()
    exporter.export(report.discovered, cfg.output_path)

    logger.info("Visited: %s | Products: %s | Output: %s",
                report.visited_count,
                sum(len(v) for v in report.discovered.values()),
                cfg.output_path)
    return 0
