from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional
import logging

from fastapi import FastAPI

from ..config import CrawlConfig
from ..engines.base import CrawlEngine
from ..utils.loader import load_symbol
from ..version import __version__

logger = logging.getLogger(__name__)


def create_app(config: Optional[CrawlConfig] = None, engine: Optional[CrawlEngine] = None) -> FastAPI:
    """
    Build the API. One engine (and so one robots cache and one HTTP session)
    serves every request for the lifetime of the app.
    """
    if engine is None:
        cfg = config or CrawlConfig.from_env()
        cfg.validate(require_urls=False)
        engine_cls = load_symbol(cfg.engine)
        engine = engine_cls(cfg)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        async with engine:
            app.state.engine = engine
            yield

    app = FastAPI(title="product_crawler API", version=__version__, lifespan=lifespan)

    @app.get("/health")
    async def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/crawl")
    @app.post("/api/crawler/crawl")
    async def crawl(domains: List[str]) -> Dict[str, List[str]]:
        discovered = await app.state.engine.crawl_many(domains)
        # One entry per input, even if a session failed outright.
        return {domain: sorted(discovered.get(domain, ())) for domain in domains}

    return app


app = create_app()
