import asyncio

from product_crawler.engines.base import OutcomeKind
from product_crawler.engines.session import CrawlSession, VisitedStore


def test_try_admit_first_caller_only():
    store = VisitedStore()
    assert store.try_admit("https://a.test/x")
    assert not store.try_admit("https://a.test/x")
    # exact string match, no normalisation
    assert store.try_admit("https://a.test/x/")
    assert len(store) == 2
    assert "https://a.test/x" in store


def test_try_admit_under_concurrent_callers():
    store = VisitedStore()

    async def contender():
        await asyncio.sleep(0)
        return store.try_admit("https://a.test/race")

    async def run():
        return await asyncio.gather(*(contender() for _ in range(50)))

    results = asyncio.run(run())
    assert results.count(True) == 1


def test_sessions_do_not_share_visited_state():
    a = CrawlSession(seed="https://a.test", target_domain="a.test")
    b = CrawlSession(seed="https://b.test", target_domain="b.test")
    assert a.visited.try_admit("https://shared.test/")
    assert b.visited.try_admit("https://shared.test/")


def test_record_counts_outcomes():
    s = CrawlSession(seed="https://a.test", target_domain="a.test")
    s.record(OutcomeKind.OFF_DOMAIN)
    s.record(OutcomeKind.OFF_DOMAIN)
    s.add_product("https://a.test/p/1")
    s.add_product("https://a.test/p/1")
    assert s.outcomes[OutcomeKind.OFF_DOMAIN] == 2
    assert s.products == {"https://a.test/p/1"}
