from fastapi import testclient

from product_crawler.apis.app import create_app

from conftest import FakeSite, make_engine


def _client(site: FakeSite) -> testclient.TestClient:
    return testclient.TestClient(create_app(engine=make_engine(site)))


def test_health(shop_site):
    with _client(shop_site) as client:
        resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_crawl_returns_one_entry_per_input(shop_site):
    with _client(shop_site) as client:
        resp = client.post("/crawl", json=["https://shop.test", "not-a-url"])

    assert resp.status_code == 200
    assert resp.json() == {
        "https://shop.test": ["https://shop.test/product/1"],
        "not-a-url": [],
    }
    assert not any("elsewhere.test" in url for url in shop_site.fetched)


def test_unreachable_domain_yields_empty_set():
    site = FakeSite()  # every page 404s
    with _client(site) as client:
        resp = client.post("/crawl", json=["https://gone.test"])
    assert resp.status_code == 200
    assert resp.json() == {"https://gone.test": []}


def test_rejects_non_list_body(shop_site):
    with _client(shop_site) as client:
        resp = client.post("/crawl", json={"domains": ["https://shop.test"]})
    assert resp.status_code == 422


def test_crawl_served_under_legacy_prefix(shop_site):
    with _client(shop_site) as client:
        resp = client.post("/api/crawler/crawl", json=["https://shop.test"])
    assert resp.status_code == 200
    assert resp.json() == {"https://shop.test": ["https://shop.test/product/1"]}
