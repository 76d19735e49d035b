import json

import pytest

from product_crawler.config import CONFIG_SCHEMA_VERSION, CrawlConfig, migrate_config


def test_defaults_match_crawl_policy():
    cfg = CrawlConfig()
    assert cfg.max_depth == 2
    assert cfg.max_concurrency == 10
    assert cfg.request_delay == 2.0
    assert cfg.retry_delay == 5.0
    assert cfg.max_retries == 1
    assert cfg.robots_scheme == "https"
    assert cfg.schema_version == CONFIG_SCHEMA_VERSION


def test_from_env(monkeypatch):
    monkeypatch.setenv("CRAWLER_START_URLS", "https://a.test, https://b.test,")
    monkeypatch.setenv("CRAWLER_MAX_DEPTH", "3")
    monkeypatch.setenv("CRAWLER_REQUEST_DELAY", "0.5")
    monkeypatch.setenv("CRAWLER_SESSION_TIMEOUT", "60")
    cfg = CrawlConfig.from_env()
    assert cfg.start_urls == ["https://a.test", "https://b.test"]
    assert cfg.max_depth == 3
    assert cfg.request_delay == 0.5
    assert cfg.session_timeout == 60.0


def test_from_file_migrates_v1(tmp_path):
    path = tmp_path / "crawl.json"
    path.write_text(json.dumps({
        "start_urls": ["https://a.test"],
        "allowed_domains": ["a.test"],
        "extra_adapters": [],
        "retries": 2,
        "max_depth": 1,
    }))
    cfg = CrawlConfig.from_file(path)
    assert cfg.start_urls == ["https://a.test"]
    assert cfg.max_depth == 1
    assert cfg.max_retries == 1
    assert cfg.schema_version == 2


def test_migrate_leaves_current_schema_alone():
    raw = {"schema_version": CONFIG_SCHEMA_VERSION, "max_retries": 0}
    assert migrate_config(raw) == raw


@pytest.mark.parametrize("overrides", [
    {"start_urls": []},
    {"max_depth": -1},
    {"max_concurrency": 0},
    {"request_delay": -1.0},
    {"max_retries": -1},
    {"session_timeout": -5.0},
    {"max_frontier": -1},
    {"robots_scheme": "ftp"},
    {"output_path": ""},
])
def test_validate_rejects(overrides):
    values = {"start_urls": ["https://a.test"]}
    values.update(overrides)
    with pytest.raises(ValueError):
        CrawlConfig(**values).validate()


def test_validate_without_urls_for_api():
    CrawlConfig().validate(require_urls=False)


def test_to_dict_roundtrips_through_constructor():
    cfg = CrawlConfig(start_urls=["https://a.test"], max_depth=4)
    assert CrawlConfig(**cfg.to_dict()) == cfg
