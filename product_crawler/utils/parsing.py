from __future__ import annotations

from typing import List
from urllib.parse import urljoin, urlparse, urlunparse

from bs4 import BeautifulSoup

from ..errors import InvalidURL

PRODUCT_URL_PATTERNS = ("/product/", "/item/", "/p/", "/products/")
VALID_SCHEMES = ("http", "https")


def normalize_url(url: str) -> str:
    """
    Normalize URL by removing fragments.
    """
    parts = list(urlparse(url))
    parts[5] = ""  # strip fragment
    return urlunparse(parts)


def extract_links(html: str, base_url: str) -> List[str]:
    """
    Extract absolute links from an HTML string, in document order, without duplicates.
    """
    soup = BeautifulSoup(html, "html.parser")
    out: List[str] = []
    seen = set()
    for a in soup.select("a[href]"):
        href = a.get("href")
        if not href:
            continue
        link = normalize_url(urljoin(base_url, href.strip()))
        if link not in seen:
            seen.add(link)
            out.append(link)
    return out


# ---- Domain scope ----------------------------------------------------------

def host_of(url: str) -> str:
    """Return the host of ``url`` or raise :class:`InvalidURL`."""
    try:
        host = urlparse(url).hostname
    except ValueError as exc:
        raise InvalidURL(url) from exc
    if not host:
        raise InvalidURL(url)
    return host


def normalize_host(host: str) -> str:
    if host.startswith("www."):
        host = host[4:]
    return host.lower()


def same_domain(url: str, target_domain: str) -> bool:
    """True if ``url`` lives on ``target_domain``, ignoring a leading ``www.``."""
    try:
        host = host_of(url)
    except InvalidURL:
        return False
    return normalize_host(host) == normalize_host(target_domain)


def is_valid_scheme(url: str) -> bool:
    return urlparse(url).scheme in VALID_SCHEMES


# ---- Classification --------------------------------------------------------

def is_product_url(url: str) -> bool:
    """
    A URL is a product page when its path contains one of the known product
    segments. Literal, case-sensitive match.
    """
    path = urlparse(url).path
    return any(p in path for p in PRODUCT_URL_PATTERNS)
