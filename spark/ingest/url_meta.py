"""Link preview extraction for article elements."""
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

from spark.app.config import get_settings

logger = logging.getLogger("spark.ingest.url_meta")

_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

_TITLE_KEYS = ("og:title", "twitter:title")
_DESCRIPTION_KEYS = ("og:description", "twitter:description", "description")


@dataclass(frozen=True)
class UrlMeta:
    title: Optional[str] = None
    description: Optional[str] = None


def get_domain(url: str) -> str:
    """Host of a URL without a leading "www.", tolerant of missing schemes."""
    candidate = url.strip()
    if "://" not in candidate:
        candidate = f"https://{candidate}"
    host = urlparse(candidate).hostname or url.strip()
    return host.removeprefix("www.")


def _meta_content(soup: BeautifulSoup, key: str) -> Optional[str]:
    tag = soup.find("meta", attrs={"property": key}) or soup.find("meta", attrs={"name": key})
    if tag is None:
        return None
    return _clean(tag.get("content"))


def _clean(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    cleaned = " ".join(value.split())
    return cleaned or None


def parse_url_meta(html: str) -> UrlMeta:
    """Pick title and description from Open Graph, Twitter card, then plain HTML."""
    soup = BeautifulSoup(html, "html.parser")

    title = None
    for key in _TITLE_KEYS:
        title = _meta_content(soup, key)
        if title:
            break
    if not title and soup.title and soup.title.string:
        title = _clean(soup.title.string)

    description = None
    for key in _DESCRIPTION_KEYS:
        description = _meta_content(soup, key)
        if description:
            break

    return UrlMeta(title=title, description=description)


def fetch_url_meta(url: str) -> UrlMeta:
    """Fetch a page and extract its preview metadata. Never raises."""
    settings = get_settings()
    try:
        response = httpx.get(
            url,
            headers=_HEADERS,
            timeout=settings.url_meta_timeout,
            follow_redirects=True,
        )
        html = response.text
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.error("URL fetch error for %s: %s", url, e)
        return UrlMeta()

    meta = parse_url_meta(html)
    logger.debug("Fetched link preview for %s (title=%s)", get_domain(url), bool(meta.title))
    return meta
