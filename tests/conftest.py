"""Shared fixtures: a fixed clock, temporary stores and feeds served over a mock transport."""

from datetime import datetime, timezone
from email.utils import format_datetime
from xml.sax.saxutils import escape

import httpx
import pytest

from news_aggregator.collectors import FeedSource, RSSCollector
from news_aggregator.storage import SQLiteNewsStore

NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)

RSS_NAMESPACES = (
    'xmlns:media="http://search.yahoo.com/mrss/" '
    'xmlns:content="http://purl.org/rss/1.0/modules/content/"'
)


def _rss_item(item: dict) -> str:
    parts = []
    if "title" in item:
        parts.append(f"<title>{escape(item['title'])}</title>")
    if "link" in item:
        parts.append(f"<link>{escape(item['link'])}</link>")
    if "description" in item:
        parts.append(f"<description>{escape(item['description'])}</description>")
    if "published" in item:
        parts.append(f"<pubDate>{format_datetime(item['published'])}</pubDate>")
    parts.append(item.get("extra", ""))
    return "<item>" + "".join(parts) + "</item>"


def build_rss(items: list[dict], title: str = "Test Feed") -> str:
    body = "".join(_rss_item(item) for item in items)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f"<rss version=\"2.0\" {RSS_NAMESPACES}><channel>"
        f"<title>{escape(title)}</title><link>https://example.com/</link>"
        "<description>Test</description>"
        f"{body}</channel></rss>"
    )


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_feed():
    """Build an RSS 2.0 document from item dicts."""
    return build_rss


@pytest.fixture
def store(tmp_path) -> SQLiteNewsStore:
    return SQLiteNewsStore(tmp_path / "news.db")


@pytest.fixture
def feed_routes():
    """Maps url -> feed body, HTTP status code, or exception class raised by the transport."""
    return {}


@pytest.fixture
def http_client(feed_routes):
    def handler(request: httpx.Request) -> httpx.Response:
        route = feed_routes.get(str(request.url))
        if route is None:
            return httpx.Response(404, text="not found")
        if isinstance(route, int):
            return httpx.Response(route, text="error")
        if isinstance(route, type) and issubclass(route, Exception):
            raise route("connection refused", request=request)
        return httpx.Response(200, text=route, headers={"Content-Type": "application/rss+xml"})

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def collector_factory(http_client, now):
    """RSSCollector factory bound to the mock transport and the fixed clock."""

    def factory(source: FeedSource) -> RSSCollector:
        return RSSCollector(source, client=http_client, clock=lambda: now)

    return factory


def make_source(name: str, category: str = "tax", tags=("India", "tax")) -> FeedSource:
    slug = name.lower().replace(" ", "-")
    return FeedSource(name=name, url=f"https://feeds.example.com/{slug}.xml", category=category, tags=tuple(tags))


@pytest.fixture
def source_factory():
    return make_source
