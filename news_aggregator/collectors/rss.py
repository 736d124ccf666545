"""RSS/Atom feed collector."""

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import feedparser
import httpx

from ..config import (
    DEFAULT_TITLE,
    FETCH_TIMEOUT_SECONDS,
    RECENCY_WINDOW_DAYS,
    USER_AGENT,
)
from ..utils import get_logger, strip_html, utcnow
from .base import Article, Collector, FeedSource

logger = get_logger(__name__)

ONE_DAY = timedelta(days=1)


class FeedFetchError(Exception):
    """A feed could not be retrieved or parsed."""


def age_in_days(published_at: datetime, now: datetime) -> float:
    """Fractional days between publication and now (negative for future dates)."""
    return (now - published_at) / ONE_DAY


def is_recent(published_at: datetime, now: datetime, window_days: float = RECENCY_WINDOW_DAYS) -> bool:
    """Inclusive recency check: an item exactly window_days old is kept."""
    return age_in_days(published_at, now) <= window_days


def parse_published(entry: dict) -> Optional[datetime]:
    """Publication time of a feed entry as aware UTC, if the feed gives one."""
    # feedparser normalizes both RSS pubDate and Atom published/updated to UTC
    for key in ("published_parsed", "updated_parsed"):
        parsed = entry.get(key)
        if parsed:
            try:
                return datetime(*parsed[:6], tzinfo=timezone.utc)
            except (TypeError, ValueError):
                continue
    return None


def extract_image_url(entry: dict) -> Optional[str]:
    """First image from media:content, then media:thumbnail, then an image enclosure."""
    for key in ("media_content", "media_thumbnail"):
        media = entry.get(key)
        if media:
            url = media[0].get("url")
            if url:
                return url

    for enclosure in entry.get("enclosures", []):
        if enclosure.get("type", "").startswith("image") and enclosure.get("href"):
            return enclosure["href"]

    return None


def extract_description(entry: dict) -> str:
    """First non-empty plain text of content snippet, summary and description."""
    content = entry.get("content") or []
    if content:
        snippet = strip_html(content[0].get("value", ""))
        if snippet:
            return snippet

    summary = strip_html(entry.get("summary", ""))
    if summary:
        return summary

    return strip_html(entry.get("description", ""))


class RSSCollector(Collector):
    """Collector for a single RSS or Atom feed source."""

    def __init__(
        self,
        source: FeedSource,
        client: Optional[httpx.AsyncClient] = None,
        window_days: float = RECENCY_WINDOW_DAYS,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.source = source
        self.window_days = window_days
        self.clock = clock
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=FETCH_TIMEOUT_SECONDS,
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
        )

    @property
    def name(self) -> str:
        return self.source.name

    async def collect(self) -> list[Article]:
        """Fetch the feed and return candidate articles inside the recency window."""
        try:
            response = await self.client.get(self.source.url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise FeedFetchError(f"HTTP error: {e}") from e

        feed = feedparser.parse(response.content)
        if feed.bozo and not feed.entries:
            raise FeedFetchError(f"Unreadable feed: {feed.get('bozo_exception')}")

        now = self.clock()
        articles = []
        stale = 0

        for entry in feed.entries:
            published_at = parse_published(entry) or now
            if not is_recent(published_at, now, self.window_days):
                stale += 1
                continue
            articles.append(self._build_article(entry, published_at, now))

        logger.info(f"[{self.name}] Collected {len(articles)} articles ({stale} older than {self.window_days:g} days)")
        return articles

    def _build_article(self, entry: dict, published_at: datetime, now: datetime) -> Article:
        """Build a candidate Article from a feed entry."""
        return Article(
            title=entry.get("title") or DEFAULT_TITLE,
            description=extract_description(entry),
            category=self.source.category,
            source=self.source.name,
            url=entry.get("link") or "",
            published_at=published_at,
            created_at=now,
            image_url=extract_image_url(entry),
            tags=list(self.source.tags),
        )

    async def close(self) -> None:
        """Close the HTTP client if this collector created it."""
        if self._owns_client:
            await self.client.aclose()
