"""Feed collectors."""

from .base import Article, Collector, FeedSource
from .rss import FeedFetchError, RSSCollector

__all__ = ["Article", "Collector", "FeedSource", "FeedFetchError", "RSSCollector"]
