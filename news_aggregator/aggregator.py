"""News aggregation: fetch every configured feed, then store the new articles."""

import asyncio
from dataclasses import dataclass, field
from typing import Callable, Optional

from .collectors import Article, Collector, FeedSource, RSSCollector
from .config import FETCH_DELAY_SECONDS, get_enabled_news_sources
from .storage import DuplicateArticleError, NewsStore, get_store
from .utils import get_logger

logger = get_logger(__name__)

CollectorFactory = Callable[[FeedSource], Collector]


@dataclass
class StoreStats:
    new_count: int = 0
    duplicate_count: int = 0


@dataclass
class AggregationStats:
    new_count: int = 0
    duplicate_count: int = 0
    total_fetched: int = 0
    failed_sources: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "newCount": self.new_count,
            "duplicateCount": self.duplicate_count,
            "totalFetched": self.total_fetched,
            "failedSources": list(self.failed_sources),
        }


def load_sources(table: Optional[dict[str, list[dict]]] = None) -> dict[str, list[FeedSource]]:
    """Turn a grouped source table into FeedSource objects."""
    if table is None:
        table = get_enabled_news_sources()
    return {
        group: [FeedSource.from_dict(s) for s in sources if s.get("enabled", True)]
        for group, sources in table.items()
    }


def _record_health(
    store: NewsStore, source_name: str, status: str, error: Optional[str] = None
) -> None:
    try:
        store.log_source_health(source_name, status, error)
    except Exception as e:
        logger.warning(f"[{source_name}] Could not record source health: {e}")


async def collect_from_source(
    collector: Collector, store: NewsStore, record_health: bool = True
) -> tuple[list[Article], Optional[str]]:
    """Collect from a single source. Returns (articles, error_source_name)."""
    try:
        articles = await collector.collect()
        if record_health:
            _record_health(store, collector.name, "ok")
        return articles, None
    except Exception as e:
        logger.error(f"[{collector.name}] Collection failed: {e}")
        if record_health:
            _record_health(store, collector.name, "error", str(e))
        return [], collector.name
    finally:
        await collector.close()


def store_articles(store: NewsStore, articles: list[Article]) -> StoreStats:
    """Insert articles whose url is not stored yet, one check-then-write at a time."""
    stats = StoreStats()

    for article in articles:
        try:
            if store.find_by_url(article.url) is not None:
                stats.duplicate_count += 1
                continue
            store.insert(article.to_document())
            stats.new_count += 1
        except DuplicateArticleError:
            # Another run stored the same url between our check and insert
            logger.warning(f"Article stored concurrently, skipping: {article.url}")
            stats.duplicate_count += 1
        except Exception as e:
            logger.error(f"Error storing article {article.url!r}: {e}")

    logger.info(f"Stored {stats.new_count} new articles, skipped {stats.duplicate_count} duplicates")
    return stats


async def aggregate_news(
    store: NewsStore,
    sources: Optional[dict[str, list[FeedSource]]] = None,
    delay: float = FETCH_DELAY_SECONDS,
    collector_factory: CollectorFactory = RSSCollector,
    dry_run: bool = False,
) -> tuple[AggregationStats, list[Article]]:
    """Fetch every source in order, then store the combined candidates once."""
    if sources is None:
        sources = load_sources()

    logger.info("Starting news aggregation")
    candidates: list[Article] = []
    stats = AggregationStats()
    first = True

    for group, group_sources in sources.items():
        logger.info(f"Fetching {group} news ({len(group_sources)} sources)")
        for source in group_sources:
            # Courtesy pause between feed hosts
            if not first and delay > 0:
                await asyncio.sleep(delay)
            first = False

            articles, error_source = await collect_from_source(
                collector_factory(source), store, record_health=not dry_run
            )
            candidates.extend(articles)
            if error_source:
                stats.failed_sources.append(error_source)

    stats.total_fetched = len(candidates)

    if dry_run:
        logger.info(f"DRY RUN - fetched {stats.total_fetched} candidates, nothing stored")
        return stats, candidates

    stored = store_articles(store, candidates)
    stats.new_count = stored.new_count
    stats.duplicate_count = stored.duplicate_count

    logger.info(
        f"News aggregation complete: fetched={stats.total_fetched} "
        f"new={stats.new_count} duplicates={stats.duplicate_count}"
    )
    if stats.failed_sources:
        logger.warning(f"Unavailable sources: {', '.join(stats.failed_sources)}")

    return stats, candidates


def run_aggregation(
    store: Optional[NewsStore] = None,
    sources: Optional[dict[str, list[FeedSource]]] = None,
    delay: float = FETCH_DELAY_SECONDS,
    collector_factory: CollectorFactory = RSSCollector,
) -> dict:
    """Scheduled entry point: run one aggregation and return the structured result.

    Errors that stop the whole run (such as a store that cannot be opened)
    propagate to the caller.
    """
    owns_store = store is None
    if store is None:
        store = get_store()

    try:
        stats, _ = asyncio.run(
            aggregate_news(store, sources=sources, delay=delay, collector_factory=collector_factory)
        )
    finally:
        if owns_store:
            store.close()

    return {
        "success": True,
        "message": "News aggregation completed",
        "stats": stats.to_dict(),
    }
