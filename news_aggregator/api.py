"""HTTP endpoints: on-demand aggregation trigger and the news read/manual-entry API."""

from datetime import datetime, timezone
from typing import Any, Callable, Optional

from flask import Flask, jsonify, request

from .aggregator import CollectorFactory, run_aggregation
from .collectors import FeedSource, RSSCollector
from .config import FETCH_DELAY_SECONDS
from .storage import DuplicateArticleError, NewsStore, get_store
from .utils import get_logger, utcnow

logger = get_logger(__name__)

MAX_ARTICLES = 100
MANUAL_SOURCE = "NRI Wealth Partners"


def serialize_article(document: dict[str, Any]) -> dict[str, Any]:
    """JSON-safe copy of a stored article with ISO-8601 timestamps."""
    out = dict(document)
    for key in ("publishedAt", "createdAt"):
        value = out.get(key)
        if isinstance(value, datetime):
            if value.tzinfo is None:
                value = value.replace(tzinfo=timezone.utc)
            out[key] = value.isoformat()
    return out


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def build_manual_article(entry: dict[str, Any], category: Optional[str]) -> dict[str, Any]:
    """Article document for an entry written by hand in the admin console."""
    now = utcnow()
    published = entry.get("publishedAt")
    return {
        "title": entry["title"],
        "description": entry.get("description", ""),
        "category": category or "general",
        "source": entry.get("source") or MANUAL_SOURCE,
        "url": entry.get("url") or "",
        "publishedAt": _parse_timestamp(published) if published else now,
        "imageUrl": entry.get("imageUrl") or None,
        "tags": entry.get("tags") or [],
        "status": "published",
        "createdAt": now,
        "createdBy": "manual",
    }


def create_app(
    store_factory: Callable[[], NewsStore] = get_store,
    sources: Optional[dict[str, list[FeedSource]]] = None,
    delay: float = FETCH_DELAY_SECONDS,
    collector_factory: CollectorFactory = RSSCollector,
) -> Flask:
    """Build the Flask app around a store factory."""
    app = Flask(__name__)

    @app.route("/", methods=["GET"])
    def health():
        return "News Aggregation Service is running", 200

    @app.route("/", methods=["POST"])
    @app.route("/api/news/aggregate", methods=["POST"])
    def aggregate():
        logger.info("Aggregation trigger received")
        store = None
        try:
            store = store_factory()
            result = run_aggregation(
                store=store,
                sources=sources,
                delay=delay,
                collector_factory=collector_factory,
            )
            return jsonify(result), 200
        except Exception as e:
            logger.error(f"News aggregation failed: {e}")
            return jsonify({"success": False, "error": str(e)}), 500
        finally:
            if store is not None:
                store.close()

    @app.route("/api/news", methods=["GET"])
    def list_news():
        try:
            days = int(request.args.get("days", "7"))
        except ValueError:
            return jsonify({"error": "days must be an integer"}), 400

        store = None
        try:
            store = store_factory()
            articles = [serialize_article(a) for a in store.list_recent(days, limit=MAX_ARTICLES)]
        except Exception as e:
            logger.error(f"Fetch news error: {e}")
            return jsonify({"success": False, "error": str(e)}), 500
        finally:
            if store is not None:
                store.close()

        return jsonify({
            "success": True,
            "articles": articles,
            "count": len(articles),
            "daysRange": days,
        })

    @app.route("/api/news", methods=["POST"])
    def create_news():
        payload = request.get_json(silent=True) or {}
        entry = payload.get("manualEntry")
        if not isinstance(entry, dict):
            return jsonify({"error": "Manual entry data is required"}), 400
        if not entry.get("title"):
            return jsonify({"error": "Manual entry title is required"}), 400

        try:
            document = build_manual_article(entry, payload.get("category"))
        except (TypeError, ValueError) as e:
            return jsonify({"error": f"Invalid publishedAt: {e}"}), 400

        store = None
        try:
            store = store_factory()
            article_id = store.insert(document)
        except DuplicateArticleError as e:
            return jsonify({"error": str(e)}), 409
        except Exception as e:
            logger.error(f"Create news error: {e}")
            return jsonify({"error": "Failed to create news article", "details": str(e)}), 500
        finally:
            if store is not None:
                store.close()

        logger.info(f"News article created manually: {article_id}")
        return jsonify({
            "success": True,
            "article": serialize_article({"id": article_id, **document}),
        })

    return app
