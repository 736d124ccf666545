"""SQLite document store."""

import json
import sqlite3
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Optional

from ..utils import get_logger, utcnow
from .base import DuplicateArticleError, NewsStore

logger = get_logger(__name__)

DATETIME_FIELDS = ("publishedAt", "createdAt")


def _encode(document: dict[str, Any]) -> str:
    doc = dict(document)
    for key in DATETIME_FIELDS:
        if isinstance(doc.get(key), datetime):
            doc[key] = doc[key].isoformat()
    return json.dumps(doc, ensure_ascii=False)


def _decode(row: sqlite3.Row) -> dict[str, Any]:
    doc = json.loads(row["document"])
    for key in DATETIME_FIELDS:
        if isinstance(doc.get(key), str):
            doc[key] = datetime.fromisoformat(doc[key])
    doc["id"] = str(row["id"])
    return doc


class SQLiteNewsStore(NewsStore):
    """SQLite-backed news collection; each article is a JSON document with a unique url."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _get_conn(self) -> sqlite3.Connection:
        """Get a database connection."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        """Initialize database schema."""
        with self._get_conn() as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS news (
                    id INTEGER PRIMARY KEY,
                    url TEXT NOT NULL UNIQUE,
                    status TEXT,
                    published_at TIMESTAMP,
                    document TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS source_health (
                    id INTEGER PRIMARY KEY,
                    source_name TEXT,
                    checked_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    status TEXT,
                    error_message TEXT
                );

                CREATE INDEX IF NOT EXISTS idx_news_published ON news(published_at);
            """)
        logger.info(f"Database initialized at {self.db_path}")

    def find_by_url(self, url: str) -> Optional[dict[str, Any]]:
        """Look up an article by its url."""
        with self._get_conn() as conn:
            row = conn.execute(
                "SELECT id, document FROM news WHERE url = ? LIMIT 1", (url,)
            ).fetchone()
            return _decode(row) if row is not None else None

    def insert(self, document: dict[str, Any]) -> str:
        """Insert an article; the url column rejects duplicates."""
        published_at = document.get("publishedAt")
        if isinstance(published_at, datetime):
            published_at = published_at.isoformat(timespec="microseconds")

        try:
            with self._get_conn() as conn:
                cursor = conn.execute(
                    """
                    INSERT INTO news (url, status, published_at, document)
                    VALUES (?, ?, ?, ?)
                    """,
                    (document["url"], document.get("status"), published_at, _encode(document)),
                )
                return str(cursor.lastrowid)
        except sqlite3.IntegrityError as e:
            raise DuplicateArticleError(document["url"]) from e

    def list_recent(self, days: int, limit: int = 100) -> list[dict[str, Any]]:
        """Published articles newer than the threshold, newest first."""
        threshold = (utcnow() - timedelta(days=days)).isoformat(timespec="microseconds")
        with self._get_conn() as conn:
            rows = conn.execute(
                """
                SELECT id, document FROM news
                WHERE status = 'published' AND published_at >= ?
                ORDER BY published_at DESC
                LIMIT ?
                """,
                (threshold, limit),
            ).fetchall()
            return [_decode(row) for row in rows]

    def count(self) -> int:
        """Number of stored articles."""
        with self._get_conn() as conn:
            return conn.execute("SELECT COUNT(*) FROM news").fetchone()[0]

    def log_source_health(
        self, source_name: str, status: str, error_message: Optional[str] = None
    ) -> None:
        """Log source health check result."""
        with self._get_conn() as conn:
            conn.execute(
                """
                INSERT INTO source_health (source_name, status, error_message)
                VALUES (?, ?, ?)
                """,
                (source_name, status, error_message),
            )
