"""News collection storage backends."""

from pathlib import Path
from typing import Optional

from ..config import DB_PATH, STORE_BACKEND
from .base import DuplicateArticleError, NewsStore, StoreConfigurationError
from .sqlite import SQLiteNewsStore

__all__ = [
    "DuplicateArticleError",
    "NewsStore",
    "SQLiteNewsStore",
    "StoreConfigurationError",
    "get_store",
]


def get_store(backend: str = STORE_BACKEND, db_path: Optional[Path] = None) -> NewsStore:
    """Open the configured news store."""
    if backend == "sqlite":
        return SQLiteNewsStore(db_path or DB_PATH)
    if backend == "firestore":
        # Firebase Admin is only imported when a deployment asks for it
        from .firestore import FirestoreNewsStore
        return FirestoreNewsStore()
    raise StoreConfigurationError(f"Unknown store backend: {backend!r}")
