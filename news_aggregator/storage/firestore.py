"""Firestore document store via the Firebase Admin SDK."""

import hashlib
from datetime import timedelta
from typing import Any, Optional

import firebase_admin
from firebase_admin import credentials, firestore
from google.api_core.exceptions import AlreadyExists
from google.cloud.firestore_v1.base_query import FieldFilter

from ..config import FIREBASE_CREDENTIALS, FIREBASE_PROJECT_ID, NEWS_COLLECTION
from ..utils import get_logger, utcnow
from .base import DuplicateArticleError, NewsStore, StoreConfigurationError

logger = get_logger(__name__)

SOURCE_HEALTH_COLLECTION = "source_health"


def url_document_id(url: str) -> str:
    """Deterministic document id for a url, so the backend rejects a second create."""
    return hashlib.sha256(url.encode("utf-8")).hexdigest()[:32]


def init_firebase_app(
    credentials_path: str = FIREBASE_CREDENTIALS, project_id: str = FIREBASE_PROJECT_ID
) -> firebase_admin.App:
    """Return the default Firebase app, initializing it once."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    options = {"projectId": project_id} if project_id else None
    try:
        cred = credentials.Certificate(credentials_path) if credentials_path else None
        app = firebase_admin.initialize_app(cred, options)
    except (ValueError, OSError) as e:
        raise StoreConfigurationError(f"Failed to initialize Firebase Admin: {e}") from e

    logger.info("Firebase Admin initialized")
    return app


class FirestoreNewsStore(NewsStore):
    """News collection stored in Cloud Firestore."""

    def __init__(self, client=None, collection: str = NEWS_COLLECTION):
        if client is None:
            client = firestore.client(init_firebase_app())
        self.client = client
        self.collection = client.collection(collection)

    def find_by_url(self, url: str) -> Optional[dict[str, Any]]:
        docs = list(
            self.collection.where(filter=FieldFilter("url", "==", url)).limit(1).stream()
        )
        if not docs:
            return None
        return {"id": docs[0].id, **docs[0].to_dict()}

    def insert(self, document: dict[str, Any]) -> str:
        doc_ref = self.collection.document(url_document_id(document["url"]))
        try:
            doc_ref.create(document)
        except AlreadyExists as e:
            raise DuplicateArticleError(document["url"]) from e
        return doc_ref.id

    def list_recent(self, days: int, limit: int = 100) -> list[dict[str, Any]]:
        threshold = utcnow() - timedelta(days=days)
        query = (
            self.collection.where(filter=FieldFilter("publishedAt", ">=", threshold))
            .where(filter=FieldFilter("status", "==", "published"))
            .order_by("publishedAt", direction=firestore.Query.DESCENDING)
            .limit(limit)
        )
        return [{"id": doc.id, **doc.to_dict()} for doc in query.stream()]

    def log_source_health(
        self, source_name: str, status: str, error_message: Optional[str] = None
    ) -> None:
        self.client.collection(SOURCE_HEALTH_COLLECTION).add({
            "sourceName": source_name,
            "status": status,
            "errorMessage": error_message,
            "checkedAt": utcnow(),
        })
