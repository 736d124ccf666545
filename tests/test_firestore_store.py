"""Firestore store against an in-memory stand-in for the client."""

from datetime import timedelta

import pytest
from google.api_core.exceptions import AlreadyExists

from news_aggregator.storage import DuplicateArticleError
from news_aggregator.storage.firestore import FirestoreNewsStore, url_document_id
from news_aggregator.utils import utcnow


class FakeSnapshot:
    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data

    def to_dict(self):
        return dict(self._data)


class FakeDocument:
    def __init__(self, collection, doc_id):
        self.collection = collection
        self.id = doc_id

    def create(self, data):
        if self.id in self.collection.docs:
            raise AlreadyExists("document exists")
        self.collection.docs[self.id] = dict(data)


OPERATORS = {
    "==": lambda a, b: a == b,
    ">=": lambda a, b: a is not None and a >= b,
}


class FakeQuery:
    def __init__(self, collection, filters=(), order=None, limit=None):
        self.collection = collection
        self.filters = list(filters)
        self._order = order
        self._limit = limit

    def where(self, filter):
        return FakeQuery(self.collection, self.filters + [filter], self._order, self._limit)

    def order_by(self, field_path, direction="ASCENDING"):
        return FakeQuery(self.collection, self.filters, (field_path, direction), self._limit)

    def limit(self, count):
        return FakeQuery(self.collection, self.filters, self._order, count)

    def stream(self):
        matches = [
            FakeSnapshot(doc_id, data)
            for doc_id, data in self.collection.docs.items()
            if all(OPERATORS[f.op_string](data.get(f.field_path), f.value) for f in self.filters)
        ]
        if self._order:
            field_path, direction = self._order
            matches.sort(key=lambda snap: snap.to_dict()[field_path], reverse=direction == "DESCENDING")
        return iter(matches[: self._limit] if self._limit else matches)


class FakeCollection(FakeQuery):
    def __init__(self):
        self.docs = {}
        self.added = []
        super().__init__(self)

    def document(self, doc_id):
        return FakeDocument(self, doc_id)

    def add(self, data):
        self.added.append(data)


class FakeClient:
    def __init__(self):
        self.collections = {}

    def collection(self, name):
        return self.collections.setdefault(name, FakeCollection())


@pytest.fixture
def firestore_store():
    return FirestoreNewsStore(client=FakeClient())


def test_document_id_is_stable_per_url():
    assert url_document_id("https://example.com/a") == url_document_id("https://example.com/a")
    assert url_document_id("https://example.com/a") != url_document_id("https://example.com/b")


def test_insert_then_find(firestore_store):
    doc_id = firestore_store.insert({"url": "https://example.com/a", "title": "A"})

    found = firestore_store.find_by_url("https://example.com/a")

    assert found == {"id": doc_id, "url": "https://example.com/a", "title": "A"}
    assert firestore_store.find_by_url("https://example.com/b") is None


def test_second_create_for_same_url_is_a_duplicate(firestore_store):
    firestore_store.insert({"url": "https://example.com/a", "title": "A"})

    with pytest.raises(DuplicateArticleError):
        firestore_store.insert({"url": "https://example.com/a", "title": "A, edited"})


def test_source_health_goes_to_its_own_collection(firestore_store):
    firestore_store.log_source_health("IRCC Canada", "error", "timeout")

    [entry] = firestore_store.client.collection("source_health").added
    assert entry["sourceName"] == "IRCC Canada"
    assert entry["errorMessage"] == "timeout"


def _seed(store, url, age, status="published"):
    store.insert({"url": url, "status": status, "publishedAt": utcnow() - age})


def test_list_recent_filters_and_orders(firestore_store):
    _seed(firestore_store, "https://example.com/old", timedelta(days=10))
    _seed(firestore_store, "https://example.com/mid", timedelta(days=2))
    _seed(firestore_store, "https://example.com/new", timedelta(hours=1))
    _seed(firestore_store, "https://example.com/draft", timedelta(hours=2), status="draft")

    recent = firestore_store.list_recent(days=7)

    assert [doc["url"] for doc in recent] == ["https://example.com/new", "https://example.com/mid"]
    assert recent[0]["id"] == url_document_id("https://example.com/new")


def test_list_recent_respects_limit(firestore_store):
    for hours in range(5):
        _seed(firestore_store, f"https://example.com/{hours}", timedelta(hours=hours))

    recent = firestore_store.list_recent(days=7, limit=2)

    assert [doc["url"] for doc in recent] == ["https://example.com/0", "https://example.com/1"]
