"""
In-process stand-in for the subset of firestore.AsyncClient the app uses.
Selected with USE_IN_MEMORY_BACKENDS for local development and tests.
"""
import copy
import uuid
from datetime import datetime, timezone
from typing import Optional

from google.api_core.exceptions import NotFound


class InMemorySnapshot:
    def __init__(self, reference: "InMemoryDocumentReference", data: Optional[dict]):
        self.reference = reference
        self.id = reference.id
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> Optional[dict]:
        return copy.deepcopy(self._data) if self._data is not None else None


class InMemoryDocumentReference:
    def __init__(self, store: dict, doc_id: str, client: "InMemoryFirestore"):
        self._store = store
        self._client = client
        self.id = doc_id

    async def get(self) -> InMemorySnapshot:
        return InMemorySnapshot(self, self._store.get(self.id))

    async def set(self, data: dict):
        self._client.writes += 1
        self._store[self.id] = copy.deepcopy(data)

    async def update(self, data: dict):
        if self.id not in self._store:
            raise NotFound(f"No document to update: {self.id}")
        self._client.writes += 1
        self._store[self.id].update(copy.deepcopy(data))

    async def delete(self):
        self._client.writes += 1
        self._store.pop(self.id, None)


class InMemoryQuery:
    """Equality filters and limit, the only query shapes the app issues."""

    def __init__(self, collection: "InMemoryCollectionReference", filters=None, limit_to=None):
        self._collection = collection
        self._filters = filters or []
        self._limit = limit_to

    def where(self, *, filter):
        if filter.op_string != "==":
            raise ValueError(f"Unsupported operator: {filter.op_string}")
        return InMemoryQuery(self._collection, self._filters + [(filter.field_path, filter.value)], self._limit)

    def limit(self, count: int):
        return InMemoryQuery(self._collection, self._filters, count)

    def _matches(self, data: dict) -> bool:
        return all(data.get(field_path) == value for field_path, value in self._filters)

    async def stream(self):
        emitted = 0
        store = self._collection._store
        for doc_id in list(store):
            if self._limit is not None and emitted >= self._limit:
                return
            data = store.get(doc_id)
            if data is None or not self._matches(data):
                continue
            emitted += 1
            yield InMemorySnapshot(self._collection.document(doc_id), data)


class InMemoryCollectionReference(InMemoryQuery):
    def __init__(self, store: dict, client: "InMemoryFirestore", name: str):
        self._store = store
        self._client = client
        self.id = name
        super().__init__(self)

    def document(self, document_id: Optional[str] = None) -> InMemoryDocumentReference:
        return InMemoryDocumentReference(self._store, document_id or uuid.uuid4().hex[:20], self._client)

    async def add(self, data: dict):
        doc_ref = self.document()
        await doc_ref.set(data)
        return datetime.now(timezone.utc), doc_ref


class InMemoryFirestore:
    """Dict-backed Firestore double. `writes` counts set/update/delete calls."""

    def __init__(self):
        self._collections: dict = {}
        self.writes = 0

    def collection(self, name: str) -> InMemoryCollectionReference:
        store = self._collections.setdefault(name, {})
        return InMemoryCollectionReference(store, self, name)

    def seed(self, name: str, documents: dict):
        """Load {doc_id: data} into a collection without counting writes."""
        store = self._collections.setdefault(name, {})
        for doc_id, data in documents.items():
            store[doc_id] = copy.deepcopy(data)

    def dump(self, name: str) -> dict:
        return copy.deepcopy(self._collections.get(name, {}))

    def close(self):
        self._collections.clear()
