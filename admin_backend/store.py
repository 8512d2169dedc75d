"""
Document store abstraction for Firestore and an in-memory test implementation.
"""

from __future__ import annotations

import contextlib
import copy
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Protocol, Sequence

from firebase_admin import firestore
from google.api_core import exceptions as google_exceptions
from google.cloud.firestore_v1.base_query import FieldFilter

EQUALS = "=="
ARRAY_CONTAINS = "array_contains"


class StoreError(Exception):
    """A document store call failed."""


class StoreUnavailable(StoreError):
    """The document store could not be reached."""


class DocumentNotFound(StoreError):
    """An update targeted a document that does not exist."""


@dataclass(frozen=True)
class QueryFilter:
    field: str
    op: str
    value: Any


class DocumentStore(Protocol):
    """The operations the collection managers need from a document store."""

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        ...

    def add(self, collection: str, data: dict) -> str:
        ...

    def set(
        self, collection: str, doc_id: str, data: dict, merge: bool = False
    ) -> None:
        ...

    def update(self, collection: str, doc_id: str, fields: dict) -> None:
        ...

    def delete(self, collection: str, doc_id: str) -> None:
        ...

    def query(
        self,
        collection: str,
        filters: Sequence[QueryFilter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[tuple[str, dict]]:
        ...


class InMemoryDocumentStore:
    """Simple in-memory document store for development and tests."""

    def __init__(self):
        self.collections: Dict[str, Dict[str, dict]] = {}
        self.available = True

    def _collection(self, collection: str) -> Dict[str, dict]:
        if not self.available:
            raise StoreUnavailable(f"Document store unavailable for {collection}")
        return self.collections.setdefault(collection, {})

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.collections.clear()
        self.available = True

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        stored = self._collection(collection).get(doc_id)
        return copy.deepcopy(stored) if stored is not None else None

    def add(self, collection: str, data: dict) -> str:
        doc_id = uuid.uuid4().hex[:20]
        self._collection(collection)[doc_id] = copy.deepcopy(data)
        return doc_id

    def set(
        self, collection: str, doc_id: str, data: dict, merge: bool = False
    ) -> None:
        docs = self._collection(collection)
        if merge and doc_id in docs:
            docs[doc_id].update(copy.deepcopy(data))
        else:
            docs[doc_id] = copy.deepcopy(data)

    def update(self, collection: str, doc_id: str, fields: dict) -> None:
        docs = self._collection(collection)
        if doc_id not in docs:
            raise DocumentNotFound(f"No document {collection}/{doc_id}")
        docs[doc_id].update(copy.deepcopy(fields))

    def delete(self, collection: str, doc_id: str) -> None:
        self._collection(collection).pop(doc_id, None)

    def query(
        self,
        collection: str,
        filters: Sequence[QueryFilter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[tuple[str, dict]]:
        results = [
            (doc_id, copy.deepcopy(data))
            for doc_id, data in self._collection(collection).items()
            if all(_matches(data, f) for f in filters)
        ]
        if order_by:
            # Like Firestore, documents without the order field are excluded.
            results = [item for item in results if order_by in item[1]]
            results.sort(key=lambda item: item[1][order_by], reverse=descending)
        if limit is not None:
            results = results[:limit]
        return results


def _matches(data: dict, query_filter: QueryFilter) -> bool:
    if query_filter.field not in data:
        return False
    value = data[query_filter.field]
    if query_filter.op == EQUALS:
        return value == query_filter.value
    if query_filter.op == ARRAY_CONTAINS:
        return isinstance(value, list) and query_filter.value in value
    raise ValueError(f"Unsupported filter operator: {query_filter.op}")


@contextlib.contextmanager
def _translate_errors(collection: str) -> Iterator[None]:
    try:
        yield
    except (
        google_exceptions.ServiceUnavailable,
        google_exceptions.DeadlineExceeded,
        google_exceptions.RetryError,
    ) as e:
        raise StoreUnavailable(f"Firestore unavailable for {collection}: {e}") from e
    except google_exceptions.NotFound as e:
        raise DocumentNotFound(str(e)) from e
    except google_exceptions.GoogleAPICallError as e:
        raise StoreError(f"Firestore call failed for {collection}: {e}") from e


class FirestoreDocumentStore:
    """
    Firestore-backed implementation. Accepts any Firestore client, e.g. the one
    returned by `firebase_admin.firestore.client()`.
    """

    def __init__(self, client):
        self.client = client

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        with _translate_errors(collection):
            snapshot = self.client.collection(collection).document(doc_id).get()
        if not snapshot.exists:
            return None
        return snapshot.to_dict() or {}

    def add(self, collection: str, data: dict) -> str:
        with _translate_errors(collection):
            _, doc_ref = self.client.collection(collection).add(data)
        return doc_ref.id

    def set(
        self, collection: str, doc_id: str, data: dict, merge: bool = False
    ) -> None:
        with _translate_errors(collection):
            self.client.collection(collection).document(doc_id).set(data, merge=merge)

    def update(self, collection: str, doc_id: str, fields: dict) -> None:
        with _translate_errors(collection):
            self.client.collection(collection).document(doc_id).update(fields)

    def delete(self, collection: str, doc_id: str) -> None:
        with _translate_errors(collection):
            self.client.collection(collection).document(doc_id).delete()

    def query(
        self,
        collection: str,
        filters: Sequence[QueryFilter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[tuple[str, dict]]:
        query = self.client.collection(collection)
        for query_filter in filters:
            query = query.where(
                filter=FieldFilter(query_filter.field, query_filter.op, query_filter.value)
            )
        if order_by:
            direction = (
                firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            )
            query = query.order_by(order_by, direction=direction)
        if limit is not None:
            query = query.limit(limit)
        with _translate_errors(collection):
            return [(snapshot.id, snapshot.to_dict() or {}) for snapshot in query.stream()]
