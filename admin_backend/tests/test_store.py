import unittest
from unittest.mock import MagicMock

from google.api_core import exceptions as google_exceptions

from admin_backend.store import (
    ARRAY_CONTAINS,
    EQUALS,
    DocumentNotFound,
    FirestoreDocumentStore,
    InMemoryDocumentStore,
    QueryFilter,
    StoreError,
    StoreUnavailable,
)


class InMemoryDocumentStoreTests(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryDocumentStore()

    def test_add_get_returns_copies(self):
        doc_id = self.store.add("things", {"tags": ["a"]})
        fetched = self.store.get("things", doc_id)
        fetched["tags"].append("b")
        self.assertEqual(self.store.get("things", doc_id), {"tags": ["a"]})

    def test_set_merge_and_replace(self):
        self.store.set("things", "t1", {"a": 1, "b": 2})
        self.store.set("things", "t1", {"b": 3}, merge=True)
        self.assertEqual(self.store.get("things", "t1"), {"a": 1, "b": 3})
        self.store.set("things", "t1", {"c": 4})
        self.assertEqual(self.store.get("things", "t1"), {"c": 4})

    def test_update_missing_raises(self):
        with self.assertRaises(DocumentNotFound):
            self.store.update("things", "nope", {"a": 1})

    def test_query_filters_order_and_limit(self):
        self.store.set("things", "a", {"kind": "x", "rank": 2, "tags": ["red"]})
        self.store.set("things", "b", {"kind": "x", "rank": 1, "tags": ["blue"]})
        self.store.set("things", "c", {"kind": "y", "rank": 0, "tags": ["red"]})
        self.store.set("things", "d", {"kind": "x"})

        ranked = self.store.query(
            "things", [QueryFilter("kind", EQUALS, "x")], order_by="rank"
        )
        self.assertEqual([doc_id for doc_id, _ in ranked], ["b", "a"])

        red = self.store.query(
            "things",
            [QueryFilter("tags", ARRAY_CONTAINS, "red")],
            order_by="rank",
            descending=True,
            limit=1,
        )
        self.assertEqual([doc_id for doc_id, _ in red], ["a"])

    def test_unavailable_store_raises(self):
        self.store.available = False
        with self.assertRaises(StoreUnavailable):
            self.store.get("things", "a")
        self.store.reset()
        self.assertIsNone(self.store.get("things", "a"))


class FirestoreDocumentStoreTests(unittest.TestCase):
    def setUp(self):
        self.client = MagicMock()
        self.collection = self.client.collection.return_value
        self.store = FirestoreDocumentStore(self.client)

    def test_get_missing_document(self):
        snapshot = MagicMock(exists=False)
        self.collection.document.return_value.get.return_value = snapshot
        self.assertIsNone(self.store.get("categories", "c1"))
        self.client.collection.assert_called_with("categories")
        self.collection.document.assert_called_with("c1")

    def test_add_returns_generated_id(self):
        doc_ref = MagicMock(id="generated")
        self.collection.add.return_value = (None, doc_ref)
        self.assertEqual(self.store.add("categories", {"name": "x"}), "generated")
        self.collection.add.assert_called_once_with({"name": "x"})

    def test_query_builds_filters_order_and_limit(self):
        query = self.collection.where.return_value
        ordered = query.order_by.return_value
        limited = ordered.limit.return_value
        snapshot = MagicMock(id="c1")
        snapshot.to_dict.return_value = {"name": "x"}
        limited.stream.return_value = [snapshot]

        results = self.store.query(
            "categories",
            [QueryFilter("isActive", EQUALS, True)],
            order_by="order",
            limit=5,
        )

        self.assertEqual(results, [("c1", {"name": "x"})])
        field_filter = self.collection.where.call_args.kwargs["filter"]
        self.assertEqual(field_filter.field_path, "isActive")
        self.assertEqual(field_filter.op_string, "==")
        self.assertEqual(field_filter.value, True)
        query.order_by.assert_called_once()
        ordered.limit.assert_called_once_with(5)

    def test_errors_are_translated(self):
        document = self.collection.document.return_value
        document.update.side_effect = google_exceptions.NotFound("missing")
        with self.assertRaises(DocumentNotFound):
            self.store.update("categories", "c1", {"name": "x"})

        document.get.side_effect = google_exceptions.ServiceUnavailable("down")
        with self.assertRaises(StoreUnavailable):
            self.store.get("categories", "c1")

        document.delete.side_effect = google_exceptions.PermissionDenied("no")
        with self.assertRaises(StoreError):
            self.store.delete("categories", "c1")


if __name__ == "__main__":
    unittest.main()
