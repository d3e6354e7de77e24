import unittest
from unittest import mock

from mongolet.config import StoreOptions
from mongolet.engine import DocumentStore
from mongolet.errors import StorageError


class InMemoryStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = DocumentStore(StoreOptions("test", in_memory=True))
        for name in ("foo", "bar", "baz"):
            self.store.insert({"name": name})

    def test_in_memory_store_has_no_storage(self) -> None:
        self.assertIsNone(self.store.storage)
        self.assertTrue(self.store.save())

    def test_count(self) -> None:
        self.assertEqual(self.store.count({}), 3)
        self.assertEqual(self.store.count({"name": {"$like": "BA"}}), 2)
        self.assertEqual(len(self.store), 3)

    def test_find(self) -> None:
        docs = self.store.find({"name": {"$like": "BA"}})
        self.assertEqual([doc["name"] for doc in docs], ["bar", "baz"])
        self.assertTrue(all("_id" in doc for doc in docs))

    def test_find_with_projection(self) -> None:
        self.assertEqual(self.store.find({}, {"name": 1}), [
            {"name": "foo"},
            {"name": "bar"},
            {"name": "baz"},
        ])

    def test_find_with_invalid_projection(self) -> None:
        with self.assertLogs("mongolet", level="WARNING"):
            self.assertEqual(self.store.find({}, {"name": 1, "_id": 0}), [])

    def test_find_returns_copies(self) -> None:
        doc = self.store.find({"name": "foo"})[0]
        doc["name"] = "changed"
        self.assertEqual(self.store.count({"name": "foo"}), 1)

    def test_find_one(self) -> None:
        doc = self.store.find_one({"name": {"$like": "BA"}}, {"name": 1})
        self.assertEqual(doc, {"name": "bar"})
        self.assertIsNone(self.store.find_one({"name": "qux"}))

    def test_find_one_by_id(self) -> None:
        doc_id = self.store.insert({"_id": "known", "name": "qux"})
        self.assertEqual(doc_id, "known")
        self.assertEqual(self.store.find_one({"_id": "known"}), {"_id": "known", "name": "qux"})

    def test_insert_duplicate_id(self) -> None:
        self.store.insert({"_id": "1", "name": "a"})
        with self.assertLogs("mongolet", level="WARNING"):
            self.assertIsNone(self.store.insert({"_id": "1", "name": "b"}))
        self.assertEqual(self.store.count({}), 4)
        self.assertEqual(self.store.find_one({"_id": "1"})["name"], "a")

    def test_remove_one(self) -> None:
        self.assertEqual(self.store.remove({"name": "foo"}), 1)
        self.assertEqual(self.store.count({}), 2)

    def test_remove_nothing(self) -> None:
        self.assertEqual(self.store.remove({"name": "qux"}), 0)

    def test_remove_multi(self) -> None:
        self.assertEqual(self.store.remove({"name": {"$exists": 1}}, multi=True), 3)
        self.assertEqual(self.store.count({}), 0)

    def test_remove_many_without_multi_does_nothing(self) -> None:
        with self.assertLogs("mongolet", level="WARNING"):
            self.assertEqual(self.store.remove({"name": {"$exists": 1}}), 0)
        self.assertEqual(self.store.count({}), 3)

    def test_update_one(self) -> None:
        self.assertEqual(self.store.update({"name": "foo"}, {"$set": {"name": "qux"}}), 1)
        self.assertEqual(self.store.count({"name": "qux"}), 1)

    def test_update_multi(self) -> None:
        result = self.store.update(
            {"name": {"$exists": 1}}, {"$set": {"name": "qux"}}, multi=True
        )
        self.assertEqual(result, 3)
        self.assertEqual(self.store.count({"name": "qux"}), 3)

    def test_update_many_without_multi_does_nothing(self) -> None:
        with self.assertLogs("mongolet", level="WARNING"):
            result = self.store.update({"name": {"$exists": 1}}, {"$set": {"name": "qux"}})
        self.assertEqual(result, 0)
        self.assertEqual(self.store.count({"name": "qux"}), 0)

    def test_update_with_invalid_query(self) -> None:
        with self.assertLogs("mongolet", level="WARNING"):
            self.assertEqual(self.store.update({"name": {"$bad": 1}}, {"$set": {"x": 1}}), 0)

    def test_update_cannot_change_id(self) -> None:
        doc_id = self.store.find_one({"name": "foo"})["_id"]
        with self.assertLogs("mongolet", level="WARNING"):
            self.assertEqual(self.store.update({"_id": doc_id}, {"$set": {"_id": "x"}}), 0)
        self.assertEqual(self.store.find_one({"_id": doc_id})["name"], "foo")


class SaveTriggerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.storage = mock.Mock()
        self.store = DocumentStore(StoreOptions("test"), storage=self.storage)
        self.store.insert({"_id": "1", "val": 1}, skip_save=True)
        self.store.insert({"_id": "2", "val": 2}, skip_save=True)

    def test_skip_save(self) -> None:
        self.store.update({"_id": "1"}, {"$inc": {"val": 1}}, skip_save=True)
        self.store.remove({"_id": "1"}, skip_save=True)
        self.storage.save.assert_not_called()

    def test_insert_saves(self) -> None:
        self.store.insert({"val": 3})
        self.storage.save.assert_called_once_with(
            self.store.options.to_dict(), self.store.docs
        )

    def test_rejected_insert_does_not_save(self) -> None:
        with self.assertLogs("mongolet", level="WARNING"):
            self.store.insert({"_id": "1"})
        self.storage.save.assert_not_called()

    def test_update_saves_only_on_change(self) -> None:
        self.store.update({"_id": "1"}, {"$unset": {"val": 0}})
        self.storage.save.assert_not_called()
        self.store.update({"_id": "1"}, {"$unset": {"val": 1}})
        self.storage.save.assert_called_once()

    def test_remove_saves(self) -> None:
        self.store.remove({"_id": "2"})
        self.storage.save.assert_called_once()

    def test_guarded_remove_does_not_save(self) -> None:
        with self.assertLogs("mongolet", level="WARNING"):
            self.store.remove({})
        self.storage.save.assert_not_called()

    def test_save_failure_is_reported(self) -> None:
        self.storage.save.side_effect = StorageError("disk full")
        with self.assertLogs("mongolet", level="ERROR"):
            self.assertFalse(self.store.save())
        with self.assertLogs("mongolet", level="ERROR"):
            self.assertEqual(self.store.remove({"_id": "2"}), 1)
        self.assertEqual(self.store.count({}), 1)


if __name__ == "__main__":
    unittest.main()
