from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from shorts_planner.storage import JsonFileStore


class TestJsonFileStore(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.store = JsonFileStore(self.root)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_create_assigns_id_and_timestamps(self) -> None:
        rec = self.store.create("topics", {"project_id": "p1", "title": "One", "id": "caller-supplied"})

        self.assertNotEqual(rec["id"], "caller-supplied")
        self.assertEqual(rec["created_at"], rec["updated_at"])
        self.assertEqual(self.store.find_by_id("topics", rec["id"]), rec)

        on_disk = json.loads((self.root / "topics.json").read_text(encoding="utf-8"))
        self.assertEqual(on_disk, [rec])

    def test_find_by_parent_id(self) -> None:
        self.store.create_many(
            "topics",
            [
                {"project_id": "p1", "title": "One"},
                {"project_id": "p2", "title": "Two"},
                {"project_id": "p1", "title": "Three"},
            ],
        )
        titles = [r["title"] for r in self.store.find_by_parent_id("topics", "p1")]
        self.assertEqual(titles, ["One", "Three"])
        self.assertEqual(self.store.find_by_parent_id("scripts", "t1"), [])

    def test_update_and_delete(self) -> None:
        rec = self.store.create("scripts", {"topic_id": "t1", "version": 1})

        updated = self.store.update("scripts", rec["id"], {"version": 2, "id": "nope", "created_at": "never"})
        self.assertEqual(updated["version"], 2)
        self.assertEqual(updated["id"], rec["id"])
        self.assertEqual(updated["created_at"], rec["created_at"])

        self.store.delete("scripts", rec["id"])
        self.assertIsNone(self.store.find_by_id("scripts", rec["id"]))

    def test_update_missing_record(self) -> None:
        with self.assertRaises(KeyError):
            self.store.update("scripts", "missing", {"version": 2})

    def test_unknown_collection(self) -> None:
        with self.assertRaises(ValueError):
            self.store.create("videos", {"title": "x"})

    def test_create_many_with_nothing_writes_nothing(self) -> None:
        self.assertEqual(self.store.create_many("topics", []), [])
        self.assertFalse((self.root / "topics.json").exists())


if __name__ == "__main__":
    unittest.main()
