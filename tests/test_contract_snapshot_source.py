from __future__ import annotations

import json
import unittest
from pathlib import Path

from ganttly.snapshot import SnapshotSource
from ganttly.source import SourceError
from ganttly.validate import SnapshotValidationError, validate_snapshot

REPO_ROOT = Path(__file__).resolve().parents[1]
FIXTURE = REPO_ROOT / "tests" / "fixtures" / "board_snapshot.json"


class TestSnapshotSourceContract(unittest.TestCase):
    def setUp(self) -> None:
        self.source = SnapshotSource.from_file(FIXTURE)

    def test_boards(self) -> None:
        self.assertEqual([b.id for b in self.source.fetch_boards()], ["101", "202"])
        self.assertEqual([b.id for b in self.source.fetch_boards(["202", "999"])], ["202"])
        roadmap = self.source.fetch_boards(["101"])[0]
        self.assertEqual([g.title for g in roadmap.groups], ["Planned", "Done"])
        self.assertTrue(roadmap.fields[-1].archived)

    def test_items_and_limit(self) -> None:
        items = self.source.fetch_items("101")
        self.assertEqual([i.id for i in items], ["1", "2", "3", "4"])
        self.assertEqual([s.id for s in items[0].subitems], ["1a", "1b"])
        self.assertEqual(len(self.source.fetch_items("101", limit=2)), 2)

    def test_unknown_board_items_raise(self) -> None:
        with self.assertRaises(SourceError):
            self.source.fetch_items("999")

    def test_catalog(self) -> None:
        cat = self.source.fetch_field_catalog("202")
        self.assertEqual(cat.board_name, "Teams")
        self.assertIsNone(self.source.fetch_field_catalog("999"))


class TestSnapshotValidationContract(unittest.TestCase):
    def test_fixture_is_valid(self) -> None:
        data = json.loads(FIXTURE.read_text(encoding="utf-8"))
        self.assertEqual(validate_snapshot(data), [])

    def test_invalid_snapshots(self) -> None:
        self.assertTrue(validate_snapshot([]))
        self.assertTrue(validate_snapshot({"boards": {}}))
        self.assertTrue(validate_snapshot({"boards": [{"id": ""}]}))
        self.assertTrue(validate_snapshot({"boards": [], "items": {"1": {}}}))
        with self.assertRaises(SnapshotValidationError):
            SnapshotSource({"boards": "nope"})


if __name__ == "__main__":
    unittest.main(verbosity=2)
