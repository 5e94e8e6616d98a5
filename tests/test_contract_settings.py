from __future__ import annotations

import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from ganttly.model import GanttSettings
from ganttly.settings import (
    JsonFileSettingsStore,
    default_settings_path,
    load_settings_file,
    merge_settings,
    settings_from_dict,
    settings_to_dict,
)
from ganttly.validate import SettingsValidationError, validate_settings


class TestSettingsContract(unittest.TestCase):
    def test_defaults(self) -> None:
        s = settings_from_dict({})
        self.assertTrue(s.show_subitems)
        self.assertEqual(s.sort_direction, "asc")
        self.assertIsNone(s.timeline_column)
        self.assertEqual(s.selected_boards, ())

    def test_lenient_conversion(self) -> None:
        s = settings_from_dict(
            {
                "timelineColumn": "tl",
                "sortDirection": "sideways",
                "showSubitems": "yes",
                "selectedBoards": [101, "202", "", None],
            }
        )
        self.assertEqual(s.timeline_column, "tl")
        self.assertEqual(s.sort_direction, "asc")
        self.assertTrue(s.show_subitems)
        self.assertEqual(s.selected_boards, ("101", "202"))
        self.assertEqual(settings_from_dict(["not", "a", "dict"]), GanttSettings())

    def test_camel_case_on_disk(self) -> None:
        s = GanttSettings(sort_by_column="name", sort_direction="desc", show_subitems=False, selected_boards=("1",))
        d = settings_to_dict(s)
        self.assertEqual(
            sorted(d.keys()),
            sorted(
                [
                    "timelineColumn",
                    "colorByColumn",
                    "groupByColumn",
                    "sortByColumn",
                    "sortDirection",
                    "showSubitems",
                    "selectedBoards",
                ]
            ),
        )
        self.assertEqual(settings_from_dict(d), s)

    def test_merge_ignores_none(self) -> None:
        base = GanttSettings(sort_by_column="name")
        out = merge_settings(base, sort_by_column=None, show_subitems=False, selected_boards=[1, 2])
        self.assertEqual(out.sort_by_column, "name")
        self.assertFalse(out.show_subitems)
        self.assertEqual(out.selected_boards, ("1", "2"))

    def test_env_path(self) -> None:
        with patch.dict(os.environ, {"GANTTLY_SETTINGS": "/tmp/x/settings.json"}):
            self.assertEqual(default_settings_path(), Path("/tmp/x/settings.json"))


class TestSettingsStoreContract(unittest.TestCase):
    def test_roundtrip_and_missing_file(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            store = JsonFileSettingsStore(Path(td) / "nested" / "settings.json")
            self.assertIsNone(store.load())

            s = GanttSettings(color_by_column="status", selected_boards=("101",))
            store.save(s)
            self.assertEqual(store.load(), s)
            self.assertFalse(store.path.with_suffix(".json.tmp").exists())

    def test_corrupt_file_is_advisory(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            p = Path(td) / "settings.json"
            p.write_text("{nope", encoding="utf-8")
            self.assertIsNone(JsonFileSettingsStore(p).load())

    def test_strict_file_load(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            p = Path(td) / "settings.json"
            p.write_text(json.dumps({"sortDirection": "down"}), encoding="utf-8")
            with self.assertRaises(SettingsValidationError):
                load_settings_file(p)

            p.write_text(json.dumps({"sortByColumn": "start_date", "sortDirection": "desc"}), encoding="utf-8")
            s = load_settings_file(p)
            self.assertEqual((s.sort_by_column, s.sort_direction), ("start_date", "desc"))


class TestSettingsValidationContract(unittest.TestCase):
    def test_reports_each_problem(self) -> None:
        errs = validate_settings(
            {"colour": "x", "timelineColumn": 3, "showSubitems": "no", "selectedBoards": "101"}
        )
        self.assertEqual(len(errs), 4)
        self.assertTrue(any("unknown option 'colour'" in e for e in errs))

    def test_valid_settings(self) -> None:
        self.assertEqual(validate_settings(settings_to_dict(GanttSettings())), [])
        self.assertEqual(validate_settings("x"), ["settings: must be a JSON object"])


if __name__ == "__main__":
    unittest.main(verbosity=2)
