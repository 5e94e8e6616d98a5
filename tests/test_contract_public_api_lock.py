from __future__ import annotations

import unittest


class TestPublicApiLockContract(unittest.TestCase):
    def test_api_module_exports_are_present(self) -> None:
        import ganttly.api as api

        self.assertTrue(hasattr(api, "__all__"))
        self.assertIsInstance(api.__all__, (list, tuple))
        self.assertGreaterEqual(len(api.__all__), 3)

        for name in api.__all__:
            self.assertIsInstance(name, str)
            self.assertTrue(hasattr(api, name), f"ganttly.api missing public name: {name}")
            self.assertIsNotNone(getattr(api, name), f"ganttly.api {name} is None")

    def test_every_listed_export_is_defined(self) -> None:
        import ganttly.api as api

        self.assertEqual(list(api.__all__), list(api._PUBLIC_EXPORTS))

    def test_package_reexports_match_api_all(self) -> None:
        import ganttly
        import ganttly.api as api

        for name in api.__all__:
            self.assertTrue(hasattr(ganttly, name), f"ganttly package does not re-export: {name}")
            self.assertIs(getattr(ganttly, name), getattr(api, name), f"ganttly.{name} must be same object as ganttly.api.{name}")

    def test_exports_are_sorted(self) -> None:
        import ganttly.api as api

        self.assertIsInstance(api._PUBLIC_EXPORTS, tuple)
        self.assertEqual(len(set(api._PUBLIC_EXPORTS)), len(api._PUBLIC_EXPORTS))
        self.assertEqual(list(api._PUBLIC_EXPORTS), sorted(api._PUBLIC_EXPORTS))

    def test_every_module_imports(self) -> None:
        import importlib
        import pkgutil

        import ganttly

        names = sorted(m.name for m in pkgutil.walk_packages(ganttly.__path__, prefix="ganttly."))
        self.assertIn("ganttly.util.dates", names)
        self.assertIn("ganttly.cli", names)
        for name in names:
            mod = importlib.import_module(name)
            self.assertEqual(mod.__name__, name)

    def test_tasks_from_snapshot(self) -> None:
        from pathlib import Path

        import ganttly

        fixture = Path(__file__).resolve().parents[1] / "tests" / "fixtures" / "board_snapshot.json"
        tasks = ganttly.tasks_from_snapshot(fixture, ganttly.GanttSettings(sort_by_column="start_date"))
        self.assertEqual([t.id for t in tasks], ["1", "1a", "2"])


if __name__ == "__main__":
    unittest.main(verbosity=2)
