from __future__ import annotations

import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest.mock import patch

from ganttly import cli

REPO_ROOT = Path(__file__).resolve().parents[1]
FIXTURE = REPO_ROOT / "tests" / "fixtures" / "board_snapshot.json"


class TestCliContract(unittest.TestCase):
    def setUp(self) -> None:
        self._td = tempfile.TemporaryDirectory()
        self.tmp = Path(self._td.name)
        # keep the user's real settings file out of the way
        self._env = patch.dict(os.environ, {"GANTTLY_SETTINGS": str(self.tmp / "settings.json")})
        self._env.start()

    def tearDown(self) -> None:
        self._env.stop()
        self._td.cleanup()

    def _run(self, *argv: str) -> str:
        buf = io.StringIO()
        with redirect_stdout(buf):
            cli.main(list(argv))
        return buf.getvalue().strip()

    def test_snapshot_to_json(self) -> None:
        out = self.tmp / "layout.json"
        printed = self._run("--snapshot", str(FIXTURE), "--out", str(out), "--sort-by", "name", "--sort-direction", "desc")
        self.assertEqual(printed, os.path.abspath(str(out)))

        data = json.loads(out.read_text(encoding="utf-8"))
        self.assertEqual([t["id"] for t in data["tasks"]], ["2", "1a", "1"])
        self.assertEqual(data["cfg"]["sortDirection"], "desc")

    def test_no_subitems_flag(self) -> None:
        out = self.tmp / "layout.json"
        self._run("--snapshot", str(FIXTURE), "--out", str(out), "--no-subitems")
        data = json.loads(out.read_text(encoding="utf-8"))
        self.assertEqual(sorted(t["id"] for t in data["tasks"]), ["1", "2"])

    def test_default_out_is_build_relative_to_cwd(self) -> None:
        old_cwd = Path.cwd()
        try:
            os.chdir(self.tmp)
            self._run("--snapshot", str(FIXTURE))
        finally:
            os.chdir(old_cwd)
        self.assertTrue((self.tmp / "build" / "ganttly_layout.json").exists())

    def test_save_settings(self) -> None:
        settings_path = self.tmp / "settings.json"
        self._run("--snapshot", str(FIXTURE), "--out", str(self.tmp / "o.json"), "--group-by", "owner_team", "--save-settings")
        saved = json.loads(settings_path.read_text(encoding="utf-8"))
        self.assertEqual(saved["groupByColumn"], "owner_team")

        # stored settings are picked up on the next run
        out = self.tmp / "again.json"
        self._run("--snapshot", str(FIXTURE), "--out", str(out))
        data = json.loads(out.read_text(encoding="utf-8"))
        self.assertEqual(data["cfg"]["groupByColumn"], "owner_team")

    def test_invalid_settings_file(self) -> None:
        bad = self.tmp / "bad.json"
        bad.write_text(json.dumps({"sortDirection": "sideways"}), encoding="utf-8")
        with self.assertRaises(SystemExit) as ctx:
            cli.main(["--snapshot", str(FIXTURE), "--settings", str(bad)])
        self.assertIn("Invalid settings", str(ctx.exception))

    def test_invalid_snapshot(self) -> None:
        bad = self.tmp / "snap.json"
        bad.write_text(json.dumps({"boards": "nope"}), encoding="utf-8")
        with self.assertRaises(SystemExit) as ctx:
            cli.main(["--snapshot", str(bad)])
        self.assertIn("Invalid snapshot", str(ctx.exception))

    def test_missing_token(self) -> None:
        with patch.dict(os.environ, {"GANTTLY_API_TOKEN": "", "MONDAY_API_TOKEN": ""}):
            with self.assertRaises(SystemExit) as ctx:
                cli.main(["--out", str(self.tmp / "x.json")])
        self.assertIn("No API token", str(ctx.exception))


if __name__ == "__main__":
    unittest.main(verbosity=2)
