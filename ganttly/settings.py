# ganttly/settings.py
from __future__ import annotations

import dataclasses
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .model import SORT_DIRECTIONS, GanttSettings
from .util.console import eprint
from .validate import assert_valid_settings, validate_settings

DEFAULT_SETTINGS = GanttSettings()


def _opt_str(v: Any) -> Optional[str]:
    if isinstance(v, (str, int)) and not isinstance(v, bool):
        s = str(v).strip()
        return s or None
    return None


def settings_from_dict(raw: Any) -> GanttSettings:
    """Lenient conversion from the persisted camelCase object; bad values fall back to defaults."""
    if not isinstance(raw, dict):
        return DEFAULT_SETTINGS

    sd = raw.get("sortDirection")
    sd = sd if sd in SORT_DIRECTIONS else DEFAULT_SETTINGS.sort_direction

    ss = raw.get("showSubitems")
    ss = ss if isinstance(ss, bool) else DEFAULT_SETTINGS.show_subitems

    boards = raw.get("selectedBoards") or []
    if not isinstance(boards, list):
        boards = []

    return GanttSettings(
        timeline_column=_opt_str(raw.get("timelineColumn")),
        color_by_column=_opt_str(raw.get("colorByColumn")),
        group_by_column=_opt_str(raw.get("groupByColumn")),
        sort_by_column=_opt_str(raw.get("sortByColumn")),
        sort_direction=sd,
        show_subitems=ss,
        selected_boards=tuple(b for b in (_opt_str(x) for x in boards) if b),
    )


def settings_to_dict(s: GanttSettings) -> Dict[str, Any]:
    return {
        "timelineColumn": s.timeline_column,
        "colorByColumn": s.color_by_column,
        "groupByColumn": s.group_by_column,
        "sortByColumn": s.sort_by_column,
        "sortDirection": s.sort_direction,
        "showSubitems": s.show_subitems,
        "selectedBoards": list(s.selected_boards),
    }


def merge_settings(base: GanttSettings, **overrides: Any) -> GanttSettings:
    """Copy of `base` with every non-None override applied."""
    changes = {k: v for k, v in overrides.items() if v is not None}
    if "selected_boards" in changes:
        changes["selected_boards"] = tuple(str(x) for x in changes["selected_boards"])
    return dataclasses.replace(base, **changes)


def default_settings_path() -> Path:
    env = (os.getenv("GANTTLY_SETTINGS", "") or "").strip()
    if env:
        return Path(env).expanduser()
    return Path.home() / ".ganttly" / "settings.json"


def load_settings_file(path: Union[str, Path]) -> GanttSettings:
    """Strict load for an explicitly requested file; raises on missing or invalid content."""
    raw = json.loads(Path(path).read_text(encoding="utf-8", errors="replace"))
    assert_valid_settings(raw)
    return settings_from_dict(raw)


class JsonFileSettingsStore:
    """Advisory settings persistence; I/O problems are reported, never raised."""

    def __init__(self, path: Optional[Union[str, Path]] = None) -> None:
        self.path = Path(path) if path is not None else default_settings_path()

    def load(self) -> Optional[GanttSettings]:
        if not self.path.exists():
            return None
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8", errors="replace"))
        except (OSError, ValueError) as ex:
            eprint(f"[ganttly.settings] WARN: cannot read {self.path}: {ex}")
            return None
        for msg in validate_settings(raw, label=str(self.path)):
            eprint(f"[ganttly.settings] WARN: {msg}")
        return settings_from_dict(raw)

    def save(self, settings: GanttSettings) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp.write_text(json.dumps(settings_to_dict(settings), indent=2) + "\n", encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as ex:
            eprint(f"[ganttly.settings] WARN: cannot save {self.path}: {ex}")
