"""ganttly.api

Stable *library* entrypoint for ganttly.

Policy:
  - Only names listed in __all__ are considered public API.
  - Everything else is internal and may change without notice.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from ganttly.builder import PipelineContext, build_task, build_tasks, derive_all, derive_tasks
from ganttly.columns import ColumnOption, available_columns
from ganttly.compare import compare_tasks, sort_tasks
from ganttly.decode import decode, decode_field
from ganttly.describe import format_date_range, mirror_summary, tooltip_lines
from ganttly.fields import extract_color, extract_group, extract_progress, extract_timeline_range
from ganttly.hierarchy import flatten_groups, group_tasks
from ganttly.interaction import DragController, DragError, DragUpdate, apply_update, candidate_range
from ganttly.layout import compute_layout, compute_window, position_bar, timeline_header
from ganttly.mirror import resolve_mirror_mappings, resolve_mirror_data
from ganttly.model import Board, GanttSettings, Item, Task
from ganttly.monday import MondayClient
from ganttly.normalize import normalize_boards, normalize_items
from ganttly.payload import build_payload
from ganttly.refresh import RefreshResult, RetrievalFailure, load_context, refresh
from ganttly.settings import JsonFileSettingsStore, settings_from_dict, settings_to_dict
from ganttly.snapshot import SnapshotSource
from ganttly.source import SourceError
from ganttly.validate import assert_valid_settings, assert_valid_snapshot

JsonPath = Union[str, Path]


def tasks_from_snapshot(
    path: JsonPath,
    settings: Optional[GanttSettings] = None,
    *,
    board_ids: Optional[Sequence[str]] = None,
) -> List[Task]:
    """Derive sorted tasks from an offline snapshot file in one call."""
    s = settings or GanttSettings()
    result = refresh(SnapshotSource.from_file(path), s, board_ids=board_ids)
    return derive_all(result.context, s)


def load_settings_json(path: JsonPath) -> GanttSettings:
    """Load a settings file, validating it first."""
    raw: Dict[str, Any] = json.loads(Path(path).read_text(encoding="utf-8", errors="replace"))
    assert_valid_settings(raw)
    return settings_from_dict(raw)


# --- Public API exports (locked by contract tests) ------------------------
# Keep changes intentional and reviewable.
# Prefer append-only unless you are intentionally reshaping the public surface.
_PUBLIC_EXPORTS = (
    "Board",
    "ColumnOption",
    "DragController",
    "DragError",
    "DragUpdate",
    "GanttSettings",
    "Item",
    "JsonFileSettingsStore",
    "MondayClient",
    "PipelineContext",
    "RefreshResult",
    "RetrievalFailure",
    "SnapshotSource",
    "SourceError",
    "Task",
    "apply_update",
    "assert_valid_settings",
    "assert_valid_snapshot",
    "available_columns",
    "build_payload",
    "build_task",
    "build_tasks",
    "candidate_range",
    "compare_tasks",
    "compute_layout",
    "compute_window",
    "decode",
    "decode_field",
    "derive_all",
    "derive_tasks",
    "extract_color",
    "extract_group",
    "extract_progress",
    "extract_timeline_range",
    "flatten_groups",
    "format_date_range",
    "group_tasks",
    "load_context",
    "load_settings_json",
    "mirror_summary",
    "normalize_boards",
    "normalize_items",
    "position_bar",
    "refresh",
    "resolve_mirror_data",
    "resolve_mirror_mappings",
    "settings_from_dict",
    "settings_to_dict",
    "sort_tasks",
    "tasks_from_snapshot",
    "timeline_header",
    "tooltip_lines",
)

__all__ = [n for n in _PUBLIC_EXPORTS if n in globals()]
# --- /Public API exports --------------------------------------------------
