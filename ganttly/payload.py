# ganttly/payload.py
from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Optional, Sequence

from .builder import count_by_board, derive_all
from .describe import format_date_range, tooltip_lines
from .hierarchy import group_tasks
from .layout import DEFAULT_VIEWPORT_WIDTH, LayoutResult, compute_layout, timeline_header
from .model import GanttSettings, Task
from .notify import Notifier
from .refresh import DEFAULT_ITEM_LIMIT, refresh
from .settings import settings_to_dict
from .source import BoardSource

SCHEMA_VERSION = 1
SCHEMA_NAME = "ganttly.payload"


def _iso(d: Optional[dt.date]) -> Optional[str]:
    return d.isoformat() if d is not None else None


def task_to_dict(task: Task) -> Dict[str, Any]:
    return {
        "id": task.id,
        "name": task.name,
        "start": _iso(task.start),
        "end": _iso(task.end),
        "progress": task.progress,
        "color": task.color,
        "group": task.group,
        "board_id": task.board_id,
        "board_name": task.board_name,
        "parent_id": task.parent_id,
        "date_range": format_date_range(task),
        "tooltip": tooltip_lines(task),
        "mirror_data": {
            fid: {
                "display_value": d.display_value,
                "source_field_title": d.source_field_title,
                "source_board_name": d.source_board_name,
                "type": d.type,
            }
            for fid, d in task.mirror_data.items()
        },
    }


def layout_to_dict(layout: LayoutResult) -> Dict[str, Any]:
    if layout.window is None:
        return {"window": None, "rows": [], "groups": [], "header": {"months": [], "days": []}}

    w = layout.window
    months, days = timeline_header(w)
    return {
        "window": {
            "start": w.start.isoformat(),
            "end": w.end.isoformat(),
            "pixels_per_day": w.pixels_per_day,
            "total_days": w.total_days,
            "width_px": w.width_px,
        },
        "rows": [
            {
                "task_id": r.task.id,
                "group": r.group,
                "offset_px": r.bar.offset_px,
                "width_px": r.bar.width_px,
                "is_subtask": r.is_subtask,
                "show_label": r.show_label,
            }
            for r in layout.rows
        ],
        "groups": list(layout.groups),
        "header": {
            "months": [{"key": m.key, "label": m.label, "days": m.days, "width_px": m.width_px} for m in months],
            "days": [{"day": c.day.isoformat(), "weekend": c.is_weekend} for c in days],
        },
    }


def payload_from_tasks(
    tasks: Sequence[Task],
    settings: GanttSettings,
    *,
    viewport_width: float = DEFAULT_VIEWPORT_WIDTH,
    board_count: int = 0,
    failures: Sequence[Dict[str, Any]] = (),
    now: Optional[dt.datetime] = None,
) -> Dict[str, Any]:
    """Assemble the JSON-ready payload for already derived tasks."""
    generated = now or dt.datetime.now(dt.timezone.utc)
    grouped = group_tasks(tasks)
    layout = compute_layout(tasks, viewport_width)

    cfg = settings_to_dict(settings)
    cfg["viewportWidth"] = float(viewport_width)

    return {
        "schema_version": SCHEMA_VERSION,
        "meta": {
            "schema": SCHEMA_NAME,
            "generated_at": generated.isoformat(),
            "board_count": int(board_count),
            "task_count": len(tasks),
            "tasks_by_board": count_by_board(tasks),
            "failures": list(failures),
        },
        "cfg": cfg,
        "tasks": [task_to_dict(t) for t in tasks],
        "groups": {label: [t.id for t in bucket] for label, bucket in grouped.items()},
        "layout": layout_to_dict(layout),
    }


def build_payload(
    source: BoardSource,
    settings: GanttSettings,
    *,
    viewport_width: float = DEFAULT_VIEWPORT_WIDTH,
    board_ids: Optional[Sequence[str]] = None,
    limit: int = DEFAULT_ITEM_LIMIT,
    notifier: Optional[Notifier] = None,
    now: Optional[dt.datetime] = None,
) -> Dict[str, Any]:
    """Run one refresh cycle against `source` and lay the derived tasks out.

    Retrieval failures never abort the build: they are listed under
    `meta.failures` and the affected boards simply contribute no tasks.
    """
    result = refresh(source, settings, board_ids=board_ids, limit=limit, notifier=notifier)
    tasks: List[Task] = derive_all(result.context, settings)
    failures = [
        {"operation": f.operation, "board_id": f.board_id, "message": f.message} for f in result.failures
    ]
    return payload_from_tasks(
        tasks,
        settings,
        viewport_width=viewport_width,
        board_count=len(result.context.boards),
        failures=failures,
        now=now,
    )
