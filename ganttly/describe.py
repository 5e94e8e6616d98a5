# ganttly/describe.py
from __future__ import annotations

import datetime as dt
from typing import List

from .layout import MONTH_ABBR
from .model import Task
from .util.dates import days_between


def _mon_dd(d: dt.date) -> str:
    return f"{MONTH_ABBR[d.month - 1]} {d.day:02d}"


def format_date_range(task: Task) -> str:
    """e.g. "Jan 10 - Jan 15 (6 days)"; empty when either date is missing."""
    if task.start is None or task.end is None:
        return ""
    n = days_between(task.start, task.end) + 1
    return f"{_mon_dd(task.start)} - {_mon_dd(task.end)} ({n} day{'' if n == 1 else 's'})"


def _fmt_progress(p: float) -> str:
    return str(int(p)) if float(p).is_integer() else f"{p:g}"


def tooltip_lines(task: Task) -> List[str]:
    lines = [task.name]
    rng = format_date_range(task)
    if rng:
        lines.append(rng)
    if task.progress > 0:
        lines.append(f"Progress: {_fmt_progress(task.progress)}%")
    if task.mirror_data:
        lines.append("")
        lines.append("Mirror Data:")
        for d in task.mirror_data.values():
            lines.append(f"{d.source_field_title}: {d.display_value}")
    return lines


def mirror_summary(task: Task) -> str:
    """Notice text listing a task's mirrored values; empty when it has none."""
    if not task.mirror_data:
        return ""
    parts = [f"Mirror data for {task.name}:", ""]
    for d in task.mirror_data.values():
        parts.append(f"{d.source_field_title}: {d.display_value}")
        parts.append(f"Source: {d.source_board_name}")
        parts.append("")
    return "\n".join(parts).rstrip("\n")
