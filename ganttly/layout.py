# ganttly/layout.py
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from .hierarchy import group_tasks
from .model import Task
from .util.dates import add_days, days_between

PAD_DAYS = 7
MIN_PX_PER_DAY = 20.0
MIN_AVAILABLE_WIDTH = 800.0
TASK_LIST_WIDTH = 350.0
MIN_BAR_FRACTION = 0.5
LABEL_MIN_WIDTH = 60.0
DEFAULT_VIEWPORT_WIDTH = 1280.0

MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


@dataclass(frozen=True)
class TimelineWindow:
    start: dt.date
    end: dt.date
    pixels_per_day: float

    @property
    def total_days(self) -> int:
        return days_between(self.start, self.end)

    @property
    def width_px(self) -> float:
        return (self.total_days + 1) * self.pixels_per_day


@dataclass(frozen=True)
class BarGeometry:
    offset_px: float
    width_px: float


@dataclass(frozen=True)
class LayoutRow:
    task: Task
    group: str
    bar: BarGeometry
    is_subtask: bool
    show_label: bool


@dataclass(frozen=True)
class MonthSpan:
    key: str        # YYYY-MM
    label: str      # "Mar 2024"
    days: int
    width_px: float


@dataclass(frozen=True)
class DayCell:
    day: dt.date
    is_weekend: bool


@dataclass(frozen=True)
class LayoutResult:
    window: Optional[TimelineWindow]
    rows: Tuple[LayoutRow, ...] = ()
    groups: Tuple[str, ...] = ()

    @property
    def empty(self) -> bool:
        return self.window is None or not self.rows


def available_width(viewport_width: float) -> float:
    return max(MIN_AVAILABLE_WIDTH, float(viewport_width) - TASK_LIST_WIDTH)


def compute_window(tasks: Sequence[Task], viewport_width: float = DEFAULT_VIEWPORT_WIDTH) -> Optional[TimelineWindow]:
    """Padded date window over every task that has both dates; None if there is none."""
    dates: List[dt.date] = []
    for t in tasks:
        if t.start is None or t.end is None:
            continue
        dates.append(t.start)
        dates.append(t.end)
    if not dates:
        return None

    start = add_days(min(dates), -PAD_DAYS)
    end = add_days(max(dates), PAD_DAYS)
    total_days = days_between(start, end)
    ppd = max(MIN_PX_PER_DAY, available_width(viewport_width) / total_days)
    return TimelineWindow(start=start, end=end, pixels_per_day=ppd)


def position_bar(task: Task, window: TimelineWindow) -> BarGeometry:
    if task.start is None or task.end is None:
        raise ValueError(f"task {task.id!r} has no complete date range")
    ppd = window.pixels_per_day
    offset = days_between(window.start, task.start) * ppd
    duration_days = days_between(task.start, task.end) + 1
    width = max(ppd * duration_days, ppd * MIN_BAR_FRACTION)
    return BarGeometry(offset_px=offset, width_px=width)


def compute_layout(tasks: Sequence[Task], viewport_width: float = DEFAULT_VIEWPORT_WIDTH) -> LayoutResult:
    """Window + one positioned row per dated task, in grouped order."""
    dated = [t for t in tasks if t.dated]
    window = compute_window(dated, viewport_width)
    if window is None:
        return LayoutResult(window=None)

    grouped = group_tasks(dated)
    rows: List[LayoutRow] = []
    for label, bucket in grouped.items():
        for t in bucket:
            bar = position_bar(t, window)
            rows.append(
                LayoutRow(
                    task=t,
                    group=label,
                    bar=bar,
                    is_subtask=bool(t.parent_id),
                    show_label=bar.width_px > LABEL_MIN_WIDTH,
                )
            )
    return LayoutResult(window=window, rows=tuple(rows), groups=tuple(grouped.keys()))


def timeline_header(window: TimelineWindow) -> Tuple[Tuple[MonthSpan, ...], Tuple[DayCell, ...]]:
    """Month spans and day cells from window.start to window.end inclusive."""
    days: List[DayCell] = []
    month_days: Dict[str, int] = {}
    month_label: Dict[str, str] = {}

    d = window.start
    while d <= window.end:
        key = f"{d.year:04d}-{d.month:02d}"
        if key not in month_days:
            month_days[key] = 0
            month_label[key] = f"{MONTH_ABBR[d.month - 1]} {d.year}"
        month_days[key] += 1
        days.append(DayCell(day=d, is_weekend=d.weekday() >= 5))
        d = add_days(d, 1)

    months = tuple(
        MonthSpan(key=k, label=month_label[k], days=n, width_px=n * window.pixels_per_day)
        for k, n in month_days.items()
    )
    return months, tuple(days)
