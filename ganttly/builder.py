# ganttly/builder.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .compare import sort_tasks
from .fields import extract_color, extract_group, extract_progress, extract_timeline_range
from .mirror import resolve_mirror_data
from .model import Board, GanttSettings, Item, MirrorMapping, Task
from .util.console import eprint, obs_enabled


@dataclass(frozen=True)
class PipelineContext:
    """Boards, items and mirror mappings captured by one refresh cycle."""

    boards: Tuple[Board, ...] = ()
    items_by_board: Mapping[str, Sequence[Item]] = field(default_factory=dict)
    mappings_by_board: Mapping[str, Sequence[MirrorMapping]] = field(default_factory=dict)

    def board(self, board_id: str) -> Optional[Board]:
        for b in self.boards:
            if b.id == board_id:
                return b
        return None


def build_task(
    item: Item,
    board: Board,
    settings: GanttSettings,
    mappings: Sequence[MirrorMapping] = (),
    *,
    parent_id: Optional[str] = None,
    group_id: Optional[str] = None,
) -> Optional[Task]:
    """Derive one task; None when the item has no timeline data at all."""
    rng = extract_timeline_range(item, settings.timeline_column)
    if rng.empty:
        return None

    mirror_data = resolve_mirror_data(item, mappings)
    group = board.group(item.group_id or group_id)

    return Task(
        id=item.id,
        name=item.name,
        start=rng.start,
        end=rng.end,
        item=item,
        progress=extract_progress(item),
        color=extract_color(item, settings.color_by_column, mirror_data, group),
        group=extract_group(item, settings.group_by_column, mirror_data, group),
        board_id=board.id,
        board_name=board.name,
        parent_id=parent_id,
        mirror_data=mirror_data,
    )


def build_tasks(
    items: Sequence[Item],
    board: Board,
    settings: GanttSettings,
    mappings: Sequence[MirrorMapping] = (),
) -> List[Task]:
    """Tasks for every qualifying root item, each followed by its subitems.

    Subitems are only considered when the parent produced a task, and only one
    level deep. Mirror data always uses the owning board's mappings.
    """
    tasks: List[Task] = []
    for item in items:
        task = build_task(item, board, settings, mappings)
        if task is None:
            continue
        tasks.append(task)

        if not settings.show_subitems:
            continue
        for sub in item.subitems:
            subtask = build_task(
                sub,
                board,
                settings,
                mappings,
                parent_id=task.id,
                group_id=item.group_id,
            )
            if subtask is not None:
                tasks.append(subtask)
    return tasks


def apply_settings(tasks: Sequence[Task], settings: GanttSettings) -> List[Task]:
    if settings.sort_by_column and settings.sort_direction:
        return sort_tasks(tasks, settings.sort_by_column, settings.sort_direction)
    return list(tasks)


def derive_tasks(
    items: Sequence[Item],
    board: Board,
    settings: GanttSettings,
    mappings: Sequence[MirrorMapping] = (),
) -> List[Task]:
    return apply_settings(build_tasks(items, board, settings, mappings), settings)


def derive_all(context: PipelineContext, settings: GanttSettings) -> List[Task]:
    """Derive and sort tasks across every board of a refresh cycle."""
    selected = set(settings.selected_boards)
    tasks: List[Task] = []
    for board_id, items in context.items_by_board.items():
        if selected and board_id not in selected:
            continue
        board = context.board(board_id)
        if board is None:
            if obs_enabled():
                eprint(f"[ganttly.builder] skip items for unknown board={board_id!r}")
            continue
        mappings = context.mappings_by_board.get(board_id, ())
        tasks.extend(build_tasks(items, board, settings, mappings))

    if obs_enabled():
        eprint(f"[ganttly.builder] derived tasks={len(tasks)} boards={len(context.items_by_board)}")
    return apply_settings(tasks, settings)


def count_by_board(tasks: Sequence[Task]) -> Dict[str, int]:
    out: Dict[str, int] = {}
    for t in tasks:
        out[t.board_id] = out.get(t.board_id, 0) + 1
    return out
