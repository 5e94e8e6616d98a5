# ganttly/compare.py
from __future__ import annotations

import functools
from typing import Any, List, Optional, Sequence, Tuple

from .decode import NUMBER_KINDS, Err, NumberValue, decode_number, kind_of
from .model import Task

KEY_NAME = "name"
KEY_START = "start_date"
KEY_END = "end_date"
KEY_GROUP = "group"
KEY_BOARD = "board"

# Rank of each value family; keeps comparison total when one key mixes families.
_RANK_NUMBER = 0
_RANK_DATE = 1
_RANK_TEXT = 2

_EMPTY_PAYLOADS = ("", "null", "\"\"")

SortKey = Tuple[int, int, Any]


def _field_number(task: Task, field_id: str) -> float:
    fv = task.item.field(field_id)
    if fv is None or not fv.value:
        return 0.0
    res = decode_number(fv)
    if isinstance(res, Err) or not isinstance(res.value, NumberValue):
        return 0.0
    return res.value.value


def _value(task: Task, key: str) -> Optional[Tuple[int, Any]]:
    if key == KEY_NAME:
        return (_RANK_TEXT, (task.name or "").lower())
    if key == KEY_START:
        return None if task.start is None else (_RANK_DATE, task.start)
    if key == KEY_END:
        return None if task.end is None else (_RANK_DATE, task.end)
    if key == KEY_GROUP:
        return (_RANK_TEXT, task.group.lower()) if task.group else None
    if key == KEY_BOARD:
        return (_RANK_TEXT, task.board_name.lower()) if task.board_name else None

    fv = task.item.field(key)
    if fv is None:
        return None
    if kind_of(fv.type) in NUMBER_KINDS:
        if (fv.value or "").strip() in _EMPTY_PAYLOADS:
            return None
        return (_RANK_NUMBER, _field_number(task, key))
    # blank display text counts as absent
    if not (fv.text or "").strip():
        return None
    return (_RANK_TEXT, fv.text.lower())


def sort_key(task: Task, key: str) -> SortKey:
    """Ascending sort key; absent values sort last."""
    v = _value(task, key)
    if v is None:
        return (1, 0, 0)
    return (0, v[0], v[1])


def _cmp(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def compare_tasks(a: Task, b: Task, key: str, direction: str = "asc") -> int:
    c = _cmp(sort_key(a, key), sort_key(b, key))
    return -c if direction == "desc" else c


def sort_tasks(tasks: Sequence[Task], key: str, direction: str = "asc") -> List[Task]:
    """Stable sort; ties keep their arrival order."""
    return sorted(tasks, key=functools.cmp_to_key(lambda a, b: compare_tasks(a, b, key, direction)))
