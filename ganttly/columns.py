# ganttly/columns.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from .model import Board

BASIC_COLUMNS = (
    ("name", "Item Name", "text"),
    ("start_date", "Start Date", "date"),
    ("end_date", "End Date", "date"),
    ("group", "Group", "text"),
    ("board", "Board", "text"),
)


@dataclass(frozen=True)
class ColumnOption:
    id: str
    title: str
    type: str


def available_columns(boards: Sequence[Board], include_basic: bool = True) -> List[ColumnOption]:
    """Options for the timeline/color/group/sort pickers.

    Each non-archived field id appears once (first board wins), titled
    "<field> (<board>)".
    """
    out: List[ColumnOption] = []
    seen = set()
    if include_basic:
        for cid, title, typ in BASIC_COLUMNS:
            out.append(ColumnOption(id=cid, title=title, type=typ))
            seen.add(cid)

    for board in boards:
        for f in board.fields:
            if f.archived or f.id in seen:
                continue
            seen.add(f.id)
            out.append(ColumnOption(id=f.id, title=f"{f.title} ({board.name})", type=f.type))
    return out
