# ganttly/model.py
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

DEFAULT_COLOR = "#037f4c"
NO_GROUP = "No Group"
UNKNOWN_GROUP = "Unknown"


@dataclass(frozen=True)
class Group:
    id: str
    title: str
    color: str = ""
    position: str = ""


@dataclass(frozen=True)
class FieldDef:
    id: str
    title: str
    type: str
    settings_str: Optional[str] = None
    archived: bool = False


@dataclass(frozen=True)
class FieldValue:
    id: str
    title: str
    type: str          # source type string; see decode.kind_of()
    value: Optional[str]  # raw JSON-encoded payload
    text: str = ""       # precomputed display text


@dataclass(frozen=True)
class Item:
    id: str
    name: str
    fields: Tuple[FieldValue, ...] = ()
    group_id: Optional[str] = None
    subitems: Tuple["Item", ...] = ()

    def field(self, field_id: str) -> Optional[FieldValue]:
        for fv in self.fields:
            if fv.id == field_id:
                return fv
        return None


@dataclass(frozen=True)
class Board:
    id: str
    name: str
    kind: str = "public"
    fields: Tuple[FieldDef, ...] = ()
    groups: Tuple[Group, ...] = ()

    def group(self, group_id: Optional[str]) -> Optional[Group]:
        if not group_id:
            return None
        for g in self.groups:
            if g.id == group_id:
                return g
        return None


@dataclass(frozen=True)
class FieldCatalog:
    """Field definitions of one board, as returned by the catalog fetcher."""

    board_id: str
    board_name: str
    fields: Tuple[FieldDef, ...] = ()


@dataclass(frozen=True)
class MirrorMapping:
    source_board_id: str
    source_board_name: str
    source_field_id: str
    source_field_title: str
    mirror_field_id: str
    mirror_field_title: str
    target_board_id: str


@dataclass(frozen=True)
class MirrorDatum:
    display_value: str
    raw_value: Any
    source_field_title: str
    source_board_name: str
    type: str


@dataclass(frozen=True)
class DateRange:
    start: Optional[dt.date] = None
    end: Optional[dt.date] = None

    @property
    def empty(self) -> bool:
        return self.start is None and self.end is None

    @property
    def complete(self) -> bool:
        return self.start is not None and self.end is not None


@dataclass(frozen=True)
class Task:
    id: str
    name: str
    start: Optional[dt.date]
    end: Optional[dt.date]
    item: Item
    progress: float = 0.0
    color: str = DEFAULT_COLOR
    group: str = NO_GROUP
    board_id: str = ""
    board_name: str = ""
    parent_id: Optional[str] = None
    mirror_data: Mapping[str, MirrorDatum] = field(default_factory=dict)

    @property
    def dated(self) -> bool:
        return self.start is not None and self.end is not None


# Persisted configuration (camelCase keys on disk, see settings.py)
SORT_DIRECTIONS = ("asc", "desc")


@dataclass(frozen=True)
class GanttSettings:
    timeline_column: Optional[str] = None
    color_by_column: Optional[str] = None
    group_by_column: Optional[str] = None
    sort_by_column: Optional[str] = None
    sort_direction: str = "asc"
    show_subitems: bool = True
    selected_boards: Tuple[str, ...] = ()


JsonDict = Dict[str, Any]


__all__ = [
    "DEFAULT_COLOR",
    "NO_GROUP",
    "UNKNOWN_GROUP",
    "SORT_DIRECTIONS",
    "Group",
    "FieldDef",
    "FieldValue",
    "Item",
    "Board",
    "FieldCatalog",
    "MirrorMapping",
    "MirrorDatum",
    "DateRange",
    "Task",
    "GanttSettings",
    "JsonDict",
]
