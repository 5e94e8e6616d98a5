# ganttly/normalize.py
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from .model import Board, FieldCatalog, FieldDef, FieldValue, Group, Item
from .util.console import eprint, obs_enabled


def _s(v: Any) -> str:
    return "" if v is None else str(v)


def _id(v: Any) -> str:
    return str(v).strip() if isinstance(v, (str, int)) and not isinstance(v, bool) else ""


def _list(v: Any) -> List[Any]:
    return v if isinstance(v, list) else []


def _payload(v: Any) -> Optional[str]:
    # Source payloads arrive JSON-encoded; tolerate already-decoded structures.
    if v is None:
        return None
    if isinstance(v, str):
        return v
    try:
        return json.dumps(v)
    except (TypeError, ValueError):
        return None


def normalize_group(g: Dict[str, Any]) -> Optional[Group]:
    if not isinstance(g, dict):
        return None
    gid = _id(g.get("id"))
    if not gid:
        return None
    return Group(
        id=gid,
        title=_s(g.get("title")),
        color=_s(g.get("color")),
        position=_s(g.get("position")),
    )


def normalize_field_def(c: Dict[str, Any]) -> Optional[FieldDef]:
    if not isinstance(c, dict):
        return None
    cid = _id(c.get("id"))
    if not cid:
        return None
    return FieldDef(
        id=cid,
        title=_s(c.get("title")),
        type=_s(c.get("type")),
        settings_str=c.get("settings_str") if isinstance(c.get("settings_str"), str) else None,
        archived=bool(c.get("archived")),
    )


def normalize_field_value(cv: Dict[str, Any]) -> Optional[FieldValue]:
    if not isinstance(cv, dict):
        return None
    cid = _id(cv.get("id"))
    if not cid:
        return None
    col = cv.get("column") if isinstance(cv.get("column"), dict) else {}
    return FieldValue(
        id=cid,
        title=_s(cv.get("title") or col.get("title")),
        type=_s(cv.get("type") or col.get("type")),
        value=_payload(cv.get("value")),
        text=_s(cv.get("text")),
    )


def normalize_item(raw: Dict[str, Any]) -> Optional[Item]:
    """Convert one source item (with optional subitems) into an Item; None without an id."""
    if not isinstance(raw, dict):
        return None
    iid = _id(raw.get("id"))
    if not iid:
        if obs_enabled():
            eprint(f"[ganttly.normalize] WARN: item without id name={raw.get('name')!r}")
        return None

    fields: List[FieldValue] = []
    seen = set()
    for cv in _list(raw.get("column_values")):
        fv = normalize_field_value(cv)
        if fv is None or fv.id in seen:
            continue
        seen.add(fv.id)
        fields.append(fv)

    group = raw.get("group")
    group_id = _id(group.get("id")) if isinstance(group, dict) else ""

    subitems: List[Item] = []
    for sub in _list(raw.get("subitems")):
        si = normalize_item(sub)
        if si is not None:
            subitems.append(si)

    return Item(
        id=iid,
        name=_s(raw.get("name")),
        fields=tuple(fields),
        group_id=group_id or None,
        subitems=tuple(subitems),
    )


def normalize_items(raw_items: Any) -> List[Item]:
    out: List[Item] = []
    for raw in _list(raw_items):
        it = normalize_item(raw)
        if it is not None:
            out.append(it)
    return out


def normalize_board(raw: Dict[str, Any]) -> Optional[Board]:
    if not isinstance(raw, dict):
        return None
    bid = _id(raw.get("id"))
    if not bid:
        return None
    fields = [f for f in (normalize_field_def(c) for c in _list(raw.get("columns"))) if f is not None]
    groups = [g for g in (normalize_group(x) for x in _list(raw.get("groups"))) if g is not None]
    return Board(
        id=bid,
        name=_s(raw.get("name")),
        kind=_s(raw.get("board_kind") or "public"),
        fields=tuple(fields),
        groups=tuple(groups),
    )


def normalize_boards(raw_boards: Any) -> List[Board]:
    out: List[Board] = []
    for raw in _list(raw_boards):
        b = normalize_board(raw)
        if b is not None:
            out.append(b)
    return out


def catalog_from_board(board: Board) -> FieldCatalog:
    return FieldCatalog(board_id=board.id, board_name=board.name, fields=board.fields)
