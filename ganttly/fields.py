# ganttly/fields.py
from __future__ import annotations

from typing import Mapping, Optional

from .decode import (
    COLOR_KINDS,
    DATE_KINDS,
    NUMERIC,
    ColorValue,
    DateValue,
    Err,
    NumberValue,
    TimelineValue,
    color_from_data,
    decode,
    decode_color,
    decode_number,
    kind_of,
)
from .model import (
    DEFAULT_COLOR,
    NO_GROUP,
    UNKNOWN_GROUP,
    DateRange,
    FieldValue,
    Group,
    Item,
    MirrorDatum,
)
from .util.console import eprint, obs_enabled

_PROGRESS_HINTS = ("progress", "complete", "%")


def _warn(item: Item, err: object) -> None:
    if obs_enabled():
        eprint(f"[ganttly.fields] WARN: decode fallback item={item.id!r} {err}")


def find_timeline_field(item: Item, explicit_field_id: Optional[str] = None) -> Optional[FieldValue]:
    if explicit_field_id:
        return item.field(explicit_field_id)
    for fv in item.fields:
        if kind_of(fv.type) in DATE_KINDS:
            return fv
    return None


def extract_timeline_range(item: Item, explicit_field_id: Optional[str] = None) -> DateRange:
    """Start/end dates of an item; DateRange(None, None) when absent or malformed."""
    fv = find_timeline_field(item, explicit_field_id)
    if fv is None:
        return DateRange()

    res = decode(fv)
    if isinstance(res, Err):
        if fv.value:
            _warn(item, res.error)
        return DateRange()

    v = res.value
    if isinstance(v, TimelineValue):
        return DateRange(start=v.start, end=v.end)
    if isinstance(v, DateValue):
        return DateRange(start=v.day, end=v.day)
    return DateRange()


def clamp_progress(value: float) -> float:
    return max(0.0, min(100.0, float(value)))


def extract_progress(item: Item) -> float:
    fv = None
    for cand in item.fields:
        if kind_of(cand.type) != NUMERIC:
            continue
        title = (cand.title or "").lower()
        if any(h in title for h in _PROGRESS_HINTS):
            fv = cand
            break
    if fv is None or not fv.value:
        return 0.0

    res = decode_number(fv)
    if isinstance(res, Err):
        _warn(item, res.error)
        return 0.0
    v = res.value
    return clamp_progress(v.value) if isinstance(v, NumberValue) else 0.0


def _mirror_color(datum: MirrorDatum) -> str:
    if kind_of(datum.type) not in ("color", "status") or not datum.raw_value:
        return DEFAULT_COLOR
    res = color_from_data(datum.raw_value, kind=kind_of(datum.type))
    if isinstance(res, Err) or not isinstance(res.value, ColorValue):
        return DEFAULT_COLOR
    return res.value.color or DEFAULT_COLOR


def _field_color(item: Item, fv: FieldValue) -> str:
    if not fv.value or kind_of(fv.type) not in COLOR_KINDS:
        return DEFAULT_COLOR
    res = decode_color(fv)
    if isinstance(res, Err):
        _warn(item, res.error)
        return DEFAULT_COLOR
    return res.value.color or DEFAULT_COLOR


def extract_color(
    item: Item,
    field_id: Optional[str] = None,
    mirror_data: Optional[Mapping[str, MirrorDatum]] = None,
    group: Optional[Group] = None,
) -> str:
    """
    Precedence:
      1) mirror datum for field_id
      2) item's own field field_id
      3) group color
      4) DEFAULT_COLOR
    """
    if field_id:
        if mirror_data and field_id in mirror_data:
            return _mirror_color(mirror_data[field_id])
        fv = item.field(field_id)
        if fv is not None:
            return _field_color(item, fv)

    if group is not None and group.color:
        return group.color
    return DEFAULT_COLOR


def extract_group(
    item: Item,
    field_id: Optional[str] = None,
    mirror_data: Optional[Mapping[str, MirrorDatum]] = None,
    group: Optional[Group] = None,
) -> str:
    if field_id:
        if mirror_data and field_id in mirror_data:
            return mirror_data[field_id].display_value or UNKNOWN_GROUP
        fv = item.field(field_id)
        if fv is not None:
            return fv.text or UNKNOWN_GROUP

    if group is not None and group.title:
        return group.title
    return NO_GROUP
