"""Typed decoding of field payloads.

Every field value carries a JSON-encoded payload whose shape depends on its
type. Decoders here never raise: each returns `Ok(variant)` or
`Err(DecodeError)` and the caller picks the fallback.

Variants (closed set):
  TimelineValue   timeline payloads {"from": .., "to": ..}
  DateValue       date / creation_log payloads
  NumberValue     numeric / rating payloads
  ColorValue      status / color / dropdown payloads
  TextValue       text payloads
  RawValue        any other payload that is valid JSON
  Undecodable     payload that failed to decode (carries the display text)
"""

from __future__ import annotations

import datetime as dt
import json
import math
from dataclasses import dataclass
from typing import Any, Optional, Union

from .model import FieldValue
from .util.dates import parse_date

TIMELINE = "timeline"
DATE = "date"
NUMERIC = "numeric"
RATING = "rating"
STATUS = "status"
COLOR = "color"
DROPDOWN = "dropdown"
TEXT = "text"
MIRROR = "mirror"
CREATION_LOG = "creation_log"
OTHER = "other"

_KINDS = {
    TIMELINE,
    DATE,
    NUMERIC,
    RATING,
    STATUS,
    COLOR,
    DROPDOWN,
    TEXT,
    MIRROR,
    CREATION_LOG,
}

_ALIASES = {
    "numbers": NUMERIC,
    "lookup": MIRROR,
    "long_text": TEXT,
    "long-text": TEXT,
}

DATE_KINDS = (TIMELINE, DATE, CREATION_LOG)
NUMBER_KINDS = (NUMERIC, RATING)
COLOR_KINDS = (STATUS, COLOR, DROPDOWN)


def kind_of(type_str: Optional[str]) -> str:
    """Map a source type string onto a canonical kind tag."""
    t = (type_str or "").strip().lower()
    t = _ALIASES.get(t, t)
    return t if t in _KINDS else OTHER


@dataclass(frozen=True)
class DecodeError:
    field_id: str
    kind: str
    reason: str
    raw: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.kind} field {self.field_id!r}: {self.reason}"


@dataclass(frozen=True)
class TimelineValue:
    start: Optional[dt.date]
    end: Optional[dt.date]


@dataclass(frozen=True)
class DateValue:
    day: dt.date


@dataclass(frozen=True)
class NumberValue:
    value: float


@dataclass(frozen=True)
class ColorValue:
    color: Optional[str]
    label: str = ""


@dataclass(frozen=True)
class TextValue:
    text: str


@dataclass(frozen=True)
class RawValue:
    data: Any


@dataclass(frozen=True)
class Undecodable:
    raw_text: str
    error: DecodeError


FieldPayload = Union[TimelineValue, DateValue, NumberValue, ColorValue, TextValue, RawValue, Undecodable]


@dataclass(frozen=True)
class Ok:
    value: Any

    ok = True


@dataclass(frozen=True)
class Err:
    error: DecodeError

    ok = False


Result = Union[Ok, Err]


def _err(fv: FieldValue, kind: str, reason: str) -> Err:
    return Err(DecodeError(field_id=fv.id, kind=kind, reason=reason, raw=fv.value))


def load_json(raw: Any) -> Result:
    """json.loads wrapper; already-decoded structures pass through."""
    if raw is None:
        return Err(DecodeError(field_id="", kind=OTHER, reason="empty payload"))
    if not isinstance(raw, (str, bytes)):
        return Ok(raw)
    if not str(raw).strip():
        return Err(DecodeError(field_id="", kind=OTHER, reason="empty payload"))
    try:
        return Ok(json.loads(raw))
    except ValueError as ex:
        return Err(DecodeError(field_id="", kind=OTHER, reason=f"invalid JSON: {ex}", raw=str(raw)))


def _loaded(fv: FieldValue, kind: str) -> Result:
    res = load_json(fv.value)
    if isinstance(res, Err):
        return _err(fv, kind, res.error.reason)
    return res


def _as_number(v: Any) -> Optional[float]:
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        f = float(v)
    elif isinstance(v, str):
        try:
            f = float(v.strip())
        except ValueError:
            return None
    elif isinstance(v, dict) and "rating" in v:
        return _as_number(v.get("rating"))
    else:
        return None
    if math.isnan(f) or math.isinf(f):
        return None
    return f


def decode_timeline(fv: FieldValue) -> Result:
    res = _loaded(fv, TIMELINE)
    if isinstance(res, Err):
        return res
    data = res.value
    if not isinstance(data, dict):
        return _err(fv, TIMELINE, "payload is not an object")
    start_raw = data.get("from")
    end_raw = data.get("to")
    start = parse_date(start_raw)
    end = parse_date(end_raw)
    if start_raw and start is None:
        return _err(fv, TIMELINE, f"invalid from date {start_raw!r}")
    if end_raw and end is None:
        return _err(fv, TIMELINE, f"invalid to date {end_raw!r}")
    return Ok(TimelineValue(start=start, end=end))


def decode_date(fv: FieldValue) -> Result:
    res = _loaded(fv, DATE)
    if isinstance(res, Err):
        return res
    data = res.value
    if not isinstance(data, dict):
        return _err(fv, DATE, "payload is not an object")
    day = parse_date(data.get("date"))
    if day is None:
        return _err(fv, DATE, f"invalid date {data.get('date')!r}")
    return Ok(DateValue(day=day))


def decode_creation_log(fv: FieldValue) -> Result:
    # The payload is usually null for creation logs; the display text carries the timestamp.
    res = load_json(fv.value)
    if isinstance(res, Ok) and isinstance(res.value, dict):
        day = parse_date(res.value.get("created_at"))
        if day is not None:
            return Ok(DateValue(day=day))
    day = parse_date(fv.text)
    if day is None:
        return _err(fv, CREATION_LOG, "no creation timestamp")
    return Ok(DateValue(day=day))


def decode_number(fv: FieldValue) -> Result:
    kind = kind_of(fv.type)
    res = _loaded(fv, kind)
    if isinstance(res, Err):
        return res
    n = _as_number(res.value)
    if n is None:
        return _err(fv, kind, f"not a number: {res.value!r}")
    return Ok(NumberValue(value=n))


def decode_color(fv: FieldValue) -> Result:
    kind = kind_of(fv.type)
    res = _loaded(fv, kind)
    if isinstance(res, Err):
        return res
    return color_from_data(res.value, label=fv.text, kind=kind, field_id=fv.id)


def color_from_data(data: Any, *, label: str = "", kind: str = COLOR, field_id: str = "") -> Result:
    """Extract a color token from an already-loaded status/color/dropdown structure."""
    if isinstance(data, str):
        res = load_json(data)
        if isinstance(res, Err):
            return Err(DecodeError(field_id=field_id, kind=kind, reason=res.error.reason, raw=data))
        data = res.value
    if not isinstance(data, dict):
        return Err(DecodeError(field_id=field_id, kind=kind, reason="payload is not an object"))
    color = data.get("color")
    if isinstance(color, dict):
        color = color.get("color")
    if not isinstance(color, str) or not color.strip():
        color = None
    return Ok(ColorValue(color=color, label=label))


def decode_text(fv: FieldValue) -> Result:
    res = load_json(fv.value)
    if isinstance(res, Ok) and isinstance(res.value, str):
        return Ok(TextValue(text=res.value))
    return Ok(TextValue(text=fv.text or ""))


def decode_raw(fv: FieldValue) -> Result:
    return _loaded(fv, kind_of(fv.type))


_DECODERS = {
    TIMELINE: decode_timeline,
    DATE: decode_date,
    CREATION_LOG: decode_creation_log,
    NUMERIC: decode_number,
    RATING: decode_number,
    STATUS: decode_color,
    COLOR: decode_color,
    DROPDOWN: decode_color,
    TEXT: decode_text,
}


def decode(fv: FieldValue) -> Result:
    """Dispatch on the field's kind and return the decoder's Result."""
    fn = _DECODERS.get(kind_of(fv.type))
    if fn is None:
        res = decode_raw(fv)
        if isinstance(res, Ok):
            return Ok(RawValue(data=res.value))
        return res
    return fn(fv)


def decode_field(fv: FieldValue) -> FieldPayload:
    res = decode(fv)
    if isinstance(res, Ok):
        return res.value
    return Undecodable(raw_text=fv.text or "", error=res.error)
