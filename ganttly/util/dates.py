# ganttly/util/dates.py
from __future__ import annotations

import datetime as dt
import math
import re
from typing import Any, Optional

_YMD_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")


def parse_date(s: Any) -> Optional[dt.date]:
    """Parse a calendar date from a source payload string.

    Accepts `YYYY-MM-DD` and ISO datetimes (`2024-01-10T09:00:00Z`,
    `2024-01-10 12:00:00 UTC`); only the date part is kept.
    Returns None for empty or invalid input.
    """
    if s is None or isinstance(s, bool):
        return None
    if isinstance(s, dt.datetime):
        return s.date()
    if isinstance(s, dt.date):
        return s
    ss = str(s).strip()
    if not ss:
        return None
    m = _YMD_RE.match(ss)
    if not m:
        return None
    try:
        return dt.date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    except ValueError:
        return None


def days_between(a: dt.date, b: dt.date) -> int:
    """Whole calendar days from `a` to `b` (negative when b precedes a)."""
    return (b - a).days


def add_days(d: dt.date, n: int) -> dt.date:
    return d + dt.timedelta(days=int(n))


def round_half_up(x: float) -> int:
    # Pointer deltas round like Math.round: .5 goes toward +inf.
    return int(math.floor(x + 0.5))
