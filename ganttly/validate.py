"""Validation helpers for user-supplied files (snapshots, settings)."""

from __future__ import annotations

from typing import Any, Dict, List

from .model import SORT_DIRECTIONS


class SnapshotValidationError(ValueError):
    """Raised when an offline snapshot fails validation."""


class SettingsValidationError(ValueError):
    """Raised when a settings object fails validation."""


SETTINGS_KEYS = (
    "timelineColumn",
    "colorByColumn",
    "groupByColumn",
    "sortByColumn",
    "sortDirection",
    "showSubitems",
    "selectedBoards",
)


def _require(cond: bool, msg: str, errs: List[str]) -> None:
    if not cond:
        errs.append(msg)


def validate_snapshot(data: Any, *, label: str = "snapshot") -> List[str]:
    if not isinstance(data, dict):
        return [f"{label}: must be a JSON object"]
    errs: List[str] = []

    boards = data.get("boards")
    items = data.get("items")
    _require(isinstance(boards, list), f"{label}: boards must be list", errs)
    _require(items is None or isinstance(items, dict), f"{label}: items must be an object keyed by board id", errs)

    if isinstance(boards, list):
        for i, b in enumerate(boards):
            if not isinstance(b, dict):
                errs.append(f"{label}: boards[{i}] must be object")
                continue
            bid = b.get("id")
            _require(
                isinstance(bid, (str, int)) and not isinstance(bid, bool) and str(bid).strip() != "",
                f"{label}: boards[{i}].id must be non-empty string or int",
                errs,
            )
            _require(
                b.get("columns") is None or isinstance(b.get("columns"), list),
                f"{label}: boards[{i}].columns must be list",
                errs,
            )

    if isinstance(items, dict):
        for bid, lst in items.items():
            _require(isinstance(lst, list), f"{label}: items[{bid!r}] must be list", errs)
    return errs


def assert_valid_snapshot(data: Any) -> None:
    errs = validate_snapshot(data)
    if errs:
        raise SnapshotValidationError(errs[0])


def validate_settings(raw: Any, *, label: str = "settings") -> List[str]:
    """Problems in a persisted settings object; unknown keys are reported, not fatal."""
    if not isinstance(raw, dict):
        return [f"{label}: must be a JSON object"]
    errs: List[str] = []

    for k in raw.keys():
        _require(k in SETTINGS_KEYS, f"{label}: unknown option {k!r}", errs)

    for k in ("timelineColumn", "colorByColumn", "groupByColumn", "sortByColumn"):
        v = raw.get(k)
        _require(v is None or isinstance(v, str), f"{label}: {k} must be string", errs)

    sd = raw.get("sortDirection")
    _require(sd is None or sd in SORT_DIRECTIONS, f"{label}: sortDirection must be one of {SORT_DIRECTIONS}", errs)

    ss = raw.get("showSubitems")
    _require(ss is None or isinstance(ss, bool), f"{label}: showSubitems must be bool", errs)

    sb = raw.get("selectedBoards")
    if sb is not None:
        ok = isinstance(sb, list) and all(isinstance(x, (str, int)) and not isinstance(x, bool) for x in sb)
        _require(ok, f"{label}: selectedBoards must be list of board ids", errs)
    return errs


def assert_valid_settings(raw: Dict[str, Any]) -> None:
    errs = validate_settings(raw)
    if errs:
        raise SettingsValidationError(errs[0])


__all__ = [
    "SETTINGS_KEYS",
    "SettingsValidationError",
    "SnapshotValidationError",
    "assert_valid_settings",
    "assert_valid_snapshot",
    "validate_settings",
    "validate_snapshot",
]
