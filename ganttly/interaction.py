"""Pointer drag/resize state machine for timeline bars.

States:
  Idle
  Dragging(kind, task_id, anchor, origin_x, pixels_per_day, pointer_id)

Events: begin -> update* -> end | cancel.

Every candidate range is derived from the anchor captured at `begin`, never
from the previous sample, so repeated samples cannot drift.
"""

from __future__ import annotations

import dataclasses
import datetime as dt
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Union

from .model import DateRange, Task
from .util.console import eprint, obs_enabled
from .util.dates import add_days, round_half_up

MOVE = "move"
RESIZE_START = "resize-start"
RESIZE_END = "resize-end"
DRAG_KINDS = (MOVE, RESIZE_START, RESIZE_END)


class DragError(ValueError):
    """Raised for invalid drag transitions (e.g. begin while already dragging)."""


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Dragging:
    kind: str
    task_id: str
    anchor: DateRange
    origin_x: float
    pixels_per_day: float
    pointer_id: Optional[int] = None


DragState = Union[Idle, Dragging]


@dataclass(frozen=True)
class DragUpdate:
    task_id: str
    kind: str
    start: dt.date
    end: dt.date
    delta_days: int
    final: bool = False


UpdateListener = Callable[[DragUpdate], None]


def candidate_range(kind: str, anchor: DateRange, delta_days: int) -> DateRange:
    """New range for a drag of `kind` shifted by `delta_days` from `anchor`."""
    if anchor.start is None or anchor.end is None:
        raise DragError("anchor range must have both dates")
    start = anchor.start
    end = anchor.end
    if kind == MOVE:
        start = add_days(start, delta_days)
        end = add_days(end, delta_days)
    elif kind == RESIZE_START:
        start = min(add_days(start, delta_days), end)
    elif kind == RESIZE_END:
        end = max(add_days(end, delta_days), start)
    else:
        raise DragError(f"unknown drag kind: {kind!r}")
    return DateRange(start=start, end=end)


class DragController:
    """One controller per pointer device; at most one active drag."""

    def __init__(self, listeners: Sequence[UpdateListener] = ()) -> None:
        self._state: DragState = Idle()
        self._listeners: List[UpdateListener] = list(listeners)

    @property
    def state(self) -> DragState:
        return self._state

    @property
    def dragging(self) -> bool:
        return isinstance(self._state, Dragging)

    def subscribe(self, listener: UpdateListener) -> None:
        self._listeners.append(listener)

    def begin(
        self,
        task: Task,
        kind: str,
        pointer_x: float,
        pixels_per_day: float,
        pointer_id: Optional[int] = None,
    ) -> Dragging:
        if isinstance(self._state, Dragging):
            raise DragError(f"drag already in progress for task {self._state.task_id!r}")
        if kind not in DRAG_KINDS:
            raise DragError(f"unknown drag kind: {kind!r}")
        if task.start is None or task.end is None:
            raise DragError(f"task {task.id!r} has no complete date range")
        if not pixels_per_day or pixels_per_day <= 0:
            raise DragError("pixels_per_day must be positive")

        self._state = Dragging(
            kind=kind,
            task_id=task.id,
            anchor=DateRange(start=task.start, end=task.end),
            origin_x=float(pointer_x),
            pixels_per_day=float(pixels_per_day),
            pointer_id=pointer_id,
        )
        if obs_enabled():
            eprint(f"[ganttly.interaction] begin kind={kind} task={task.id!r}")
        return self._state

    def _accepts(self, pointer_id: Optional[int]) -> bool:
        st = self._state
        if not isinstance(st, Dragging):
            return False
        return st.pointer_id is None or pointer_id is None or pointer_id == st.pointer_id

    def _sample(self, st: Dragging, pointer_x: float, *, final: bool) -> DragUpdate:
        delta = round_half_up((float(pointer_x) - st.origin_x) / st.pixels_per_day)
        rng = candidate_range(st.kind, st.anchor, delta)
        return DragUpdate(
            task_id=st.task_id,
            kind=st.kind,
            start=rng.start,  # type: ignore[arg-type]
            end=rng.end,  # type: ignore[arg-type]
            delta_days=delta,
            final=final,
        )

    def _emit(self, upd: DragUpdate) -> None:
        for fn in list(self._listeners):
            fn(upd)

    def update(self, pointer_x: float, pointer_id: Optional[int] = None) -> Optional[DragUpdate]:
        """Emit the candidate range for a movement sample; None when idle."""
        if not self._accepts(pointer_id):
            return None
        upd = self._sample(self._state, pointer_x, final=False)  # type: ignore[arg-type]
        self._emit(upd)
        return upd

    def end(self, pointer_x: Optional[float] = None, pointer_id: Optional[int] = None) -> Optional[DragUpdate]:
        """Finish the drag; with pointer_x, the release position is emitted as the final range."""
        if not self._accepts(pointer_id):
            return None
        st = self._state
        upd = None
        if pointer_x is not None:
            upd = self._sample(st, pointer_x, final=True)  # type: ignore[arg-type]
        self._state = Idle()
        if upd is not None:
            self._emit(upd)
        return upd

    def cancel(self) -> Optional[DragUpdate]:
        """Abort (focus loss, pointer cancel): emit the anchor range and return to idle."""
        st = self._state
        if not isinstance(st, Dragging):
            return None
        self._state = Idle()
        upd = DragUpdate(
            task_id=st.task_id,
            kind=st.kind,
            start=st.anchor.start,  # type: ignore[arg-type]
            end=st.anchor.end,  # type: ignore[arg-type]
            delta_days=0,
            final=True,
        )
        if obs_enabled():
            eprint(f"[ganttly.interaction] cancel task={st.task_id!r}")
        self._emit(upd)
        return upd


def with_range(task: Task, start: dt.date, end: dt.date) -> Task:
    """New task snapshot carrying the given range."""
    return dataclasses.replace(task, start=start, end=end)


def apply_update(tasks: Sequence[Task], upd: DragUpdate) -> List[Task]:
    """Replace the dragged task's range; other tasks are returned unchanged."""
    return [with_range(t, upd.start, upd.end) if t.id == upd.task_id else t for t in tasks]
