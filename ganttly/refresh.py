# ganttly/refresh.py
from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

from .builder import PipelineContext
from .mirror import resolve_mirror_mappings
from .model import Board, GanttSettings, Item, MirrorMapping
from .notify import Notifier, NullNotifier
from .source import BoardSource, SourceError
from .util.console import eprint, obs_enabled

T = TypeVar("T")

DEFAULT_ITEM_LIMIT = 100


@dataclass(frozen=True)
class RetrievalFailure:
    operation: str       # "boards" | "items" | "mirror_mappings"
    board_id: Optional[str]
    message: str


@dataclass(frozen=True)
class RefreshResult:
    context: PipelineContext
    failures: Tuple[RetrievalFailure, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.failures


async def _isolated(
    op: str,
    board_id: Optional[str],
    fn: Callable[[], T],
    default: T,
    failures: List[RetrievalFailure],
) -> T:
    """Run a blocking retrieval in a worker thread; failures degrade to `default`."""
    t0 = time.monotonic()
    try:
        out = await asyncio.to_thread(fn)
    except Exception as ex:
        # any source fault stays with its board
        msg = str(ex) if isinstance(ex, SourceError) else f"{type(ex).__name__}: {ex}"
        failures.append(RetrievalFailure(operation=op, board_id=board_id, message=msg))
        eprint(f"[ganttly.refresh] ERROR: {op} failed board={board_id}: {msg}")
        return default
    if obs_enabled():
        elapsed_ms = int((time.monotonic() - t0) * 1000)
        eprint(f"[ganttly.refresh] {op}.ok board={board_id} ms={elapsed_ms}")
    return out


def selected_board_ids(boards: Sequence[Board], settings: GanttSettings) -> List[str]:
    if settings.selected_boards:
        return list(settings.selected_boards)
    return [b.id for b in boards]


async def load_context(
    source: BoardSource,
    settings: GanttSettings,
    *,
    board_ids: Optional[Sequence[str]] = None,
    limit: int = DEFAULT_ITEM_LIMIT,
    notifier: Optional[Notifier] = None,
) -> RefreshResult:
    """Fetch boards, then per-board mirror mappings and items concurrently.

    One failing board never blocks the others: its items/mappings degrade to
    empty and a RetrievalFailure is recorded and reported through `notifier`.
    """
    notifier = notifier or NullNotifier()
    failures: List[RetrievalFailure] = []

    boards: List[Board] = await _isolated(
        "boards", None, lambda: source.fetch_boards(list(board_ids or [])), [], failures
    )

    mapping_jobs: List[Awaitable[List[MirrorMapping]]] = [
        _isolated(
            "mirror_mappings",
            b.id,
            lambda b=b: resolve_mirror_mappings(b, source.fetch_field_catalog),
            [],
            failures,
        )
        for b in boards
    ]

    ids = selected_board_ids(boards, settings)
    item_jobs: List[Awaitable[List[Item]]] = [
        _isolated("items", bid, lambda bid=bid: source.fetch_items(bid, limit), [], failures)
        for bid in ids
    ]

    results = await asyncio.gather(*mapping_jobs, *item_jobs)
    mapping_results = results[: len(mapping_jobs)]
    item_results = results[len(mapping_jobs):]

    mappings_by_board: Dict[str, List[MirrorMapping]] = {
        b.id: list(m) for b, m in zip(boards, mapping_results)
    }
    items_by_board: Dict[str, List[Item]] = {bid: list(items) for bid, items in zip(ids, item_results)}

    failures.sort(key=lambda f: (f.operation, f.board_id or ""))

    for f in failures:
        where = f" for board {f.board_id}" if f.board_id else ""
        notifier.notify(f"Failed to load {f.operation.replace('_', ' ')}{where}; try refreshing. ({f.message})", "error")

    return RefreshResult(
        context=PipelineContext(
            boards=tuple(boards),
            items_by_board=items_by_board,
            mappings_by_board=mappings_by_board,
        ),
        failures=tuple(failures),
    )


def refresh(
    source: BoardSource,
    settings: GanttSettings,
    *,
    board_ids: Optional[Sequence[str]] = None,
    limit: int = DEFAULT_ITEM_LIMIT,
    notifier: Optional[Notifier] = None,
) -> RefreshResult:
    """Synchronous wrapper around `load_context`."""
    return asyncio.run(load_context(source, settings, board_ids=board_ids, limit=limit, notifier=notifier))
