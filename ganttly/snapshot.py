# ganttly/snapshot.py
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from .model import Board, FieldCatalog, Item
from .normalize import catalog_from_board, normalize_boards, normalize_items
from .source import SourceError
from .validate import assert_valid_snapshot


class SnapshotSource:
    """Board source backed by an offline JSON snapshot.

    Snapshot format (raw monday GraphQL shapes):
      {
        "boards": [ {"id": .., "name": .., "columns": [..], "groups": [..]}, ... ],
        "items":  { "<board_id>": [ {"id": .., "name": .., "column_values": [..]}, ... ] }
      }

    Boards listed in "items" but absent from "boards" fail `fetch_items` with
    SourceError, like an unreachable remote board.
    """

    def __init__(self, data: Dict[str, Any]) -> None:
        assert_valid_snapshot(data)
        self._boards = normalize_boards(data.get("boards"))
        raw_items = data.get("items") or {}
        self._items: Dict[str, List[Item]] = {
            str(bid): normalize_items(items) for bid, items in raw_items.items()
        }

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "SnapshotSource":
        p = Path(path)
        obj = json.loads(p.read_text(encoding="utf-8", errors="replace"))
        return cls(obj)

    def fetch_boards(self, ids: Optional[Sequence[str]] = None) -> List[Board]:
        if not ids:
            return list(self._boards)
        wanted = {str(i) for i in ids}
        return [b for b in self._boards if b.id in wanted]

    def fetch_items(self, board_id: str, limit: int = 100) -> List[Item]:
        if not any(b.id == board_id for b in self._boards):
            raise SourceError(f"board {board_id} not found in snapshot")
        return list(self._items.get(board_id, []))[: max(0, int(limit))]

    def fetch_field_catalog(self, board_id: str) -> Optional[FieldCatalog]:
        for b in self._boards:
            if b.id == str(board_id):
                return catalog_from_board(b)
        return None
