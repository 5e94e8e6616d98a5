"""Board/item source boundary.

Implementations fetch snapshots from a remote service (`monday.MondayClient`)
or from a local file (`snapshot.SnapshotSource`). Failures raise SourceError;
callers in `refresh` isolate them per board.
"""

from __future__ import annotations

from typing import List, Optional, Protocol, Sequence

from .model import Board, FieldCatalog, Item


class SourceError(RuntimeError):
    """Raised when a board/item retrieval fails."""


class BoardSource(Protocol):
    def fetch_boards(self, ids: Optional[Sequence[str]] = None) -> List[Board]:
        """Boards by id; all reachable boards when ids is None or empty."""

    def fetch_items(self, board_id: str, limit: int = 100) -> List[Item]:
        """Items (with subitems) of one board."""

    def fetch_field_catalog(self, board_id: str) -> Optional[FieldCatalog]:
        """Name and field definitions of one board; None when it does not exist."""
