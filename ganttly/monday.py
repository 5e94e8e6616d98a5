# ganttly/monday.py
from __future__ import annotations

import http.client
import json
import os
import time
from typing import Any, Dict, List, Optional, Sequence
from urllib import error, request

from .model import Board, FieldCatalog, Item
from .normalize import catalog_from_board, normalize_board, normalize_boards, normalize_items
from .source import SourceError
from .util.console import eprint, obs_enabled

DEFAULT_API_URL = "https://api.monday.com/v2"
API_VERSION = "2023-10"

_BOARD_FIELDS = """
    id
    name
    description
    board_kind
    columns {
      id
      title
      type
      settings_str
      archived
    }
    groups {
      id
      title
      color
      position
    }
"""

_COLUMN_VALUE_FIELDS = """
      id
      title
      type
      value
      text
"""

BOARDS_QUERY = """
query($boardIds: [ID!]) {
  boards(ids: $boardIds) {%s}
}
""" % _BOARD_FIELDS

CONNECTED_BOARDS_QUERY = """
query($limit: Int) {
  boards(limit: $limit) {%s}
}
""" % _BOARD_FIELDS

ITEMS_QUERY = """
query($boardId: [ID!], $limit: Int) {
  boards(ids: $boardId) {
    items_page(limit: $limit) {
      items {
        id
        name
        column_values {%s}
        group {
          id
          title
          color
          position
        }
        subitems {
          id
          name
          column_values {%s}
        }
      }
    }
  }
}
""" % (_COLUMN_VALUE_FIELDS, _COLUMN_VALUE_FIELDS)

CATALOG_QUERY = """
query($sourceBoardId: [ID!]) {
  boards(ids: $sourceBoardId) {
    id
    name
    columns {
      id
      title
      type
    }
  }
}
"""


def api_token_from_env() -> Optional[str]:
    for key in ("GANTTLY_API_TOKEN", "MONDAY_API_TOKEN"):
        v = (os.getenv(key, "") or "").strip()
        if v:
            return v
    return None


def _api_timeout_s() -> float:
    raw = (os.getenv("GANTTLY_API_TIMEOUT_S", "30") or "").strip()
    try:
        v = float(raw)
        if v > 0:
            return v
    except ValueError:
        pass
    return 30.0


class MondayClient:
    """Minimal GraphQL client for boards, items and field catalogs."""

    def __init__(
        self,
        token: Optional[str] = None,
        *,
        api_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
    ) -> None:
        self.token = token if token is not None else api_token_from_env()
        self.api_url = api_url or os.getenv("GANTTLY_API_URL") or DEFAULT_API_URL
        self.timeout_s = float(timeout_s) if timeout_s else _api_timeout_s()

    def query(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """POST one GraphQL query and return its `data` object."""
        body = json.dumps({"query": query, "variables": variables or {}}).encode("utf-8")
        req = request.Request(self.api_url, data=body, method="POST")
        req.add_header("Content-Type", "application/json")
        req.add_header("API-Version", API_VERSION)
        if self.token:
            req.add_header("Authorization", self.token)

        t0 = time.monotonic()
        try:
            with request.urlopen(req, timeout=self.timeout_s) as resp:
                text = resp.read().decode("utf-8", errors="replace")
        except error.HTTPError as e:
            elapsed_ms = int((time.monotonic() - t0) * 1000)
            body_txt = ""
            try:
                body_txt = e.read().decode("utf-8", errors="replace").strip()
            except Exception:
                body_txt = ""
            suffix = f" body={body_txt[:400]!r}" if body_txt else ""
            raise SourceError(f"monday API HTTP {e.code} after {elapsed_ms}ms.{suffix}") from e
        except (error.URLError, http.client.HTTPException, OSError) as e:
            elapsed_ms = int((time.monotonic() - t0) * 1000)
            raise SourceError(f"monday API connection error after {elapsed_ms}ms: {e}") from e

        elapsed_ms = int((time.monotonic() - t0) * 1000)
        if not text.strip():
            raise SourceError(f"monday API returned empty response after {elapsed_ms}ms")
        try:
            obj = json.loads(text)
        except ValueError as e:
            raise SourceError(f"monday API returned invalid JSON after {elapsed_ms}ms: {e}") from e
        if not isinstance(obj, dict):
            raise SourceError("monday API response must be a JSON object")

        errs = obj.get("errors")
        if isinstance(errs, list) and errs:
            first = errs[0].get("message") if isinstance(errs[0], dict) else errs[0]
            raise SourceError(f"monday API error: {first}")

        data = obj.get("data")
        if not isinstance(data, dict):
            raise SourceError("monday API response has no data object")
        if obs_enabled():
            eprint(f"[ganttly.monday] query.ok ms={elapsed_ms}")
        return data

    def fetch_boards(self, ids: Optional[Sequence[str]] = None) -> List[Board]:
        if not ids:
            return self.fetch_connected_boards()
        data = self.query(BOARDS_QUERY, {"boardIds": [str(i) for i in ids]})
        return normalize_boards(data.get("boards"))

    def fetch_connected_boards(self, limit: int = 100) -> List[Board]:
        data = self.query(CONNECTED_BOARDS_QUERY, {"limit": int(limit)})
        return normalize_boards(data.get("boards"))

    def fetch_items(self, board_id: str, limit: int = 100) -> List[Item]:
        data = self.query(ITEMS_QUERY, {"boardId": [str(board_id)], "limit": int(limit)})
        boards = data.get("boards")
        if not isinstance(boards, list) or not boards or not isinstance(boards[0], dict):
            return []
        page = boards[0].get("items_page")
        items = page.get("items") if isinstance(page, dict) else None
        return normalize_items(items)

    def fetch_field_catalog(self, board_id: str) -> Optional[FieldCatalog]:
        data = self.query(CATALOG_QUERY, {"sourceBoardId": [str(board_id)]})
        boards = data.get("boards")
        if not isinstance(boards, list) or not boards:
            return None
        board = normalize_board(boards[0])
        if board is None:
            return None
        return catalog_from_board(board)
