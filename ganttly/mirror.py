# ganttly/mirror.py
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .decode import MIRROR, Err, kind_of, load_json
from .model import Board, FieldCatalog, Item, MirrorDatum, MirrorMapping
from .util.console import eprint, obs_enabled

CatalogFetcher = Callable[[str], Optional[FieldCatalog]]


def _source_ref(settings: Any) -> Optional[Tuple[str, str]]:
    """Return (source_board_id, source_field_id) from mirror field settings.

    Accepted shapes:
      {"mirrorBoardId": 123, "mirrorColumnId": "status"}
      {"displayed_linked_columns": {"123": ["status", ...]}}   (first pair)
    """
    if not isinstance(settings, dict):
        return None

    board_id = settings.get("mirrorBoardId")
    field_id = settings.get("mirrorColumnId")
    if board_id and field_id:
        return str(board_id), str(field_id)

    linked = settings.get("displayed_linked_columns")
    if isinstance(linked, dict):
        for bid, cols in linked.items():
            if not bid or not isinstance(cols, list):
                continue
            for col in cols:
                if isinstance(col, str) and col:
                    return str(bid), col
    return None


def resolve_mirror_mappings(board: Board, fetch_catalog: CatalogFetcher) -> List[MirrorMapping]:
    """Resolve every mirror/lookup field on `board` to its source board/field.

    Fields with unparsable settings or an unresolvable source are skipped;
    a single bad field never fails the batch.
    """
    mappings: List[MirrorMapping] = []
    catalogs: Dict[str, Optional[FieldCatalog]] = {}

    for fd in board.fields:
        if kind_of(fd.type) != MIRROR:
            continue

        res = load_json(fd.settings_str or "{}")
        if isinstance(res, Err):
            eprint(f"[ganttly.mirror] WARN: unparsable settings board={board.id} field={fd.id}: {res.error.reason}")
            continue
        ref = _source_ref(res.value)
        if ref is None:
            if obs_enabled():
                eprint(f"[ganttly.mirror] no source reference board={board.id} field={fd.id}")
            continue
        src_board_id, src_field_id = ref

        if src_board_id not in catalogs:
            try:
                catalogs[src_board_id] = fetch_catalog(src_board_id)
            except Exception as ex:
                eprint(f"[ganttly.mirror] WARN: catalog fetch failed board={src_board_id}: {ex}")
                catalogs[src_board_id] = None
        catalog = catalogs[src_board_id]
        if catalog is None:
            eprint(f"[ganttly.mirror] WARN: source board not found board={src_board_id} (mirror {board.id}/{fd.id})")
            continue

        src_field = next((f for f in catalog.fields if f.id == src_field_id), None)
        if src_field is None:
            eprint(
                f"[ganttly.mirror] WARN: source field not found {src_board_id}/{src_field_id} "
                f"(mirror {board.id}/{fd.id})"
            )
            continue

        mappings.append(
            MirrorMapping(
                source_board_id=src_board_id,
                source_board_name=catalog.board_name,
                source_field_id=src_field_id,
                source_field_title=src_field.title,
                mirror_field_id=fd.id,
                mirror_field_title=fd.title,
                target_board_id=board.id,
            )
        )

    if obs_enabled():
        eprint(f"[ganttly.mirror] board={board.id} mappings={len(mappings)}")
    return mappings


def resolve_mirror_data(item: Item, mappings: Sequence[MirrorMapping]) -> Dict[str, MirrorDatum]:
    out: Dict[str, MirrorDatum] = {}
    for m in mappings:
        fv = item.field(m.mirror_field_id)
        if fv is None or not fv.value:
            continue
        res = load_json(fv.value)
        if isinstance(res, Err):
            raw: Any = fv.text
        else:
            raw = res.value
        out[m.mirror_field_id] = MirrorDatum(
            display_value=fv.text,
            raw_value=raw,
            source_field_title=m.source_field_title,
            source_board_name=m.source_board_name,
            type=fv.type,
        )
    return out
