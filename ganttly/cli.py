from __future__ import annotations

import argparse
import json
import os
from pathlib import Path

from .layout import DEFAULT_VIEWPORT_WIDTH
from .model import SORT_DIRECTIONS
from .monday import MondayClient
from .notify import ConsoleNotifier
from .payload import build_payload
from .refresh import DEFAULT_ITEM_LIMIT
from .settings import DEFAULT_SETTINGS, JsonFileSettingsStore, load_settings_file, merge_settings
from .snapshot import SnapshotSource
from .validate import SettingsValidationError, SnapshotValidationError


def _split_ids(raw: str | None) -> list[str] | None:
    if raw is None:
        return None
    return [p.strip() for p in raw.split(",") if p.strip()]


def main(argv: list[str] | None = None) -> None:
    default_out = os.path.join("build", "ganttly_layout.json")
    ap = argparse.ArgumentParser(
        description="Derive Gantt tasks from monday.com boards and write the timeline layout as JSON."
    )
    ap.add_argument("--snapshot", default=None, help="Offline board snapshot JSON (skips the API)")
    ap.add_argument("--token", default=None, help="API token (default: env GANTTLY_API_TOKEN or MONDAY_API_TOKEN)")
    ap.add_argument("--api-url", default=None, help="GraphQL endpoint (default: env GANTTLY_API_URL or monday v2)")
    ap.add_argument("--boards", default=None, help="Comma-separated board ids (default: stored selection or all boards)")

    ap.add_argument("--settings", default=None, help="Settings JSON (default: env GANTTLY_SETTINGS or ~/.ganttly/settings.json)")
    ap.add_argument("--save-settings", action="store_true", help="Persist the effective settings after this run")

    ap.add_argument("--timeline-column", default=None, help="Field id used for task dates")
    ap.add_argument("--color-by", default=None, help="Field id used for bar colors")
    ap.add_argument("--group-by", default=None, help="Field id used for grouping")
    ap.add_argument("--sort-by", default=None, help="Sort key: name, start_date, end_date or a field id")
    ap.add_argument("--sort-direction", default=None, choices=SORT_DIRECTIONS, help="asc or desc")
    ap.add_argument("--show-subitems", dest="show_subitems", action="store_true", default=None)
    ap.add_argument("--no-subitems", dest="show_subitems", action="store_false", default=None)

    ap.add_argument(
        "--viewport-width",
        type=float,
        default=DEFAULT_VIEWPORT_WIDTH,
        help=f"Viewport width in pixels (default: {int(DEFAULT_VIEWPORT_WIDTH)})",
    )
    ap.add_argument("--limit", type=int, default=DEFAULT_ITEM_LIMIT, help="Max items per board (default: 100)")
    ap.add_argument("--out", default=default_out, help="Output JSON path (default: ./build/ganttly_layout.json)")

    args = ap.parse_args(argv)

    store = JsonFileSettingsStore(args.settings) if args.settings else JsonFileSettingsStore()
    if args.settings:
        try:
            base = load_settings_file(args.settings)
        except SettingsValidationError as e:
            raise SystemExit(f"Invalid settings: {e}")
        except (OSError, ValueError) as e:
            raise SystemExit(f"Failed to load settings: {e}")
    else:
        base = store.load() or DEFAULT_SETTINGS

    settings = merge_settings(
        base,
        timeline_column=args.timeline_column,
        color_by_column=args.color_by,
        group_by_column=args.group_by,
        sort_by_column=args.sort_by,
        sort_direction=args.sort_direction,
        show_subitems=args.show_subitems,
        selected_boards=_split_ids(args.boards),
    )

    if args.snapshot:
        try:
            source = SnapshotSource.from_file(args.snapshot)
        except SnapshotValidationError as e:
            raise SystemExit(f"Invalid snapshot: {e}")
        except (OSError, ValueError) as e:
            raise SystemExit(f"Failed to load snapshot: {e}")
    else:
        source = MondayClient(args.token, api_url=args.api_url)
        if not source.token:
            raise SystemExit("No API token: pass --token or set GANTTLY_API_TOKEN")

    if args.limit <= 0:
        raise SystemExit("--limit must be positive")

    data = build_payload(
        source,
        settings,
        viewport_width=float(args.viewport_width),
        board_ids=list(settings.selected_boards),
        limit=int(args.limit),
        notifier=ConsoleNotifier(),
    )

    if args.save_settings:
        store.save(settings)

    out_path = Path(os.path.abspath(args.out))
    try:
        out_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise SystemExit(f"Cannot create output directory '{out_path.parent}': {e}")
    out_path.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n", encoding="utf-8")

    print(str(out_path))


if __name__ == "__main__":
    main()
