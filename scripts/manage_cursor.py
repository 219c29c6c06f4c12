"""Utility script to inspect or reset the activity log cursor of a viewer."""

from __future__ import annotations

import argparse

from sqlalchemy.exc import SQLAlchemyError

from dashboard_sync.domain.entities import CURSOR_KEY_PREFIX
from dashboard_sync.infrastructure.database import SessionLocal, initialize_database
from dashboard_sync.infrastructure.repositories import CursorRepository, SqlKeyValueStore


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for cursor management."""

    parser = argparse.ArgumentParser(
        description="Show or clear the persisted activity log cursors.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    show = subparsers.add_parser("show", help="Print the cursor of a viewer")
    show.add_argument("viewer_id", help="Identifier of the viewer")

    clear = subparsers.add_parser(
        "clear",
        help="Delete the cursor of a viewer so the next session backfills recent activity",
    )
    clear.add_argument("viewer_id", help="Identifier of the viewer")

    subparsers.add_parser("list", help="List every viewer with a stored cursor")
    return parser.parse_args()


def main() -> None:
    """Run the requested cursor command."""

    args = parse_args()
    initialize_database()

    store = SqlKeyValueStore(SessionLocal)
    cursors = CursorRepository(store)
    try:
        if args.command == "show":
            cursor = cursors.get(args.viewer_id)
            if cursor is None:
                print(f"No cursor stored for viewer {args.viewer_id}")
            else:
                print(f"{cursor.storage_key} = {cursor.last_seen_event_id}")
        elif args.command == "clear":
            cursors.clear(args.viewer_id)
            print(f"Cursor cleared for viewer {args.viewer_id}")
        else:
            keys = store.keys(CURSOR_KEY_PREFIX)
            if not keys:
                print("No cursors stored")
            for key in keys:
                print(f"{key[len(CURSOR_KEY_PREFIX):]}: {store.get(key)}")
    except SQLAlchemyError as exc:
        raise SystemExit(f"Database error: {exc}") from exc


if __name__ == "__main__":
    main()
