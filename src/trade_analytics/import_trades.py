from __future__ import annotations

import argparse
import sys
from pathlib import Path

from trade_analytics.config.app_config import configure_logging, load_app_config
from trade_analytics.config.calendars import resolve_calendar_context
from trade_analytics.errors import ConfigError
from trade_analytics.ingest.journal_export import load_trades
from trade_analytics.storage.sqlite_store import connect, init_db, upsert_trades


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Import a journal trade export into the sqlite database.")
    parser.add_argument("trades_path", type=Path, help="Path to the trade export JSON.")
    parser.add_argument("--calendar", type=str, default=None, help="Calendar name or id from calendars config.")
    parser.add_argument("--db", type=Path, default=None, help="Override the sqlite database path.")
    args = parser.parse_args(argv)

    if not args.trades_path.exists():
        raise SystemExit(f"Trade export not found: {args.trades_path}")

    try:
        app_config = load_app_config()
        context = resolve_calendar_context(args.calendar, app_config)
    except ConfigError as exc:
        print(f"Config error: {exc}", file=sys.stderr)
        return 2
    configure_logging(app_config.app.log_level)

    try:
        result = load_trades(args.trades_path)
    except ValueError as exc:
        print(f"Trade export unreadable: {exc}", file=sys.stderr)
        return 2
    db_path = args.db or app_config.app.db_path
    conn = connect(db_path)
    try:
        init_db(conn)
        count = upsert_trades(conn, result.trades, calendar_id=context.calendar_id)
    finally:
        conn.close()

    print(f"trades_imported {count}")
    print(f"trades_skipped {result.skipped}")
    print(f"calendar_id {context.calendar_id}")
    print(f"db {db_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
