from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any

from trade_analytics.errors import TradeStoreError
from trade_analytics.ingest.journal_export import normalize_trade
from trade_analytics.models import Trade

logger = logging.getLogger(__name__)


def connect(db_path: Path) -> sqlite3.Connection:
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    return conn


def load_trades(conn: sqlite3.Connection, *, calendar_id: str) -> list[Trade]:
    rows = conn.execute(
        "SELECT * FROM trades WHERE calendar_id = ? ORDER BY trade_date, rowid",
        (calendar_id,),
    ).fetchall()
    trades: list[Trade] = []
    for row in rows:
        trades.append(
            normalize_trade(
                {
                    "id": row["trade_id"],
                    "trade_date": row["trade_date"],
                    "trade_type": row["trade_type"],
                    "amount": row["amount"],
                    "risk_to_reward": row["risk_to_reward"],
                    "tags": _maybe_json(row["tags_json"]),
                    "session": row["session"],
                    "name": row["name"],
                },
                calendar_id=row["calendar_id"],
            )
        )
    return trades


class SqliteTradeStore:
    """Trade storage collaborator backed by the sqlite journal database."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path

    def trades_for_calendar(self, calendar_id: str) -> list[Trade]:
        if not self.db_path.exists():
            raise TradeStoreError(f"Database not found: {self.db_path}", calendar_id=calendar_id)
        try:
            conn = connect(self.db_path)
            try:
                return load_trades(conn, calendar_id=calendar_id)
            finally:
                conn.close()
        except sqlite3.Error as exc:
            logger.error("Failed to load trades for calendar %s: %s", calendar_id, exc)
            raise TradeStoreError(f"Failed to load trades: {exc}", calendar_id=calendar_id) from exc
        except ValueError as exc:
            logger.error("Stored trade for calendar %s is invalid: %s", calendar_id, exc)
            raise TradeStoreError(f"Stored trade is invalid: {exc}", calendar_id=calendar_id) from exc


def _maybe_json(value: Any) -> Any:
    if value is None:
        return []
    if not isinstance(value, str):
        return value
    text = value.strip()
    if not text:
        return []
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return value
