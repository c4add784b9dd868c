from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Iterable

from trade_analytics.models import Trade


def connect(db_path: Path) -> sqlite3.Connection:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path))
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS trades (
            trade_id TEXT NOT NULL,
            calendar_id TEXT NOT NULL,
            trade_date TEXT NOT NULL,
            trade_type TEXT NOT NULL,
            amount REAL NOT NULL,
            risk_to_reward REAL,
            tags_json TEXT NOT NULL,
            session TEXT,
            name TEXT,
            PRIMARY KEY (calendar_id, trade_id)
        )
        """
    )
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_trades_calendar_date ON trades (calendar_id, trade_date)"
    )
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS schema_version (
            version INTEGER PRIMARY KEY,
            applied_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
        )
        """
    )
    conn.execute("INSERT OR IGNORE INTO schema_version (version) VALUES (1)")
    conn.commit()


def upsert_trades(conn: sqlite3.Connection, trades: Iterable[Trade], *, calendar_id: str | None = None) -> int:
    rows = []
    for trade in trades:
        scoped_calendar = calendar_id or trade.calendar_id
        if not scoped_calendar:
            raise ValueError(f"Trade {trade.trade_id} has no calendar_id")
        rows.append(
            {
                "trade_id": trade.trade_id,
                "calendar_id": scoped_calendar,
                "trade_date": trade.trade_date.isoformat(),
                "trade_type": trade.outcome,
                "amount": trade.amount,
                "risk_to_reward": trade.risk_to_reward,
                "tags_json": json.dumps(list(trade.tags)),
                "session": trade.session,
                "name": trade.name,
            }
        )
    conn.executemany(
        """
        INSERT INTO trades (
            trade_id, calendar_id, trade_date, trade_type, amount, risk_to_reward, tags_json, session, name
        )
        VALUES (
            :trade_id, :calendar_id, :trade_date, :trade_type, :amount, :risk_to_reward, :tags_json, :session, :name
        )
        ON CONFLICT(calendar_id, trade_id) DO UPDATE SET
            trade_date=excluded.trade_date,
            trade_type=excluded.trade_type,
            amount=excluded.amount,
            risk_to_reward=excluded.risk_to_reward,
            tags_json=excluded.tags_json,
            session=excluded.session,
            name=excluded.name
        """,
        rows,
    )
    conn.commit()
    return len(rows)
