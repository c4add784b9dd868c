from __future__ import annotations

import sqlite3
from datetime import date
from pathlib import Path

import pytest

from conftest import make_trade
from trade_analytics.errors import TradeStoreError
from trade_analytics.storage import sqlite_reader
from trade_analytics.storage.sqlite_reader import SqliteTradeStore
from trade_analytics.storage.sqlite_store import connect, init_db, upsert_trades


@pytest.fixture
def db_path(tmp_path: Path, journal_trades) -> Path:
    path = tmp_path / "db" / "journal.sqlite"
    conn = connect(path)
    try:
        init_db(conn)
        upsert_trades(conn, journal_trades, calendar_id="main")
        upsert_trades(conn, [make_trade("other", date(2024, 1, 1), 5.0)], calendar_id="side")
    finally:
        conn.close()
    return path


def test_round_trip_through_store(db_path: Path, journal_trades) -> None:
    loaded = SqliteTradeStore(db_path).trades_for_calendar("main")
    assert sorted(trade.trade_id for trade in loaded) == sorted(trade.trade_id for trade in journal_trades)
    by_id = {trade.trade_id: trade for trade in loaded}
    original = {trade.trade_id: trade for trade in journal_trades}["j2"]
    assert by_id["j2"].tags == original.tags
    assert by_id["j2"].risk_to_reward == original.risk_to_reward
    assert by_id["j2"].session == "NY AM"
    assert by_id["j2"].trade_date == original.trade_date
    assert by_id["j2"].calendar_id == "main"


def test_calendars_are_isolated(db_path: Path) -> None:
    store = SqliteTradeStore(db_path)
    assert [trade.trade_id for trade in store.trades_for_calendar("side")] == ["other"]
    assert store.trades_for_calendar("missing") == []


def test_upsert_replaces_existing_rows(db_path: Path) -> None:
    conn = connect(db_path)
    try:
        upsert_trades(conn, [make_trade("other", date(2024, 1, 2), -7.0)], calendar_id="side")
    finally:
        conn.close()
    (trade,) = SqliteTradeStore(db_path).trades_for_calendar("side")
    assert trade.amount == -7.0
    assert trade.trade_date == date(2024, 1, 2)


def test_upsert_requires_calendar(tmp_path: Path) -> None:
    conn = connect(tmp_path / "x.sqlite")
    try:
        init_db(conn)
        with pytest.raises(ValueError):
            upsert_trades(conn, [make_trade("a", date(2024, 1, 1), 1.0)])
    finally:
        conn.close()


def test_missing_database_is_a_store_error(tmp_path: Path) -> None:
    with pytest.raises(TradeStoreError) as excinfo:
        SqliteTradeStore(tmp_path / "absent.sqlite").trades_for_calendar("main")
    assert excinfo.value.calendar_id == "main"


def test_missing_schema_is_a_store_error(tmp_path: Path) -> None:
    path = tmp_path / "empty.sqlite"
    sqlite3.connect(str(path)).close()
    with pytest.raises(TradeStoreError):
        SqliteTradeStore(path).trades_for_calendar("main")
