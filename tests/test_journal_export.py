from __future__ import annotations

import json
from datetime import date

import pytest

from trade_analytics.ingest.journal_export import load_trades, load_trades_payload, normalize_trade, parse_trade_date
from trade_analytics.models import OUTCOME_BREAKEVEN, OUTCOME_LOSS, OUTCOME_WIN


def test_normalize_camel_case_record() -> None:
    trade = normalize_trade(
        {
            "id": "abc",
            "tradeDate": "2024-03-05T23:30:00Z",
            "amount": "125.5",
            "tradeType": "win",
            "riskToReward": 2,
            "tags": ["Setup:Breakout", "A+", "Setup:Breakout"],
            "session": " NY AM ",
            "calendarId": "cal-1",
        }
    )
    assert trade.trade_id == "abc"
    assert trade.trade_date == date(2024, 3, 5)
    assert trade.amount == 125.5
    assert trade.outcome == OUTCOME_WIN
    assert trade.risk_to_reward == 2.0
    assert trade.tags == ("Setup:Breakout", "A+")
    assert trade.session == "NY AM"
    assert trade.calendar_id == "cal-1"


def test_normalize_snake_case_with_defaults() -> None:
    trade = normalize_trade(
        {"trade_id": 7, "date": "2024-01-02", "pnl": -3, "type": "Loss", "tags": "a, b ,"},
        calendar_id="main",
    )
    assert trade.trade_id == "7"
    assert trade.outcome == OUTCOME_LOSS
    assert trade.tags == ("a", "b")
    assert trade.risk_to_reward is None
    assert trade.session is None
    assert trade.calendar_id == "main"


def test_breakeven_aliases() -> None:
    trade = normalize_trade({"id": 1, "date": "2024-01-02", "amount": 0, "type": "break-even"})
    assert trade.outcome == OUTCOME_BREAKEVEN


@pytest.mark.parametrize(
    "record",
    [
        {"date": "2024-01-02", "amount": 1, "type": "win"},
        {"id": 1, "amount": 1, "type": "win"},
        {"id": 1, "date": "2024-01-02", "type": "win"},
        {"id": 1, "date": "2024-01-02", "amount": "x", "type": "win"},
        {"id": 1, "date": "2024-01-02", "amount": float("nan"), "type": "win"},
        {"id": 1, "date": "2024-01-02", "amount": 1, "type": "scalp"},
        {"id": 1, "date": "2024-01-02", "amount": 1, "type": "win", "riskToReward": -1},
        {"id": 1, "date": "not-a-date", "amount": 1, "type": "win"},
    ],
)
def test_invalid_records_raise(record: dict) -> None:
    with pytest.raises(ValueError):
        normalize_trade(record)


def test_date_keeps_calendar_day_as_written() -> None:
    assert parse_trade_date("2024-06-30T23:59:59-05:00") == date(2024, 6, 30)
    assert parse_trade_date("2024-06-30") == date(2024, 6, 30)


def test_payload_counts_skipped_records() -> None:
    payload = {
        "trades": [
            {"id": 1, "date": "2024-01-02", "amount": 5, "type": "win"},
            {"id": 2, "date": "2024-01-02", "amount": 5},
        ]
    }
    result = load_trades_payload(payload)
    assert [trade.trade_id for trade in result.trades] == ["1"]
    assert result.skipped == 1


def test_payload_filters_foreign_calendars() -> None:
    payload = [
        {"id": 1, "date": "2024-01-02", "amount": 5, "type": "win", "calendarId": "a"},
        {"id": 2, "date": "2024-01-02", "amount": 5, "type": "win", "calendarId": "b"},
        {"id": 3, "date": "2024-01-02", "amount": 5, "type": "win"},
    ]
    result = load_trades_payload(payload, calendar_id="a")
    assert [trade.trade_id for trade in result.trades] == ["1", "3"]


def test_unsupported_payload_shape() -> None:
    with pytest.raises(ValueError):
        load_trades_payload({"rows": []})


def test_load_trades_from_file(tmp_path) -> None:
    path = tmp_path / "export.json"
    path.write_text(
        json.dumps({"data": {"trades": [{"id": "x", "date": "2024-01-02", "amount": 1, "type": "win"}]}}),
        encoding="utf-8",
    )
    result = load_trades(path)
    assert len(result.trades) == 1
