"""Shared fixtures for the trade-analytics test suite."""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from trade_analytics.config.app_config import AppConfig, load_app_config
from trade_analytics.models import OUTCOME_BREAKEVEN, OUTCOME_LOSS, OUTCOME_WIN, Trade


def make_trade(
    trade_id: str,
    trade_date: date,
    amount: float,
    outcome: str | None = None,
    **kwargs,
) -> Trade:
    """Build a trade; the outcome defaults to the sign of the amount."""
    if outcome is None:
        if amount > 0:
            outcome = OUTCOME_WIN
        elif amount < 0:
            outcome = OUTCOME_LOSS
        else:
            outcome = OUTCOME_BREAKEVEN
    return Trade(trade_id=trade_id, trade_date=trade_date, amount=amount, outcome=outcome, **kwargs)


@pytest.fixture
def scenario_a_trades() -> list[Trade]:
    """Win, breakeven, win, loss on consecutive days."""
    return [
        make_trade("t1", date(2024, 3, 1), 100.0, OUTCOME_WIN),
        make_trade("t2", date(2024, 3, 2), 0.0, OUTCOME_BREAKEVEN),
        make_trade("t3", date(2024, 3, 3), 50.0, OUTCOME_WIN),
        make_trade("t4", date(2024, 3, 4), -30.0, OUTCOME_LOSS),
    ]


@pytest.fixture
def journal_trades() -> list[Trade]:
    """A small mixed journal spanning two months and two years."""
    return [
        make_trade("j1", date(2023, 12, 28), 40.0, tags=("Setup:Breakout",), session="London"),
        make_trade("j2", date(2024, 1, 3), 120.0, tags=("Setup:Breakout", "A+"), session="NY AM", risk_to_reward=2.5),
        make_trade("j3", date(2024, 1, 3), -60.0, tags=("Setup:Reversal",), session="NY AM", risk_to_reward=1.0),
        make_trade("j4", date(2024, 1, 10), 0.0, tags=("A+",), session="Asia"),
        make_trade("j5", date(2024, 1, 15), -45.0, tags=("Setup:Breakout",), session="London", risk_to_reward=1.5),
        make_trade("j6", date(2024, 2, 2), 80.0, tags=("Setup:Reversal", "A+"), session="NY PM", risk_to_reward=3.0),
    ]


@pytest.fixture
def isolated_env(tmp_path: Path) -> dict[str, str]:
    """Environment pointing config lookups at files that do not exist."""
    return {
        "TRADE_ANALYTICS_CONFIG": str(tmp_path / "missing-app.toml"),
        "TRADE_ANALYTICS_CALENDARS_CONFIG": str(tmp_path / "missing-calendars.toml"),
    }


@pytest.fixture
def write_config(tmp_path: Path):
    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def app_config(write_config) -> AppConfig:
    path = write_config(
        "app.toml",
        """
[app]
db_path = "unused.sqlite"

[account]
account_equity = 10000.0
max_daily_drawdown_percent = 2.0
monthly_target_percent = 5.0

[risk]
risk_per_trade_percent = 1.0
dynamic_risk_enabled = true
increased_risk_percent = 2.0
profit_threshold_percent = 10.0
""",
    )
    return load_app_config(path, env={})
