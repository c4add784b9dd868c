from __future__ import annotations

from typing import Iterable

from trade_analytics.models import Trade


def total_pnl(trades: Iterable[Trade]) -> float:
    return sum((trade.amount for trade in trades), 0.0)


def realized_profit_percent(trades: Iterable[Trade], account_equity: float) -> float:
    if account_equity <= 0:
        return 0.0
    return total_pnl(trades) / account_equity * 100.0

