from __future__ import annotations

from typing import Iterable

from trade_analytics.metrics.equity import total_pnl
from trade_analytics.models import Trade


def monthly_target_value(monthly_target_percent: float | None, account_equity: float) -> float | None:
    if monthly_target_percent is None or account_equity <= 0:
        return None
    return monthly_target_percent / 100.0 * account_equity


def drawdown_violation_value(max_daily_drawdown_percent: float | None, account_equity: float) -> float | None:
    if max_daily_drawdown_percent is None or account_equity <= 0:
        return None
    return -(max_daily_drawdown_percent / 100.0) * account_equity


def target_progress(
    trades: Iterable[Trade],
    account_equity: float,
    monthly_target_percent: float | None,
) -> float:
    target = monthly_target_value(monthly_target_percent, account_equity)
    if not target or target <= 0:
        return 0.0
    progress = total_pnl(trades) / target * 100.0
    return min(max(progress, 0.0), 100.0)
