from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Iterable

from trade_analytics.metrics.equity import realized_profit_percent, total_pnl
from trade_analytics.models import DynamicRiskSettings, Trade


@dataclass(frozen=True)
class DynamicRiskStatus:
    is_active: bool
    threshold_met: bool
    current_risk_percent: float | None
    base_risk_percent: float | None
    profit_percent: float
    risk_amount: float | None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def escalation_configured(settings: DynamicRiskSettings) -> bool:
    return (
        settings.dynamic_risk_enabled
        and settings.increased_risk_percent is not None
        and settings.profit_threshold_percent is not None
    )


def effective_risk_percent(settings: DynamicRiskSettings, realized_profit_percent: float) -> float | None:
    """Risk per trade in effect, or None when no risk is configured.

    The escalated percentage applies once realized profit reaches the
    threshold; otherwise the baseline applies.
    """
    if escalation_configured(settings) and realized_profit_percent >= settings.profit_threshold_percent:
        return settings.increased_risk_percent
    return settings.risk_per_trade_percent


def risk_amount(effective_risk: float, account_equity: float, total_profit: float = 0.0) -> float:
    # Sized on the current account value, not the starting balance.
    return (account_equity + total_profit) * effective_risk / 100.0


def dynamic_risk_status(
    trades: Iterable[Trade],
    settings: DynamicRiskSettings,
    account_equity: float,
    *,
    account_profit: float | None = None,
) -> DynamicRiskStatus:
    """Risk state for the evaluated trades.

    Escalation is judged on the evaluated trades. The dollar amount is sized
    on the whole account, so ``account_profit`` is the P&L of every trade in
    the calendar; it falls back to the evaluated trades when omitted.
    """
    trade_list = list(trades)
    profit = total_pnl(trade_list) if account_profit is None else account_profit
    profit_percent = realized_profit_percent(trade_list, account_equity)
    current = effective_risk_percent(settings, profit_percent)
    threshold_met = (
        settings.profit_threshold_percent is not None and profit_percent >= settings.profit_threshold_percent
    )
    is_active = (
        escalation_configured(settings)
        and account_equity > 0
        and threshold_met
        and current == settings.increased_risk_percent
    )
    amount = None
    if current is not None:
        amount = risk_amount(current, account_equity, profit)
    return DynamicRiskStatus(
        is_active=is_active,
        threshold_met=threshold_met,
        current_risk_percent=current,
        base_risk_percent=settings.risk_per_trade_percent,
        profit_percent=profit_percent,
        risk_amount=amount,
    )


def effective_max_daily_drawdown(
    max_daily_drawdown_percent: float | None,
    status: DynamicRiskStatus,
    settings: DynamicRiskSettings,
) -> float | None:
    if max_daily_drawdown_percent is None:
        return None
    if not status.is_active or settings.increased_risk_percent is None:
        return max_daily_drawdown_percent
    base = settings.risk_per_trade_percent or 1.0
    return max_daily_drawdown_percent * (settings.increased_risk_percent / base)
