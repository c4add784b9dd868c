from __future__ import annotations

from datetime import date

import pytest

from conftest import make_trade
from trade_analytics.metrics.risk import (
    dynamic_risk_status,
    effective_max_daily_drawdown,
    effective_risk_percent,
    risk_amount,
)
from trade_analytics.models import DynamicRiskSettings

ESCALATING = DynamicRiskSettings(
    risk_per_trade_percent=1.0,
    dynamic_risk_enabled=True,
    increased_risk_percent=2.0,
    profit_threshold_percent=10.0,
)


def test_escalation_applies_at_or_above_threshold() -> None:
    assert effective_risk_percent(ESCALATING, 12.0) == 2.0
    assert effective_risk_percent(ESCALATING, 10.0) == 2.0
    assert effective_risk_percent(ESCALATING, 5.0) == 1.0


def test_disabled_escalation_uses_baseline() -> None:
    settings = DynamicRiskSettings(
        risk_per_trade_percent=1.0,
        dynamic_risk_enabled=False,
        increased_risk_percent=2.0,
        profit_threshold_percent=10.0,
    )
    assert effective_risk_percent(settings, 50.0) == 1.0


def test_partial_escalation_config_uses_baseline() -> None:
    settings = DynamicRiskSettings(risk_per_trade_percent=1.0, dynamic_risk_enabled=True, increased_risk_percent=2.0)
    assert effective_risk_percent(settings, 50.0) == 1.0


def test_no_risk_configured_is_none() -> None:
    assert effective_risk_percent(DynamicRiskSettings(), 50.0) is None


def test_risk_amount_uses_current_account_value() -> None:
    assert risk_amount(2.0, 10000.0, 1200.0) == pytest.approx(224.0)
    assert risk_amount(1.0, 10000.0) == 100.0


@pytest.mark.parametrize(
    ("profit", "expected_risk", "active"),
    [(1200.0, 2.0, True), (500.0, 1.0, False)],
)
def test_status_follows_realized_profit(profit: float, expected_risk: float, active: bool) -> None:
    trades = [make_trade("a", date(2024, 1, 1), profit)]
    status = dynamic_risk_status(trades, ESCALATING, 10000.0)
    assert status.current_risk_percent == expected_risk
    assert status.is_active is active
    assert status.base_risk_percent == 1.0
    assert status.risk_amount == pytest.approx((10000.0 + profit) * expected_risk / 100.0)


def test_status_with_zero_equity_never_activates() -> None:
    status = dynamic_risk_status([make_trade("a", date(2024, 1, 1), 500.0)], ESCALATING, 0.0)
    assert status.profit_percent == 0.0
    assert status.is_active is False
    assert status.current_risk_percent == 1.0


def test_effective_drawdown_scales_only_when_active() -> None:
    active = dynamic_risk_status([make_trade("a", date(2024, 1, 1), 1500.0)], ESCALATING, 10000.0)
    inactive = dynamic_risk_status([], ESCALATING, 10000.0)
    assert effective_max_daily_drawdown(2.0, active, ESCALATING) == 4.0
    assert effective_max_daily_drawdown(2.0, inactive, ESCALATING) == 2.0
    assert effective_max_daily_drawdown(None, active, ESCALATING) is None


def test_account_profit_sets_the_dollar_base_only() -> None:
    trades = [make_trade("a", date(2024, 3, 10), 100.0)]
    status = dynamic_risk_status(trades, ESCALATING, 10000.0, account_profit=5100.0)
    assert status.profit_percent == pytest.approx(1.0)
    assert status.current_risk_percent == 1.0
    assert status.risk_amount == pytest.approx(151.0)
