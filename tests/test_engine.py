from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from conftest import make_trade
from trade_analytics.engine import PerformanceRequest, STEPS, compute_performance, compute_tag_performance
from trade_analytics.models import DynamicRiskSettings, PERIOD_ALL, PERIOD_MONTH


def test_scenario_a_report(scenario_a_trades) -> None:
    report = compute_performance(scenario_a_trades, PerformanceRequest(date(2024, 3, 15), PERIOD_MONTH))
    assert report.streaks.max_win_streak == 2
    assert report.streaks.avg_win_streak == 2.0
    assert report.streaks.max_loss_streak == 1
    assert report.win_loss_stats.win_rate == pytest.approx(66.67, abs=0.01)
    assert report.chart_data[-1].cumulative_pnl == 120.0
    assert len(report.chart_data) == 31
    assert (report.start_date, report.end_date) == (date(2024, 3, 1), date(2024, 3, 31))


def test_every_component_sees_the_filtered_window(journal_trades) -> None:
    report = compute_performance(journal_trades, PerformanceRequest(date(2024, 2, 1), PERIOD_MONTH))
    assert report.win_loss_stats.total_trades == 1
    assert [row.trade_date for row in report.daily_summary] == [date(2024, 2, 2)]
    assert report.all_tags == ["A+", "Setup:Reversal"]
    assert sum(row.total_trades for row in report.session_stats) == 1


def test_report_carries_targets_and_risk(journal_trades) -> None:
    request = PerformanceRequest(
        date(2024, 1, 1),
        PERIOD_ALL,
        account_equity=1000.0,
        comparison_tags=("A+",),
        risk_settings=DynamicRiskSettings(1.0, True, 2.0, 10.0),
        max_daily_drawdown_percent=2.0,
        monthly_target_percent=20.0,
    )
    report = compute_performance(journal_trades, request)
    assert report.dynamic_risk.is_active is True
    assert report.dynamic_risk.current_risk_percent == 2.0
    assert report.effective_max_daily_drawdown == 4.0
    assert report.monthly_target == 200.0
    assert report.drawdown_violation == -20.0
    assert report.target_progress == pytest.approx(67.5)
    assert report.comparison_win_loss_data == [
        {"name": "Wins", "value": 2},
        {"name": "Breakeven", "value": 1},
    ]


def test_report_to_dict_is_json_ready(journal_trades) -> None:
    payload = compute_performance(journal_trades, PerformanceRequest(date(2024, 1, 10), "Month")).to_dict()
    assert payload["period"] == "month"
    assert payload["start_date"] == "2024-01-01"
    assert payload["comparison_win_loss_data"] is None
    assert payload["chart_data"][0]["date"] == "01/01"
    assert set(payload) >= {"win_loss_stats", "risk_reward_stats", "tag_stats", "session_stats", "daily_summary"}


def test_empty_input_returns_zeroed_report() -> None:
    report = compute_performance([], PerformanceRequest(date(2024, 1, 10), PERIOD_ALL, today=date(2024, 1, 10)))
    assert report.win_loss_stats.total_trades == 0
    assert report.tag_stats == []
    assert len(report.chart_data) == 1
    assert report.dynamic_risk.current_risk_percent is None
    assert report.monthly_target is None


def test_unknown_period_is_rejected(journal_trades) -> None:
    with pytest.raises(ValueError):
        compute_performance(journal_trades, PerformanceRequest(date(2024, 1, 1), "week"))


def test_step_names_are_unique() -> None:
    names = [name for name, _ in STEPS]
    assert len(names) == len(set(names))


def test_tag_performance_payload(journal_trades) -> None:
    payload = compute_tag_performance(journal_trades, date(2024, 1, 1), PERIOD_ALL, ["A+", "Setup:Breakout"], [])
    assert [row["tag"] for row in payload["tag_stats"]] == ["Setup:Breakout", "A+"]
    assert payload["all_tags"] == ["A+", "Setup:Breakout", "Setup:Reversal"]
    empty = compute_tag_performance(journal_trades, date(2024, 1, 1), PERIOD_ALL, [], [])
    assert empty["tag_stats"] == []


def test_dollar_risk_is_sized_on_the_whole_account() -> None:
    trades = [
        make_trade("jan", date(2024, 1, 10), 5000.0),
        make_trade("mar", date(2024, 3, 10), 100.0),
    ]
    request = PerformanceRequest(
        date(2024, 3, 15),
        PERIOD_MONTH,
        account_equity=10000.0,
        risk_settings=DynamicRiskSettings(risk_per_trade_percent=1.0),
    )
    report = compute_performance(trades, request)
    assert report.win_loss_stats.total_trades == 1
    assert report.dynamic_risk.profit_percent == pytest.approx(1.0)
    assert report.dynamic_risk.risk_amount == pytest.approx(151.0)
    whole = compute_performance(trades, replace(request, period=PERIOD_ALL))
    assert whole.dynamic_risk.risk_amount == pytest.approx(151.0)
