"""Assemble the metric components into one performance report.

Every step reads the same filtered trade window and contributes a slice of
the report. ``compute_performance`` runs the steps back to back; the async
runner walks the same ``STEPS`` table so it can yield and report progress
between them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Iterable

from trade_analytics.metrics.daily import DailySummaryRow, compute_daily_summary
from trade_analytics.metrics.equity import total_pnl
from trade_analytics.metrics.risk import DynamicRiskStatus, dynamic_risk_status, effective_max_daily_drawdown
from trade_analytics.metrics.risk_reward import RiskRewardStats, compute_risk_reward_stats
from trade_analytics.metrics.series import ChartDataPoint, build_cumulative_series, label_format_for
from trade_analytics.metrics.sessions import SessionStat, compute_session_stats
from trade_analytics.metrics.streaks import StreakStats, compute_streaks
from trade_analytics.metrics.summary import (
    WinLossStats,
    compute_comparison_distribution,
    compute_win_loss_distribution,
    compute_win_loss_stats,
)
from trade_analytics.metrics.tags import (
    TagStat,
    collect_tags,
    compute_filtered_tag_performance,
    compute_tag_stats,
    filter_tag_stats,
)
from trade_analytics.metrics.targets import drawdown_violation_value, monthly_target_value, target_progress
from trade_analytics.metrics.window import filter_trades, period_bounds
from trade_analytics.models import DEFAULT_SESSIONS, DynamicRiskSettings, TimePeriod, Trade, parse_period

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PerformanceRequest:
    reference_date: date
    period: TimePeriod
    account_equity: float = 0.0
    comparison_tags: tuple[str, ...] = ()
    risk_settings: DynamicRiskSettings = field(default_factory=DynamicRiskSettings)
    max_daily_drawdown_percent: float | None = None
    monthly_target_percent: float | None = None
    sessions: tuple[str, ...] = DEFAULT_SESSIONS
    today: date | None = None


@dataclass(frozen=True)
class TradeWindow:
    trades: list[Trade]
    start_date: date
    end_date: date
    account_profit: float = 0.0


@dataclass(frozen=True)
class PerformanceReport:
    period: TimePeriod
    reference_date: date
    start_date: date
    end_date: date
    win_loss_stats: WinLossStats
    streaks: StreakStats
    win_loss_data: list[dict[str, Any]]
    comparison_win_loss_data: list[dict[str, Any]] | None
    risk_reward_stats: RiskRewardStats
    tag_stats: list[TagStat]
    all_tags: list[str]
    session_stats: list[SessionStat]
    daily_summary: list[DailySummaryRow]
    chart_data: list[ChartDataPoint]
    dynamic_risk: DynamicRiskStatus
    effective_max_daily_drawdown: float | None
    monthly_target: float | None
    drawdown_violation: float | None
    target_progress: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "period": self.period,
            "reference_date": self.reference_date.isoformat(),
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "win_loss_stats": self.win_loss_stats.to_dict(),
            "streaks": self.streaks.to_dict(),
            "win_loss_data": self.win_loss_data,
            "comparison_win_loss_data": self.comparison_win_loss_data,
            "risk_reward_stats": self.risk_reward_stats.to_dict(),
            "tag_stats": [stat.to_dict() for stat in self.tag_stats],
            "all_tags": self.all_tags,
            "session_stats": [stat.to_dict() for stat in self.session_stats],
            "daily_summary": [row.to_dict() for row in self.daily_summary],
            "chart_data": [point.to_dict() for point in self.chart_data],
            "dynamic_risk": self.dynamic_risk.to_dict(),
            "effective_max_daily_drawdown": self.effective_max_daily_drawdown,
            "monthly_target": self.monthly_target,
            "drawdown_violation": self.drawdown_violation,
            "target_progress": self.target_progress,
        }


Step = Callable[[TradeWindow, PerformanceRequest], dict[str, Any]]


def prepare_window(trades: Iterable[Trade], request: PerformanceRequest) -> TradeWindow:
    period = parse_period(request.period)
    all_trades = list(trades)
    filtered = filter_trades(all_trades, request.reference_date, period)
    start, end = period_bounds(request.reference_date, period, filtered, today=request.today)
    logger.debug(
        "Evaluating %d trades for %s window %s..%s", len(filtered), period, start.isoformat(), end.isoformat()
    )
    return TradeWindow(trades=filtered, start_date=start, end_date=end, account_profit=total_pnl(all_trades))


def _win_loss_step(window: TradeWindow, request: PerformanceRequest) -> dict[str, Any]:
    return {
        "win_loss_stats": compute_win_loss_stats(window.trades),
        "win_loss_data": compute_win_loss_distribution(window.trades),
        "comparison_win_loss_data": compute_comparison_distribution(window.trades, request.comparison_tags),
    }


def _streaks_step(window: TradeWindow, request: PerformanceRequest) -> dict[str, Any]:
    return {"streaks": compute_streaks(window.trades)}


def _risk_reward_step(window: TradeWindow, request: PerformanceRequest) -> dict[str, Any]:
    return {"risk_reward_stats": compute_risk_reward_stats(window.trades)}


def _tags_step(window: TradeWindow, request: PerformanceRequest) -> dict[str, Any]:
    return {"tag_stats": compute_tag_stats(window.trades), "all_tags": collect_tags(window.trades)}


def _sessions_step(window: TradeWindow, request: PerformanceRequest) -> dict[str, Any]:
    return {"session_stats": compute_session_stats(window.trades, request.account_equity, request.sessions)}


def _daily_step(window: TradeWindow, request: PerformanceRequest) -> dict[str, Any]:
    return {"daily_summary": compute_daily_summary(window.trades)}


def _series_step(window: TradeWindow, request: PerformanceRequest) -> dict[str, Any]:
    series = build_cumulative_series(
        window.trades,
        window.start_date,
        window.end_date,
        label_format=label_format_for(parse_period(request.period)),
    )
    return {"chart_data": series}


def _risk_step(window: TradeWindow, request: PerformanceRequest) -> dict[str, Any]:
    status = dynamic_risk_status(
        window.trades,
        request.risk_settings,
        request.account_equity,
        account_profit=window.account_profit,
    )
    return {
        "dynamic_risk": status,
        "effective_max_daily_drawdown": effective_max_daily_drawdown(
            request.max_daily_drawdown_percent, status, request.risk_settings
        ),
        "monthly_target": monthly_target_value(request.monthly_target_percent, request.account_equity),
        "drawdown_violation": drawdown_violation_value(request.max_daily_drawdown_percent, request.account_equity),
        "target_progress": target_progress(window.trades, request.account_equity, request.monthly_target_percent),
    }


STEPS: tuple[tuple[str, Step], ...] = (
    ("win_loss", _win_loss_step),
    ("streaks", _streaks_step),
    ("risk_reward", _risk_reward_step),
    ("tags", _tags_step),
    ("sessions", _sessions_step),
    ("daily_summary", _daily_step),
    ("chart_data", _series_step),
    ("dynamic_risk", _risk_step),
)


def assemble_report(window: TradeWindow, request: PerformanceRequest, parts: dict[str, Any]) -> PerformanceReport:
    return PerformanceReport(
        period=parse_period(request.period),
        reference_date=request.reference_date,
        start_date=window.start_date,
        end_date=window.end_date,
        **parts,
    )


def compute_performance(trades: Iterable[Trade], request: PerformanceRequest) -> PerformanceReport:
    window = prepare_window(trades, request)
    parts: dict[str, Any] = {}
    for _, step in STEPS:
        parts.update(step(window, request))
    return assemble_report(window, request, parts)


def compute_chart_data(
    trades: Iterable[Trade],
    reference_date: date,
    period: TimePeriod,
    *,
    today: date | None = None,
) -> list[ChartDataPoint]:
    request = PerformanceRequest(reference_date=reference_date, period=period, today=today)
    window = prepare_window(trades, request)
    return _series_step(window, request)["chart_data"]


def compute_tag_performance(
    trades: Iterable[Trade],
    reference_date: date,
    period: TimePeriod,
    primary_tags: Iterable[str],
    secondary_tags: Iterable[str] = (),
) -> dict[str, Any]:
    request = PerformanceRequest(reference_date=reference_date, period=period)
    window = prepare_window(trades, request)
    primary = list(primary_tags)
    secondary = list(secondary_tags)
    selected = filter_tag_stats(compute_tag_stats(window.trades), window.trades, primary, secondary)
    combined = compute_filtered_tag_performance(window.trades, primary, secondary)
    return {
        "all_tags": collect_tags(window.trades),
        "tag_stats": [stat.to_dict() for stat in selected],
        "filtered_performance": [stat.to_dict() for stat in combined],
    }
