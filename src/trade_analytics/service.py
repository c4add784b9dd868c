from __future__ import annotations

import asyncio
import logging
from datetime import date
from pathlib import Path
from typing import Any, Iterable, Mapping, Protocol

from trade_analytics.config.app_config import AppConfig
from trade_analytics.config.calendars import CalendarContext, resolve_calendar_context
from trade_analytics.engine import (
    PerformanceReport,
    PerformanceRequest,
    compute_chart_data,
    compute_performance,
    compute_tag_performance,
)
from trade_analytics.errors import TradeStoreError
from trade_analytics.metrics.equity import total_pnl
from trade_analytics.metrics.risk import DynamicRiskStatus, dynamic_risk_status, effective_max_daily_drawdown
from trade_analytics.metrics.series import ChartDataPoint
from trade_analytics.metrics.targets import drawdown_violation_value, monthly_target_value, target_progress
from trade_analytics.metrics.window import filter_trades
from trade_analytics.models import TimePeriod, Trade, parse_period
from trade_analytics.runner import PerformanceRunner

logger = logging.getLogger(__name__)


class TradeStore(Protocol):
    def trades_for_calendar(self, calendar_id: str) -> list[Trade]:
        ...


class PerformanceService:
    """Binds a trade store and calendar configuration to the engine.

    Store failures propagate as ``TradeStoreError``; an unavailable store is
    never reported as a calendar with no trades.
    """

    def __init__(
        self,
        store: TradeStore,
        app_config: AppConfig,
        *,
        calendars_path: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self.store = store
        self.app_config = app_config
        self.calendars_path = calendars_path
        self.env = env

    def calendar_context(self, calendar_id: str | None = None) -> CalendarContext:
        return resolve_calendar_context(
            calendar_id,
            self.app_config,
            config_path=self.calendars_path,
            env=self.env,
        )

    def fetch_trades(self, context: CalendarContext) -> list[Trade]:
        try:
            trades = self.store.trades_for_calendar(context.calendar_id)
        except TradeStoreError:
            logger.exception("Trade store unavailable for calendar %s", context.calendar_id)
            raise
        logger.debug("Loaded %d trades for calendar %s", len(trades), context.calendar_id)
        return trades

    def build_request(
        self,
        context: CalendarContext,
        reference_date: date,
        period: TimePeriod,
        comparison_tags: Iterable[str] = (),
    ) -> PerformanceRequest:
        return PerformanceRequest(
            reference_date=reference_date,
            period=parse_period(period),
            account_equity=context.account_equity,
            comparison_tags=tuple(comparison_tags),
            risk_settings=context.risk,
            max_daily_drawdown_percent=context.account.max_daily_drawdown_percent,
            monthly_target_percent=context.account.monthly_target_percent,
            sessions=self.app_config.analytics.sessions,
        )

    def performance(
        self,
        calendar_id: str | None,
        reference_date: date,
        period: TimePeriod,
        comparison_tags: Iterable[str] = (),
    ) -> PerformanceReport:
        context = self.calendar_context(calendar_id)
        request = self.build_request(context, reference_date, period, comparison_tags)
        return compute_performance(self.fetch_trades(context), request)

    async def performance_async(
        self,
        runner: PerformanceRunner,
        calendar_id: str | None,
        reference_date: date,
        period: TimePeriod,
        comparison_tags: Iterable[str] = (),
    ) -> PerformanceReport:
        context = self.calendar_context(calendar_id)
        request = self.build_request(context, reference_date, period, comparison_tags)
        trades = await asyncio.to_thread(self.fetch_trades, context)
        return await runner.run(trades, request)

    def chart_data(self, calendar_id: str | None, reference_date: date, period: TimePeriod) -> list[ChartDataPoint]:
        context = self.calendar_context(calendar_id)
        return compute_chart_data(self.fetch_trades(context), reference_date, parse_period(period))

    def tag_performance(
        self,
        calendar_id: str | None,
        reference_date: date,
        period: TimePeriod,
        primary_tags: Iterable[str],
        secondary_tags: Iterable[str] = (),
    ) -> dict[str, Any]:
        context = self.calendar_context(calendar_id)
        return compute_tag_performance(
            self.fetch_trades(context),
            reference_date,
            parse_period(period),
            primary_tags,
            secondary_tags,
        )

    def risk(self, calendar_id: str | None, reference_date: date, period: TimePeriod) -> dict[str, Any]:
        context = self.calendar_context(calendar_id)
        all_trades = self.fetch_trades(context)
        trades = filter_trades(all_trades, reference_date, parse_period(period))
        status: DynamicRiskStatus = dynamic_risk_status(
            trades,
            context.risk,
            context.account_equity,
            account_profit=total_pnl(all_trades),
        )
        max_dd = context.account.max_daily_drawdown_percent
        target_pct = context.account.monthly_target_percent
        return {
            "calendar": context.name,
            "calendar_id": context.calendar_id,
            "account_equity": context.account_equity,
            "dynamic_risk": status.to_dict(),
            "max_daily_drawdown_percent": max_dd,
            "effective_max_daily_drawdown": effective_max_daily_drawdown(max_dd, status, context.risk),
            "drawdown_violation": drawdown_violation_value(max_dd, context.account_equity),
            "monthly_target": monthly_target_value(target_pct, context.account_equity),
            "target_progress": target_progress(trades, context.account_equity, target_pct),
        }
