from __future__ import annotations

import calendar
from datetime import date
from typing import Iterable

from trade_analytics.models import PERIOD_ALL, PERIOD_MONTH, PERIOD_YEAR, TimePeriod, Trade


def filter_trades(trades: Iterable[Trade], reference_date: date, period: TimePeriod) -> list[Trade]:
    if period == PERIOD_MONTH:
        return [
            trade
            for trade in trades
            if trade.trade_date.year == reference_date.year and trade.trade_date.month == reference_date.month
        ]
    if period == PERIOD_YEAR:
        return [trade for trade in trades if trade.trade_date.year == reference_date.year]
    if period == PERIOD_ALL:
        return list(trades)
    raise ValueError(f"Unsupported time period: {period!r}")


def period_bounds(
    reference_date: date,
    period: TimePeriod,
    trades: Iterable[Trade] = (),
    *,
    today: date | None = None,
) -> tuple[date, date]:
    if period == PERIOD_MONTH:
        last_day = calendar.monthrange(reference_date.year, reference_date.month)[1]
        return (
            date(reference_date.year, reference_date.month, 1),
            date(reference_date.year, reference_date.month, last_day),
        )
    if period == PERIOD_YEAR:
        return date(reference_date.year, 1, 1), date(reference_date.year, 12, 31)
    if period == PERIOD_ALL:
        days = [trade.trade_date for trade in trades]
        if not days:
            anchor = today or date.today()
            return anchor, anchor
        return min(days), max(days)
    raise ValueError(f"Unsupported time period: {period!r}")
