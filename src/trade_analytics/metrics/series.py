from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Iterable

from trade_analytics.models import PERIOD_MONTH, TimePeriod, Trade

MONTH_LABEL_FORMAT = "%m/%d"
LONG_LABEL_FORMAT = "%m/%d/%Y"


@dataclass(frozen=True)
class ChartDataPoint:
    label: str
    full_date: date
    pnl: float
    cumulative_pnl: float
    is_increasing: bool
    is_decreasing: bool
    daily_change: float
    is_win: bool
    is_loss: bool
    is_breakeven: bool
    trades: tuple[Trade, ...] = field(default=())

    def to_dict(self, *, include_trades: bool = True) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "date": self.label,
            "full_date": self.full_date.isoformat(),
            "pnl": self.pnl,
            "cumulative_pnl": self.cumulative_pnl,
            "is_increasing": self.is_increasing,
            "is_decreasing": self.is_decreasing,
            "daily_change": self.daily_change,
            "is_win": self.is_win,
            "is_loss": self.is_loss,
            "is_breakeven": self.is_breakeven,
        }
        if include_trades:
            payload["trades"] = [trade.trade_id for trade in self.trades]
        return payload


def label_format_for(period: TimePeriod) -> str:
    return MONTH_LABEL_FORMAT if period == PERIOD_MONTH else LONG_LABEL_FORMAT


def build_cumulative_series(
    trades: Iterable[Trade],
    start_date: date,
    end_date: date,
    *,
    label_format: str = MONTH_LABEL_FORMAT,
) -> list[ChartDataPoint]:
    """Daily P&L and running total for every day in the inclusive range.

    Days without trades still get a point, so the x-axis has no gaps.
    """
    buckets: dict[date, list[Trade]] = {}
    for trade in trades:
        if start_date <= trade.trade_date <= end_date:
            buckets.setdefault(trade.trade_date, []).append(trade)

    points: list[ChartDataPoint] = []
    cumulative = 0.0
    cursor = start_date
    while cursor <= end_date:
        day_trades = tuple(buckets.get(cursor, ()))
        daily_pnl = sum(trade.amount for trade in day_trades)
        previous = cumulative
        cumulative = previous + daily_pnl
        points.append(
            ChartDataPoint(
                label=cursor.strftime(label_format),
                full_date=cursor,
                pnl=daily_pnl,
                cumulative_pnl=cumulative,
                is_increasing=cumulative > previous,
                is_decreasing=cumulative < previous,
                daily_change=cumulative - previous,
                is_win=daily_pnl > 0,
                is_loss=daily_pnl < 0,
                is_breakeven=daily_pnl == 0,
                trades=day_trades,
            )
        )
        cursor += timedelta(days=1)
    return points
