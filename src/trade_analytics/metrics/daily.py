from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable

from trade_analytics.models import Trade


@dataclass(frozen=True)
class DailySummaryRow:
    trade_date: date
    trade_count: int
    session: str | None
    pnl: float
    wins: int
    losses: int
    breakevens: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "trade_date": self.trade_date.isoformat(),
            "trades": self.trade_count,
            "session": self.session,
            "pnl": self.pnl,
            "wins": self.wins,
            "losses": self.losses,
            "breakevens": self.breakevens,
        }


def compute_daily_summary(trades: Iterable[Trade]) -> list[DailySummaryRow]:
    """Per-day rows, most recent day first."""
    buckets: dict[date, list[Trade]] = {}
    for trade in trades:
        buckets.setdefault(trade.trade_date, []).append(trade)

    rows = [
        DailySummaryRow(
            trade_date=day,
            trade_count=len(items),
            session=dominant_session(items),
            pnl=sum(trade.amount for trade in items),
            wins=sum(1 for trade in items if trade.is_win),
            losses=sum(1 for trade in items if trade.is_loss),
            breakevens=sum(1 for trade in items if trade.is_breakeven),
        )
        for day, items in buckets.items()
    ]
    rows.sort(key=lambda row: row.trade_date, reverse=True)
    return rows


def dominant_session(trades: Iterable[Trade]) -> str | None:
    """Most frequent session label.

    Ties go to the first label to reach the top count, not to the earliest
    trade among the tied labels.
    """
    counts: dict[str, int] = {}
    leader: str | None = None
    leader_count = 0
    for trade in trades:
        if trade.session is None:
            continue
        count = counts.get(trade.session, 0) + 1
        counts[trade.session] = count
        if count > leader_count:
            leader = trade.session
            leader_count = count
    return leader
