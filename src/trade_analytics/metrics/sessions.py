from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Iterable, Sequence

from trade_analytics.models import DEFAULT_SESSIONS, Trade, win_rate_percent


@dataclass(frozen=True)
class SessionStat:
    session: str
    total_trades: int
    wins: int
    losses: int
    breakevens: int
    win_rate: float
    total_pnl: float
    average_pnl: float
    pnl_percentage: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def compute_session_stats(
    trades: Iterable[Trade],
    account_equity: float,
    sessions: Sequence[str] = DEFAULT_SESSIONS,
) -> list[SessionStat]:
    """One row per known session, zero-filled, in session order."""
    buckets: dict[str, list[Trade]] = {name: [] for name in sessions}
    for trade in trades:
        if trade.session in buckets:
            buckets[trade.session].append(trade)

    rows: list[SessionStat] = []
    for name in sessions:
        items = buckets[name]
        wins = sum(1 for trade in items if trade.is_win)
        losses = sum(1 for trade in items if trade.is_loss)
        breakevens = sum(1 for trade in items if trade.is_breakeven)
        total_pnl = sum(trade.amount for trade in items)
        total = len(items)
        rows.append(
            SessionStat(
                session=name,
                total_trades=total,
                wins=wins,
                losses=losses,
                breakevens=breakevens,
                win_rate=win_rate_percent(wins, losses),
                total_pnl=total_pnl,
                average_pnl=total_pnl / total if total else 0.0,
                pnl_percentage=total_pnl / account_equity * 100.0 if account_equity > 0 else 0.0,
            )
        )
    return rows
