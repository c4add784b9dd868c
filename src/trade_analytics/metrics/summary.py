from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Iterable

from trade_analytics.metrics.streaks import StreakStats, compute_streaks
from trade_analytics.models import Trade, mean_or_zero, win_rate_percent

DISTRIBUTION_WINS = "Wins"
DISTRIBUTION_LOSSES = "Losses"
DISTRIBUTION_BREAKEVEN = "Breakeven"


@dataclass(frozen=True)
class OutcomeBucket:
    total: int
    avg_amount: float
    max_consecutive: int | None = None
    avg_consecutive: float | None = None

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        if self.max_consecutive is None:
            payload.pop("max_consecutive")
            payload.pop("avg_consecutive")
        return payload


@dataclass(frozen=True)
class WinLossStats:
    total_trades: int
    win_rate: float
    total_pnl: float
    winners: OutcomeBucket
    losers: OutcomeBucket
    breakevens: OutcomeBucket

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_trades": self.total_trades,
            "win_rate": self.win_rate,
            "total_pnl": self.total_pnl,
            "winners": self.winners.to_dict(),
            "losers": self.losers.to_dict(),
            "breakevens": self.breakevens.to_dict(),
        }


def compute_win_loss_stats(trades: Iterable[Trade]) -> WinLossStats:
    trade_list = list(trades)
    wins = [trade.amount for trade in trade_list if trade.is_win]
    losses = [trade.amount for trade in trade_list if trade.is_loss]
    breakevens = [trade.amount for trade in trade_list if trade.is_breakeven]
    streaks: StreakStats = compute_streaks(trade_list)

    return WinLossStats(
        total_trades=len(trade_list),
        win_rate=win_rate_percent(len(wins), len(losses)),
        total_pnl=sum(trade.amount for trade in trade_list),
        winners=OutcomeBucket(
            total=len(wins),
            avg_amount=mean_or_zero(wins),
            max_consecutive=streaks.max_win_streak,
            avg_consecutive=streaks.avg_win_streak,
        ),
        losers=OutcomeBucket(
            total=len(losses),
            avg_amount=mean_or_zero(losses),
            max_consecutive=streaks.max_loss_streak,
            avg_consecutive=streaks.avg_loss_streak,
        ),
        breakevens=OutcomeBucket(total=len(breakevens), avg_amount=mean_or_zero(breakevens)),
    )


def compute_win_loss_distribution(trades: Iterable[Trade]) -> list[dict[str, Any]]:
    wins = 0
    losses = 0
    breakevens = 0
    for trade in trades:
        if trade.is_win:
            wins += 1
        elif trade.is_loss:
            losses += 1
        elif trade.is_breakeven:
            breakevens += 1
    rows = [
        {"name": DISTRIBUTION_WINS, "value": wins},
        {"name": DISTRIBUTION_LOSSES, "value": losses},
        {"name": DISTRIBUTION_BREAKEVEN, "value": breakevens},
    ]
    return [row for row in rows if row["value"] > 0]


def compute_comparison_distribution(
    trades: Iterable[Trade],
    comparison_tags: Iterable[str],
) -> list[dict[str, Any]] | None:
    wanted = set(comparison_tags)
    if not wanted:
        return None
    matching = [trade for trade in trades if wanted.intersection(trade.tags)]
    return compute_win_loss_distribution(matching)
