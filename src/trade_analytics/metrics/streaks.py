from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Iterable

from trade_analytics.models import Trade


@dataclass(frozen=True)
class StreakStats:
    max_win_streak: int
    avg_win_streak: float
    max_loss_streak: int
    avg_loss_streak: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def compute_streaks(trades: Iterable[Trade]) -> StreakStats:
    """Consecutive win/loss run statistics in chronological order.

    A breakeven trade leaves both counters untouched, so a scratch trade in
    the middle of a winning run does not end the run. Averages are taken
    over closed runs only.
    """
    # sorted() is stable: trades on the same day keep their input order.
    ordered = sorted(trades, key=lambda trade: trade.trade_date)

    max_wins = 0
    max_losses = 0
    current_wins = 0
    current_losses = 0
    win_run_total = 0
    win_run_count = 0
    loss_run_total = 0
    loss_run_count = 0

    for trade in ordered:
        if trade.is_win:
            if current_losses > 0:
                loss_run_total += current_losses
                loss_run_count += 1
                current_losses = 0
            current_wins += 1
            max_wins = max(max_wins, current_wins)
        elif trade.is_loss:
            if current_wins > 0:
                win_run_total += current_wins
                win_run_count += 1
                current_wins = 0
            current_losses += 1
            max_losses = max(max_losses, current_losses)

    if current_wins > 0:
        win_run_total += current_wins
        win_run_count += 1
    elif current_losses > 0:
        loss_run_total += current_losses
        loss_run_count += 1

    return StreakStats(
        max_win_streak=max_wins,
        avg_win_streak=win_run_total / win_run_count if win_run_count else 0.0,
        max_loss_streak=max_losses,
        avg_loss_streak=loss_run_total / loss_run_count if loss_run_count else 0.0,
    )
