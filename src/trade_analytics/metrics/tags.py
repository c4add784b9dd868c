from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Iterable

from trade_analytics.models import Trade, win_rate_percent


@dataclass(frozen=True)
class TagStat:
    tag: str
    label: str
    wins: int
    losses: int
    breakevens: int
    total_trades: int
    win_rate: float
    total_pnl: float
    avg_pnl: float
    max_win: float
    max_loss: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class _TagBucket:
    __slots__ = ("wins", "losses", "breakevens", "amounts")

    def __init__(self) -> None:
        self.wins = 0
        self.losses = 0
        self.breakevens = 0
        self.amounts: list[float] = []

    def record(self, trade: Trade) -> None:
        self.amounts.append(trade.amount)
        if trade.is_win:
            self.wins += 1
        elif trade.is_loss:
            self.losses += 1
        elif trade.is_breakeven:
            self.breakevens += 1

    def to_stat(self, tag: str) -> TagStat:
        total = len(self.amounts)
        total_pnl = sum(self.amounts)
        return TagStat(
            tag=tag,
            label=tag_label(tag),
            wins=self.wins,
            losses=self.losses,
            breakevens=self.breakevens,
            total_trades=total,
            win_rate=win_rate_percent(self.wins, self.losses),
            total_pnl=total_pnl,
            avg_pnl=total_pnl / total if total else 0.0,
            max_win=max((value for value in self.amounts if value > 0), default=0.0),
            max_loss=min((value for value in self.amounts if value < 0), default=0.0),
        )


def compute_tag_stats(trades: Iterable[Trade]) -> list[TagStat]:
    # dict preserves first-seen order, which is the tie-break after sorting.
    buckets: dict[str, _TagBucket] = {}
    for trade in trades:
        for tag in trade.tags:
            buckets.setdefault(tag, _TagBucket()).record(trade)
    stats = [bucket.to_stat(tag) for tag, bucket in buckets.items()]
    stats.sort(key=lambda stat: stat.total_trades, reverse=True)
    return stats


def filter_tag_stats(
    tag_stats: Iterable[TagStat],
    all_trades: Iterable[Trade],
    primary_tags: Iterable[str],
    secondary_tags: Iterable[str],
) -> list[TagStat]:
    """Two-tier tag selection for comparative display.

    Nothing selected shows nothing. A primary selection keeps only those
    tags; a secondary selection keeps a tag only when some trade carrying it
    also carries every secondary tag.
    """
    primary = set(primary_tags)
    secondary = set(secondary_tags)
    if not primary and not secondary:
        return []

    selected = [stat for stat in tag_stats if not primary or stat.tag in primary]
    if not secondary:
        return selected

    qualified: set[str] = set()
    for trade in all_trades:
        if secondary.issubset(trade.tags):
            qualified.update(trade.tags)
    return [stat for stat in selected if stat.tag in qualified]


def compute_filtered_tag_performance(
    trades: Iterable[Trade],
    primary_tags: Iterable[str],
    secondary_tags: Iterable[str] = (),
) -> list[TagStat]:
    primary = list(dict.fromkeys(primary_tags))
    if not primary:
        return []
    secondary = set(secondary_tags)
    matching = [trade for trade in trades if secondary.issubset(trade.tags)]

    rows: list[TagStat] = []
    for tag in primary:
        bucket = _TagBucket()
        for trade in matching:
            if trade.has_tag(tag):
                bucket.record(trade)
        if bucket.amounts:
            rows.append(bucket.to_stat(tag))
    rows.sort(key=lambda stat: stat.total_trades, reverse=True)
    return rows


def collect_tags(trades: Iterable[Trade]) -> list[str]:
    return sorted({tag for trade in trades for tag in trade.tags})


def tag_label(tag: str) -> str:
    if ":" not in tag:
        return tag
    return tag.split(":", 1)[1]
