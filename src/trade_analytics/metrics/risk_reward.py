from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable

from trade_analytics.models import Trade


@dataclass(frozen=True)
class RiskRewardPoint:
    trade_date: date
    ratio: float
    trade_id: str


@dataclass(frozen=True)
class RiskRewardStats:
    average: float
    maximum: float
    series: list[RiskRewardPoint]

    def to_dict(self) -> dict[str, Any]:
        return {
            "average": self.average,
            "max": self.maximum,
            "data": [
                {"date": point.trade_date.isoformat(), "rr": point.ratio, "trade_id": point.trade_id}
                for point in self.series
            ],
        }


def compute_risk_reward_stats(trades: Iterable[Trade]) -> RiskRewardStats:
    rated = [trade for trade in trades if trade.risk_to_reward is not None]
    if not rated:
        return RiskRewardStats(average=0.0, maximum=0.0, series=[])

    ratios = [float(trade.risk_to_reward) for trade in rated]
    ordered = sorted(rated, key=lambda trade: trade.trade_date)
    return RiskRewardStats(
        average=sum(ratios) / len(ratios),
        maximum=max(ratios),
        series=[
            RiskRewardPoint(trade_date=trade.trade_date, ratio=float(trade.risk_to_reward), trade_id=trade.trade_id)
            for trade in ordered
        ],
    )
