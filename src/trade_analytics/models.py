from __future__ import annotations

from dataclasses import dataclass
from datetime import date

Outcome = str

OUTCOME_WIN: Outcome = "win"
OUTCOME_LOSS: Outcome = "loss"
OUTCOME_BREAKEVEN: Outcome = "breakeven"

OUTCOMES = (OUTCOME_WIN, OUTCOME_LOSS, OUTCOME_BREAKEVEN)

TimePeriod = str

PERIOD_MONTH: TimePeriod = "month"
PERIOD_YEAR: TimePeriod = "year"
PERIOD_ALL: TimePeriod = "all"

PERIODS = (PERIOD_MONTH, PERIOD_YEAR, PERIOD_ALL)

SESSION_ASIA = "Asia"
SESSION_LONDON = "London"
SESSION_NY_AM = "NY AM"
SESSION_NY_PM = "NY PM"

DEFAULT_SESSIONS = (SESSION_ASIA, SESSION_LONDON, SESSION_NY_AM, SESSION_NY_PM)


@dataclass(frozen=True)
class Trade:
    trade_id: str
    trade_date: date
    amount: float
    outcome: Outcome
    risk_to_reward: float | None = None
    tags: tuple[str, ...] = ()
    session: str | None = None
    calendar_id: str | None = None
    name: str | None = None

    @property
    def is_win(self) -> bool:
        return self.outcome == OUTCOME_WIN

    @property
    def is_loss(self) -> bool:
        return self.outcome == OUTCOME_LOSS

    @property
    def is_breakeven(self) -> bool:
        return self.outcome == OUTCOME_BREAKEVEN

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags


@dataclass(frozen=True)
class DynamicRiskSettings:
    risk_per_trade_percent: float | None = None
    dynamic_risk_enabled: bool = False
    increased_risk_percent: float | None = None
    profit_threshold_percent: float | None = None


def parse_period(value: str | None) -> TimePeriod:
    cleaned = (value or "").strip().lower()
    if cleaned not in PERIODS:
        raise ValueError(f"Unsupported time period: {value!r}")
    return cleaned


def parse_outcome(value: str | None) -> Outcome:
    cleaned = (value or "").strip().lower()
    if cleaned in {"be", "break-even", "break_even", "scratch"}:
        return OUTCOME_BREAKEVEN
    if cleaned not in OUTCOMES:
        raise ValueError(f"Unsupported trade outcome: {value!r}")
    return cleaned


def win_rate_percent(wins: int, losses: int) -> float:
    decided = wins + losses
    if not decided:
        return 0.0
    return wins / decided * 100.0


def mean_or_zero(values: list[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)
