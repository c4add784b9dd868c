from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterable, Mapping

from trade_analytics.models import Trade, parse_outcome

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TradeLoadResult:
    trades: list[Trade]
    skipped: int = 0


def load_trades(path: str | Path, *, calendar_id: str | None = None) -> TradeLoadResult:
    source_path = Path(path)
    with source_path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    return load_trades_payload(payload, calendar_id=calendar_id)


def load_trades_payload(payload: Any, *, calendar_id: str | None = None) -> TradeLoadResult:
    records = _extract_records(payload)
    trades: list[Trade] = []
    skipped = 0
    for raw in records:
        try:
            trade = normalize_trade(raw, calendar_id=calendar_id)
        except ValueError as exc:
            logger.debug("Skipping trade record: %s", exc)
            skipped += 1
            continue
        if calendar_id is not None and trade.calendar_id not in (None, calendar_id):
            continue
        trades.append(trade)
    if skipped:
        logger.warning("Skipped %d trade rows during normalization.", skipped)
    return TradeLoadResult(trades=trades, skipped=skipped)


def normalize_trade(raw: Mapping[str, Any], *, calendar_id: str | None = None) -> Trade:
    if not isinstance(raw, Mapping):
        raise ValueError("Trade record must be a mapping")

    trade_id = _first(raw, "id", "trade_id", "tradeId")
    if trade_id in (None, ""):
        raise ValueError("Trade record is missing an id")

    trade_date = parse_trade_date(_first(raw, "trade_date", "tradeDate", "date"))
    amount = _parse_float(_first(raw, "amount", "pnl"), field_name="amount")
    if amount is None:
        raise ValueError(f"Trade {trade_id} is missing an amount")
    outcome = parse_outcome(_first(raw, "trade_type", "tradeType", "type", "outcome"))

    risk_to_reward = _parse_float(_first(raw, "risk_to_reward", "riskToReward"), field_name="risk_to_reward")
    if risk_to_reward is not None and risk_to_reward < 0:
        raise ValueError(f"Trade {trade_id} has a negative risk_to_reward")

    record_calendar = _first(raw, "calendar_id", "calendarId")
    session = _clean_text(raw.get("session"))
    name = _clean_text(raw.get("name"))

    return Trade(
        trade_id=str(trade_id),
        trade_date=trade_date,
        amount=amount,
        outcome=outcome,
        risk_to_reward=risk_to_reward,
        tags=_parse_tags(raw.get("tags")),
        session=session,
        calendar_id=str(record_calendar) if record_calendar else calendar_id,
        name=name,
    )


def parse_trade_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Missing trade date")
        if text.endswith("Z"):
            text = f"{text[:-1]}+00:00"
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            pass
        try:
            return date.fromisoformat(text[:10])
        except ValueError as exc:
            raise ValueError(f"Invalid trade date: {value!r}") from exc
    raise ValueError(f"Invalid trade date: {value!r}")


def _extract_records(payload: Any) -> Iterable[Mapping[str, Any]]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        if "data" in payload and isinstance(payload["data"], dict):
            data = payload["data"]
            for key in ("trades", "items"):
                if key in data and isinstance(data[key], list):
                    return data[key]
        for key in ("trades", "items", "data"):
            if key in payload and isinstance(payload[key], list):
                return payload[key]
    raise ValueError("Unsupported JSON format for trade export payload")


def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


def _parse_float(value: Any, *, field_name: str) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"Invalid {field_name}: {value!r}")
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        parsed = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid {field_name}: {value!r}") from exc
    if parsed != parsed or parsed in (float("inf"), float("-inf")):
        raise ValueError(f"Invalid {field_name}: {value!r}")
    return parsed


def _parse_tags(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        items: Iterable[Any] = value.split(",")
    elif isinstance(value, (list, tuple, set, frozenset)):
        items = value
    else:
        raise ValueError(f"Invalid tags: {value!r}")
    cleaned = [str(item).strip() for item in items if item is not None and str(item).strip()]
    return tuple(dict.fromkeys(cleaned))


def _clean_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
