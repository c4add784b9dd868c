from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

try:
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - Python <3.11
    import tomli as tomllib

from trade_analytics.errors import ConfigError
from trade_analytics.models import DEFAULT_SESSIONS, DynamicRiskSettings

DEFAULT_CONFIG_PATH = Path("config/app.toml")


@dataclass(frozen=True)
class AppSettings:
    db_path: Path
    host: str
    port: int
    reload: bool
    log_level: str


@dataclass(frozen=True)
class AccountSettings:
    account_equity: float
    max_daily_drawdown_percent: float | None
    monthly_target_percent: float | None


@dataclass(frozen=True)
class AnalyticsSettings:
    sessions: tuple[str, ...]
    progress_queue_size: int


@dataclass(frozen=True)
class AppConfig:
    app: AppSettings
    account: AccountSettings
    risk: DynamicRiskSettings
    analytics: AnalyticsSettings


def load_app_config(path: Path | None = None, env: Mapping[str, str] | None = None) -> AppConfig:
    env = os.environ if env is None else env
    config_path = Path(path or env.get("TRADE_ANALYTICS_CONFIG", DEFAULT_CONFIG_PATH))
    raw: Mapping[str, Any] = {}
    if config_path.exists():
        try:
            raw = tomllib.loads(config_path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in {config_path}: {exc}") from exc

    app_raw = _section(raw, "app")
    account_raw = _section(raw, "account")
    risk_raw = _section(raw, "risk")
    analytics_raw = _section(raw, "analytics")

    app = AppSettings(
        db_path=Path(app_raw.get("db_path", "data/trade_analytics.sqlite")),
        host=str(app_raw.get("host", "127.0.0.1")),
        port=int(app_raw.get("port", 8000)),
        reload=bool(app_raw.get("reload", False)),
        log_level=str(app_raw.get("log_level", "INFO")).strip().upper() or "INFO",
    )

    account = parse_account_settings(account_raw)
    risk = parse_risk_settings(risk_raw)

    sessions = _str_list(analytics_raw.get("sessions")) or list(DEFAULT_SESSIONS)
    analytics = AnalyticsSettings(
        sessions=tuple(dict.fromkeys(sessions)),
        progress_queue_size=int(analytics_raw.get("progress_queue_size", 100)),
    )

    return AppConfig(app=app, account=account, risk=risk, analytics=analytics)


def parse_account_settings(
    raw: Mapping[str, Any],
    defaults: AccountSettings | None = None,
) -> AccountSettings:
    equity = _float_or_none(raw.get("account_equity", raw.get("account_balance")))
    if equity is None:
        equity = defaults.account_equity if defaults else 0.0
    return AccountSettings(
        account_equity=equity,
        max_daily_drawdown_percent=_override(
            raw, "max_daily_drawdown_percent", defaults.max_daily_drawdown_percent if defaults else None
        ),
        monthly_target_percent=_override(
            raw, "monthly_target_percent", defaults.monthly_target_percent if defaults else None
        ),
    )


def parse_risk_settings(
    raw: Mapping[str, Any],
    defaults: DynamicRiskSettings | None = None,
) -> DynamicRiskSettings:
    base = defaults or DynamicRiskSettings()
    enabled_raw = raw.get("dynamic_risk_enabled")
    return DynamicRiskSettings(
        risk_per_trade_percent=_override(raw, "risk_per_trade_percent", base.risk_per_trade_percent),
        dynamic_risk_enabled=base.dynamic_risk_enabled if enabled_raw is None else bool(enabled_raw),
        increased_risk_percent=_override(raw, "increased_risk_percent", base.increased_risk_percent),
        profit_threshold_percent=_override(raw, "profit_threshold_percent", base.profit_threshold_percent),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _section(raw: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = raw.get(key)
    if isinstance(value, Mapping):
        return value
    return {}


def _override(raw: Mapping[str, Any], key: str, fallback: float | None) -> float | None:
    if key not in raw:
        return fallback
    return _float_or_none(raw.get(key))


def _float_or_none(value: Any) -> float | None:
    if value in (None, ""):
        return None
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    output: list[str] = []
    for item in value:
        text = str(item).strip()
        if text:
            output.append(text)
    return output
