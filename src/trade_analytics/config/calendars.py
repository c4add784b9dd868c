from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

try:
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - Python <3.11
    import tomli as tomllib

from trade_analytics.config.app_config import (
    AccountSettings,
    AppConfig,
    parse_account_settings,
    parse_risk_settings,
)
from trade_analytics.errors import ConfigError, UnknownCalendarError
from trade_analytics.models import DynamicRiskSettings

DEFAULT_CALENDARS_PATH = Path("config/calendars.toml")


@dataclass(frozen=True)
class CalendarConfig:
    name: str
    calendar_id: str
    account: AccountSettings
    risk: DynamicRiskSettings
    active: bool


@dataclass(frozen=True)
class CalendarsConfig:
    default_calendar: str | None
    calendars: dict[str, CalendarConfig]

    def by_id(self, calendar_id: str) -> CalendarConfig | None:
        for calendar in self.calendars.values():
            if calendar.calendar_id == calendar_id:
                return calendar
        return self.calendars.get(calendar_id)


@dataclass(frozen=True)
class CalendarContext:
    name: str
    calendar_id: str
    account: AccountSettings
    risk: DynamicRiskSettings

    @property
    def account_equity(self) -> float:
        return self.account.account_equity


def load_calendars_config(path: Path, app_config: AppConfig) -> CalendarsConfig:
    if not path.exists():
        return CalendarsConfig(default_calendar=None, calendars={})
    try:
        raw = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    default_calendar = raw.get("default_calendar")
    block = raw.get("calendars", {}) if isinstance(raw, dict) else {}
    calendars: dict[str, CalendarConfig] = {}
    for name, cfg in block.items():
        if not isinstance(cfg, Mapping):
            continue
        calendar_id = str(cfg.get("calendar_id") or cfg.get("calendarId") or name).strip()
        active_raw = cfg.get("active")
        calendars[name] = CalendarConfig(
            name=name,
            calendar_id=calendar_id,
            account=parse_account_settings(cfg, app_config.account),
            risk=parse_risk_settings(cfg, app_config.risk),
            active=True if active_raw is None else bool(active_raw),
        )
    if default_calendar and default_calendar not in calendars:
        raise ConfigError(f"Default calendar '{default_calendar}' not found in calendars config.")
    return CalendarsConfig(default_calendar=default_calendar, calendars=calendars)


def resolve_calendar_context(
    calendar_id: str | None,
    app_config: AppConfig,
    *,
    config_path: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> CalendarContext:
    env = os.environ if env is None else env
    config_path = Path(config_path or env.get("TRADE_ANALYTICS_CALENDARS_CONFIG", DEFAULT_CALENDARS_PATH))
    config = load_calendars_config(config_path, app_config)
    requested = calendar_id or env.get("TRADE_ANALYTICS_CALENDAR") or config.default_calendar

    if config.calendars:
        if requested is None:
            requested = next(iter(config.calendars))
        calendar = config.by_id(requested)
        if calendar is None:
            raise UnknownCalendarError(f"Unknown calendar '{requested}'.")
        return CalendarContext(
            name=calendar.name,
            calendar_id=calendar.calendar_id,
            account=calendar.account,
            risk=calendar.risk,
        )

    resolved = requested or "default"
    return CalendarContext(
        name=resolved,
        calendar_id=resolved,
        account=app_config.account,
        risk=app_config.risk,
    )
