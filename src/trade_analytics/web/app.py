from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterator

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from jinja2 import Undefined

from trade_analytics.config.app_config import configure_logging, load_app_config
from trade_analytics.errors import ConfigError, SupersededRequestError, TradeStoreError, UnknownCalendarError
from trade_analytics.models import PERIOD_MONTH, PERIODS, parse_period
from trade_analytics.runner import PerformanceRunner
from trade_analytics.service import PerformanceService
from trade_analytics.storage.sqlite_reader import SqliteTradeStore

logger = logging.getLogger(__name__)

APP_ROOT = Path(__file__).resolve().parent
TEMPLATES = Jinja2Templates(directory=str(APP_ROOT / "templates"))


app = FastAPI(title="Trade Analytics")

_RUNNERS: dict[str, PerformanceRunner] = {}


@lru_cache(maxsize=1)
def get_service() -> PerformanceService:
    app_config = load_app_config()
    return PerformanceService(SqliteTradeStore(app_config.app.db_path), app_config)


def _runner_for(calendar_id: str) -> PerformanceRunner:
    # Keyed on the resolved calendar id; an omitted id shares the default's runner.
    runner = _RUNNERS.get(calendar_id)
    if runner is None:
        runner = PerformanceRunner()
        _RUNNERS[calendar_id] = runner
    return runner


@contextmanager
def _service_errors() -> Iterator[None]:
    try:
        yield
    except UnknownCalendarError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except TradeStoreError as exc:
        raise HTTPException(status_code=503, detail="Trade data unavailable.") from exc
    except SupersededRequestError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc


def _parse_query(period: str | None, day: str | None) -> tuple[str, date]:
    try:
        resolved_period = parse_period(period or PERIOD_MONTH)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if not day:
        return resolved_period, date.today()
    try:
        return resolved_period, date.fromisoformat(day)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid date: {day!r}") from exc


def _tag_list(values: list[str]) -> list[str]:
    tags: list[str] = []
    for value in values:
        for item in value.split(","):
            cleaned = item.strip()
            if cleaned and cleaned not in tags:
                tags.append(cleaned)
    return tags


@app.get("/", response_class=HTMLResponse)
def dashboard(
    request: Request,
    calendar_id: str | None = None,
    period: str | None = None,
    day: str | None = Query(default=None, alias="date"),
    service: PerformanceService = Depends(get_service),
) -> HTMLResponse:
    resolved_period, reference_date = _parse_query(period, day)
    with _service_errors():
        context = service.calendar_context(calendar_id)
        report = service.performance(context.calendar_id, reference_date, resolved_period)
    payload = report.to_dict()
    page = {
        "calendar": context.name,
        "calendar_id": context.calendar_id,
        "account_equity": context.account_equity,
        "period": resolved_period,
        "periods": PERIODS,
        "reference_date": reference_date.isoformat(),
        "summary": payload["win_loss_stats"],
        "risk_reward": payload["risk_reward_stats"],
        "session_stats": payload["session_stats"],
        "tag_stats": payload["tag_stats"][:10],
        "daily_summary": payload["daily_summary"],
        "chart_data": payload["chart_data"],
        "dynamic_risk": payload["dynamic_risk"],
        "monthly_target": payload["monthly_target"],
        "target_progress": payload["target_progress"],
        "drawdown_violation": payload["drawdown_violation"],
    }
    return TEMPLATES.TemplateResponse(request, "dashboard.html", page)


@app.get("/api/performance")
async def performance_api(
    calendar_id: str | None = None,
    period: str | None = None,
    day: str | None = Query(default=None, alias="date"),
    compare: list[str] = Query(default=[]),
    service: PerformanceService = Depends(get_service),
) -> dict[str, Any]:
    resolved_period, reference_date = _parse_query(period, day)
    with _service_errors():
        context = service.calendar_context(calendar_id)
        report = await service.performance_async(
            _runner_for(context.calendar_id),
            context.calendar_id,
            reference_date,
            resolved_period,
            _tag_list(compare),
        )
    return report.to_dict()


@app.get("/api/chart-data")
def chart_data_api(
    calendar_id: str | None = None,
    period: str | None = None,
    day: str | None = Query(default=None, alias="date"),
    service: PerformanceService = Depends(get_service),
) -> list[dict[str, Any]]:
    resolved_period, reference_date = _parse_query(period, day)
    with _service_errors():
        series = service.chart_data(calendar_id, reference_date, resolved_period)
    return [point.to_dict() for point in series]


@app.get("/api/tags/performance")
def tag_performance_api(
    calendar_id: str | None = None,
    period: str | None = None,
    day: str | None = Query(default=None, alias="date"),
    primary: list[str] = Query(default=[]),
    secondary: list[str] = Query(default=[]),
    service: PerformanceService = Depends(get_service),
) -> dict[str, Any]:
    resolved_period, reference_date = _parse_query(period, day)
    with _service_errors():
        return service.tag_performance(
            calendar_id,
            reference_date,
            resolved_period,
            _tag_list(primary),
            _tag_list(secondary),
        )


@app.get("/api/risk")
def risk_api(
    calendar_id: str | None = None,
    period: str | None = None,
    day: str | None = Query(default=None, alias="date"),
    service: PerformanceService = Depends(get_service),
) -> dict[str, Any]:
    resolved_period, reference_date = _parse_query(period, day)
    with _service_errors():
        return service.risk(calendar_id, reference_date, resolved_period)


def money_filter(value: float | None) -> str:
    if value is None or isinstance(value, Undefined):
        return "n/a"
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return "n/a"
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def percent_filter(value: float | None) -> str:
    if value is None or isinstance(value, Undefined):
        return "n/a"
    return f"{float(value):.1f}%"


TEMPLATES.env.filters.update(
    {
        "money": money_filter,
        "percent": percent_filter,
    }
)


def main() -> None:
    import uvicorn

    app_config = load_app_config()
    configure_logging(app_config.app.log_level)
    uvicorn.run(
        "trade_analytics.web.app:app",
        host=app_config.app.host,
        port=app_config.app.port,
        reload=app_config.app.reload,
    )


if __name__ == "__main__":
    main()
