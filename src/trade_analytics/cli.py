from __future__ import annotations

import argparse
import asyncio
import json
import sys
from datetime import date
from pathlib import Path

from trade_analytics.config.app_config import configure_logging, load_app_config
from trade_analytics.engine import PerformanceReport, PerformanceRequest, compute_performance
from trade_analytics.errors import ConfigError, TradeStoreError
from trade_analytics.ingest.journal_export import load_trades
from trade_analytics.models import PERIOD_MONTH, PERIODS, Trade
from trade_analytics.runner import PerformanceRunner, ProgressEvent
from trade_analytics.service import PerformanceService
from trade_analytics.storage.sqlite_reader import SqliteTradeStore


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Compute trading performance analytics for a calendar.")
    parser.add_argument(
        "trades_path",
        type=Path,
        nargs="?",
        default=None,
        help="Path to a journal trade export (json). Reads the sqlite database when omitted.",
    )
    parser.add_argument("--db", type=Path, default=None, help="Override the sqlite database path.")
    parser.add_argument("--calendar", type=str, default=None, help="Calendar name or id from calendars config.")
    parser.add_argument("--period", choices=PERIODS, default=PERIOD_MONTH, help="Time window (default month).")
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Reference date inside the window, YYYY-MM-DD (default today).",
    )
    parser.add_argument(
        "--compare",
        action="append",
        default=[],
        help="Comparison tag for the win/loss split (repeatable).",
    )
    parser.add_argument("--progress", action="store_true", help="Report computation steps on stderr.")
    parser.add_argument("--json", action="store_true", help="Print JSON output.")
    parser.add_argument("--out", type=Path, default=None, help="Write output to a file instead of stdout.")
    args = parser.parse_args(argv)

    try:
        app_config = load_app_config()
    except ConfigError as exc:
        print(f"Config error: {exc}", file=sys.stderr)
        return 2
    configure_logging(app_config.app.log_level)

    store = SqliteTradeStore(args.db or app_config.app.db_path)
    service = PerformanceService(store, app_config)
    reference_date = args.date or date.today()

    try:
        context = service.calendar_context(args.calendar)
        request = service.build_request(context, reference_date, args.period, args.compare)
        if args.trades_path is None:
            trades = service.fetch_trades(context)
        else:
            result = load_trades(args.trades_path, calendar_id=context.calendar_id if args.calendar else None)
            if result.skipped:
                print(f"Skipped {result.skipped} trade rows during normalization.", file=sys.stderr)
            trades = result.trades
    except ConfigError as exc:
        print(f"Config error: {exc}", file=sys.stderr)
        return 2
    except TradeStoreError as exc:
        print(f"Trade data unavailable: {exc}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as exc:
        # JSONDecodeError is a ValueError.
        print(f"Trade export unreadable: {exc}", file=sys.stderr)
        return 2

    if args.progress:
        report = asyncio.run(
            _compute_with_progress(trades, request, app_config.analytics.progress_queue_size)
        )
    else:
        report = compute_performance(trades, request)
    if args.json:
        text = json.dumps(report.to_dict(), indent=2, sort_keys=True)
    else:
        text = _format_report(report)

    if args.out is None:
        print(text)
    else:
        args.out.parent.mkdir(parents=True, exist_ok=True)
        args.out.write_text(text + "\n", encoding="utf-8")
    return 0


async def _compute_with_progress(
    trades: list[Trade],
    request: PerformanceRequest,
    queue_size: int,
) -> PerformanceReport:
    queue: asyncio.Queue[ProgressEvent] = asyncio.Queue(maxsize=queue_size)
    runner = PerformanceRunner(queue)
    task = runner.submit(trades, request)
    generation = runner.generation
    while not task.done():
        await asyncio.sleep(0)
        _drain_progress(queue)
    _drain_progress(queue)
    return await runner.wait(task, generation)


def _drain_progress(queue: asyncio.Queue[ProgressEvent]) -> None:
    while not queue.empty():
        event = queue.get_nowait()
        print(f"[{event.current}/{event.total}] {event.step}", file=sys.stderr)


def _format_report(report: PerformanceReport) -> str:
    stats = report.win_loss_stats
    risk = report.dynamic_risk
    lines = [
        f"period {report.period} {report.start_date.isoformat()} {report.end_date.isoformat()}",
        f"total_trades {stats.total_trades}",
        f"wins {stats.winners.total}",
        f"losses {stats.losers.total}",
        f"breakevens {stats.breakevens.total}",
        f"win_rate {_format_float(stats.win_rate)}",
        f"total_pnl {_format_float(stats.total_pnl)}",
        f"avg_win {_format_float(stats.winners.avg_amount)}",
        f"avg_loss {_format_float(stats.losers.avg_amount)}",
        f"max_win_streak {report.streaks.max_win_streak}",
        f"avg_win_streak {_format_float(report.streaks.avg_win_streak)}",
        f"max_loss_streak {report.streaks.max_loss_streak}",
        f"avg_loss_streak {_format_float(report.streaks.avg_loss_streak)}",
        f"avg_risk_reward {_format_float(report.risk_reward_stats.average)}",
        f"max_risk_reward {_format_float(report.risk_reward_stats.maximum)}",
        f"risk_per_trade_pct {_format_float(risk.current_risk_percent)}",
        f"risk_amount {_format_float(risk.risk_amount)}",
        f"dynamic_risk_active {str(risk.is_active).lower()}",
        f"monthly_target {_format_float(report.monthly_target)}",
        f"target_progress_pct {_format_float(report.target_progress)}",
    ]
    for row in report.session_stats:
        lines.append(
            f"session {row.session.replace(' ', '_')} trades={row.total_trades} "
            f"win_rate={_format_float(row.win_rate)} pnl={_format_float(row.total_pnl)}"
        )
    for stat in report.tag_stats:
        lines.append(
            f"tag {stat.tag} trades={stat.total_trades} "
            f"win_rate={_format_float(stat.win_rate)} pnl={_format_float(stat.total_pnl)}"
        )
    return "\n".join(lines)


def _format_float(value: float | None) -> str:
    return "na" if value is None else f"{value:.6g}"


if __name__ == "__main__":
    raise SystemExit(main())
